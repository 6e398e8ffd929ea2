"""
Host wake-up notification.

Sends a fixed-scheme URI to the host through the first available
process-activation mechanism. Delivery is fire-and-forget: the committed
envelope stays readable whether or not the host wakes up.
"""

import shutil
import subprocess
from typing import List, Optional, Protocol, Sequence

from loguru import logger


def share_uri(scheme_prefix: str, host_identifier: str) -> str:
    """URI addressed to the host application."""
    return f"{scheme_prefix}-{host_identifier}:share"


class NotificationSender(Protocol):
    """Delivers a URI to whatever handles it."""

    def send(self, uri: str) -> bool:
        """Attempt delivery; True if the mechanism accepted the URI."""
        ...


class CommandSender:
    """Opens a URI with an external launcher command such as ``xdg-open``."""

    def __init__(self, *command: str):
        self.command = command

    def __repr__(self) -> str:
        return f"CommandSender({' '.join(self.command)})"

    def send(self, uri: str) -> bool:
        exe = shutil.which(self.command[0])
        if not exe:
            return False

        try:
            subprocess.Popen(
                [exe, *self.command[1:], uri],
                stdin=subprocess.DEVNULL,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
                start_new_session=True,
            )
        except OSError as e:
            logger.debug(f"{self!r} could not launch: {e}")
            return False
        return True


def default_senders() -> List[NotificationSender]:
    """Launchers tried in order: freedesktop, GIO, macOS."""
    return [
        CommandSender("xdg-open"),
        CommandSender("gio", "open"),
        CommandSender("open"),
    ]


class HostNotifier:
    """Wakes the host process after a commit."""

    def __init__(
        self,
        scheme_prefix: str,
        senders: Optional[Sequence[NotificationSender]] = None,
    ):
        self.scheme_prefix = scheme_prefix
        self.senders = list(senders) if senders is not None else default_senders()

    def notify(self, host_identifier: str) -> None:
        """Send the share URI for ``host_identifier`` through the first sender that accepts it."""
        uri = share_uri(self.scheme_prefix, host_identifier)
        for sender in self.senders:
            try:
                if sender.send(uri):
                    logger.info(f"Host notified via {sender!r}: {uri}")
                    return
            except Exception as e:
                logger.debug(f"Notification sender {sender!r} failed: {e}")

        logger.debug(f"No notification mechanism available for {uri}")
