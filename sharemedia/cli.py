#!/usr/bin/env python3
"""Command-line entry point for running a share invocation by hand.

``sharemedia share`` plays the part of the share sheet: text, URLs and files
given on the command line become attachments, in argument order, and go
through the same pipeline the extension uses.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from pathlib import Path
from typing import Optional, Tuple

from loguru import logger

from sharemedia.domains.handoff.notifier import share_uri
from sharemedia.domains.handoff.store import HandoffStore
from sharemedia.domains.ingestion.attachments import (
    Attachment,
    FileAttachment,
    TextAttachment,
    UrlAttachment,
)
from sharemedia.domains.ingestion.pipeline import PipelineState, build_pipeline
from sharemedia.utils.config import Settings, get_settings
from sharemedia.utils.log import configure_logging


class ConsoleContext:
    """Invocation context that reports to the log instead of a UI."""

    def __init__(self) -> None:
        self.completed = False
        self.error: Optional[str] = None

    def complete_request(self) -> None:
        self.completed = True
        logger.info("Share request complete")

    def present_error(self, title: str, message: str) -> None:
        self.error = message
        logger.error(f"{title}: {message}")


def _tagged(kind: str):
    def convert(value: str) -> Tuple[str, str]:
        return kind, value
    return convert


def _attachment(kind: str, value: str) -> Attachment:
    if kind == "text":
        return TextAttachment(value)
    if kind == "url":
        return UrlAttachment(value)
    return FileAttachment(Path(value).expanduser())


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    """Parse CLI arguments."""

    parser = argparse.ArgumentParser(
        prog="sharemedia",
        description="Hand shared content over to the host application.",
    )
    parser.add_argument("--host-identifier", default=None, help="Override the host identifier.")
    parser.add_argument("--app-group-id", default=None, help="Override the shared-storage domain.")
    parser.add_argument("--log-level", default=None, help="Log level (default from settings).")

    sub = parser.add_subparsers(dest="command", required=True)

    share = sub.add_parser("share", help="Ingest attachments and notify the host.")
    share.add_argument("--text", dest="items", action="append", type=_tagged("text"), default=[],
                       help="Text snippet to share (can be repeated).")
    share.add_argument("--url", dest="items", action="append", type=_tagged("url"),
                       help="URL to share (can be repeated).")
    share.add_argument("--file", dest="items", action="append", type=_tagged("file"),
                       help="File to share (can be repeated).")
    share.add_argument("--message", default=None, help="Message accompanying the share.")

    sub.add_parser("show", help="Print the committed hand-off as JSON.")
    sub.add_parser("uri", help="Print the host notification URI.")

    return parser.parse_args(argv)


def _settings_for(args: argparse.Namespace) -> Settings:
    overrides = {
        key: value
        for key, value in (
            ("host_identifier", args.host_identifier),
            ("app_group_id", args.app_group_id),
        )
        if value is not None
    }
    return Settings(**overrides) if overrides else get_settings()


def _share(args: argparse.Namespace, settings: Settings) -> int:
    attachments = [_attachment(kind, value) for kind, value in args.items]
    context = ConsoleContext()
    pipeline = build_pipeline(context, settings)

    outcome = asyncio.run(pipeline.run(attachments, message=args.message))
    if outcome.state is PipelineState.AWAITING_ATTACHMENTS:
        outcome = pipeline.post(args.message)

    if outcome.state is PipelineState.ERROR:
        return 1
    return 0 if outcome.committed else 2


def _show(settings: Settings) -> int:
    envelope = HandoffStore(settings.preferences_file()).load()
    if envelope is None:
        logger.warning("No hand-off has been committed")
        return 1

    payload = {
        "records": [record.to_wire() for record in envelope.records],
        "message": envelope.message,
    }
    print(json.dumps(payload, indent=2))
    return 0


def main(argv: Optional[list[str]] = None) -> int:
    """Entry point for the CLI script."""

    args = parse_args(argv)
    settings = _settings_for(args)
    configure_logging(args.log_level or settings.log_level)

    if args.command == "share":
        return _share(args, settings)
    if args.command == "show":
        return _show(settings)

    print(share_uri(settings.scheme_prefix, settings.resolve_host_identifier()))
    return 0


if __name__ == "__main__":  # pragma: no cover - CLI bridge
    sys.exit(main())
