"""
Shared preferences store for the hand-off envelope.

The shared preferences domain is one JSON object per domain name. The
envelope occupies two fixed keys: the serialized records and the message.
Both are replaced together through a temp file and an atomic rename, so
the host never observes one without the other.
"""

import contextlib
import json
import os
from pathlib import Path
from typing import Any, Dict, Optional

from loguru import logger
from pydantic import ValidationError

from sharemedia.models.schemas import HandoffEnvelope

RECORDS_KEY = "ShareKey"
MESSAGE_KEY = "ShareMessageKey"


class HandoffStore:
    """Reads and writes the envelope in a shared preferences domain."""

    def __init__(self, preferences_file: Path):
        """
        Initialize the store.

        Args:
            preferences_file: JSON file backing the preferences domain
        """
        self.preferences_file = preferences_file

    def _read_domain(self) -> Dict[str, Any]:
        if not self.preferences_file.exists():
            return {}

        try:
            data = json.loads(self.preferences_file.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Discarding unreadable preferences {self.preferences_file}: {e}")
            return {}

        return data if isinstance(data, dict) else {}

    def commit(self, envelope: HandoffEnvelope) -> bool:
        """
        Persist ``envelope``, overwriting the previous one.

        Returns:
            True on success, False otherwise
        """
        domain = self._read_domain()
        domain[RECORDS_KEY] = envelope.records_json()
        domain[MESSAGE_KEY] = envelope.message

        tmp_path = self.preferences_file.with_name(self.preferences_file.name + ".tmp")
        try:
            tmp_path.parent.mkdir(parents=True, exist_ok=True)
            with open(tmp_path, "w", encoding="utf-8") as fh:
                json.dump(domain, fh, indent=2, sort_keys=True)
                fh.flush()
                os.fsync(fh.fileno())
            tmp_path.replace(self.preferences_file)
        except OSError as e:
            logger.error(f"Failed to commit hand-off to {self.preferences_file}: {e}")
            with contextlib.suppress(OSError):
                tmp_path.unlink(missing_ok=True)
            return False

        logger.success(
            f"Committed {len(envelope.records)} record(s) to {self.preferences_file}"
        )
        return True

    def load(self) -> Optional[HandoffEnvelope]:
        """
        Read the committed envelope.

        Returns:
            HandoffEnvelope, or None if nothing valid has been committed
        """
        domain = self._read_domain()
        if RECORDS_KEY not in domain and MESSAGE_KEY not in domain:
            return None

        try:
            return HandoffEnvelope.from_store_values(
                domain.get(RECORDS_KEY), domain.get(MESSAGE_KEY)
            )
        except ValidationError as e:
            logger.warning(f"Stored hand-off is invalid: {e}")
            return None
