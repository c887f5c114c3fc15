"""Append-only signed audit trail (JSONL).

Each published event is written as one JSON object per line with an
HMAC-SHA256 signature over its canonical JSON form, so the trail can be
verified offline with ``verify()``.
"""
from __future__ import annotations
import datetime
import hashlib
import hmac
import json
from pathlib import Path
from typing import Any, Protocol

from .events import AuditEvent


class AuditSink(Protocol):
    def publish(self, event: AuditEvent) -> None:
        ...


class JsonlAuditSink:
    """Writes signed audit events to ``<directory>/audit-events.jsonl``."""

    def __init__(self, directory: Path | str, signing_key: str = ""):
        self.directory = Path(directory)
        self.file = self.directory / "audit-events.jsonl"
        self._signing_key = signing_key.strip().encode("utf-8")

    def _ensure_dir(self) -> None:
        """Create audit directory with restricted permissions."""
        self.directory.mkdir(parents=True, exist_ok=True)
        self.directory.chmod(0o700)

    def _sign(self, record: dict[str, Any]) -> str:
        if not self._signing_key:
            return ""
        # Canonical JSON representation for signing
        canonical = json.dumps(record, sort_keys=True, separators=(",", ":"))
        return hmac.new(self._signing_key, canonical.encode("utf-8"), hashlib.sha256).hexdigest()

    def publish(self, event: AuditEvent) -> None:
        """Append the event; OSError propagates to the caller."""
        self._ensure_dir()

        record = {
            "recordedAt": datetime.datetime.now(datetime.timezone.utc).isoformat(),
            "topic": event.topic,
            "event": event.value,
        }
        signature = self._sign(record)
        if signature:
            record["signature"] = signature

        with self.file.open("a", encoding="utf-8") as f:
            f.write(json.dumps(record, ensure_ascii=False, default=str) + "\n")

        self.file.chmod(0o600)

    def verify(self) -> tuple[int, int]:
        """Verify all signatures in the trail.

        Returns:
            Tuple of (total_events, valid_signatures)
        """
        if not self.file.exists():
            return 0, 0

        total = 0
        valid = 0

        with self.file.open("r", encoding="utf-8") as f:
            for line in f:
                if not line.strip():
                    continue
                total += 1
                try:
                    record = json.loads(line)
                    stored_sig = record.pop("signature", "")
                    if not stored_sig:
                        continue
                    if hmac.compare_digest(stored_sig, self._sign(record)):
                        valid += 1
                except (json.JSONDecodeError, KeyError):
                    continue

        return total, valid


class MemoryAuditSink:
    """Keeps published events in a list (demo mode and tests)."""

    def __init__(self):
        self.events: list[AuditEvent] = []

    def publish(self, event: AuditEvent) -> None:
        self.events.append(event)
