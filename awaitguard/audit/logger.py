"""
Audit Logger — JSON-lines trail of scans.

One line per scan: timestamp plus the scan's AuditEntry. Disabled unless
AWAITGUARD_AUDIT_ENABLED is set; write failures never fail a scan.
"""

from __future__ import annotations

import json
import logging
import time
from pathlib import Path

from awaitguard.config import settings
from awaitguard.models.scan_models import AuditEntry

logger = logging.getLogger("awaitguard.audit")


class AuditLogger:
    def __init__(self, log_path: str | None = None, enabled: bool | None = None) -> None:
        self.log_path = Path(log_path or settings.audit_log_path)
        self.enabled = settings.audit_enabled if enabled is None else enabled

    def log(self, entry: AuditEntry) -> bool:
        """Append an entry. Returns whether a line was written."""
        if not self.enabled:
            return False

        record = {
            "timestamp": time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime()),
            **entry.model_dump(),
        }
        try:
            with open(self.log_path, "a", encoding="utf-8") as f:
                f.write(json.dumps(record) + "\n")
        except OSError as e:
            logger.error(f"Failed to write audit log {self.log_path}: {e}")
            return False
        return True

    def read_recent(self, count: int = 50) -> list[dict]:
        """Most recent `count` entries, oldest first. Corrupt lines are skipped."""
        try:
            lines = self.log_path.read_text(encoding="utf-8").splitlines()
        except OSError:
            return []

        entries: list[dict] = []
        for line in lines[-count:]:
            if not line.strip():
                continue
            try:
                entries.append(json.loads(line))
            except json.JSONDecodeError:
                logger.debug("Skipping corrupt audit line: %.80s", line)
        return entries
