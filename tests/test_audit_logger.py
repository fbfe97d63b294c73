"""
Tests for the JSON-lines audit logger.
"""

from awaitguard.audit.logger import AuditLogger
from awaitguard.models.scan_models import AuditEntry


def _entry(scan_id="abc123"):
    return AuditEntry(scan_id=scan_id, files_scanned=2, violations_found=3)


def test_disabled_logger_writes_nothing(tmp_path):
    path = tmp_path / "audit.jsonl"
    audit = AuditLogger(str(path), enabled=False)
    assert audit.log(_entry()) is False
    assert not path.exists()
    assert audit.read_recent() == []


def test_log_and_read_back(tmp_path):
    audit = AuditLogger(str(tmp_path / "audit.jsonl"), enabled=True)
    assert audit.log(_entry("one")) is True
    audit.log(_entry("two"))
    entries = audit.read_recent()
    assert [e["scan_id"] for e in entries] == ["one", "two"]
    assert "timestamp" in entries[0]
    assert audit.read_recent(count=1)[0]["scan_id"] == "two"


def test_corrupt_lines_are_skipped(tmp_path):
    path = tmp_path / "audit.jsonl"
    audit = AuditLogger(str(path), enabled=True)
    audit.log(_entry("ok"))
    with open(path, "a") as f:
        f.write("{not json\n")
    assert [e["scan_id"] for e in audit.read_recent()] == ["ok"]


def test_unwritable_path_does_not_raise(tmp_path):
    audit = AuditLogger(str(tmp_path / "missing" / "audit.jsonl"), enabled=True)
    assert audit.log(_entry()) is False
