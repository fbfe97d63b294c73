"""
Scan Request/Response Models — API contract schemas.

These are the public-facing Pydantic models used by the FastAPI endpoints
and by the CLI's JSON output.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field


class FileInput(BaseModel):
    """A single file submitted for scanning."""

    path: str = Field(..., description="File path (absolute or relative)")
    content: str = Field(..., description="File source content")


class ScanRequest(BaseModel):
    """Request body for /scan."""

    files: list[FileInput] = Field(default_factory=list)


class Issue(BaseModel):
    """A single issue found during scanning."""

    id: str
    severity: Literal["critical", "high", "medium", "low"]
    file: str
    line: int = 0
    column: int = 0
    end_line: int | None = None
    end_column: int | None = None
    rule_id: str = Field(default="", description="Rule that detected this")
    message_id: str = Field(default="", description="Rule-local message identifier")
    issue: str = Field(..., description="Short issue title")
    explanation: str = Field(..., description="Rendered rule message")
    function: str = Field(default="", description="Enclosing async function")
    evidence: list[str] = Field(
        default_factory=list, description="Un-awaited calls, for summary issues"
    )


class AuditEntry(BaseModel):
    """Audit metadata for a scan."""

    scan_id: str
    files_scanned: int
    files_skipped: int = 0
    violations_found: int
    cache_hits: int = 0
    duration_ms: float = 0.0


class ScanReport(BaseModel):
    """Full scan report."""

    issues: list[Issue] = Field(default_factory=list)
    files_scanned: int = 0
    skipped_files: list[str] = Field(default_factory=list)
    parse_errors: dict[str, list[str]] = Field(default_factory=dict)
    rules_executed: list[str] = Field(default_factory=list)
    summary: str = ""
    audit: AuditEntry | None = None


class ScanResponse(BaseModel):
    """Top-level response for scan endpoints."""

    message: Literal["scan_complete", "error"] = "scan_complete"
    scan_id: str = ""
    report: ScanReport | None = None
    error: str | None = None
