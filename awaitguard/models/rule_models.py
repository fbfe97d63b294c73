"""
Rule Data Models — Diagnostics, violations, results, and rule metadata.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


class Severity(str, Enum):
    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class MessageId(str, Enum):
    ASYNC_CALL_NO_AWAIT = "asyncCallNoAwait"
    NO_AWAIT_BEFORE_RETURN_PROMISE = "noAwaitBeforeReturnPromise"


class Diagnostic(BaseModel):
    """A single analyzer finding, in emission order."""

    message_id: MessageId
    line: int = Field(..., description="1-based anchor line")
    column: int = Field(..., description="0-based anchor column")
    end_line: int
    end_column: int
    function_name: str = Field(default="", description="Enclosing async function, if named")
    no_await_calls: list[str] = Field(
        default_factory=list,
        description="Ordered 'name(line: N)' descriptors, summary diagnostics only",
    )


class RuleMeta(BaseModel):
    """Static description of a rule."""

    rule_id: str
    type: str = Field(default="problem", description="'problem', 'suggestion' or 'layout'")
    description: str
    requires_type_checking: bool = False
    messages: dict[str, str] = Field(default_factory=dict)
    schema_: list[dict[str, Any]] = Field(
        default_factory=list, alias="schema", description="Options schema (empty: no options)"
    )

    model_config = {"populate_by_name": True}


class RuleViolation(BaseModel):
    """A rule violation, ready for reporting."""

    rule_id: str = Field(..., description="Unique rule identifier, e.g. 'async-no-await'")
    message_id: str = Field(default="", description="Rule-local message identifier")
    severity: Severity
    file: str = Field(..., description="File path where violation was found")
    line: int = Field(..., description="Line number of violation")
    column: int = Field(default=0, description="0-based column of violation")
    end_line: int | None = Field(default=None, description="End line of violation range")
    end_column: int | None = Field(default=None, description="End column of violation range")
    title: str = Field(..., description="Short human-readable violation title")
    description: str = Field(..., description="Rendered rule message")
    evidence: list[str] = Field(
        default_factory=list,
        description="Evidence chain (e.g. the un-awaited calls of a function)",
    )
    affected_function: str = Field(default="", description="Function where violation occurs")
    metadata: dict[str, Any] = Field(
        default_factory=dict, description="Rule-specific extra data"
    )


class RuleResult(BaseModel):
    """Result of running all rules on a set of modules."""

    violations: list[RuleViolation] = Field(default_factory=list)
    rules_executed: list[str] = Field(default_factory=list)
    total_files_scanned: int = 0
    skipped_files: list[str] = Field(default_factory=list)
    parse_errors: dict[str, list[str]] = Field(default_factory=dict)
    scan_duration_ms: float = 0.0
