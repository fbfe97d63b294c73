"""
Async No Await Rule — Detects un-awaited async calls inside async functions.

An async call that is not awaited starts running concurrently with the rest
of the enclosing async function and may still be running when the function's
own promise/coroutine completes. Each offending call is reported at the
callee, and each offending function once more at its header with the full
list of calls.

Calls are exempt inside await, return, and for-await/async-for, and in async
arrows whose whole body is an await. Only plain identifier callees are
checked; `obj.method()` never is.
"""

from __future__ import annotations

from awaitguard.core.analyzer import AsyncNoAwaitAnalyzer
from awaitguard.core.parser import walk_module
from awaitguard.core.type_oracle import TypeOracle
from awaitguard.models.ast_models import ParsedModule
from awaitguard.models.rule_models import (
    Diagnostic,
    MessageId,
    RuleMeta,
    RuleViolation,
    Severity,
)


RULE_ID = "async-no-await"

MESSAGES: dict[MessageId, str] = {
    MessageId.NO_AWAIT_BEFORE_RETURN_PROMISE: (
        "Inside this async function, these async functions: "
        "[{noAwaitCalls}] do not have `await`."
    ),
    MessageId.ASYNC_CALL_NO_AWAIT: (
        "This async function is not `await`ed, so it would run concurrently "
        "with the returning Promise of the outer async function. Please add "
        "`await`, or disable the rule if needed."
    ),
}

META = RuleMeta(
    rule_id=RULE_ID,
    type="problem",
    description="Check missing await for async calls inside async functions",
    requires_type_checking=True,
    messages={m.value: text for m, text in MESSAGES.items()},
    schema=[],
)

_SEVERITY: dict[MessageId, Severity] = {
    MessageId.ASYNC_CALL_NO_AWAIT: Severity.HIGH,
    MessageId.NO_AWAIT_BEFORE_RETURN_PROMISE: Severity.MEDIUM,
}

_TITLES: dict[MessageId, str] = {
    MessageId.ASYNC_CALL_NO_AWAIT: "Async call is not awaited",
    MessageId.NO_AWAIT_BEFORE_RETURN_PROMISE: "Async function returns without awaiting calls",
}


def render_message(diagnostic: Diagnostic) -> str:
    return MESSAGES[diagnostic.message_id].format(
        noAwaitCalls=",".join(diagnostic.no_await_calls)
    )


def analyze(module: ParsedModule, oracle: TypeOracle | None = None) -> list[Diagnostic]:
    """
    Run the analyzer over one parsed module.

    Args:
        module: A module whose parse succeeded.
        oracle: Overrides the declaration oracle the frontend built.

    Returns:
        Diagnostics in emission order. Unparsed modules yield none.
    """
    if not module.ok:
        return []
    analyzer = AsyncNoAwaitAnalyzer(oracle or module.oracle)
    walk_module(module, analyzer)
    return analyzer.diagnostics


def to_violation(diagnostic: Diagnostic, file_path: str) -> RuleViolation:
    return RuleViolation(
        rule_id=RULE_ID,
        message_id=diagnostic.message_id.value,
        severity=_SEVERITY[diagnostic.message_id],
        file=file_path,
        line=diagnostic.line,
        column=diagnostic.column,
        end_line=diagnostic.end_line,
        end_column=diagnostic.end_column,
        title=_TITLES[diagnostic.message_id],
        description=render_message(diagnostic),
        evidence=list(diagnostic.no_await_calls),
        affected_function=diagnostic.function_name,
        metadata={"no_await_calls": list(diagnostic.no_await_calls)},
    )


def check(module: ParsedModule, oracle: TypeOracle | None = None) -> list[RuleViolation]:
    """Detect un-awaited async calls, one violation per diagnostic."""
    return [to_violation(d, module.file_path) for d in analyze(module, oracle)]
