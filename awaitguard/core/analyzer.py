"""
Async-No-Await Analyzer — Scope tracking for un-awaited async calls.

Driven by a frontend that calls the enter/exit hooks in document order.
Keeps a ScopeStack: async functions open checkable scopes, suspension
boundaries (await, return, for-await, bare-await arrow bodies) open
suppressed ones. Thenable calls through a plain identifier made from a
checkable scope are reported immediately and again, as a summary, when their
async function closes.
"""

from __future__ import annotations

from awaitguard.core.scope_stack import ScopeRecord, ScopeStack
from awaitguard.core.type_oracle import TypeOracle, query_thenable
from awaitguard.models.ast_models import (
    BoundaryNode,
    CallDescriptor,
    CallNode,
    FunctionNode,
    SourceLocation,
)
from awaitguard.models.rule_models import Diagnostic, MessageId


class AsyncNoAwaitAnalyzer:
    """One analyzer per file; holds no state shared across files."""

    def __init__(self, oracle: TypeOracle) -> None:
        self.oracle = oracle
        self.scopes = ScopeStack()
        self.diagnostics: list[Diagnostic] = []

    # ── Function scopes ──

    def enter_function(self, node: FunctionNode) -> None:
        self.scopes.push(ScopeRecord(is_checkable=node.is_async, function=node))

    def exit_function(self, node: FunctionNode) -> None:
        record = self.scopes.pop()
        if record is None:
            return
        if node.is_async and record.pending_calls:
            self._report(
                MessageId.NO_AWAIT_BEFORE_RETURN_PROMISE,
                node.head,
                function_name=node.name,
                no_await_calls=[str(c) for c in record.pending_calls],
            )

    # ── Suspension boundaries ──

    def enter_boundary(self, node: BoundaryNode) -> None:
        self.scopes.push(ScopeRecord(is_checkable=False))

    def exit_boundary(self, node: BoundaryNode) -> None:
        self.scopes.pop()

    # ── Calls ──

    def visit_call(self, node: CallNode) -> None:
        scope = self.scopes.current()
        # Bail before the type query, which is the expensive part
        if scope is None or not scope.is_checkable:
            return
        if node.callee_name is None:
            return
        if not query_thenable(self.oracle, node):
            return
        scope.pending_calls.append(CallDescriptor(node.callee_name, node.callee_loc.line))
        self._report(
            MessageId.ASYNC_CALL_NO_AWAIT,
            node.callee_loc,
            function_name=scope.function.name if scope.function else "",
        )

    def _report(
        self,
        message_id: MessageId,
        loc: SourceLocation,
        function_name: str = "",
        no_await_calls: list[str] | None = None,
    ) -> None:
        self.diagnostics.append(
            Diagnostic(
                message_id=message_id,
                line=loc.line,
                column=loc.column,
                end_line=loc.end_line,
                end_column=loc.end_column,
                function_name=function_name,
                no_await_calls=no_await_calls or [],
            )
        )
