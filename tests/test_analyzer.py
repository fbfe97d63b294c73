"""
Tests for the analyzer core — driven directly with enter/exit events and a
fake type oracle, independent of any source frontend.
"""

import logging

from awaitguard.core.analyzer import AsyncNoAwaitAnalyzer
from awaitguard.models.ast_models import (
    BoundaryKind,
    BoundaryNode,
    CallNode,
    FunctionKind,
    FunctionNode,
    SourceLocation,
)
from awaitguard.models.rule_models import MessageId


class FakeOracle:
    """Thenable by callee name; counts queries."""

    def __init__(self, *names):
        self.names = set(names)
        self.queries = 0

    def is_thenable(self, call):
        self.queries += 1
        return call.callee_name in self.names


class BrokenOracle:
    def is_thenable(self, call):
        raise RuntimeError("type checker unavailable")


def _loc(line, column=0, width=1):
    return SourceLocation(line, column, line, column + width)


def _func(name, is_async=True, line=1, kind=FunctionKind.DECLARATION):
    return FunctionNode(kind=kind, is_async=is_async, head=_loc(line, 0, 10), name=name)


def _call(name, line, column=2, member=False):
    return CallNode(
        loc=_loc(line, column, len(name) + 2),
        callee_loc=_loc(line, column, len(name)),
        callee_name=None if member else name,
    )


def _boundary(kind, line):
    return BoundaryNode(kind=kind, loc=_loc(line))


def test_unawaited_call_reports_call_and_summary():
    analyzer = AsyncNoAwaitAnalyzer(FakeOracle("g"))
    f = _func("f")
    analyzer.enter_function(f)
    analyzer.visit_call(_call("g", line=1, column=21))
    analyzer.exit_function(f)

    first, summary = analyzer.diagnostics
    assert first.message_id == MessageId.ASYNC_CALL_NO_AWAIT
    assert (first.line, first.column, first.end_column) == (1, 21, 22)
    assert first.function_name == "f"
    assert summary.message_id == MessageId.NO_AWAIT_BEFORE_RETURN_PROMISE
    assert (summary.line, summary.column) == (1, 0)
    assert summary.no_await_calls == ["g(line: 1)"]


def test_summary_lists_calls_in_source_order():
    analyzer = AsyncNoAwaitAnalyzer(FakeOracle("a", "b"))
    f = _func("f")
    analyzer.enter_function(f)
    analyzer.visit_call(_call("b", line=2))
    analyzer.visit_call(_call("a", line=3))
    analyzer.visit_call(_call("b", line=4))
    analyzer.exit_function(f)

    assert [d.message_id for d in analyzer.diagnostics] == [
        MessageId.ASYNC_CALL_NO_AWAIT,
        MessageId.ASYNC_CALL_NO_AWAIT,
        MessageId.ASYNC_CALL_NO_AWAIT,
        MessageId.NO_AWAIT_BEFORE_RETURN_PROMISE,
    ]
    assert analyzer.diagnostics[-1].no_await_calls == ["b(line: 2)", "a(line: 3)", "b(line: 4)"]


def test_call_inside_each_boundary_is_suppressed():
    for kind in BoundaryKind:
        oracle = FakeOracle("g")
        analyzer = AsyncNoAwaitAnalyzer(oracle)
        f = _func("f")
        b = _boundary(kind, 1)
        analyzer.enter_function(f)
        analyzer.enter_boundary(b)
        analyzer.visit_call(_call("g", line=1))
        analyzer.exit_boundary(b)
        analyzer.exit_function(f)
        assert analyzer.diagnostics == [], kind
        assert oracle.queries == 0


def test_checking_resumes_after_boundary_exit():
    analyzer = AsyncNoAwaitAnalyzer(FakeOracle("g"))
    f = _func("f")
    b = _boundary(BoundaryKind.AWAIT_EXPRESSION, 2)
    analyzer.enter_function(f)
    analyzer.enter_boundary(b)
    analyzer.visit_call(_call("g", line=2))
    analyzer.exit_boundary(b)
    analyzer.visit_call(_call("g", line=3))
    analyzer.exit_function(f)
    assert analyzer.diagnostics[-1].no_await_calls == ["g(line: 3)"]


def test_sync_function_is_never_checked():
    oracle = FakeOracle("g")
    analyzer = AsyncNoAwaitAnalyzer(oracle)
    f = _func("f", is_async=False)
    analyzer.enter_function(f)
    analyzer.visit_call(_call("g", line=1))
    analyzer.exit_function(f)
    assert analyzer.diagnostics == []
    assert oracle.queries == 0


def test_top_level_call_is_not_checked():
    oracle = FakeOracle("g")
    analyzer = AsyncNoAwaitAnalyzer(oracle)
    analyzer.visit_call(_call("g", line=1))
    assert analyzer.diagnostics == []
    assert oracle.queries == 0


def test_member_callee_is_never_classified():
    analyzer = AsyncNoAwaitAnalyzer(FakeOracle("g"))
    f = _func("f")
    analyzer.enter_function(f)
    analyzer.visit_call(_call("g", line=1, member=True))
    analyzer.exit_function(f)
    assert analyzer.diagnostics == []


def test_non_thenable_call_is_ignored():
    analyzer = AsyncNoAwaitAnalyzer(FakeOracle("g"))
    f = _func("f")
    analyzer.enter_function(f)
    analyzer.visit_call(_call("print", line=1))
    analyzer.exit_function(f)
    assert analyzer.diagnostics == []


def test_nested_async_function_owns_its_calls():
    analyzer = AsyncNoAwaitAnalyzer(FakeOracle("g"))
    outer = _func("outer", line=1)
    inner = _func("inner", line=2)
    analyzer.enter_function(outer)
    analyzer.enter_function(inner)
    analyzer.visit_call(_call("g", line=3))
    analyzer.exit_function(inner)
    analyzer.exit_function(outer)

    call, summary = analyzer.diagnostics
    assert call.function_name == "inner"
    assert summary.function_name == "inner"
    assert summary.line == 2


def test_outer_calls_survive_nested_function():
    analyzer = AsyncNoAwaitAnalyzer(FakeOracle("g"))
    outer = _func("outer", line=1)
    inner = _func("inner", line=3)
    analyzer.enter_function(outer)
    analyzer.visit_call(_call("g", line=2))
    analyzer.enter_function(inner)
    analyzer.visit_call(_call("g", line=4))
    analyzer.exit_function(inner)
    analyzer.visit_call(_call("g", line=6))
    analyzer.exit_function(outer)

    summaries = [
        d for d in analyzer.diagnostics if d.message_id == MessageId.NO_AWAIT_BEFORE_RETURN_PROMISE
    ]
    assert [s.function_name for s in summaries] == ["inner", "outer"]
    assert summaries[0].no_await_calls == ["g(line: 4)"]
    assert summaries[1].no_await_calls == ["g(line: 2)", "g(line: 6)"]


def test_sync_callback_inside_async_function_is_not_checked():
    analyzer = AsyncNoAwaitAnalyzer(FakeOracle("g"))
    outer = _func("outer")
    callback = _func("", is_async=False, kind=FunctionKind.ARROW, line=2)
    analyzer.enter_function(outer)
    analyzer.enter_function(callback)
    analyzer.visit_call(_call("g", line=2))
    analyzer.exit_function(callback)
    analyzer.exit_function(outer)
    assert analyzer.diagnostics == []


def test_async_function_inside_boundary_is_checked_again():
    analyzer = AsyncNoAwaitAnalyzer(FakeOracle("g"))
    outer = _func("outer")
    b = _boundary(BoundaryKind.AWAIT_EXPRESSION, 2)
    inner = _func("", kind=FunctionKind.ARROW, line=2)
    analyzer.enter_function(outer)
    analyzer.enter_boundary(b)
    analyzer.enter_function(inner)
    analyzer.visit_call(_call("g", line=3))
    analyzer.exit_function(inner)
    analyzer.exit_boundary(b)
    analyzer.exit_function(outer)

    assert len(analyzer.diagnostics) == 2
    assert analyzer.diagnostics[1].line == 2


def test_oracle_failure_counts_as_not_thenable():
    analyzer = AsyncNoAwaitAnalyzer(BrokenOracle())
    f = _func("f")
    analyzer.enter_function(f)
    analyzer.visit_call(_call("g", line=1))
    analyzer.exit_function(f)
    assert analyzer.diagnostics == []


def test_unbalanced_exit_does_not_crash(caplog):
    analyzer = AsyncNoAwaitAnalyzer(FakeOracle("g"))
    with caplog.at_level(logging.WARNING):
        analyzer.exit_function(_func("f"))
        analyzer.exit_boundary(_boundary(BoundaryKind.RETURN_STATEMENT, 1))
    assert analyzer.diagnostics == []
    assert analyzer.scopes.depth == 0


def test_stack_is_empty_after_balanced_traversal():
    analyzer = AsyncNoAwaitAnalyzer(FakeOracle("g"))
    f = _func("f")
    b = _boundary(BoundaryKind.RETURN_STATEMENT, 2)
    analyzer.enter_function(f)
    analyzer.enter_boundary(b)
    analyzer.exit_boundary(b)
    analyzer.exit_function(f)
    assert analyzer.scopes.current() is None
