"""
Python Frontend — Drives the analyzer over the built-in `ast` tree.

Parses Python source, collects the names that return awaitables (the
oracle's knowledge), and walks the tree emitting function, boundary and call
events in document order.

Python spelling of the boundaries:
  await expr   → AWAIT_EXPRESSION
  return expr  → RETURN_STATEMENT
  async for    → FOR_AWAIT_OF
Lambdas are never async, so there is no bare-await arrow form.
"""

from __future__ import annotations

import ast

from awaitguard.core.analyzer import AsyncNoAwaitAnalyzer
from awaitguard.core.type_oracle import DeclaredThenableOracle
from awaitguard.models.ast_models import (
    BoundaryKind,
    BoundaryNode,
    CallNode,
    FunctionKind,
    FunctionNode,
    ParsedModule,
    SourceLocation,
)


# Return annotations (last dotted part, outside any subscript) meaning "awaitable"
AWAITABLE_ANNOTATIONS = {"Awaitable", "Coroutine", "Future", "Task"}

# asyncio functions returning awaitables, when imported by name
ASYNCIO_AWAITABLES = {
    "sleep",
    "gather",
    "wait",
    "wait_for",
    "shield",
    "create_task",
    "ensure_future",
    "to_thread",
}


def _annotation_name(node: ast.AST | None) -> str:
    """Base type name of an annotation: `typing.Awaitable[int]` → 'Awaitable'."""
    if node is None:
        return ""
    if isinstance(node, ast.Subscript):
        return _annotation_name(node.value)
    if isinstance(node, ast.Attribute):
        return node.attr
    if isinstance(node, ast.Name):
        return node.id
    if isinstance(node, ast.Constant) and isinstance(node.value, str):
        # String (forward-reference) annotation
        return node.value.split("[", 1)[0].strip().rsplit(".", 1)[-1]
    return ""


def _is_async_generator(node: ast.AsyncFunctionDef) -> bool:
    """True if the body yields, ignoring nested functions and lambdas."""
    pending: list[ast.AST] = list(node.body)
    while pending:
        child = pending.pop()
        if isinstance(child, (ast.Yield, ast.YieldFrom)):
            return True
        if isinstance(child, (ast.FunctionDef, ast.AsyncFunctionDef, ast.Lambda, ast.ClassDef)):
            continue
        pending.extend(ast.iter_child_nodes(child))
    return False


def collect_awaitable_names(tree: ast.AST) -> set[str]:
    """Names that, called directly, produce an awaitable."""
    names: set[str] = set()
    for node in ast.walk(tree):
        if isinstance(node, ast.AsyncFunctionDef):
            # async generators return an async iterator, not an awaitable
            if not _is_async_generator(node):
                names.add(node.name)
        elif isinstance(node, ast.FunctionDef):
            if _annotation_name(node.returns) in AWAITABLE_ANNOTATIONS:
                names.add(node.name)
        elif isinstance(node, ast.ImportFrom) and node.module == "asyncio":
            for alias in node.names:
                if alias.name in ASYNCIO_AWAITABLES:
                    names.add(alias.asname or alias.name)
    return names


def _loc(node: ast.AST) -> SourceLocation:
    return SourceLocation(
        line=node.lineno,
        column=node.col_offset,
        end_line=getattr(node, "end_lineno", None) or node.lineno,
        end_column=getattr(node, "end_col_offset", None) or node.col_offset,
    )


class _AsyncScopeVisitor(ast.NodeVisitor):
    """Translates Python AST nodes into analyzer enter/exit events."""

    def __init__(self, analyzer: AsyncNoAwaitAnalyzer, source_lines: list[str]) -> None:
        self.analyzer = analyzer
        self.source_lines = source_lines

    def _head_loc(self, node: ast.FunctionDef | ast.AsyncFunctionDef) -> SourceLocation:
        """Span from `def`/`async def` through the function name."""
        try:
            # ast columns are UTF-8 byte offsets
            line = self.source_lines[node.lineno - 1].encode("utf-8")
            after_def = line.find(b"def", node.col_offset) + 3
            idx = line.find(node.name.encode("utf-8"), after_def)
        except IndexError:
            idx = -1
        end = idx + len(node.name.encode("utf-8")) if idx >= 0 else node.col_offset
        return SourceLocation(node.lineno, node.col_offset, node.lineno, end)

    def _visit_all(self, nodes: list) -> None:
        for child in nodes:
            if child is not None:
                self.visit(child)

    def _visit_function(self, node: ast.FunctionDef | ast.AsyncFunctionDef) -> None:
        func = FunctionNode(
            kind=FunctionKind.DECLARATION,
            is_async=isinstance(node, ast.AsyncFunctionDef),
            head=self._head_loc(node),
            name=node.name,
        )
        # Decorators, defaults and annotations run in the enclosing scope
        self._visit_all(node.decorator_list)
        self.visit(node.args)
        self._visit_all([node.returns])
        self.analyzer.enter_function(func)
        self._visit_all(node.body)
        self.analyzer.exit_function(func)

    def _visit_boundary(self, node: ast.AST, kind: BoundaryKind) -> None:
        boundary = BoundaryNode(kind=kind, loc=_loc(node))
        self.analyzer.enter_boundary(boundary)
        self.generic_visit(node)
        self.analyzer.exit_boundary(boundary)

    def visit_FunctionDef(self, node: ast.FunctionDef) -> None:  # noqa: N802
        self._visit_function(node)

    def visit_AsyncFunctionDef(self, node: ast.AsyncFunctionDef) -> None:  # noqa: N802
        self._visit_function(node)

    def visit_Lambda(self, node: ast.Lambda) -> None:  # noqa: N802
        head = SourceLocation(node.lineno, node.col_offset, node.lineno, node.col_offset + 6)
        func = FunctionNode(kind=FunctionKind.ARROW, is_async=False, head=head, name="<lambda>")
        self.visit(node.args)
        self.analyzer.enter_function(func)
        self.visit(node.body)
        self.analyzer.exit_function(func)

    def visit_Await(self, node: ast.Await) -> None:  # noqa: N802
        self._visit_boundary(node, BoundaryKind.AWAIT_EXPRESSION)

    def visit_Return(self, node: ast.Return) -> None:  # noqa: N802
        self._visit_boundary(node, BoundaryKind.RETURN_STATEMENT)

    def visit_AsyncFor(self, node: ast.AsyncFor) -> None:  # noqa: N802
        self._visit_boundary(node, BoundaryKind.FOR_AWAIT_OF)

    def visit_Call(self, node: ast.Call) -> None:  # noqa: N802
        callee = node.func
        self.analyzer.visit_call(
            CallNode(
                loc=_loc(node),
                callee_loc=_loc(callee),
                callee_name=callee.id if isinstance(callee, ast.Name) else None,
                source=node,
            )
        )
        self.generic_visit(node)


def parse_python(source: str, file_path: str = "<unknown>") -> ParsedModule:
    """
    Parse Python source into a ParsedModule.

    Syntax errors are recorded in `parse_errors`; the module is then not
    walkable.
    """
    try:
        tree = ast.parse(source, filename=file_path)
    except SyntaxError as e:
        return ParsedModule(
            file_path=file_path,
            language="python",
            source=source,
            parse_errors=[f"SyntaxError at line {e.lineno}: {e.msg}"],
        )

    return ParsedModule(
        file_path=file_path,
        language="python",
        source=source,
        tree=tree,
        oracle=DeclaredThenableOracle(collect_awaitable_names(tree)),
    )


def walk_python(module: ParsedModule, analyzer: AsyncNoAwaitAnalyzer) -> None:
    """Feed every event of the module's tree to the analyzer."""
    _AsyncScopeVisitor(analyzer, module.source.split("\n")).visit(module.tree)
