"""
TypeScript / JavaScript Frontend — tree-sitter based.

Parses TS/JS/TSX source with the tree-sitter-typescript grammars, collects
the names declared to return a thenable, and walks the tree emitting
function, boundary and call events in document order (enter on the way
down, exit on the way back up).
"""

from __future__ import annotations

import re

import tree_sitter_typescript as tstypescript
from tree_sitter import Language, Node, Parser

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


TS_LANGUAGE = Language(tstypescript.language_typescript())
TSX_LANGUAGE = Language(tstypescript.language_tsx())

FUNCTION_KINDS: dict[str, FunctionKind] = {
    "function_declaration": FunctionKind.DECLARATION,
    "generator_function_declaration": FunctionKind.DECLARATION,
    "function_expression": FunctionKind.EXPRESSION,
    "function": FunctionKind.EXPRESSION,  # older grammar name
    "generator_function": FunctionKind.EXPRESSION,
    "method_definition": FunctionKind.EXPRESSION,
    "arrow_function": FunctionKind.ARROW,
}

# Globals whose calls return a Promise
KNOWN_THENABLE_GLOBALS = {"fetch"}

_PROMISE_RETURN = re.compile(r"^:?\s*(Promise|PromiseLike|Thenable)\b")
_PROMISE_FUNCTION_TYPE = re.compile(r"=>\s*(Promise|PromiseLike|Thenable)\b")


def _node_text(node: Node, source: bytes) -> str:
    """Extract source text for a node."""
    return source[node.start_byte:node.end_byte].decode("utf-8", errors="replace")


def _loc(node: Node) -> SourceLocation:
    return SourceLocation(
        line=node.start_point[0] + 1,
        column=node.start_point[1],
        end_line=node.end_point[0] + 1,
        end_column=node.end_point[1],
    )


def _is_async(node: Node) -> bool:
    return any(child.type == "async" for child in node.children)


def _same_node(a: Node | None, b: Node | None) -> bool:
    if a is None or b is None:
        return False
    return (a.start_byte, a.end_byte, a.type) == (b.start_byte, b.end_byte, b.type)


def _returns_promise(node: Node, source: bytes) -> bool:
    return_type = node.child_by_field_name("return_type")
    return return_type is not None and bool(
        _PROMISE_RETURN.match(_node_text(return_type, source).strip())
    )


def _is_thenable_function(node: Node | None, source: bytes) -> bool:
    if node is None or not node.is_named or node.type not in FUNCTION_KINDS:
        return False
    # async generators return an AsyncIterator, not a promise
    if node.type == "generator_function":
        return False
    return _is_async(node) or _returns_promise(node, source)


def collect_thenable_names(root: Node, source: bytes) -> set[str]:
    """Names whose direct call yields a Promise-like value."""
    names = set(KNOWN_THENABLE_GLOBALS)
    stack = [root]
    while stack:
        node = stack.pop()
        stack.extend(node.children)

        if node.type in ("function_declaration", "function_signature"):
            name = node.child_by_field_name("name")
            if name is not None and (_is_async(node) or _returns_promise(node, source)):
                names.add(_node_text(name, source))
        elif node.type == "variable_declarator":
            name = node.child_by_field_name("name")
            if name is None or name.type != "identifier":
                continue
            declared_type = node.child_by_field_name("type")
            if _is_thenable_function(node.child_by_field_name("value"), source) or (
                declared_type is not None
                and _PROMISE_FUNCTION_TYPE.search(_node_text(declared_type, source))
            ):
                names.add(_node_text(name, source))
    return names


def _first_error_line(root: Node) -> int:
    stack = [root]
    while stack:
        node = stack.pop()
        if node.type == "ERROR" or node.is_missing:
            return node.start_point[0] + 1
        stack.extend(reversed(node.children))
    return root.start_point[0] + 1


class TypeScriptParser:
    """Thin wrapper around tree-sitter for TS/JS and TSX/JSX source."""

    def __init__(self) -> None:
        self._parsers = {
            "typescript": Parser(TS_LANGUAGE),
            "tsx": Parser(TSX_LANGUAGE),
        }

    def parse(self, code: str, dialect: str = "typescript") -> tuple:
        """Parse source and return (tree, source_bytes).

        Raises ValueError if the code cannot be parsed.
        """
        source_bytes = code.encode("utf-8")
        tree = self._parsers[dialect].parse(source_bytes)
        if tree.root_node.has_error:
            line = _first_error_line(tree.root_node)
            raise ValueError(f"Syntax error at line {line}")
        return tree, source_bytes


_parser = TypeScriptParser()


def parse_typescript(
    source: str, file_path: str = "<unknown>", dialect: str = "typescript"
) -> ParsedModule:
    """
    Parse TS/JS source into a ParsedModule.

    Syntax errors are recorded in `parse_errors`; the module is then not
    walkable.
    """
    try:
        tree, source_bytes = _parser.parse(source, dialect)
    except ValueError as e:
        return ParsedModule(
            file_path=file_path,
            language=dialect,
            source=source,
            parse_errors=[f"SyntaxError: {e}"],
        )

    return ParsedModule(
        file_path=file_path,
        language=dialect,
        source=source,
        tree=tree,
        oracle=DeclaredThenableOracle(collect_thenable_names(tree.root_node, source_bytes)),
    )


class _EventWalker:
    """Iterative pre/post-order walk translating tree-sitter nodes to events."""

    def __init__(self, analyzer: AsyncNoAwaitAnalyzer, source: bytes) -> None:
        self.analyzer = analyzer
        self.source = source

    def _function_node(self, node: Node) -> FunctionNode:
        name_node = node.child_by_field_name("name")
        if name_node is None and node.parent is not None and node.parent.type == "variable_declarator":
            name_node = node.parent.child_by_field_name("name")
        return FunctionNode(
            kind=FUNCTION_KINDS[node.type],
            is_async=_is_async(node),
            head=self._head_loc(node),
            name=_node_text(name_node, self.source) if name_node is not None else "",
        )

    def _head_loc(self, node: Node) -> SourceLocation:
        """Span from the function's start to its parameter list (or `=>`)."""
        start = node.start_point
        end = node.end_point
        if node.type == "arrow_function":
            arrow = next((c for c in node.children if c.type == "=>"), None)
            if arrow is not None:
                end = arrow.end_point
        else:
            params = node.child_by_field_name("parameters")
            if params is not None:
                end = params.start_point
        return SourceLocation(start[0] + 1, start[1], end[0] + 1, end[1])

    def _boundaries(self, node: Node) -> list[BoundaryNode]:
        loc = _loc(node)
        if node.type == "await_expression":
            found = [BoundaryNode(BoundaryKind.AWAIT_EXPRESSION, loc)]
            if self._is_arrow_body(node):
                found.append(BoundaryNode(BoundaryKind.ASYNC_ARROW_AWAIT_BODY, loc))
            return found
        if node.type == "return_statement":
            return [BoundaryNode(BoundaryKind.RETURN_STATEMENT, loc)]
        if node.type == "for_in_statement" and any(c.type == "await" for c in node.children):
            return [BoundaryNode(BoundaryKind.FOR_AWAIT_OF, loc)]
        return []

    @staticmethod
    def _is_arrow_body(node: Node) -> bool:
        """True for the await that is the whole body of an async arrow."""
        outer = node
        parent = node.parent
        while parent is not None and parent.type == "parenthesized_expression":
            outer, parent = parent, parent.parent
        return (
            parent is not None
            and parent.type == "arrow_function"
            and _is_async(parent)
            and _same_node(parent.child_by_field_name("body"), outer)
        )

    def _call_node(self, node: Node) -> CallNode | None:
        callee = node.child_by_field_name("function")
        arguments = node.child_by_field_name("arguments")
        # g`...` is a tagged template, not a call
        if callee is None or (arguments is not None and arguments.type == "template_string"):
            return None
        # (g)() calls g
        while callee.type == "parenthesized_expression" and callee.named_child_count == 1:
            callee = callee.named_children[0]
        return CallNode(
            loc=_loc(node),
            callee_loc=_loc(callee),
            callee_name=_node_text(callee, self.source) if callee.type == "identifier" else None,
            source=node,
        )

    def walk(self, root: Node) -> None:
        # (node, exit_events); exit_events is None for not-yet-entered nodes
        stack: list[tuple[Node, list | None]] = [(root, None)]
        while stack:
            node, exits = stack.pop()
            if exits is not None:
                for exit_event in exits:
                    exit_event()
                continue

            exits = []
            if node.is_named and node.type in FUNCTION_KINDS:
                func = self._function_node(node)
                self.analyzer.enter_function(func)
                exits.append(lambda func=func: self.analyzer.exit_function(func))
            for boundary in self._boundaries(node):
                self.analyzer.enter_boundary(boundary)
                exits.insert(0, lambda b=boundary: self.analyzer.exit_boundary(b))
            if node.type == "call_expression":
                call = self._call_node(node)
                if call is not None:
                    self.analyzer.visit_call(call)

            stack.append((node, exits))
            for child in reversed(node.children):
                stack.append((child, None))


def walk_typescript(module: ParsedModule, analyzer: AsyncNoAwaitAnalyzer) -> None:
    """Feed every event of the module's tree to the analyzer."""
    _EventWalker(analyzer, module.source.encode("utf-8")).walk(module.tree.root_node)
