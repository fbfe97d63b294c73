"""
AST Event Models — The node records the analyzer consumes.

Frontends (Python `ast`, tree-sitter TypeScript) translate their own trees
into these records and feed them to the analyzer in document order.
Each category is a closed set of kinds so dispatch stays exhaustive.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class FunctionKind(str, Enum):
    DECLARATION = "declaration"
    EXPRESSION = "expression"
    ARROW = "arrow"


class BoundaryKind(str, Enum):
    """Constructs inside which un-awaited calls cannot race the function."""

    AWAIT_EXPRESSION = "await_expression"
    RETURN_STATEMENT = "return_statement"
    FOR_AWAIT_OF = "for_await_of"
    ASYNC_ARROW_AWAIT_BODY = "async_arrow_await_body"


@dataclass(frozen=True)
class SourceLocation:
    """A source span. Lines are 1-based, columns 0-based."""

    line: int
    column: int
    end_line: int
    end_column: int


@dataclass(frozen=True)
class FunctionNode:
    kind: FunctionKind
    is_async: bool
    head: SourceLocation
    name: str = ""


@dataclass(frozen=True)
class BoundaryNode:
    kind: BoundaryKind
    loc: SourceLocation


@dataclass(frozen=True)
class CallNode:
    """
    A call expression.

    `callee_name` is set only when the callee is a plain identifier;
    member accesses and other callee shapes leave it as None.
    `source` is the frontend's own node, handed to the type oracle.
    """

    loc: SourceLocation
    callee_loc: SourceLocation
    callee_name: str | None = None
    source: Any = None


@dataclass(frozen=True)
class CallDescriptor:
    """An un-awaited call recorded against its enclosing function."""

    name: str
    line: int

    def __str__(self) -> str:
        return f"{self.name}(line: {self.line})"


@dataclass
class ParsedModule:
    """A source file after parsing, ready to be walked by its frontend."""

    file_path: str
    language: str
    source: str
    tree: Any = None
    oracle: Any = None
    parse_errors: list[str] = field(default_factory=list)

    @property
    def total_lines(self) -> int:
        return self.source.count("\n") + 1

    @property
    def ok(self) -> bool:
        return self.tree is not None and not self.parse_errors
