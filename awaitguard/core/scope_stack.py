"""
Scope Stack — LIFO chain of analysis scopes.

Each record knows its parent, whether calls made while it is on top must be
checked, and which offending calls were seen while it was on top.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from awaitguard.models.ast_models import CallDescriptor, FunctionNode

logger = logging.getLogger("awaitguard.core.scope_stack")


@dataclass(eq=False)
class ScopeRecord:
    is_checkable: bool
    function: FunctionNode | None = None
    parent: ScopeRecord | None = None
    pending_calls: list[CallDescriptor] = field(default_factory=list)


class ScopeStack:
    """Owned stack of ScopeRecords, linked through `parent`."""

    def __init__(self) -> None:
        self._top: ScopeRecord | None = None
        self._depth = 0

    def push(self, record: ScopeRecord) -> None:
        record.parent = self._top
        self._top = record
        self._depth += 1

    def pop(self) -> ScopeRecord | None:
        """
        Remove and return the top record.

        Popping an empty stack means the traversal exited a node it never
        entered. That is the driver's bug, so it is logged and ignored.
        """
        record = self._top
        if record is None:
            logger.warning("pop() on empty scope stack — unbalanced enter/exit events")
            return None
        self._top = record.parent
        self._depth -= 1
        return record

    def current(self) -> ScopeRecord | None:
        return self._top

    @property
    def depth(self) -> int:
        return self._depth

    def __len__(self) -> int:
        return self._depth
