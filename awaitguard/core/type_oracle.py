"""
Type Oracle — Answers "is this call's value awaitable?".

The analyzer never inspects types itself; it is handed an object with an
`is_thenable(call)` method. Frontends build a DeclaredThenableOracle from the
declarations they find in the file, tests hand in fakes.
"""

from __future__ import annotations

import logging
from typing import Iterable, Protocol

from awaitguard.models.ast_models import CallNode

logger = logging.getLogger("awaitguard.core.type_oracle")


class TypeOracle(Protocol):
    def is_thenable(self, call: CallNode) -> bool: ...


class DeclaredThenableOracle:
    """
    Name-based oracle: a call is thenable when its plain callee name is
    declared (in the same file) or known to return an awaitable.

    Shadowing is not tracked.
    """

    def __init__(self, names: Iterable[str] = ()) -> None:
        self.names: frozenset[str] = frozenset(names)

    def is_thenable(self, call: CallNode) -> bool:
        return call.callee_name is not None and call.callee_name in self.names

    def __repr__(self) -> str:
        return f"DeclaredThenableOracle({sorted(self.names)!r})"


def query_thenable(oracle: TypeOracle, call: CallNode) -> bool:
    """Ask the oracle; an oracle that cannot decide counts as 'not thenable'."""
    try:
        return bool(oracle.is_thenable(call))
    except Exception:
        logger.debug(
            "Type oracle failed at line %d — treating call as not thenable",
            call.loc.line,
            exc_info=True,
        )
        return False
