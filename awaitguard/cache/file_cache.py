"""
File Cache — SHA-256 hash-based incremental caching.

Caches rule violations and parse errors per file, keyed by path and content
hash. Unchanged files skip re-parsing and re-analysis entirely.
"""

from __future__ import annotations

import hashlib
import time
from dataclasses import dataclass, field
from typing import Any

from awaitguard.config import settings
from awaitguard.models.rule_models import RuleViolation


@dataclass
class CacheEntry:
    """A cached analysis result for a single file."""

    content_hash: str
    violations: list[RuleViolation]
    parse_errors: list[str] = field(default_factory=list)
    timestamp: float = field(default_factory=time.time)
    ttl_seconds: float = field(default_factory=lambda: settings.cache_ttl_seconds)

    @property
    def is_expired(self) -> bool:
        return (time.time() - self.timestamp) > self.ttl_seconds


class FileCache:
    """In-memory file-level cache keyed by SHA-256 of file content."""

    def __init__(self, ttl_seconds: float | None = None) -> None:
        self._store: dict[str, CacheEntry] = {}
        self.ttl_seconds = settings.cache_ttl_seconds if ttl_seconds is None else ttl_seconds

    @staticmethod
    def hash_content(content: str) -> str:
        """Compute SHA-256 hash of file content."""
        return hashlib.sha256(content.encode("utf-8")).hexdigest()

    def get(self, file_path: str, content: str) -> CacheEntry | None:
        """
        Look up cached result for a file.

        Returns None if not cached, expired, or content has changed.
        """
        key = f"{file_path}:{self.hash_content(content)}"
        entry = self._store.get(key)

        if entry is None:
            return None

        if entry.is_expired:
            del self._store[key]
            return None

        return entry

    def put(
        self,
        file_path: str,
        content: str,
        violations: list[RuleViolation],
        parse_errors: list[str] | None = None,
    ) -> None:
        """Cache analysis results for a file."""
        content_hash = self.hash_content(content)
        self._store[f"{file_path}:{content_hash}"] = CacheEntry(
            content_hash=content_hash,
            violations=list(violations),
            parse_errors=list(parse_errors or []),
            ttl_seconds=self.ttl_seconds,
        )

    @property
    def size(self) -> int:
        """Number of cached entries."""
        return len(self._store)

    def stats(self) -> dict[str, Any]:
        """Cache statistics."""
        expired = sum(1 for e in self._store.values() if e.is_expired)
        return {
            "total_entries": len(self._store),
            "expired_entries": expired,
            "active_entries": len(self._store) - expired,
        }
