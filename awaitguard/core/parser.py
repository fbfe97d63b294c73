"""
Source dispatch — picks the frontend for a file by its extension.
"""

from __future__ import annotations

from pathlib import PurePath

from awaitguard.core.analyzer import AsyncNoAwaitAnalyzer
from awaitguard.core.ast_parser import parse_python, walk_python
from awaitguard.core.ts_parser import parse_typescript, walk_typescript
from awaitguard.models.ast_models import ParsedModule


LANGUAGE_BY_EXTENSION: dict[str, str] = {
    ".py": "python",
    ".pyi": "python",
    ".ts": "typescript",
    ".mts": "typescript",
    ".cts": "typescript",
    ".js": "typescript",
    ".mjs": "typescript",
    ".cjs": "typescript",
    ".tsx": "tsx",
    ".jsx": "tsx",
}


class UnsupportedLanguageError(ValueError):
    """The file's extension maps to no frontend."""


def detect_language(file_path: str) -> str | None:
    return LANGUAGE_BY_EXTENSION.get(PurePath(file_path).suffix.lower())


def is_supported(file_path: str) -> bool:
    return detect_language(file_path) is not None


def parse_file(source: str, file_path: str) -> ParsedModule:
    """Parse a source file based on its extension."""
    language = detect_language(file_path)
    if language is None:
        raise UnsupportedLanguageError(f"Unsupported file type: {file_path}")
    if language == "python":
        return parse_python(source, file_path)
    return parse_typescript(source, file_path, dialect=language)


def walk_module(module: ParsedModule, analyzer: AsyncNoAwaitAnalyzer) -> None:
    """Drive the analyzer over a successfully parsed module."""
    if module.language == "python":
        walk_python(module, analyzer)
    elif module.language in ("typescript", "tsx"):
        walk_typescript(module, analyzer)
    else:
        raise UnsupportedLanguageError(f"No walker for language: {module.language}")
