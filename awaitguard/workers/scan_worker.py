"""
Scan Worker — Orchestrates a scan over submitted files.

Pipeline:
1. Look each file up in the content-hash cache
2. Parse + run the rule engine on cache misses
3. Cache per-file results
4. Assemble issues, summary and audit entry
"""

from __future__ import annotations

import logging
import time
import uuid

from awaitguard.cache.file_cache import FileCache
from awaitguard.core.rule_engine import RuleEngine
from awaitguard.models.rule_models import RuleViolation
from awaitguard.models.scan_models import (
    AuditEntry,
    FileInput,
    Issue,
    ScanReport,
    ScanResponse,
)

logger = logging.getLogger("awaitguard.worker")


class ScanWorker:
    """Runs scans against a shared cache and rule engine."""

    def __init__(
        self,
        cache: FileCache | None = None,
        rule_engine: RuleEngine | None = None,
    ) -> None:
        self.cache = cache or FileCache()
        self.rule_engine = rule_engine or RuleEngine()

    def run_scan(self, files: list[FileInput]) -> ScanResponse:
        """
        Scan files and build the response.

        Args:
            files: Files to scan, in the order results should be reported.

        Returns:
            ScanResponse whose issues follow file order, then emission order.
        """
        scan_id = str(uuid.uuid4())[:8]
        start_time = time.monotonic()
        logger.info(f"[{scan_id}] Starting scan of {len(files)} files")

        violations: list[RuleViolation] = []
        skipped: list[str] = []
        parse_errors: dict[str, list[str]] = {}
        cache_hits = 0

        for f in files:
            cached = self.cache.get(f.path, f.content)
            if cached:
                cache_hits += 1
                logger.debug(f"[{scan_id}] Cache hit: {f.path}")
                violations.extend(cached.violations)
                if cached.parse_errors:
                    parse_errors[f.path] = cached.parse_errors
                continue

            result = self.rule_engine.run({f.path: f.content})
            if f.path in result.skipped_files:
                skipped.append(f.path)
                continue
            file_errors = result.parse_errors.get(f.path, [])
            if file_errors:
                parse_errors[f.path] = file_errors
            violations.extend(result.violations)
            self.cache.put(f.path, f.content, result.violations, file_errors)

        elapsed_ms = (time.monotonic() - start_time) * 1000
        scanned = len(files) - len(skipped)
        logger.info(
            f"[{scan_id}] {len(violations)} violations in {scanned} files "
            f"({cache_hits} cached, {len(skipped)} skipped, {elapsed_ms:.1f}ms)"
        )

        audit = AuditEntry(
            scan_id=scan_id,
            files_scanned=scanned,
            files_skipped=len(skipped),
            violations_found=len(violations),
            cache_hits=cache_hits,
            duration_ms=round(elapsed_ms, 2),
        )
        report = ScanReport(
            issues=[_to_issue(i, v) for i, v in enumerate(violations, start=1)],
            files_scanned=scanned,
            skipped_files=skipped,
            parse_errors=parse_errors,
            rules_executed=list(self.rule_engine.rules),
            summary=_summarize(violations, scanned),
            audit=audit,
        )
        return ScanResponse(message="scan_complete", scan_id=scan_id, report=report)


def _to_issue(index: int, violation: RuleViolation) -> Issue:
    return Issue(
        id=f"{violation.rule_id}-{index}",
        severity=violation.severity.value,
        file=violation.file,
        line=violation.line,
        column=violation.column,
        end_line=violation.end_line,
        end_column=violation.end_column,
        rule_id=violation.rule_id,
        message_id=violation.message_id,
        issue=violation.title,
        explanation=violation.description,
        function=violation.affected_function,
        evidence=violation.evidence,
    )


def _summarize(violations: list[RuleViolation], files_scanned: int) -> str:
    if not violations:
        return f"No un-awaited async calls found in {files_scanned} file(s)."
    calls = sum(1 for v in violations if v.message_id == "asyncCallNoAwait")
    functions = sum(1 for v in violations if v.message_id == "noAwaitBeforeReturnPromise")
    return (
        f"Found {calls} un-awaited async call(s) in {functions} async function(s) "
        f"across {files_scanned} file(s)."
    )
