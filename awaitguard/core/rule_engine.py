"""
Rule Engine — Orchestrates all registered rules.

Parses each submitted file with the frontend for its language and runs all
registered rules against the parsed modules. Pure, deterministic analysis.
"""

from __future__ import annotations

import logging
import time
from typing import Callable

from awaitguard.core.parser import UnsupportedLanguageError, parse_file
from awaitguard.core.rules import async_no_await
from awaitguard.models.ast_models import ParsedModule
from awaitguard.models.rule_models import RuleMeta, RuleResult, RuleViolation, Severity

logger = logging.getLogger("awaitguard.core.rule_engine")

# Type for a rule check function
RuleCheckFn = Callable[[ParsedModule], list[RuleViolation]]

# Registry of all rules
RULE_REGISTRY: dict[str, RuleCheckFn] = {
    async_no_await.RULE_ID: async_no_await.check,
}

RULE_META: dict[str, RuleMeta] = {
    async_no_await.RULE_ID: async_no_await.META,
}


class RuleEngine:
    """
    Deterministic rule engine.

    Rules are pure functions of a parsed module — no network, no randomness,
    so re-running on unchanged input yields the same ordered violations.
    """

    def __init__(self, rules: dict[str, RuleCheckFn] | None = None) -> None:
        self.rules = rules or RULE_REGISTRY

    def parse(self, files: dict[str, str]) -> tuple[dict[str, ParsedModule], list[str]]:
        """Parse sources; returns (modules, skipped paths)."""
        modules: dict[str, ParsedModule] = {}
        skipped: list[str] = []
        for file_path, source in files.items():
            try:
                modules[file_path] = parse_file(source, file_path)
            except UnsupportedLanguageError:
                logger.info("Skipping unsupported file %s", file_path)
                skipped.append(file_path)
        return modules, skipped

    def run(self, files: dict[str, str]) -> RuleResult:
        """
        Parse and check a set of source files.

        Args:
            files: Dict mapping file_path -> source text.

        Returns:
            RuleResult with all violations found.
        """
        start = time.monotonic()
        modules, skipped = self.parse(files)
        result = self.run_modules(modules)
        result.skipped_files = skipped
        result.scan_duration_ms = round((time.monotonic() - start) * 1000, 2)
        return result

    def run_modules(self, modules: dict[str, ParsedModule]) -> RuleResult:
        """Run all rules against already-parsed modules."""
        start = time.monotonic()
        all_violations: list[RuleViolation] = []
        rules_executed: list[str] = []
        parse_errors: dict[str, list[str]] = {}

        for file_path, module in modules.items():
            if module.parse_errors:
                logger.warning("Parse errors in %s: %s", file_path, module.parse_errors)
                parse_errors[file_path] = list(module.parse_errors)

        for rule_id, check_fn in self.rules.items():
            rules_executed.append(rule_id)
            for file_path, module in modules.items():
                if not module.ok:
                    continue
                try:
                    all_violations.extend(check_fn(module))
                except Exception as e:
                    # Rule failures should not crash the engine
                    logger.exception("Rule '%s' failed on %s", rule_id, file_path)
                    all_violations.append(
                        RuleViolation(
                            rule_id=rule_id,
                            severity=Severity.LOW,
                            file=file_path,
                            line=0,
                            title=f"Rule '{rule_id}' internal error",
                            description=f"Rule execution failed: {e}",
                            evidence=[f"Exception: {type(e).__name__}: {e}"],
                        )
                    )

        elapsed = (time.monotonic() - start) * 1000

        return RuleResult(
            violations=all_violations,
            rules_executed=rules_executed,
            total_files_scanned=len(modules),
            parse_errors=parse_errors,
            scan_duration_ms=round(elapsed, 2),
        )

    def run_single_rule(self, rule_id: str, module: ParsedModule) -> list[RuleViolation]:
        """Run a single rule against a single module."""
        if rule_id not in self.rules:
            raise ValueError(f"Unknown rule: {rule_id}")
        return self.rules[rule_id](module)
