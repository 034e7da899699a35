"""Record validation engine.

A record is valid when it has the expected number of columns (if configured)
and every configured rule passes. Rules reference columns by 1-based index.
Malformed rules (out-of-range column, invalid regex) reject the records they
apply to instead of aborting the run; each problem is logged once.
"""

from __future__ import annotations

import logging
import re
from typing import Dict, List, Optional, Pattern, Sequence, Set

from filefilter.config import FilterConfig, ValidationRule

logger = logging.getLogger(__name__)


class ValidationEngine:
    """Applies the configured rules to one record at a time.

    One engine is scoped to a single pipeline run; it is not thread-safe.
    """

    def __init__(self, config: FilterConfig):
        self.expected_total_column = config.expected_total_column
        self.rules: List[ValidationRule] = list(config.validations)
        self._patterns: Dict[int, Optional[Pattern[str]]] = self._compile_patterns(self.rules)
        self._warned_columns: Set[int] = set()

    @staticmethod
    def _compile_patterns(rules: List[ValidationRule]) -> Dict[int, Optional[Pattern[str]]]:
        patterns: Dict[int, Optional[Pattern[str]]] = {}
        for idx, rule in enumerate(rules):
            if not rule.regex:
                continue
            try:
                patterns[idx] = re.compile(rule.regex)
            except re.error as exc:
                # Every record this rule applies to will be rejected
                logger.error(f"Invalid regex pattern for column {rule.column}: {rule.regex!r} ({exc})")
                patterns[idx] = None
        return patterns

    def validate(self, values: Sequence[str]) -> bool:
        """Return True if the record passes every check."""
        return self.failed_rule(values) is None

    def failed_rule(self, values: Sequence[str]) -> Optional[str]:
        """Return a short description of the first failing check, or None."""
        if self.expected_total_column is not None and len(values) != self.expected_total_column:
            logger.debug(
                f"Column count mismatch: expected={self.expected_total_column}, actual={len(values)}"
            )
            return f"column count {len(values)} != {self.expected_total_column}"

        for idx, rule in enumerate(self.rules):
            reason = self._check_rule(idx, rule, values)
            if reason is not None:
                return reason
        return None

    def _check_rule(self, idx: int, rule: ValidationRule, values: Sequence[str]) -> Optional[str]:
        column = rule.column
        if column < 1 or column > len(values):
            self._warn_invalid_column(idx, rule, len(values))
            return f"column {column} out of range"

        value = values[column - 1]
        if value is None:
            value = ""

        if rule.not_empty and not value.strip():
            logger.debug(f"Column {column} failed not_empty check")
            return f"column {column} is empty"

        if rule.value_in_list and value not in rule.value_in_list:
            logger.debug(
                f"Column {column} failed value_in_list check: value={value!r}, "
                f"expected_values={sorted(rule.value_in_list)}"
            )
            return f"column {column} value {value!r} not in list"

        if rule.regex:
            pattern = self._patterns.get(idx)
            if pattern is None:
                return f"column {column} has an invalid regex"
            if pattern.fullmatch(value) is None:
                logger.debug(f"Column {column} failed regex check: value={value!r}, pattern={rule.regex!r}")
                return f"column {column} value {value!r} does not match {rule.regex!r}"

        return None

    def _warn_invalid_column(self, idx: int, rule: ValidationRule, width: int) -> None:
        if rule.column < 1:
            if idx not in self._warned_columns:
                self._warned_columns.add(idx)
                logger.warning(f"Invalid column index: {rule.column} (columns are 1-based)")
            return
        logger.debug(f"Column {rule.column} out of range for record with {width} column(s)")
