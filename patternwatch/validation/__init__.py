"""PatternWatch validation system.

Module-level functions share one process-wide validator, so custom rules
registered with ``add_custom_rule`` apply to every later ``validate_pattern``
call. Build a ``PatternValidator`` directly for an isolated rule set.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Any

from patternwatch.quality import assess_quality
from patternwatch.types.validation import ValidationResult, ValidationStats
from patternwatch.validation.validator import PatternValidator


@lru_cache
def get_validator() -> PatternValidator:
    """Get the shared default validator."""
    return PatternValidator()


def validate_pattern(pattern: Any) -> ValidationResult:
    return get_validator().validate_pattern(pattern)


def add_custom_rule(rule: Any) -> None:
    get_validator().add_custom_rule(rule)


def validate_update(pattern: Any, updates: dict[str, Any]) -> ValidationResult:
    return get_validator().validate_update(pattern, updates)


def validation_stats(patterns: list[Any]) -> ValidationStats:
    return get_validator().validation_stats(patterns)


__all__ = [
    "PatternValidator",
    "add_custom_rule",
    "assess_quality",
    "get_validator",
    "validate_pattern",
    "validate_update",
    "validation_stats",
]
