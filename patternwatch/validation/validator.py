"""Pattern validator -- runs validation layers in sequence, then custom rules.

Layer order:
1. Required -- every missing required field
2. Fields -- id/trigger/severity/category/text types
3. Metadata -- confidence, tags, occurrences, autoFix
4. Heuristics -- length, trigger complexity and dangerous shapes (warnings)
5. Custom -- registered extension rules

Only a ``None`` pattern short-circuits; every other input runs all layers.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import Any

from pydantic import BaseModel

from patternwatch.config import get_settings
from patternwatch.types.validation import (
    ROOT_FIELD,
    ErrorType,
    FieldError,
    FieldWarning,
    ValidationResult,
    ValidationStats,
)
from patternwatch.validation.layers.fields import FieldFormatValidator
from patternwatch.validation.layers.heuristics import HeuristicsValidator
from patternwatch.validation.layers.metadata import MetadataValidator
from patternwatch.validation.layers.required import RequiredFieldsValidator
from patternwatch.validation.rules import CustomRuleRegistry

logger = logging.getLogger("patternwatch.validation")


class PatternValidator:
    """Validates single patterns and batches of patterns."""

    def __init__(
        self,
        layers=None,
        max_text_length: int | None = None,
        max_group_depth: int | None = None,
    ):
        settings = get_settings()
        if max_text_length is None:
            max_text_length = settings.patternwatch_max_text_length
        if max_group_depth is None:
            max_group_depth = settings.patternwatch_max_group_depth
        self.layers = layers or [
            RequiredFieldsValidator(),
            FieldFormatValidator(),
            MetadataValidator(),
            HeuristicsValidator(
                max_text_length=max_text_length,
                max_group_depth=max_group_depth,
            ),
        ]
        self.rules = CustomRuleRegistry()

    def add_custom_rule(self, rule: Any) -> None:
        """Register an extension rule. Rules are never removed."""
        self.rules.add(rule)

    def validate_pattern(self, pattern: Any) -> ValidationResult:
        if pattern is None:
            return ValidationResult(
                is_valid=False,
                errors=[
                    FieldError(
                        field=ROOT_FIELD,
                        type=ErrorType.INVALID,
                        message="Pattern must not be null",
                    )
                ],
            )

        errors: list[FieldError] = []
        warnings: list[FieldWarning] = []

        for validator in self.layers:
            try:
                result = validator.validate(pattern)
            except Exception as e:
                # Exotic input is reported as invalid, never raised
                logger.warning(f"{type(validator).__name__} failed: {e}")
                errors.append(FieldError(field=ROOT_FIELD, type=ErrorType.INVALID, message=str(e)))
                continue
            errors.extend(result.errors)
            warnings.extend(result.warnings)

        custom = self.rules.validate(pattern)
        errors.extend(custom.errors)

        return ValidationResult(is_valid=not errors, errors=errors, warnings=warnings)

    def validate_update(self, pattern: Any, updates: Mapping[str, Any]) -> ValidationResult:
        """Re-validate a pattern with a shallow update applied (pattern edits)."""
        if pattern is None:
            return self.validate_pattern(None)
        if isinstance(pattern, BaseModel):
            updated = pattern.model_copy(update=dict(updates))
        elif isinstance(pattern, Mapping):
            updated = {**pattern, **updates}
        else:
            updated = {**vars(pattern), **updates}
        return self.validate_pattern(updated)

    def validation_stats(self, patterns: Iterable[Any]) -> ValidationStats:
        """Validate a batch and count conflicts across it."""
        from patternwatch.conflicts import ConflictDetector

        items = list(patterns)
        stats = ValidationStats(total_patterns=len(items))
        for pattern in items:
            result = self.validate_pattern(pattern)
            if result.is_valid:
                stats.valid_patterns += 1
            else:
                stats.invalid_patterns += 1
            if result.warnings:
                stats.patterns_with_warnings += 1

        stats.conflict_count = len(ConflictDetector().detect_conflicts(items))
        logger.info(
            f"Validated {stats.total_patterns} patterns: {stats.valid_patterns} valid, "
            f"{stats.invalid_patterns} invalid, {stats.conflict_count} conflicts"
        )
        return stats
