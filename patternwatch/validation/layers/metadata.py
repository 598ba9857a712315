"""Metadata validator -- each present metadata sub-field is checked on its own.

Confidence values are reported as ``range`` errors whether they are out of
bounds or not numbers at all; a confidence that is not a number in [0, 1]
is out of range either way.
"""

from __future__ import annotations

from collections.abc import Sequence

from patternwatch.fields import (
    MISSING,
    get_field,
    in_unit_range,
    is_number,
    is_present,
    is_structured,
)
from patternwatch.types.validation import ErrorType, FieldError, LayerResult, ValidationLayer


class MetadataValidator:
    """Validates optional metadata: confidence, tags, occurrences and autoFix."""

    def validate(self, pattern) -> LayerResult:
        errors: list[FieldError] = []

        metadata = get_field(pattern, "metadata")
        if not is_present(metadata):
            return LayerResult(layer=ValidationLayer.METADATA)

        if not is_structured(metadata):
            errors.append(
                FieldError(
                    field="metadata", type=ErrorType.TYPE, message="metadata must be an object"
                )
            )
            return LayerResult(layer=ValidationLayer.METADATA, errors=errors)

        _check_confidence(get_field(metadata, "confidence"), "metadata.confidence", errors)

        tags = get_field(metadata, "tags")
        if is_present(tags):
            if not _is_list(tags):
                errors.append(
                    FieldError(
                        field="metadata.tags", type=ErrorType.TYPE, message="tags must be a list"
                    )
                )
            elif not all(isinstance(tag, str) for tag in tags):
                errors.append(
                    FieldError(
                        field="metadata.tags",
                        type=ErrorType.TYPE,
                        message="tags must contain only strings",
                    )
                )

        occurrences = get_field(metadata, "occurrences")
        if is_present(occurrences):
            if not isinstance(occurrences, int) or isinstance(occurrences, bool):
                errors.append(
                    FieldError(
                        field="metadata.occurrences",
                        type=ErrorType.TYPE,
                        message="occurrences must be an integer",
                    )
                )
            elif occurrences < 0:
                errors.append(
                    FieldError(
                        field="metadata.occurrences",
                        type=ErrorType.RANGE,
                        message="occurrences must not be negative",
                    )
                )

        auto_fix = get_field(metadata, "autoFix", "auto_fix")
        if is_present(auto_fix):
            if not is_structured(auto_fix):
                errors.append(
                    FieldError(
                        field="metadata.autoFix",
                        type=ErrorType.TYPE,
                        message="autoFix must be an object",
                    )
                )
            else:
                _check_auto_fix(auto_fix, errors)

        return LayerResult(layer=ValidationLayer.METADATA, errors=errors)


def _check_auto_fix(auto_fix, errors: list[FieldError]) -> None:
    enabled = get_field(auto_fix, "enabled")
    if enabled is not MISSING and not isinstance(enabled, bool):
        errors.append(
            FieldError(
                field="metadata.autoFix.enabled",
                type=ErrorType.TYPE,
                message="autoFix.enabled must be a boolean",
            )
        )

    strategy = get_field(auto_fix, "strategy")
    if is_present(strategy) and not isinstance(strategy, str):
        errors.append(
            FieldError(
                field="metadata.autoFix.strategy",
                type=ErrorType.TYPE,
                message="autoFix.strategy must be a string",
            )
        )

    _check_confidence(get_field(auto_fix, "confidence"), "metadata.autoFix.confidence", errors)


def _check_confidence(value, field_path: str, errors: list[FieldError]) -> None:
    if value is MISSING:
        return
    if not in_unit_range(value):
        shown = value if is_number(value) else type(value).__name__
        errors.append(
            FieldError(
                field=field_path,
                type=ErrorType.RANGE,
                message=f"{field_path} must be a number between 0 and 1 (got {shown})",
            )
        )


def _is_list(value) -> bool:
    return isinstance(value, Sequence) and not isinstance(value, (str, bytes))
