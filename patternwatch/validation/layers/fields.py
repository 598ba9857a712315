"""Field format validator -- types, emptiness and enumerations of top-level fields.

Runs independently of the required-field layer: absent fields are skipped
here, present ones are checked even when other fields are missing.
"""

from __future__ import annotations

import re

from patternwatch.fields import get_field, is_present
from patternwatch.types.core import KNOWN_CATEGORIES, KNOWN_SEVERITIES
from patternwatch.types.validation import (
    ErrorType,
    FieldError,
    FieldWarning,
    LayerResult,
    ValidationLayer,
    WarningType,
)

_TEXT_FIELDS = ("name", "description", "message")


class FieldFormatValidator:
    """Validates id, trigger, severity, category and text field types."""

    def validate(self, pattern) -> LayerResult:
        errors: list[FieldError] = []
        warnings: list[FieldWarning] = []

        pattern_id = get_field(pattern, "id")
        if is_present(pattern_id):
            if not isinstance(pattern_id, str):
                errors.append(
                    FieldError(field="id", type=ErrorType.TYPE, message="id must be a string")
                )
            elif pattern_id == "":
                errors.append(
                    FieldError(field="id", type=ErrorType.EMPTY, message="id must not be empty")
                )

        for name in _TEXT_FIELDS:
            value = get_field(pattern, name)
            if is_present(value) and not isinstance(value, str):
                errors.append(
                    FieldError(field=name, type=ErrorType.TYPE, message=f"{name} must be a string")
                )

        trigger = get_field(pattern, "trigger")
        if is_present(trigger) and not (
            isinstance(trigger, re.Pattern) and isinstance(trigger.pattern, str)
        ):
            errors.append(
                FieldError(
                    field="trigger",
                    type=ErrorType.TYPE,
                    message=(
                        "trigger must be a compiled regular expression, "
                        f"got {type(trigger).__name__}"
                    ),
                )
            )

        severity = get_field(pattern, "severity")
        if is_present(severity) and not (
            isinstance(severity, str) and severity in KNOWN_SEVERITIES
        ):
            errors.append(
                FieldError(
                    field="severity",
                    type=ErrorType.ENUM,
                    message=f"severity must be one of: {', '.join(sorted(KNOWN_SEVERITIES))}",
                )
            )

        category = get_field(pattern, "category")
        if is_present(category) and not (
            isinstance(category, str) and category in KNOWN_CATEGORIES
        ):
            warnings.append(
                FieldWarning(
                    field="category",
                    type=WarningType.UNKNOWN,
                    message=f"Unknown category '{category}'",
                )
            )

        return LayerResult(layer=ValidationLayer.FIELDS, errors=errors, warnings=warnings)
