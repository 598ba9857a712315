"""Required-field validator -- every missing required field is reported."""

from __future__ import annotations

from patternwatch.fields import get_field, is_present
from patternwatch.types.validation import ErrorType, FieldError, LayerResult, ValidationLayer

REQUIRED_FIELDS = ("id", "name", "description", "category", "severity", "trigger", "message")


class RequiredFieldsValidator:
    """Reports one ``required`` error per absent field (missing or None)."""

    def validate(self, pattern) -> LayerResult:
        errors = [
            FieldError(
                field=name,
                type=ErrorType.REQUIRED,
                message=f"Required field '{name}' is missing",
            )
            for name in REQUIRED_FIELDS
            if not is_present(get_field(pattern, name))
        ]
        return LayerResult(layer=ValidationLayer.REQUIRED, errors=errors)
