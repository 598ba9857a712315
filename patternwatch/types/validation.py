"""Validation and quality types for PatternWatch."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any, Protocol


class ErrorType(StrEnum):
    INVALID = "invalid"
    REQUIRED = "required"
    TYPE = "type"
    EMPTY = "empty"
    ENUM = "enum"
    RANGE = "range"
    CUSTOM = "custom"


class WarningType(StrEnum):
    UNKNOWN = "unknown"
    COMPLEXITY = "complexity"
    DANGEROUS = "dangerous"
    LENGTH = "length"


class ValidationLayer(StrEnum):
    REQUIRED = "required"
    FIELDS = "fields"
    METADATA = "metadata"
    HEURISTICS = "heuristics"
    CUSTOM = "custom"


ROOT_FIELD = "<root>"


@dataclass
class FieldError:
    """A validity-blocking problem with one field (dotted path)."""

    field: str
    type: str  # ErrorType value, or whatever a custom rule reports
    message: str | None = None


@dataclass
class FieldWarning:
    """An advisory finding. Never affects validity."""

    field: str
    type: str  # WarningType value
    message: str | None = None


@dataclass
class LayerResult:
    """Result of running a single validation layer."""

    layer: ValidationLayer
    errors: list[FieldError] = field(default_factory=list)
    warnings: list[FieldWarning] = field(default_factory=list)

    @property
    def passed(self) -> bool:
        return not self.errors


@dataclass
class ValidationResult:
    """Aggregate result of validating one pattern. Both lists are always present."""

    is_valid: bool
    errors: list[FieldError] = field(default_factory=list)
    warnings: list[FieldWarning] = field(default_factory=list)

    def has_error(self, field_name: str | None = None, error_type: str | None = None) -> bool:
        return any(
            (field_name is None or e.field == field_name)
            and (error_type is None or e.type == error_type)
            for e in self.errors
        )

    def has_warning(self, field_name: str | None = None, warning_type: str | None = None) -> bool:
        return any(
            (field_name is None or w.field == field_name)
            and (warning_type is None or w.type == warning_type)
            for w in self.warnings
        )


@dataclass
class RuleOutcome:
    """What a custom rule returns. ``error`` is only read when ``is_valid`` is False."""

    is_valid: bool
    error: FieldError | None = None


class CustomRule(Protocol):
    """Protocol for organisation-specific validation extensions."""

    name: str

    def validate(self, pattern: Any) -> RuleOutcome | dict[str, Any] | bool: ...


@dataclass
class ValidationStats:
    """Summary of validating a batch of patterns."""

    total_patterns: int = 0
    valid_patterns: int = 0
    invalid_patterns: int = 0
    patterns_with_warnings: int = 0
    conflict_count: int = 0


# --- Quality assessment ---


@dataclass
class QualityCriteria:
    completeness: float = 0.0
    specificity: float = 0.0
    usefulness: float = 0.0


@dataclass
class QualitySuggestion:
    """Improvement hint, tagged with the criterion that scored low."""

    type: str
    message: str | None = None


@dataclass
class QualityAssessment:
    score: float
    criteria: QualityCriteria
    suggestions: list[QualitySuggestion] = field(default_factory=list)
