"""PatternWatch type system — domain-segmented type definitions.

Import all types from this package:
    from patternwatch.types import Pattern, ValidationResult, ConflictReport

Or import from specific submodules:
    from patternwatch.types.core import Severity, Category
    from patternwatch.types.validation import FieldError, QualityAssessment
"""

from __future__ import annotations

# --- conflicts.py: conflict detection output ---
from patternwatch.types.conflicts import ConflictReport

# --- core.py: enums ---
from patternwatch.types.core import (
    KNOWN_CATEGORIES,
    KNOWN_SEVERITIES,
    Category,
    ConflictType,
    Severity,
)

# --- patterns.py: pattern and failure models ---
from patternwatch.types.patterns import (
    AutoFix,
    FailureContext,
    Pattern,
    PatternContext,
    PatternMetadata,
    PatternStore,
    TestFailure,
)

# --- validation.py: validation and quality results ---
from patternwatch.types.validation import (
    ROOT_FIELD,
    CustomRule,
    ErrorType,
    FieldError,
    FieldWarning,
    LayerResult,
    QualityAssessment,
    QualityCriteria,
    QualitySuggestion,
    RuleOutcome,
    ValidationLayer,
    ValidationResult,
    ValidationStats,
    WarningType,
)

__all__ = [
    # core
    "KNOWN_CATEGORIES",
    "KNOWN_SEVERITIES",
    "Category",
    "ConflictType",
    "Severity",
    # patterns
    "AutoFix",
    "FailureContext",
    "Pattern",
    "PatternContext",
    "PatternMetadata",
    "PatternStore",
    "TestFailure",
    # validation
    "ROOT_FIELD",
    "CustomRule",
    "ErrorType",
    "FieldError",
    "FieldWarning",
    "LayerResult",
    "QualityAssessment",
    "QualityCriteria",
    "QualitySuggestion",
    "RuleOutcome",
    "ValidationLayer",
    "ValidationResult",
    "ValidationStats",
    "WarningType",
    # conflicts
    "ConflictReport",
]
