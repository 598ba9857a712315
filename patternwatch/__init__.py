"""PatternWatch — validate, mine and cross-check diagnostic patterns.

    from patternwatch import analyze_failures, validate_pattern, detect_conflicts

    candidates = analyze_failures(failures)
    accepted = [p for p in candidates if validate_pattern(p).is_valid]
    conflicts = check_conflicts(accepted[0], library)
"""

from __future__ import annotations

from patternwatch.analyzer import PatternAnalyzer, analyze_failures
from patternwatch.autofix import generate_auto_fix
from patternwatch.conflicts import ConflictDetector, check_conflicts, detect_conflicts
from patternwatch.quality import QualityAssessor, assess_quality
from patternwatch.signatures import error_signature
from patternwatch.trigger import Trigger, TriggerError
from patternwatch.types import (
    AutoFix,
    Category,
    ConflictReport,
    ConflictType,
    FailureContext,
    FieldError,
    FieldWarning,
    Pattern,
    PatternContext,
    PatternMetadata,
    QualityAssessment,
    RuleOutcome,
    Severity,
    TestFailure,
    ValidationResult,
)
from patternwatch.validation import (
    PatternValidator,
    add_custom_rule,
    validate_pattern,
    validate_update,
    validation_stats,
)

__all__ = [
    # engine
    "ConflictDetector",
    "PatternAnalyzer",
    "PatternValidator",
    "QualityAssessor",
    "Trigger",
    "TriggerError",
    # functions
    "add_custom_rule",
    "analyze_failures",
    "assess_quality",
    "check_conflicts",
    "detect_conflicts",
    "error_signature",
    "generate_auto_fix",
    "validate_pattern",
    "validate_update",
    "validation_stats",
    # types
    "AutoFix",
    "Category",
    "ConflictReport",
    "ConflictType",
    "FailureContext",
    "FieldError",
    "FieldWarning",
    "Pattern",
    "PatternContext",
    "PatternMetadata",
    "QualityAssessment",
    "RuleOutcome",
    "Severity",
    "TestFailure",
    "ValidationResult",
]
