"""Core enums for PatternWatch."""

from __future__ import annotations

from enum import StrEnum

# --- Enums ---


class Severity(StrEnum):
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


class Category(StrEnum):
    CODE_QUALITY = "code-quality"
    PERFORMANCE = "performance"
    SECURITY = "security"
    TYPE_SAFETY = "type-safety"
    ASYNC = "async"
    SYNTAX = "syntax"
    LOGIC = "logic"
    BEST_PRACTICES = "best-practices"
    GENERAL = "general"  # analyzer fallback bucket


class ConflictType(StrEnum):
    DUPLICATE = "duplicate"
    TRIGGER_OVERLAP = "trigger-overlap"
    CONTRADICTION = "contradiction"


KNOWN_SEVERITIES: frozenset[str] = frozenset(s.value for s in Severity)
KNOWN_CATEGORIES: frozenset[str] = frozenset(c.value for c in Category)
