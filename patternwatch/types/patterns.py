"""Pattern and failure data model for PatternWatch.

Optional nested metadata is modelled explicitly: every sub-field of
``PatternMetadata``, ``AutoFix`` and ``PatternContext`` is optional so a
partially populated pattern never forces an all-or-nothing check.
Public camelCase names (``autoFix``, ``lastSeen``, ...) are accepted as
aliases when building models from plain dicts.
"""

from __future__ import annotations

import re
from datetime import UTC, datetime
from typing import Any, Protocol

from pydantic import BaseModel, Field, field_validator

from patternwatch.types.core import Severity


def _utcnow() -> datetime:
    return datetime.now(UTC)


# --- Pattern Models ---


class AutoFix(BaseModel):
    """Mechanical remediation hint attached to a pattern."""

    enabled: bool = False
    strategy: str | None = None
    confidence: float | None = None

    model_config = {"populate_by_name": True}


class PatternContext(BaseModel):
    """Where the underlying issue was observed."""

    common_locations: list[str] = Field(default=[], alias="commonLocations")
    code_examples: list[str] = Field(default=[], alias="codeExamples")

    model_config = {"populate_by_name": True}


class PatternMetadata(BaseModel):
    """Provenance and statistics for a pattern. Every field is optional."""

    source: str | None = None
    confidence: float | None = None
    tags: list[str] | None = None
    created: datetime | None = None
    last_seen: datetime | None = Field(default=None, alias="lastSeen")
    occurrences: int | None = None
    auto_fix: AutoFix | None = Field(default=None, alias="autoFix")
    context: PatternContext | None = None

    model_config = {"populate_by_name": True}


class Pattern(BaseModel):
    """A diagnostic rule: a trigger regex plus the guidance shown on match."""

    id: str
    name: str
    description: str
    category: str  # Category value; unknown values are allowed but flagged
    severity: Severity
    trigger: re.Pattern[str]
    message: str
    metadata: PatternMetadata | None = None

    model_config = {"populate_by_name": True}

    @field_validator("trigger", mode="before")
    @classmethod
    def reject_string_trigger(cls, v):
        """Triggers are compiled regexes; plain strings are never compiled implicitly."""
        if isinstance(v, (str, bytes)):
            raise ValueError("trigger must be a compiled regular expression, not a string")
        return v

    @property
    def auto_fix(self) -> AutoFix | None:
        return self.metadata.auto_fix if self.metadata else None


# --- Failure Models ---


class FailureContext(BaseModel):
    """Context captured alongside a failure. Only ``timestamp`` is always set."""

    timestamp: datetime = Field(default_factory=_utcnow)
    code: str | None = None
    stack: str | None = Field(default=None, alias="stackTrace")
    line: int | None = None
    column: int | None = None

    model_config = {"populate_by_name": True}


class TestFailure(BaseModel):
    """A raw test/runtime failure observation.

    Fields are nullable so malformed records can still be represented;
    the analyzer drops records without ``test``, ``error`` or ``file``.
    """

    __test__ = False  # not a pytest test class

    test: str | None = None
    error: str | None = None
    file: str | None = None
    duration: float | None = None
    context: FailureContext = Field(default_factory=FailureContext)


# --- Collaborator Protocols ---


class PatternStore(Protocol):
    """Persistence collaborator used by learning orchestrators (not implemented here)."""

    def storePattern(self, pattern: Pattern, failure: TestFailure) -> Any: ...

    def getPatterns(self) -> list[Pattern]: ...

    def findSimilarPatterns(self, failure: TestFailure) -> list[Pattern]: ...

    def getMetrics(self) -> dict[str, Any]: ...
