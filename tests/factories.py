"""Builder functions for test data — avoids brittle, duplicated fixture dicts."""

from __future__ import annotations

import re
from datetime import UTC, datetime
from typing import Any

from patternwatch.types import (
    AutoFix,
    FailureContext,
    Pattern,
    PatternContext,
    PatternMetadata,
    Severity,
    TestFailure,
)


def make_metadata(**overrides) -> PatternMetadata:
    defaults = {
        "source": "unit-test",
        "confidence": 0.85,
        "tags": ["test", "validation"],
        "created": datetime(2026, 1, 5, 9, 0, tzinfo=UTC),
        "last_seen": datetime(2026, 1, 6, 9, 0, tzinfo=UTC),
        "occurrences": 1,
    }
    defaults.update(overrides)
    return PatternMetadata(**defaults)


def make_pattern(**overrides) -> Pattern:
    defaults = {
        "id": "valid-pattern",
        "name": "Valid Test Pattern",
        "description": "A valid pattern for testing",
        "category": "code-quality",
        "severity": Severity.WARNING,
        "trigger": re.compile(r"test\s+pattern", re.IGNORECASE),
        "message": "This is a valid test pattern",
        "metadata": make_metadata(),
    }
    defaults.update(overrides)
    return Pattern(**defaults)


def make_pattern_dict(**overrides) -> dict[str, Any]:
    """Plain-mapping pattern, the shape hand-built or deserialised input arrives in."""
    defaults: dict[str, Any] = {
        "id": "valid-pattern",
        "name": "Valid Test Pattern",
        "description": "A valid pattern for testing",
        "category": "code-quality",
        "severity": "warning",
        "trigger": re.compile(r"test\s+pattern", re.IGNORECASE),
        "message": "This is a valid test pattern",
        "metadata": {
            "source": "unit-test",
            "confidence": 0.85,
            "tags": ["test", "validation"],
            "created": datetime(2026, 1, 5, 9, 0, tzinfo=UTC),
            "lastSeen": datetime(2026, 1, 6, 9, 0, tzinfo=UTC),
            "occurrences": 1,
        },
    }
    defaults.update(overrides)
    return defaults


def make_rich_metadata(**overrides) -> PatternMetadata:
    defaults = {
        "confidence": 0.95,
        "tags": ["well-tagged", "comprehensive"],
        "occurrences": 100,
        "auto_fix": AutoFix(enabled=True, strategy="replace", confidence=0.8),
        "context": PatternContext(
            common_locations=["src/utils", "src/components"],
            code_examples=["example1", "example2"],
        ),
    }
    defaults.update(overrides)
    return make_metadata(**defaults)


def make_failure(**overrides) -> TestFailure:
    context = overrides.pop("context", None)
    defaults = {
        "test": 'TypeError: Cannot read property "name" of undefined',
        "error": 'TypeError: Cannot read property "name" of undefined at getUserName',
        "file": "src/user.ts",
        "context": context or FailureContext(timestamp=datetime(2026, 1, 5, 9, 0, tzinfo=UTC)),
    }
    defaults.update(overrides)
    return TestFailure(**defaults)


def make_failure_context(**overrides) -> FailureContext:
    defaults: dict[str, Any] = {"timestamp": datetime(2026, 1, 5, 9, 0, tzinfo=UTC)}
    defaults.update(overrides)
    return FailureContext(**defaults)
