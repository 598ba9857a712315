"""Conflict report types for PatternWatch."""

from __future__ import annotations

from dataclasses import dataclass, field

from patternwatch.types.core import ConflictType


@dataclass
class ConflictReport:
    """A detected relationship between two or more patterns in a working set."""

    type: ConflictType
    patterns: list[str]
    description: str = ""
    details: dict = field(default_factory=dict)
