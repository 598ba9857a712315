"""Conflict detection across a pattern library.

Three relationships are reported:

- duplicate: same id, or identical content under different ids
- trigger-overlap: both triggers fire on some common input
- contradiction: overlapping triggers whose messages give opposite guidance

Duplicate group members are not also reported as overlapping, and a
contradiction replaces the trigger-overlap report for the same pair.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any

from patternwatch.config import get_settings
from patternwatch.fields import MISSING, get_field
from patternwatch.trigger import Trigger, TriggerError
from patternwatch.types.conflicts import ConflictReport
from patternwatch.types.core import ConflictType

logger = logging.getLogger("patternwatch.conflicts")

# Shortest literal text that counts as evidence of overlap
MIN_SHARED_LITERAL = 3

_NEGATIVE = re.compile(
    r"\b(?:avoid|never|don'?t|do\s+not|(?:should|must)(?:\s+not|n'?t)|remove|disable"
    r"|delete|stop|forbid|disallow|exclude)\b",
    re.IGNORECASE,
)
_POSITIVE = re.compile(
    r"\b(?:use|always|prefer|add|enable|keep|include|allow|require|should|must|do)\b",
    re.IGNORECASE,
)
# Negated objects ("unhandled", "pointless") flip the guidance once more
_NEGATED_OBJECT = re.compile(
    r"\bun[a-z]{2,}(?:ed|ing)\b|\buncaught\b|\b[a-z]{3,}less\b", re.IGNORECASE
)
_TOKEN = re.compile(r"[a-z][a-z0-9_]+")
_STOPWORDS = set(
    "the and for with this that are was not you your instead "
    "when from into its all any can has have".split()
)


@dataclass(eq=False)
class _Entry:
    index: int
    id: str
    raw: Any
    trigger: Trigger | None
    message: str
    has_id: bool = True
    probes: list[str] = field(default_factory=list)


class ConflictDetector:
    """Finds duplicate, overlapping and contradictory patterns."""

    def __init__(self, probe_limit: int | None = None):
        if probe_limit is None:
            probe_limit = get_settings().patternwatch_overlap_probe_limit
        self.probe_limit = probe_limit

    def detect_conflicts(self, patterns: Iterable[Any] | None) -> list[ConflictReport]:
        entries = self._entries(patterns or [])
        if not entries:
            return []
        conflicts = self._scan(entries)
        logger.info(f"Scanned {len(entries)} patterns: {len(conflicts)} conflicts")
        return conflicts

    def check_conflicts(self, candidate: Any, library: Iterable[Any]) -> list[ConflictReport]:
        """Conflicts between one candidate and an existing library."""
        entries = self._entries([candidate, *library])
        return self._scan(entries, focus=entries[0])

    # --- scanning ---

    def _entries(self, patterns: Iterable[Any]) -> list[_Entry]:
        entries: list[_Entry] = []
        for index, pattern in enumerate(patterns):
            raw_id = get_field(pattern, "id")
            has_id = raw_id is not MISSING and raw_id is not None
            message = get_field(pattern, "message")
            try:
                trigger = Trigger.coerce(get_field(pattern, "trigger"))
            except TriggerError as e:
                logger.debug(f"Pattern #{index} has an unusable trigger, skipping its pairs: {e}")
                trigger = None

            entry = _Entry(
                index=index,
                id=str(raw_id) if has_id else f"#{index}",
                raw=pattern,
                trigger=trigger,
                message=message if isinstance(message, str) else "",
                has_id=has_id,
            )
            if trigger is not None:
                try:
                    entry.probes = trigger.probes(self.probe_limit)
                except Exception as e:
                    logger.debug(f"Could not build probes for {entry.id}: {e}")
            entries.append(entry)
        return entries

    def _scan(self, entries: list[_Entry], focus: _Entry | None = None) -> list[ConflictReport]:
        conflicts, grouped = self._duplicates(entries, focus)

        for i, a in enumerate(entries):
            for b in entries[i + 1 :]:
                if focus is not None and focus not in (a, b):
                    continue
                if a.trigger is None or b.trigger is None:
                    continue
                try:
                    same_group = frozenset((a.index, b.index)) in grouped
                    report = self._relate(a, b, same_group)
                except Exception as e:
                    logger.warning(f"Conflict check failed for {a.id} / {b.id}: {e}")
                    continue
                if report:
                    conflicts.append(report)
        return conflicts

    def _duplicates(
        self, entries: list[_Entry], focus: _Entry | None
    ) -> tuple[list[ConflictReport], set[frozenset[int]]]:
        """Duplicate groups by id and by content. Returns reports and grouped index pairs."""
        by_id: dict[str, list[_Entry]] = {}
        by_content: dict[tuple, list[_Entry]] = {}
        for entry in entries:
            if entry.has_id:
                by_id.setdefault(entry.id, []).append(entry)
            key = _content_key(entry)
            if key is not None:
                by_content.setdefault(key, []).append(entry)

        reports: list[ConflictReport] = []
        grouped: set[frozenset[int]] = set()

        for pattern_id, members in by_id.items():
            if len(members) < 2 or (focus is not None and focus not in members):
                continue
            reports.append(
                ConflictReport(
                    type=ConflictType.DUPLICATE,
                    patterns=[m.id for m in members],
                    description=f"{len(members)} patterns share the id '{pattern_id}'",
                    details={"key": "id"},
                )
            )
            grouped.update(_pairs(members))

        for members in by_content.values():
            ids = list(dict.fromkeys(m.id for m in members))
            if len(ids) < 2 or (focus is not None and focus not in members):
                continue
            reports.append(
                ConflictReport(
                    type=ConflictType.DUPLICATE,
                    patterns=ids,
                    description=f"Patterns {', '.join(ids)} have identical content",
                    details={"key": "content"},
                )
            )
            grouped.update(_pairs(members))

        return reports, grouped

    def _relate(self, a: _Entry, b: _Entry, same_group: bool) -> ConflictReport | None:
        reason = self._overlap_reason(a, b)
        if reason is None:
            return None

        shared = _contradicting_subject(a.message, b.message)
        if shared:
            return ConflictReport(
                type=ConflictType.CONTRADICTION,
                patterns=[a.id, b.id],
                description=(
                    f"'{a.id}' and '{b.id}' fire on the same input but give opposite "
                    f"guidance about {', '.join(shared)}"
                ),
                details={"overlap": reason, "subject": shared},
            )
        if same_group:
            return None
        return ConflictReport(
            type=ConflictType.TRIGGER_OVERLAP,
            patterns=[a.id, b.id],
            description=f"Triggers of '{a.id}' and '{b.id}' match common input ({reason})",
            details={"overlap": reason},
        )

    def _overlap_reason(self, a: _Entry, b: _Entry) -> str | None:
        ta, tb = a.trigger, b.trigger
        if ta.source == tb.source or (
            ta.ignore_case and tb.ignore_case and ta.source.lower() == tb.source.lower()
        ):
            return "identical-source"
        if any(tb.search(p) for p in a.probes) or any(ta.search(p) for p in b.probes):
            return "probe-match"
        if _literals_contained(ta, tb) or _literals_contained(tb, ta):
            return "literal-containment"
        return None


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _content_key(entry: _Entry) -> tuple | None:
    if entry.trigger is None:
        return None
    values = []
    for name in ("name", "description", "category", "severity", "message"):
        value = get_field(entry.raw, name)
        values.append(str(value) if value is not MISSING else None)
    return (*values, entry.trigger.source, entry.trigger.flags)


def _pairs(members: list[_Entry]) -> set[frozenset[int]]:
    return {
        frozenset((x.index, y.index)) for i, x in enumerate(members) for y in members[i + 1 :]
    }


def _literals_contained(inner: Trigger, outer: Trigger) -> bool:
    """Every required literal of ``inner`` is required by ``outer`` too."""
    runs = inner.literals
    if sum(len(r) for r in runs) < MIN_SHARED_LITERAL:
        return False
    haystack = "\0".join(outer.literals)
    if inner.ignore_case:
        return all(r.lower() in haystack.lower() for r in runs)
    return all(r in haystack for r in runs)


def _polarity(message: str) -> int:
    """+1 for positive guidance, -1 for negative, 0 for neither. Double negatives cancel."""
    negations = len(_NEGATIVE.findall(message)) + len(_NEGATED_OBJECT.findall(message))
    if negations:
        return -1 if negations % 2 else 1
    if _POSITIVE.search(message):
        return 1
    return 0


def _subject(message: str) -> set[str]:
    stripped = _POSITIVE.sub(" ", _NEGATIVE.sub(" ", message)).lower()
    return {t for t in _TOKEN.findall(stripped) if len(t) >= 3 and t not in _STOPWORDS}


def _contradicting_subject(first: str, second: str) -> list[str]:
    """Shared subject words when the messages point in opposite directions."""
    if _polarity(first) * _polarity(second) >= 0:
        return []
    return sorted(_subject(first) & _subject(second))


def detect_conflicts(patterns: Iterable[Any] | None) -> list[ConflictReport]:
    return ConflictDetector().detect_conflicts(patterns)


def check_conflicts(candidate: Any, library: Iterable[Any]) -> list[ConflictReport]:
    return ConflictDetector().check_conflicts(candidate, library)
