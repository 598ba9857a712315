"""Failure analyzer -- mines candidate patterns from batches of test failures.

Failures are clustered by signature (error family + generalised message
shape, see ``patternwatch.signatures``). Each cluster becomes one pattern
whose trigger matches the shared shape, whose metadata records how often
and where the failure was seen, and whose confidence grows with the
cluster size and the richness of the captured context.
"""

from __future__ import annotations

import hashlib
import logging
import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from pydantic import ValidationError

from patternwatch.config import get_settings
from patternwatch.fields import get_field
from patternwatch.signatures import (
    error_family,
    error_signature,
    family_slug,
    shape_to_regex,
    strip_family,
)
from patternwatch.trigger import Trigger, TriggerError
from patternwatch.types.core import Category, Severity
from patternwatch.types.patterns import (
    AutoFix,
    Pattern,
    PatternContext,
    PatternMetadata,
    TestFailure,
)

logger = logging.getLogger("patternwatch.analyzer")

# Trigger shapes longer than this are clipped (the trigger still matches by prefix)
MAX_TRIGGER_SHAPE = 120

# Summed context richness at which captured context stops adding confidence
RICH_CONTEXT_SATURATION = 2.0


# ---------------------------------------------------------------------------
# Keyword rules
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class _Rule:
    regex: re.Pattern[str]
    name: str
    description: str
    category: Category
    severity: Severity
    auto_fix: AutoFix | None = None


_RULES: list[_Rule] = [
    _Rule(
        regex=re.compile(
            r"cannot read propert|cannot access propert|undefined is not an object"
            r"|'NoneType' object has no attribute",
            re.IGNORECASE,
        ),
        name="Null/Undefined Property Access",
        description="Accessing a property on a null or undefined value",
        category=Category.TYPE_SAFETY,
        severity=Severity.ERROR,
        auto_fix=AutoFix(enabled=True, strategy="null-guard", confidence=0.75),
    ),
    _Rule(
        regex=re.compile(r"ReferenceError|NameError|is not defined", re.IGNORECASE),
        name="Reference Error",
        description="Variable or function is not defined in scope",
        category=Category.GENERAL,
        severity=Severity.ERROR,
    ),
    _Rule(
        regex=re.compile(r"missing\s+semicolon|expected\s+['\"`]?;", re.IGNORECASE),
        name="Missing Semicolon",
        description="Statement is missing a terminating semicolon",
        category=Category.SYNTAX,
        severity=Severity.ERROR,
        auto_fix=AutoFix(enabled=True, strategy="insert-semicolon", confidence=0.85),
    ),
    _Rule(
        regex=re.compile(
            r"SyntaxError|unexpected\s+(?:token|end of input|indent|eof)|invalid syntax"
            r"|parse error",
            re.IGNORECASE,
        ),
        name="Syntax Error",
        description="Source could not be parsed",
        category=Category.SYNTAX,
        severity=Severity.ERROR,
    ),
    _Rule(
        regex=re.compile(
            r"\bexpected\b.+?\bbut\s+(?:got|received|was)\b|AssertionError|assertion failed",
            re.IGNORECASE,
        ),
        name="Test Assertion Mismatch",
        description="Expected value does not match the actual value",
        category=Category.LOGIC,
        severity=Severity.ERROR,
    ),
    _Rule(
        regex=re.compile(r"deprecat", re.IGNORECASE),
        name="Deprecated API Usage",
        description="Code relies on an API scheduled for removal",
        category=Category.BEST_PRACTICES,
        severity=Severity.WARNING,
    ),
    _Rule(
        regex=re.compile(r"\btimed?\s?out\b|timeout", re.IGNORECASE),
        name="Operation Timeout",
        description="Operation took longer than allowed",
        category=Category.PERFORMANCE,
        severity=Severity.ERROR,
    ),
    _Rule(
        regex=re.compile(
            r"TypeError|is not a function|is not iterable|type mismatch|unsupported operand",
            re.IGNORECASE,
        ),
        name="Type Mismatch",
        description="Value used with an incompatible type",
        category=Category.TYPE_SAFETY,
        severity=Severity.ERROR,
    ),
    _Rule(
        regex=re.compile(r"business logic|validation failed", re.IGNORECASE),
        name="Business Logic Failure",
        description="Domain rule violated; needs a human decision",
        category=Category.LOGIC,
        severity=Severity.ERROR,
    ),
]


@dataclass(frozen=True)
class _Smell:
    tag: str
    regex: re.Pattern[str]
    name: str
    description: str
    category: Category
    severity: Severity
    message: str
    auto_fix: AutoFix
    unless: str | None = None  # code containing this text does not have the smell


# Code-context smells; recorded as tags on error patterns and mined as patterns of their own
_SMELLS: list[_Smell] = [
    _Smell(
        tag="missing-await",
        regex=re.compile(r"\basync\s+(?:function|def)\b"),
        name="Missing Await",
        description="Async function calls asynchronous code without awaiting it",
        category=Category.ASYNC,
        severity=Severity.WARNING,
        message="Await asynchronous calls inside async functions",
        auto_fix=AutoFix(enabled=True, strategy="insert-await", confidence=0.6),
        unless="await",
    ),
    _Smell(
        tag="chained-map",
        regex=re.compile(r"\.map\([^)]*\)\s*\.map\("),
        name="Inefficient Chaining",
        description="Consecutive map operations that could be combined",
        category=Category.PERFORMANCE,
        severity=Severity.INFO,
        message="Combine consecutive map() calls into a single pass",
        auto_fix=AutoFix(enabled=False, strategy="combine-map"),
    ),
    _Smell(
        tag="debug-statement",
        regex=re.compile(r"console\.log\(|(?<![\w.])print\("),
        name="Debug Statement",
        description="Debug output statement left in code",
        category=Category.CODE_QUALITY,
        severity=Severity.INFO,
        message="Remove debug output statements before committing",
        auto_fix=AutoFix(enabled=True, strategy="remove-debug-statement", confidence=0.9),
    ),
]


def _match_rule(message: str) -> _Rule | None:
    for rule in _RULES:
        if rule.regex.search(message):
            return rule
    return None


# ---------------------------------------------------------------------------
# Analyzer
# ---------------------------------------------------------------------------


class PatternAnalyzer:
    """Clusters failures by signature and synthesises one pattern per cluster."""

    def __init__(
        self,
        max_message_length: int | None = None,
        max_code_examples: int | None = None,
    ):
        settings = get_settings()
        if max_message_length is None:
            max_message_length = settings.patternwatch_max_message_length
        if max_code_examples is None:
            max_code_examples = settings.patternwatch_max_code_examples
        self.max_message_length = max_message_length
        self.max_code_examples = max_code_examples

    def analyze_failures(self, failures: Iterable[Any] | None) -> list[Pattern]:
        """Error-signature patterns in first-seen order, then code-smell patterns."""
        usable = _usable_failures(failures)
        if not usable:
            return []

        clusters: dict[str, list[TestFailure]] = {}
        smelly: dict[str, list[TestFailure]] = {}
        for failure in usable:
            clusters.setdefault(error_signature(failure.error), []).append(failure)
            if failure.context.code:
                for smell in _code_smells(failure.context.code):
                    smelly.setdefault(smell.tag, []).append(failure)

        patterns: list[Pattern] = []
        for signature, members in clusters.items():
            try:
                patterns.append(self._build_pattern(signature, members))
            except Exception as e:
                logger.warning(f"Skipping cluster '{signature[:80]}': {e}")

        for smell in _SMELLS:
            if members := smelly.get(smell.tag):
                try:
                    patterns.append(self._build_smell_pattern(smell, members))
                except Exception as e:
                    logger.warning(f"Skipping code smell '{smell.tag}': {e}")

        logger.info(
            f"Mined {len(patterns)} patterns from {len(usable)} failures "
            f"({len(clusters)} clusters, {len(smelly)} code smells)"
        )
        return patterns

    def find_similar_patterns(self, failure: Any, patterns: Iterable[Any]) -> list[Any]:
        """Existing patterns whose trigger matches the failure's error text."""
        usable = _usable_failures([failure])
        if not usable:
            return []
        error = usable[0].error

        similar = []
        for pattern in patterns:
            try:
                trigger = Trigger.coerce(get_field(pattern, "trigger"))
            except TriggerError:
                continue
            if trigger.search(error):
                similar.append(pattern)
        return similar

    def refresh_pattern(self, pattern: Pattern, failures: Iterable[Any]) -> Pattern:
        """Fold new observations into a pattern's metadata. Identity and text are kept."""
        usable = _usable_failures(failures)
        if not usable:
            return pattern

        metadata = pattern.metadata or PatternMetadata()
        context = metadata.context or PatternContext()
        occurrences = (metadata.occurrences or 0) + len(usable)

        timestamps = [f.context.timestamp for f in usable]
        if metadata.last_seen:
            timestamps.append(metadata.last_seen)

        recomputed = _confidence(
            occurrences, usable, known=_match_rule(usable[0].error) is not None
        )
        refreshed = metadata.model_copy(
            update={
                "occurrences": occurrences,
                "last_seen": _latest(timestamps),
                "confidence": max(metadata.confidence or 0.0, recomputed),
                "context": PatternContext(
                    common_locations=_dedupe(
                        [*context.common_locations, *(f.file for f in usable)]
                    ),
                    code_examples=self._code_examples(context.code_examples, usable),
                ),
            }
        )
        logger.debug(f"Refreshed pattern {pattern.id}: {occurrences} occurrences")
        return pattern.model_copy(update={"metadata": refreshed})

    # --- synthesis ---

    def _build_pattern(self, signature: str, members: list[TestFailure]) -> Pattern:
        family, shape = signature.split("|", 1)
        representative = members[0].error
        rule = _match_rule(representative)

        category = rule.category if rule else Category.GENERAL
        severity = rule.severity if rule else _fallback_severity(representative)
        auto_fix = rule.auto_fix.model_copy() if rule and rule.auto_fix else AutoFix(enabled=False)

        tags = ["mined", family_slug(family), str(category)]
        for failure in members:
            if service := _service_from_path(failure.file):
                tags.append(f"service:{service}")
            if failure.context.code:
                tags.extend(s.tag for s in _code_smells(failure.context.code))

        timestamps = [f.context.timestamp for f in members]
        metadata = PatternMetadata(
            source="analyzer",
            confidence=_confidence(len(members), members, known=rule is not None),
            tags=_dedupe(tags),
            created=_earliest(timestamps),
            last_seen=_latest(timestamps),
            occurrences=len(members),
            auto_fix=auto_fix,
            context=PatternContext(
                common_locations=_dedupe(f.file for f in members),
                code_examples=self._code_examples([], members),
            ),
        )

        digest = hashlib.sha1(signature.encode("utf-8")).hexdigest()[:10]
        return Pattern(
            id=f"mined-{family_slug(family)}-{digest}",
            name=_pattern_name(rule, family, shape),
            description=(
                rule.description
                if rule
                else f"Recurring {family} failure observed {len(members)} time(s)"
            ),
            category=category,
            severity=severity,
            trigger=_build_trigger(representative, family, shape),
            message=_truncate(representative.strip(), self.max_message_length),
            metadata=metadata,
        )

    def _build_smell_pattern(self, smell: _Smell, members: list[TestFailure]) -> Pattern:
        timestamps = [f.context.timestamp for f in members]
        tags = ["mined", "code-smell", smell.tag, str(smell.category)]
        tags.extend(
            f"service:{service}" for f in members if (service := _service_from_path(f.file))
        )
        return Pattern(
            id=f"mined-smell-{smell.tag}",
            name=smell.name,
            description=smell.description,
            category=smell.category,
            severity=smell.severity,
            trigger=smell.regex,
            message=smell.message,
            metadata=PatternMetadata(
                source="analyzer",
                confidence=_confidence(len(members), members, known=True),
                tags=_dedupe(tags),
                created=_earliest(timestamps),
                last_seen=_latest(timestamps),
                occurrences=len(members),
                auto_fix=smell.auto_fix.model_copy(),
                context=PatternContext(
                    common_locations=_dedupe(f.file for f in members),
                    code_examples=self._code_examples([], members),
                ),
            ),
        )

    def _code_examples(self, existing: list[str], failures: list[TestFailure]) -> list[str]:
        snippets = [*existing, *(f.context.code for f in failures if f.context.code)]
        return _dedupe(snippets)[: self.max_code_examples]


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _usable_failures(failures: Iterable[Any] | None) -> list[TestFailure]:
    """Coerce records to TestFailure and drop those missing test, error or file."""
    usable: list[TestFailure] = []
    for raw in failures or []:
        if isinstance(raw, TestFailure):
            failure = raw
        elif isinstance(raw, Mapping):
            try:
                failure = TestFailure.model_validate(raw)
            except ValidationError as e:
                logger.debug(f"Dropping malformed failure record: {e.error_count()} errors")
                continue
        else:
            logger.debug(f"Dropping failure record of type {type(raw).__name__}")
            continue

        required = (failure.test, failure.error, failure.file)
        if all(isinstance(v, str) and v.strip() for v in required):
            usable.append(failure)
    return usable


def _pattern_name(rule: _Rule | None, family: str, shape: str) -> str:
    if rule is None:
        summary = shape if len(shape) <= 60 else shape[:57].rstrip() + "..."
        return f"Recurring {family}: {summary}" if summary else f"Recurring {family}"
    if family != "Error" and family.replace(" ", "") not in rule.name.replace(" ", ""):
        return f"{rule.name} ({family})"
    return rule.name


def _build_trigger(message: str, family: str, shape: str) -> re.Pattern[str]:
    """Regex over the cluster's shared shape, verified against the representative message."""
    _, stripped = strip_family(message, family)
    clipped = re.sub(r"<[^>]*$", "", shape[:MAX_TRIGGER_SHAPE]).strip()

    source = shape_to_regex(clipped) if clipped else ""
    if stripped:
        source = re.escape(family) + r":?\s*" + source
    if source:
        try:
            trigger = re.compile(source, re.IGNORECASE)
        except re.error as e:
            logger.debug(f"Generated trigger did not compile, falling back: {e}")
        else:
            if trigger.search(message):
                return trigger

    return re.compile(re.escape(message.strip()[:MAX_TRIGGER_SHAPE]), re.IGNORECASE)


def _confidence(occurrences: int, failures: list[TestFailure], known: bool) -> float:
    """Confidence in [0, 1], non-decreasing in occurrences and context richness.

    Richness is summed rather than averaged, so adding bare observations to
    a cluster never lowers it.
    """
    n = max(occurrences, 1)
    richness = min(sum(_richness(f) for f in failures) / RICH_CONTEXT_SATURATION, 1.0)
    score = 0.5 + 0.3 * (1 - 1 / n) + 0.15 * richness
    if known:
        score += 0.1
    return round(min(score, 1.0), 3)


def _richness(failure: TestFailure) -> float:
    ctx = failure.context
    score = 0.0
    if ctx.code:
        score += 0.5
    if ctx.line is not None or ctx.column is not None:
        score += 0.25
    if ctx.stack:
        score += 0.25
    return score


def _fallback_severity(message: str) -> Severity:
    lowered = message.lower()
    if "warning" in lowered or "deprecat" in lowered or error_family(message).endswith("Warning"):
        return Severity.WARNING
    return Severity.ERROR


def _service_from_path(path: str) -> str | None:
    """Directory following ``src/`` or ``services/`` (``src/billing/x.ts`` -> ``billing``)."""
    parts = [p for p in re.split(r"[\\/]+", path) if p]
    for i, part in enumerate(parts[:-2]):
        if part in ("src", "services"):
            return parts[i + 1]
    return None


def _code_smells(code: str) -> list[_Smell]:
    return [
        smell
        for smell in _SMELLS
        if smell.regex.search(code) and not (smell.unless and smell.unless in code)
    ]


def _truncate(text: str, max_chars: int) -> str:
    """Truncate long text, marking the cut."""
    if len(text) <= max_chars:
        return text
    return text[: max(max_chars - 3, 0)].rstrip() + "..."


def _dedupe(items: Iterable[str]) -> list[str]:
    return list(dict.fromkeys(items))


def _earliest(timestamps: list[datetime]) -> datetime:
    return min(timestamps, key=_sort_key)


def _latest(timestamps: list[datetime]) -> datetime:
    return max(timestamps, key=_sort_key)


def _sort_key(ts: datetime) -> float:
    # Mixed naive/aware timestamps compare by POSIX time; naive ones are taken as local
    return ts.timestamp()


def analyze_failures(failures: Iterable[Any] | None) -> list[Pattern]:
    """Mine patterns using settings-derived defaults."""
    return PatternAnalyzer().analyze_failures(failures)
