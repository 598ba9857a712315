"""Pattern quality assessment -- completeness, specificity and usefulness scores."""

from __future__ import annotations

import logging
import re
from typing import Any

from patternwatch.config import get_settings
from patternwatch.fields import MISSING, get_field, in_unit_range, is_number, is_present
from patternwatch.trigger import Trigger, TriggerError
from patternwatch.types.validation import QualityAssessment, QualityCriteria, QualitySuggestion

logger = logging.getLogger("patternwatch.quality")

# Score weights: completeness, specificity, usefulness
DEFAULT_WEIGHTS = (0.3, 0.35, 0.35)

GENERIC_MESSAGES = {
    "error",
    "warning",
    "issue",
    "problem",
    "bad",
    "invalid",
    "failure",
    "failed",
    "wrong",
    "fix this",
    "something went wrong",
}

ACTION_WORDS = {
    "use",
    "avoid",
    "check",
    "add",
    "remove",
    "ensure",
    "replace",
    "prefer",
    "handle",
    "guard",
    "validate",
    "consider",
    "wrap",
    "initialize",
    "update",
}

_WORD = re.compile(r"[A-Za-z][A-Za-z'/-]*")

_SUGGESTIONS = {
    "completeness": "Add metadata: source, confidence, tags, occurrences and context examples",
    "specificity": "Make the trigger more specific: add literal text, anchors or word boundaries",
    "usefulness": "Write an actionable message that says what to change",
}


class QualityAssessor:
    """Scores a pattern on three criteria in [0, 1] and suggests improvements."""

    def __init__(
        self,
        weights: tuple[float, float, float] = DEFAULT_WEIGHTS,
        suggestion_threshold: float | None = None,
        min_trigger_literals: int | None = None,
    ):
        settings = get_settings()
        self.weights = weights
        self.suggestion_threshold = (
            suggestion_threshold
            if suggestion_threshold is not None
            else settings.patternwatch_quality_suggestion_threshold
        )
        self.min_trigger_literals = (
            min_trigger_literals
            if min_trigger_literals is not None
            else settings.patternwatch_min_trigger_literals
        )

    def assess(self, pattern: Any) -> QualityAssessment:
        criteria = QualityCriteria(
            completeness=round(self.completeness(pattern), 3),
            specificity=round(self.specificity(pattern), 3),
            usefulness=round(self.usefulness(pattern), 3),
        )
        w_complete, w_specific, w_useful = self.weights
        score = (
            criteria.completeness * w_complete
            + criteria.specificity * w_specific
            + criteria.usefulness * w_useful
        )

        suggestions = [
            QualitySuggestion(type=name, message=_SUGGESTIONS[name])
            for name in ("completeness", "specificity", "usefulness")
            if getattr(criteria, name) < self.suggestion_threshold
        ]
        return QualityAssessment(
            score=round(min(max(score, 0.0), 1.0), 3),
            criteria=criteria,
            suggestions=suggestions,
        )

    def completeness(self, pattern: Any) -> float:
        """How much supporting information the pattern carries."""
        score = 0.0
        description = get_field(pattern, "description")
        if isinstance(description, str):
            if len(description.strip()) >= 20:
                score += 0.2
            elif len(description.strip()) >= 10:
                score += 0.1

        metadata = get_field(pattern, "metadata")
        if not is_present(metadata):
            return score
        score += 0.15

        if _non_empty_str(get_field(metadata, "source")):
            score += 0.05
        if in_unit_range(get_field(metadata, "confidence")):
            score += 0.1
        tags = get_field(metadata, "tags")
        if isinstance(tags, (list, tuple)) and tags:
            score += 0.15
        occurrences = get_field(metadata, "occurrences")
        if is_number(occurrences) and occurrences > 0:
            score += min(occurrences / 10, 1.0) * 0.1

        context = get_field(metadata, "context")
        if is_present(context):
            locations = get_field(context, "commonLocations", "common_locations")
            examples = get_field(context, "codeExamples", "code_examples")
            if locations or examples:
                score += 0.15

        if is_present(get_field(metadata, "autoFix", "auto_fix")):
            score += 0.1
        return min(score, 1.0)

    def specificity(self, pattern: Any) -> float:
        """How narrowly the trigger targets the issue. Match-all triggers score 0."""
        try:
            trigger = Trigger.coerce(get_field(pattern, "trigger"))
        except TriggerError:
            return 0.0
        if trigger.matches_everything:
            return 0.0

        weight = trigger.literal_weight
        score = 0.2 + 0.6 * min(weight / 12, 1.0)
        if trigger.has_structure:
            score += 0.2
        if weight < self.min_trigger_literals:
            score = min(score, 0.3)
        return min(score, 1.0)

    def usefulness(self, pattern: Any) -> float:
        """How actionable the guidance is."""
        message = get_field(pattern, "message")
        if not isinstance(message, str):
            return 0.0

        normalized = message.strip().strip(".!").lower()
        words = _WORD.findall(normalized)
        informative = 0.0 if normalized in GENERIC_MESSAGES else min(len(words) / 5, 1.0)
        score = informative * 0.6

        description = get_field(pattern, "description")
        if informative and normalized != str(description).strip().strip(".!").lower():
            score += 0.1
        if ACTION_WORDS.intersection(words):
            score += 0.1

        metadata = get_field(pattern, "metadata")
        auto_fix = get_field(metadata, "autoFix", "auto_fix") if is_present(metadata) else MISSING
        if is_present(auto_fix):
            enabled = get_field(auto_fix, "enabled")
            if enabled is True and _non_empty_str(get_field(auto_fix, "strategy")):
                score += 0.2
            else:
                score += 0.1
        return min(score, 1.0)


def _non_empty_str(value: Any) -> bool:
    return isinstance(value, str) and bool(value.strip())


def assess_quality(pattern: Any) -> QualityAssessment:
    """Assess a pattern with settings-derived defaults. Never raises."""
    try:
        return QualityAssessor().assess(pattern)
    except Exception as e:
        logger.warning(f"Quality assessment failed: {e}")
        return QualityAssessment(
            score=0.0,
            criteria=QualityCriteria(),
            suggestions=[
                QualitySuggestion(type=name, message=_SUGGESTIONS[name])
                for name in ("completeness", "specificity", "usefulness")
            ],
        )
