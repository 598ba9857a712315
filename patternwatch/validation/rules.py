"""Custom rule registry -- append-only, isolated extension checks.

A rule is anything with a ``name`` and a ``validate(pattern)`` callable, or
a mapping ``{"name": ..., "validate": ...}``. Each rule runs inside its own
failure boundary: a rule that raises is logged and skipped, never allowed
to abort validation.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any

from patternwatch.fields import MISSING, get_field, is_structured
from patternwatch.types.validation import (
    ROOT_FIELD,
    ErrorType,
    FieldError,
    LayerResult,
    RuleOutcome,
    ValidationLayer,
)

logger = logging.getLogger("patternwatch.validation.rules")


@dataclass(frozen=True)
class _RegisteredRule:
    name: str
    check: Callable[[Any], Any]


class CustomRuleRegistry:
    """Holds registered rules. Registration appends under a lock; runs read a snapshot."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._rules: tuple[_RegisteredRule, ...] = ()

    def add(self, rule: Any) -> None:
        if isinstance(rule, Mapping):
            name, check = rule.get("name"), rule.get("validate")
        else:
            name, check = getattr(rule, "name", None), getattr(rule, "validate", None)

        if not callable(check):
            raise TypeError("Custom rule must provide a callable 'validate'")

        name = str(name or getattr(check, "__name__", "rule"))
        registered = _RegisteredRule(name=name, check=check)
        with self._lock:
            self._rules = (*self._rules, registered)
        logger.debug(f"Registered custom rule '{registered.name}'")

    @property
    def names(self) -> list[str]:
        return [r.name for r in self._rules]

    def __len__(self) -> int:
        return len(self._rules)

    def validate(self, pattern: Any) -> LayerResult:
        errors: list[FieldError] = []
        for rule in self._rules:
            try:
                outcome = _normalize_outcome(rule.check(pattern), rule.name)
            except Exception as e:
                logger.warning(f"Custom rule '{rule.name}' raised, skipping: {e}")
                continue
            if not outcome.is_valid:
                errors.append(
                    outcome.error
                    or FieldError(
                        field=ROOT_FIELD,
                        type=ErrorType.CUSTOM,
                        message=f"Custom rule '{rule.name}' failed",
                    )
                )
        return LayerResult(layer=ValidationLayer.CUSTOM, errors=errors)


def _normalize_outcome(raw: Any, rule_name: str) -> RuleOutcome:
    """Accept RuleOutcome, bool, or a mapping with is_valid/isValid and error."""
    if isinstance(raw, RuleOutcome):
        return raw
    if isinstance(raw, bool):
        return RuleOutcome(is_valid=raw)
    if raw is None:
        return RuleOutcome(is_valid=True)
    if isinstance(raw, Mapping):
        is_valid = raw.get("is_valid", raw.get("isValid", True))
        error = _coerce_error(raw.get("error"), rule_name)
        return RuleOutcome(is_valid=bool(is_valid), error=error)
    raise TypeError(f"Unsupported custom rule result: {type(raw).__name__}")


def _coerce_error(raw: Any, rule_name: str) -> FieldError | None:
    if raw is None:
        return None
    if isinstance(raw, FieldError):
        return raw
    if is_structured(raw):
        field_name = get_field(raw, "field")
        error_type = get_field(raw, "type")
        message = get_field(raw, "message")
        return FieldError(
            field=str(field_name) if field_name is not MISSING else ROOT_FIELD,
            type=str(error_type) if error_type is not MISSING else ErrorType.CUSTOM,
            message=str(message) if message is not MISSING else None,
        )
    return FieldError(field=ROOT_FIELD, type=ErrorType.CUSTOM, message=f"{rule_name}: {raw}")
