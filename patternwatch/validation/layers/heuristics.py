"""Heuristic validator -- advisory warnings that never affect validity.

- name/description longer than the configured limit
- trigger nesting deeper than the configured group depth
- trigger shapes known to backtrack badly
"""

from __future__ import annotations

from patternwatch.fields import get_field
from patternwatch.trigger import Trigger, TriggerError
from patternwatch.types.validation import (
    FieldWarning,
    LayerResult,
    ValidationLayer,
    WarningType,
)


class HeuristicsValidator:
    """Emits length, complexity and dangerous-shape warnings."""

    def __init__(self, max_text_length: int = 5000, max_group_depth: int = 5):
        self.max_text_length = max_text_length
        self.max_group_depth = max_group_depth

    def validate(self, pattern) -> LayerResult:
        warnings: list[FieldWarning] = []

        for name in ("name", "description"):
            value = get_field(pattern, name)
            if isinstance(value, str) and len(value) > self.max_text_length:
                warnings.append(
                    FieldWarning(
                        field=name,
                        type=WarningType.LENGTH,
                        message=f"{name} is {len(value)} chars (limit {self.max_text_length})",
                    )
                )

        try:
            trigger = Trigger.coerce(get_field(pattern, "trigger"))
        except TriggerError:
            # Type problems are reported by the field layer
            return LayerResult(layer=ValidationLayer.HEURISTICS, warnings=warnings)

        if trigger.group_depth > self.max_group_depth:
            warnings.append(
                FieldWarning(
                    field="trigger",
                    type=WarningType.COMPLEXITY,
                    message=(
                        f"Trigger nests {trigger.group_depth} capturing groups "
                        f"(limit {self.max_group_depth})"
                    ),
                )
            )

        if trigger.is_dangerous:
            warnings.append(
                FieldWarning(
                    field="trigger",
                    type=WarningType.DANGEROUS,
                    message=(
                        "Trigger may backtrack catastrophically: "
                        + ", ".join(trigger.dangerous_shapes)
                    ),
                )
            )

        return LayerResult(layer=ValidationLayer.HEURISTICS, warnings=warnings)
