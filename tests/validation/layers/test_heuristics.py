"""Tests for the HeuristicsValidator."""

import re

from patternwatch.types import WarningType
from patternwatch.validation.layers.heuristics import HeuristicsValidator
from tests.factories import make_pattern, make_pattern_dict


class TestHeuristicsValidator:
    def test_never_errors(self):
        v = HeuristicsValidator(max_text_length=1, max_group_depth=0)
        result = v.validate(make_pattern(trigger=re.compile(r"((a+)+)")))
        assert result.passed
        assert {w.type for w in result.warnings} == {
            WarningType.LENGTH,
            WarningType.COMPLEXITY,
            WarningType.DANGEROUS,
        }

    def test_clean_pattern_has_no_warnings(self):
        assert HeuristicsValidator().validate(make_pattern()).warnings == []

    def test_message_length_not_checked(self):
        v = HeuristicsValidator(max_text_length=5)
        result = v.validate(make_pattern_dict(name="n", description="d", message="x" * 100))
        assert result.warnings == []

    def test_bad_trigger_ignored(self):
        result = HeuristicsValidator().validate(make_pattern_dict(trigger="(a+)+"))
        assert result.warnings == []

    def test_warning_names_shape(self):
        result = HeuristicsValidator().validate(make_pattern(trigger=re.compile(r"(x|x)+")))
        assert "redundant-alternation" in result.warnings[0].message
