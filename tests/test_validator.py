"""Tests for PatternValidator — required fields, types, metadata, heuristics, custom rules."""

from __future__ import annotations

import re
import time

import pytest

from patternwatch.types import ErrorType, RuleOutcome, WarningType
from patternwatch.types.validation import FieldError
from patternwatch.validation import PatternValidator
from tests.factories import make_metadata, make_pattern, make_pattern_dict


@pytest.fixture
def validator():
    return PatternValidator()


def _with_metadata(**updates):
    pattern = make_pattern_dict()
    pattern["metadata"] = {**pattern["metadata"], **updates}
    return pattern


class TestBasicValidation:
    def test_complete_model_is_valid(self, validator, valid_pattern):
        result = validator.validate_pattern(valid_pattern)
        assert result.is_valid is True
        assert result.errors == []
        assert result.warnings == []

    def test_complete_mapping_is_valid(self, validator, valid_pattern_dict):
        result = validator.validate_pattern(valid_pattern_dict)
        assert result.is_valid is True
        assert result.errors == []
        assert result.warnings == []

    def test_missing_required_fields_all_reported(self, validator):
        result = validator.validate_pattern(
            {"name": "Incomplete Pattern", "description": "Missing required fields"}
        )
        assert result.is_valid is False
        for name in ("id", "category", "severity", "trigger", "message"):
            assert result.has_error(name, ErrorType.REQUIRED)
        assert not result.has_error("name")
        assert not result.has_error("description")

    def test_none_field_counts_as_missing(self, validator):
        result = validator.validate_pattern(make_pattern_dict(message=None))
        assert result.has_error("message", ErrorType.REQUIRED)

    def test_none_pattern_is_invalid(self, validator):
        result = validator.validate_pattern(None)
        assert result.is_valid is False
        assert len(result.errors) == 1
        assert result.errors[0].type == "invalid"
        assert result.warnings == []

    def test_lists_always_present(self, validator):
        result = validator.validate_pattern({})
        assert isinstance(result.errors, list)
        assert isinstance(result.warnings, list)


class TestFieldTypes:
    def test_integer_id_is_type_error(self, validator):
        result = validator.validate_pattern(make_pattern_dict(id=123))
        assert result.is_valid is False
        assert result.has_error("id", ErrorType.TYPE)

    def test_empty_id_is_empty_error(self, validator):
        result = validator.validate_pattern(make_pattern_dict(id=""))
        assert result.is_valid is False
        assert result.has_error("id", ErrorType.EMPTY)

    def test_string_trigger_is_type_error(self, validator):
        result = validator.validate_pattern(make_pattern_dict(trigger="string instead of regex"))
        assert result.is_valid is False
        assert result.has_error("trigger", ErrorType.TYPE)

    def test_invalid_severity_is_enum_error(self, validator):
        result = validator.validate_pattern(make_pattern_dict(severity="invalid-severity"))
        assert result.is_valid is False
        assert result.has_error("severity", ErrorType.ENUM)

    @pytest.mark.parametrize("severity", ["error", "warning", "info"])
    def test_known_severities_accepted(self, validator, severity):
        assert validator.validate_pattern(make_pattern_dict(severity=severity)).is_valid

    @pytest.mark.parametrize(
        "category",
        [
            "code-quality",
            "performance",
            "security",
            "type-safety",
            "async",
            "syntax",
            "logic",
            "best-practices",
        ],
    )
    def test_known_categories_accepted(self, validator, category):
        result = validator.validate_pattern(make_pattern_dict(category=category))
        assert result.is_valid
        assert not result.has_warning("category")

    def test_unknown_category_warns_but_stays_valid(self, validator):
        result = validator.validate_pattern(make_pattern_dict(category="unknown-category"))
        assert result.is_valid is True
        assert result.has_warning("category", WarningType.UNKNOWN)


class TestTriggerChecks:
    @pytest.mark.parametrize(
        "trigger",
        [
            re.compile(r"simple"),
            re.compile(r"case\s+insensitive", re.IGNORECASE),
            re.compile(r"multi.*flag", re.IGNORECASE | re.MULTILINE),
            re.compile(r"complex\w+pattern\d{1,3}"),
            re.compile(r"^start.*end$"),
        ],
    )
    def test_ordinary_triggers_valid(self, validator, trigger):
        assert validator.validate_pattern(make_pattern_dict(trigger=trigger)).is_valid

    def test_deep_nesting_warns_complexity(self, validator):
        result = validator.validate_pattern(
            make_pattern_dict(trigger=re.compile(r"((((((((((a))))))))))"))
        )
        assert result.is_valid is True
        assert result.has_warning("trigger", WarningType.COMPLEXITY)

    def test_depth_at_limit_does_not_warn(self, validator):
        result = validator.validate_pattern(
            make_pattern_dict(trigger=re.compile(r"(((((a)))))"))
        )
        assert not result.has_warning("trigger", WarningType.COMPLEXITY)

    def test_zero_depth_limit_is_honoured(self):
        validator = PatternValidator(max_group_depth=0)
        result = validator.validate_pattern(make_pattern_dict(trigger=re.compile(r"(a)")))
        assert result.has_warning("trigger", WarningType.COMPLEXITY)

    @pytest.mark.parametrize("source", [r"(a+)+", r"(a|a)*", r"(.*).*"])
    def test_dangerous_shapes_warn(self, validator, source):
        result = validator.validate_pattern(make_pattern_dict(trigger=re.compile(source)))
        assert result.has_warning("trigger", WarningType.DANGEROUS)

    def test_unicode_trigger_valid(self, validator):
        result = validator.validate_pattern(
            make_pattern_dict(
                name="Pattern with émojis 🚀",
                description="Тест pattern with unicode",
                trigger=re.compile(r"emoji.*🚀"),
            )
        )
        assert result.is_valid is True


class TestMetadata:
    def test_full_metadata_valid(self, validator):
        pattern = _with_metadata(
            source="eslint",
            confidence=0.95,
            occurrences=5,
            autoFix={"enabled": True, "strategy": "replace", "confidence": 0.8},
        )
        result = validator.validate_pattern(pattern)
        assert result.is_valid is True
        assert result.errors == []

    @pytest.mark.parametrize("confidence", [-0.1, 1.1, "high", None, True])
    def test_bad_confidence_is_range_error(self, validator, confidence):
        result = validator.validate_pattern(_with_metadata(confidence=confidence))
        assert result.is_valid is False
        assert result.has_error("metadata.confidence", ErrorType.RANGE)

    @pytest.mark.parametrize("confidence", [0, 0.0, 0.5, 1, 1.0])
    def test_confidence_bounds_inclusive(self, validator, confidence):
        assert validator.validate_pattern(_with_metadata(confidence=confidence)).is_valid

    def test_string_tags_is_type_error(self, validator):
        result = validator.validate_pattern(_with_metadata(tags="not-an-array"))
        assert result.is_valid is False
        assert result.has_error("metadata.tags", ErrorType.TYPE)

    def test_bad_auto_fix_reports_each_field(self, validator):
        pattern = _with_metadata(autoFix={"enabled": "yes", "strategy": 123, "confidence": 2.0})
        result = validator.validate_pattern(pattern)
        assert result.is_valid is False
        assert result.has_error("metadata.autoFix.enabled", ErrorType.TYPE)
        assert result.has_error("metadata.autoFix.strategy", ErrorType.TYPE)
        assert result.has_error("metadata.autoFix.confidence", ErrorType.RANGE)

    def test_model_without_metadata_valid(self, validator):
        assert validator.validate_pattern(make_pattern(metadata=None)).is_valid

    def test_model_explicit_none_confidence_is_range_error(self, validator):
        pattern = make_pattern(metadata=make_metadata(confidence=None))
        result = validator.validate_pattern(pattern)
        # Explicit None is a value that is not a number in [0, 1]
        assert result.has_error("metadata.confidence", ErrorType.RANGE)


class TestHeuristics:
    def test_long_name_and_description_warn(self, validator):
        result = validator.validate_pattern(
            make_pattern_dict(name="x" * 10000, description="y" * 10000)
        )
        assert result.is_valid is True
        assert result.has_warning("name", WarningType.LENGTH)
        assert result.has_warning("description", WarningType.LENGTH)

    def test_limits_overridable(self):
        validator = PatternValidator(max_text_length=10)
        result = validator.validate_pattern(make_pattern_dict())
        assert result.has_warning("description", WarningType.LENGTH)

    def test_circular_mapping_handled(self, validator):
        pattern = make_pattern_dict()
        pattern["self"] = pattern
        assert validator.validate_pattern(pattern).is_valid is True


class TestCustomRules:
    def test_failing_rule_adds_error(self, validator):
        def forbid(pattern):
            if "forbidden" in pattern["name"]:
                return {
                    "isValid": False,
                    "error": {"field": "name", "type": "custom", "message": "Forbidden word"},
                }
            return {"isValid": True}

        validator.add_custom_rule({"name": "custom-rule", "validate": forbid})

        result = validator.validate_pattern(make_pattern_dict(name="forbidden pattern name"))
        assert result.is_valid is False
        assert any(e.type == "custom" and e.message == "Forbidden word" for e in result.errors)

        assert validator.validate_pattern(make_pattern_dict()).is_valid

    def test_raising_rule_is_ignored(self, validator):
        def boom(pattern):
            raise RuntimeError("Custom rule error")

        validator.add_custom_rule({"name": "faulty-rule", "validate": boom})
        result = validator.validate_pattern(make_pattern_dict())
        assert result.is_valid is True

    def test_object_rule_with_outcome(self, validator):
        class RequireTags:
            name = "require-tags"

            def validate(self, pattern):
                if not pattern.metadata or not pattern.metadata.tags:
                    return RuleOutcome(
                        is_valid=False,
                        error=FieldError(field="metadata.tags", type="policy"),
                    )
                return RuleOutcome(is_valid=True)

        validator.add_custom_rule(RequireTags())
        result = validator.validate_pattern(make_pattern(metadata=make_metadata(tags=[])))
        assert result.has_error("metadata.tags", "policy")

    def test_rule_runs_on_invalid_patterns(self, validator):
        seen = []
        validator.add_custom_rule({"name": "spy", "validate": lambda p: seen.append(p) or True})
        validator.validate_pattern({"name": "no id"})
        assert seen == [{"name": "no id"}]

    def test_rules_are_per_validator(self):
        first, second = PatternValidator(), PatternValidator()
        first.add_custom_rule({"name": "never", "validate": lambda p: False})
        assert first.validate_pattern(make_pattern()).is_valid is False
        assert second.validate_pattern(make_pattern()).is_valid is True


class TestValidateUpdate:
    def test_update_revalidates_merged_fields(self, validator, valid_pattern):
        result = validator.validate_update(valid_pattern, {"severity": "critical"})
        assert result.has_error("severity", ErrorType.ENUM)
        # Original is untouched
        assert validator.validate_pattern(valid_pattern).is_valid

    def test_update_on_mapping(self, validator, valid_pattern_dict):
        result = validator.validate_update(valid_pattern_dict, {"id": ""})
        assert result.has_error("id", ErrorType.EMPTY)
        assert valid_pattern_dict["id"] == "valid-pattern"

    def test_valid_update(self, validator, valid_pattern):
        assert validator.validate_update(valid_pattern, {"message": "Use a guard clause"}).is_valid

    def test_update_with_string_trigger(self, validator, valid_pattern):
        result = validator.validate_update(valid_pattern, {"trigger": "string"})
        assert result.has_error("trigger", ErrorType.TYPE)


class TestValidationStats:
    def test_counts(self, validator):
        patterns = [
            make_pattern(id="a", trigger=re.compile(r"alpha failure")),
            make_pattern(id="b", trigger=re.compile(r"beta failure"), name="y" * 6000),
            make_pattern_dict(id=""),
        ]
        stats = validator.validation_stats(patterns)
        assert stats.total_patterns == 3
        assert stats.valid_patterns == 2
        assert stats.invalid_patterns == 1
        assert stats.patterns_with_warnings == 1

    def test_counts_conflicts(self, validator, valid_pattern):
        stats = validator.validation_stats([valid_pattern, valid_pattern])
        assert stats.conflict_count == 1

    def test_empty_batch(self, validator):
        stats = validator.validation_stats([])
        assert stats.total_patterns == 0
        assert stats.conflict_count == 0


class TestPerformance:
    def test_many_patterns(self, validator):
        patterns = [
            make_pattern_dict(id=f"pattern-{i}", trigger=re.compile(f"pattern{i}", re.I))
            for i in range(1000)
        ]
        start = time.perf_counter()
        results = [validator.validate_pattern(p) for p in patterns]
        elapsed = time.perf_counter() - start

        assert all(r.is_valid for r in results)
        assert elapsed < 5.0
