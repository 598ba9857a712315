"""Tests for patternwatch.signatures — error families and message shapes."""

from __future__ import annotations

import re

import pytest

from patternwatch.signatures import (
    error_family,
    error_signature,
    family_slug,
    message_shape,
    shape_to_regex,
)


class TestErrorFamily:
    @pytest.mark.parametrize(
        ("message", "family"),
        [
            ("TypeError: Cannot read property 'x' of undefined", "TypeError"),
            ("Uncaught ReferenceError: foo is not defined", "ReferenceError"),
            ("java.lang.NullPointerException at Foo.bar", "NullPointerException"),
            ("Error: something broke", "Error"),
            ("Warning: Function xyz is deprecated", "Warning"),
            ("Expected 3 but got 2", "AssertionError"),
            ("this API is deprecated", "DeprecationWarning"),
            ("request timed out", "TimeoutError"),
            ("File not found", "Error"),
        ],
    )
    def test_family(self, message, family):
        assert error_family(message) == family

    def test_slug(self):
        assert family_slug("TypeError") == "type-error"
        assert family_slug("NullPointerException") == "null-pointer-exception"


class TestMessageShape:
    def test_quoted_values_replaced(self):
        assert (
            message_shape('TypeError: Cannot read property "name" of undefined')
            == "cannot read property <str> of undefined"
        )

    def test_trailing_frame_dropped(self):
        assert message_shape("TypeError: x is not a function at render") == (
            "<id> is not a function"
        )

    @pytest.mark.parametrize(
        "message",
        [
            "TypeError: foo.bar is not a function",
            "TypeError: api.fetchUser is not a constructor",
            "TypeError: items is not iterable",
            "TypeError: session.user is undefined",
        ],
    )
    def test_accessed_names_replaced(self, message):
        assert message_shape(message).startswith("<id> is ")

    def test_decimal_numbers_are_not_identifiers(self):
        assert message_shape("Error: took 3.5 seconds") == "took <num> seconds"

    def test_undefined_names_replaced(self):
        assert message_shape("ReferenceError: undefinedVar is not defined") == (
            "<id> is not defined"
        )

    def test_property_identifier_replaced(self):
        assert message_shape("TypeError: Cannot read property foo of null") == (
            "cannot read property <id> of null"
        )

    def test_numbers_hex_and_paths(self):
        shape = message_shape("Error: segfault at 0xdeadbeef in src/core/io.c:42 after 3 tries")
        assert "<hex>" in shape
        assert "<path>" in shape
        assert "<num>" in shape

    def test_expected_actual_values(self):
        assert message_shape("Expected 5 but received 3") == "expected <val> but <got> <val>"


class TestErrorSignature:
    def test_variable_parts_cluster(self):
        assert error_signature(
            'TypeError: Cannot read property "name" of undefined at getUserName'
        ) == error_signature('TypeError: Cannot read property "email" of undefined at getMail')

    def test_dotted_names_cluster(self):
        signatures = {
            error_signature(f"TypeError: {name} is not a function")
            for name in ("foo.bar", "baz.qux", "api.fetchUser", "svc12.handler3")
        }
        assert signatures == {"TypeError|<id> is not a function"}

    def test_families_separate(self):
        assert error_signature("ReferenceError: x is not defined") != error_signature(
            "TypeError: x is not defined"
        )

    def test_identifier_words_not_split(self):
        assert error_signature("Errors everywhere") != error_signature("Error: s everywhere")


class TestShapeToRegex:
    @pytest.mark.parametrize(
        "message",
        [
            'Cannot read property "name" of undefined',
            "expected 42 but got 41",
            "timeout after 3.5 seconds",
            "api.fetchUser is not a function",
        ],
    )
    def test_shape_regex_matches_message(self, message):
        regex = re.compile(shape_to_regex(message_shape(message, "Error")), re.IGNORECASE)
        assert regex.search(message)
