"""Shared pytest fixtures for PatternWatch test suite."""

from __future__ import annotations

import os

import pytest

from patternwatch.config import get_settings
from patternwatch.validation import get_validator

# ---------------------------------------------------------------------------
# Environment isolation — no real .env ever loaded in tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _isolate_settings(monkeypatch):
    """Every test gets default settings and a fresh shared validator."""
    # Clear cached singletons
    get_settings.cache_clear()
    get_validator.cache_clear()

    # Drop any PATTERNWATCH_* overrides from the developer's shell
    for key in list(os.environ):
        if key.upper().startswith("PATTERNWATCH_"):
            monkeypatch.delenv(key)

    # Prevent reading a real .env file
    monkeypatch.chdir(os.path.dirname(__file__))

    yield

    # Clear again after test
    get_settings.cache_clear()
    get_validator.cache_clear()


# ---------------------------------------------------------------------------
# Factory fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def make_pattern():
    """Factory for Pattern instances."""
    from tests.factories import make_pattern

    return make_pattern


@pytest.fixture
def make_failure():
    """Factory for TestFailure instances."""
    from tests.factories import make_failure

    return make_failure


# ---------------------------------------------------------------------------
# Common model instances
# ---------------------------------------------------------------------------


@pytest.fixture
def valid_pattern():
    from tests.factories import make_pattern

    return make_pattern()


@pytest.fixture
def valid_pattern_dict():
    from tests.factories import make_pattern_dict

    return make_pattern_dict()
