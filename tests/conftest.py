"""Pytest configuration and shared fixtures."""

import pytest

from simplevalidation.config import get_settings
from simplevalidation.validation import CheckerRegistry, Validator


@pytest.fixture
def registry() -> CheckerRegistry:
    """A fresh registry holding only the built-in checkers."""
    return CheckerRegistry()


@pytest.fixture
def validator(registry: CheckerRegistry) -> Validator:
    """A validator isolated from the process-wide default registry."""
    return Validator(registry=registry)


@pytest.fixture
def fresh_settings():
    """Re-read settings from the environment for the duration of a test."""
    get_settings.cache_clear()
    yield get_settings
    get_settings.cache_clear()
