"""
Pytest configuration and shared fixtures for the assertkit tests.

The ``t`` fixture defined here overrides the one registered by
``assertkit.pytest_plugin``: these tests inspect failures recorded on the
context instead of letting them fail the pytest test.
"""

import os

import pytest

from assertkit.assertions import T
from assertkit.config import AssertkitConfig, set_config


# =============================================================================
# Environment Setup
# =============================================================================


@pytest.fixture(autouse=True)
def clean_environment():
    """Ensure clean environment for each test."""
    original_env = os.environ.copy()

    yield

    os.environ.clear()
    os.environ.update(original_env)


@pytest.fixture(autouse=True)
def default_config():
    """Every test starts from the default configuration."""
    set_config(AssertkitConfig())
    yield
    set_config(None)


# =============================================================================
# Test Contexts
# =============================================================================


@pytest.fixture
def t(request) -> T:
    """A fresh recording context named after the test."""
    return T(request.node.name)


@pytest.fixture
def make_t():
    """Factory for extra recording contexts."""

    def make(name: str = "inner") -> T:
        return T(name)

    return make
