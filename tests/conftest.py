"""Shared pytest fixtures for fluentql unit and integration tests."""
from __future__ import annotations

import pytest

from fluentql import SqlBuilder, SqlBuilderConfig
from tests.fixtures import RecordingProvider


@pytest.fixture()
def provider() -> RecordingProvider:
    return RecordingProvider()


@pytest.fixture()
def sql(provider: RecordingProvider) -> SqlBuilder:
    """Standard dialect, debug comments off, recording connection provider."""
    return SqlBuilder(provider)


@pytest.fixture()
def debug_sql() -> SqlBuilder:
    """Standard dialect with bound values echoed as comments."""
    return SqlBuilder(config=SqlBuilderConfig(debug=True))


@pytest.fixture()
def oracle_sql() -> SqlBuilder:
    return SqlBuilder(dialect="oracle")
