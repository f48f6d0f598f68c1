"""Shared pytest fixtures."""

import pytest

from fitcube_analytics.core.engine.config_loader import POLICY_ENV_VAR, load_policy


@pytest.fixture(autouse=True)
def isolated_policy(tmp_path, monkeypatch):
    """Point the user policy override at an empty location for every test."""
    monkeypatch.setenv(POLICY_ENV_VAR, str(tmp_path / "no-policy.yaml"))
    load_policy.cache_clear()
    yield
    load_policy.cache_clear()
