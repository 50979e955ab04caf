"""
Repository-level pytest configuration.

Why this exists:
  - Configure loguru once per test session from config/config.yaml
  - Expose the repo root for tests that need project files
  - Keep behavior explicit and discoverable

Important:
  The credentials in config/config.yaml are the public Restful-Booker demo
  values. Real projects should load secrets from a secret manager in CI/CD.
"""

from __future__ import annotations

from pathlib import Path

import pytest

from booker_testsuites.api_testing.framework.config_loader import ConfigLoader
from booker_testsuites.api_testing.framework.log_setup import init_logger


@pytest.fixture(scope="session")
def project_root() -> Path:
    """Return repo root path."""
    return Path(__file__).parent


@pytest.fixture(scope="session")
def config() -> ConfigLoader:
    """
    Provide the session's configuration.

    Session-scoped so settings are loaded once and shared by every fixture.
    """
    return ConfigLoader()


@pytest.fixture(scope="session", autouse=True)
def _configure_logging(config: ConfigLoader) -> None:
    """Route loguru output through the configured sinks."""
    init_logger(config)
