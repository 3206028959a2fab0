"""Shared pytest fixtures and test helpers for layerkit tests."""

from __future__ import annotations

import logging
from collections.abc import Generator
from unittest.mock import Mock

import pytest
from click.testing import CliRunner


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def listener() -> Mock:
    """A listener that accepts any callback and records the calls."""
    return Mock(name="listener")


@pytest.fixture
def _isolated_config(tmp_path, monkeypatch: pytest.MonkeyPatch) -> Generator[None]:
    """Run in an empty directory so no layerkit.toml or env config leaks in.

    Use via ``@pytest.mark.usefixtures("_isolated_config")``.
    """
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("LAYERKIT_CONFIG", raising=False)
    yield


@pytest.fixture(autouse=True)
def _restore_logging() -> Generator[None]:
    """Restore root logger state after each test.

    The CLI reconfigures logging on every invocation; without this the
    handler it installs outlives the test's captured stderr.
    """
    root = logging.getLogger()
    original_handlers = root.handlers[:]
    original_level = root.level
    lk = logging.getLogger("layerkit")
    lk_level = lk.level
    yield
    root.handlers = original_handlers
    root.setLevel(original_level)
    lk.setLevel(lk_level)
