"""Pytest fixtures for NeuroLint tests."""

import logging
from collections.abc import Generator
from pathlib import Path

import pytest
import structlog

from neurolint.state.memory import InMemoryProgressStore
from tests.helpers import FakeBackend


@pytest.fixture(autouse=True)
def reset_logging_state() -> Generator[None, None, None]:
    """Reset logging and CLI output state before and after each test.

    This ensures test isolation for logging configuration.
    """
    from neurolint.cli import helpers

    helpers.reset_logging_state()
    structlog.reset_defaults()

    root_logger = logging.getLogger()
    original_handlers = root_logger.handlers[:]
    for handler in original_handlers:
        root_logger.removeHandler(handler)

    yield

    helpers.reset_logging_state()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
    for handler in original_handlers:
        root_logger.addHandler(handler)


@pytest.fixture(autouse=True)
def clear_api_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep the developer's environment out of config loading."""
    monkeypatch.delenv("NEUROLINT_API_KEY", raising=False)
    monkeypatch.delenv("NEUROLINT_API_URL", raising=False)


@pytest.fixture
def fake_backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
def memory_store() -> InMemoryProgressStore:
    return InMemoryProgressStore()


@pytest.fixture
def project(tmp_path: Path) -> Path:
    """A project directory with three small source files under src/."""
    src = tmp_path / "src"
    src.mkdir()
    for name in ("a.ts", "b.ts", "c.ts"):
        (src / name).write_text(f"const {name[0]} = 1;\n")
    return tmp_path


@pytest.fixture
def source_files(project: Path) -> list[str]:
    return [str(project / "src" / name) for name in ("a.ts", "b.ts", "c.ts")]
