"""
Shared pytest configuration and fixtures for devtool tests.

This module provides reusable fixtures for:
- Logging configuration and capture
- Fake container runtimes and host runners (no Docker required)
- Environment isolation for settings
"""

import logging
from collections.abc import Sequence

import pytest

from devtool.exceptions import RuntimeUnavailableError
from devtool.logging import configure_logging

SETTINGS_ENV_VARS = (
    "CONTAINER_NAME",
    "SERVER_PORT",
    "DB_PORT",
    "DB_ROOT_PASSWORD",
    "CONTAINER_RUNTIME",
    "CONTAINER_SELECTION",
    "LOG_LEVEL",
    "LOG_JSON_OUTPUT",
)


# ============================================================================
# Fakes
# ============================================================================


class FakeRuntime:
    """Container runtime returning a controlled registry snapshot."""

    def __init__(self, names: Sequence[str] = (), *, exit_code: int = 0, unavailable: bool = False) -> None:
        self.names = list(names)
        self.exit_code = exit_code
        self.unavailable = unavailable
        self.list_calls = 0
        self.exec_calls: list[tuple[str, str, list[str]]] = []

    def list_running_containers(self) -> list[str]:
        self.list_calls += 1
        if self.unavailable:
            raise RuntimeUnavailableError("Container runtime 'docker' is not reachable")
        return list(self.names)

    def exec_in_container(self, name: str, tool: str, args: Sequence[str]) -> int:
        self.exec_calls.append((name, tool, list(args)))
        return self.exit_code


class FakeStackRuntime(FakeRuntime):
    """Runtime that also records Compose operations used by project scaffolding."""

    def __init__(
        self,
        names: Sequence[str] = (),
        *,
        running: Sequence[bool] = (True,),
        exit_codes: dict[str, int] | None = None,
    ) -> None:
        super().__init__(names)
        self._running = list(running)
        self.exit_codes = exit_codes or {}
        self.compose_up_calls = 0
        self.restarted: list[str] = []
        self.running_checks: list[str] = []

    def is_running(self, name: str) -> bool:
        self.running_checks.append(name)
        if len(self._running) > 1:
            return self._running.pop(0)
        return self._running[0]

    def compose_up(self) -> None:
        self.compose_up_calls += 1

    def restart_service(self, service: str) -> None:
        self.restarted.append(service)

    def exec_in_container(self, name: str, tool: str, args: Sequence[str]) -> int:
        self.exec_calls.append((name, tool, list(args)))
        command = " ".join([tool, *args])
        for needle, code in self.exit_codes.items():
            if needle in command:
                return code
        return 0


class FakeHost:
    """Host runner recording what would have been executed locally."""

    def __init__(self, exit_code: int = 0) -> None:
        self.exit_code = exit_code
        self.calls: list[tuple[str, list[str]]] = []

    def run(self, tool: str, args: Sequence[str]) -> int:
        self.calls.append((tool, list(args)))
        return self.exit_code


class ScriptedInput:
    """Replacement for ``input`` answering from a fixed list."""

    def __init__(self, answers: Sequence[str]) -> None:
        self._answers = list(answers)
        self.questions: list[str] = []

    def __call__(self, question: str) -> str:
        self.questions.append(question)
        if not self._answers:
            raise AssertionError(f"Unexpected prompt: {question}")
        return self._answers.pop(0)


# ============================================================================
# Logging Fixtures
# ============================================================================


@pytest.fixture(autouse=True)
def configured_logging():
    """Route structlog through stdlib logging, as the CLI does."""
    configure_logging(level="DEBUG", json_output=False)
    yield


@pytest.fixture
def capture_logs(configured_logging):
    """Capture log records emitted through the root logger."""

    class LogCapture(logging.Handler):
        def __init__(self):
            super().__init__()
            self.records = []

        def emit(self, record):
            self.records.append(record)

        def at_level(self, level: int) -> list[logging.LogRecord]:
            return [record for record in self.records if record.levelno == level]

    handler = LogCapture()
    logger = logging.getLogger()
    logger.addHandler(handler)

    yield handler

    logger.removeHandler(handler)


# ============================================================================
# Environment Fixtures
# ============================================================================


@pytest.fixture
def clean_env(monkeypatch):
    """Remove settings variables a developer shell might export."""
    for name in SETTINGS_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


@pytest.fixture
def stack_dir(tmp_path, monkeypatch, clean_env):
    """A minimal stack checkout (``docker/`` and ``src/``) used as working directory."""
    (tmp_path / "docker" / "apache" / "vhosts").mkdir(parents=True)
    (tmp_path / "src").mkdir()
    monkeypatch.chdir(tmp_path)
    return tmp_path
