"""Runtime abstractions for executing tools in containers or on the host."""

from __future__ import annotations

import subprocess
import sys
from collections.abc import Sequence
from typing import Callable, Protocol

from devtool.constants import DEFAULT_CONTAINER_RUNTIME, EXIT_NOT_EXECUTABLE, EXIT_NOT_FOUND
from devtool.exceptions import ContainerCommandError, ContainerStartError, RuntimeUnavailableError
from devtool.logging import get_logger

logger = get_logger(__name__)


def _exit_status(returncode: int) -> int:
    """Report a child killed by signal N as ``128 + N``, the way a shell does."""
    if returncode < 0:
        return 128 - returncode
    return returncode


class ContainerRuntime(Protocol):
    """Capability the dispatcher needs from a container backend."""

    def list_running_containers(self) -> list[str]: ...

    def exec_in_container(self, name: str, tool: str, args: Sequence[str]) -> int: ...


class StackRuntime(ContainerRuntime, Protocol):
    """Container backend that also manages the Compose stack."""

    def is_running(self, name: str) -> bool: ...

    def compose_up(self) -> None: ...

    def restart_service(self, service: str) -> None: ...


class HostRunner(Protocol):
    def run(self, tool: str, args: Sequence[str]) -> int: ...


class LocalRuntime:
    """Execute tools directly on the host, inheriting the caller's streams."""

    def run(self, tool: str, args: Sequence[str]) -> int:
        command = [tool, *args]
        logger.debug("runtime.host_exec", command=command)
        try:
            completed = subprocess.run(command, check=False)
        except FileNotFoundError:
            logger.error("runtime.tool_not_found", tool=tool)
            return EXIT_NOT_FOUND
        except PermissionError:
            logger.error("runtime.tool_not_executable", tool=tool)
            return EXIT_NOT_EXECUTABLE
        return _exit_status(completed.returncode)


class DockerRuntime:
    """Talk to containers through the ``docker`` CLI."""

    def __init__(
        self,
        *,
        binary: str = DEFAULT_CONTAINER_RUNTIME,
        isatty: Callable[[], bool] | None = None,
    ) -> None:
        self._binary = binary
        self._isatty = isatty or sys.stdin.isatty

    def list_running_containers(self) -> list[str]:
        output = self._query(["ps", "--format", "{{.Names}}"])
        return [line.strip() for line in output.splitlines() if line.strip()]

    def exec_in_container(self, name: str, tool: str, args: Sequence[str]) -> int:
        command = [self._binary, "exec", *self._exec_flags(), name, tool, *args]
        logger.debug("runtime.container_exec", container=name, command=command)
        try:
            completed = subprocess.run(command, check=False)
        except FileNotFoundError as exc:
            raise RuntimeUnavailableError(
                f"Container runtime '{self._binary}' is not installed",
                error_code="runtime_not_installed",
                details={"binary": self._binary},
            ) from exc
        return _exit_status(completed.returncode)

    def is_running(self, name: str) -> bool:
        output = self._query(["ps", "-q", "-f", f"name={name}"])
        return bool(output.strip())

    def compose_up(self) -> None:
        code = self._call(["compose", "up", "-d"])
        if code != 0:
            raise ContainerStartError(
                f"'{self._binary} compose up -d' failed. Check the Compose configuration.",
                error_code="compose_up_failed",
                details={"exit_code": code},
            )

    def restart_service(self, service: str) -> None:
        code = self._call(["compose", "restart", service])
        if code != 0:
            raise ContainerCommandError(
                f"Failed to restart the '{service}' service. Check that it exists in docker-compose.yml.",
                error_code="compose_restart_failed",
                details={"service": service, "exit_code": code},
            )

    def _exec_flags(self) -> list[str]:
        # -t without a terminal on stdin makes docker refuse to start
        return ["-it"] if self._isatty() else ["-i"]

    def _query(self, arguments: list[str]) -> str:
        command = [self._binary, *arguments]
        try:
            result = subprocess.run(command, check=True, capture_output=True, text=True)
        except FileNotFoundError as exc:
            logger.debug("runtime.list_failed", binary=self._binary, reason="not_installed")
            raise RuntimeUnavailableError(
                f"Container runtime '{self._binary}' is not installed",
                error_code="runtime_not_installed",
                details={"binary": self._binary},
            ) from exc
        except subprocess.CalledProcessError as exc:
            stderr = (exc.stderr or "").strip()
            logger.debug("runtime.list_failed", binary=self._binary, reason="query_failed", stderr=stderr)
            raise RuntimeUnavailableError(
                f"Container runtime '{self._binary}' is not reachable",
                error_code="runtime_unreachable",
                details={"binary": self._binary, "exit_code": exc.returncode, "stderr": stderr},
            ) from exc
        return result.stdout

    def _call(self, arguments: list[str]) -> int:
        command = [self._binary, *arguments]
        logger.info("runtime.command", command=command)
        try:
            return subprocess.run(command, check=False).returncode
        except FileNotFoundError as exc:
            raise RuntimeUnavailableError(
                f"Container runtime '{self._binary}' is not installed",
                error_code="runtime_not_installed",
                details={"binary": self._binary},
            ) from exc
