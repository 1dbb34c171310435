"""Run developer tools inside the container that owns them, or on the host."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Literal

from devtool.exceptions import AmbiguousContainerError, RuntimeUnavailableError
from devtool.logging import get_logger
from devtool.runtime import ContainerRuntime, HostRunner
from devtool.tooling import Role, container_name_for, resolve_role

logger = get_logger(__name__)

SelectionPolicy = Literal["strict", "first"]


@dataclass(slots=True)
class DispatchRequest:
    """One tool invocation, consumed by a single dispatch."""

    tool: str
    args: list[str] = field(default_factory=list)
    role: Role | None = None


@dataclass(slots=True)
class DispatchTarget:
    """Where a request will run: a container name, or ``None`` for the host."""

    container: str | None
    reason: str | None = None

    @property
    def on_host(self) -> bool:
        return self.container is None


def matching_containers(names: Sequence[str], role: Role) -> list[str]:
    """Names ending with the role's suffix, in the order they were listed."""
    return [name for name in names if name.endswith(role.suffix)]


def select_container(
    candidates: Sequence[str],
    role: Role,
    *,
    configured_name: str | None = None,
    policy: SelectionPolicy = "strict",
) -> str | None:
    """Pick one container out of ``candidates`` (all already carrying the role suffix)."""
    if not candidates:
        return None
    if policy == "first":
        return candidates[0]
    if configured_name and configured_name in candidates:
        return configured_name
    if len(candidates) == 1:
        return candidates[0]
    raise AmbiguousContainerError(
        f"Several running containers end with '{role.suffix}': {', '.join(candidates)}. "
        "Set CONTAINER_NAME to the one to use, or CONTAINER_SELECTION=first.",
        error_code="ambiguous_container",
        details={"role": role.value, "candidates": list(candidates)},
    )


class CommandDispatcher:
    """Resolve a tool to a running container and execute it there.

    When no container with the role's suffix is running, or the container
    runtime cannot be queried, the tool runs on the host instead and a single
    warning is logged. The child's exit status is returned unchanged.
    """

    def __init__(
        self,
        runtime: ContainerRuntime,
        host: HostRunner,
        *,
        base_name: str | None = None,
        policy: SelectionPolicy = "strict",
    ) -> None:
        self._runtime = runtime
        self._host = host
        self._base_name = base_name
        self._policy = policy

    def dispatch(self, tool: str, args: Sequence[str] = (), role: Role | None = None) -> int:
        request = DispatchRequest(tool=tool, args=list(args), role=role or resolve_role(tool))
        return self.run(request)

    def run(self, request: DispatchRequest) -> int:
        role = request.role or resolve_role(request.tool)
        target = self.resolve(role)
        if target.on_host:
            logger.warning(
                "dispatch.host_fallback",
                tool=request.tool,
                role=role.value,
                reason=target.reason,
            )
            return self._host.run(request.tool, request.args)

        logger.info("dispatch.container_selected", tool=request.tool, container=target.container)
        return self._runtime.exec_in_container(target.container, request.tool, request.args)

    def resolve(self, role: Role) -> DispatchTarget:
        """Query the runtime and decide where a tool of ``role`` would run."""
        try:
            names = self._runtime.list_running_containers()
        except RuntimeUnavailableError as exc:
            return DispatchTarget(container=None, reason=exc.message)

        configured = container_name_for(self._base_name, role) if self._base_name else None
        container = select_container(
            matching_containers(names, role),
            role,
            configured_name=configured,
            policy=self._policy,
        )
        if container is None:
            return DispatchTarget(container=None, reason=f"no running container ends with '{role.suffix}'")
        return DispatchTarget(container=container)
