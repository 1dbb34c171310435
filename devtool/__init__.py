"""Companion CLI for the local PHP/Node Docker development stack."""

from devtool.dispatcher import CommandDispatcher, DispatchRequest, DispatchTarget
from devtool.runtime import ContainerRuntime, DockerRuntime, LocalRuntime, StackRuntime
from devtool.settings import DevtoolSettings, load_settings
from devtool.tooling import TOOL_ROLES, Role

__all__ = [
    "TOOL_ROLES",
    "CommandDispatcher",
    "ContainerRuntime",
    "DevtoolSettings",
    "DispatchRequest",
    "DispatchTarget",
    "DockerRuntime",
    "LocalRuntime",
    "Role",
    "StackRuntime",
    "load_settings",
]
