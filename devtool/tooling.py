"""Tool table and container roles."""

from __future__ import annotations

from enum import Enum

from devtool.exceptions import UnknownToolError


class Role(str, Enum):
    """Logical service a container belongs to."""

    PHP = "php"
    NODE = "node"

    @property
    def suffix(self) -> str:
        return f"_{self.value}"


TOOL_ROLES: dict[str, Role] = {
    "php": Role.PHP,
    "composer": Role.PHP,
    "node": Role.NODE,
    "npm": Role.NODE,
    "npx": Role.NODE,
}

SUPPORTED_TOOLS = sorted(TOOL_ROLES)


def resolve_role(tool: str) -> Role:
    """Return the role that owns ``tool``."""
    try:
        return TOOL_ROLES[tool]
    except KeyError:
        supported = ", ".join(SUPPORTED_TOOLS)
        raise UnknownToolError(
            f"Unknown tool '{tool}'. Supported tools: {supported}.",
            error_code="unknown_tool",
            details={"tool": tool},
        ) from None


def container_name_for(base_name: str, role: Role) -> str:
    return f"{base_name}{role.suffix}"
