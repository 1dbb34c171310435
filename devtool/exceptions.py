"""Custom exceptions for devtool domain-specific errors.

Exception Hierarchy:
    DevtoolException (base)
    ├── ContainerRuntimeError
    │   ├── RuntimeUnavailableError
    │   ├── ContainerStartError
    │   └── ContainerCommandError
    ├── DispatchError
    │   ├── AmbiguousContainerError
    │   └── UnknownToolError
    ├── ConfigurationError
    ├── InputValidationError
    ├── HostsUpdateError
    └── OperationAborted

A tool that exits non-zero while being dispatched is not an error here: its
exit status is handed back to the caller unchanged.
"""


class DevtoolException(Exception):
    """Base exception for all devtool errors.

    Attributes:
        message: Descriptive error message
        error_code: Machine-readable error identifier
        details: Additional context about the error
    """

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict | None = None,
    ) -> None:
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> dict:
        """Convert exception to a dictionary for structured log output."""
        return {
            "error": self.error_code,
            "message": self.message,
            "details": self.details if self.details else None,
        }


# ============================================================================
# CONTAINER RUNTIME ERRORS
# ============================================================================


class ContainerRuntimeError(DevtoolException):
    """Base exception for failures talking to the container runtime."""

    pass


class RuntimeUnavailableError(ContainerRuntimeError):
    """Raised when the container runtime cannot be queried.

    Reasons might include:
    - The runtime CLI is not installed
    - The daemon is not running or not reachable

    The dispatcher recovers from this by running the tool on the host.
    """

    pass


class ContainerStartError(ContainerRuntimeError):
    """Raised when the Compose stack cannot be brought up.

    Example:
        >>> raise ContainerStartError(
        ...     message="Container did not start",
        ...     error_code="container_not_running",
        ...     details={"container": "dev_container_php", "attempts": 3},
        ... )
    """

    pass


class ContainerCommandError(ContainerRuntimeError):
    """Raised when a scaffolding command fails inside a container."""

    pass


# ============================================================================
# DISPATCH ERRORS
# ============================================================================


class DispatchError(DevtoolException):
    """Base exception for dispatch resolution failures."""

    pass


class AmbiguousContainerError(DispatchError):
    """Raised when several running containers carry the same role suffix.

    Only raised under the ``strict`` selection policy when none of the
    candidates is the configured container name.
    """

    pass


class UnknownToolError(DispatchError):
    """Raised when a tool has no role in the tool table."""

    pass


# ============================================================================
# CONFIGURATION AND INPUT ERRORS
# ============================================================================


class ConfigurationError(DevtoolException):
    """Raised when the stack layout or its ``.env`` file cannot be found."""

    pass


class InputValidationError(DevtoolException):
    """Raised when a project name or Laravel version is rejected."""

    pass


class HostsUpdateError(DevtoolException):
    """Raised when the hosts file entry cannot be written."""

    pass


class OperationAborted(DevtoolException):
    """Raised when the user declines to continue an interactive step."""

    pass
