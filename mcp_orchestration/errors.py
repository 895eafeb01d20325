"""Error taxonomy of the orchestration layer."""


class OrchestrationError(Exception):
    """Base for all orchestration errors."""


class ValidationError(OrchestrationError, ValueError):
    """Bad input to a mutating call (e.g. an empty server name)."""


class NotFoundError(OrchestrationError, LookupError):
    """The referenced id does not exist."""


class ServerConnectionError(OrchestrationError, ConnectionError):
    """An MCP server could not be reached, or the probe before connecting failed."""


class DiscoveryError(OrchestrationError):
    """A reachable server answered the tool listing with malformed data."""


class NotConnectedError(OrchestrationError):
    """The tool's server is not connected to the consumer, or is disabled or gone."""


class InvalidToolError(OrchestrationError):
    """The tool is not an MCP tool or carries no owning server."""


class ExecutionError(OrchestrationError):
    """Remote tool execution failed.

    Attributes:
        cause: The underlying transport error or timeout.
    """

    def __init__(self, message: str, cause: BaseException | None = None) -> None:
        self.cause = cause
        super().__init__(message)
