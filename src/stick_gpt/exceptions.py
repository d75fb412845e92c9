"""Exception hierarchy for stick-gpt.

All stick-gpt specific exceptions inherit from StickGptError. Errors raised
by tools (ToolNotFoundError, ToolExecutionError, ArgumentParseError) are
contained by the ToolInvoker and reported back to the model as structured
``{"error": ...}`` results. ModelRequestError and LoopLimitExceeded propagate
to the caller of ``ChatOrchestrator.send``.
"""


class StickGptError(Exception):
    """Base exception for all stick-gpt errors."""


class ConfigurationError(StickGptError):
    """Raised when the agent cannot be constructed from its settings.

    Typically a missing API key for the selected provider.
    """


class ToolRegistrationError(StickGptError, ValueError):
    """Raised when a tool definition is missing a name, description or handler."""


class ToolNotFoundError(StickGptError, LookupError):
    """Raised when a tool name lookup fails."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f'Tool "{name}" not found')


class ToolExecutionError(StickGptError):
    """Raised when a tool handler fails."""

    def __init__(self, name: str, cause: BaseException) -> None:
        self.name = name
        self.cause = cause
        super().__init__(str(cause) or type(cause).__name__)


class ArgumentParseError(StickGptError, ValueError):
    """Raised when tool-call arguments are malformed or do not match the schema."""


class ModelRequestError(StickGptError):
    """Raised when a request to the model backend fails.

    Covers network, quota and protocol failures. Never retried by the
    orchestrator.
    """


class LoopLimitExceeded(StickGptError):
    """Raised when a single send() exceeds the configured number of model requests."""

    def __init__(self, max_iterations: int) -> None:
        self.max_iterations = max_iterations
        super().__init__(
            f"Tool loop exceeded {max_iterations} model requests without a final answer"
        )


class McpConfigError(StickGptError):
    """Raised when an MCP configuration file cannot be read or is invalid."""
