"""Error taxonomy for the Google Tasks MCP gateway."""


class GatewayError(Exception):
    """Base class for errors raised by the gateway."""

    code = "GATEWAY_ERROR"

    def __str__(self) -> str:
        message = super().__str__()
        return f"{self.code}: {message}" if message else self.code


class MissingCredentials(GatewayError):
    """Raised when no persisted OAuth token record exists."""

    code = "MISSING_CREDENTIALS"


class MalformedCredentials(GatewayError):
    """Raised when the persisted OAuth token record cannot be parsed."""

    code = "MALFORMED_CREDENTIALS"


class OAuthConfigError(GatewayError):
    """Raised when the OAuth client secrets file is missing or invalid."""

    code = "OAUTH_CONFIG_ERROR"


class InvalidToolInput(GatewayError):
    code = "INVALID_ARGUMENT"


class UnknownTool(GatewayError):
    code = "UNKNOWN_TOOL"


class TaskNotFound(GatewayError):
    code = "TASK_NOT_FOUND"


class ResourceNotFound(GatewayError):
    code = "RESOURCE_NOT_FOUND"


class TaskListNotFound(GatewayError):
    code = "TASK_LIST_NOT_FOUND"


class OAuthExchangeFailure(GatewayError):
    """Raised when the authorization code cannot be exchanged for tokens."""

    code = "OAUTH_EXCHANGE_FAILED"


class AuthFlowTimeout(GatewayError):
    """Raised when no authorization callback arrives before the deadline."""

    code = "AUTH_FLOW_TIMEOUT"
