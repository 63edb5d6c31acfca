"""FunnelScope — Error Taxonomy.

Connector errors carry the platform key and, where the vendor answered,
its HTTP status. Degraded secondary calls are not errors: connectors log
them and fall back to empty defaults.
"""


class ConnectorError(Exception):
    """Raised when a connector cannot produce a metrics record."""

    def __init__(self, message: str, platform: str = "", status_code: int = 0):
        self.platform = platform
        self.status_code = status_code
        self.message = message
        super().__init__(message)


class AuthError(ConnectorError):
    """Credential rejected or auth exchange failed."""


class ResourceNotFoundError(ConnectorError):
    """The list / property / account to read from does not exist."""


class PrimaryFetchError(ConnectorError):
    """The call supplying the headline numbers failed."""


# ── Service-level errors ──


class UnknownPlatformError(ValueError):
    """Raised for a platform key with no registered connector."""

    def __init__(self, platform: str):
        self.platform = platform
        super().__init__(f"Unknown platform: {platform}")


class PlatformNotConnectedError(Exception):
    """Raised when syncing a platform that has no stored credentials."""

    def __init__(self, platform: str):
        self.platform = platform
        super().__init__(f'Platform "{platform}" is not connected')


class PlatformOperationError(Exception):
    """A single-platform connect or sync failed.

    The message is prefixed with the platform and operation; the vendor's
    own error text follows verbatim.
    """

    def __init__(self, platform: str, operation: str, cause: ConnectorError):
        self.platform = platform
        self.operation = operation
        self.cause = cause
        self.status_code = cause.status_code
        super().__init__(f"{platform} {operation} failed: {cause.message}")
