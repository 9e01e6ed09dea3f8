"""Exception hierarchy for the torrent bridge.

All custom exceptions inherit from BridgeError to enable
selective catching at different levels.

Hierarchy:
    BridgeError (base)
    ├── ConfigError - Configuration issues (missing env vars)
    ├── TransportError - Network failures talking to Telegram or qBittorrent
    └── PersistenceError - Snapshot read/write failures
"""


class BridgeError(Exception):
    """
    Base exception for all bridge errors.

    Catching this will catch all custom exceptions from this module.
    """

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class ConfigError(BridgeError):
    """
    Configuration error.

    Raised when required configuration is missing or invalid.
    Examples: missing bot token, empty disk list, default disk out of range.

    CLI Exit Code: 1
    """

    def __init__(self, message: str, problems: list[str] | None = None):
        self.problems = problems or []
        super().__init__(message)


class TransportError(BridgeError):
    """
    Network error talking to an external service.

    Raised inside the HTTP wrappers and converted to an empty result
    at their public surface, so callers simply retry on the next cycle.

    Attributes:
        service: Name of the service that failed ("telegram", "qbittorrent")
        original_error: Original exception if wrapping
    """

    def __init__(
        self, message: str, service: str = "unknown", original_error: Exception | None = None
    ):
        self.service = service
        self.original_error = original_error
        super().__init__(f"[{service}] {message}")


class PersistenceError(BridgeError):
    """
    Storage read/write error.

    Raised when the state snapshot cannot be written.

    Attributes:
        path: Path that caused the error
        operation: Operation that failed (read, write)
    """

    def __init__(self, message: str, path: str | None = None, operation: str | None = None):
        self.path = path
        self.operation = operation
        super().__init__(message)
