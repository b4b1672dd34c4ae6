"""
Custom Exceptions.

Application-specific exception classes for consistent error handling.
Transport failures are not wrapped: httpx.HTTPError propagates unchanged
to the command layer.
"""


class ApplicationError(Exception):
    """Base exception for all application errors."""

    def __init__(self, message: str, code: str = "SYS_INTERNAL_ERROR") -> None:
        self.message = message
        self.code = code
        super().__init__(self.message)


class OptionValidationError(ApplicationError):
    """Raised when command-line options are missing, malformed or conflicting."""

    def __init__(self, message: str = "Validation failed", banner: str | None = None) -> None:
        self.banner = banner
        if banner:
            message = f"{message}\n{banner}"
        super().__init__(message, code="VAL_VALIDATION_ERROR")


class CommandParsingError(ApplicationError):
    """Raised when a command receives arguments it does not accept."""

    def __init__(self, message: str = "Unexpected arguments") -> None:
        super().__init__(message, code="CLI_PARSE_ERROR")


class BadRequestError(ApplicationError):
    """Raised when an API-bound request is malformed or incomplete."""

    def __init__(self, message: str = "Bad request") -> None:
        super().__init__(message, code="REQ_BAD_REQUEST")


class MethodNotAllowedError(ApplicationError):
    """Raised for deprecated or disallowed operations."""

    def __init__(self, message: str = "Method not allowed") -> None:
        super().__init__(message, code="REQ_METHOD_NOT_ALLOWED")


class ConfigurationError(ApplicationError):
    """Raised when the engine connection cannot be configured."""

    def __init__(self, message: str = "Configuration error") -> None:
        super().__init__(message, code="SYS_CONFIG_ERROR")
