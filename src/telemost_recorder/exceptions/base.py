"""
Base exceptions for Telemost Recorder.
"""


class TelemostRecorderError(Exception):
    """
    Base exception for all Telemost Recorder errors.

    All custom exceptions inherit from this class, making it easy
    to catch any error from the library.

    Attributes:
        message: Human-readable error message
        details: Optional additional error details
        code: Machine-readable error code reported by the HTTP API
        status_code: HTTP status the API answers with
    """

    code: str = "internal_error"
    status_code: int = 500

    def __init__(
        self,
        message: str,
        details: dict | None = None,
        code: str | None = None,
        status_code: int | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.details = details or {}
        if code is not None:
            self.code = code
        if status_code is not None:
            self.status_code = status_code

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} - Details: {self.details}"
        return self.message


class ConfigurationError(TelemostRecorderError):
    """
    Error in configuration.

    Raised when merged settings, environment variables or a config file
    fail validation.
    """
    code = "configuration_error"


class ValidationError(TelemostRecorderError):
    """
    Invalid request parameters.

    Attributes:
        errors: One message per failed check
    """
    code = "validation_error"
    status_code = 400

    def __init__(self, message: str, errors: list[str] | None = None):
        super().__init__(message, {"errors": errors or []})
        self.errors = errors or []


class InitializationError(TelemostRecorderError):
    """
    Error during initialization.

    Raised when the browser session or its page cannot be created.
    The recorder never retries this.
    """
    code = "initialization_error"
