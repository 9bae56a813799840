"""
Browser-related exceptions raised by the driver facade.
"""

from telemost_recorder.exceptions.base import TelemostRecorderError


class BrowserError(TelemostRecorderError):
    """Base exception for browser-related errors."""
    code = "browser_error"


class BrowserLaunchError(BrowserError):
    """
    Error launching the browser.

    Raised when the browser fails to start, which could be due to:
    - Missing browser binaries
    - Invalid launch arguments
    - Resource constraints
    """
    pass


class BrowserConnectionError(BrowserError):
    """
    Error talking to the browser.

    Raised when the browser was never launched or the connection was lost.
    """
    pass


class PageError(BrowserError):
    """Base exception for page-related errors."""
    pass


class NavigationError(PageError):
    """
    Error during page navigation.

    Raised when navigation fails, such as:
    - Invalid URL
    - Network error
    - Navigation timeout
    """

    def __init__(self, message: str, url: str | None = None):
        super().__init__(message, {"url": url})
        self.url = url


class ElementNotFoundError(PageError):
    """
    Element not found on the page.

    Raised when no visible element matched a locator within its timeout.
    """

    def __init__(self, message: str, selector: str):
        super().__init__(message, {"selector": selector})
        self.selector = selector


class TimeoutError(PageError):
    """
    Operation timed out.

    Raised when a browser wait exceeds its timeout.
    """

    def __init__(self, message: str, timeout_ms: int, operation: str | None = None):
        super().__init__(message, {"timeout_ms": timeout_ms, "operation": operation})
        self.timeout_ms = timeout_ms
        self.operation = operation
