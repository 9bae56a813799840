"""
Browser Interface - Abstract base classes for the browser driver facade.

This module defines the contract the recorder depends on. The recorder never
talks to Playwright directly; it only uses the operations declared here, so a
different driver (or a test double) can be plugged in.

Example:
    >>> from telemost_recorder.browsers import PlaywrightBrowser
    >>> browser = PlaywrightBrowser()
    >>> await browser.launch(headless=True)
    >>> page = await browser.new_page()
    >>> await page.goto("https://telemost.yandex.ru/j/12345", timeout=60000)
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any, AsyncIterator, Callable, Optional


class BrowserType(str, Enum):
    """Supported browser types."""
    CHROMIUM = "chromium"
    FIREFOX = "firefox"
    WEBKIT = "webkit"


class PageEvent(str, Enum):
    """
    Page lifecycle events a caller can subscribe to.

    Values are the driver-level event names.
    """
    NAVIGATION = "framenavigated"
    CLOSE = "close"
    CRASH = "crash"
    PAGE_ERROR = "pageerror"
    CONSOLE = "console"


class LocatorKind(str, Enum):
    """How a locator value is interpreted."""
    TEXT = "text"
    SELECTOR = "selector"


@dataclass(frozen=True)
class LocatorStrategy:
    """
    A single way of finding an element on the page.

    Attributes:
        kind: TEXT matches the exact visible text, SELECTOR is a CSS/driver selector
        value: The text or selector string
        description: Optional human-readable label used in logs
    """
    kind: LocatorKind
    value: str
    description: Optional[str] = None

    @classmethod
    def text(cls, value: str, description: Optional[str] = None) -> "LocatorStrategy":
        """Locate by exact visible text."""
        return cls(LocatorKind.TEXT, value, description)

    @classmethod
    def selector(cls, value: str, description: Optional[str] = None) -> "LocatorStrategy":
        """Locate by CSS/attribute selector."""
        return cls(LocatorKind.SELECTOR, value, description)

    def __str__(self) -> str:
        return self.description or f"{self.kind.value}={self.value!r}"


class IElement(ABC):
    """
    Abstract interface for a live DOM element reference.
    """

    @abstractmethod
    async def click(self, **options: Any) -> None:
        """
        Click on this element.

        Args:
            **options: Driver-specific click options
        """
        ...

    @abstractmethod
    async def text_content(self) -> Optional[str]:
        """Get the text content of this element."""
        ...

    @abstractmethod
    async def is_visible(self) -> bool:
        """Check if this element is visible."""
        ...


class IAudioStream(ABC):
    """
    Abstract interface for a captured audio byte stream.

    Iterating the stream yields raw byte chunks in the order the capture source
    produced them. Iteration ends once the source has terminated and every
    pending chunk has been delivered.
    """

    @property
    @abstractmethod
    def mime_type(self) -> Optional[str]:
        """MIME type reported by the capture source, if known."""
        ...

    @abstractmethod
    def __aiter__(self) -> AsyncIterator[bytes]:
        ...

    @abstractmethod
    async def close(self) -> None:
        """
        Signal the capture source to terminate.

        Chunks already produced are still delivered to the iterator before it ends.
        """
        ...


class IPage(ABC):
    """
    Abstract interface for browser page operations used by the recorder.
    """

    @property
    @abstractmethod
    def url(self) -> str:
        """Get the current page URL."""
        ...

    @abstractmethod
    async def goto(self, url: str, timeout: Optional[int] = None, **options: Any) -> None:
        """
        Navigate to a URL.

        Args:
            url: The URL to navigate to
            timeout: Navigation timeout in milliseconds
            **options: Driver-specific navigation options (e.g., wait_until)

        Raises:
            NavigationError: If navigation fails or times out
        """
        ...

    @abstractmethod
    async def wait_for_locator(
        self,
        locator: LocatorStrategy,
        timeout: int,
        poll_interval: int,
    ) -> IElement:
        """
        Poll for a visible element matching the locator.

        Args:
            locator: What to look for
            timeout: Maximum time to wait in milliseconds
            poll_interval: Delay between lookups in milliseconds

        Returns:
            The first visible matching element

        Raises:
            ElementNotFoundError: If nothing matched within the timeout
        """
        ...

    @abstractmethod
    async def evaluate(self, expression: str, *args: Any) -> Any:
        """
        Execute JavaScript in the page context.

        Args:
            expression: JavaScript expression or function to execute
            *args: Arguments to pass to the function

        Returns:
            The result of the JavaScript execution
        """
        ...

    @abstractmethod
    async def content(self) -> str:
        """
        Get the full HTML content of the page.

        Returns:
            The page's HTML content
        """
        ...

    @abstractmethod
    async def capture_audio(self, timeslice: int = 1000) -> IAudioStream:
        """
        Start capturing the page's audio output.

        Args:
            timeslice: How often the source emits a chunk, in milliseconds

        Returns:
            A live audio byte stream

        Raises:
            PageError: If the capture source could not be started
        """
        ...

    @abstractmethod
    def on(self, event: PageEvent, handler: Callable[..., Any]) -> None:
        """Subscribe a handler to a page event."""
        ...

    @abstractmethod
    def remove_listener(self, event: PageEvent, handler: Callable[..., Any]) -> None:
        """Unsubscribe a handler previously registered with on()."""
        ...

    @abstractmethod
    async def wait_for_navigation(self, timeout: Optional[int] = None) -> None:
        """
        Wait until the main frame navigates.

        Args:
            timeout: Maximum wait in milliseconds, 0 disables the timeout

        Raises:
            TimeoutError: If the timeout elapsed first
        """
        ...

    @abstractmethod
    def is_closed(self) -> bool:
        """Check whether the page has been closed."""
        ...

    @abstractmethod
    async def close(self) -> None:
        """Close this page."""
        ...


class IBrowserContext(ABC):
    """
    Abstract interface for browser context (isolated session).

    A context has its own cookies and storage. Pooled recordings each get their
    own context on a shared browser process.
    """

    @abstractmethod
    async def new_page(self, **options: Any) -> IPage:
        """Create a new page in this context."""
        ...

    @abstractmethod
    async def close(self) -> None:
        """Close this context and all its pages."""
        ...


class IBrowser(ABC):
    """
    Abstract interface for browser management.
    """

    @property
    @abstractmethod
    def is_connected(self) -> bool:
        """Check if the browser is connected and running."""
        ...

    @abstractmethod
    async def launch(
        self,
        headless: bool = True,
        browser_type: BrowserType = BrowserType.CHROMIUM,
        **options: Any,
    ) -> None:
        """
        Launch a browser instance.

        Args:
            headless: Whether to run in headless mode
            browser_type: Type of browser to launch
            **options: Driver-specific launch options (args, channel, ...)

        Raises:
            BrowserLaunchError: If the browser could not be started
        """
        ...

    @abstractmethod
    async def new_page(self, **options: Any) -> IPage:
        """Create a new page in the default context."""
        ...

    @abstractmethod
    async def new_context(self, **options: Any) -> IBrowserContext:
        """Create a new isolated browser context."""
        ...

    @abstractmethod
    def on_disconnect(self, callback: Callable[[], None]) -> None:
        """Register a callback invoked when the browser process goes away."""
        ...

    @abstractmethod
    async def version(self) -> str:
        """Get the browser version string."""
        ...

    @abstractmethod
    async def close(self) -> None:
        """Close the browser and cleanup resources."""
        ...
