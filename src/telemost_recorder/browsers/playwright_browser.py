"""
Playwright Browser - Implementation of IBrowser using Playwright.

This module provides a Playwright-based implementation of the browser interface,
including in-page audio capture: remote media streams are mixed through an
AudioContext and encoded by a MediaRecorder, and the encoded chunks are shipped
back to Python through an exposed binding.
"""

import asyncio
import base64
import logging
import uuid
from typing import Any, AsyncIterator, Callable, Dict, List, Optional

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from telemost_recorder.interfaces.browser import (
    IBrowser,
    IBrowserContext,
    IPage,
    IElement,
    IAudioStream,
    BrowserType,
    LocatorKind,
    LocatorStrategy,
    PageEvent,
)
from telemost_recorder.exceptions.browser import (
    BrowserLaunchError,
    BrowserConnectionError,
    PageError,
    NavigationError,
    ElementNotFoundError,
    TimeoutError,
)
from telemost_recorder.exceptions.recording import TeardownError

logger = logging.getLogger(__name__)

# Installed once per capture. Chunks are posted in order through a promise chain
# and a final null marks the end of the stream.
AUDIO_CAPTURE_SCRIPT = """
async ({ binding, timeslice }) => {
    const send = window[binding];
    const toBase64 = (buffer) => {
        const bytes = new Uint8Array(buffer);
        let binary = '';
        for (let i = 0; i < bytes.length; i += 0x8000) {
            binary += String.fromCharCode.apply(null, bytes.subarray(i, i + 0x8000));
        }
        return btoa(binary);
    };

    try {
        const audioContext = new (window.AudioContext || window.webkitAudioContext)();
        if (audioContext.state === 'suspended') {
            await audioContext.resume();
        }
        const destination = audioContext.createMediaStreamDestination();
        const connected = new WeakSet();

        const connectMedia = () => {
            document.querySelectorAll('video, audio').forEach((el) => {
                const stream = el.srcObject;
                if (!stream || connected.has(stream) || stream.getAudioTracks().length === 0) {
                    return;
                }
                try {
                    audioContext.createMediaStreamSource(stream).connect(destination);
                    connected.add(stream);
                } catch (e) {
                    console.warn('audio capture: could not connect media element', e.message);
                }
            });
        };
        connectMedia();

        const observer = new MutationObserver(connectMedia);
        observer.observe(document.body, { childList: true, subtree: true });
        const rescan = setInterval(connectMedia, 2000);

        const mimeType = MediaRecorder.isTypeSupported('audio/webm;codecs=opus')
            ? 'audio/webm;codecs=opus'
            : 'audio/webm';
        const recorder = new MediaRecorder(destination.stream, { mimeType });

        let chain = Promise.resolve();
        recorder.ondataavailable = (event) => {
            if (!event.data || event.data.size === 0) {
                return;
            }
            const blob = event.data;
            chain = chain
                .then(async () => send(toBase64(await blob.arrayBuffer())))
                .catch((e) => console.error('audio capture: chunk delivery failed', e));
        };
        recorder.onstop = () => {
            observer.disconnect();
            clearInterval(rescan);
            chain = chain
                .then(() => audioContext.close())
                .catch(() => {})
                .then(() => send(null));
        };

        window[binding + '_stop'] = () => {
            if (recorder.state !== 'inactive') {
                recorder.stop();
                return true;
            }
            return false;
        };

        recorder.start(timeslice);
        return { success: true, mimeType };
    } catch (error) {
        return { success: false, error: String(error && error.message || error) };
    }
}
"""

STOP_CAPTURE_SCRIPT = "(name) => typeof window[name] === 'function' ? window[name]() : false"


class PlaywrightElement(IElement):
    """
    Playwright implementation of IElement.

    Wraps a Playwright Locator resolved to a single element.
    """

    def __init__(self, element: Any, description: str):
        """
        Initialize the element wrapper.

        Args:
            element: Playwright Locator
            description: How the element was found, used in errors
        """
        self._element = element
        self._description = description

    async def click(self, **options: Any) -> None:
        """Click on this element."""
        try:
            await self._element.click(**options)
        except PlaywrightError as e:
            raise PageError(f"Could not click {self._description}: {e}") from e

    async def text_content(self) -> Optional[str]:
        """Get text content."""
        return await self._element.text_content()

    async def is_visible(self) -> bool:
        """Check if visible."""
        return await self._element.is_visible()


class PlaywrightAudioStream(IAudioStream):
    """
    Audio chunks delivered from the page through an exposed binding.

    The queue receives base64 strings and a final None once the page-side
    MediaRecorder has flushed its last chunk.
    """

    def __init__(self, page: "PlaywrightPage", binding: str, queue: "asyncio.Queue[Optional[str]]", mime_type: Optional[str]):
        self._page = page
        self._binding = binding
        self._queue = queue
        self._mime_type = mime_type
        self._closed = False
        page.on(PageEvent.CLOSE, self._on_page_closed)

    @property
    def mime_type(self) -> Optional[str]:
        return self._mime_type

    def _on_page_closed(self, *_: Any) -> None:
        # Nothing more can arrive once the page is gone
        self._queue.put_nowait(None)

    async def __aiter__(self) -> AsyncIterator[bytes]:
        while True:
            item = await self._queue.get()
            if item is None:
                break
            yield base64.b64decode(item)
        self._page.remove_listener(PageEvent.CLOSE, self._on_page_closed)

    async def close(self) -> None:
        if self._closed:
            return
        self._closed = True

        if self._page.is_closed():
            self._queue.put_nowait(None)
            return

        try:
            stopped = await self._page.evaluate(STOP_CAPTURE_SCRIPT, f"{self._binding}_stop")
        except PageError as e:
            logger.warning(f"Could not stop page audio recorder: {e}")
            stopped = False

        if not stopped:
            self._queue.put_nowait(None)


class PlaywrightPage(IPage):
    """
    Playwright implementation of IPage.

    Wraps a Playwright Page for navigation, element lookup and audio capture.
    """

    def __init__(self, page: Any):
        """
        Initialize the page wrapper.

        Args:
            page: Playwright Page object
        """
        self._page = page

    @property
    def url(self) -> str:
        """Get current URL."""
        return self._page.url

    async def goto(self, url: str, timeout: Optional[int] = None, **options: Any) -> None:
        """Navigate to URL."""
        try:
            await self._page.goto(url, timeout=timeout, **options)
        except PlaywrightError as e:
            raise NavigationError(f"Failed to navigate to {url}: {e}", url=url) from e

    def _resolve(self, locator: LocatorStrategy) -> Any:
        if locator.kind == LocatorKind.TEXT:
            return self._page.get_by_text(locator.value, exact=True).first
        return self._page.locator(locator.value).first

    async def wait_for_locator(
        self,
        locator: LocatorStrategy,
        timeout: int,
        poll_interval: int,
    ) -> IElement:
        """Poll until the locator resolves to a visible element."""
        loop = asyncio.get_running_loop()
        deadline = loop.time() + timeout / 1000
        target = self._resolve(locator)

        while True:
            try:
                if await target.is_visible():
                    return PlaywrightElement(target, str(locator))
            except PlaywrightError as e:
                if self._page.is_closed():
                    raise PageError(f"Page closed while looking for {locator}") from e
                logger.debug(f"Lookup of {locator} failed: {e}")

            remaining = deadline - loop.time()
            if remaining <= 0:
                raise ElementNotFoundError(
                    f"No visible element for {locator} within {timeout}ms",
                    selector=locator.value,
                )
            await asyncio.sleep(min(poll_interval / 1000, remaining))

    async def evaluate(self, expression: str, *args: Any) -> Any:
        """Execute JavaScript."""
        try:
            return await self._page.evaluate(expression, *args)
        except PlaywrightError as e:
            raise PageError(f"Script evaluation failed: {e}") from e

    async def content(self) -> str:
        """Get page HTML."""
        try:
            return await self._page.content()
        except PlaywrightError as e:
            raise PageError(f"Could not read page content: {e}") from e

    async def capture_audio(self, timeslice: int = 1000) -> IAudioStream:
        """Inject the MediaRecorder capture and return its byte stream."""
        binding = f"__telemostAudio_{uuid.uuid4().hex}"
        queue: "asyncio.Queue[Optional[str]]" = asyncio.Queue()

        def receive(_source: Dict[str, Any], payload: Optional[str]) -> None:
            queue.put_nowait(payload)

        try:
            await self._page.expose_binding(binding, receive)
            result = await self._page.evaluate(
                AUDIO_CAPTURE_SCRIPT,
                {"binding": binding, "timeslice": timeslice},
            )
        except PlaywrightError as e:
            raise PageError(f"Failed to start audio capture: {e}") from e

        if not result or not result.get("success"):
            error = (result or {}).get("error", "unknown error")
            raise PageError(f"Failed to start audio capture: {error}")

        logger.debug(f"Audio capture started ({result.get('mimeType')})")
        return PlaywrightAudioStream(self, binding, queue, result.get("mimeType"))

    def on(self, event: PageEvent, handler: Callable[..., Any]) -> None:
        self._page.on(event.value, handler)

    def remove_listener(self, event: PageEvent, handler: Callable[..., Any]) -> None:
        try:
            self._page.remove_listener(event.value, handler)
        except (KeyError, ValueError):
            pass

    async def wait_for_navigation(self, timeout: Optional[int] = None) -> None:
        """Wait for the next main frame navigation."""
        try:
            await self._page.wait_for_event(
                PageEvent.NAVIGATION.value,
                predicate=lambda frame: frame == self._page.main_frame,
                timeout=timeout,
            )
        except PlaywrightTimeoutError as e:
            raise TimeoutError(
                "Timed out waiting for navigation",
                timeout_ms=timeout or 0,
                operation="wait_for_navigation",
            ) from e
        except PlaywrightError as e:
            raise PageError(f"Navigation wait aborted: {e}") from e

    def is_closed(self) -> bool:
        return self._page.is_closed()

    async def close(self) -> None:
        """Close page."""
        try:
            await self._page.close()
        except PlaywrightError as e:
            raise TeardownError(f"Failed to close page: {e}") from e


class PlaywrightContext(IBrowserContext):
    """
    Playwright implementation of IBrowserContext.
    """

    def __init__(self, context: Any):
        self._context = context

    async def new_page(self, **options: Any) -> IPage:
        """Create new page."""
        try:
            page = await self._context.new_page()
        except PlaywrightError as e:
            raise BrowserConnectionError(f"Failed to create page: {e}") from e
        return PlaywrightPage(page)

    async def close(self) -> None:
        """Close context."""
        try:
            await self._context.close()
        except PlaywrightError as e:
            raise TeardownError(f"Failed to close browser context: {e}") from e


class PlaywrightBrowser(IBrowser):
    """
    Playwright implementation of IBrowser.

    Example:
        >>> browser = PlaywrightBrowser()
        >>> await browser.launch(headless=True, args=["--autoplay-policy=no-user-gesture-required"])
        >>> page = await browser.new_page()
        >>> await page.goto("https://telemost.yandex.ru/j/12345")
        >>> await browser.close()
    """

    def __init__(self):
        """Initialize the browser (not launched yet)."""
        self._playwright: Any = None
        self._browser: Any = None
        self._default_context: Any = None
        self._disconnect_callbacks: List[Callable[[], None]] = []

    @property
    def is_connected(self) -> bool:
        """Check if browser is connected."""
        return self._browser is not None and self._browser.is_connected()

    async def launch(
        self,
        headless: bool = True,
        browser_type: BrowserType = BrowserType.CHROMIUM,
        **options: Any,
    ) -> None:
        """
        Launch the browser.

        Args:
            headless: Whether to run headless
            browser_type: Type of browser to launch
            **options: Additional Playwright launch options
        """
        try:
            from playwright.async_api import async_playwright

            self._playwright = await async_playwright().start()

            browser_launchers = {
                BrowserType.CHROMIUM: self._playwright.chromium,
                BrowserType.FIREFOX: self._playwright.firefox,
                BrowserType.WEBKIT: self._playwright.webkit,
            }
            launcher = browser_launchers.get(browser_type, self._playwright.chromium)

            self._browser = await launcher.launch(
                headless=headless,
                **options,
            )
            self._browser.on("disconnected", self._handle_disconnected)

            logger.info(f"Launched {browser_type.value} browser (headless={headless})")

        except PlaywrightError as e:
            await self._stop_playwright()
            raise BrowserLaunchError(f"Failed to launch browser: {e}") from e

    def _handle_disconnected(self, *_: Any) -> None:
        logger.warning("Browser disconnected")
        for callback in list(self._disconnect_callbacks):
            try:
                callback()
            except Exception as e:
                logger.error(f"Disconnect callback failed: {e}")

    def on_disconnect(self, callback: Callable[[], None]) -> None:
        self._disconnect_callbacks.append(callback)

    async def version(self) -> str:
        if not self._browser:
            raise BrowserConnectionError("Browser not launched. Call launch() first.")
        return self._browser.version

    async def new_page(self, **options: Any) -> IPage:
        """
        Create a new page.

        Args:
            **options: Context options (viewport, etc.) applied to the default context

        Returns:
            New page instance
        """
        if not self._browser:
            raise BrowserConnectionError("Browser not launched. Call launch() first.")

        try:
            if not self._default_context:
                self._default_context = await self._browser.new_context(**options)
            page = await self._default_context.new_page()
        except PlaywrightError as e:
            raise BrowserConnectionError(f"Failed to create page: {e}") from e
        return PlaywrightPage(page)

    async def new_context(self, **options: Any) -> IBrowserContext:
        """
        Create a new browser context.

        Args:
            **options: Context options

        Returns:
            New context instance
        """
        if not self._browser:
            raise BrowserConnectionError("Browser not launched. Call launch() first.")

        try:
            context = await self._browser.new_context(**options)
        except PlaywrightError as e:
            raise BrowserConnectionError(f"Failed to create context: {e}") from e
        return PlaywrightContext(context)

    async def _stop_playwright(self) -> None:
        if self._playwright:
            playwright, self._playwright = self._playwright, None
            await playwright.stop()

    async def close(self) -> None:
        """
        Close the browser and cleanup.

        Every step is attempted; the first failure is raised as TeardownError
        after the rest have run.
        """
        failures: List[str] = []

        if self._default_context:
            context, self._default_context = self._default_context, None
            try:
                await context.close()
            except PlaywrightError as e:
                failures.append(f"context: {e}")

        if self._browser:
            browser, self._browser = self._browser, None
            try:
                await browser.close()
            except PlaywrightError as e:
                failures.append(f"browser: {e}")

        try:
            await self._stop_playwright()
        except PlaywrightError as e:
            failures.append(f"playwright: {e}")

        if failures:
            raise TeardownError("Failed to close browser cleanly", {"failures": failures})

        logger.info("Browser closed")
