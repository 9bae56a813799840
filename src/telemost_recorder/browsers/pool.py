"""
Browser Pool - One shared browser process for many recordings.

Each recording gets its own browser context on the pooled browser, so
cookies and media permissions never leak between meetings. The browser is
launched lazily on first use and relaunched after it disconnects.
"""

import asyncio
import logging
from typing import Any, Callable, Dict, List, Optional, Set

from telemost_recorder.config.settings import Settings
from telemost_recorder.exceptions.recording import TeardownError
from telemost_recorder.interfaces.browser import IBrowser, IBrowserContext

logger = logging.getLogger(__name__)


def _default_browser_factory() -> IBrowser:
    from telemost_recorder.browsers.playwright_browser import PlaywrightBrowser
    return PlaywrightBrowser()


class BrowserPool:
    """
    Lazily launched, shared browser.

    Example:
        >>> pool = BrowserPool(settings)
        >>> context = await pool.create_context()
        >>> page = await context.new_page()
        >>> ...
        >>> await context.close()
        >>> await pool.close()
    """

    def __init__(
        self,
        settings: Settings,
        browser_factory: Callable[[], IBrowser] = _default_browser_factory,
    ):
        self._settings = settings
        self._browser_factory = browser_factory
        self._browser: Optional[IBrowser] = None
        self._lock = asyncio.Lock()
        self._contexts_created = 0
        self._releases: Set["asyncio.Task[None]"] = set()
        self._orphans: List[IBrowser] = []

    @property
    def is_ready(self) -> bool:
        """True when a connected browser is available without launching."""
        return self._browser is not None and self._browser.is_connected

    async def get_browser(self) -> IBrowser:
        """
        Get the shared browser, launching it if needed.

        Concurrent callers wait on the same lock, so only one launch happens.

        Raises:
            BrowserLaunchError: If the browser could not be started
        """
        if self.is_ready:
            return self._browser  # type: ignore[return-value]

        async with self._lock:
            if self.is_ready:
                return self._browser  # type: ignore[return-value]

            browser = self._browser_factory()
            await browser.launch(**self._settings.browser.launch_options())
            browser.on_disconnect(self.invalidate)
            self._browser = browser
            logger.info("Browser pool ready")
            return browser

    def invalidate(self) -> None:
        """
        Drop the current browser; the next get_browser() relaunches.

        The dropped browser is closed in the background so its driver
        process does not outlive it.
        """
        browser, self._browser = self._browser, None
        if browser is None:
            return
        logger.warning("Browser pool invalidated")

        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.warning("No running event loop; dropped browser left for close()")
            self._orphans.append(browser)
            return
        task = loop.create_task(self._release(browser))
        self._releases.add(task)
        task.add_done_callback(self._releases.discard)

    async def _release(self, browser: IBrowser) -> None:
        try:
            await browser.close()
        except TeardownError as e:
            logger.warning(f"Error closing dropped browser: {e}")

    async def create_context(self) -> IBrowserContext:
        """Open a new isolated context on the shared browser."""
        browser = await self.get_browser()
        context = await browser.new_context(**self._settings.browser.context_options())
        self._contexts_created += 1
        return context

    async def get_stats(self) -> Dict[str, Any]:
        """Diagnostics for health checks."""
        version = None
        if self.is_ready:
            try:
                version = await self._browser.version()  # type: ignore[union-attr]
            except Exception as e:
                logger.debug(f"Could not read browser version: {e}")
        return {
            "is_connected": self.is_ready,
            "contexts_count": self._contexts_created,
            "version": version,
        }

    async def close(self) -> None:
        """Close the shared browser and wait for dropped browsers to be released."""
        async with self._lock:
            orphans, self._orphans = self._orphans, []
            for orphan in orphans:
                await self._release(orphan)
            if self._releases:
                await asyncio.gather(*list(self._releases), return_exceptions=True)

            browser, self._browser = self._browser, None
            if browser is None:
                return
            try:
                await browser.close()
            except TeardownError as e:
                logger.warning(f"Error closing pooled browser: {e}")
                return
            logger.info("Browser pool closed")
