"""
Meeting-End Monitor - Decides when an until-end recording is over.

The monitor races a hard ceiling against the page's lifecycle signals. The
first signal wins; everything else is cancelled and unsubscribed before
monitor() returns.
"""

import asyncio
import logging
import time
from typing import Any, Callable, List, Optional, Union

from telemost_recorder.exceptions.browser import BrowserError, TimeoutError as BrowserTimeoutError
from telemost_recorder.interfaces.browser import IPage, PageEvent
from telemost_recorder.recorder.models import EndReason, MonitorResult


class MeetingEndMonitor:
    """
    Races the recording ceiling against page navigation, crash and close.

    Args:
        page: The page joined to the meeting
        log_interval_s: How often a progress line is logged
        check_interval_ms: How often elapsed time is checked for logging
        rearm_delay_ms: Pause before re-arming a navigation wait that failed
        clock: Monotonic clock in seconds
        log: Logger or adapter
    """

    def __init__(
        self,
        page: IPage,
        log_interval_s: int = 30,
        check_interval_ms: int = 2000,
        rearm_delay_ms: int = 1000,
        clock: Callable[[], float] = time.monotonic,
        log: Optional[Union[logging.Logger, logging.LoggerAdapter]] = None,
    ):
        self._page = page
        self._log_interval = log_interval_s
        self._check_interval = check_interval_ms / 1000
        self._rearm_delay = rearm_delay_ms / 1000
        self._clock = clock
        self._log = log or logging.getLogger(__name__)

    async def monitor(self, max_duration_seconds: int) -> MonitorResult:
        """
        Wait until the meeting ends or the ceiling elapses.

        Args:
            max_duration_seconds: Hard ceiling for the recording

        Returns:
            MonitorResult with the floor of elapsed seconds and the first reason
        """
        loop = asyncio.get_running_loop()
        outcome: "asyncio.Future[EndReason]" = loop.create_future()
        start = self._clock()

        def resolve(reason: EndReason) -> None:
            if not outcome.done():
                outcome.set_result(reason)

        def on_crash(*_: Any) -> None:
            self._log.error("Page crashed")
            resolve(EndReason.PAGE_ERROR)

        def on_close(*_: Any) -> None:
            self._log.info("Page closed")
            resolve(EndReason.PAGE_CLOSED)

        self._page.on(PageEvent.CRASH, on_crash)
        self._page.on(PageEvent.CLOSE, on_close)

        tasks: List["asyncio.Task[Any]"] = [
            asyncio.create_task(self._ceiling(max_duration_seconds, resolve)),
            asyncio.create_task(self._watch_navigation(resolve)),
            asyncio.create_task(self._log_progress(start, max_duration_seconds)),
        ]

        self._log.info(f"Monitoring for meeting end (max {max_duration_seconds}s)")
        try:
            reason = await outcome
        finally:
            self._page.remove_listener(PageEvent.CRASH, on_crash)
            self._page.remove_listener(PageEvent.CLOSE, on_close)
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)

        duration = int(self._clock() - start)
        self._log.info(f"Meeting end detected: {reason.value} after {duration}s")
        return MonitorResult(duration_seconds=duration, reason=reason)

    async def _ceiling(self, max_duration_seconds: int, resolve: Callable[[EndReason], None]) -> None:
        await asyncio.sleep(max_duration_seconds)
        self._log.info(f"Maximum duration of {max_duration_seconds}s reached")
        resolve(EndReason.MAX_DURATION_REACHED)

    async def _watch_navigation(self, resolve: Callable[[EndReason], None]) -> None:
        # No timeout of its own; the ceiling bounds it.
        while True:
            try:
                await self._page.wait_for_navigation(timeout=0)
            except BrowserTimeoutError:
                self._log.info("Navigation wait timed out, assuming conference left")
                resolve(EndReason.LEFT_CONFERENCE)
                return
            except BrowserError as e:
                if self._page.is_closed():
                    return
                self._log.warning(f"Navigation wait failed, re-arming: {e}")
                await asyncio.sleep(self._rearm_delay)
                continue

            self._log.info(f"Navigation detected: {self._page.url}")
            resolve(EndReason.NAVIGATION_DETECTED)
            return

    async def _log_progress(self, start: float, max_duration_seconds: int) -> None:
        next_mark = self._log_interval
        while True:
            await asyncio.sleep(self._check_interval)
            elapsed = int(self._clock() - start)
            if elapsed >= next_mark:
                self._log.info(f"Recording... {elapsed}s / {max_duration_seconds}s")
                while next_mark <= elapsed:
                    next_mark += self._log_interval
