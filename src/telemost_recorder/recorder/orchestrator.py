"""
Telemost Recorder - Records the audio of one Telemost meeting.

A TelemostRecorder owns exactly one browser session and one page for the
lifetime of a recording. Both entry points run the same sequence:

    init -> connect -> join -> settle -> start capture -> wait -> stop -> cleanup

and always return a RecordingResult instead of raising.

Example:
    >>> recorder = TelemostRecorder()
    >>> result = await recorder.record_for_duration(
    ...     "https://telemost.yandex.ru/j/12345678901234", 60, "recordings/meeting.webm"
    ... )
    >>> print(result.success, result.file_size)
"""

import asyncio
import logging
import time
import uuid
from typing import Any, Awaitable, Callable, Dict, List, Optional, Tuple

from telemost_recorder.browsers.playwright_browser import PlaywrightBrowser
from telemost_recorder.browsers.pool import BrowserPool
from telemost_recorder.config import Settings, get_settings
from telemost_recorder.exceptions.base import InitializationError, TelemostRecorderError
from telemost_recorder.exceptions.browser import BrowserError, ElementNotFoundError
from telemost_recorder.exceptions.recording import (
    CaptureError,
    JoinError,
    MeetingConnectionError,
    RecordingError,
)
from telemost_recorder.interfaces.browser import IBrowser, IBrowserContext, IPage, PageEvent
from telemost_recorder.recorder.capture import CapturePipe
from telemost_recorder.recorder.models import (
    EndReason,
    MonitorResult,
    RecorderStatus,
    RecordingProgress,
    RecordingRequest,
    RecordingResult,
)
from telemost_recorder.recorder.monitor import MeetingEndMonitor
from telemost_recorder.utils.files import get_file_info
from telemost_recorder.utils.logging import InstanceLoggerAdapter

logger = logging.getLogger(__name__)

IN_CONFERENCE_SCRIPT = """
() => {
    const indicators = [
        '[data-test-id="conference-room"]',
        '[data-test-id="video-container"]',
        '[data-test-id="audio-controls"]',
        '.conference-room',
        '.video-container',
        '.meeting-container',
        '.conference-container',
    ];
    if (indicators.some((selector) => document.querySelector(selector))) {
        return true;
    }
    if (document.querySelector('video') || document.querySelector('audio')) {
        return true;
    }
    const url = window.location.href;
    return ['conference', 'meeting', 'room', 'call'].some((word) => url.includes(word));
}
"""

WEBRTC_STATS_SCRIPT = """
async () => {
    const pc = window.pc;
    if (!pc || typeof pc.getStats !== 'function') {
        return { audio_packets: 0, audio_bytes: 0 };
    }
    const stats = await pc.getStats();
    let packets = 0;
    let bytes = 0;
    stats.forEach((stat) => {
        if (stat.type === 'inbound-rtp' && (stat.kind || stat.mediaType) === 'audio') {
            packets += stat.packetsReceived || 0;
            bytes += stat.bytesReceived || 0;
        }
    });
    return { audio_packets: packets, audio_bytes: bytes };
}
"""

WEBRTC_OBJECTS_SCRIPT = """
() => ({
    window_objects: {
        remote_stream: typeof window.remoteStream !== 'undefined',
        local_stream: typeof window.localStream !== 'undefined',
        pc: typeof window.pc !== 'undefined',
        webrtc: typeof window.webrtc !== 'undefined',
        media_stream: typeof window.mediaStream !== 'undefined',
    },
    dom_elements: {
        audio: document.querySelector('audio') !== null,
        video: document.querySelector('video') !== null,
        canvas: document.querySelector('canvas') !== null,
    },
    navigator: {
        media_devices: typeof navigator.mediaDevices !== 'undefined',
        get_user_media: typeof (navigator.mediaDevices && navigator.mediaDevices.getUserMedia) !== 'undefined',
    },
    rtc_peer_connection: typeof RTCPeerConnection !== 'undefined',
    media_stream: typeof MediaStream !== 'undefined',
})
"""

PAGE_TEXT_SCRIPT = "() => document.body ? document.body.innerText : ''"

ProgressCallback = Callable[[RecordingProgress], Any]


class TelemostRecorder:
    """
    Records one Telemost meeting into an audio file.

    Args:
        settings: Base settings (defaults to the global settings)
        overrides: Partial settings merged over the base, e.g. {"page": {"timeout_ms": 90000}}
        browser_pool: Shared browser; when given, each recording uses its own
            context on it and cleanup closes only that context
        browser_factory: Creates a dedicated browser when no pool is given
        clock: Monotonic clock in seconds
        on_progress: Called with a RecordingProgress during fixed-duration recordings

    Raises:
        ConfigurationError: If the merged settings are invalid
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        *,
        overrides: Optional[Dict[str, Any]] = None,
        browser_pool: Optional[BrowserPool] = None,
        browser_factory: Callable[[], IBrowser] = PlaywrightBrowser,
        clock: Callable[[], float] = time.monotonic,
        on_progress: Optional[ProgressCallback] = None,
    ):
        base = settings or get_settings()
        self.settings = base.merge_with(overrides) if overrides else base
        self.instance_id = uuid.uuid4().hex[:12]

        self._log = InstanceLoggerAdapter(logger, self.instance_id)
        self._pool = browser_pool
        self._browser_factory = browser_factory
        self._clock = clock
        self._on_progress = on_progress

        self._browser: Optional[IBrowser] = None
        self._context: Optional[IBrowserContext] = None
        self._page: Optional[IPage] = None
        self._pipe: Optional[CapturePipe] = None
        self._page_handlers: List[Tuple[PageEvent, Callable[..., Any]]] = []

        self._log.info("Recorder created")

    @property
    def is_recording(self) -> bool:
        return self._pipe is not None and self._pipe.is_active

    # ------------------------------------------------------------------
    # Entry points
    # ------------------------------------------------------------------

    async def record_for_duration(
        self,
        meeting_url: str,
        duration_seconds: int,
        output_path: str,
    ) -> RecordingResult:
        """
        Join the meeting and record for exactly duration_seconds.

        Returns:
            RecordingResult; failures are reported in it, never raised
        """
        self._log.info(f"Recording {meeting_url} for {duration_seconds}s -> {output_path}")

        async def wait() -> Tuple[int, Optional[EndReason]]:
            await self._wait_for_duration(duration_seconds)
            return duration_seconds, None

        return await self._run(meeting_url, output_path, wait)

    async def record_until_meeting_end(
        self,
        meeting_url: str,
        max_duration_seconds: int,
        output_path: str,
    ) -> RecordingResult:
        """
        Join the meeting and record until it ends or the ceiling elapses.

        Returns:
            RecordingResult with the measured duration and the end reason
        """
        self._log.info(
            f"Recording {meeting_url} until meeting end (max {max_duration_seconds}s) -> {output_path}"
        )

        async def wait() -> Tuple[int, Optional[EndReason]]:
            result = await self.monitor_meeting_end(max_duration_seconds)
            return result.duration_seconds, result.reason

        return await self._run(meeting_url, output_path, wait)

    async def record(self, request: RecordingRequest) -> RecordingResult:
        """Run a validated request in whichever mode it asks for."""
        if request.until_end:
            return await self.record_until_meeting_end(
                request.meeting_url, request.max_duration_seconds, request.output_path
            )
        return await self.record_for_duration(
            request.meeting_url, request.duration_seconds, request.output_path  # type: ignore[arg-type]
        )

    async def _run(
        self,
        meeting_url: str,
        output_path: str,
        wait: Callable[[], Awaitable[Tuple[int, Optional[EndReason]]]],
    ) -> RecordingResult:
        capture_started = False
        try:
            await self.init()
            await self.connect_to_meeting(meeting_url)
            await self.click_enter_conference_button()
            await asyncio.sleep(self.settings.recording.settle_delay_ms / 1000)
            await self.start_recording(output_path)
            capture_started = True

            stop_error: Optional[TelemostRecorderError] = None
            try:
                duration, reason = await wait()
            finally:
                stop_error = await self._stop_quietly()

            return self._build_result(output_path, duration, reason, stop_error)

        except Exception as e:
            message = e.message if isinstance(e, TelemostRecorderError) else str(e)
            self._log.error(f"Recording failed: {message}")
            return RecordingResult.failed(message, file_path=output_path if capture_started else None)

        finally:
            await self.cleanup()

    def _build_result(
        self,
        output_path: str,
        duration: int,
        reason: Optional[EndReason],
        stop_error: Optional[TelemostRecorderError],
    ) -> RecordingResult:
        info = get_file_info(output_path)
        if info is None or info.size == 0:
            error = "Recording produced no audio data"
            if stop_error is not None:
                error = f"{error}: {stop_error.message}"
            self._log.error(error)
            return RecordingResult.failed(error, file_path=output_path)

        self._log.info(f"Recording finished: {info.size} bytes, {duration}s")
        return RecordingResult.succeeded(output_path, duration, info.size, reason)

    # ------------------------------------------------------------------
    # Steps
    # ------------------------------------------------------------------

    async def init(self) -> None:
        """
        Open the browser session and its page.

        Raises:
            InitializationError: If the session or page could not be created
        """
        if self._page is not None:
            self._log.warning("Recorder already initialized")
            return

        self._log.info("Initializing browser session")
        try:
            if self._pool is not None:
                self._context = await self._pool.create_context()
                page = await self._context.new_page()
            else:
                self._browser = self._browser_factory()
                await self._browser.launch(**self.settings.browser.launch_options())
                page = await self._browser.new_page(**self.settings.browser.context_options())
        except TelemostRecorderError as e:
            raise InitializationError(f"Failed to initialize browser session: {e.message}", e.details) from e

        self._page = page
        self._attach_page_logging(page)
        self._log.info("Browser session ready")

    async def connect_to_meeting(self, meeting_url: str) -> None:
        """
        Navigate to the meeting page.

        Raises:
            MeetingConnectionError: If navigation failed or timed out
        """
        page = self._require_page()
        self._log.info(f"Connecting to {meeting_url}")
        try:
            await page.goto(meeting_url, timeout=self.settings.page.timeout_ms, wait_until="load")
        except BrowserError as e:
            raise MeetingConnectionError(
                f"Failed to connect to meeting: {e.message}", {"url": meeting_url}
            ) from e
        self._log.info("Meeting page loaded")

    async def click_enter_conference_button(self) -> None:
        """
        Find and click the join control, trying each configured locator in order.

        Raises:
            JoinError: If no locator produced a clickable element
        """
        page = self._require_page()
        timeout = self.settings.page.wait_timeout_ms
        poll_interval = self.settings.page.poll_interval_ms
        tried: List[str] = []

        for locator in self.settings.join.locators:
            self._log.debug(f"Looking for join control: {locator}")
            try:
                element = await page.wait_for_locator(locator, timeout=timeout, poll_interval=poll_interval)
                await element.click()
            except ElementNotFoundError:
                self._log.debug(f"Join control not found: {locator}")
                tried.append(str(locator))
                continue
            except BrowserError as e:
                self._log.warning(f"Could not activate join control {locator}: {e.message}")
                tried.append(str(locator))
                continue

            self._log.info(f"Joined the conference via {locator}")
            return

        raise JoinError("Could not join the conference: join button not found", {"tried": tried})

    async def start_recording(self, output_path: str) -> None:
        """
        Start capturing meeting audio into output_path.

        Raises:
            CaptureError: If a capture is active or the stream is unavailable
        """
        page = self._require_page()
        if self.is_recording:
            raise CaptureError("Recording is already in progress")

        pipe = CapturePipe(
            page,
            chunk_interval_ms=self.settings.recording.chunk_interval_ms,
            stop_timeout_ms=self.settings.recording.stop_timeout_ms,
            log=self._log,
        )
        await pipe.start(output_path)
        self._pipe = pipe

    async def stop_recording(self) -> None:
        """
        Stop the active capture and flush the file.

        Raises:
            SinkError: If writing the file failed during capture
        """
        if self._pipe is None:
            self._log.warning("No active recording to stop")
            return
        pipe, self._pipe = self._pipe, None
        await pipe.stop()

    async def _stop_quietly(self) -> Optional[TelemostRecorderError]:
        try:
            await self.stop_recording()
        except TelemostRecorderError as e:
            self._log.error(f"Error while stopping recording: {e}")
            return e
        return None

    async def monitor_meeting_end(self, max_duration_seconds: int) -> MonitorResult:
        """Wait for the meeting to end, bounded by max_duration_seconds."""
        page = self._require_page()
        monitor = MeetingEndMonitor(
            page,
            log_interval_s=self.settings.recording.monitor_log_interval_s,
            check_interval_ms=self.settings.recording.monitor_check_interval_ms,
            rearm_delay_ms=self.settings.page.poll_interval_ms,
            clock=self._clock,
            log=self._log,
        )
        return await monitor.monitor(max_duration_seconds)

    async def _wait_for_duration(self, duration_seconds: int) -> None:
        interval = self.settings.recording.progress_interval_ms / 1000
        elapsed = 0.0
        while elapsed < duration_seconds:
            step = min(interval, duration_seconds - elapsed)
            await asyncio.sleep(step)
            elapsed += step
            self._report_progress(RecordingProgress.create(elapsed, duration_seconds))

    def _report_progress(self, progress: RecordingProgress) -> None:
        if self.settings.logging.enable_progress:
            self._log.info(
                f"Recording progress: {progress.seconds_elapsed}s / {progress.total_seconds}s "
                f"({progress.percentage}%)"
            )
        if self._on_progress is not None:
            try:
                self._on_progress(progress)
            except Exception as e:
                self._log.warning(f"Progress callback failed: {e}")

    # ------------------------------------------------------------------
    # Diagnostics
    # ------------------------------------------------------------------

    def get_current_url(self) -> Optional[str]:
        return self._page.url if self._page is not None else None

    def get_status(self) -> RecorderStatus:
        return RecorderStatus(
            instance_id=self.instance_id,
            is_initialized=self._page is not None,
            is_recording=self.is_recording,
            has_browser=self._browser is not None or self._context is not None,
            has_page=self._page is not None,
        )

    async def is_in_conference(self) -> bool:
        """
        Guess from the DOM whether the page is inside a conference room.

        Returns False when the check itself fails.

        Raises:
            RecordingError: If the page is not initialized
        """
        page = self._require_page()
        try:
            return bool(await page.evaluate(IN_CONFERENCE_SCRIPT))
        except BrowserError as e:
            self._log.warning(f"Could not check conference state: {e.message}")
            return False

    async def get_webrtc_stats(self) -> Dict[str, int]:
        """
        Inbound audio counters of the page's peer connection.

        Growing counters with an empty file point at the capture; zero
        counters mean the meeting itself sends no audio.

        Returns:
            {"audio_packets": int, "audio_bytes": int}, zeros when unavailable
        """
        page = self._require_page()
        try:
            stats = await page.evaluate(WEBRTC_STATS_SCRIPT)
        except BrowserError as e:
            self._log.warning(f"Could not read WebRTC stats: {e.message}")
            stats = None
        stats = stats or {}
        return {
            "audio_packets": int(stats.get("audio_packets", 0)),
            "audio_bytes": int(stats.get("audio_bytes", 0)),
        }

    async def check_webrtc_objects(self) -> Dict[str, Any]:
        """Report which WebRTC globals, media elements and APIs the page exposes."""
        page = self._require_page()
        try:
            return await page.evaluate(WEBRTC_OBJECTS_SCRIPT) or {}
        except BrowserError as e:
            self._log.warning(f"Could not check WebRTC objects: {e.message}")
            return {}

    async def get_page_text(self) -> str:
        page = self._require_page()
        try:
            return await page.evaluate(PAGE_TEXT_SCRIPT) or ""
        except BrowserError as e:
            self._log.warning(f"Could not read page text: {e.message}")
            return ""

    async def get_page_content(self) -> str:
        page = self._require_page()
        try:
            return await page.content()
        except BrowserError as e:
            self._log.warning(f"Could not read page content: {e.message}")
            return ""

    def _require_page(self) -> IPage:
        if self._page is None:
            raise RecordingError("Page is not initialized")
        return self._page

    # ------------------------------------------------------------------
    # Page log forwarding
    # ------------------------------------------------------------------

    def _attach_page_logging(self, page: IPage) -> None:
        handlers: List[Tuple[PageEvent, Callable[..., Any]]] = []
        if self.settings.logging.enable_page_console:
            handlers.append((PageEvent.CONSOLE, self._on_page_console))
        if self.settings.logging.enable_page_errors:
            handlers.append((PageEvent.PAGE_ERROR, self._on_page_error))
        for event, handler in handlers:
            page.on(event, handler)
        self._page_handlers = handlers

    def _detach_page_logging(self, page: IPage) -> None:
        for event, handler in self._page_handlers:
            page.remove_listener(event, handler)
        self._page_handlers = []

    def _on_page_console(self, message: Any) -> None:
        kind = getattr(message, "type", "log")
        text = getattr(message, "text", message)
        self._log.debug(f"Page console [{kind}]: {text}")

    def _on_page_error(self, error: Any) -> None:
        self._log.warning(f"Page error: {error}")

    # ------------------------------------------------------------------
    # Teardown
    # ------------------------------------------------------------------

    async def cleanup(self) -> None:
        """
        Release the capture, page, context and browser.

        Safe to call repeatedly, on a partially initialized recorder, and from
        error paths. Never raises.
        """
        self._log.info("Cleaning up")

        if self._pipe is not None:
            await self._stop_quietly()

        page, self._page = self._page, None
        if page is not None:
            self._detach_page_logging(page)
            if not page.is_closed():
                try:
                    await page.close()
                except Exception as e:
                    self._log.warning(f"Error closing page: {e}")

        context, self._context = self._context, None
        if context is not None:
            try:
                await context.close()
            except Exception as e:
                self._log.warning(f"Error closing browser context: {e}")

        browser, self._browser = self._browser, None
        if browser is not None:
            try:
                await browser.close()
            except Exception as e:
                self._log.warning(f"Error closing browser: {e}")

        self._log.info("Resources released")


async def record_audio_from_telemost(
    meeting_url: str,
    duration_seconds: int,
    output_path: str,
    settings: Optional[Settings] = None,
) -> RecordingResult:
    """
    Record a meeting for a fixed duration with a one-off recorder.

    Raises:
        RecordingError: If the recording failed
    """
    recorder = TelemostRecorder(settings)
    result = await recorder.record_for_duration(meeting_url, duration_seconds, output_path)
    if not result.success:
        raise RecordingError(result.error or "Recording failed", {"url": meeting_url})
    return result
