"""
Capture Pipe - Binds a page's audio stream to an output file.
"""

import asyncio
import logging
import os
from pathlib import Path
from typing import BinaryIO, Optional, Union

from telemost_recorder.exceptions.browser import BrowserError
from telemost_recorder.exceptions.recording import CaptureError, SinkError
from telemost_recorder.interfaces.browser import IAudioStream, IPage
from telemost_recorder.utils.files import ensure_directory_exists


class CapturePipe:
    """
    Live binding from one audio byte stream to one file.

    At most one capture is active at a time. Chunks are written in the order
    they arrive, unchanged. A failed write is logged and remembered; capture
    continues and the error surfaces when stop() returns.

    Example:
        >>> pipe = CapturePipe(page)
        >>> await pipe.start("recordings/meeting.webm")
        >>> await asyncio.sleep(60)
        >>> await pipe.stop()
    """

    def __init__(
        self,
        page: Optional[IPage],
        chunk_interval_ms: int = 1000,
        stop_timeout_ms: int = 10000,
        log: Optional[Union[logging.Logger, logging.LoggerAdapter]] = None,
    ):
        self._page = page
        self._chunk_interval_ms = chunk_interval_ms
        self._stop_timeout = stop_timeout_ms / 1000
        self._log = log or logging.getLogger(__name__)

        self._stream: Optional[IAudioStream] = None
        self._sink: Optional[BinaryIO] = None
        self._pump: Optional["asyncio.Task[None]"] = None
        self._output_path: Optional[Path] = None
        self._bytes_written = 0
        self._sink_error: Optional[SinkError] = None

    @property
    def is_active(self) -> bool:
        return self._stream is not None

    @property
    def bytes_written(self) -> int:
        return self._bytes_written

    @property
    def sink_error(self) -> Optional[SinkError]:
        return self._sink_error

    @property
    def output_path(self) -> Optional[Path]:
        return self._output_path

    async def start(self, output_path: Union[str, Path]) -> None:
        """
        Start streaming page audio into output_path.

        Raises:
            CaptureError: If a capture is already active, the page is gone,
                or the audio stream could not be obtained
        """
        if self.is_active:
            raise CaptureError("A capture is already active")
        if self._page is None or self._page.is_closed():
            raise CaptureError("Page is not available for capture")

        path = Path(output_path)
        ensure_directory_exists(path.parent)

        try:
            stream = await self._page.capture_audio(timeslice=self._chunk_interval_ms)
        except BrowserError as e:
            raise CaptureError(f"Could not obtain audio stream: {e.message}") from e

        try:
            sink = open(path, "wb")
        except OSError as e:
            await stream.close()
            raise CaptureError(f"Could not open output file {path}: {e}") from e

        self._stream = stream
        self._sink = sink
        self._output_path = path
        self._bytes_written = 0
        self._sink_error = None
        self._pump = asyncio.create_task(self._run_pump(stream, sink))
        self._log.info(f"Capture started -> {path}")

    async def _run_pump(self, stream: IAudioStream, sink: BinaryIO) -> None:
        async for chunk in stream:
            try:
                sink.write(chunk)
                self._bytes_written += len(chunk)
            except OSError as e:
                if self._sink_error is None:
                    self._sink_error = SinkError(f"Failed to write audio: {e}", {"path": str(self._output_path)})
                self._log.error(f"Audio write failed: {e}")

    async def stop(self) -> None:
        """
        Stop the capture and wait until the file is flushed and closed.

        Calling stop() with no active capture logs a warning and returns.

        Raises:
            SinkError: If a write failed during capture; the file is closed first
        """
        if not self.is_active:
            self._log.warning("Stop requested but no capture is active")
            return

        stream, self._stream = self._stream, None
        sink, self._sink = self._sink, None
        pump, self._pump = self._pump, None

        try:
            await stream.close()  # type: ignore[union-attr]
        except Exception as e:
            self._log.warning(f"Audio source did not stop cleanly: {e}")

        if pump is not None:
            try:
                await asyncio.wait_for(pump, timeout=self._stop_timeout)
            except asyncio.TimeoutError:
                self._log.warning(
                    f"Audio source did not finish within {self._stop_timeout:.0f}s; "
                    "closing file with the data received so far"
                )
            except Exception as e:
                self._log.error(f"Capture pump failed: {e}")

        await asyncio.to_thread(self._close_sink, sink)  # type: ignore[arg-type]
        self._log.info(f"Capture stopped ({self._bytes_written} bytes written)")

        if self._sink_error is not None:
            raise self._sink_error

    def _close_sink(self, sink: BinaryIO) -> None:
        try:
            sink.flush()
            os.fsync(sink.fileno())
        except (OSError, ValueError) as e:
            if self._sink_error is None:
                self._sink_error = SinkError(f"Failed to flush audio file: {e}", {"path": str(self._output_path)})
            self._log.error(f"Audio flush failed: {e}")
        finally:
            sink.close()

