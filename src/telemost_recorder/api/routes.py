"""
API routes for recording meetings.
"""

import logging
import uuid
from pathlib import Path
from typing import Literal

from fastapi import APIRouter, FastAPI, Request
from fastapi.responses import FileResponse
from pydantic import BaseModel, ConfigDict, Field

from telemost_recorder.exceptions.recording import RecordingError
from telemost_recorder.recorder import RecordingRequest, TelemostRecorder
from telemost_recorder.utils.files import delete_file, get_mime_type

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["recording"])


class RecordBody(BaseModel):
    """Body of POST /api/record. camelCase names are accepted too."""
    model_config = ConfigDict(populate_by_name=True)

    meeting_url: str = Field(alias="meetingUrl")
    duration: int = 10
    format: Literal["webm", "mp3", "wav"] = "webm"
    record_until_end: bool = Field(default=False, alias="recordUntilEnd")
    max_duration: int = Field(default=7200, alias="maxDuration")


@router.post("/record")
async def record(body: RecordBody, request: Request) -> FileResponse:
    """
    Record a meeting and answer with the audio file.

    Headers X-Recording-ID, X-File-Size and X-Recording-Duration describe the
    recording. A failed recording leaves no file behind.
    """
    settings = request.app.state.settings
    pool = request.app.state.pool

    recording_id = str(uuid.uuid4())
    file_name = f"recording_{recording_id}.{body.format}"
    output_path = str(Path(settings.recording.output_dir) / file_name)

    recording = RecordingRequest.from_params(
        meeting_url=body.meeting_url,
        output_path=output_path,
        duration_seconds=None if body.record_until_end else body.duration,
        until_end=body.record_until_end,
        max_duration_seconds=body.max_duration,
        file_format=body.format,
    )

    logger.info(f"Recording {recording_id}: {body.meeting_url}")
    recorder = TelemostRecorder(settings, browser_pool=pool)
    result = await recorder.record(recording)

    if not result.success:
        delete_file(output_path)
        raise RecordingError(
            result.error or "Recording failed",
            {"recording_id": recording_id},
            code="recording_failed",
        )

    logger.info(f"Recording {recording_id} finished ({result.file_size} bytes)")
    return FileResponse(
        output_path,
        media_type=get_mime_type(body.format),
        filename=file_name,
        headers={
            "X-Recording-ID": recording_id,
            "X-File-Size": str(result.file_size),
            "X-Recording-Duration": str(result.duration_seconds),
        },
    )


def register_routes(app: FastAPI) -> None:
    """
    Register API routes with the FastAPI app.

    Args:
        app: FastAPI application instance
    """
    app.include_router(router)

    @app.get("/health")
    async def health_check(request: Request):
        """Health check endpoint."""
        stats = await request.app.state.pool.get_stats()
        return {"status": "ok", "browser": stats}
