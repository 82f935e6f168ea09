# desqueeze/api/upload.py
from __future__ import annotations
from typing import AsyncIterator, Optional
import asyncio

from fastapi import APIRouter, File, Form, Request, UploadFile
from fastapi.responses import StreamingResponse

from desqueeze.config import Settings
from desqueeze.schemas.jobs import DesqueezeJob, StreamEvent
from desqueeze.schemas.upload import UploadParams
from desqueeze.services import storage
from desqueeze.services.probe import probe_duration
from desqueeze.services.transcode import start_transcode, watch_progress
from desqueeze.utils.logger import get_logger

logger = get_logger(__name__)

router = APIRouter(tags=["upload"])

# keeps running jobs referenced until they finish, even if the client went away
_running: set[asyncio.Task] = set()

STREAM_HEADERS = {
    "Cache-Control": "no-cache",
    "X-Accel-Buffering": "no",
}


async def _run_desqueeze_job(
    job: DesqueezeJob,
    settings: Settings,
    events: asyncio.Queue,
) -> None:
    outcome = [StreamEvent.status("error")]
    try:
        duration = await probe_duration(
            job.input_path, settings.FFPROBE_PATH, timeout=settings.PROBE_TIMEOUT
        )
        logger.info(f"{job.original_name}: duration={duration:.2f}s")

        p = job.params
        proc = await start_transcode(
            job.input_path, job.output_path, p.factor, p.fps, p.bitrate,
            ffmpeg=settings.FFMPEG_PATH,
        )

        async def _emit(pct: int) -> None:
            await events.put(StreamEvent.progress(pct))

        code = await watch_progress(proc, duration, _emit)
        if code == 0:
            outcome = [StreamEvent.download(job.download_url), StreamEvent.status("done")]
        else:
            logger.warning(f"{job.original_name}: ffmpeg failed with exit code {code}")
    except Exception:
        logger.exception(f"{job.original_name}: desqueeze job failed")
    finally:
        storage.discard(job.input_path)
        for event in outcome:
            await events.put(event)
        await events.put(None)


async def _drain(events: asyncio.Queue) -> AsyncIterator[str]:
    while True:
        event = await events.get()
        if event is None:
            break
        yield event.line()


async def _error_stream() -> AsyncIterator[str]:
    yield StreamEvent.status("error").line()


def _public_base_url(request: Request) -> str:
    host = request.headers.get("host") or request.url.netloc
    return f"{request.url.scheme}://{host}"


@router.post("/upload")
async def upload(
    request: Request,
    file: Optional[UploadFile] = File(None),
    factor: Optional[str] = Form(None),
    fps: Optional[str] = Form(None),
    bitrate: Optional[str] = Form(None),
):
    """Desqueeze an uploaded video, streaming progress:/download:/status: lines."""
    settings: Settings = request.app.state.settings
    in_path = None
    try:
        if file is None:
            raise ValueError("no file in upload")

        in_path = storage.upload_path(settings.upload_path)
        await storage.save_upload(file, in_path)

        params = UploadParams.from_form(factor=factor, fps=fps, bitrate=bitrate)
        storage.ensure_dir(settings.downloads_path)
        job = DesqueezeJob(
            original_name=file.filename or "video",
            input_path=in_path,
            output_path=storage.output_path(settings.downloads_path, file.filename),
            params=params,
            public_base_url=_public_base_url(request),
        )
    except Exception:
        logger.exception("could not accept upload")
        storage.discard(in_path)
        return StreamingResponse(
            _error_stream(), media_type="text/plain; charset=utf-8", headers=STREAM_HEADERS
        )

    logger.info(
        f"job {job.output_name}: factor={params.factor} "
        f"fps={params.fps or 'copy'} bitrate={params.bitrate}"
    )

    events: asyncio.Queue = asyncio.Queue()
    task = asyncio.create_task(_run_desqueeze_job(job, settings, events))
    _running.add(task)
    task.add_done_callback(_running.discard)

    return StreamingResponse(
        _drain(events), media_type="text/plain; charset=utf-8", headers=STREAM_HEADERS
    )
