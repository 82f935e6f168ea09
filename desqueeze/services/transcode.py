# desqueeze/services/transcode.py
from __future__ import annotations
from pathlib import Path
from typing import Awaitable, Callable, Optional
import asyncio
import math
import shlex

from desqueeze.services.progress import ProgressTracker
from desqueeze.utils.logger import get_logger

logger = get_logger(__name__)

VIDEO_CODEC = "libx264"
PIXEL_FORMAT = "yuv420p"   # 4:2:0 needs even widths
READ_SIZE = 4096


def scale_filter(factor: float) -> str:
    """Widen by factor (rounded down to even), keep height, square pixels."""
    return f"scale=trunc(iw*{factor}/2)*2:ih,setsar=1"


def scaled_width(width: int, factor: float) -> int:
    """Output width ffmpeg produces for scale_filter(factor)."""
    return int(math.floor(width * factor / 2)) * 2


def build_ffmpeg_args(
    input_path: Path,
    output_path: Path,
    factor: float,
    fps: Optional[int],
    bitrate: int,
) -> list[str]:
    args = ["-y", "-i", str(input_path)]
    if fps:
        args += ["-r", str(fps)]
    args += [
        "-c:v", VIDEO_CODEC,
        "-b:v", str(bitrate),
        "-pix_fmt", PIXEL_FORMAT,
        "-vf", scale_filter(factor),
        "-c:a", "copy",
        "-movflags", "faststart",
        str(output_path),
    ]
    return args


async def start_transcode(
    input_path: Path,
    output_path: Path,
    factor: float,
    fps: Optional[int],
    bitrate: int,
    ffmpeg: str = "ffmpeg",
) -> asyncio.subprocess.Process:
    """
    Spawn ffmpeg for one desqueeze job and return the running process.

    Only stderr is piped; it carries the stats lines consumed by
    watch_progress(). Raises OSError when the executable cannot be started.
    """
    cmd = [ffmpeg, *build_ffmpeg_args(input_path, output_path, factor, fps, bitrate)]
    logger.debug(f"ffmpeg command: {shlex.join(cmd)}")
    proc = await asyncio.create_subprocess_exec(
        *cmd,
        stdin=asyncio.subprocess.DEVNULL,
        stdout=asyncio.subprocess.DEVNULL,
        stderr=asyncio.subprocess.PIPE,
    )
    logger.info(f"ffmpeg started pid={proc.pid} -> {output_path.name}")
    return proc


async def watch_progress(
    proc: asyncio.subprocess.Process,
    duration: float,
    emit: Callable[[int], Awaitable[None]],
) -> int:
    """
    Read ffmpeg's stderr until it closes, awaiting emit(pct) for every new
    percentage, then return the process exit code.
    """
    tracker = ProgressTracker(duration)
    assert proc.stderr is not None
    while True:
        chunk = await proc.stderr.read(READ_SIZE)
        if not chunk:
            break
        pct = tracker.feed(chunk.decode("utf-8", errors="replace"))
        if pct is not None:
            await emit(pct)
    code = await proc.wait()
    logger.info(f"ffmpeg pid={proc.pid} exited with {code}")
    return code
