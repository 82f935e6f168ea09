# desqueeze/services/probe.py
from __future__ import annotations
from pathlib import Path
from typing import Optional
import asyncio
import math

from desqueeze.utils.logger import get_logger

logger = get_logger(__name__)


async def _run(cmd: list[str], timeout: Optional[float]) -> tuple[int, bytes]:
    proc = await asyncio.create_subprocess_exec(
        *cmd,
        stdin=asyncio.subprocess.DEVNULL,
        stdout=asyncio.subprocess.PIPE,
        stderr=asyncio.subprocess.DEVNULL,
    )
    try:
        out, _ = await asyncio.wait_for(proc.communicate(), timeout=timeout)
    except asyncio.TimeoutError:
        proc.kill()
        await proc.wait()
        raise
    return proc.returncode, out


async def probe_duration(
    path: Path,
    ffprobe: str = "ffprobe",
    timeout: Optional[float] = None,
) -> float:
    """
    Return the container duration in seconds using ffprobe, or 0.0 when it
    cannot be determined. Never raises: an unknown duration only disables
    progress reporting.
    """
    cmd = [
        ffprobe, "-v", "error",
        "-show_entries", "format=duration",
        "-of", "default=noprint_wrappers=1:nokey=1",
        str(path),
    ]
    try:
        code, out = await _run(cmd, timeout)
    except asyncio.TimeoutError:
        logger.warning(f"ffprobe timed out after {timeout}s on {path.name}")
        return 0.0
    except OSError as e:
        logger.warning(f"ffprobe could not be started: {e}")
        return 0.0

    if code != 0:
        logger.warning(f"ffprobe exited with {code} on {path.name}")
        return 0.0

    text = out.decode("utf-8", errors="replace").strip()
    try:
        sec = float(text)
    except ValueError:
        logger.warning(f"ffprobe returned no usable duration: {text[:80]!r}")
        return 0.0
    return sec if math.isfinite(sec) and sec > 0 else 0.0
