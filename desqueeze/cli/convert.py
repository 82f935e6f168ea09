#!/usr/bin/env python3
"""
Desqueeze a local video file without going through the HTTP service.

Examples:
  desqueeze clip.mov --factor 1.33
  python -m desqueeze.cli.convert clip.mov --factor 2 --fps 24 --out out/clip_wide.mp4
"""

from __future__ import annotations
import argparse
import asyncio
from pathlib import Path
import sys
import time

from desqueeze.config import settings
from desqueeze.schemas.upload import UploadParams
from desqueeze.services.probe import probe_duration
from desqueeze.services.transcode import start_transcode, watch_progress
from desqueeze.utils.logger import setup_logging


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(
        prog="desqueeze",
        description="Stretch an anamorphic clip horizontally and reset its pixel aspect ratio.",
    )
    p.add_argument("input", type=Path, help="Video file to desqueeze.")
    p.add_argument("--factor", default="1", help="Horizontal scale factor, minimum 1 (e.g. 1.33, 1.5, 2).")
    p.add_argument("--fps", default="copy", help="Output frame rate, or 'copy' to keep the source rate.")
    p.add_argument("--bitrate", default="8000000", help="Video bitrate in bits/s.")
    p.add_argument("--out", type=Path, default=None, help="Output path (default: <input>_desq.mp4).")
    p.add_argument("--ffmpeg", default=settings.FFMPEG_PATH, help="ffmpeg executable.")
    p.add_argument("--ffprobe", default=settings.FFPROBE_PATH, help="ffprobe executable.")
    p.add_argument("-v", "--verbose", action="store_true", help="Verbose console logs.")
    return p.parse_args(argv)


async def _desqueeze(args: argparse.Namespace, out_path: Path, params: UploadParams) -> int:
    duration = await probe_duration(args.input, args.ffprobe, timeout=settings.PROBE_TIMEOUT)

    async def _print_progress(pct: int) -> None:
        print(f"progress:{pct}", flush=True)

    proc = await start_transcode(
        args.input, out_path, params.factor, params.fps, params.bitrate, ffmpeg=args.ffmpeg
    )
    return await watch_progress(proc, duration, _print_progress)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    setup_logging("DEBUG" if args.verbose else "WARNING")

    in_path: Path = args.input
    if not in_path.is_file():
        print(f"[error] Input file not found: {in_path.resolve()}", file=sys.stderr)
        return 2

    params = UploadParams.from_form(factor=args.factor, fps=args.fps, bitrate=args.bitrate)
    out_path: Path = args.out if args.out else in_path.with_name(f"{in_path.stem}_desq.mp4")
    out_path.parent.mkdir(parents=True, exist_ok=True)

    if args.verbose:
        print(f"[info] factor={params.factor} fps={params.fps or 'copy'} bitrate={params.bitrate}")
        print(f"[info] output={out_path}")

    t0 = time.time()
    try:
        code = asyncio.run(_desqueeze(args, out_path, params))
    except OSError as e:
        print(f"[error] Could not start ffmpeg: {e}", file=sys.stderr)
        return 4

    if code != 0:
        print(f"[error] ffmpeg exited with code {code}", file=sys.stderr)
        return 4

    print(f"Wrote: {out_path}")
    print(f"Processing time: {time.time() - t0:.2f}s")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
