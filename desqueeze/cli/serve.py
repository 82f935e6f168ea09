#!/usr/bin/env python3
"""
Run the desqueeze HTTP service with uvicorn.

Examples:
  desqueeze-serve
  desqueeze-serve --port 8080 --log-level debug
"""

from __future__ import annotations
import argparse
import os

import uvicorn

from desqueeze.config import settings
from desqueeze.utils.logger import setup_logging


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(prog="desqueeze-serve", description="Desqueeze upload/transcode server.")
    p.add_argument("--host", default=settings.HOST, help=f"Bind address (default {settings.HOST}).")
    p.add_argument("--port", type=int, default=settings.PORT, help=f"Listening port (default {settings.PORT}).")
    p.add_argument("--reload", action="store_true", help="Restart on code changes (development).")
    p.add_argument("--log-level", default=settings.LOG_LEVEL.lower(),
                   choices=["debug", "info", "warning", "error", "critical"])
    return p.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    setup_logging(args.log_level, settings.LOG_FILE)
    # reload workers build the app in a fresh process and read the level from here
    os.environ["LOG_LEVEL"] = args.log_level.upper()

    # proxy headers: download URLs use the scheme the client actually saw
    uvicorn.run(
        "desqueeze.api.main:app",
        host=args.host,
        port=args.port,
        reload=args.reload,
        log_level=args.log_level,
        proxy_headers=True,
        forwarded_allow_ips="*",
        log_config=None,
    )
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
