"""
Pytest configuration and fixtures for testing
"""

import os
import stat
import sys
import tempfile
import textwrap

# keep the module-level app from creating directories in the working tree
os.environ.setdefault("DOWNLOADS_DIR", tempfile.mkdtemp(prefix="desq_downloads_"))
os.environ.setdefault("UPLOAD_DIR", tempfile.mkdtemp(prefix="desq_uploads_"))

import pytest
from fastapi.testclient import TestClient

from desqueeze.api.main import create_app
from desqueeze.config import Settings


FFPROBE_10S = """
import sys
print("10.000000")
"""

# four stats updates on a 10s clip, written like ffmpeg does (\r separated)
FFMPEG_OK = """
import json, sys, time
from pathlib import Path
Path(__file__).with_suffix(".argv.json").write_text(json.dumps(sys.argv[1:]))
for t in ["00:00:01.00", "00:00:02.50", "00:00:02.55", "00:00:05.00", "00:00:10.00"]:
    sys.stderr.write(f"frame=   25 fps=0.0 q=28.0 size=       0kB time={t} bitrate=N/A speed=2x\\r")
    sys.stderr.flush()
    time.sleep(0.02)
Path(sys.argv[-1]).write_bytes(b"desqueezed video bytes")
"""

FFMPEG_FAIL = """
import sys
sys.stderr.write("frame=    1 time=00:00:01.00 bitrate=N/A\\r")
sys.stderr.write("Error while filtering: Invalid argument\\n")
sys.exit(1)
"""


@pytest.fixture
def make_tool(tmp_path):
    """Write an executable Python script standing in for ffmpeg/ffprobe."""
    def _make(name: str, source: str) -> str:
        path = tmp_path / "bin" / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(f"#!{sys.executable}\n" + textwrap.dedent(source))
        path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
        return str(path)
    return _make


@pytest.fixture
def fake_ffprobe(make_tool):
    return make_tool("ffprobe", FFPROBE_10S)


@pytest.fixture
def fake_ffmpeg(make_tool):
    return make_tool("ffmpeg", FFMPEG_OK)


@pytest.fixture
def failing_ffmpeg(make_tool):
    return make_tool("ffmpeg_fail", FFMPEG_FAIL)


@pytest.fixture
def settings(tmp_path, fake_ffprobe, fake_ffmpeg):
    return Settings(
        DOWNLOADS_DIR=tmp_path / "downloads",
        UPLOAD_DIR=tmp_path / "uploads",
        FFMPEG_PATH=fake_ffmpeg,
        FFPROBE_PATH=fake_ffprobe,
        PROBE_TIMEOUT=5.0,
    )


@pytest.fixture
def app(settings):
    return create_app(settings)


@pytest.fixture
def client(app):
    """Create a test client for the FastAPI app"""
    return TestClient(app)


@pytest.fixture
def sample_video():
    """Multipart file tuple for an upload"""
    return ("file", ("My Clip (1).MOV", b"\x00\x00\x00\x18ftypqt  fake movie", "video/quicktime"))
