# desqueeze/services/storage.py
from __future__ import annotations
from pathlib import Path
import re
import time
import uuid

from fastapi import UploadFile

from desqueeze.utils.logger import get_logger

logger = get_logger(__name__)

OUTPUT_EXT = ".mp4"
CHUNK_SIZE = 1024 * 1024

def ensure_dir(p: Path) -> None:
    p.mkdir(parents=True, exist_ok=True)

def new_token() -> str:
    """Millisecond timestamp plus a random suffix, e.g. 1760870400123_9f2c01ab."""
    return f"{int(time.time() * 1000)}_{uuid.uuid4().hex[:8]}"

def safe_stem(filename: str | None, fallback: str = "video") -> str:
    """Original name without its last extension, reduced to filesystem/URL safe chars."""
    name = (filename or "").strip()
    name = Path(name.replace("\\", "/")).name
    name = re.sub(r"\.[^.]+$", "", name)
    name = re.sub(r"\s+", " ", name)
    name = re.sub(r"[^A-Za-z0-9 _\.\-]", "", name)
    name = name.strip(" .")
    if not name:
        name = fallback
    return name[:60].replace(" ", "_")

# ---------- Paths ----------

def output_name(original_filename: str | None) -> str:
    return f"{safe_stem(original_filename)}_desq_{new_token()}{OUTPUT_EXT}"

def output_path(downloads_dir: Path, original_filename: str | None) -> Path:
    return downloads_dir / output_name(original_filename)

def upload_path(upload_dir: Path) -> Path:
    """Fresh temp path for an incoming upload (no extension, like a multipart spool)."""
    return upload_dir / uuid.uuid4().hex

def resolve_download(downloads_dir: Path, name: str) -> Path | None:
    """Path of an existing output file directly inside downloads_dir, else None."""
    root = downloads_dir.resolve()
    candidate = (root / name).resolve()
    if candidate.parent != root or not candidate.is_file():
        return None
    return candidate

# ---------- File ops ----------

async def save_upload(file: UploadFile, dst: Path) -> None:
    ensure_dir(dst.parent)
    with dst.open("wb") as out:
        while True:
            chunk = await file.read(CHUNK_SIZE)
            if not chunk:
                break
            out.write(chunk)

def discard(path: Path | None) -> None:
    """Best-effort delete; a missing file is fine."""
    if path is None:
        return
    try:
        path.unlink(missing_ok=True)
    except OSError as e:
        logger.debug(f"could not remove {path}: {e}")
