from __future__ import annotations
from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import FileResponse
from urllib.parse import quote

from desqueeze.config import Settings
from desqueeze.services import storage

router = APIRouter(tags=["downloads"])


@router.get("/download/{name}")
def download_output(name: str, request: Request):
    """Serve a finished output as an attachment so browsers offer save-as."""
    settings: Settings = request.app.state.settings
    path = storage.resolve_download(settings.downloads_path, name)
    if path is None:
        raise HTTPException(status_code=404, detail="file not found")

    headers = {"Content-Disposition": f"attachment; filename*=UTF-8''{quote(path.name)}"}
    return FileResponse(path, media_type="video/mp4", headers=headers)
