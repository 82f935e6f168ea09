from __future__ import annotations
from pathlib import Path
from typing import Literal
from urllib.parse import quote

from pydantic import BaseModel

from desqueeze.schemas.upload import UploadParams

JobStatus = Literal["done", "error"]
EventKind = Literal["progress", "download", "status"]


class StreamEvent(BaseModel):
    kind: EventKind
    value: str

    def line(self) -> str:
        return f"{self.kind}:{self.value}\n"

    @classmethod
    def progress(cls, pct: int) -> "StreamEvent":
        return cls(kind="progress", value=str(pct))

    @classmethod
    def download(cls, url: str) -> "StreamEvent":
        return cls(kind="download", value=url)

    @classmethod
    def status(cls, status: JobStatus) -> "StreamEvent":
        return cls(kind="status", value=status)


class DesqueezeJob(BaseModel):
    original_name: str
    input_path: Path
    output_path: Path
    params: UploadParams
    public_base_url: str

    @property
    def output_name(self) -> str:
        return self.output_path.name

    @property
    def download_url(self) -> str:
        base = self.public_base_url.rstrip("/")
        return f"{base}/downloads/{quote(self.output_name)}"
