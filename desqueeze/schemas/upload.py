# desqueeze/schemas/upload.py
from __future__ import annotations
import math
import re
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, field_validator

DEFAULT_FACTOR = 1.0
DEFAULT_BITRATE = 8_000_000

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


def _leading_int(v: Any) -> Optional[int]:
    """Integer prefix of a form value ("24.0" -> 24), or None."""
    if isinstance(v, bool):
        return None
    if isinstance(v, int):
        return v
    if isinstance(v, float):
        return int(v) if math.isfinite(v) else None
    if not isinstance(v, str):
        return None
    m = _LEADING_INT.match(v)
    return int(m.group(1)) if m else None


class UploadParams(BaseModel):
    factor: float = DEFAULT_FACTOR
    fps: Optional[int] = None          # None -> keep source frame rate
    bitrate: int = DEFAULT_BITRATE     # bits/s

    # form fields are free text; bad values fall back to defaults instead of 422
    model_config = ConfigDict(extra="ignore")

    @field_validator("factor", mode="before")
    @classmethod
    def _factor(cls, v: Any) -> float:
        try:
            f = float(v) if v not in (None, "") else DEFAULT_FACTOR
        except (TypeError, ValueError):
            f = DEFAULT_FACTOR
        if not math.isfinite(f):
            f = DEFAULT_FACTOR
        return max(1.0, f)

    @field_validator("fps", mode="before")
    @classmethod
    def _fps(cls, v: Any) -> Optional[int]:
        if isinstance(v, str) and v.strip().lower() == "copy":
            return None
        n = _leading_int(v)
        return n if n and n > 0 else None

    @field_validator("bitrate", mode="before")
    @classmethod
    def _bitrate(cls, v: Any) -> int:
        n = _leading_int(v)
        return n if n and n > 0 else DEFAULT_BITRATE

    @classmethod
    def from_form(
        cls,
        factor: Optional[str] = None,
        fps: Optional[str] = None,
        bitrate: Optional[str] = None,
    ) -> "UploadParams":
        return cls(factor=factor, fps=fps, bitrate=bitrate)
