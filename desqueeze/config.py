"""
Runtime configuration for the desqueeze service
"""

import os
import tempfile
from pathlib import Path
from typing import List, Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Settings read from the environment and an optional .env file"""

    # Application settings
    APP_NAME: str = "Desqueeze"
    VERSION: str = "0.1.0"

    # Server settings
    HOST: str = "0.0.0.0"
    PORT: int = 3001
    CORS_ORIGINS_STR: str = (
        "https://anamorphic-desqueeze.com,"
        "http://localhost:3000,"
        "http://localhost:5173,"
        "http://127.0.0.1:3000"
    )

    # External tools
    FFMPEG_PATH: str = "ffmpeg"
    FFPROBE_PATH: str = "ffprobe"
    PROBE_TIMEOUT: float = 30.0  # seconds

    # Storage
    DOWNLOADS_DIR: Path = Path("downloads")
    UPLOAD_DIR: Path = Path(tempfile.gettempdir()) / "desq_uploads"

    # Logging settings
    LOG_LEVEL: str = "INFO"
    LOG_FILE: Optional[str] = None

    @property
    def CORS_ORIGINS(self) -> List[str]:
        """Parse allowed cross-origin callers from string"""
        origins_str = os.getenv("CORS_ORIGINS", self.CORS_ORIGINS_STR)
        return [o.strip() for o in origins_str.split(",") if o.strip()]

    @property
    def downloads_path(self) -> Path:
        return self.DOWNLOADS_DIR.resolve()

    @property
    def upload_path(self) -> Path:
        return self.UPLOAD_DIR.resolve()

    model_config = {
        "env_file": ".env",
        "case_sensitive": True,
        "extra": "ignore",
    }


settings = Settings()
