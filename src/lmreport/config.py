from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):

    # Environment
    ENV: str = Field(default="development")

    # Report storage
    INCOMING_DIR: Path = Field(default=Path("incoming"), description="Directory holding uploaded reports")
    MAX_UPLOAD_BYTES: int = Field(default=5 * 1024 * 1024, description="Upload size limit in bytes")

    # Server
    HOST: str = Field(default="0.0.0.0")
    PORT: int = Field(default=3001)
    CORS_ORIGINS: list[str] = Field(default=["*"])

    # Logging
    LOG_LEVEL: Optional[str] = Field(default=None, description="Overrides the ENV-derived level")
    LOG_DIR: Optional[Path] = Field(default=None, description="Write log files here when set")

    model_config = SettingsConfigDict(
        env_prefix="LMREPORT_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )


@lru_cache
def get_settings() -> Settings:
    return Settings()
