"""Client configuration via environment variables."""

from pathlib import Path
from typing import Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Client settings loaded from environment variables."""

    # Backend
    API_URL: str = "http://localhost:8080"
    # Seconds; unset means requests wait until the backend answers
    REQUEST_TIMEOUT: Optional[float] = None

    # Durable storage for the logged-in session
    SESSION_FILE: str = "~/.ems/session.json"

    # Use GET /leave for the all-employees leave view instead of one call per employee
    LEAVE_AGGREGATE_ENDPOINT: bool = False

    # App
    LOG_LEVEL: str = "info"

    @property
    def session_path(self) -> Path:
        """Expand ``~`` in SESSION_FILE."""
        return Path(self.SESSION_FILE).expanduser()

    @property
    def api_base_url(self) -> str:
        return self.API_URL.rstrip("/")

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = True


settings = Settings()
