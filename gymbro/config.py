from __future__ import annotations

import os
from pathlib import Path
from typing import List

_LOCAL_HOSTNAMES = {"localhost", "127.0.0.1"}


class Settings:
    """Centralized configuration for the tracker client and the sync backend."""

    def __init__(self) -> None:
        base_dir = Path(__file__).resolve().parent
        repo_root = base_dir.parent
        data_root_default = repo_root / "data"

        self.data_root: Path = Path(
            os.environ.get("GYMBRO_DATA_ROOT") or data_root_default
        ).expanduser()
        self.app_db_path: Path = Path(
            os.environ.get("GYMBRO_DB_PATH") or (self.data_root / "gymbro.db")
        ).expanduser()
        self.storage_dir: Path = Path(
            os.environ.get("GYMBRO_STORAGE_DIR") or (self.data_root / "local")
        ).expanduser()

        # In production you MUST set GYMBRO_JWT_SECRET. The fallback keeps local
        # demos working but anyone reading this file can forge tokens with it.
        self.jwt_secret: str = os.environ.get("GYMBRO_JWT_SECRET") or "gymbro-dev-secret-change-me"
        self.token_ttl_days: int = int(os.environ.get("GYMBRO_TOKEN_TTL_DAYS") or "7")
        self.environment: str = os.environ.get("GYMBRO_ENV") or "development"

        self.host: str = os.environ.get("GYMBRO_HOST") or "127.0.0.1"
        self.port: int = int(os.environ.get("GYMBRO_PORT") or "3000")

        # ---- Sync client ----
        self.api_url: str = os.environ.get("GYMBRO_API_URL") or "https://gymbro-seven.vercel.app/api"
        self.hostname: str = os.environ.get("GYMBRO_HOSTNAME") or "localhost"
        self.sync_interval: float = float(os.environ.get("GYMBRO_SYNC_INTERVAL") or "300")
        self.http_timeout: float = float(os.environ.get("GYMBRO_HTTP_TIMEOUT") or "10")

        cors = os.environ.get("GYMBRO_CORS_ORIGINS", "*")
        if cors.strip() == "*":
            self.cors_origins: List[str] = ["*"]
        else:
            self.cors_origins = [
                origin.strip() for origin in cors.split(",") if origin.strip()
            ]

    def resolve_api_url(self, hostname: str | None = None) -> str:
        """Pick the API base URL for the host the client runs on."""
        host = (hostname or self.hostname or "").strip().lower()
        if host in _LOCAL_HOSTNAMES:
            return f"http://localhost:{self.port}/api"
        return self.api_url.rstrip("/")


settings = Settings()
