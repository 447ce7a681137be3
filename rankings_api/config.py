from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
load_dotenv(Path(__file__).resolve().parent.parent / ".env")

_DEFAULT_DATA_PATH = Path(__file__).resolve().parent / "data" / "processed" / "universities.csv"


@dataclass(frozen=True)
class AppConfig:
    data_path: Path = Path(os.getenv("RANKINGS_DATA_PATH", str(_DEFAULT_DATA_PATH)))
    api_prefix: str = os.getenv("API_PREFIX", "/api")
    cors_origins: str = os.getenv("CORS_ORIGINS", "*")
    log_level: str = os.getenv("LOG_LEVEL", "INFO")

    @property
    def cors_origins_list(self) -> list[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]


DEFAULT_APP_CONFIG = AppConfig()
