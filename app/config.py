import os
from pathlib import Path
from typing import List

from dotenv import load_dotenv
from pydantic import BaseModel

# .env lives next to the app/ directory
env_path = Path(__file__).resolve().parent.parent / ".env"

if env_path.exists():
    load_dotenv(dotenv_path=env_path)
else:
    load_dotenv()


def _env_bool(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


class Settings(BaseModel):
    """Runtime settings for the job board API"""
    mongo_uri: str = "mongodb://localhost:27017"
    database_name: str = "jobboard"
    allowed_origins: List[str] = []
    rate_limit_requests: int = 100
    rate_limit_window_seconds: float = 60.0
    strict_application_status: bool = False
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Settings":
        raw_origins = os.getenv("ALLOWED_ORIGINS", "")
        return cls(
            mongo_uri=os.getenv("MONGO_URI", "mongodb://localhost:27017"),
            database_name=os.getenv("DATABASE_NAME", "jobboard"),
            allowed_origins=[o.strip() for o in raw_origins.split(",") if o.strip()],
            rate_limit_requests=int(os.getenv("RATE_LIMIT_REQUESTS", 100)),
            rate_limit_window_seconds=float(os.getenv("RATE_LIMIT_WINDOW_SECONDS", 60)),
            strict_application_status=_env_bool("STRICT_APPLICATION_STATUS"),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        )
