"""Environment-driven settings for the API server.

Values come from the process environment, with a `.env` file at the repo root
loaded first. Unset values fall back to the defaults below.
"""

import os
from pathlib import Path

from dotenv import load_dotenv
from pydantic import BaseModel

from aips.llm import DEFAULT_BASE_URL, DEFAULT_MODEL

ROOT = Path(__file__).parent.parent
DEFAULT_DATA_DIR = ROOT / "data"


class Settings(BaseModel):
    data_dir: Path = DEFAULT_DATA_DIR
    completion_url: str = DEFAULT_BASE_URL
    completion_api_key: str = ""
    completion_model: str = DEFAULT_MODEL
    completion_timeout: float = 120.0
    completion_max_retries: int = 0


def load_settings() -> Settings:
    load_dotenv(ROOT / ".env")
    return Settings(
        data_dir=Path(os.getenv("DATA_DIR", str(DEFAULT_DATA_DIR))),
        completion_url=os.getenv("COMPLETION_API_URL", DEFAULT_BASE_URL),
        completion_api_key=os.getenv("COMPLETION_API_KEY", ""),
        completion_model=os.getenv("COMPLETION_MODEL", DEFAULT_MODEL),
        completion_timeout=float(os.getenv("COMPLETION_TIMEOUT", "120")),
        completion_max_retries=int(os.getenv("COMPLETION_MAX_RETRIES", "0")),
    )
