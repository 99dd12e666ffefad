"""Runtime configuration read from the environment (and ``.env``)."""

import os
from pathlib import Path

from dotenv import load_dotenv
from pydantic import BaseModel, Field

DEFAULT_BASE_URL = "https://playeternalreturn.com"


class Settings(BaseModel):
    """Paths, source endpoint and politeness settings for the batch jobs."""

    data_dir: Path = Field(default=Path("data"), description="Root for the store, reports and logs")
    base_url: str = DEFAULT_BASE_URL
    request_delay: float = Field(default=0.5, description="Seconds between document fetches")
    request_timeout: float = 30.0
    site_url: str | None = Field(default=None, description="Front end to notify after writes")
    revalidate_secret: str | None = None
    overrides_path: Path | None = Field(default=None, description="Override dataset; packaged set if unset")

    @property
    def store_dir(self) -> Path:
        return self.data_dir / "store"

    @property
    def log_dir(self) -> Path:
        return self.data_dir / "logs"

    @property
    def missing_report_path(self) -> Path:
        return self.data_dir / "missing-patches.json"

    @property
    def fixes_path(self) -> Path:
        return self.data_dir / "patch-fixes.json"

    @property
    def reparse_list_path(self) -> Path:
        return self.data_dir / "patches-to-reparse.json"

    @property
    def review_queue_path(self) -> Path:
        return self.data_dir / "review-queue.json"


def load_settings() -> Settings:
    """Build settings from environment variables after loading ``.env``."""
    load_dotenv()
    values: dict = {}
    if os.getenv("ER_DATA_DIR"):
        values["data_dir"] = Path(os.environ["ER_DATA_DIR"])
    if os.getenv("ER_BASE_URL"):
        values["base_url"] = os.environ["ER_BASE_URL"].rstrip("/")
    if os.getenv("ER_REQUEST_DELAY"):
        values["request_delay"] = float(os.environ["ER_REQUEST_DELAY"])
    if os.getenv("ER_REQUEST_TIMEOUT"):
        values["request_timeout"] = float(os.environ["ER_REQUEST_TIMEOUT"])
    if os.getenv("ER_OVERRIDES_PATH"):
        values["overrides_path"] = Path(os.environ["ER_OVERRIDES_PATH"])
    values["site_url"] = os.getenv("SITE_URL") or None
    values["revalidate_secret"] = os.getenv("REVALIDATE_SECRET") or None
    return Settings(**values)
