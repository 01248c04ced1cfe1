# 路由器設定：環境變數 (.env) -> Settings

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

DEFAULT_API_BASE_URL = "https://app.bragbookgallery.com"
DEFAULT_STATE_DB = Path("artifacts/router/router_state.db")


@dataclass(frozen=True)
class Settings:
    api_base_url: str
    state_db_path: Path
    nonce_secret: str


def load_settings() -> Settings:
    return Settings(
        api_base_url=os.getenv("GALLERY_API_BASE_URL", DEFAULT_API_BASE_URL).rstrip("/"),
        state_db_path=Path(os.getenv("GALLERY_STATE_DB", str(DEFAULT_STATE_DB))),
        nonce_secret=os.getenv("GALLERY_NONCE_SECRET", ""),
    )
