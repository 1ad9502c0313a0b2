import os
from dataclasses import dataclass

from .adapters.base import MEMBER_PAGE_SIZES


@dataclass(frozen=True)
class Settings:
    token: str
    data_path: str = "roster_data.json"
    gemini_api_key: str = ""
    gemini_model: str = "gemini-2.5-flash"
    # Roblox only accepts 10, 25, 50 or 100 members per page
    member_page_size: int = 25
    # Minutes between automatic member syncs; 0 disables the loop
    auto_sync_minutes: int = 0


def load_settings() -> Settings:
    page_size = int(os.getenv("ROBLOX_MEMBER_PAGE_SIZE", "25").strip() or 25)
    if page_size not in MEMBER_PAGE_SIZES:
        raise ValueError(
            f"ROBLOX_MEMBER_PAGE_SIZE must be one of {MEMBER_PAGE_SIZES}, got {page_size}"
        )
    return Settings(
        token=os.getenv("DISCORD_BOT_TOKEN", "").strip(),
        data_path=os.getenv("ROSTER_DATA_PATH", "").strip() or "roster_data.json",
        gemini_api_key=os.getenv("GEMINI_API_KEY", "").strip(),
        gemini_model=os.getenv("GEMINI_MODEL", "").strip() or "gemini-2.5-flash",
        member_page_size=page_size,
        auto_sync_minutes=int(os.getenv("ROSTER_AUTO_SYNC_MINUTES", "0").strip() or 0),
    )
