from __future__ import annotations

import asyncio

from .adapters.gemini import GeminiAdapter
from .adapters.roblox import RobloxAdapter
from .bot import RosterBot, attach_store
from .commands.register import register_commands
from .config import load_settings
from .core.storage import JSONStorage
from .data.store import RosterStore
from .logging_config import setup_logging


def main() -> int:
    log = setup_logging()
    settings = load_settings()
    if not settings.token:
        log.error(
            "DISCORD_BOT_TOKEN is not set. "
            "Export it in your environment before running."
        )
        return 2
    narrator = None
    if settings.gemini_api_key:
        narrator = GeminiAdapter(settings.gemini_api_key, model=settings.gemini_model)
    else:
        log.warning("GEMINI_API_KEY is not set; AI features will be unavailable.")
    source = RobloxAdapter()
    store = RosterStore(
        JSONStorage(settings.data_path),
        source,
        narrator,
        page_size=settings.member_page_size,
    )
    bot = RosterBot(auto_sync_minutes=settings.auto_sync_minutes)
    attach_store(store)
    register_commands(bot, store)

    async def runner():
        try:
            async with bot:
                await bot.start(settings.token)
        except KeyboardInterrupt:
            log.info("Shutting down...")
        finally:
            await source.close()
            if narrator is not None:
                await narrator.close()
        return 0

    return asyncio.run(runner())


if __name__ == "__main__":
    raise SystemExit(main())
