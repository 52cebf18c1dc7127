# matchup/telegram/bot.py
from aiogram import Bot, Dispatcher
from aiogram.client.default import DefaultBotProperties
from aiogram.enums import ParseMode
from aiogram.types import Update

from matchup.config.settings import settings
from matchup.telegram.handlers.matching_telegram import router as matching_router

bot: Bot | None = None
dp: Dispatcher | None = None


def init_bot():
    global bot, dp
    if bot is None or dp is None:
        bot, dp = get_bot_and_dispatcher()
    return bot, dp


async def process_update(update_dict: dict):
    """Called from the FastAPI webhook route."""
    bot, dp = init_bot()
    update = Update.model_validate(update_dict, context={"bot": bot})
    await dp.feed_update(bot, update)


def get_bot_and_dispatcher() -> tuple[Bot, Dispatcher]:
    """Create Bot and Dispatcher (with routers)."""
    bot = Bot(token=settings.bot_token, default=DefaultBotProperties(parse_mode=ParseMode.HTML))
    dp = Dispatcher()
    dp.include_router(matching_router)
    return bot, dp
