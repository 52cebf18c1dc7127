# main.py
"""
Application entrypoint. Includes routers and sets up the Telegram webhook.
"""
import logging
from contextlib import asynccontextmanager

from aiogram.types import BotCommand
from fastapi import FastAPI

from matchup.config.settings import settings
from matchup.routers import matching_routers
from matchup.services import runner
from matchup.telegram.bot import init_bot
from matchup.telegram.handlers.matching_telegram import COMMANDS

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    bot = None
    if settings.bot_token:
        bot, _ = init_bot()
        await bot.delete_webhook(drop_pending_updates=True)
        await bot.set_webhook(f"{settings.public_base_url}/api/v1/matching/webhook/{settings.bot_token}")
        await bot.set_my_commands([BotCommand(command=c, description=d) for c, d in COMMANDS])
        logger.info("Bot webhook and commands set")
    else:
        logger.warning("No bot token configured, Telegram webhook not set")

    try:
        yield
    finally:
        logger.info("Shutting down")
        await runner.shutdown()
        if bot is not None:
            await bot.session.close()


app = FastAPI(title="Matchup", lifespan=lifespan)

# include routers
app.include_router(matching_routers.router, prefix="/api/v1/matching", tags=["matching"])


@app.get("/")
async def index():
    """Health / basic info endpoint."""
    return {"status": "ok", "service": "matchup", "env": settings.ENV}
