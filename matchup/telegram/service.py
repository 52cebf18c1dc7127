# matchup/telegram/service.py
import logging
from typing import Callable, Dict, List, Optional

from aiogram import Bot
from aiogram.client.default import DefaultBotProperties
from aiogram.client.session.aiohttp import AiohttpSession
from aiogram.client.telegram import TelegramAPIServer
from aiogram.enums import ParseMode
from aiogram.exceptions import TelegramAPIError

from matchup.domain.models import Member, NotificationEndpoint, Team
from matchup.domain.notification_text import build_pair_up_text
from matchup.telegram.keyboards import pair_up_keyboard

logger = logging.getLogger(__name__)


class TelegramNotifier:
    """
    Sends pair-up messages as direct Telegram messages.

    One Bot is kept per Bot API server (the team endpoint's service_url),
    created on first use.
    """

    def __init__(
        self,
        bot_token: str,
        bot_display_name: str,
        bot_factory: Optional[Callable[[NotificationEndpoint], Bot]] = None,
    ):
        self.bot_token = bot_token
        self.bot_display_name = bot_display_name
        self.bot_factory = bot_factory or self._make_bot
        self._bots: Dict[str, Bot] = {}

    def _make_bot(self, endpoint: NotificationEndpoint) -> Bot:
        session = AiohttpSession(api=TelegramAPIServer.from_base(endpoint.service_url))
        return Bot(
            token=self.bot_token,
            session=session,
            default=DefaultBotProperties(parse_mode=ParseMode.HTML),
        )

    def bot_for(self, endpoint: NotificationEndpoint) -> Bot:
        bot = self._bots.get(endpoint.service_url)
        if bot is None:
            bot = self.bot_factory(endpoint)
            self._bots[endpoint.service_url] = bot
        return bot

    async def notify(
        self,
        team: Team,
        team_name: str,
        recipient: Member,
        rest_of_group: List[Member],
    ) -> bool:
        text = build_pair_up_text(team_name, recipient, rest_of_group, self.bot_display_name)
        bot = self.bot_for(team.endpoint)
        try:
            await bot.send_message(
                chat_id=recipient.address,
                text=text,
                reply_markup=pair_up_keyboard(rest_of_group),
            )
        except TelegramAPIError as e:
            logger.warning(
                "Failed to notify %s (team %s, tenant %s): %s",
                recipient.id, team.id, team.endpoint.tenant_id, e,
            )
            return False
        return True

    async def resolve_team_name(self, team: Team) -> str:
        """Current title of the team's group chat."""
        chat = await self.bot_for(team.endpoint).get_chat(team.id)
        return chat.title or team.name

    async def close(self) -> None:
        for bot in self._bots.values():
            await bot.session.close()
        self._bots.clear()
