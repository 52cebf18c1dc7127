# matchup/services/runner.py
"""
Builds the production MatchingService: database-backed directory and
preferences, Telegram delivery, grouping options from settings.
"""
from matchup.config.settings import settings
from matchup.domain.grouping import GroupingOptions
from matchup.infrastructure.db.session import AsyncSessionLocal
from matchup.repositories.matching_repos import SqlMembershipDirectory, SqlPreferenceStore
from matchup.services.matching_service import MatchingService
from matchup.telegram.service import TelegramNotifier

_notifier: TelegramNotifier | None = None
_matching_service: MatchingService | None = None


def get_notifier() -> TelegramNotifier:
    global _notifier
    if _notifier is None:
        _notifier = TelegramNotifier(settings.bot_token, settings.BOT_DISPLAY_NAME)
    return _notifier


def get_matching_service() -> MatchingService:
    global _matching_service
    if _matching_service is None:
        notifier = get_notifier()
        _matching_service = MatchingService(
            directory=SqlMembershipDirectory(AsyncSessionLocal, name_resolver=notifier.resolve_team_name),
            preferences=SqlPreferenceStore(AsyncSessionLocal),
            channel=notifier,
            options=GroupingOptions(settings.GROUP_SIZE, settings.REMAINDER_POLICY),
            max_groups_per_team=settings.MAX_GROUPS_PER_TEAM,
        )
    return _matching_service


async def shutdown() -> None:
    global _notifier, _matching_service
    if _notifier is not None:
        await _notifier.close()
    _notifier = None
    _matching_service = None
