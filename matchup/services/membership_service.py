# matchup/services/membership_service.py
"""
Service wrappers used by the bot handlers: team installs, rosters and
opt-in status. Business rule violations raise ValueError.
"""
import logging

from sqlalchemy.ext.asyncio import AsyncSession

from matchup.config.settings import settings
from matchup.domain.models import Member
from matchup.repositories.matching_repos import (
    add_team_member_repo,
    delete_team_install_repo,
    get_team_install_repo,
    remove_team_member_repo,
    save_team_install_repo,
    set_user_opt_in_repo,
)

logger = logging.getLogger(__name__)


async def register_team(db: AsyncSession, team_id: str, name: str):
    """Bot was added to a group chat."""
    install = await save_team_install_repo(
        db,
        team_id=team_id,
        name=name,
        service_url=settings.telegram_api_url,
        tenant_id=team_id,
    )
    logger.info("Registered team %s (%s)", team_id, name)
    return install


async def unregister_team(db: AsyncSession, team_id: str) -> bool:
    """Bot was removed from a group chat; forget the team and its roster."""
    removed = await delete_team_install_repo(db, team_id)
    if removed:
        logger.info("Unregistered team %s", team_id)
    return removed


async def join_team(db: AsyncSession, team_id: str, member: Member):
    install = await get_team_install_repo(db, team_id)
    if not install:
        raise ValueError("This group is not set up yet. Remove and re-add the bot.")
    return await add_team_member_repo(db, team_id, member)


async def leave_team(db: AsyncSession, team_id: str, user_id: str) -> bool:
    return await remove_team_member_repo(db, team_id, user_id)


async def opt_in(db: AsyncSession, user_id: str):
    logger.info("User %s resumed matches", user_id)
    return await set_user_opt_in_repo(db, user_id, True)


async def opt_out(db: AsyncSession, user_id: str):
    logger.info("User %s paused matches", user_id)
    return await set_user_opt_in_repo(db, user_id, False)
