# matchup/repositories/matching_repos.py
from typing import Dict, List, Optional

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from matchup.domain.models import Member, NotificationEndpoint, Team
from matchup.infrastructure.models import TeamInstall, TeamMember, UserOptIn

# ----------------------------
# Mapping
# ----------------------------

def to_team(install: TeamInstall) -> Team:
    return Team(
        id=install.team_id,
        name=install.name or "",
        endpoint=NotificationEndpoint(service_url=install.service_url, tenant_id=install.tenant_id),
    )


def to_member(row: TeamMember) -> Member:
    return Member(
        id=row.user_id,
        name=row.name,
        given_name=row.given_name,
        address=row.address,
        username=row.username,
        is_guest=bool(row.is_guest),
    )

# ----------------------------
# Team installs
# ----------------------------

async def get_team_install_repo(db: AsyncSession, team_id: str) -> Optional[TeamInstall]:
    res = await db.execute(select(TeamInstall).where(TeamInstall.team_id == team_id))
    return res.scalars().first()


async def save_team_install_repo(
    db: AsyncSession, team_id: str, name: str, service_url: str, tenant_id: str
) -> TeamInstall:
    """Register the bot in a team, or refresh the stored details if already there."""
    install = await get_team_install_repo(db, team_id)
    if install is None:
        install = TeamInstall(team_id=team_id)
        db.add(install)
    install.name = name
    install.service_url = service_url
    install.tenant_id = tenant_id
    await db.commit()
    await db.refresh(install)
    return install


async def delete_team_install_repo(db: AsyncSession, team_id: str) -> bool:
    """Remove a team and its roster. Returns False if it was not installed."""
    install = await get_team_install_repo(db, team_id)
    if install is None:
        return False
    await db.execute(delete(TeamMember).where(TeamMember.team_install_id == install.id))
    await db.delete(install)
    await db.commit()
    return True


async def get_installed_teams_repo(db: AsyncSession) -> List[TeamInstall]:
    res = await db.execute(select(TeamInstall).order_by(TeamInstall.id))
    return list(res.scalars().all())

# ----------------------------
# Roster
# ----------------------------

async def add_team_member_repo(db: AsyncSession, team_id: str, member: Member) -> TeamMember:
    """
    Add a member to a team roster, updating their details if already listed.
    Raises ValueError if the team is not installed.
    """
    install = await get_team_install_repo(db, team_id)
    if install is None:
        raise ValueError("Team not installed")

    res = await db.execute(
        select(TeamMember).where(
            (TeamMember.team_install_id == install.id) &
            (TeamMember.user_id == member.id)
        )
    )
    row = res.scalars().first()
    if row is None:
        row = TeamMember(team_install_id=install.id, user_id=member.id)
        db.add(row)
    row.name = member.name
    row.given_name = member.given_name
    row.address = member.address
    row.username = member.username
    row.is_guest = member.is_guest
    await db.commit()
    await db.refresh(row)
    return row


async def remove_team_member_repo(db: AsyncSession, team_id: str, user_id: str) -> bool:
    install = await get_team_install_repo(db, team_id)
    if install is None:
        return False
    res = await db.execute(
        delete(TeamMember).where(
            (TeamMember.team_install_id == install.id) &
            (TeamMember.user_id == user_id)
        )
    )
    await db.commit()
    return res.rowcount > 0


async def get_team_members_repo(db: AsyncSession, team_id: str) -> List[TeamMember]:
    res = await db.execute(
        select(TeamMember)
        .join(TeamInstall, TeamMember.team_install_id == TeamInstall.id)
        .where(TeamInstall.team_id == team_id)
        .order_by(TeamMember.id)
    )
    return list(res.scalars().all())

# ----------------------------
# Opt-in status
# ----------------------------

async def set_user_opt_in_repo(db: AsyncSession, user_id: str, opted_in: bool) -> UserOptIn:
    row = await db.get(UserOptIn, user_id)
    if row is None:
        row = UserOptIn(user_id=user_id, opted_in=opted_in)
        db.add(row)
    else:
        row.opted_in = opted_in
    await db.commit()
    await db.refresh(row)
    return row


async def get_all_users_opt_in_status_repo(db: AsyncSession) -> Dict[str, bool]:
    res = await db.execute(select(UserOptIn.user_id, UserOptIn.opted_in))
    return {user_id: bool(opted_in) for user_id, opted_in in res.all()}

# ----------------------------
# Capability adapters
# ----------------------------

class SqlPreferenceStore:
    """Opt-in status read from the user_opt_in table."""

    def __init__(self, session_factory: async_sessionmaker):
        self.session_factory = session_factory

    async def load_all_opt_in_status(self) -> Dict[str, bool]:
        async with self.session_factory() as db:
            return await get_all_users_opt_in_status_repo(db)


class SqlMembershipDirectory:
    """
    Teams and rosters from the database. Display names come from
    name_resolver (a coroutine taking the team) when given, otherwise the
    stored name is used.
    """

    def __init__(self, session_factory: async_sessionmaker, name_resolver=None):
        self.session_factory = session_factory
        self.name_resolver = name_resolver

    async def list_installed_teams(self) -> List[Team]:
        async with self.session_factory() as db:
            installs = await get_installed_teams_repo(db)
            return [to_team(i) for i in installs]

    async def list_roster(self, team: Team) -> List[Optional[Member]]:
        async with self.session_factory() as db:
            rows = await get_team_members_repo(db, team.id)
            return [to_member(r) for r in rows]

    async def resolve_team_display_name(self, team: Team) -> str:
        if self.name_resolver is None:
            return team.name
        return await self.name_resolver(team)
