# tests/test_repositories.py
import random

import pytest
import pytest_asyncio

from matchup.config.settings import settings
from matchup.domain.grouping import GroupingOptions
from matchup.domain.models import Member
from matchup.repositories.matching_repos import (
    SqlMembershipDirectory,
    SqlPreferenceStore,
    add_team_member_repo,
    delete_team_install_repo,
    get_all_users_opt_in_status_repo,
    get_installed_teams_repo,
    get_team_members_repo,
    remove_team_member_repo,
    save_team_install_repo,
    set_user_opt_in_repo,
)
from matchup.services import membership_service
from matchup.services.matching_service import MatchingService

from fakes import RecordingChannel, make_members

pytestmark = pytest.mark.asyncio


@pytest_asyncio.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


async def install(db, team_id="-100", name="Platform"):
    return await save_team_install_repo(db, team_id, name, "https://api.telegram.org", team_id)

# ------------------------
# Opt-in
# ------------------------

async def test_opt_in_status_upsert(db):
    assert await get_all_users_opt_in_status_repo(db) == {}

    await set_user_opt_in_repo(db, "1", False)
    await set_user_opt_in_repo(db, "2", True)
    await set_user_opt_in_repo(db, "1", True)
    await set_user_opt_in_repo(db, "2", False)

    assert await get_all_users_opt_in_status_repo(db) == {"1": True, "2": False}


async def test_opt_out_through_service(db):
    await membership_service.opt_out(db, "42")
    assert await get_all_users_opt_in_status_repo(db) == {"42": False}
    await membership_service.opt_in(db, "42")
    assert await get_all_users_opt_in_status_repo(db) == {"42": True}

# ------------------------
# Teams and rosters
# ------------------------

async def test_save_team_install_is_idempotent(db):
    await install(db, name="Old name")
    await install(db, name="New name")

    installs = await get_installed_teams_repo(db)
    assert len(installs) == 1
    assert installs[0].name == "New name"


async def test_roster_add_update_remove(db):
    await install(db)
    a, b = make_members(2)

    await add_team_member_repo(db, "-100", a)
    await add_team_member_repo(db, "-100", b)
    renamed = a.model_copy(update={"name": "Renamed Person", "is_guest": True})
    await add_team_member_repo(db, "-100", renamed)

    rows = await get_team_members_repo(db, "-100")
    assert [r.user_id for r in rows] == [a.id, b.id]
    assert rows[0].name == "Renamed Person"
    assert rows[0].is_guest is True

    assert await remove_team_member_repo(db, "-100", b.id) is True
    assert await remove_team_member_repo(db, "-100", b.id) is False
    assert [r.user_id for r in await get_team_members_repo(db, "-100")] == [a.id]


async def test_add_member_to_unknown_team_fails(db):
    with pytest.raises(ValueError):
        await add_team_member_repo(db, "-404", make_members(1)[0])
    with pytest.raises(ValueError):
        await membership_service.join_team(db, "-404", make_members(1)[0])


async def test_uninstall_removes_roster(db):
    await install(db, "-1")
    await install(db, "-2")
    for m in make_members(3):
        await add_team_member_repo(db, "-1", m)
    await add_team_member_repo(db, "-2", make_members(1, prefix="x")[0])

    assert await delete_team_install_repo(db, "-1") is True
    assert await delete_team_install_repo(db, "-1") is False

    assert [i.team_id for i in await get_installed_teams_repo(db)] == ["-2"]
    assert await get_team_members_repo(db, "-1") == []
    assert len(await get_team_members_repo(db, "-2")) == 1


async def test_register_team_uses_configured_api_server(db):
    team = await membership_service.register_team(db, "-7", "Design")
    assert team.service_url == settings.telegram_api_url
    assert team.tenant_id == "-7"
    assert await membership_service.unregister_team(db, "-7") is True

# ------------------------
# Capability adapters
# ------------------------

async def test_directory_and_preferences(session_factory):
    async with session_factory() as db:
        await install(db, "-100", "Platform")
        for m in make_members(3):
            await add_team_member_repo(db, "-100", m)
        await set_user_opt_in_repo(db, "u1", False)

    directory = SqlMembershipDirectory(session_factory)
    teams = await directory.list_installed_teams()
    assert [(t.id, t.name) for t in teams] == [("-100", "Platform")]
    assert teams[0].endpoint.tenant_id == "-100"

    roster = await directory.list_roster(teams[0])
    assert all(isinstance(m, Member) for m in roster)
    assert [m.id for m in roster] == ["u0", "u1", "u2"]
    assert await directory.resolve_team_display_name(teams[0]) == "Platform"

    assert await SqlPreferenceStore(session_factory).load_all_opt_in_status() == {"u1": False}


async def test_directory_uses_name_resolver(session_factory):
    async with session_factory() as db:
        await install(db, "-100", "Stored")

    async def resolver(team):
        return f"Live {team.id}"

    directory = SqlMembershipDirectory(session_factory, name_resolver=resolver)
    team = (await directory.list_installed_teams())[0]
    assert await directory.resolve_team_display_name(team) == "Live -100"


async def test_full_run_against_database(session_factory):
    async with session_factory() as db:
        await install(db, "-100", "Platform")
        for m in make_members(5):
            await add_team_member_repo(db, "-100", m)
        await set_user_opt_in_repo(db, "u4", False)

    channel = RecordingChannel()
    service = MatchingService(
        directory=SqlMembershipDirectory(session_factory),
        preferences=SqlPreferenceStore(session_factory),
        channel=channel,
        options=GroupingOptions(2),
        max_groups_per_team=10,
        rng=random.Random(1),
    )

    summary = await service.make_groups_and_notify()

    assert summary.teams_count == 1
    assert summary.preference_entries == 1
    assert summary.groups_formed == 2
    assert summary.members_notified == 4
    assert "u4" not in channel.recipients()
    assert {call[1] for call in channel.calls} == {"Platform"}
