# matchup/services/matching_service.py
import asyncio
import logging
import random
from typing import Dict, List, Optional

from matchup.domain import grouping as domain
from matchup.domain.grouping import GroupingOptions
from matchup.domain.models import Member, RunSummary, Team, TeamResult
from matchup.domain.ports import MembershipDirectory, NotificationChannel, PreferenceStore

logger = logging.getLogger(__name__)


class MatchingService:
    """
    Groups the members of every installed team and notifies each group.

    A run:
        Recall all the teams where the bot has been installed
        Load everyone's opt-in status once
        For each team:
            Pull the roster and remove members who opted out
            Shuffle and split them into groups
            Notify at most max_groups_per_team groups
    """

    def __init__(
        self,
        directory: MembershipDirectory,
        preferences: PreferenceStore,
        channel: NotificationChannel,
        options: GroupingOptions,
        max_groups_per_team: int,
        rng: Optional[random.Random] = None,
    ):
        if max_groups_per_team < 1:
            raise ValueError("max_groups_per_team must be at least 1")
        self.directory = directory
        self.preferences = preferences
        self.channel = channel
        self.options = options
        self.max_groups_per_team = max_groups_per_team
        self.rng = rng or random.Random()

    async def make_groups_and_notify(self, cancel_event: Optional[asyncio.Event] = None) -> RunSummary:
        """
        Run grouping for every installed team.

        Failing to list teams or load preferences fails the whole run: the
        summary comes back with zero counts and error set. A failing team
        only loses its own contribution.
        """
        cancel_event = cancel_event or asyncio.Event()
        logger.info("Making groups")

        try:
            teams = await self.directory.list_installed_teams()
            opt_in_lookup = await self.preferences.load_all_opt_in_status()
        except Exception as e:
            logger.exception("Error making groups: %s", e)
            return RunSummary(error=str(e) or type(e).__name__)

        summary = RunSummary(teams_count=len(teams), preference_entries=len(opt_in_lookup))
        logger.info("Generating groups for %d teams", len(teams))

        for team in teams:
            if cancel_event.is_set():
                summary.cancelled = True
                break
            result = await self._run_team_safely(team, opt_in_lookup, cancel_event)
            summary.add(result)

        if cancel_event.is_set():
            summary.cancelled = True

        logger.info(
            "Made %d groups, %d notifications sent (teams=%d, stored preferences=%d, cancelled=%s)",
            summary.groups_formed,
            summary.members_notified,
            summary.teams_count,
            summary.preference_entries,
            summary.cancelled,
        )
        return summary

    async def _run_team_safely(
        self, team: Team, opt_in_lookup: Dict[str, bool], cancel_event: asyncio.Event
    ) -> TeamResult:
        try:
            return await self.run_team(team, opt_in_lookup, cancel_event)
        except Exception:
            logger.exception("Error grouping members of team %s", team.id)
            return TeamResult()

    async def run_team(
        self, team: Team, opt_in_lookup: Dict[str, bool], cancel_event: Optional[asyncio.Event] = None
    ) -> TeamResult:
        """Group one team and notify up to max_groups_per_team groups."""
        cancel_event = cancel_event or asyncio.Event()
        logger.info("Grouping members of team %s", team.id)

        team_name = await self.directory.resolve_team_display_name(team)
        roster = await self.directory.list_roster(team)
        logger.info("Found %d members in team %s", len(roster), team.id)

        opted_in = domain.filter_opted_in(roster, opt_in_lookup)
        groups = domain.make_groups(opted_in, self.options, self.rng)

        # Groups past the cap are dropped, not deferred
        result = TeamResult()
        for group in groups[: self.max_groups_per_team]:
            if cancel_event.is_set():
                logger.info("Run cancelled, skipping remaining groups of team %s", team.id)
                break
            result.members_notified += await self.notify_group(team, team_name, group, cancel_event)
            result.groups_formed += 1
        return result

    async def notify_group(
        self,
        team: Team,
        team_name: str,
        group: List[Member],
        cancel_event: Optional[asyncio.Event] = None,
    ) -> int:
        """
        Send every group member a notification naming the rest of the group.

        Sends run concurrently. Returns how many were delivered; a failed
        send does not affect the others.
        """
        cancel_event = cancel_event or asyncio.Event()

        async def send(recipient: Member) -> bool:
            if cancel_event.is_set():
                return False
            rest_of_group = [m for m in group if m.id != recipient.id]
            logger.debug("Sending grouping notification to %s", recipient.id)
            return await self.channel.notify(team, team_name, recipient, rest_of_group)

        results = await asyncio.gather(*(send(m) for m in group), return_exceptions=True)

        notified = 0
        for member, outcome in zip(group, results):
            if isinstance(outcome, BaseException):
                logger.warning("Failed to notify %s in team %s: %r", member.id, team.id, outcome)
            elif outcome is True:
                notified += 1
        return notified
