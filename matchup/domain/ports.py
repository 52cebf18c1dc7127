# matchup/domain/ports.py
"""
Capabilities the matching service depends on but does not implement.

Concrete versions live in repositories/ (database) and telegram/ (transport).
"""
from typing import Dict, List, Optional, Protocol

from matchup.domain.models import Member, Team


class MembershipDirectory(Protocol):
    async def list_installed_teams(self) -> List[Team]:
        ...

    async def list_roster(self, team: Team) -> List[Optional[Member]]:
        ...

    async def resolve_team_display_name(self, team: Team) -> str:
        ...


class PreferenceStore(Protocol):
    async def load_all_opt_in_status(self) -> Dict[str, bool]:
        """Member id -> opted in. Members without an entry are opted in."""
        ...


class NotificationChannel(Protocol):
    async def notify(
        self,
        team: Team,
        team_name: str,
        recipient: Member,
        rest_of_group: List[Member],
    ) -> bool:
        """Deliver one pair-up notification. True when it was sent."""
        ...
