from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional


class Member(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    given_name: Optional[str] = None
    address: str  # chat id used to reach them directly
    username: Optional[str] = None
    is_guest: bool = False

    @property
    def display_name(self) -> str:
        # Guests may not have a given name, fall back to the full name
        return self.given_name or self.name


class NotificationEndpoint(BaseModel):
    model_config = ConfigDict(frozen=True)

    service_url: str
    tenant_id: str


class Team(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    name: str = ""
    endpoint: NotificationEndpoint
    roster: List[Member] = Field(default_factory=list)


class TeamResult(BaseModel):
    groups_formed: int = 0
    members_notified: int = 0


class RunSummary(BaseModel):
    teams_count: int = 0
    groups_formed: int = 0
    members_notified: int = 0
    preference_entries: int = 0
    cancelled: bool = False
    error: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.error is None

    def add(self, result: TeamResult) -> None:
        self.groups_formed += result.groups_formed
        self.members_notified += result.members_notified
