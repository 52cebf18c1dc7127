# matchup/infrastructure/models.py
"""
SQLAlchemy ORM models for team installs, rosters and opt-in status.

Groups are not stored; they only live for the duration of a run.
"""
from datetime import datetime, timezone

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import relationship

from matchup.infrastructure.db.session import Base


def now():
    return datetime.now(timezone.utc)


class TeamInstall(Base):
    __tablename__ = "team_installs"

    id = Column(Integer, primary_key=True)
    team_id = Column(String(64), nullable=False, unique=True, index=True)  # telegram chat id
    name = Column(String(255), nullable=False, default="")
    service_url = Column(String(255), nullable=False)
    tenant_id = Column(String(64), nullable=False)
    installed_at = Column(DateTime(timezone=True), default=now)

    members = relationship(
        "TeamMember",
        back_populates="team",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )


class TeamMember(Base):
    __tablename__ = "team_members"
    __table_args__ = (UniqueConstraint("team_install_id", "user_id", name="uq_team_member"),)

    id = Column(Integer, primary_key=True)
    team_install_id = Column(Integer, ForeignKey("team_installs.id", ondelete="CASCADE"), nullable=False)
    user_id = Column(String(64), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    given_name = Column(String(255), nullable=True)
    address = Column(String(64), nullable=False)
    username = Column(String(64), nullable=True)
    is_guest = Column(Boolean, default=False, nullable=False)
    joined_at = Column(DateTime(timezone=True), default=now)

    team = relationship("TeamInstall", back_populates="members")


class UserOptIn(Base):
    __tablename__ = "user_opt_in"

    user_id = Column(String(64), primary_key=True)
    opted_in = Column(Boolean, nullable=False, default=True)
    updated_at = Column(DateTime(timezone=True), default=now, onupdate=now)
