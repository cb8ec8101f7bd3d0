"""Pydantic data models for the competition records.

Python attributes are snake_case. The persisted document uses the camelCase
names of the surrounding application, so fields that differ carry an alias
and models are dumped with ``by_alias=True``.
"""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SubmissionStatus(str, Enum):
    """Stored approval states. A missing submission means "not submitted"."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class Participant(BaseModel):
    """A directory entry from the surrounding application."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    full_name: str = Field(alias="fullName")
    display_name: Optional[str] = Field(None, alias="displayName")


class RosterGroup(BaseModel):
    """One block of roster text: a title line and member-name lines."""

    title: str
    member_names: list[str] = Field(default_factory=list)


class Team(BaseModel):
    """A derived team of resolved participant ids with an optional leader."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    name: str
    leader_id: Optional[str] = Field(None, alias="leaderUserId")
    member_ids: list[str] = Field(default_factory=list, alias="memberUserIds")


class Challenge(BaseModel):
    """A scorable task worth a whole number of stars."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    title: str
    description: Optional[str] = None
    stars: int = Field(3, ge=1)
    is_active: bool = Field(True, alias="isActive")
    participant_visible: bool = Field(True, alias="participantVisible")


class Submission(BaseModel):
    """Current approval status of one team's attempt at one challenge."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    team_id: str = Field(alias="teamId")
    challenge_id: str = Field(alias="challengeId")
    status: SubmissionStatus
    updated_at: datetime = Field(default_factory=utcnow, alias="updatedAt")
    updated_by: Optional[str] = Field(None, alias="updatedByUserId")


class CompetitionDocument(BaseModel):
    """The persisted aggregate: stored teams, challenges and submissions."""

    teams: list[Team] = Field(default_factory=list)
    challenges: list[Challenge] = Field(default_factory=list)
    submissions: list[Submission] = Field(default_factory=list)


class LeaderboardRow(BaseModel):
    """One ranked leaderboard entry."""

    rank: int = Field(ge=1, description="1-based position in the ranking")
    team: Team
    stars: int = 0
    approved_count: int = 0


class StatusCounts(BaseModel):
    """Submission counts per stored status."""

    pending: int = 0
    approved: int = 0
    rejected: int = 0


class TeamProgress(StatusCounts):
    """Per-team status counts over a set of challenges, including unsubmitted ones."""

    total: int = 0
    todo: int = 0
