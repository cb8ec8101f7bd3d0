"""Star totals and leaderboard ranking.

``leaderboard`` is the single source of ranking order. Views that need a
podium or a team's position read the ranked rows instead of sorting again.
"""

from __future__ import annotations

import logging
from typing import Iterable, Optional

from .models import CompetitionDocument, LeaderboardRow, SubmissionStatus, Team

logger = logging.getLogger(__name__)

PODIUM_SIZE = 3


def challenge_stars(document: CompetitionDocument, challenge_id: str) -> int:
    """Stars awarded by a challenge; 0 for a challenge that no longer exists."""
    for challenge in document.challenges:
        if challenge.id == challenge_id:
            return challenge.stars
    return 0


def approved_star_total(document: CompetitionDocument, team_id: str) -> int:
    stars_by_challenge = {c.id: c.stars for c in document.challenges}
    return sum(
        stars_by_challenge.get(s.challenge_id, 0)
        for s in document.submissions
        if s.team_id == team_id and s.status == SubmissionStatus.APPROVED
    )


def approved_challenge_count(document: CompetitionDocument, team_id: str) -> int:
    return sum(
        1
        for s in document.submissions
        if s.team_id == team_id and s.status == SubmissionStatus.APPROVED
    )


def _ranking_key(row: LeaderboardRow) -> tuple:
    return (-row.stars, -row.approved_count, row.team.name.casefold(), row.team.name)


def leaderboard(document: CompetitionDocument, teams: Iterable[Team]) -> list[LeaderboardRow]:
    """Rank teams by approved stars.

    Ties go to the team with more approved challenges, then to the team name
    in ascending order. Every team gets a row, including teams with no stars.
    """
    rows = [
        LeaderboardRow(
            rank=1,
            team=team,
            stars=approved_star_total(document, team.id),
            approved_count=approved_challenge_count(document, team.id),
        )
        for team in teams
    ]
    rows.sort(key=_ranking_key)
    for position, row in enumerate(rows, start=1):
        row.rank = position
    return rows


def podium(rows: list[LeaderboardRow], size: int = PODIUM_SIZE) -> list[LeaderboardRow]:
    return rows[:size]


def team_rank(rows: Iterable[LeaderboardRow], team_id: str) -> Optional[int]:
    for row in rows:
        if row.team.id == team_id:
            return row.rank
    return None
