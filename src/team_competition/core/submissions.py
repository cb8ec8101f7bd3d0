"""Submission state updates and status queries.

There is at most one submission per (team, challenge). No transition rules
are enforced here: any status can follow any other, and ``None`` clears the
record back to "not submitted". Who may request which change is decided by
the caller.
"""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Iterable, Optional

from .models import (
    Challenge,
    CompetitionDocument,
    StatusCounts,
    Submission,
    SubmissionStatus,
    Team,
    TeamProgress,
    utcnow,
)


def _find_index(submissions: list[Submission], team_id: str, challenge_id: str) -> int:
    for idx, submission in enumerate(submissions):
        if submission.team_id == team_id and submission.challenge_id == challenge_id:
            return idx
    return -1


def upsert_submission(
    submissions: list[Submission],
    team_id: str,
    challenge_id: str,
    status: Optional[SubmissionStatus],
    updated_by: Optional[str] = None,
    now: Optional[datetime] = None,
) -> list[Submission]:
    """Set or clear the status of one team's submission for one challenge.

    Returns a new list; the input list is left untouched. An existing record
    keeps its id and position, a new one is appended.
    """
    idx = _find_index(submissions, team_id, challenge_id)

    if status is None:
        if idx < 0:
            return submissions
        return submissions[:idx] + submissions[idx + 1:]

    status = SubmissionStatus(status)
    timestamp = now or utcnow()

    if idx < 0:
        return [
            *submissions,
            Submission(
                id=str(uuid.uuid4()),
                team_id=team_id,
                challenge_id=challenge_id,
                status=status,
                updated_at=timestamp,
                updated_by=updated_by,
            ),
        ]

    updated = submissions[idx].model_copy(update={
        "status": status,
        "updated_at": timestamp,
        "updated_by": updated_by,
    })
    return [*submissions[:idx], updated, *submissions[idx + 1:]]


def submission_status(
    submissions: Iterable[Submission],
    team_id: str,
    challenge_id: str,
) -> Optional[SubmissionStatus]:
    for submission in submissions:
        if submission.team_id == team_id and submission.challenge_id == challenge_id:
            return submission.status
    return None


def status_counts(document: CompetitionDocument, teams: Iterable[Team]) -> StatusCounts:
    """Count stored statuses, ignoring submissions for unknown teams or challenges."""
    team_ids = {team.id for team in teams}
    challenge_ids = {challenge.id for challenge in document.challenges}
    counts = StatusCounts()
    for submission in document.submissions:
        if submission.team_id not in team_ids or submission.challenge_id not in challenge_ids:
            continue
        field = submission.status.value
        setattr(counts, field, getattr(counts, field) + 1)
    return counts


def team_progress(
    document: CompetitionDocument,
    team_id: str,
    challenges: Iterable[Challenge],
) -> TeamProgress:
    """Status breakdown for one team over the given challenges.

    Challenges without a submission count as ``todo``.
    """
    status_by_challenge = {
        s.challenge_id: s.status for s in document.submissions if s.team_id == team_id
    }
    progress = TeamProgress()
    for challenge in challenges:
        progress.total += 1
        status = status_by_challenge.get(challenge.id)
        if status is None:
            progress.todo += 1
        else:
            setattr(progress, status.value, getattr(progress, status.value) + 1)
    return progress
