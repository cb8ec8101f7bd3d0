"""Lenient decoding and total encoding of the persisted competition document.

The document is an untyped JSON blob edited by other parts of the
application, so nothing about its shape is trusted. Decoding never raises:
unusable input becomes the empty document and unusable rows are dropped.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime
from typing import Any, Callable, Optional, TypeVar

from pydantic import BaseModel

from .challenges import clamp_stars
from .models import (
    Challenge,
    CompetitionDocument,
    Participant,
    Submission,
    SubmissionStatus,
    Team,
    utcnow,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

VALID_STATUSES = {status.value for status in SubmissionStatus}


class DecodeResult(BaseModel):
    """A decoded document plus what had to be discarded to get it."""

    document: CompetitionDocument
    defaulted: bool = False
    dropped_rows: int = 0


def _optional_str(value: Any) -> Optional[str]:
    return value if isinstance(value, str) else None


def _parse_timestamp(value: Any) -> datetime:
    if isinstance(value, str):
        try:
            return datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            pass
    return utcnow()


def parse_team(row: Any) -> Optional[Team]:
    if not isinstance(row, dict):
        return None
    if not isinstance(row.get("id"), str) or not isinstance(row.get("name"), str):
        return None
    members = row.get("memberUserIds")
    return Team(
        id=row["id"],
        name=row["name"],
        leader_id=_optional_str(row.get("leaderUserId")),
        member_ids=[m for m in members if isinstance(m, str)] if isinstance(members, list) else [],
    )


def parse_challenge(row: Any) -> Optional[Challenge]:
    if not isinstance(row, dict):
        return None
    if not isinstance(row.get("id"), str) or not isinstance(row.get("title"), str):
        return None
    return Challenge(
        id=row["id"],
        title=row["title"],
        description=_optional_str(row.get("description")),
        stars=clamp_stars(row.get("stars")),
        is_active=bool(row["isActive"]) if "isActive" in row else True,
        participant_visible=bool(row["participantVisible"]) if "participantVisible" in row else True,
    )


def parse_submission(row: Any) -> Optional[Submission]:
    if not isinstance(row, dict):
        return None
    for key in ("id", "teamId", "challengeId", "status"):
        if not isinstance(row.get(key), str):
            return None
    if row["status"] not in VALID_STATUSES:
        return None
    return Submission(
        id=row["id"],
        team_id=row["teamId"],
        challenge_id=row["challengeId"],
        status=SubmissionStatus(row["status"]),
        updated_at=_parse_timestamp(row.get("updatedAt")),
        updated_by=_optional_str(row.get("updatedByUserId")),
    )


def _parse_rows(raw: dict, field: str, parse_row: Callable[[Any], Optional[T]]) -> tuple[list[T], int]:
    rows = raw.get(field)
    if not isinstance(rows, list):
        if rows is not None:
            logger.warning("Competition document field %r is not a list; using empty list", field)
        return [], 0
    parsed = [parse_row(row) for row in rows]
    kept = [row for row in parsed if row is not None]
    return kept, len(rows) - len(kept)


def decode_result(text: Optional[str]) -> DecodeResult:
    """Decode persisted text, reporting whether it was defaulted or trimmed."""
    if not text or not text.strip():
        return DecodeResult(document=CompetitionDocument(), defaulted=True)
    try:
        raw = json.loads(text)
    except (ValueError, RecursionError) as exc:
        logger.warning("Competition document is not valid JSON (%s); using empty document", exc)
        return DecodeResult(document=CompetitionDocument(), defaulted=True)
    if not isinstance(raw, dict):
        logger.warning("Competition document is %s, not a record; using empty document", type(raw).__name__)
        return DecodeResult(document=CompetitionDocument(), defaulted=True)

    teams, dropped_teams = _parse_rows(raw, "teams", parse_team)
    challenges, dropped_challenges = _parse_rows(raw, "challenges", parse_challenge)
    submissions, dropped_submissions = _parse_rows(raw, "submissions", parse_submission)

    dropped = dropped_teams + dropped_challenges + dropped_submissions
    if dropped:
        logger.warning(
            "Dropped %d malformed rows (teams=%d, challenges=%d, submissions=%d)",
            dropped, dropped_teams, dropped_challenges, dropped_submissions,
        )

    return DecodeResult(
        document=CompetitionDocument(teams=teams, challenges=challenges, submissions=submissions),
        dropped_rows=dropped,
    )


def decode(text: Optional[str]) -> CompetitionDocument:
    return decode_result(text).document


def parse_participant(row: Any) -> Optional[Participant]:
    if not isinstance(row, dict):
        return None
    if not isinstance(row.get("id"), str) or not isinstance(row.get("fullName"), str):
        return None
    return Participant(
        id=row["id"],
        full_name=row["fullName"],
        display_name=_optional_str(row.get("displayName")),
    )


def decode_directory(text: Optional[str]) -> list[Participant]:
    """Decode a participant list exported by the host application.

    Accepts either a bare JSON list or a record with a ``participants`` list.
    """
    if not text or not text.strip():
        return []
    try:
        raw = json.loads(text)
    except (ValueError, RecursionError) as exc:
        logger.warning("Participant directory is not valid JSON (%s); using empty directory", exc)
        return []
    if isinstance(raw, list):
        raw = {"participants": raw}
    if not isinstance(raw, dict):
        return []
    participants, dropped = _parse_rows(raw, "participants", parse_participant)
    if dropped:
        logger.warning("Dropped %d malformed participant rows", dropped)
    return participants


def encode(document: CompetitionDocument) -> str:
    """Serialize to JSON with the persisted camelCase field names."""
    return document.model_dump_json(by_alias=True, exclude_none=True)
