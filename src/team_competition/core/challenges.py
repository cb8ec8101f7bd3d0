"""Challenge creation and editing."""

from __future__ import annotations

import logging
import math
import uuid
from typing import Any

from .models import Challenge, CompetitionDocument

logger = logging.getLogger(__name__)

DEFAULT_CHALLENGE_TITLE = "Ny challenge"
DEFAULT_CHALLENGE_STARS = 3
MIN_STARS = 1

_EDITABLE_FIELDS = {"title", "description", "stars", "is_active", "participant_visible"}


def clamp_stars(value: Any) -> int:
    """Round to the nearest whole star, never below one.

    Anything that is not a finite number counts as one star.
    """
    if isinstance(value, bool):
        number = float(value)
    elif isinstance(value, int):
        return max(MIN_STARS, value)
    elif isinstance(value, float):
        number = value
    elif isinstance(value, str):
        try:
            number = float(value.strip() or 0)
        except ValueError:
            return MIN_STARS
    else:
        return MIN_STARS

    if not math.isfinite(number):
        return MIN_STARS
    return max(MIN_STARS, math.floor(number + 0.5))


def create_challenge(title: str = DEFAULT_CHALLENGE_TITLE, stars: Any = DEFAULT_CHALLENGE_STARS) -> Challenge:
    return Challenge(
        id=str(uuid.uuid4()),
        title=title,
        description="",
        stars=clamp_stars(stars),
        is_active=True,
        participant_visible=True,
    )


def update_challenge(challenges: list[Challenge], challenge_id: str, **changes: Any) -> list[Challenge]:
    """Return challenges with one entry edited in place.

    Accepts any of title, description, stars, is_active and
    participant_visible. Stars are clamped. Unknown ids change nothing.
    """
    unknown = set(changes) - _EDITABLE_FIELDS
    if unknown:
        raise TypeError(f"Unknown challenge fields: {', '.join(sorted(unknown))}")
    if "stars" in changes:
        changes["stars"] = clamp_stars(changes["stars"])

    if not any(c.id == challenge_id for c in challenges):
        logger.debug("update_challenge: unknown challenge %s", challenge_id)
        return challenges
    return [c.model_copy(update=changes) if c.id == challenge_id else c for c in challenges]


def remove_challenge(document: CompetitionDocument, challenge_id: str) -> CompetitionDocument:
    """Drop a challenge together with every submission made against it."""
    return document.model_copy(update={
        "challenges": [c for c in document.challenges if c.id != challenge_id],
        "submissions": [s for s in document.submissions if s.challenge_id != challenge_id],
    })


def visible_challenges(challenges: list[Challenge]) -> list[Challenge]:
    """Active, participant-visible challenges, most stars first, then by title."""
    shown = [c for c in challenges if c.is_active and c.participant_visible]
    return sorted(shown, key=lambda c: (-c.stars, c.title.casefold(), c.title))
