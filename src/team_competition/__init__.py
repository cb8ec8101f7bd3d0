"""Team Competition engine.

Turns a free-text group roster and a loosely structured competition document
into teams, challenges and approval-gated submissions, and ranks teams on a
star leaderboard.
"""

__version__ = "0.1.0"

from .core.challenges import create_challenge
from .core.codec import decode, encode
from .core.scoring import leaderboard
from .core.submissions import upsert_submission
from .core.teams import derive_teams

__all__ = [
    "create_challenge",
    "decode",
    "derive_teams",
    "encode",
    "leaderboard",
    "upsert_submission",
]
