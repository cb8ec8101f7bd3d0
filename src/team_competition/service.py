"""Competition session: load, derive, mutate and save.

A ``CompetitionService`` holds the last locally known competition state.
Every mutation updates that state first and then writes the whole document
back through the content store. Saves from one service are queued so they
reach the store in the order the mutations were made.

There is no version check against the store. Two independent services that
edit the same competition overwrite each other's changes (last writer wins
for the whole document). Run one writer per competition.
"""

from __future__ import annotations

import asyncio
import logging
import os
from typing import Any, Iterable, Optional

from .core.challenges import create_challenge, remove_challenge, update_challenge, visible_challenges
from .core.codec import decode_directory, decode_result, encode
from .core.exceptions import PersistenceFailure
from .core.models import (
    Challenge,
    CompetitionDocument,
    LeaderboardRow,
    Participant,
    StatusCounts,
    SubmissionStatus,
    Team,
    TeamProgress,
)
from .core.roster import extract_roster_text
from .core.scoring import leaderboard
from .core.submissions import status_counts, team_progress, upsert_submission
from .core.teams import derive_teams, set_team_leader
from .store import ContentStore

logger = logging.getLogger(__name__)

COMPETITION_PAGE = "team-competition"
ROSTER_PAGE = "groups"
PARTICIPANTS_PAGE = "participants"


class CompetitionService:
    """Single-writer session over one competition document."""

    def __init__(
        self,
        store: ContentStore,
        directory: Optional[Iterable[Participant]] = None,
        competition_page: Optional[str] = None,
        roster_page: Optional[str] = None,
        participants_page: Optional[str] = None,
    ):
        self.store = store
        self.competition_page = competition_page or os.environ.get("COMPETITION_PAGE", COMPETITION_PAGE)
        self.roster_page = roster_page or os.environ.get("ROSTER_PAGE", ROSTER_PAGE)
        self.participants_page = participants_page or os.environ.get("PARTICIPANTS_PAGE", PARTICIPANTS_PAGE)
        self._fixed_directory = list(directory) if directory is not None else None
        self.directory: list[Participant] = self._fixed_directory or []
        self.document = CompetitionDocument()
        self.teams: list[Team] = []
        self._save_lock = asyncio.Lock()
        self._pending_saves = 0

    async def refresh(self) -> list[Team]:
        """Reload pages from the store and re-derive teams.

        Runs behind any queued saves. If mutations are still waiting to be
        saved once the pages are loaded, the local document is kept.
        """
        async with self._save_lock:
            if self._fixed_directory is None:
                self.directory = decode_directory(await self.store.load(self.participants_page))

            result = decode_result(await self.store.load(self.competition_page))
            roster_text = extract_roster_text(await self.store.load(self.roster_page))

            if self._pending_saves:
                logger.info("Keeping local competition state: %d saves still queued", self._pending_saves)
            else:
                self.document = result.document
            self.teams = derive_teams(roster_text, self.directory, self.document.teams)
        logger.info(
            "Loaded competition: %d teams, %d challenges, %d submissions",
            len(self.teams), len(self.document.challenges), len(self.document.submissions),
        )
        return self.teams

    # ─── Reads ───────────────────────────────────────────────────────────

    def leaderboard(self) -> list[LeaderboardRow]:
        return leaderboard(self.document, self.teams)

    def status_counts(self) -> StatusCounts:
        return status_counts(self.document, self.teams)

    def challenges(self, visible_only: bool = False) -> list[Challenge]:
        if visible_only:
            return visible_challenges(self.document.challenges)
        return list(self.document.challenges)

    def team_progress(self, team_id: str) -> TeamProgress:
        return team_progress(self.document, team_id, visible_challenges(self.document.challenges))

    # ─── Mutations ───────────────────────────────────────────────────────

    async def set_leader(self, team_id: str, leader_id: Optional[str]) -> Optional[Team]:
        """Choose or clear a leader. Non-members are ignored and nothing is saved."""
        next_teams = set_team_leader(self.teams, team_id, leader_id)
        if next_teams is not self.teams:
            await self._apply(teams=next_teams)
        return next((t for t in self.teams if t.id == team_id), None)

    async def add_challenge(self, title: Optional[str] = None, **changes: Any) -> Challenge:
        challenge = create_challenge(title) if title else create_challenge()
        challenges = [*self.document.challenges, challenge]
        if changes:
            challenges = update_challenge(challenges, challenge.id, **changes)
        await self._apply(challenges=challenges)
        return challenges[-1]

    async def update_challenge(self, challenge_id: str, **changes: Any) -> Optional[Challenge]:
        challenges = update_challenge(self.document.challenges, challenge_id, **changes)
        if challenges is not self.document.challenges:
            await self._apply(challenges=challenges)
        return next((c for c in self.document.challenges if c.id == challenge_id), None)

    async def remove_challenge(self, challenge_id: str) -> None:
        trimmed = remove_challenge(self.document, challenge_id)
        await self._apply(challenges=trimmed.challenges, submissions=trimmed.submissions)

    async def set_submission_status(
        self,
        team_id: str,
        challenge_id: str,
        status: Optional[SubmissionStatus],
        updated_by: Optional[str] = None,
    ) -> None:
        submissions = upsert_submission(
            self.document.submissions, team_id, challenge_id, status, updated_by=updated_by,
        )
        if submissions is not self.document.submissions:
            await self._apply(submissions=submissions)

    async def _apply(self, **changes: Any) -> None:
        """Update local state, then queue a full-document save."""
        teams = changes.pop("teams", self.teams)
        self.teams = teams
        self.document = self.document.model_copy(update={"teams": teams, **changes})
        self._pending_saves += 1
        try:
            await self._persist(encode(self.document))
        finally:
            self._pending_saves -= 1

    async def _persist(self, content: str) -> None:
        async with self._save_lock:
            try:
                saved = await self.store.save(self.competition_page, content)
            except PersistenceFailure:
                logger.error("Saving %s failed; local changes are not stored yet", self.competition_page)
                raise
            if not saved:
                logger.error("Saving %s failed; local changes are not stored yet", self.competition_page)
                raise PersistenceFailure(self.competition_page, "content store rejected the save")
