"""Team Competition MCP Server.

FastMCP server exposing the competition engine as tools: leaderboard,
teams, challenges, leader choice and submission status.
Run: team-competition-mcp
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from mcp.server.fastmcp import FastMCP
from mcp.types import ToolAnnotations

from .core.models import SubmissionStatus
from .core.scoring import podium, team_rank
from .db import close_db, init_db
from .service import CompetitionService
from .store import SqlContentStore, get_content_store

logger = logging.getLogger(__name__)

READ_ONLY = ToolAnnotations(readOnlyHint=True, destructiveHint=False, idempotentHint=True, openWorldHint=False)
WRITES = ToolAnnotations(readOnlyHint=False, destructiveHint=False, idempotentHint=True, openWorldHint=False)
DESTRUCTIVE = ToolAnnotations(readOnlyHint=False, destructiveHint=True, idempotentHint=True, openWorldHint=False)

_service: Optional[CompetitionService] = None


@asynccontextmanager
async def lifespan(server: FastMCP) -> AsyncIterator[None]:
    """Open the content store and load the current competition."""
    global _service
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(name)s %(levelname)s %(message)s")
    store = get_content_store()
    if isinstance(store, SqlContentStore):
        await init_db()
    _service = CompetitionService(store)
    await _service.refresh()
    try:
        yield
    finally:
        _service = None
        await close_db()


mcp = FastMCP(
    "Team Competition",
    instructions="Run a team star competition: teams come from the group roster, admins add challenges and approve submissions, and the leaderboard ranks teams by approved stars.",
    lifespan=lifespan,
)


def _get_service() -> CompetitionService:
    if _service is None:
        raise RuntimeError("Competition service is not initialized")
    return _service


def _parse_status(status: str) -> Optional[SubmissionStatus]:
    if not status or status == "none":
        return None
    try:
        return SubmissionStatus(status)
    except ValueError:
        allowed = ", ".join(s.value for s in SubmissionStatus)
        raise ValueError(f"Unknown status '{status}'. Use one of: {allowed}, or 'none' to clear.")


# ─── Reads ───────────────────────────────────────────────────────────────────


@mcp.tool(annotations=READ_ONLY)
async def competition_leaderboard(refresh: bool = True) -> dict:
    """Teams ranked by approved stars, with the top three called out.

    Args:
        refresh: Reload roster and competition pages first. Default True.
    """
    service = _get_service()
    if refresh:
        await service.refresh()
    rows = service.leaderboard()
    counts = service.status_counts()
    return {
        "title": "Leaderboard",
        "rows": [row.model_dump(mode="json") for row in rows],
        "podium": [row.team.name for row in podium(rows)],
        "status_counts": counts.model_dump(),
        "summary": f"{len(rows)} teams, {counts.approved} approved and {counts.pending} pending submissions",
    }


@mcp.tool(annotations=READ_ONLY)
async def competition_teams(refresh: bool = True) -> dict:
    """Teams derived from the group roster, with members and leader.

    Args:
        refresh: Reload roster and competition pages first. Default True.
    """
    service = _get_service()
    if refresh:
        await service.refresh()
    names = {p.id: p.display_name or p.full_name for p in service.directory}
    return {
        "title": "Teams",
        "teams": [
            {
                **team.model_dump(),
                "member_names": [names.get(pid, pid) for pid in team.member_ids],
            }
            for team in service.teams
        ],
        "count": len(service.teams),
    }


@mcp.tool(annotations=READ_ONLY)
async def competition_challenges(visible_only: bool = False) -> dict:
    """List challenges.

    Args:
        visible_only: Only active challenges shown to participants. Default False.
    """
    challenges = _get_service().challenges(visible_only=visible_only)
    return {
        "title": "Challenges",
        "challenges": [c.model_dump() for c in challenges],
        "count": len(challenges),
    }


@mcp.tool(annotations=READ_ONLY)
async def competition_team_progress(team_id: str) -> dict:
    """Status breakdown of one team over the visible challenges.

    Args:
        team_id: Team id (e.g., 'bus-bus-1-1').
    """
    service = _get_service()
    progress = service.team_progress(team_id)
    rank = team_rank(service.leaderboard(), team_id)
    return {"team_id": team_id, "rank": rank, **progress.model_dump()}


# ─── Writes ──────────────────────────────────────────────────────────────────


@mcp.tool(annotations=WRITES)
async def competition_set_leader(team_id: str, leader_id: str = "") -> dict:
    """Choose a team leader from the team's members, or clear it.

    Args:
        team_id: Team id.
        leader_id: Participant id of a team member. Empty clears the leader.
    """
    team = await _get_service().set_leader(team_id, leader_id or None)
    if team is None:
        return {"team_id": team_id, "updated": False, "summary": f"No team '{team_id}'"}
    updated = team.leader_id == (leader_id or None)
    return {
        "team": team.model_dump(),
        "updated": updated,
        "summary": "Leader updated" if updated else f"'{leader_id}' is not a member of {team_id}; leader unchanged",
    }


@mcp.tool(annotations=WRITES)
async def competition_add_challenge(title: str = "", description: str = "", stars: int = 3) -> dict:
    """Create a challenge. Stars are rounded and never below 1.

    Args:
        title: Challenge title. Empty uses the default title.
        description: Optional description.
        stars: Stars awarded on approval. Default 3.
    """
    challenge = await _get_service().add_challenge(title or None, description=description, stars=stars)
    return {"challenge": challenge.model_dump()}


@mcp.tool(annotations=WRITES)
async def competition_update_challenge(
    challenge_id: str,
    title: Optional[str] = None,
    description: Optional[str] = None,
    stars: Optional[float] = None,
    is_active: Optional[bool] = None,
    participant_visible: Optional[bool] = None,
) -> dict:
    """Edit a challenge. Only the arguments that are given change.

    Args:
        challenge_id: Challenge id.
        title: New title.
        description: New description.
        stars: New star value, rounded and clamped to at least 1.
        is_active: Whether the challenge is open.
        participant_visible: Whether participants can see it.
    """
    changes = {
        key: value
        for key, value in {
            "title": title,
            "description": description,
            "stars": stars,
            "is_active": is_active,
            "participant_visible": participant_visible,
        }.items()
        if value is not None
    }
    challenge = await _get_service().update_challenge(challenge_id, **changes)
    if challenge is None:
        return {"challenge_id": challenge_id, "updated": False, "summary": f"No challenge '{challenge_id}'"}
    return {"challenge": challenge.model_dump(), "updated": True}


@mcp.tool(annotations=DESTRUCTIVE)
async def competition_remove_challenge(challenge_id: str) -> dict:
    """Delete a challenge and every submission made against it.

    Args:
        challenge_id: Challenge id.
    """
    await _get_service().remove_challenge(challenge_id)
    return {"challenge_id": challenge_id, "removed": True}


@mcp.tool(annotations=WRITES)
async def competition_set_status(team_id: str, challenge_id: str, status: str, updated_by: str = "") -> dict:
    """Set a team's submission status for a challenge.

    Args:
        team_id: Team id.
        challenge_id: Challenge id.
        status: 'pending', 'approved', 'rejected', or 'none' to clear the submission.
        updated_by: Participant id of whoever made the change.
    """
    service = _get_service()
    await service.set_submission_status(team_id, challenge_id, _parse_status(status), updated_by or None)
    progress = service.team_progress(team_id)
    return {"team_id": team_id, "challenge_id": challenge_id, "status": status, **progress.model_dump()}


def main():
    """Entry point for the CLI command."""
    mcp.run()


if __name__ == "__main__":
    main()
