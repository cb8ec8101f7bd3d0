"""Team derivation from roster groups.

Teams are not stored as the source of truth. They are rebuilt from the
roster and the participant directory on every read; only the leader choice
is carried over from the previously stored teams, matched by team id.

Team ids are ``bus-<slug>-<n>`` where ``n`` counts earlier groups with the
same slug in this run. Inserting, removing or reordering groups that share a
slug shifts their ids, which detaches any leader stored under the old id.
"""

from __future__ import annotations

import logging
import re
from typing import Iterable, Optional

from .models import Participant, Team
from .names import DirectoryIndex, normalize_name
from .roster import parse_roster

logger = logging.getLogger(__name__)

TEAM_ID_PREFIX = "bus"
FALLBACK_SLUG = "gruppe"

_NON_ALNUM = re.compile(r"[^a-z0-9]+")


def slugify_title(title: str) -> str:
    slug = _NON_ALNUM.sub("-", normalize_name(title)).strip("-")
    return slug or FALLBACK_SLUG


def derive_teams(
    roster_text: Optional[str],
    directory: Iterable[Participant],
    stored_teams: Iterable[Team] = (),
) -> list[Team]:
    """Build the current team list from roster text.

    Args:
        roster_text: Raw roster text (blank-line separated blocks).
        directory: Participants to resolve member names against.
        stored_teams: Previously persisted teams; only their leaders are used.

    Returns:
        Teams in roster order. Names that match no participant are dropped.
    """
    groups = parse_roster(roster_text)
    if not groups:
        return []

    leader_by_team_id = {team.id: team.leader_id for team in stored_teams}
    index = DirectoryIndex(directory)
    seen_slugs: dict[str, int] = {}

    teams = []
    for group in groups:
        slug = slugify_title(group.title)
        seen_slugs[slug] = seen_slugs.get(slug, 0) + 1
        team_id = f"{TEAM_ID_PREFIX}-{slug}-{seen_slugs[slug]}"

        member_ids: list[str] = []
        unresolved = 0
        for name in group.member_names:
            participant_id = index.resolve(name)
            if participant_id is None:
                unresolved += 1
            elif participant_id not in member_ids:
                member_ids.append(participant_id)

        leader_id = leader_by_team_id.get(team_id)
        if leader_id is not None and leader_id not in member_ids:
            logger.info("Dropping leader %s of %s: no longer a member", leader_id, team_id)
            leader_id = None

        if unresolved:
            logger.debug("%s: %d of %d names unresolved", team_id, unresolved, len(group.member_names))

        teams.append(Team(id=team_id, name=group.title, leader_id=leader_id, member_ids=member_ids))

    return teams


def set_team_leader(teams: list[Team], team_id: str, leader_id: Optional[str]) -> list[Team]:
    """Return teams with one leader replaced.

    ``leader_id=None`` clears the leader. An unknown team, or a leader who is
    not a member of that team, leaves the list unchanged.
    """
    team = next((t for t in teams if t.id == team_id), None)
    if team is None:
        return teams
    if leader_id is not None and leader_id not in team.member_ids:
        logger.warning("Rejected leader %s for %s: not a team member", leader_id, team_id)
        return teams
    return [t.model_copy(update={"leader_id": leader_id}) if t.id == team_id else t for t in teams]


def find_team_for_participant(teams: Iterable[Team], participant_id: str) -> Optional[Team]:
    for team in teams:
        if team.leader_id == participant_id or participant_id in team.member_ids:
            return team
    return None
