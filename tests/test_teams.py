from __future__ import annotations

from team_competition.core.models import Team
from team_competition.core.teams import (
    derive_teams,
    find_team_for_participant,
    set_team_leader,
    slugify_title,
)

from conftest import BUS_ROSTER


def test_slugify_title():
    assert slugify_title("Bus 1") == "bus-1"
    assert slugify_title("  Øst & Vest!! ") == "st-vest"
    assert slugify_title("Café Crème") == "cafe-creme"
    assert slugify_title("***") == "gruppe"


def test_duplicate_titles_get_distinct_ids(directory):
    teams = derive_teams(BUS_ROSTER, directory)

    assert [t.id for t in teams] == ["bus-bus-1-1", "bus-bus-1-2"]
    assert [t.name for t in teams] == ["Bus 1", "Bus 1"]
    assert teams[0].member_ids == ["u-alice", "u-bob"]
    assert teams[1].member_ids == ["u-carol"]


def test_unresolved_and_repeated_names_are_dropped(directory):
    roster = "Red\nAlice Smith\nGhost Person\nsmith, alice\nBobby"
    teams = derive_teams(roster, directory)
    assert teams[0].member_ids == ["u-alice", "u-bob"]


def test_empty_roster_gives_no_teams(directory):
    assert derive_teams(None, directory) == []
    assert derive_teams("", directory, [Team(id="bus-x-1", name="X")]) == []


def test_stored_leader_carried_forward_when_still_member(directory):
    stored = [Team(id="bus-bus-1-1", name="Bus 1", leader_id="u-bob", member_ids=["u-bob"])]
    teams = derive_teams(BUS_ROSTER, directory, stored)
    assert teams[0].leader_id == "u-bob"
    assert teams[1].leader_id is None


def test_stored_leader_dropped_when_no_longer_member(directory):
    stored = [Team(id="bus-bus-1-2", name="Bus 1", leader_id="u-alice")]
    teams = derive_teams(BUS_ROSTER, directory, stored)
    assert teams[1].leader_id is None


def test_reordering_same_title_groups_detaches_leader(directory):
    stored = [Team(id="bus-bus-1-1", name="Bus 1", leader_id="u-alice")]
    reordered = "Bus 1\nCarol Young\n\nBus 1\nAlice Smith\nBob Jones"
    teams = derive_teams(reordered, directory, stored)
    assert teams[0].id == "bus-bus-1-1"
    assert teams[0].leader_id is None
    assert teams[1].leader_id is None


def test_set_team_leader_accepts_member(directory):
    teams = derive_teams(BUS_ROSTER, directory)
    updated = set_team_leader(teams, "bus-bus-1-1", "u-bob")
    assert updated[0].leader_id == "u-bob"
    assert teams[0].leader_id is None


def test_set_team_leader_ignores_non_member(directory):
    teams = derive_teams(BUS_ROSTER, directory)
    assert set_team_leader(teams, "bus-bus-1-1", "u-carol") is teams
    assert set_team_leader(teams, "no-such-team", "u-bob") is teams


def test_set_team_leader_clears():
    teams = [Team(id="t1", name="T", leader_id="u-1", member_ids=["u-1"])]
    assert set_team_leader(teams, "t1", None)[0].leader_id is None


def test_find_team_for_participant(directory):
    teams = derive_teams(BUS_ROSTER, directory)
    assert find_team_for_participant(teams, "u-carol").id == "bus-bus-1-2"
    assert find_team_for_participant(teams, "u-dan") is None
