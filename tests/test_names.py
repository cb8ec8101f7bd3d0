from __future__ import annotations

import pytest

from team_competition.core.models import Participant
from team_competition.core.names import DirectoryIndex, candidate_keys, normalize_name, resolve_name


def test_normalize_name_folds_case_accents_and_spacing():
    assert normalize_name("  José   ÁLVAREZ\t") == "jose alvarez"


def test_candidate_keys_for_surname_first():
    assert candidate_keys("Smith, Alice") == ["smith, alice", "smith alice", "alice smith"]


def test_candidate_keys_for_given_first():
    assert candidate_keys("Alice Smith") == ["alice smith", "smith, alice", "smith alice"]


def test_candidate_keys_multiple_given_names():
    keys = candidate_keys("Mary Ann Smith")
    assert "smith, mary ann" in keys
    assert keys[0] == "mary ann smith"


def test_candidate_keys_single_token_and_blank():
    assert candidate_keys("Cher") == ["cher"]
    assert candidate_keys("   ") == []


@pytest.mark.parametrize("name", ["Alice Smith", "alice   smith", "ALICE SMITH", "Smith, Alice", "smith,alice"])
def test_name_variants_resolve_to_same_participant(name):
    directory = [Participant(id="u-alice", full_name="Smith, Alice")]
    assert resolve_name(name, directory) == "u-alice"


def test_display_name_is_indexed(directory):
    index = DirectoryIndex(directory)
    assert index.resolve("bobby") == "u-bob"
    assert index.resolve("Jones, Bob") == "u-bob"


def test_diacritics_in_directory_and_roster():
    index = DirectoryIndex([Participant(id="u-1", full_name="Renée Ågren")])
    assert index.resolve("RENEE AGREN") == "u-1"
    assert index.resolve("Ågren, Renée") == "u-1"


def test_first_participant_wins_shared_key():
    index = DirectoryIndex([
        Participant(id="first", full_name="Sam Lee"),
        Participant(id="second", full_name="Sam Lee"),
    ])
    assert index.resolve("Sam Lee") == "first"


def test_unmatched_name_resolves_to_none(directory):
    assert DirectoryIndex(directory).resolve("Nobody Here") is None
    assert DirectoryIndex(directory).resolve("") is None
