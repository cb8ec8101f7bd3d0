"""Free-text name matching against the participant directory.

Roster names are typed by hand, so a name is looked up under several
normalized candidate keys: as written, without commas, and flipped between
"Given Surname" and "Surname, Given" orderings.
"""

from __future__ import annotations

import logging
import re
import unicodedata
from typing import Iterable, Optional

from .models import Participant

logger = logging.getLogger(__name__)

_COMMA = re.compile(r",\s*")


def normalize_name(value: str) -> str:
    """Trim, case-fold, strip diacritics and collapse internal whitespace."""
    decomposed = unicodedata.normalize("NFKD", value.strip().casefold())
    stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return " ".join(stripped.split())


def _without_commas(normalized: str) -> str:
    return " ".join(_COMMA.sub(" ", normalized).split())


def _given_first(normalized: str) -> Optional[str]:
    """Turn 'smith, alice' into 'alice smith'."""
    parts = [part.strip() for part in normalized.split(",")]
    parts = [part for part in parts if part]
    if len(parts) < 2:
        return None
    return normalize_name(f"{' '.join(parts[1:])} {parts[0]}")


def _surname_first(normalized: str) -> Optional[str]:
    """Turn 'alice smith' into 'smith, alice'."""
    if "," in normalized:
        return None
    tokens = normalized.split(" ")
    if len(tokens) < 2:
        return None
    return normalize_name(f"{tokens[-1]}, {' '.join(tokens[:-1])}")


def candidate_keys(raw_name: str) -> list[str]:
    """All lookup keys for a name, most literal first, without duplicates."""
    normalized = normalize_name(raw_name)
    if not normalized:
        return []

    keys = [normalized, _without_commas(normalized)]
    for flipped in (_given_first(normalized), _surname_first(normalized)):
        if flipped:
            keys.append(flipped)
            keys.append(_without_commas(flipped))
    return list(dict.fromkeys(keys))


class DirectoryIndex:
    """Candidate-key lookup table over the participant directory.

    Every participant is indexed under the keys of its full name and display
    name. When two participants share a key the first one keeps it; there is
    no ambiguity signalling beyond a debug log line.
    """

    def __init__(self, participants: Iterable[Participant] = ()):
        self._ids_by_key: dict[str, str] = {}
        for participant in participants:
            self._add(participant.id, participant.full_name)
            if participant.display_name:
                self._add(participant.id, participant.display_name)

    def _add(self, participant_id: str, name: str) -> None:
        for key in candidate_keys(name):
            existing = self._ids_by_key.get(key)
            if existing is None:
                self._ids_by_key[key] = participant_id
            elif existing != participant_id:
                logger.debug("Name key %r already taken by %s, ignoring %s", key, existing, participant_id)

    def __len__(self) -> int:
        return len(self._ids_by_key)

    def resolve(self, raw_name: str) -> Optional[str]:
        """Return the participant id for a name, or None if nothing matches."""
        for key in candidate_keys(raw_name):
            participant_id = self._ids_by_key.get(key)
            if participant_id is not None:
                return participant_id
        logger.debug("No directory match for roster name %r", raw_name)
        return None


def resolve_name(raw_name: str, directory: Iterable[Participant]) -> Optional[str]:
    """One-off lookup. Build a DirectoryIndex instead when resolving many names."""
    return DirectoryIndex(directory).resolve(raw_name)
