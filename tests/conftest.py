from __future__ import annotations

from typing import Optional

import pytest

from team_competition.core.models import Participant

BUS_ROSTER = """Bus 1
Alice Smith
Bob Jones

Bus 1
Carol Young
"""


class MemoryContentStore:
    """In-memory stand-in for the host application's page store."""

    def __init__(self, pages: Optional[dict[str, str]] = None, fail_saves: bool = False):
        self.pages = dict(pages or {})
        self.fail_saves = fail_saves
        self.saved: list[tuple[str, str]] = []

    async def load(self, page_id: str) -> Optional[str]:
        return self.pages.get(page_id)

    async def save(self, page_id: str, content: str) -> bool:
        if self.fail_saves:
            return False
        self.pages[page_id] = content
        self.saved.append((page_id, content))
        return True


@pytest.fixture()
def directory() -> list[Participant]:
    return [
        Participant(id="u-alice", full_name="Smith, Alice"),
        Participant(id="u-bob", full_name="Bob Jones", display_name="Bobby"),
        Participant(id="u-carol", full_name="Young, Carol"),
        Participant(id="u-dan", full_name="Dan Ødegård"),
    ]


@pytest.fixture()
def memory_store() -> MemoryContentStore:
    return MemoryContentStore()
