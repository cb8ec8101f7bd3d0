"""Roster text parsing.

A roster is free text: paragraphs separated by a blank line, where the first
line of each paragraph is the group title and every following line is one
member name.
"""

from __future__ import annotations

import json
import logging
import re
from typing import Optional

from .models import RosterGroup

logger = logging.getLogger(__name__)

ROSTER_FIELD = "bus"

_BLOCK_SEPARATOR = re.compile(r"\n[ \t\r]*\n")


def parse_roster(text: Optional[str]) -> list[RosterGroup]:
    """Split roster text into ordered groups. Empty input gives an empty list."""
    if not text or not text.strip():
        return []

    groups = []
    for block in _BLOCK_SEPARATOR.split(text.replace("\r\n", "\n")):
        lines = [line.strip() for line in block.split("\n")]
        lines = [line for line in lines if line]
        if not lines:
            continue
        groups.append(RosterGroup(title=lines[0], member_names=lines[1:]))
    return groups


def extract_roster_text(page_content: Optional[str]) -> str:
    """Pull the roster text out of the groups page.

    The groups page is normally a JSON record with the roster under ``bus``.
    Content that is not JSON at all is treated as plain roster text.
    """
    if not page_content:
        return ""
    try:
        parsed = json.loads(page_content)
    except RecursionError:
        logger.warning("Groups page JSON is nested too deeply; no roster found")
        return ""
    except ValueError:
        return page_content

    if not isinstance(parsed, dict):
        logger.debug("Groups page is JSON but not a record; no roster found")
        return ""
    roster = parsed.get(ROSTER_FIELD)
    return roster if isinstance(roster, str) else ""


def parse_roster_page(page_content: Optional[str]) -> list[RosterGroup]:
    return parse_roster(extract_roster_text(page_content))
