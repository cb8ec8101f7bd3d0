from __future__ import annotations


class CompetitionError(Exception):
    """Base class for errors surfaced by the competition engine."""


class PersistenceFailure(CompetitionError):
    """A content-store load or save did not go through.

    Nothing is retried and in-memory state is not rolled back, so callers may
    be ahead of what is stored until the next successful save.
    """

    def __init__(self, page_id: str, reason: str = ""):
        self.page_id = page_id
        msg = f"Could not persist page '{page_id}'"
        if reason:
            msg += f": {reason}"
        super().__init__(msg)
