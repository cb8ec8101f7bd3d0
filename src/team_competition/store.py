"""Named-page content stores.

The engine only needs two primitives from its host application:
``load(page_id) -> text | None`` and ``save(page_id, text) -> bool``.
Pages live in the local database by default, or behind the host's page
service when ``CONTENT_STORE_URL`` is set.
"""

from __future__ import annotations

import logging
import os
from datetime import datetime
from typing import Optional, Protocol

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from .core.clients.pages import HttpContentStore
from .core.exceptions import PersistenceFailure
from .db import get_session_factory
from .sqlmodels import ContentPage

logger = logging.getLogger(__name__)


class ContentStore(Protocol):
    async def load(self, page_id: str) -> Optional[str]:
        ...

    async def save(self, page_id: str, content: str) -> bool:
        ...


class SqlContentStore:
    """Pages stored as rows of the ``content_pages`` table."""

    async def load(self, page_id: str) -> Optional[str]:
        session_factory = get_session_factory()
        try:
            async with session_factory() as session:
                result = await session.execute(
                    select(ContentPage).where(ContentPage.slug == page_id)
                )
                page = result.scalar_one_or_none()
        except SQLAlchemyError as exc:
            logger.error("Failed to load page %s: %s", page_id, exc)
            raise PersistenceFailure(page_id, str(exc)) from exc
        return page.content if page else None

    async def save(self, page_id: str, content: str) -> bool:
        session_factory = get_session_factory()
        try:
            async with session_factory() as session:
                result = await session.execute(
                    select(ContentPage).where(ContentPage.slug == page_id)
                )
                page = result.scalar_one_or_none()
                if page:
                    page.content = content
                    page.updated_at = datetime.utcnow()
                else:
                    session.add(ContentPage(
                        slug=page_id,
                        content=content,
                        updated_at=datetime.utcnow(),
                    ))
                await session.commit()
        except SQLAlchemyError as exc:
            logger.error("Failed to save page %s: %s", page_id, exc)
            return False
        return True


def get_content_store() -> ContentStore:
    """Pick the content store from the environment."""
    base_url = os.environ.get("CONTENT_STORE_URL", "")
    if base_url:
        logger.info("Using remote content store at %s", base_url)
        return HttpContentStore(base_url, token=os.environ.get("CONTENT_STORE_TOKEN") or None)
    return SqlContentStore()
