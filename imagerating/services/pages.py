#!/usr/bin/env python
#
#
# -----------------------------------------------------------------------------
"""
Page service
============
Reads page text and appends new versions through the host's append-only
version model.  Every save also refreshes the page's ``categorylinks`` rows,
the same way the host does after an edit.
"""
# -----------------------------------------------------------------------------

from __future__ import annotations

import re
from datetime import datetime
from typing import Optional

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from imagerating.core.config import get_settings
from imagerating.models import CategoryLink, Page, PageVersion
from .titles import as_utc, to_db_key


# -----------------------------------------------------------------------------
# Helpers
# -----------------------------------------------------------------------------

async def get_page_by_id(db: AsyncSession, page_id: int) -> Optional[Page]:
    result = await db.execute(
        select(Page)
        .where(Page.id == page_id)
        .options(selectinload(Page.namespace))
    )
    return result.scalar_one_or_none()


async def latest_version(db: AsyncSession, page_id: int) -> Optional[PageVersion]:
    result = await db.execute(
        select(PageVersion)
        .where(PageVersion.page_id == page_id)
        .order_by(PageVersion.version.desc())
        .limit(1)
    )
    return result.scalar_one_or_none()


async def _next_version_number(db: AsyncSession, page_id: int) -> int:
    result = await db.execute(
        select(func.max(PageVersion.version)).where(PageVersion.page_id == page_id)
    )
    current = result.scalar_one_or_none()
    return (current or 0) + 1


# -----------------------------------------------------------------------------

def last_edited(page: Page, version: Optional[PageVersion]) -> datetime:
    """Timestamp of the page's most recent save."""
    return as_utc(version.created_at if version else page.created_at)


# -----------------------------------------------------------------------------

def extract_categories(content: str) -> list[str]:
    """Return the DB keys of every ``[[Category:Name]]`` in *content*, deduplicated."""
    ns = re.escape(get_settings().category_namespace)
    pattern = re.compile(r"\[\[\s*" + ns + r"\s*:([^\]|]+)(?:\|[^\]]*)?\]\]", re.IGNORECASE)
    seen: set[str] = set()
    result: list[str] = []
    for m in pattern.finditer(content):
        key = to_db_key(m.group(1))
        if key and key not in seen:
            seen.add(key)
            result.append(key)
    return result


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# Save
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

async def save_page_text(
    db: AsyncSession,
    page: Page,
    content: str,
    author_id: Optional[str] = None,
    comment: str = "",
) -> PageVersion:
    prev = await latest_version(db, page.id)

    new_version = PageVersion(
        page_id=page.id,
        version=await _next_version_number(db, page.id),
        content=content,
        format=prev.format if prev else "wikitext",
        author_id=author_id,
        comment=comment,
    )
    db.add(new_version)
    await refresh_category_links(db, page.id, content)
    await db.flush()
    return new_version


# -----------------------------------------------------------------------------

async def refresh_category_links(db: AsyncSession, page_id: int, content: str) -> None:
    await db.execute(delete(CategoryLink).where(CategoryLink.page_id == page_id))
    for key in extract_categories(content):
        db.add(CategoryLink(page_id=page_id, category=key))


# -----------------------------------------------------------------------------

async def get_page_categories(db: AsyncSession, page_id: int) -> list[str]:
    result = await db.execute(
        select(CategoryLink.category)
        .where(CategoryLink.page_id == page_id)
        .order_by(CategoryLink.sortkey, CategoryLink.category)
    )
    return list(result.scalars().all())


# -----------------------------------------------------------------------------
