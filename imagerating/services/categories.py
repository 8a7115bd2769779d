#!/usr/bin/env python
#
#
# -----------------------------------------------------------------------------
"""
Category service — append ``[[Category:X]]`` tags to an image page.
"""
# -----------------------------------------------------------------------------

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Optional
from urllib.parse import unquote_plus

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from imagerating.core.config import get_settings
from imagerating.core.messages import msg
from imagerating.models import Page
from imagerating.schemas import CategoryResult
from .pages import last_edited, latest_version, save_page_text

log = logging.getLogger(__name__)


# -----------------------------------------------------------------------------

def split_categories(categories: str) -> list[str]:
    """URL-decode a comma-separated list; blanks are dropped."""
    return [c.strip() for c in unquote_plus(categories).split(",") if c.strip()]


def category_tag(category: str) -> str:
    ns = get_settings().category_namespace
    return f"[[{ns}:{msg('imagerating-category', category)}]]"


def append_category_tags(text: str, categories: list[str]) -> str:
    """Append a tag for each category whose exact tag is not yet in *text*."""
    for category in categories:
        tag = category_tag(category)
        if tag not in text:
            text += f"\n{tag}"
    return text


# -----------------------------------------------------------------------------

async def add_image_category(
    db: AsyncSession,
    page: Page,
    categories: str,
    user_id: Optional[str] = None,
) -> CategoryResult:
    """Add *categories* (URL-encoded, comma separated) to *page*.

    Returns ``"busy"`` without editing when the page was saved within the
    last ``EDIT_DEBOUNCE_SECONDS``; the client retries shortly after.
    """
    settings = get_settings()
    current = await latest_version(db, page.id)

    since_edit = datetime.now(tz=timezone.utc) - last_edited(page, current)
    if since_edit.total_seconds() <= settings.edit_debounce_seconds:
        log.debug("Page %s edited %.1fs ago, deferring", page.id, since_edit.total_seconds())
        return "busy"

    text = current.content if current else ""
    new_text = append_category_tags(text, split_categories(categories))
    if new_text == text:
        return "ok"

    try:
        await save_page_text(
            db, page, new_text,
            author_id=user_id,
            comment=msg("imagerating-edit-summary"),
        )
    except SQLAlchemyError:
        log.exception("Could not save categories for page %s", page.id)
        await db.rollback()
        return "error"
    return "ok"


# -----------------------------------------------------------------------------
