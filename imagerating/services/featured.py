#!/usr/bin/env python
#
#
# -----------------------------------------------------------------------------
"""
Featured image — the ``<featuredimage />`` parser tag
=====================================================

The featured image is the highest-rated image uploaded within the last
``FEATURED_MAX_AGE_DAYS`` days: best average vote first, then most votes,
then the newest page.  The chosen image (or the fact that there is none) is
cached per thumbnail width for ``FEATURED_CACHE_TTL`` seconds; the vote
figures shown next to it are always read live.

Usage in wikitext::

    <featuredimage width="300" />
    <featuredimage>width=300</featuredimage>
"""
# -----------------------------------------------------------------------------

from __future__ import annotations

import logging
import re
from datetime import datetime, timedelta, timezone
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from imagerating.core.cache import get_cache
from imagerating.core.config import get_settings
from imagerating.core.security import is_allowed
from imagerating.core.templating import render_fragment
from imagerating.models import Image, Namespace, Page
from imagerating.schemas import FeaturedImage
from .files import find_file, transform
from .parser import Parser
from .titles import file_page_url, user_page_url
from .votes import format_score, get_vote_stats, render_stars, vote_stats_subquery

log = logging.getLogger(__name__)


# -----------------------------------------------------------------------------
# Width handling
# -----------------------------------------------------------------------------

_BODY_WIDTH_RE = re.compile(r"^\s*width\s*=\s*(.*)", re.IGNORECASE | re.MULTILINE)
_LEADING_INT_RE = re.compile(r"\s*([+-]?\d+)")


def _intval(value: str) -> int:
    """Leading integer of *value*, 0 when there is none (``"300px"`` → 300)."""
    m = _LEADING_INT_RE.match(value or "")
    return int(m.group(1)) if m else 0


def parse_width(body: Optional[str], args: dict[str, str]) -> int:
    """A ``width=N`` line in the tag body wins over the ``width`` attribute."""
    default = get_settings().featured_default_width
    raw = None
    m = _BODY_WIDTH_RE.search(body or "")
    if m:
        raw = m.group(1)
    elif args.get("width"):
        raw = args["width"]
    if raw is None:
        return default
    width = _intval(raw)
    return width if width > 0 else default


# -----------------------------------------------------------------------------
# Data
# -----------------------------------------------------------------------------

async def _query_featured_image(db: AsyncSession, width: int) -> Optional[FeaturedImage]:
    settings = get_settings()
    cutoff = datetime.now(tz=timezone.utc) - timedelta(days=settings.featured_max_age_days)
    stats = vote_stats_subquery()

    result = await db.execute(
        select(Page.id, Page.title, Image.user_id, Image.user_text)
        .join(Namespace, Namespace.id == Page.namespace_id)
        .join(Image, Image.name == Page.title)
        .join(stats, stats.c.page_id == Page.id)
        .where(
            Namespace.name == settings.file_namespace,
            Image.timestamp > cutoff,
        )
        .order_by(stats.c.vote_avg.desc(), stats.c.vote_count.desc(), Page.id.desc())
        .limit(1)
    )
    row = result.first()
    if row is None:
        return None

    image = await find_file(db, row.title)
    if image is None:
        return None

    thumb = transform(image, width)
    return FeaturedImage(
        image_name=row.title,
        image_url=file_page_url(row.title),
        page_id=row.id,
        thumbnail=thumb.to_html(),
        user_id=row.user_id,
        user_name=row.user_text,
    )


# -----------------------------------------------------------------------------

async def get_featured_image(db: AsyncSession, width: int) -> Optional[FeaturedImage]:
    settings = get_settings()
    cache = get_cache()
    key = cache.make_key("image", "featured", width)

    data = await cache.get(key)
    if data is not None:
        log.debug("Loading featured image data from cache")
        return FeaturedImage.model_validate(data) if data else None

    log.debug("Loading featured image data from database")
    featured = await _query_featured_image(db, width)
    # An empty document records "nothing qualifies" so the query is not
    # repeated on every render.
    await cache.set(key, featured.model_dump() if featured else {}, settings.featured_cache_ttl)
    return featured


# -----------------------------------------------------------------------------
# Tag hook
# -----------------------------------------------------------------------------

async def render_featured_image(body: Optional[str], args: dict[str, str], parser: Parser) -> str:
    if is_allowed(parser.user, "voteny"):
        parser.output.add_modules("ext.voteNY.scripts")
    parser.output.add_module_styles("ext.imagerating.css", "ext.voteNY.styles")

    width = parse_width(body, args)
    featured = await get_featured_image(parser.db, width)
    if featured is None:
        return ""

    stats = await get_vote_stats(parser.db, featured.page_id)
    # A thumbnail without <img> is a transform error; it is shown unlinked.
    linked = "<img" in featured.thumbnail.lower()

    return render_fragment(
        "featured_image.html",
        featured=featured,
        linked=linked,
        user_url=user_page_url(featured.user_name),
        stars=render_stars(featured.page_id, stats.average),
        score=format_score(stats.average),
        vote_count=stats.count,
    )


# -----------------------------------------------------------------------------
