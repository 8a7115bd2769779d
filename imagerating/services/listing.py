#!/usr/bin/env python
#
#
# -----------------------------------------------------------------------------
"""
Special:ImageRating listing
===========================
Builds the paginated image list shown on the special page.

List types
----------
new      every File page, newest first (unrated images included)
popular  images with more than one vote, newest first
best     rated images, best average first, then most votes

An optional category narrows any list to images in that category.  The
first page of each (type, category, page size) list is cached briefly; later
pages always come from the database.
"""
# -----------------------------------------------------------------------------

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from imagerating.core.cache import get_cache
from imagerating.core.config import get_settings
from imagerating.core.messages import msg
from imagerating.models import CategoryLink, Namespace, Page
from imagerating.schemas import ImageListEntry
from .files import find_file, transform
from .pages import get_page_categories
from .titles import category_url, file_page_url, from_db_key, special_url, to_db_key
from .votes import format_score, get_vote_stats, render_stars, vote_stats_subquery

log = logging.getLogger(__name__)

LIST_TYPES = ("new", "popular", "best")
SPECIAL_PAGE = "ImageRating"
MAX_OFFSET = 2**63 - 1


# -----------------------------------------------------------------------------
# Parameters
# -----------------------------------------------------------------------------

def normalise_type(value: Optional[str]) -> str:
    value = (value or "").strip().lower()
    return value if value in LIST_TYPES else "new"


def category_db_key(category: str) -> str:
    """DB key used to match ``categorylinks.category`` (compared case-insensitively)."""
    return to_db_key(msg("imagerating-category", category.strip()))


def list_heading(list_type: str, category: Optional[str]) -> str:
    if category:
        return msg(f"imagerating-{list_type}-heading-param", category)
    return msg(f"imagerating-{list_type}-heading")


# -----------------------------------------------------------------------------
# Pagination
# -----------------------------------------------------------------------------

@dataclass
class PageLink:
    label: str
    url: Optional[str]   # None for the current page


@dataclass
class Pagination:
    prev_url: Optional[str] = None
    next_url: Optional[str] = None
    links: list[PageLink] = field(default_factory=list)


def page_numbers(page: int, total: int, per_page: int, window: int) -> list[int]:
    """Page numbers to link: 1 up to ``page + window``, never past the end."""
    num_pages = math.ceil(total / per_page)
    return list(range(1, min(num_pages, page + window) + 1))


def paginate(
    page: int,
    total: int,
    per_page: int,
    list_type: str,
    category: Optional[str],
    window: int = 9,
) -> Optional[Pagination]:
    """Navigation for the list, or ``None`` when everything fits one page."""
    if total <= per_page:
        return None

    def _url(n: int) -> str:
        return special_url(SPECIAL_PAGE, page=n, type=list_type, category=category)

    nav = Pagination()
    if page > 1:
        nav.prev_url = _url(page - 1)
    for n in page_numbers(page, total, per_page, window):
        nav.links.append(PageLink(str(n), None if n == page else _url(n)))
    if total - per_page * page > 0:
        nav.next_url = _url(page + 1)
    return nav


# -----------------------------------------------------------------------------
# Queries
# -----------------------------------------------------------------------------

def _base_query(list_type: str, cat_key: Optional[str]):
    settings = get_settings()
    stats = vote_stats_subquery()

    q = (
        select(
            Page.id.label("page_id"),
            Page.title.label("page_title"),
            stats.c.vote_avg,
            stats.c.vote_count,
        )
        .join(Namespace, Namespace.id == Page.namespace_id)
        .where(Namespace.name == settings.file_namespace)
    )
    if list_type == "new":
        q = q.outerjoin(stats, stats.c.page_id == Page.id)
    else:
        q = q.join(stats, stats.c.page_id == Page.id)
    if list_type == "popular":
        q = q.where(stats.c.vote_count > 1)

    if cat_key:
        q = (
            q.join(CategoryLink, CategoryLink.page_id == Page.id)
            .where(func.upper(CategoryLink.category) == func.upper(cat_key))
        )

    if list_type == "best":
        q = q.order_by(stats.c.vote_avg.desc(), stats.c.vote_count.desc(), Page.id.desc())
    elif list_type == "popular":
        q = q.order_by(Page.id.desc(), stats.c.vote_avg.desc(), stats.c.vote_count.desc())
    else:
        q = q.order_by(Page.id.desc())
    return q


# -----------------------------------------------------------------------------

async def count_images(db: AsyncSession, list_type: str, category: Optional[str]) -> int:
    cat_key = category_db_key(category) if category else None
    sub = _base_query(list_type, cat_key).order_by(None).subquery()
    result = await db.execute(select(func.count()).select_from(sub))
    return result.scalar_one()


# -----------------------------------------------------------------------------

async def fetch_images(
    db: AsyncSession,
    list_type: str,
    category: Optional[str],
    page: int,
    per_page: int,
) -> list[ImageListEntry]:
    cat_key = category_db_key(category) if category else None
    q = _base_query(list_type, cat_key).offset((page - 1) * per_page).limit(per_page)
    result = await db.execute(q)
    return [
        ImageListEntry(
            page_id=row.page_id,
            page_title=row.page_title,
            vote_avg=float(row.vote_avg or 0),
        )
        for row in result.all()
    ]


# -----------------------------------------------------------------------------

async def get_image_list(
    db: AsyncSession,
    list_type: str,
    category: Optional[str],
    page: int,
) -> list[ImageListEntry]:
    settings = get_settings()
    per_page = settings.images_per_page
    cache = get_cache()
    key = cache.make_key("image", "list", f"type:{list_type}:category:{category or ''}:per:{per_page}", "v2")

    if page == 1:
        data = await cache.get(key)
        if data is not None:
            log.debug("Cache hit for image rating list")
            return [ImageListEntry.model_validate(item) for item in data]

    log.debug("Cache miss for image rating list")
    entries = await fetch_images(db, list_type, category, page, per_page)
    if page == 1:
        await cache.set(key, [e.model_dump() for e in entries], settings.list_cache_ttl)
    return entries


# -----------------------------------------------------------------------------
# Page model
# -----------------------------------------------------------------------------

@dataclass
class CategoryButton:
    id: str
    name: str
    url: str
    clear_after: bool


@dataclass
class ImageCard:
    page_id: int
    title: str
    url: str
    thumbnail: str
    stars: str
    score: str
    vote_count: int
    row_class: str
    categories: list[CategoryButton]


@dataclass
class MenuItem:
    label: str
    url: Optional[str]   # None for the list being shown


@dataclass
class ImageRatingListing:
    list_type: str
    category: Optional[str]
    page: int
    heading: str
    menu: list[MenuItem]
    upload_url: str
    cards: list[ImageCard]
    total: int
    pagination: Optional[Pagination]


# -----------------------------------------------------------------------------

def _category_buttons(page_id: int, categories: list[str], per_row: int) -> list[CategoryButton]:
    total = len(categories)
    buttons = []
    for x, key in enumerate(categories, start=1):
        buttons.append(CategoryButton(
            id=f"category-button-{page_id}-{x}",
            name=from_db_key(key),
            url=category_url(key),
            clear_after=(x == total or x % per_row == 0),
        ))
    return buttons


async def _image_card(db: AsyncSession, entry: ImageListEntry, position: int) -> ImageCard:
    settings = get_settings()
    size = settings.thumbnail_size

    thumbnail = ""
    image = await find_file(db, entry.page_title)
    if image is not None:
        thumbnail = transform(image, size, size).to_html()

    stats = await get_vote_stats(db, entry.page_id)
    categories = await get_page_categories(db, entry.page_id)

    return ImageCard(
        page_id=entry.page_id,
        title=entry.page_title,
        url=file_page_url(entry.page_title),
        thumbnail=thumbnail,
        stars=render_stars(entry.page_id, int(entry.vote_avg)),
        score=format_score(entry.vote_avg),
        vote_count=stats.count,
        row_class="image-rating-row-bottom" if position == settings.images_per_page else "image-rating-row",
        categories=_category_buttons(entry.page_id, categories, settings.categories_per_row),
    )


# -----------------------------------------------------------------------------

async def build_listing(
    db: AsyncSession,
    list_type: Optional[str] = None,
    category: Optional[str] = None,
    page: int = 1,
) -> ImageRatingListing:
    settings = get_settings()
    list_type = normalise_type(list_type)
    category = (category or "").strip() or None
    # Keep the row offset inside a 64-bit integer.
    page = min(max(page, 1), MAX_OFFSET // settings.images_per_page)

    entries = await get_image_list(db, list_type, category, page)
    total = await count_images(db, list_type, category)

    menu = [
        MenuItem(
            label=list_heading(t, category),
            url=None if t == list_type else special_url(SPECIAL_PAGE, type=t, category=category),
        )
        for t in LIST_TYPES
    ]

    cards = [await _image_card(db, e, x) for x, e in enumerate(entries, start=1)]

    return ImageRatingListing(
        list_type=list_type,
        category=category,
        page=page,
        heading=list_heading(list_type, category),
        menu=menu,
        upload_url=special_url("Upload"),
        cards=cards,
        total=total,
        pagination=paginate(
            page, total, settings.images_per_page, list_type, category,
            window=settings.pagination_window,
        ) if cards else None,
    )


# -----------------------------------------------------------------------------
