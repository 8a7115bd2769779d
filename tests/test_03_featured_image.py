#!/usr/bin/env python
#
#
# -----------------------------------------------------------------------------
"""
Tests for the <featuredimage /> tag.

The tag hook is driven through ``expand_tags`` directly; the render endpoint
has its own tests in test_06_render.py.
"""
# -----------------------------------------------------------------------------

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from imagerating.hooks import register_parser_hooks
from imagerating.services.featured import get_featured_image, parse_width
from imagerating.services.parser import Parser, expand_tags, parse_attributes
from tests.conftest import make_image, make_user


# -----------------------------------------------------------------------------

async def _render(db, text: str = '<featuredimage width="300" />', user=None) -> tuple[str, Parser]:
    register_parser_hooks()
    parser = Parser(db=db, user=user)
    html = await expand_tags(text, parser)
    return html, parser


# ── Width ─────────────────────────────────────────────────────────────────────

def test_width_from_attribute():
    assert parse_width(None, {"width": "300"}) == 300


def test_width_defaults_to_250():
    assert parse_width(None, {}) == 250


def test_width_in_body_wins():
    assert parse_width("width=120", {"width": "300"}) == 120


@pytest.mark.parametrize("raw", ["abc", "0", "-40", ""])
def test_bad_width_falls_back_to_default(raw):
    assert parse_width(None, {"width": raw}) == 250


def test_width_takes_leading_integer():
    assert parse_width(None, {"width": "300px"}) == 300


def test_parse_attributes_quoting():
    assert parse_attributes(' width="300" Align=left x=\'y\'') == {"width": "300", "align": "left", "x": "y"}


# ── Selection ─────────────────────────────────────────────────────────────────

@pytest.mark.asyncio
async def test_no_rated_images_renders_nothing(db_session):
    await make_image(db_session, "Unrated.png")
    html, parser = await _render(db_session, "before <featuredimage /> after")
    assert html == "before  after"
    # Styles are requested even when nothing is shown.
    assert "ext.imagerating.css" in parser.output.module_styles


@pytest.mark.asyncio
async def test_highest_rated_recent_image_is_featured(db_session):
    await make_image(db_session, "Average.png", votes=[3, 3])
    await make_image(db_session, "Best.png", votes=[5, 5])
    await make_image(db_session, "Old.png", votes=[5, 5, 5],
                     uploaded=datetime.now(tz=timezone.utc) - timedelta(days=40))

    html, _ = await _render(db_session)
    assert 'alt="Best.png"' in html
    assert "Old.png" not in html
    assert "Average.png" not in html


@pytest.mark.asyncio
async def test_ties_broken_by_vote_count(db_session):
    await make_image(db_session, "Few.png", votes=[4])
    await make_image(db_session, "Many.png", votes=[4, 4, 4])

    featured = await get_featured_image(db_session, 250)
    assert featured is not None
    assert featured.image_name == "Many.png"


@pytest.mark.asyncio
async def test_featured_markup(db_session):
    uploader = await make_user(db_session, "photographer")
    await make_image(db_session, "Sunset.png", votes=[5, 4], uploader=uploader)

    html, _ = await _render(db_session)
    assert 'class="featured-image-main"' in html
    assert '<a href="/wiki/File/sunsetpng">' in html
    assert 'width="300"' in html and 'height="225"' in html
    assert 'href="/wiki/User/photographer"' in html
    assert ">photographer</a>" in html
    assert "Community score: 4.5 (2 ratings)" in html


@pytest.mark.asyncio
async def test_unscalable_image_is_not_linked(db_session):
    await make_image(db_session, "Tune.ogg", votes=[5], width=0, height=0, media_type="AUDIO")

    html, _ = await _render(db_session)
    assert "MediaTransformError" in html
    assert "/wiki/File/" not in html
    assert "(1 rating)" in html


# ── Modules ───────────────────────────────────────────────────────────────────

@pytest.mark.asyncio
async def test_vote_script_only_for_users_who_may_vote(db_session):
    await make_image(db_session, "Pic.png", votes=[5])

    _, anon = await _render(db_session)
    assert "ext.voteNY.scripts" not in anon.output.modules
    assert anon.output.module_styles == {"ext.imagerating.css", "ext.voteNY.styles"}

    user = await make_user(db_session, "voter")
    _, member = await _render(db_session, user=user)
    assert "ext.voteNY.scripts" in member.output.modules


# ── Caching ───────────────────────────────────────────────────────────────────

@pytest.mark.asyncio
async def test_featured_image_is_cached_per_width(db_session, object_cache):
    await make_image(db_session, "First.png", votes=[4])
    first = await get_featured_image(db_session, 250)
    assert first.image_name == "First.png"

    await make_image(db_session, "Better.png", votes=[5, 5])
    again = await get_featured_image(db_session, 250)
    assert again.image_name == "First.png"

    other_width = await get_featured_image(db_session, 300)
    assert other_width.image_name == "Better.png"

    await object_cache.delete(object_cache.make_key("image", "featured", 250))
    fresh = await get_featured_image(db_session, 250)
    assert fresh.image_name == "Better.png"


@pytest.mark.asyncio
async def test_no_result_is_cached_too(db_session, object_cache):
    assert await get_featured_image(db_session, 250) is None
    assert await object_cache.get(object_cache.make_key("image", "featured", 250)) == {}

    await make_image(db_session, "Late.png", votes=[5])
    assert await get_featured_image(db_session, 250) is None


@pytest.mark.asyncio
async def test_score_is_live_while_image_is_cached(db_session):
    from imagerating.models import Vote

    page = await make_image(db_session, "Live.png", votes=[5])
    html, _ = await _render(db_session)
    assert "(1 rating)" in html

    db_session.add(Vote(page_id=page.id, value=3))
    await db_session.commit()
    html, _ = await _render(db_session)
    assert "Community score: 4 (2 ratings)" in html
