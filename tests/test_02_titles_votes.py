#!/usr/bin/env python
#
#
# -----------------------------------------------------------------------------
"""Tests for title helpers, thumbnails and vote display."""
# -----------------------------------------------------------------------------

from __future__ import annotations

import pytest

from imagerating.models import Image
from imagerating.services.files import MediaTransformError, ThumbnailImage, scaled_size, transform
from imagerating.services.pages import extract_categories
from imagerating.services.titles import category_url, special_url, to_db_key
from imagerating.services.votes import format_score, get_vote_stats, render_stars
from tests.conftest import make_image


# ── Titles ────────────────────────────────────────────────────────────────────

def test_to_db_key():
    assert to_db_key(" cute  cats") == "Cute_cats"
    assert to_db_key("Lolcats") == "Lolcats"


def test_category_url_uses_spaces():
    assert category_url("Cute_cats") == "/category/Cute%20cats"


def test_special_url_drops_empty_params():
    assert special_url("ImageRating", type="best", category=None) == "/special/imagerating?type=best"
    assert special_url("Upload") == "/special/upload"


def test_extract_categories_deduplicates_and_normalises():
    text = "Pic\n[[Category:cute cats]]\n[[Category:Cute_cats|sort]]\n[[category: Lolcats ]]"
    assert extract_categories(text) == ["Cute_cats", "Lolcats"]


# ── Thumbnails ────────────────────────────────────────────────────────────────

def test_scaled_size_keeps_aspect_and_never_enlarges():
    assert scaled_size(800, 600, 300) == (300, 225)
    assert scaled_size(100, 50, 300) == (100, 50)
    assert scaled_size(800, 400, 120, 120) == (120, 60)


def test_transform_bitmap_gives_img():
    image = Image(name="Cat.jpg", url="/images/Cat.jpg", width=800, height=600, media_type="BITMAP")
    thumb = transform(image, 300)
    assert isinstance(thumb, ThumbnailImage)
    html = thumb.to_html()
    assert 'src="/images/Cat.jpg"' in html
    assert 'width="300"' in html and 'height="225"' in html


def test_transform_unscalable_gives_error_box():
    image = Image(name="Song.ogg", url="/images/Song.ogg", width=0, height=0, media_type="AUDIO")
    thumb = transform(image, 120, 120)
    assert isinstance(thumb, MediaTransformError)
    assert "<img" not in thumb.to_html()
    assert "MediaTransformError" in thumb.to_html()


# ── Votes ─────────────────────────────────────────────────────────────────────

def test_format_score():
    assert format_score(4.0) == "4"
    assert format_score(11 / 3) == "3.67"
    assert format_score(None) == "0"


def test_render_stars_half_star():
    html = render_stars(9, 3.5)
    assert html.count("star-on") == 3
    assert html.count("star-half") == 1
    assert html.count("star-off") == 1
    assert 'id="rating_stars_9"' in html


@pytest.mark.asyncio
async def test_vote_stats(db_session):
    page = await make_image(db_session, "Stats.png", votes=[5, 4, 3])
    stats = await get_vote_stats(db_session, page.id)
    assert stats.count == 3
    assert stats.average == pytest.approx(4.0)

    empty = await make_image(db_session, "Unrated.png")
    stats = await get_vote_stats(db_session, empty.id)
    assert (stats.average, stats.count) == (0.0, 0)
