#!/usr/bin/env python
#
#
# -----------------------------------------------------------------------------
"""Tests for the render endpoint and application wiring."""
# -----------------------------------------------------------------------------

from __future__ import annotations

import pytest
from httpx import AsyncClient

from tests.conftest import auth_headers, make_image, make_user


# -----------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_health(client: AsyncClient):
    resp = await client.get("/api/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "ok"


@pytest.mark.asyncio
async def test_render_plain_text_untouched(client: AsyncClient):
    resp = await client.get("/api/v1/render", params={"content": "Just ''text''"})
    assert resp.status_code == 200
    data = resp.json()
    assert data["html"] == "Just ''text''"
    assert data["modules"] == []
    assert data["module_styles"] == []


@pytest.mark.asyncio
async def test_render_featured_image(client: AsyncClient, db_session):
    await make_image(db_session, "Star.png", votes=[5, 5])
    resp = await client.get("/api/v1/render", params={
        "content": 'Intro\n<featuredimage width="200" />\nOutro',
    })
    data = resp.json()
    assert data["html"].startswith("Intro\n")
    assert data["html"].endswith("\nOutro")
    assert 'alt="Star.png"' in data["html"]
    assert 'width="200"' in data["html"]
    assert data["module_styles"] == ["ext.imagerating.css", "ext.voteNY.styles"]
    assert data["modules"] == []


@pytest.mark.asyncio
async def test_render_body_form_for_logged_in_user(client: AsyncClient, db_session):
    user = await make_user(db_session)
    await make_image(db_session, "Star.png", votes=[4])
    resp = await client.get(
        "/api/v1/render",
        params={"content": "<featuredimage>\nwidth=100\n</featuredimage>"},
        headers=auth_headers(user),
    )
    data = resp.json()
    assert 'width="100"' in data["html"]
    assert data["modules"] == ["ext.voteNY.scripts"]


@pytest.mark.asyncio
async def test_unknown_api_path_is_json_404(client: AsyncClient):
    resp = await client.get("/api/v1/nothing-here")
    assert resp.status_code == 404
    assert "detail" in resp.json()


@pytest.mark.asyncio
async def test_static_script_is_served(client: AsyncClient):
    resp = await client.get("/static/imagerating/js/imagerating.js")
    assert resp.status_code == 200
    assert "imagerating" in resp.text


@pytest.mark.asyncio
async def test_injected_category_buttons_use_normalised_names(client: AsyncClient):
    resp = await client.get("/static/imagerating/js/imagerating.js")
    script = resp.text
    assert "normaliseCategory" in script
    assert "ImageRating.normaliseCategory( category )" in script
    assert "toUpperCase()" in script
