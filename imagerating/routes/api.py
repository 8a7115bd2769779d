#!/usr/bin/env python
#
#
# -----------------------------------------------------------------------------
"""
ImageRating API
===============
POST /api/v1/imagerating   — append categories to an image page  [rateimage, csrf]
GET  /api/v1/tokens        — CSRF token for the current user

Example::

    POST /api/v1/imagerating
    pageId=66&categories=Cute%20cats,Lolcats,Internet%20memes&token=...
"""
# -----------------------------------------------------------------------------

from __future__ import annotations

from typing import NoReturn, Optional

from fastapi import APIRouter, Depends, Form, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from imagerating.core.config import get_settings
from imagerating.core.database import get_db
from imagerating.core.messages import msg
from imagerating.core.security import (
    create_csrf_token, get_current_user, is_allowed, is_blocked, verify_csrf_token,
)
from imagerating.schemas import ImageRatingResponse, TokenResponse
from imagerating.services.categories import add_image_category
from imagerating.services.pages import get_page_by_id


# -----------------------------------------------------------------------------

router = APIRouter(tags=["imagerating"])

MAX_PAGE_ID = 2**63 - 1


# -----------------------------------------------------------------------------

def _die(status_code: int, code: str, info: str) -> NoReturn:
    raise HTTPException(status_code=status_code, detail={"code": code, "info": info})


# ── Add categories ────────────────────────────────────────────────────────────

@router.post("/imagerating", response_model=ImageRatingResponse)
async def imagerating(
    pageId:     Optional[str] = Form(None),
    categories: Optional[str] = Form(None),
    token:      Optional[str] = Form(None),
    user                      = Depends(get_current_user),
    db: AsyncSession          = Depends(get_db),
):
    settings = get_settings()
    user_id = user.id if user else None

    if not is_allowed(user, "rateimage"):
        _die(status.HTTP_403_FORBIDDEN, "noedit", msg("apierror-noedit"))
    if settings.read_only:
        _die(status.HTTP_503_SERVICE_UNAVAILABLE, "readonly", msg("apierror-readonly"))
    if is_blocked(user):
        _die(status.HTTP_403_FORBIDDEN, "blocked", msg("apierror-blocked"))
    if not verify_csrf_token(token, user_id):
        _die(status.HTTP_403_FORBIDDEN, "badtoken", msg("apierror-badtoken"))

    page_id = (pageId or "").strip()
    if not (page_id.isascii() and page_id.isdigit()) or not page_id.lstrip("0"):
        _die(status.HTTP_400_BAD_REQUEST, "missingparam", msg("apierror-missingparam", "pageId"))
    if not categories or not categories.strip():
        _die(status.HTTP_400_BAD_REQUEST, "missingparam", msg("apierror-missingparam", "categories"))

    page_id = page_id.lstrip("0")
    # Ids past the INTEGER column range cannot name a page.
    if len(page_id) > len(str(MAX_PAGE_ID)) or int(page_id) > MAX_PAGE_ID:
        _die(status.HTTP_404_NOT_FOUND, "nosuchpageid", msg("apierror-nosuchpageid", page_id))
    page = await get_page_by_id(db, int(page_id))
    if page is None:
        _die(status.HTTP_404_NOT_FOUND, "nosuchpageid", msg("apierror-nosuchpageid", page_id))
    if not is_allowed(user, "edit"):
        _die(status.HTTP_403_FORBIDDEN, "permissiondenied", msg("apierror-permissiondenied", "edit"))

    result = await add_image_category(db, page, categories, user_id=user_id)
    return {"imagerating": {"result": result}}


# ── CSRF token ────────────────────────────────────────────────────────────────

@router.get("/tokens", response_model=TokenResponse)
async def tokens(user=Depends(get_current_user)):
    return TokenResponse(csrftoken=create_csrf_token(user.id if user else None))


# -----------------------------------------------------------------------------
