#!/usr/bin/env python
#
#
# -----------------------------------------------------------------------------
"""
Special:ImageRating (server-rendered HTML)
==========================================
GET  /special/imagerating           — list images (?type=new|popular|best&category=&page=)
GET  /special/imagerating/{type}    — same, list type given as a subpage
"""
# -----------------------------------------------------------------------------

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query, Request, status
from fastapi.responses import HTMLResponse
from sqlalchemy.ext.asyncio import AsyncSession

from imagerating.core.config import get_settings
from imagerating.core.database import get_db
from imagerating.core.messages import msg
from imagerating.core.security import (
    create_csrf_token, get_current_user, is_allowed, is_blocked,
)
from imagerating.core.templating import templates
from imagerating.services.listing import build_listing


# -----------------------------------------------------------------------------

router = APIRouter(tags=["ui"])


# -----------------------------------------------------------------------------
# Helpers
# -----------------------------------------------------------------------------

def _ctx(user, **extra) -> dict:
    """Base template context (request passed separately as first arg to TemplateResponse)."""
    settings = get_settings()
    return {
        "user": user,
        "site_name": settings.site_name,
        "app_version": settings.app_version,
        **extra,
    }


def _error_page(request: Request, user, message: str, status_code: int) -> HTMLResponse:
    return templates.TemplateResponse(
        request,
        "error.html",
        _ctx(user, message=message),
        status_code=status_code,
    )


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# Special:ImageRating
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

@router.get("/special/imagerating", response_class=HTMLResponse)
@router.get("/special/imagerating/{par}", response_class=HTMLResponse)
async def special_imagerating(
    request: Request,
    par: Optional[str]      = None,
    page: int               = Query(1),
    type: Optional[str]     = Query(None),
    category: Optional[str] = Query(None),
    user                    = Depends(get_current_user),
    db: AsyncSession        = Depends(get_db),
):
    settings = get_settings()

    if not is_allowed(user, "rateimage"):
        return _error_page(request, user, msg("imagerating-permission-error"), status.HTTP_403_FORBIDDEN)
    if settings.read_only:
        return _error_page(request, user, settings.read_only_reason, status.HTTP_503_SERVICE_UNAVAILABLE)
    if is_blocked(user):
        return _error_page(request, user, msg("imagerating-blocked-error"), status.HTTP_403_FORBIDDEN)

    listing = await build_listing(db, type or par, category, page)

    # Voting is only interactive for users who may vote.
    modules = ["ext.imagerating.js"]
    if is_allowed(user, "voteny"):
        modules.append("ext.voteNY.scripts")

    return templates.TemplateResponse(
        request,
        "special_imagerating.html",
        _ctx(user,
             listing=listing,
             modules=modules,
             csrf_token=create_csrf_token(user.id if user else None)),
    )


# -----------------------------------------------------------------------------
