#!/usr/bin/env python
#
#
# -----------------------------------------------------------------------------
"""
Pydantic v2 schemas for cached payloads and API responses.
"""
# -----------------------------------------------------------------------------

from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel, Field


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# Cached entries
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

class FeaturedImage(BaseModel):
    image_name: str
    image_url:  str
    page_id:    int
    thumbnail:  str
    user_id:    Optional[str] = None
    user_name:  str = ""


# -----------------------------------------------------------------------------

class ImageListEntry(BaseModel):
    page_id:    int
    page_title: str
    vote_avg:   float = 0.0


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# API
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

CategoryResult = Literal["ok", "busy", "error"]


class ImageRatingResult(BaseModel):
    result: CategoryResult


class ImageRatingResponse(BaseModel):
    imagerating: ImageRatingResult


# -----------------------------------------------------------------------------

class TokenResponse(BaseModel):
    csrftoken: str


# -----------------------------------------------------------------------------

class RenderResponse(BaseModel):
    html: str
    modules: list[str] = Field(default_factory=list)
    module_styles: list[str] = Field(default_factory=list)


# -----------------------------------------------------------------------------
