#!/usr/bin/env python
#
#
# -----------------------------------------------------------------------------
"""
Render endpoint — expand the plugin's extension tags in a wikitext snippet.

GET /api/v1/render?content=<featuredimage width="300"/>
"""
# -----------------------------------------------------------------------------

from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from imagerating.core.database import get_db
from imagerating.core.security import get_current_user
from imagerating.schemas import RenderResponse
from imagerating.services.parser import Parser, expand_tags


# -----------------------------------------------------------------------------

router = APIRouter(prefix="/render", tags=["render"])


# -----------------------------------------------------------------------------

@router.get("", response_model=RenderResponse)
async def render_tags(
    content: str     = Query(default="", max_length=1_000_000),
    user             = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Return *content* with every registered tag replaced by its HTML."""
    parser = Parser(db=db, user=user)
    html = await expand_tags(content, parser)
    return RenderResponse(
        html=html,
        modules=sorted(parser.output.modules),
        module_styles=sorted(parser.output.module_styles),
    )


# -----------------------------------------------------------------------------
