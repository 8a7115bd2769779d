#!/usr/bin/env python
#
#
# -----------------------------------------------------------------------------
"""
Vote service — read-only view of the voting extension's ``votes`` table.
"""
# -----------------------------------------------------------------------------

from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from imagerating.models import Vote


MAX_STARS = 5


# -----------------------------------------------------------------------------

@dataclass
class VoteStats:
    average: float = 0.0
    count: int = 0


# -----------------------------------------------------------------------------

def vote_stats_subquery():
    """Per-page ``vote_avg`` / ``vote_count``, joinable on ``page_id``."""
    return (
        select(
            Vote.page_id.label("page_id"),
            func.avg(Vote.value).label("vote_avg"),
            func.count(Vote.id).label("vote_count"),
        )
        .group_by(Vote.page_id)
        .subquery("vote_stats")
    )


# -----------------------------------------------------------------------------

async def get_vote_stats(db: AsyncSession, page_id: int) -> VoteStats:
    result = await db.execute(
        select(func.avg(Vote.value), func.count(Vote.id)).where(Vote.page_id == page_id)
    )
    avg, count = result.one()
    return VoteStats(average=float(avg or 0), count=int(count or 0))


# -----------------------------------------------------------------------------

def format_score(value: float | None) -> str:
    """``3.6667`` → ``"3.67"``, ``4.0`` → ``"4"``."""
    return f"{round(float(value or 0), 2):g}"


# -----------------------------------------------------------------------------

def render_stars(page_id: int, rating: float, voted: bool = False) -> str:
    """Star bar for *page_id*; half stars for fractional ratings.

    Clicking a star is wired up by the voting extension's own script via the
    ``data-vote-*`` attributes.
    """
    rating = float(rating or 0)
    out = [f'<div class="rating-stars" id="rating_stars_{page_id}" data-vote-page="{page_id}">']
    for x in range(1, MAX_STARS + 1):
        if rating >= x:
            state = "on"
        elif rating > x - 1:
            state = "half"
        else:
            state = "off"
        out.append(
            f'<span class="vote-rating-star star-{state}" id="rating_{page_id}_{x}" '
            f'data-vote-the-vote="{x}" data-vote-voted="{int(voted)}"></span>'
        )
    out.append("</div>")
    return "".join(out)


# -----------------------------------------------------------------------------
