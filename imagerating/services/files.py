#!/usr/bin/env python
#
#
# -----------------------------------------------------------------------------
"""
File repository — look up file records and produce thumbnail markup.

Scaling never enlarges: a thumbnail is at most the original size, and the
aspect ratio is always kept.
"""
# -----------------------------------------------------------------------------

from __future__ import annotations

import html
from dataclasses import dataclass
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from imagerating.models import Image


# Media types the host can scale.
_SCALABLE = {"BITMAP", "DRAWING"}


# -----------------------------------------------------------------------------

@dataclass
class ThumbnailImage:
    url: str
    width: int
    height: int
    alt: str = ""

    def to_html(self) -> str:
        return (
            f'<img src="{html.escape(self.url, quote=True)}" '
            f'width="{self.width}" height="{self.height}" '
            f'alt="{html.escape(self.alt, quote=True)}" decoding="async" />'
        )


@dataclass
class MediaTransformError:
    message: str
    width: int
    height: int

    def to_html(self) -> str:
        return (
            f'<div class="MediaTransformError" '
            f'style="width: {self.width}px; height: {self.height}px; display:inline-block;">'
            f"{html.escape(self.message)}</div>"
        )


# -----------------------------------------------------------------------------

async def find_file(db: AsyncSession, name: str) -> Optional[Image]:
    result = await db.execute(select(Image).where(Image.name == name))
    return result.scalar_one_or_none()


# -----------------------------------------------------------------------------

def scaled_size(src_w: int, src_h: int, width: int, height: int = 0) -> tuple[int, int]:
    """Fit ``src_w x src_h`` into *width* (and *height*, when non-zero)."""
    scale = min(1.0, width / src_w)
    if height:
        scale = min(scale, height / src_h)
    return max(1, round(src_w * scale)), max(1, round(src_h * scale))


def transform(image: Image, width: int, height: int = 0) -> ThumbnailImage | MediaTransformError:
    if image.media_type not in _SCALABLE or image.width <= 0 or image.height <= 0:
        return MediaTransformError(
            f"Error creating thumbnail: {image.name} cannot be scaled",
            width,
            height or width,
        )
    w, h = scaled_size(image.width, image.height, width, height)
    return ThumbnailImage(url=image.url, width=w, height=h, alt=image.name)


# -----------------------------------------------------------------------------
