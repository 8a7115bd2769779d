from imagerating.schemas.schemas import (
    FeaturedImage,
    ImageListEntry,
    CategoryResult, ImageRatingResult, ImageRatingResponse,
    TokenResponse,
    RenderResponse,
)

__all__ = [
    "FeaturedImage",
    "ImageListEntry",
    "CategoryResult", "ImageRatingResult", "ImageRatingResponse",
    "TokenResponse",
    "RenderResponse",
]
