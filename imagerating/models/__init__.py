from imagerating.models.models import (
    CategoryLink,
    Image,
    Namespace,
    Page,
    PageVersion,
    User,
    Vote,
)

__all__ = [
    "CategoryLink",
    "Image",
    "Namespace",
    "Page",
    "PageVersion",
    "User",
    "Vote",
]
