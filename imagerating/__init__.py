"""ImageRating — rate, feature and categorise wiki images."""

from imagerating._version import __version__

__all__ = ["__version__"]
