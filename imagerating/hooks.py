#!/usr/bin/env python
#
#
# -----------------------------------------------------------------------------
"""
Registration of the plugin's parser hooks with the host.
"""
# -----------------------------------------------------------------------------

from __future__ import annotations

from imagerating.services import parser
from imagerating.services.featured import render_featured_image


# -----------------------------------------------------------------------------

def register_parser_hooks() -> None:
    """Called once when the parser is first used; safe to repeat."""
    parser.set_hook("featuredimage", render_featured_image)


# -----------------------------------------------------------------------------
