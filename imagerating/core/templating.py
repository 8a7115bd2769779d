#!/usr/bin/env python
#
#
# -----------------------------------------------------------------------------
"""
Jinja2 environment shared by the UI routes and the parser-tag renderer.
"""
# -----------------------------------------------------------------------------

from __future__ import annotations

from pathlib import Path

from fastapi.templating import Jinja2Templates

from .messages import msg


# -----------------------------------------------------------------------------

TEMPLATE_DIR = Path(__file__).resolve().parent.parent / "templates"

templates = Jinja2Templates(directory=str(TEMPLATE_DIR))
templates.env.globals["msg"] = msg


# -----------------------------------------------------------------------------

def render_fragment(name: str, **context) -> str:
    """Render a template outside of a request (parser tags, list bodies)."""
    return templates.env.get_template(name).render(**context)


# -----------------------------------------------------------------------------
