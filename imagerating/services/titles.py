#!/usr/bin/env python
#
#
# -----------------------------------------------------------------------------
"""
Title helpers — DB keys, slugs and the host's URL scheme.
"""
# -----------------------------------------------------------------------------

from __future__ import annotations

import re
from datetime import datetime, timezone
from urllib.parse import quote, urlencode

from imagerating.core.config import get_settings


# -----------------------------------------------------------------------------

def slugify(text: str) -> str:
    """Convert a page title to a URL slug (same rules as the host)."""
    text = text.strip().lower()
    text = re.sub(r"[^\w\s-]", "", text)
    text = re.sub(r"[\s_]+", "-", text)
    text = re.sub(r"-+", "-", text)
    return text.strip("-")


def to_db_key(text: str) -> str:
    """``" cute  cats"`` → ``"Cute_cats"``."""
    text = re.sub(r"[\s_]+", "_", text.strip()).strip("_")
    return text[:1].upper() + text[1:]


def from_db_key(key: str) -> str:
    return key.replace("_", " ")


# -----------------------------------------------------------------------------
# URLs
# -----------------------------------------------------------------------------

def page_url(namespace: str, title: str) -> str:
    return f"{get_settings().base_url}/wiki/{quote(namespace)}/{slugify(title)}"


def file_page_url(title: str) -> str:
    return page_url(get_settings().file_namespace, title)


def user_page_url(username: str) -> str:
    return page_url(get_settings().user_namespace, username)


def category_url(name: str) -> str:
    return f"{get_settings().base_url}/category/{quote(from_db_key(name))}"


def special_url(name: str, **query) -> str:
    url = f"{get_settings().base_url}/special/{name.lower()}"
    params = {k: v for k, v in query.items() if v not in (None, "")}
    return f"{url}?{urlencode(params)}" if params else url


# -----------------------------------------------------------------------------

def as_utc(dt: datetime) -> datetime:
    """SQLite hands back naive datetimes; every stored value is UTC."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt


# -----------------------------------------------------------------------------
