#!/usr/bin/env python
#
#
# -----------------------------------------------------------------------------
"""
Interface messages.

Parameters are written ``$1``, ``$2`` ...; ``{{PLURAL:$n|one|many}}`` picks a
form by the numeric value of a parameter.  Messages are plain text: callers
escape them (Jinja2 autoescape does this for templates).
"""
# -----------------------------------------------------------------------------

from __future__ import annotations

import re


# -----------------------------------------------------------------------------

MESSAGES: dict[str, str] = {
    "imagerating-ratetitle":                "Rate images",
    "imagerating-menu-title":               "Image menu",
    "imagerating-new-heading":              "New images",
    "imagerating-new-heading-param":        "New images in category $1",
    "imagerating-popular-heading":          "Popular images",
    "imagerating-popular-heading-param":    "Popular images in category $1",
    "imagerating-best-heading":             "Best images",
    "imagerating-best-heading-param":       "Best images in category $1",
    "imagerating-upload-images":            "Upload images",
    "imagerating-submitted-by":             "Submitted by",
    "imagerating-community-score":          "Community score: $1 ($2 {{PLURAL:$2|rating|ratings}})",
    "imagerating-categorytitle":            "Categories",
    "imagerating-add-categories-title":     "Add categories (comma separated)",
    "imagerating-add-button":               "Add",
    "imagerating-prev-link":                "prev",
    "imagerating-next-link":                "next",
    "imagerating-empty":                    "No images have been rated yet. Upload some images and start rating!",
    "imagerating-edit-summary":             "Adding categories via Special:ImageRating",
    # Hook for wikis that decorate category names (e.g. "Images of $1").
    "imagerating-category":                 "$1",
    "imagerating-permission-error":         "You do not have permission to rate images.",
    "imagerating-blocked-error":            "Your account is blocked from editing.",
    "apierror-noedit":                      "You don't have permission to edit this page.",
    "apierror-missingparam":                "The \"$1\" parameter must be set.",
    "apierror-badtoken":                    "Invalid CSRF token.",
    "apierror-nosuchpageid":                "There is no page with ID $1.",
    "apierror-permissiondenied":            "You don't have permission to $1.",
    "apierror-blocked":                     "You have been blocked from editing.",
    "apierror-readonly":                    "The wiki is currently in read-only mode.",
}


# -----------------------------------------------------------------------------

_PLURAL_RE = re.compile(r"\{\{PLURAL:\$(\d+)\|([^|}]*)\|([^}]*)\}\}")
_PARAM_RE  = re.compile(r"\$(\d+)")


def msg(key: str, *params) -> str:
    """Return message *key* with parameters substituted.

    Unknown keys come back as ``⧼key⧽`` so a missing translation is visible
    without breaking the page.
    """
    text = MESSAGES.get(key)
    if text is None:
        return f"⧼{key}⧽"

    def _plural(m: re.Match) -> str:
        idx = int(m.group(1)) - 1
        try:
            value = float(params[idx])
        except (IndexError, TypeError, ValueError):
            value = 0
        return m.group(2) if value == 1 else m.group(3)

    def _param(m: re.Match) -> str:
        idx = int(m.group(1)) - 1
        return str(params[idx]) if 0 <= idx < len(params) else m.group(0)

    text = _PLURAL_RE.sub(_plural, text)
    return _PARAM_RE.sub(_param, text)


# -----------------------------------------------------------------------------
