#!/usr/bin/env python
#
#
# -----------------------------------------------------------------------------
"""
Extension-tag expansion
=======================
Finds ``<name attr="value" />`` and ``<name ...>body</name>`` tags for every
registered hook and replaces them with the hook's HTML.  Everything else in
the text is left for the host renderer.

A hook is ``async def hook(body, args, parser) -> str`` where *body* is the
text between the tags (``None`` for a self-closing tag), *args* the
attributes, and *parser* the ``Parser`` for this render.
"""
# -----------------------------------------------------------------------------

from __future__ import annotations

import re
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Any, Optional

from sqlalchemy.ext.asyncio import AsyncSession


# -----------------------------------------------------------------------------

@dataclass
class ParserOutput:
    """Script and style modules the rendered page needs."""
    modules: set[str] = field(default_factory=set)
    module_styles: set[str] = field(default_factory=set)

    def add_modules(self, *names: str) -> None:
        self.modules.update(names)

    def add_module_styles(self, *names: str) -> None:
        self.module_styles.update(names)


@dataclass
class Parser:
    db: AsyncSession
    user: Optional[Any] = None
    output: ParserOutput = field(default_factory=ParserOutput)


TagHook = Callable[[Optional[str], dict[str, str], Parser], Awaitable[str]]

_hooks: dict[str, TagHook] = {}


# -----------------------------------------------------------------------------

def set_hook(name: str, hook: TagHook) -> None:
    _hooks[name.lower()] = hook


# -----------------------------------------------------------------------------

_ATTR_RE = re.compile(r"""([\w-]+)\s*=\s*(?:"([^"]*)"|'([^']*)'|([^\s"'>/]+))""")


def parse_attributes(text: str) -> dict[str, str]:
    args: dict[str, str] = {}
    for m in _ATTR_RE.finditer(text or ""):
        value = next((g for g in m.groups()[1:] if g is not None), "")
        args[m.group(1).lower()] = value
    return args


def _tag_re(name: str) -> re.Pattern:
    n = re.escape(name)
    return re.compile(
        rf"<{n}(\s[^>]*?)?(?:/>|>(.*?)</{n}\s*>)",
        re.IGNORECASE | re.DOTALL,
    )


# -----------------------------------------------------------------------------

async def expand_tags(text: str, parser: Parser) -> str:
    """Replace every registered extension tag in *text* with its output."""
    for name, hook in _hooks.items():
        pattern = _tag_re(name)
        parts: list[str] = []
        pos = 0
        for m in pattern.finditer(text):
            parts.append(text[pos:m.start()])
            parts.append(await hook(m.group(2), parse_attributes(m.group(1) or ""), parser))
            pos = m.end()
        if parts:
            parts.append(text[pos:])
            text = "".join(parts)
    return text


# -----------------------------------------------------------------------------
