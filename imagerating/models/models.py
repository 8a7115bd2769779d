#!/usr/bin/env python
#
#
# ----------------------------------------------------------------------------
"""
ORM mappings for the host tables ImageRating reads and writes
=============================================================

Tables
------
users           — host accounts (rights come from group membership)
namespaces      — wiki namespaces (File, Category, User, ...)
pages           — wiki pages within a namespace
page_versions   — append-only version history (one row per save)
images          — file records; ``images.name`` equals the File page title
votes           — ratings recorded by the voting extension
categorylinks   — page → category membership, refreshed on every save

Page ids are integers because the category API addresses pages by
numeric id.  Timestamps stored in UTC.
"""
# ----------------------------------------------------------------------------

from __future__ import annotations

import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    Boolean, DateTime, ForeignKey, Index, Integer,
    String, Text, UniqueConstraint, BigInteger,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from imagerating.core.database import Base


# ----------------------------------------------------------------------------

def _uuid_col(primary_key=False, nullable=False, **kw):
    """UUID column stored as String(36) — works for both SQLite and PostgreSQL."""
    return mapped_column(
        String(36),
        primary_key=primary_key,
        nullable=nullable,
        default=lambda: str(uuid.uuid4()),
        **kw,
    )


def _utcnow() -> datetime:
    return datetime.now(tz=timezone.utc)


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# users
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

class User(Base):
    __tablename__ = "users"

    id:           Mapped[str]  = _uuid_col(primary_key=True)
    username:     Mapped[str]  = mapped_column(String(64),  unique=True, nullable=False, index=True)
    display_name: Mapped[str]  = mapped_column(String(128), nullable=False, default="")
    # An inactive account is treated as blocked.
    is_active:    Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    is_admin:     Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    created_at:   Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)

    @property
    def groups(self) -> list[str]:
        groups = ["*", "user"]
        if self.is_admin:
            groups.append("sysop")
        return groups


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# namespaces
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

class Namespace(Base):
    __tablename__ = "namespaces"

    id:             Mapped[str]      = _uuid_col(primary_key=True)
    name:           Mapped[str]      = mapped_column(String(128), unique=True, nullable=False, index=True)
    description:    Mapped[str]      = mapped_column(Text, default="", nullable=False)
    default_format: Mapped[str]      = mapped_column(String(16), default="wikitext", nullable=False)
    created_at:     Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)

    pages: Mapped[list["Page"]] = relationship(back_populates="namespace")


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# pages
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

class Page(Base):
    __tablename__ = "pages"
    __table_args__ = (
        UniqueConstraint("namespace_id", "slug", name="uq_pages_ns_slug"),
    )

    id:           Mapped[int]        = mapped_column(Integer, primary_key=True, autoincrement=True)
    namespace_id: Mapped[str]        = mapped_column(String(36), ForeignKey("namespaces.id", ondelete="CASCADE"), nullable=False, index=True)
    title:        Mapped[str]        = mapped_column(String(512), nullable=False, index=True)
    slug:         Mapped[str]        = mapped_column(String(512), nullable=False, index=True)
    created_by:   Mapped[str | None] = mapped_column(String(36), ForeignKey("users.id"), nullable=True)
    created_at:   Mapped[datetime]   = mapped_column(DateTime(timezone=True), default=_utcnow)

    namespace: Mapped["Namespace"]         = relationship(back_populates="pages")
    versions:  Mapped[list["PageVersion"]] = relationship(
        back_populates="page",
        cascade="all, delete-orphan",
        order_by="PageVersion.version",
    )


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# page_versions  (append-only)
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

class PageVersion(Base):
    __tablename__ = "page_versions"
    __table_args__ = (
        UniqueConstraint("page_id", "version", name="uq_page_versions_page_ver"),
        Index("ix_page_versions_page_latest", "page_id", "version"),
    )

    id:         Mapped[str]        = _uuid_col(primary_key=True)
    page_id:    Mapped[int]        = mapped_column(Integer, ForeignKey("pages.id", ondelete="CASCADE"), nullable=False, index=True)
    version:    Mapped[int]        = mapped_column(Integer, nullable=False)
    content:    Mapped[str]        = mapped_column(Text, nullable=False, default="")
    format:     Mapped[str]        = mapped_column(String(16), nullable=False, default="wikitext")
    # Rendered HTML cached by the host; a new version starts empty
    rendered:   Mapped[str | None] = mapped_column(Text, nullable=True)
    author_id:  Mapped[str | None] = mapped_column(String(36), ForeignKey("users.id"), nullable=True)
    comment:    Mapped[str]        = mapped_column(String(512), default="", nullable=False)
    created_at: Mapped[datetime]   = mapped_column(DateTime(timezone=True), default=_utcnow)

    page: Mapped["Page"] = relationship(back_populates="versions")


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# images  (file records)
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

class Image(Base):
    __tablename__ = "images"

    id:         Mapped[str]        = _uuid_col(primary_key=True)
    name:       Mapped[str]        = mapped_column(String(255), unique=True, nullable=False, index=True)
    url:        Mapped[str]        = mapped_column(String(1024), nullable=False)
    # Zero dimensions mean the file cannot be scaled (broken upload, audio, ...)
    width:      Mapped[int]        = mapped_column(Integer, default=0, nullable=False)
    height:     Mapped[int]        = mapped_column(Integer, default=0, nullable=False)
    media_type: Mapped[str]        = mapped_column(String(32), default="BITMAP", nullable=False)
    size_bytes: Mapped[int]        = mapped_column(BigInteger, default=0, nullable=False)
    user_id:    Mapped[str | None] = mapped_column(String(36), ForeignKey("users.id"), nullable=True)
    user_text:  Mapped[str]        = mapped_column(String(255), default="", nullable=False)
    timestamp:  Mapped[datetime]   = mapped_column(DateTime(timezone=True), default=_utcnow, index=True)


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# votes  (voting extension)
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

class Vote(Base):
    __tablename__ = "votes"
    __table_args__ = (
        UniqueConstraint("page_id", "user_id", name="uq_votes_page_user"),
    )

    id:         Mapped[str]        = _uuid_col(primary_key=True)
    page_id:    Mapped[int]        = mapped_column(Integer, ForeignKey("pages.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id:    Mapped[str | None] = mapped_column(String(36), ForeignKey("users.id"), nullable=True)
    value:      Mapped[int]        = mapped_column(Integer, nullable=False)
    created_at: Mapped[datetime]   = mapped_column(DateTime(timezone=True), default=_utcnow)


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# categorylinks
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

class CategoryLink(Base):
    __tablename__ = "categorylinks"
    __table_args__ = (
        UniqueConstraint("page_id", "category", name="uq_categorylinks_page_cat"),
    )

    id:         Mapped[str]      = _uuid_col(primary_key=True)
    page_id:    Mapped[int]      = mapped_column(Integer, ForeignKey("pages.id", ondelete="CASCADE"), nullable=False, index=True)
    # DB key form: spaces stored as underscores, first letter upper-cased
    category:   Mapped[str]      = mapped_column(String(255), nullable=False, index=True)
    sortkey:    Mapped[str]      = mapped_column(String(255), default="", nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)
