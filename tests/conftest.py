#!/usr/bin/env python
#
#
# -----------------------------------------------------------------------------
"""
Pytest fixtures for ImageRating tests.
Uses an in-memory SQLite database and the in-process object cache so no
external services are needed.
"""
# -----------------------------------------------------------------------------

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Iterable, Optional

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from imagerating.core.cache import HashObjectCache, set_cache
from imagerating.core.database import Base, get_db
from imagerating.core.security import create_access_token
from imagerating.main import create_app
from imagerating.models import CategoryLink, Image, Namespace, Page, PageVersion, User, Vote
from imagerating.services.pages import extract_categories
from imagerating.services.titles import slugify


# -----------------------------------------------------------------------------

TEST_DB_URL = "sqlite+aiosqlite:///:memory:"

# Far enough in the past that the edit debounce never applies.
LONG_AGO = timedelta(hours=1)


# -----------------------------------------------------------------------------

@pytest.fixture(autouse=True)
def object_cache():
    """A fresh, empty object cache for every test."""
    cache = HashObjectCache("test")
    set_cache(cache)
    yield cache
    set_cache(None)


@pytest_asyncio.fixture(scope="function")
async def db_engine():
    engine = create_async_engine(
        TEST_DB_URL,
        echo=False,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def db_session_factory(db_engine):
    """Shared sessionmaker — both client and db_session use this."""
    return async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture(scope="function")
async def db_session(db_session_factory):
    """Direct DB session for test setup (users, images, votes)."""
    async with db_session_factory() as session:
        yield session


@pytest_asyncio.fixture(scope="function")
async def client(db_engine, db_session_factory):
    """HTTP test client wired to an isolated in-memory DB."""
    async def override_get_db():
        async with db_session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app = create_app()
    app.dependency_overrides[get_db] = override_get_db

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac


# -----------------------------------------------------------------------------
# Helper functions for tests
# -----------------------------------------------------------------------------

async def make_user(db: AsyncSession, username: str = "rater",
                    is_admin: bool = False, is_active: bool = True) -> User:
    user = User(username=username, display_name=username.title(),
                is_admin=is_admin, is_active=is_active)
    db.add(user)
    await db.commit()
    return user


def auth_headers(user: User) -> dict:
    return {"Authorization": f"Bearer {create_access_token(user.id)}"}


# -----------------------------------------------------------------------------

async def get_namespace(db: AsyncSession, name: str) -> Namespace:
    result = await db.execute(select(Namespace).where(Namespace.name == name))
    ns = result.scalar_one_or_none()
    if ns is None:
        ns = Namespace(name=name)
        db.add(ns)
        await db.flush()
    return ns


async def make_image(
    db: AsyncSession,
    title: str,
    *,
    votes: Iterable[int] = (),
    text: str = "",
    uploader: Optional[User] = None,
    uploaded: Optional[datetime] = None,
    edited: Optional[datetime] = None,
    width: int = 800,
    height: int = 600,
    media_type: str = "BITMAP",
) -> Page:
    """Create a File page with its file record, one saved version and votes."""
    now = datetime.now(tz=timezone.utc)
    edited = edited or now - LONG_AGO

    ns = await get_namespace(db, "File")
    page = Page(namespace_id=ns.id, title=title, slug=slugify(title), created_at=edited)
    db.add(page)
    await db.flush()

    db.add(PageVersion(page_id=page.id, version=1, content=text, created_at=edited))
    for key in extract_categories(text):
        db.add(CategoryLink(page_id=page.id, category=key))

    db.add(Image(
        name=title,
        url=f"/images/{title}",
        width=width,
        height=height,
        media_type=media_type,
        user_id=uploader.id if uploader else None,
        user_text=uploader.username if uploader else "Uploader",
        timestamp=uploaded or now - timedelta(days=1),
    ))
    for value in votes:
        db.add(Vote(page_id=page.id, value=value))

    await db.commit()
    return page


# -----------------------------------------------------------------------------
