from __future__ import annotations

import pytest
from sqlalchemy import create_engine, func, select
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import roastr.init_db
from roastr.core.errors import TransportError
from roastr.db import session as db_session_module
from roastr.init_db import DEFAULT_TAGS, init_db, seed_tags
from roastr.models import Tag as TagModel
from roastr.services import TagCatalog


@pytest.mark.asyncio
async def test_catalog_loads_tags_ordered_by_name(backend, tags):
    catalog = TagCatalog(backend)

    loaded = await catalog.load()

    assert [tag.name for tag in loaded] == sorted(name for name, _, _ in DEFAULT_TAGS)
    assert {tag.name for tag in loaded if tag.is_sensitive} == {"NSFW"}
    assert catalog.loaded is True
    assert catalog.loading is False


@pytest.mark.asyncio
async def test_catalog_is_fetched_once(backend, tags, mocker):
    listing = mocker.spy(backend, "list_tags")
    catalog = TagCatalog(backend)

    await catalog.load()
    await catalog.load()

    assert listing.call_count == 1


@pytest.mark.asyncio
async def test_failed_load_leaves_catalog_empty(backend, tags, mocker):
    mocker.patch.object(backend, "list_tags", side_effect=TransportError("down"))
    catalog = TagCatalog(backend)

    assert await catalog.load() == ()
    assert catalog.loaded is False
    assert catalog.loading is False


@pytest.mark.asyncio
async def test_failed_load_can_be_retried(backend, tags, mocker):
    mocker.patch.object(
        backend,
        "list_tags",
        side_effect=[TransportError("down"), list(tags.values())],
    )
    catalog = TagCatalog(backend)

    await catalog.load()
    reloaded = await catalog.load()

    assert len(reloaded) == len(DEFAULT_TAGS)


@pytest.mark.asyncio
async def test_resolve_drops_unknown_names(backend, tags):
    catalog = TagCatalog(backend)
    await catalog.load()

    resolved = catalog.resolve(["Roast", "Haiku", "NSFW"])

    assert [tag.name for tag in resolved] == ["NSFW", "Roast"]


def test_seed_tags_is_idempotent(db_session):
    assert seed_tags(db_session) == len(DEFAULT_TAGS)
    assert seed_tags(db_session) == 0


def test_init_db_creates_tables_and_seeds_once(monkeypatch):
    fresh = create_engine("sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool)
    factory = sessionmaker(autocommit=False, autoflush=False, bind=fresh)
    monkeypatch.setattr(db_session_module, "engine", fresh)
    monkeypatch.setattr(roastr.init_db, "SessionLocal", factory)

    init_db()
    init_db()

    with factory() as db:
        assert db.scalar(select(func.count()).select_from(TagModel)) == len(DEFAULT_TAGS)
    fresh.dispose()
