# tests/conftest.py
from __future__ import annotations

import os
from collections.abc import Callable, Iterable, Iterator
from datetime import UTC, datetime, timedelta
from itertools import count

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from jose import jwt
from sqlalchemy import create_engine, select
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

os.environ.setdefault("SECRET_KEY", "roastr-test-secret")
os.environ.setdefault("DATABASE_URL", "sqlite://")

from roastr.api.v1.dependencies import get_backend_dep
from roastr.backend import SqlBackend
from roastr.core.settings import settings
from roastr.db.session import Base
from roastr.init_db import seed_tags
from roastr.main import app as fastapi_app
from roastr.models import POST_STATUS_VISIBLE, Post
from roastr.models import Tag as TagModel
from roastr.schemas import Tag, Viewer
from roastr.services import CollectingNotifier, RoastrClient, StaticIdentity

TEST_DB_URL = "sqlite://"

_POST_ORDER_COUNTER = count(1)
_BASE_TIME = datetime(2024, 1, 1, tzinfo=UTC)


@pytest.fixture(scope="session")
def engine() -> Iterator[Engine]:
    engine = create_engine(
        TEST_DB_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture()
def session_factory(engine: Engine) -> Iterator[sessionmaker[Session]]:
    factory = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)
    try:
        yield factory
    finally:
        # Ensure each test sees a clean database even if commits occurred.
        with engine.begin() as cleanup_conn:
            for table in reversed(Base.metadata.sorted_tables):
                cleanup_conn.execute(table.delete())


@pytest.fixture()
def db_session(session_factory: sessionmaker[Session]) -> Iterator[Session]:
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def backend(session_factory: sessionmaker[Session]) -> SqlBackend:
    return SqlBackend(session_factory)


@pytest.fixture()
def tags(db_session: Session) -> dict[str, Tag]:
    """Seed the default tag catalog and return it keyed by name."""
    seed_tags(db_session)
    rows = db_session.scalars(select(TagModel).order_by(TagModel.name))
    return {row.name: Tag.model_validate(row) for row in rows}


@pytest.fixture()
def seed_post(session_factory: sessionmaker[Session]) -> Callable[..., str]:
    """Return a helper inserting a post directly and returning its id.

    Posts get strictly increasing timestamps unless ``created_at`` is given.
    """

    def _seed(
        content: str,
        *,
        tag_names: Iterable[str] = ("Roast",),
        user_id: str | None = None,
        is_anonymous: bool = False,
        status: str = POST_STATUS_VISIBLE,
        created_at: datetime | None = None,
    ) -> str:
        with session_factory() as db:
            post_tags = list(db.scalars(select(TagModel).where(TagModel.name.in_(list(tag_names)))))
            post = Post(
                content=content,
                user_id=user_id,
                is_anonymous=is_anonymous,
                status=status,
                created_at=created_at or _BASE_TIME + timedelta(minutes=next(_POST_ORDER_COUNTER)),
                tags=post_tags,
            )
            db.add(post)
            db.commit()
            return post.id

    return _seed


@pytest.fixture()
def viewer() -> Viewer:
    return Viewer(id="3f1c0f4e-0000-4000-8000-000000000001", email="roaster@example.com")


@pytest.fixture()
def other_viewer() -> Viewer:
    return Viewer(id="3f1c0f4e-0000-4000-8000-000000000002", email="heckler@example.com")


@pytest.fixture()
def notifier() -> CollectingNotifier:
    return CollectingNotifier()


@pytest.fixture()
def make_client(backend: SqlBackend) -> Callable[..., RoastrClient]:
    """Return a factory for clients acting as ``viewer`` (a visitor by default)."""

    def _make(viewer: Viewer | None = None, **kwargs) -> RoastrClient:
        return RoastrClient(backend, identity=StaticIdentity(viewer), **kwargs)

    return _make


def make_token(viewer: Viewer, **claims) -> str:
    payload = {"sub": viewer.id, "email": viewer.email, **claims}
    return jwt.encode(payload, settings.secret_key, algorithm=settings.jwt_algorithm)


@pytest.fixture()
def token_for() -> Callable[..., str]:
    return make_token


@pytest.fixture()
def auth_headers() -> Callable[[Viewer], dict[str, str]]:
    """Return a helper building bearer headers for a viewer."""

    def _headers(viewer: Viewer) -> dict[str, str]:
        return {"Authorization": f"Bearer {make_token(viewer)}"}

    return _headers


@pytest.fixture(scope="session")
def app() -> FastAPI:
    return fastapi_app


@pytest.fixture()
def client(app: FastAPI, backend: SqlBackend) -> Iterator[TestClient]:
    app.dependency_overrides[get_backend_dep] = lambda: backend
    try:
        with TestClient(app, base_url="http://test") as test_client:
            yield test_client
    finally:
        app.dependency_overrides.pop(get_backend_dep, None)
