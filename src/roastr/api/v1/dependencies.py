"""Shared API dependencies for viewer identity and per-request services."""

from collections.abc import Callable
from typing import Annotated, TypeVar

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from roastr.backend import RoastrBackend, get_backend
from roastr.core.errors import UnauthenticatedError
from roastr.schemas import Viewer
from roastr.services import (
    CollectingNotifier,
    FeedCache,
    RoastrClient,
    StaticIdentity,
    TagCatalog,
    viewer_from_token,
)

# Anonymous visitors are allowed, so a missing header is not an error.
bearer_scheme = HTTPBearer(auto_error=False)

T = TypeVar("T")


def get_backend_dep() -> RoastrBackend:
    """Return the shared backend."""
    return get_backend()


BackendDep = Annotated[RoastrBackend, Depends(get_backend_dep)]


def _app_scoped(
    request: Request,
    name: str,
    backend: RoastrBackend,
    factory: Callable[[RoastrBackend], T],
) -> T:
    """Return an object stored on the app, rebuilt whenever the backend changes."""
    current = getattr(request.app.state, name, None)
    if current is None or current[0] is not backend:
        current = (backend, factory(backend))
        setattr(request.app.state, name, current)
    return current[1]


def get_feed_cache(request: Request, backend: BackendDep) -> FeedCache:
    """Return the feed cache shared by every request."""
    return _app_scoped(request, "feed_cache", backend, FeedCache)


def get_tag_catalog(request: Request, backend: BackendDep) -> TagCatalog:
    """Return the tag catalog shared by every request."""
    return _app_scoped(request, "tag_catalog", backend, TagCatalog)


def get_notifier(request: Request) -> CollectingNotifier:
    """Return the notifier collecting messages for this request."""
    notifier = getattr(request.state, "notifier", None)
    if notifier is None:
        notifier = CollectingNotifier()
        request.state.notifier = notifier
    return notifier


def get_viewer(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
) -> Viewer | None:
    """Return the viewer named by the bearer token, or None for visitors.

    Raises:
        HTTPException: If a token is present but invalid.
    """
    if credentials is None:
        return None
    try:
        return viewer_from_token(credentials.credentials)
    except UnauthenticatedError as err:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
        ) from err


ViewerDep = Annotated[Viewer | None, Depends(get_viewer)]
NotifierDep = Annotated[CollectingNotifier, Depends(get_notifier)]


def get_client(
    backend: BackendDep,
    viewer: ViewerDep,
    notifier: NotifierDep,
    feeds: Annotated[FeedCache, Depends(get_feed_cache)],
    catalog: Annotated[TagCatalog, Depends(get_tag_catalog)],
) -> RoastrClient:
    """Return a client acting for the request's viewer."""
    return RoastrClient(
        backend,
        identity=StaticIdentity(viewer),
        notifier=notifier,
        feeds=feeds,
        catalog=catalog,
    )


ClientDep = Annotated[RoastrClient, Depends(get_client)]
