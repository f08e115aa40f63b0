"""Viewer identity capability.

Session management lives with the identity provider; the front-end only
asks who the current viewer is and can ask for the session to end.
"""

from __future__ import annotations

import logging
from typing import Protocol

from jose import JWTError, jwt

from roastr.core.errors import UnauthenticatedError
from roastr.core.settings import settings
from roastr.schemas import Viewer

__all__ = ["IdentityProvider", "StaticIdentity", "viewer_from_token"]

logger = logging.getLogger(__name__)


class IdentityProvider(Protocol):
    """Opaque source of the current viewer."""

    def current_viewer(self) -> Viewer | None:
        ...

    async def sign_out(self) -> None:
        ...


class StaticIdentity:
    """In-process identity holding at most one viewer."""

    def __init__(self, viewer: Viewer | None = None) -> None:
        self._viewer = viewer

    def current_viewer(self) -> Viewer | None:
        return self._viewer

    def sign_in(self, viewer: Viewer) -> None:
        self._viewer = viewer

    async def sign_out(self) -> None:
        self._viewer = None


def viewer_from_token(token: str) -> Viewer:
    """Decode a viewer access token.

    Args:
        token: HS256 JWT issued by the identity provider; ``sub`` carries the
            viewer id and ``email`` the address.

    Returns:
        The viewer described by the token.

    Raises:
        UnauthenticatedError: If the token is invalid or has no subject.
    """
    options = {"verify_aud": settings.jwt_audience is not None}
    try:
        payload = jwt.decode(
            token,
            settings.secret_key,
            algorithms=[settings.jwt_algorithm],
            audience=settings.jwt_audience,
            options=options,
        )
    except JWTError as err:
        logger.info("Rejected viewer token: %s", err)
        raise UnauthenticatedError("Could not validate credentials") from err

    subject = payload.get("sub")
    if not subject:
        raise UnauthenticatedError("Could not validate credentials")
    return Viewer(id=str(subject), email=payload.get("email"))
