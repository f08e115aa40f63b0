"""Tag catalog loaded once per session."""

from __future__ import annotations

import logging
from collections.abc import Iterable

from roastr.backend.base import RoastrBackend
from roastr.core.errors import TransportError
from roastr.schemas import Tag

__all__ = ["TagCatalog"]

logger = logging.getLogger(__name__)


class TagCatalog:
    """Read-only view of the available tags."""

    def __init__(self, backend: RoastrBackend) -> None:
        self._backend = backend
        self._tags: tuple[Tag, ...] = ()
        self._loaded = False
        self.loading = False

    @property
    def tags(self) -> tuple[Tag, ...]:
        return self._tags

    @property
    def loaded(self) -> bool:
        return self._loaded

    async def load(self) -> tuple[Tag, ...]:
        """Fetch the catalog ordered by name; later calls reuse the first result.

        Transport failures are logged and leave the catalog empty.
        """
        if self._loaded:
            return self._tags

        self.loading = True
        try:
            self._tags = tuple(await self._backend.list_tags())
            self._loaded = True
        except TransportError as exc:
            logger.error("Error fetching tags: %s", exc, exc_info=True)
        finally:
            self.loading = False
        return self._tags

    def resolve(self, names: Iterable[str]) -> list[Tag]:
        """Return catalog tags matching ``names``; unknown names are dropped."""
        wanted = set(names)
        return [tag for tag in self._tags if tag.name in wanted]
