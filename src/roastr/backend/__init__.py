"""Backend implementations of the Roastr data contract."""

from __future__ import annotations

from roastr.core.settings import settings

from .base import RoastrBackend
from .rest import RestBackend, RestConfig
from .sql import SqlBackend

__all__ = ["RoastrBackend", "RestBackend", "RestConfig", "SqlBackend", "get_backend", "reset_backend"]


class _BackendSingleton:
    """Process-wide backend selected by ``BACKEND_KIND``."""

    _instance: RoastrBackend | None = None

    @classmethod
    def get_instance(cls) -> RoastrBackend:
        if cls._instance is None:
            if settings.backend_kind == "rest":
                cls._instance = RestBackend()
            else:
                cls._instance = SqlBackend()
        return cls._instance

    @classmethod
    def reset(cls) -> RoastrBackend | None:
        instance, cls._instance = cls._instance, None
        return instance


def get_backend() -> RoastrBackend:
    """Return the singleton backend instance."""
    return _BackendSingleton.get_instance()


async def reset_backend() -> None:
    """Close and forget the singleton backend."""
    instance = _BackendSingleton.reset()
    if instance is not None:
        await instance.close()
