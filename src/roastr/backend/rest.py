"""REST client for a PostgREST-compatible managed backend.

The hosted Roastr database exposes its tables under ``/rest/v1/<table>`` and
the vote aggregate under ``/rest/v1/rpc/get_vote_counts``, following the
PostgREST conventions used by Supabase:

- filters are query parameters such as ``post_id=eq.<id>``
- ``Prefer: return=representation`` makes inserts echo the stored rows
- ``Prefer: resolution=merge-duplicates`` together with ``on_conflict``
  turns an insert into an upsert
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Iterator, Mapping, Sequence
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any

import httpx

from roastr.core.errors import TransportError
from roastr.core.settings import settings
from roastr.schemas import PostRecord, PostStatus, PostTagLink, Profile, Tag, VoteTally, VoteType

__all__ = ["RestBackend", "RestConfig", "load_rest_config"]

logger = logging.getLogger(__name__)

HTTP_BAD_REQUEST = 400

POST_SELECT = "*,post_tags(tags(id,name,emoji,is_sensitive))"


@dataclass(frozen=True)
class RestConfig:
    """Immutable configuration for the REST backend."""

    base_url: str
    api_key: str | None
    timeout_seconds: float | None


def load_rest_config() -> RestConfig:
    """Build configuration object from global settings."""
    if not settings.backend_url:
        raise TransportError("BACKEND_URL must be set to use the REST backend")
    return RestConfig(
        base_url=settings.backend_url.rstrip("/"),
        api_key=settings.backend_api_key,
        timeout_seconds=settings.backend_http_timeout_seconds,
    )


def _eq(value: str) -> str:
    return f"eq.{value}"


@contextmanager
def _parsing(what: str) -> Iterator[None]:
    """Report rows of an unexpected shape as a transport failure."""
    try:
        yield
    except (AttributeError, KeyError, IndexError, TypeError, ValueError) as exc:
        logger.warning("Malformed %s from backend: %s", what, exc)
        raise TransportError(f"Malformed {what} from backend: {exc}") from exc


def _to_record(row: Mapping[str, Any]) -> PostRecord:
    tags = [
        Tag.model_validate(link["tags"])
        for link in row.get("post_tags") or []
        if link.get("tags")
    ]
    return PostRecord(
        id=str(row["id"]),
        content=row.get("content") or "",
        created_at=row["created_at"],
        author_id=row.get("user_id"),
        is_anonymous=bool(row.get("is_anonymous")),
        status=PostStatus(row.get("status") or PostStatus.VISIBLE.value),
        tags=tags,
    )


class RestBackend:
    """HTTP client wrapper for the managed Roastr backend."""

    def __init__(
        self,
        config: RestConfig | None = None,
        *,
        access_token: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.config = config or load_rest_config()
        self._access_token = access_token
        self._transport = transport
        self._client: httpx.AsyncClient | None = None
        self._client_lock = asyncio.Lock()

    async def _ensure_client(self) -> httpx.AsyncClient:
        async with self._client_lock:
            if self._client is None:
                self._client = httpx.AsyncClient(
                    base_url=self.config.base_url,
                    timeout=httpx.Timeout(self.config.timeout_seconds),
                    transport=self._transport,
                )
        return self._client

    def _build_headers(self, prefer: str | None = None) -> dict[str, str]:
        headers: dict[str, str] = {}
        if self.config.api_key:
            headers["apikey"] = self.config.api_key
        bearer = self._access_token or self.config.api_key
        if bearer:
            headers["Authorization"] = f"Bearer {bearer}"
        if prefer:
            headers["Prefer"] = prefer
        return headers

    async def _request(
        self,
        method: str,
        path: str,
        *,
        params: Mapping[str, str] | None = None,
        json_data: Any | None = None,
        prefer: str | None = None,
    ) -> Any:
        client = await self._ensure_client()
        started = time.monotonic()
        try:
            response = await client.request(
                method,
                path,
                params=params,
                json=json_data,
                headers=self._build_headers(prefer),
            )
        except httpx.HTTPError as exc:
            logger.warning("Backend %s %s failed: %s", method, path, exc)
            raise TransportError(f"Backend request failed: {exc}") from exc

        logger.debug(
            "Backend %s %s -> %d in %.3fs",
            method,
            path,
            response.status_code,
            time.monotonic() - started,
        )
        if response.status_code >= HTTP_BAD_REQUEST:
            raise TransportError(
                f"Backend responded with {response.status_code} for {method} {path}"
            )
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as exc:
            logger.warning("Backend %s %s returned a non-JSON body", method, path)
            raise TransportError(f"Backend returned invalid JSON for {method} {path}") from exc

    async def _select_rows(self, table: str, params: Mapping[str, str]) -> list[dict[str, Any]]:
        rows = await self._request("GET", f"/rest/v1/{table}", params=params)
        if rows is not None and not isinstance(rows, list):
            raise TransportError(f"Backend returned a non-list body for {table}")
        return rows or []

    async def list_visible_posts(self) -> list[PostRecord]:
        rows = await self._select_rows(
            "posts",
            {
                "select": POST_SELECT,
                "status": _eq(PostStatus.VISIBLE.value),
                "order": "created_at.desc",
            },
        )
        with _parsing("posts"):
            return [_to_record(row) for row in rows]

    async def list_saved_posts(self, user_id: str) -> list[PostRecord]:
        rows = await self._select_rows(
            "saved_posts",
            {
                "select": f"created_at,posts({POST_SELECT})",
                "user_id": _eq(user_id),
                "order": "created_at.desc",
            },
        )
        with _parsing("saved posts"):
            posts = [row["posts"] for row in rows if row.get("posts")]
            return [
                _to_record(post)
                for post in posts
                if (post.get("status") or PostStatus.VISIBLE.value) == PostStatus.VISIBLE.value
            ]

    async def get_vote_tally(self, post_id: str) -> VoteTally | None:
        payload = await self._request(
            "POST",
            "/rest/v1/rpc/get_vote_counts",
            json_data={"post_uuid": post_id},
        )
        if isinstance(payload, list):
            payload = payload[0] if payload else None
        if not payload:
            return None
        with _parsing("vote tally"):
            return VoteTally(
                upvotes=int(payload.get("upvotes") or 0),
                downvotes=int(payload.get("downvotes") or 0),
            )

    async def get_user_vote(self, post_id: str, user_id: str) -> VoteType | None:
        rows = await self._select_rows(
            "votes",
            {"select": "vote_type", "post_id": _eq(post_id), "user_id": _eq(user_id)},
        )
        if not rows:
            return None
        with _parsing("vote"):
            return VoteType(rows[0]["vote_type"])

    async def get_save_status(self, post_id: str, user_id: str) -> bool:
        rows = await self._select_rows(
            "saved_posts",
            {"select": "post_id", "post_id": _eq(post_id), "user_id": _eq(user_id)},
        )
        return bool(rows)

    async def get_profile(self, user_id: str) -> Profile | None:
        rows = await self._select_rows("profiles", {"select": "id,username", "id": _eq(user_id)})
        if not rows:
            return None
        with _parsing("profile"):
            return Profile(user_id=str(rows[0]["id"]), username=rows[0]["username"])

    async def insert_post(
        self,
        *,
        content: str,
        author_id: str | None,
        is_anonymous: bool,
    ) -> PostRecord:
        rows = await self._request(
            "POST",
            "/rest/v1/posts",
            json_data={"content": content, "user_id": author_id, "is_anonymous": is_anonymous},
            prefer="return=representation",
        )
        if not rows:
            raise TransportError("Backend did not return the inserted post")
        with _parsing("inserted post"):
            return _to_record(rows[0])

    async def insert_post_tags(self, links: Sequence[PostTagLink]) -> None:
        if not links:
            return
        await self._request(
            "POST",
            "/rest/v1/post_tags",
            json_data=[link.model_dump() for link in links],
            prefer="return=minimal",
        )

    async def update_post_status(
        self,
        post_id: str,
        status: PostStatus,
        *,
        author_id: str | None = None,
    ) -> bool:
        params = {"id": _eq(post_id)}
        if author_id is not None:
            params["user_id"] = _eq(author_id)
        rows = await self._request(
            "PATCH",
            "/rest/v1/posts",
            params=params,
            json_data={"status": status.value},
            prefer="return=representation",
        )
        return bool(rows)

    async def upsert_vote(self, post_id: str, user_id: str, vote_type: VoteType) -> None:
        await self._request(
            "POST",
            "/rest/v1/votes",
            params={"on_conflict": "post_id,user_id"},
            json_data={
                "post_id": post_id,
                "user_id": user_id,
                "vote_type": vote_type.value,
                "is_anonymous": False,
            },
            prefer="resolution=merge-duplicates,return=minimal",
        )

    async def delete_vote(self, post_id: str, user_id: str) -> None:
        await self._request(
            "DELETE",
            "/rest/v1/votes",
            params={"post_id": _eq(post_id), "user_id": _eq(user_id)},
        )

    async def upsert_save(self, post_id: str, user_id: str) -> None:
        await self._request(
            "POST",
            "/rest/v1/saved_posts",
            params={"on_conflict": "post_id,user_id"},
            json_data={"post_id": post_id, "user_id": user_id},
            prefer="resolution=merge-duplicates,return=minimal",
        )

    async def delete_save(self, post_id: str, user_id: str) -> None:
        await self._request(
            "DELETE",
            "/rest/v1/saved_posts",
            params={"post_id": _eq(post_id), "user_id": _eq(user_id)},
        )

    async def insert_report(
        self,
        *,
        post_id: str,
        user_id: str | None,
        anonymous_marker: str | None,
    ) -> None:
        await self._request(
            "POST",
            "/rest/v1/reports",
            json_data={"post_id": post_id, "user_id": user_id, "ip_hash": anonymous_marker},
            prefer="return=minimal",
        )

    async def list_tags(self) -> list[Tag]:
        rows = await self._select_rows("tags", {"select": "*", "order": "name.asc"})
        with _parsing("tags"):
            return [Tag.model_validate(row) for row in rows]

    async def upsert_profile(self, user_id: str, username: str) -> Profile:
        await self._request(
            "POST",
            "/rest/v1/profiles",
            params={"on_conflict": "id"},
            json_data={"id": user_id, "username": username},
            prefer="resolution=merge-duplicates,return=minimal",
        )
        return Profile(user_id=user_id, username=username)

    async def close(self) -> None:
        """Clean up underlying HTTP client resources."""
        async with self._client_lock:
            if self._client is not None:
                await self._client.aclose()
                self._client = None
