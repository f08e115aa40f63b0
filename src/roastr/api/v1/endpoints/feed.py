"""Feed and library endpoints."""

from typing import Annotated

from fastapi import APIRouter, Query

from roastr.schemas import FeedResponse
from roastr.services import SortKey

from ..dependencies import ClientDep, NotifierDep

router = APIRouter(tags=["feed"])


@router.get("/feed", response_model=FeedResponse)
async def get_feed(
    client: ClientDep,
    notifier: NotifierDep,
    tag: Annotated[list[str] | None, Query(description="Keep posts with any of these tags")] = None,
    sort: SortKey = Query(SortKey.NEWEST, description="Ordering of the feed"),
    refresh: bool = Query(False, description="Re-aggregate even if the cached feed is fresh"),
) -> FeedResponse:
    """Return the viewer's feed, filtered by tag and sorted."""
    items = await client.feed(tag or (), sort, refresh=refresh)
    return FeedResponse(items=items, notifications=notifier.notifications)


@router.get("/library", response_model=FeedResponse)
async def get_library(client: ClientDep, notifier: NotifierDep) -> FeedResponse:
    """Return the posts saved by the viewer."""
    items = await client.library()
    return FeedResponse(items=items, notifications=notifier.notifications)
