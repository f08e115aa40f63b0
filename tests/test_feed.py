from __future__ import annotations

import asyncio
from datetime import UTC, datetime
from unittest.mock import AsyncMock

import httpx
import pytest

from roastr.backend import RestBackend, RestConfig
from roastr.core.errors import TransportError
from roastr.models import POST_STATUS_DELETED
from roastr.schemas import PostRecord, VoteTally, VoteType
from roastr.services import (
    ANONYMOUS_USERNAME,
    UNKNOWN_USERNAME,
    CollectingNotifier,
    FeedCache,
    Messages,
    PostFeed,
    aggregate_feed,
)


def _record(post_id: str) -> PostRecord:
    return PostRecord(
        id=post_id,
        content=f"roast {post_id}",
        created_at=datetime(2024, 1, 1, tzinfo=UTC),
        is_anonymous=True,
    )


@pytest.fixture
def mock_backend() -> AsyncMock:
    backend = AsyncMock()
    backend.list_visible_posts.return_value = [_record("p1")]
    backend.get_vote_tally.return_value = VoteTally(upvotes=1, downvotes=0)
    backend.get_user_vote.return_value = None
    backend.get_save_status.return_value = False
    backend.get_profile.return_value = None
    return backend


@pytest.mark.asyncio
async def test_feed_lists_visible_posts_newest_first(backend, tags, seed_post):
    older = seed_post("older roast")
    newer = seed_post("newer roast")
    seed_post("gone", status=POST_STATUS_DELETED)

    items = await aggregate_feed(backend, None)

    assert [item.id for item in items] == [newer, older]


@pytest.mark.asyncio
async def test_nsfw_follows_sensitive_tags(backend, tags, seed_post):
    safe = seed_post("clean", tag_names=["Joke", "Roast"])
    spicy = seed_post("spicy", tag_names=["Joke", "NSFW"])

    items = {item.id: item for item in await aggregate_feed(backend, None)}

    assert items[safe].is_nsfw is False
    assert items[spicy].is_nsfw is True
    assert [tag.name for tag in items[spicy].tags] == ["Joke", "NSFW"]


@pytest.mark.asyncio
async def test_usernames_fall_back_for_anonymous_and_missing_profiles(
    backend, tags, seed_post, viewer, other_viewer
):
    await backend.upsert_profile(viewer.id, "grillmaster")
    named = seed_post("named", user_id=viewer.id)
    hidden = seed_post("hidden", user_id=viewer.id, is_anonymous=True)
    orphan = seed_post("orphan", user_id=other_viewer.id)
    nobody = seed_post("nobody")

    items = {item.id: item for item in await aggregate_feed(backend, None)}

    assert items[named].username == "grillmaster"
    assert items[hidden].username == ANONYMOUS_USERNAME
    assert items[orphan].username == UNKNOWN_USERNAME
    assert items[nobody].username == ANONYMOUS_USERNAME


@pytest.mark.asyncio
async def test_feed_items_are_viewer_scoped(backend, tags, seed_post, viewer, other_viewer):
    post_id = seed_post("vote magnet")
    await backend.upsert_vote(post_id, viewer.id, VoteType.UPVOTE)
    await backend.upsert_vote(post_id, other_viewer.id, VoteType.DOWNVOTE)
    await backend.upsert_save(post_id, viewer.id)

    [mine] = await aggregate_feed(backend, viewer)
    [visitor] = await aggregate_feed(backend, None)

    assert (mine.upvotes, mine.downvotes) == (1, 1)
    assert mine.user_vote == VoteType.UPVOTE
    assert mine.is_saved is True
    assert visitor.user_vote is None
    assert visitor.is_saved is False


@pytest.mark.asyncio
async def test_missing_tally_counts_as_zero(mock_backend):
    mock_backend.get_vote_tally.return_value = None

    [item] = await aggregate_feed(mock_backend, None)

    assert (item.upvotes, item.downvotes) == (0, 0)
    mock_backend.get_user_vote.assert_not_called()
    mock_backend.get_save_status.assert_not_called()


@pytest.mark.asyncio
async def test_failed_refresh_keeps_previous_items_and_notifies_once(mock_backend):
    feed = PostFeed(mock_backend, None)
    notifier = CollectingNotifier()
    await feed.refresh(notifier)

    mock_backend.list_visible_posts.side_effect = TransportError("backend down")
    result = await feed.refresh(notifier)

    assert [item.id for item in result] == ["p1"]
    assert [item.id for item in feed.items] == ["p1"]
    assert notifier.messages == [Messages.FEED_LOAD_FAILED]
    assert feed.loading is False


@pytest.mark.asyncio
async def test_failed_per_post_lookup_fails_the_whole_refresh(mock_backend):
    feed = PostFeed(mock_backend, None)
    notifier = CollectingNotifier()
    mock_backend.get_vote_tally.side_effect = TransportError("rpc failed")

    result = await feed.refresh(notifier)

    assert result == []
    assert notifier.messages == [Messages.FEED_LOAD_FAILED]


@pytest.mark.asyncio
async def test_superseded_refresh_is_discarded(mock_backend):
    release = asyncio.Event()
    calls = 0

    async def list_posts():
        nonlocal calls
        calls += 1
        if calls == 1:
            await release.wait()
            return [_record("stale")]
        return [_record("fresh")]

    mock_backend.list_visible_posts.side_effect = list_posts
    feed = PostFeed(mock_backend, None)
    notifier = CollectingNotifier()

    slow = asyncio.create_task(feed.refresh(notifier))
    await asyncio.sleep(0)
    await feed.refresh(notifier)
    release.set()
    await slow

    assert [item.id for item in feed.items] == ["fresh"]
    assert feed.generation == 2


@pytest.mark.asyncio
async def test_superseded_failure_is_not_notified(mock_backend):
    release = asyncio.Event()
    calls = 0

    async def list_posts():
        nonlocal calls
        calls += 1
        if calls == 1:
            await release.wait()
            raise TransportError("late failure")
        return [_record("fresh")]

    mock_backend.list_visible_posts.side_effect = list_posts
    feed = PostFeed(mock_backend, None)
    notifier = CollectingNotifier()

    slow = asyncio.create_task(feed.refresh(notifier))
    await asyncio.sleep(0)
    await feed.refresh(notifier)
    release.set()
    await slow

    assert [item.id for item in feed.items] == ["fresh"]
    assert notifier.messages == []


@pytest.mark.asyncio
async def test_cache_reuses_fresh_feed_until_invalidated(mock_backend, viewer):
    cache = FeedCache(mock_backend)
    notifier = CollectingNotifier()

    await cache.load(viewer, notifier)
    await cache.load(viewer, notifier)
    assert mock_backend.list_visible_posts.await_count == 1

    cache.invalidate()
    await cache.load(viewer, notifier)
    assert mock_backend.list_visible_posts.await_count == 2

    await cache.load(viewer, notifier, force=True)
    assert mock_backend.list_visible_posts.await_count == 3


@pytest.mark.asyncio
async def test_cache_keeps_one_feed_per_viewer(mock_backend, viewer, other_viewer):
    cache = FeedCache(mock_backend, max_viewers=2)

    assert cache.feed_for(viewer) is cache.feed_for(viewer)
    assert cache.feed_for(None) is not cache.feed_for(viewer)

    cache.feed_for(other_viewer)
    assert len(cache) == 2
    assert cache.key_for(None) is None
    assert cache.key_for(viewer) == viewer.id


@pytest.mark.asyncio
async def test_unreadable_backend_body_keeps_feed_and_notifies(mock_backend):
    feed = PostFeed(mock_backend, None)
    notifier = CollectingNotifier()
    await feed.refresh(notifier)

    gateway_page = httpx.MockTransport(
        lambda request: httpx.Response(200, text="<html>gateway</html>", headers={"content-type": "text/html"})
    )
    rest = RestBackend(
        RestConfig(base_url="https://roastr.example.test", api_key=None, timeout_seconds=None),
        transport=gateway_page,
    )
    feed._backend = rest
    result = await feed.refresh(notifier)
    await rest.close()

    assert [item.id for item in result] == ["p1"]
    assert feed.loading is False
    assert notifier.messages == [Messages.FEED_LOAD_FAILED]
