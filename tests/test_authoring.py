from __future__ import annotations

import pytest
from sqlalchemy import select

from roastr.core.errors import (
    NotPermittedError,
    TransportError,
    UnauthenticatedError,
    ValidationFailedError,
)
from roastr.models import POST_STATUS_DELETED, POST_STATUS_VISIBLE, Post
from roastr.services import (
    ANONYMOUS_USERNAME,
    CollectingNotifier,
    FeedCache,
    Messages,
    PostAuthoring,
    StaticIdentity,
    TagCatalog,
    validate_post_draft,
)


def _status(db_session, post_id: str) -> str | None:
    return db_session.execute(select(Post.status).where(Post.id == post_id)).scalar_one_or_none()


class TestValidatePostDraft:
    def test_blank_content_wins_over_missing_tags(self) -> None:
        with pytest.raises(ValidationFailedError) as exc_info:
            validate_post_draft("   \n\t", [])
        assert exc_info.value.rule == "content_empty"
        assert exc_info.value.message == Messages.CONTENT_EMPTY

    def test_missing_tags_has_its_own_rule(self) -> None:
        with pytest.raises(ValidationFailedError) as exc_info:
            validate_post_draft("a roast", [])
        assert exc_info.value.rule == "tags_empty"
        assert exc_info.value.message != Messages.CONTENT_EMPTY

    def test_missing_tags_wins_over_length(self) -> None:
        with pytest.raises(ValidationFailedError) as exc_info:
            validate_post_draft("x" * 5000, [])
        assert exc_info.value.rule == "tags_empty"

    def test_length_limit_is_inclusive(self) -> None:
        assert validate_post_draft("x" * 2000, ["Joke"]) == "x" * 2000

        with pytest.raises(ValidationFailedError) as exc_info:
            validate_post_draft("x" * 2001, ["Joke"])
        assert exc_info.value.rule == "content_too_long"
        assert "2000" in exc_info.value.message

    def test_length_counts_characters_not_bytes(self) -> None:
        assert validate_post_draft("🔥" * 2000, ["Roast"]) == "🔥" * 2000

    def test_content_is_trimmed(self) -> None:
        assert validate_post_draft("  burn  ", ["Roast"]) == "burn"

    def test_custom_limit(self) -> None:
        with pytest.raises(ValidationFailedError):
            validate_post_draft("toolong", ["Roast"], max_length=3)


@pytest.mark.asyncio
async def test_invalid_draft_never_reaches_backend(make_client, backend, tags, mocker):
    insert = mocker.spy(backend, "insert_post")
    client = make_client()

    with pytest.raises(ValidationFailedError):
        await client.create_post("   ", ["Roast"])
    with pytest.raises(ValidationFailedError):
        await client.create_post("a roast", [])

    insert.assert_not_called()
    assert client.notifier.messages == [Messages.CONTENT_EMPTY, Messages.TAGS_EMPTY]


@pytest.mark.asyncio
async def test_create_post_appears_in_feed(make_client, backend, tags, viewer):
    await backend.upsert_profile(viewer.id, "grillmaster")
    client = make_client(viewer)

    post = await client.create_post("  You're the reason shampoo has instructions.  ", ["Roast", "Joke"])

    assert post.author_id == viewer.id
    assert post.content == "You're the reason shampoo has instructions."
    assert [tag.name for tag in post.tags] == ["Joke", "Roast"]
    [item] = client.posts
    assert item.id == post.id
    assert item.username == "grillmaster"
    assert client.notifier.messages == [Messages.POST_CREATED]


@pytest.mark.asyncio
async def test_anonymous_post_has_no_author(make_client, tags, viewer):
    client = make_client(viewer)

    post = await client.create_post("I'd roast you but my mom said not to burn trash.", ["Insult"], True)

    assert post.author_id is None
    assert post.is_anonymous is True
    [item] = await client.feed()
    assert item.username == ANONYMOUS_USERNAME


@pytest.mark.asyncio
async def test_unknown_tag_names_are_dropped(make_client, tags, viewer):
    client = make_client(viewer)

    post = await client.create_post("burn", ["Roast", "Nonexistent"])

    assert [tag.name for tag in post.tags] == ["Roast"]


@pytest.mark.asyncio
async def test_only_unknown_tags_counts_as_no_tags(make_client, backend, tags, viewer, mocker):
    insert = mocker.spy(backend, "insert_post")
    client = make_client(viewer)

    with pytest.raises(ValidationFailedError) as exc_info:
        await client.create_post("burn", ["Nonexistent"])

    assert exc_info.value.rule == "tags_empty"
    insert.assert_not_called()


@pytest.mark.asyncio
async def test_unavailable_catalog_blocks_posting(make_client, backend, viewer, mocker):
    mocker.patch.object(backend, "list_tags", side_effect=TransportError("down"))
    insert = mocker.spy(backend, "insert_post")
    client = make_client(viewer)

    with pytest.raises(TransportError):
        await client.create_post("burn", ["Roast"])

    insert.assert_not_called()
    assert client.notifier.messages == [Messages.POST_FAILED]


@pytest.mark.asyncio
async def test_untagged_post_is_hidden_when_tagging_fails(
    make_client, backend, tags, viewer, db_session, mocker
):
    mocker.patch.object(backend, "insert_post_tags", side_effect=TransportError("link failed"))
    client = make_client(viewer)

    with pytest.raises(TransportError):
        await client.create_post("half written", ["Roast"])

    rows = db_session.execute(select(Post.content, Post.status)).all()
    assert [tuple(row) for row in rows] == [("half written", POST_STATUS_DELETED)]
    assert await client.feed() == []
    assert client.notifier.messages == [Messages.POST_FAILED]


@pytest.mark.asyncio
async def test_post_insert_failure_notifies(make_client, backend, tags, viewer, mocker):
    mocker.patch.object(backend, "insert_post", side_effect=TransportError("down"))
    client = make_client(viewer)

    with pytest.raises(TransportError):
        await client.create_post("burn", ["Roast"])

    assert client.notifier.messages == [Messages.POST_FAILED]


@pytest.mark.asyncio
async def test_author_can_delete_own_post(make_client, tags, seed_post, viewer, db_session):
    post_id = seed_post("regret", user_id=viewer.id)
    client = make_client(viewer)

    await client.delete_post(post_id)

    assert _status(db_session, post_id) == POST_STATUS_DELETED
    assert client.posts == []
    assert client.notifier.messages == [Messages.POST_DELETED]


@pytest.mark.asyncio
async def test_cannot_delete_someone_elses_post(
    make_client, tags, seed_post, viewer, other_viewer, db_session
):
    post_id = seed_post("not yours", user_id=other_viewer.id)
    client = make_client(viewer)

    with pytest.raises(NotPermittedError):
        await client.delete_post(post_id)

    assert _status(db_session, post_id) == POST_STATUS_VISIBLE
    assert client.notifier.messages == [Messages.NOT_OWNER]


@pytest.mark.asyncio
async def test_visitor_cannot_delete(make_client, tags, seed_post):
    post_id = seed_post("anonymous", is_anonymous=True)
    client = make_client()

    with pytest.raises(UnauthenticatedError):
        await client.delete_post(post_id)

    assert client.notifier.messages == [Messages.LOGIN_TO_DELETE]


@pytest.mark.asyncio
async def test_zero_length_limit_is_honoured(backend, tags, viewer, mocker):
    insert = mocker.spy(backend, "insert_post")
    authoring = PostAuthoring(
        backend,
        StaticIdentity(viewer),
        CollectingNotifier(),
        FeedCache(backend),
        TagCatalog(backend),
        max_length=0,
    )

    assert authoring.max_length == 0
    with pytest.raises(ValidationFailedError) as exc_info:
        await authoring.create_post("x", ["Roast"])
    assert exc_info.value.rule == "content_too_long"
    insert.assert_not_called()
