"""Post-related endpoints: authoring, voting, saving and reporting."""

from fastapi import APIRouter, status

from roastr.schemas import (
    ActionResponse,
    PostCreate,
    PostCreatedResponse,
    SaveResponse,
    VoteCreate,
    VoteResponse,
)

from ..dependencies import ClientDep, NotifierDep

router = APIRouter(prefix="/posts", tags=["posts"])


@router.post("/", response_model=PostCreatedResponse, status_code=status.HTTP_201_CREATED)
async def create_post(
    post_data: PostCreate,
    client: ClientDep,
    notifier: NotifierDep,
) -> PostCreatedResponse:
    """Create a post, optionally hiding the author."""
    post = await client.create_post(post_data.content, post_data.tags, post_data.is_anonymous)
    return PostCreatedResponse(post=post, notifications=notifier.notifications)


@router.delete("/{post_id}", response_model=ActionResponse)
async def delete_post(post_id: str, client: ClientDep, notifier: NotifierDep) -> ActionResponse:
    """Soft-delete one of the viewer's posts."""
    await client.delete_post(post_id)
    return ActionResponse(notifications=notifier.notifications)


@router.post("/{post_id}/vote", response_model=VoteResponse)
async def vote_on_post(
    post_id: str,
    vote_data: VoteCreate,
    client: ClientDep,
    notifier: NotifierDep,
) -> VoteResponse:
    """Cast a vote; repeating the same vote retracts it."""
    user_vote = await client.vote(post_id, vote_data.vote_type)
    return VoteResponse(user_vote=user_vote, notifications=notifier.notifications)


@router.post("/{post_id}/save", response_model=SaveResponse)
async def toggle_save(post_id: str, client: ClientDep, notifier: NotifierDep) -> SaveResponse:
    """Add the post to the viewer's library, or remove it if already saved."""
    is_saved = await client.toggle_save(post_id)
    return SaveResponse(is_saved=is_saved, notifications=notifier.notifications)


@router.post("/{post_id}/report", response_model=ActionResponse, status_code=status.HTTP_201_CREATED)
async def report_post(post_id: str, client: ClientDep, notifier: NotifierDep) -> ActionResponse:
    """Report a post; no login required."""
    await client.report_post(post_id)
    return ActionResponse(notifications=notifier.notifications)
