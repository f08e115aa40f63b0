"""Profile endpoints for the current viewer."""

from fastapi import APIRouter

from roastr.schemas import ProfileResponse, ProfileUpdate

from ..dependencies import ClientDep, NotifierDep

router = APIRouter(prefix="/profile", tags=["profile"])


@router.get("/", response_model=ProfileResponse)
async def get_profile(client: ClientDep, notifier: NotifierDep) -> ProfileResponse:
    """Return the viewer's username and email."""
    username = await client.profile()
    viewer = client.viewer
    return ProfileResponse(
        username=username,
        email=viewer.email if viewer else None,
        notifications=notifier.notifications,
    )


@router.put("/", response_model=ProfileResponse)
async def update_profile(
    profile_data: ProfileUpdate,
    client: ClientDep,
    notifier: NotifierDep,
) -> ProfileResponse:
    """Change the viewer's username."""
    profile = await client.update_profile(profile_data.username)
    viewer = client.viewer
    return ProfileResponse(
        username=profile.username,
        email=viewer.email if viewer else None,
        notifications=notifier.notifications,
    )
