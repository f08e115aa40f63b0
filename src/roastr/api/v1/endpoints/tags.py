"""Tag catalog endpoint."""

from fastapi import APIRouter

from roastr.schemas import Tag

from ..dependencies import ClientDep

router = APIRouter(prefix="/tags", tags=["tags"])


@router.get("/", response_model=list[Tag])
async def list_tags(client: ClientDep) -> list[Tag]:
    """Return every tag ordered by name; empty if the catalog could not load."""
    return list(await client.tags())
