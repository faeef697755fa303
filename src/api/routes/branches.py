"""Branch registry endpoints."""

from fastapi import APIRouter, Depends, status

from src.api.dependencies import get_branches
from src.application.dto.requests import CreateBranchRequest
from src.application.dto.responses import BranchResponse, ErrorResponse
from src.core.entities.branch import Branch
from src.core.exceptions import BranchNotFoundError
from src.core.interfaces import IBranchStore

router = APIRouter(prefix="/api/branches", tags=["branches"])


@router.post(
    "",
    response_model=BranchResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}},
)
async def create_branch(
    request: CreateBranchRequest,
    store: IBranchStore = Depends(get_branches),
) -> BranchResponse:
    """Register a branch."""
    branch = await store.create_branch(
        Branch(
            id=request.id,
            name=request.name,
            branch_type=request.branch_type,
            address=request.address,
        )
    )
    return BranchResponse.from_entity(branch)


@router.get("", response_model=list[BranchResponse])
async def list_branches(
    include_inactive: bool = False,
    store: IBranchStore = Depends(get_branches),
) -> list[BranchResponse]:
    """List branches."""
    branches = await store.list_branches(include_inactive=include_inactive)
    return [BranchResponse.from_entity(b) for b in branches]


@router.get(
    "/{branch_id}",
    response_model=BranchResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_branch(
    branch_id: str,
    store: IBranchStore = Depends(get_branches),
) -> BranchResponse:
    """Get a branch by ID."""
    branch = await store.get_branch(branch_id)
    if branch is None:
        raise BranchNotFoundError(branch_id)
    return BranchResponse.from_entity(branch)
