"""
Pull Request Endpoints

- POST /pullRequest/create   : create a PR and auto-assign reviewers
- POST /pullRequest/merge    : mark a PR merged (idempotent)
- POST /pullRequest/reassign : replace one reviewer
"""

from fastapi import APIRouter, Depends, status
from pydantic import AliasChoices, BaseModel, Field

from domain import PullRequest
from services.review_service import ReviewService
from web.dependencies import get_service

router = APIRouter(prefix="/pullRequest", tags=["Pull Requests"])


# =============================================================================
# REQUEST MODELS
# =============================================================================

class CreatePullRequestRequest(BaseModel):
    """Request to open a pull request."""
    pull_request_id: str = Field(min_length=1)
    pull_request_name: str = Field(min_length=1)
    author_id: str = Field(min_length=1)


class MergePullRequestRequest(BaseModel):
    """Request to merge a pull request."""
    pull_request_id: str = Field(min_length=1)


class ReassignReviewerRequest(BaseModel):
    """Request to swap out one reviewer."""
    pull_request_id: str = Field(min_length=1)
    old_user_id: str = Field(
        min_length=1,
        validation_alias=AliasChoices("old_user_id", "old_reviewer_id"),
    )


def _pr_json(pull_request: PullRequest) -> dict:
    return pull_request.model_dump(mode="json", by_alias=True)


# =============================================================================
# ENDPOINTS
# =============================================================================

@router.post("/create", status_code=status.HTTP_201_CREATED)
async def create_pull_request(
    body: CreatePullRequestRequest,
    service: ReviewService = Depends(get_service),
):
    """Create an OPEN pull request with up to two reviewers from the author's team."""
    pull_request = await service.create_pull_request(
        body.pull_request_id, body.pull_request_name, body.author_id
    )
    return {"pr": _pr_json(pull_request)}


@router.post("/merge")
async def merge_pull_request(
    body: MergePullRequestRequest,
    service: ReviewService = Depends(get_service),
):
    """Merge a pull request. Merging an already merged PR returns it unchanged."""
    pull_request = await service.merge_pull_request(body.pull_request_id)
    return {"pr": _pr_json(pull_request)}


@router.post("/reassign")
async def reassign_reviewer(
    body: ReassignReviewerRequest,
    service: ReviewService = Depends(get_service),
):
    """Replace a reviewer with an active member of that reviewer's team."""
    result = await service.reassign_reviewer(body.pull_request_id, body.old_user_id)
    return {"pr": _pr_json(result.pull_request), "replaced_by": result.replaced_by}
