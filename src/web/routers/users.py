"""
User Endpoints

- POST /users/setIsActive : toggle a user's active flag
- GET  /users/getReview   : pull requests a user is reviewing
"""

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field

from services.review_service import ReviewService
from web.dependencies import get_service

router = APIRouter(prefix="/users", tags=["Users"])


# =============================================================================
# REQUEST MODELS
# =============================================================================

class SetIsActiveRequest(BaseModel):
    """Request to activate or deactivate a user."""
    user_id: str = Field(min_length=1)
    is_active: bool


# =============================================================================
# ENDPOINTS
# =============================================================================

@router.post("/setIsActive")
async def set_is_active(
    body: SetIsActiveRequest,
    service: ReviewService = Depends(get_service),
):
    """Set the active flag. Inactive users are never picked as reviewers."""
    user = await service.set_user_active(body.user_id, body.is_active)
    return {"user": user.model_dump(mode="json")}


@router.get("/getReview")
async def get_review(
    user_id: str = Query(..., min_length=1),
    service: ReviewService = Depends(get_service),
):
    """List pull requests where the user is an assigned reviewer."""
    pull_requests = await service.get_user_reviews(user_id)
    return {
        "user_id": user_id,
        "pull_requests": [pr.model_dump(mode="json") for pr in pull_requests],
    }
