"""
FastAPI Dependency Injection.

Usage in endpoints:
    @router.post("/pullRequest/merge")
    async def merge(
        body: MergeRequest,
        service: ReviewService = Depends(get_service),
    ):
        ...

Tests swap the service with ``app.dependency_overrides[get_service]``.
"""

from services.review_service import ReviewService, get_review_service


def get_service() -> ReviewService:
    """Get the review service used by request handlers."""
    return get_review_service()
