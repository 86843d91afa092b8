"""
Team Endpoints

- POST /team/add : register a team and upsert its members
- GET  /team/get : fetch a team with its members
"""

from fastapi import APIRouter, Depends, Query, status

from domain import Team
from services.review_service import ReviewService
from web.dependencies import get_service

router = APIRouter(prefix="/team", tags=["Teams"])


@router.post("/add", status_code=status.HTTP_201_CREATED)
async def add_team(
    team: Team,
    service: ReviewService = Depends(get_service),
):
    """Create a team; existing users listed as members are moved into it."""
    created = await service.create_team(team)
    return {"team": created.model_dump(mode="json")}


@router.get("/get")
async def get_team(
    team_name: str = Query(..., min_length=1),
    service: ReviewService = Depends(get_service),
):
    """Get a team with its members."""
    team = await service.get_team(team_name)
    return team.model_dump(mode="json")
