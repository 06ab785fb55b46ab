from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from ..database import get_db
from ..schemas.history_schema import PopularIdeasResponse, UserSearchHistoryResponse
from ..services.history import get_popular_ideas, get_user_search_history

router = APIRouter(
    tags=["Ideas"],
)


@router.get(
    "/ideas/popular",
    response_model=PopularIdeasResponse,
    summary="Popular Ideas",
    response_description="Ideas checked more than once, most requested first",
)
def popular_ideas(
    limit: int = Query(10, ge=1, le=50),
    db: Session = Depends(get_db),
) -> PopularIdeasResponse:
    try:
        ideas = get_popular_ideas(db, limit=limit)
    except Exception as exc:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to load popular ideas: {exc}",
        ) from exc
    return PopularIdeasResponse(ideas=ideas)


@router.get(
    "/users/{user_id}/searches",
    response_model=UserSearchHistoryResponse,
    summary="User Search History",
    response_description="The user's past idea checks, newest first",
)
def user_searches(
    user_id: str,
    limit: int = Query(20, ge=1, le=100),
    db: Session = Depends(get_db),
) -> UserSearchHistoryResponse:
    try:
        searches = get_user_search_history(db, user_id, limit=limit)
    except Exception as exc:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to load search history: {exc}",
        ) from exc
    return UserSearchHistoryResponse(user_id=user_id, searches=searches)
