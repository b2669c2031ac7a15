"""
Ratings router - /api/ratings
Every write recomputes the affected vendor aggregates before responding.
"""

from uuid import UUID

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from shared.infrastructure.db import get_db
from shared.utils.schemas import DuplicateRatingResponse
from rest_api.routers._common import Pagination, get_caller, get_pagination
from rest_api.routers.schemas import RatingCreate, RatingOutput, RatingUpdate
from rest_api.services.domain import RatingService
from rest_api.services.permissions import PermissionContext

router = APIRouter(prefix="/api/ratings", tags=["ratings"])


@router.get("", response_model=list[RatingOutput])
def list_ratings(
    vendor_id: UUID | None = Query(default=None),
    reviewer_id: UUID | None = Query(default=None),
    search: str | None = Query(default=None, description="Match vendor, food types or reviewer"),
    pagination: Pagination = Depends(get_pagination),
    db: Session = Depends(get_db),
):
    return RatingService(db).list_ratings(
        vendor_id=vendor_id,
        reviewer_id=reviewer_id,
        search=search,
        limit=pagination.limit,
        offset=pagination.offset,
    )


@router.get("/{rating_id}", response_model=RatingOutput)
def get_rating(rating_id: UUID, db: Session = Depends(get_db)):
    return RatingService(db).get_rating(rating_id)


@router.post(
    "",
    response_model=RatingOutput,
    status_code=status.HTTP_201_CREATED,
    responses={409: {"model": DuplicateRatingResponse}},
)
def submit_rating(
    body: RatingCreate,
    caller: PermissionContext = Depends(get_caller),
    db: Session = Depends(get_db),
):
    return RatingService(db).submit_rating(caller, body.model_dump(exclude_unset=True))


@router.patch("/{rating_id}", response_model=RatingOutput, responses={409: {"model": DuplicateRatingResponse}})
def update_rating(
    rating_id: UUID,
    body: RatingUpdate,
    caller: PermissionContext = Depends(get_caller),
    db: Session = Depends(get_db),
):
    return RatingService(db).update_rating(caller, rating_id, body.model_dump(exclude_unset=True))


@router.delete("/{rating_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_rating(
    rating_id: UUID,
    caller: PermissionContext = Depends(get_caller),
    db: Session = Depends(get_db),
) -> Response:
    RatingService(db).delete_rating(caller, rating_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
