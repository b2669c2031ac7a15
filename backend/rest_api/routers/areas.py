"""
Areas router - /api/areas
Public reads; create, update and delete are admin-only.
"""

from uuid import UUID

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from shared.infrastructure.db import get_db
from rest_api.routers._common import get_caller
from rest_api.routers.schemas import AreaCreate, AreaOutput, AreaUpdate
from rest_api.services.domain import AreaService
from rest_api.services.permissions import PermissionContext

router = APIRouter(prefix="/api/areas", tags=["areas"])


@router.get("", response_model=list[AreaOutput])
def list_areas(
    search: str | None = Query(default=None, description="Match name or district"),
    db: Session = Depends(get_db),
):
    return AreaService(db).list_areas(search=search)


@router.get("/{area_id}", response_model=AreaOutput)
def get_area(area_id: UUID, db: Session = Depends(get_db)):
    return AreaService(db).get_area(area_id)


@router.post("", response_model=AreaOutput, status_code=status.HTTP_201_CREATED)
def create_area(
    body: AreaCreate,
    caller: PermissionContext = Depends(get_caller),
    db: Session = Depends(get_db),
):
    return AreaService(db).create_area(caller, body.model_dump(exclude_unset=True))


@router.patch("/{area_id}", response_model=AreaOutput)
def update_area(
    area_id: UUID,
    body: AreaUpdate,
    caller: PermissionContext = Depends(get_caller),
    db: Session = Depends(get_db),
):
    return AreaService(db).update_area(caller, area_id, body.model_dump(exclude_unset=True))


@router.delete("/{area_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_area(
    area_id: UUID,
    caller: PermissionContext = Depends(get_caller),
    db: Session = Depends(get_db),
) -> Response:
    AreaService(db).delete_area(caller, area_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
