"""
Complaints router - /api/complaints
Every endpoint requires a caller; listings only return complaints the caller
may read.
"""

from uuid import UUID

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from shared.infrastructure.db import get_db
from rest_api.routers._common import Pagination, get_caller, get_pagination
from rest_api.routers.schemas import ComplaintAssign, ComplaintCreate, ComplaintOutput, ComplaintUpdate
from rest_api.services.domain import ComplaintService
from rest_api.services.permissions import PermissionContext

router = APIRouter(prefix="/api/complaints", tags=["complaints"])


@router.get("", response_model=list[ComplaintOutput])
def list_complaints(
    area_id: UUID | None = Query(default=None),
    status_filter: str | None = Query(default=None, alias="status"),
    category: str | None = Query(default=None),
    vendor_id: UUID | None = Query(default=None),
    search: str | None = Query(default=None, description="Match title, description or area"),
    pagination: Pagination = Depends(get_pagination),
    caller: PermissionContext = Depends(get_caller),
    db: Session = Depends(get_db),
):
    return ComplaintService(db).list_complaints(
        caller,
        area_id=area_id,
        status=status_filter,
        category=category,
        vendor_id=vendor_id,
        search=search,
        limit=pagination.limit,
        offset=pagination.offset,
    )


@router.get("/{complaint_id}", response_model=ComplaintOutput)
def get_complaint(
    complaint_id: UUID,
    caller: PermissionContext = Depends(get_caller),
    db: Session = Depends(get_db),
):
    return ComplaintService(db).get_complaint(caller, complaint_id)


@router.post("", response_model=ComplaintOutput, status_code=status.HTTP_201_CREATED)
def file_complaint(
    body: ComplaintCreate,
    caller: PermissionContext = Depends(get_caller),
    db: Session = Depends(get_db),
):
    return ComplaintService(db).file_complaint(caller, body.model_dump(exclude_unset=True))


@router.patch("/{complaint_id}", response_model=ComplaintOutput)
def update_complaint(
    complaint_id: UUID,
    body: ComplaintUpdate,
    caller: PermissionContext = Depends(get_caller),
    db: Session = Depends(get_db),
):
    return ComplaintService(db).update_complaint(caller, complaint_id, body.model_dump(exclude_unset=True))


@router.put("/{complaint_id}/assignee", response_model=ComplaintOutput)
def assign_complaint(
    complaint_id: UUID,
    body: ComplaintAssign,
    caller: PermissionContext = Depends(get_caller),
    db: Session = Depends(get_db),
):
    return ComplaintService(db).assign_complaint(caller, complaint_id, body.assigned_to)


@router.delete("/{complaint_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_complaint(
    complaint_id: UUID,
    caller: PermissionContext = Depends(get_caller),
    db: Session = Depends(get_db),
) -> Response:
    ComplaintService(db).delete_complaint(caller, complaint_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
