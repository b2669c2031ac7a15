"""
Vendors router - /api/vendors
Public listing and detail; owners register and manage their vendors.
"""

from uuid import UUID

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from shared.infrastructure.db import get_db
from rest_api.routers._common import Pagination, get_caller, get_pagination
from rest_api.routers.schemas import VendorCreate, VendorOutput, VendorUpdate
from rest_api.services.domain import VendorService
from rest_api.services.permissions import PermissionContext

router = APIRouter(prefix="/api/vendors", tags=["vendors"])


@router.get("", response_model=list[VendorOutput])
def list_vendors(
    area_id: UUID | None = Query(default=None),
    search: str | None = Query(default=None, description="Match business name, food types or area"),
    min_rating: float | None = Query(default=None, ge=0, le=5),
    pagination: Pagination = Depends(get_pagination),
    db: Session = Depends(get_db),
):
    return VendorService(db).list_vendors(
        area_id=area_id,
        search=search,
        min_rating=min_rating,
        limit=pagination.limit,
        offset=pagination.offset,
    )


@router.get("/{vendor_id}", response_model=VendorOutput)
def get_vendor(vendor_id: UUID, db: Session = Depends(get_db)):
    return VendorService(db).get_vendor(vendor_id)


@router.post("", response_model=VendorOutput, status_code=status.HTTP_201_CREATED)
def register_vendor(
    body: VendorCreate,
    caller: PermissionContext = Depends(get_caller),
    db: Session = Depends(get_db),
):
    return VendorService(db).register_vendor(caller, body.model_dump(exclude_unset=True))


@router.patch("/{vendor_id}", response_model=VendorOutput)
def update_vendor(
    vendor_id: UUID,
    body: VendorUpdate,
    caller: PermissionContext = Depends(get_caller),
    db: Session = Depends(get_db),
):
    return VendorService(db).update_vendor(caller, vendor_id, body.model_dump(exclude_unset=True))


@router.delete("/{vendor_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_vendor(
    vendor_id: UUID,
    caller: PermissionContext = Depends(get_caller),
    db: Session = Depends(get_db),
) -> Response:
    VendorService(db).delete_vendor(caller, vendor_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
