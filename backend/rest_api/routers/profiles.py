"""
Profiles router - /api/profiles
Profiles are public to read. The caller's own profile (with activity
counters) is at /api/profiles/me.
"""

from uuid import UUID

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from shared.infrastructure.db import get_db
from rest_api.routers._common import Pagination, get_caller, get_pagination
from rest_api.routers.schemas import (
    MeOutput,
    ProfileActivity,
    ProfileCreate,
    ProfileOutput,
    ProfileUpdate,
    RoleUpdate,
)
from rest_api.services.domain import ProfileService
from rest_api.services.permissions import PermissionContext
from shared.utils.schemas import Role

router = APIRouter(prefix="/api/profiles", tags=["profiles"])


@router.get("", response_model=list[ProfileOutput])
def list_profiles(
    role: Role | None = Query(default=None),
    pagination: Pagination = Depends(get_pagination),
    db: Session = Depends(get_db),
):
    return ProfileService(db).list_profiles(
        role=role, limit=pagination.limit, offset=pagination.offset
    )


@router.get("/me", response_model=MeOutput)
def get_me(
    caller: PermissionContext = Depends(get_caller),
    db: Session = Depends(get_db),
) -> MeOutput:
    profile, counts = ProfileService(db).get_me(caller)
    return MeOutput(
        profile=ProfileOutput.model_validate(profile),
        activity=ProfileActivity(**counts),
    )


@router.post("", response_model=ProfileOutput, status_code=status.HTTP_201_CREATED)
def create_profile(
    body: ProfileCreate,
    caller: PermissionContext = Depends(get_caller),
    db: Session = Depends(get_db),
):
    """
    Explicit profile insert. Callers normally already have a provisioned
    profile, in which case this is a 409.
    """
    return ProfileService(db).create_profile(caller, body.model_dump(exclude_unset=True))


@router.get("/{profile_id}", response_model=ProfileOutput)
def get_profile(profile_id: UUID, db: Session = Depends(get_db)):
    return ProfileService(db).get_profile(profile_id)


@router.patch("/{profile_id}", response_model=ProfileOutput)
def update_profile(
    profile_id: UUID,
    body: ProfileUpdate,
    caller: PermissionContext = Depends(get_caller),
    db: Session = Depends(get_db),
):
    return ProfileService(db).update_profile(caller, profile_id, body.model_dump(exclude_unset=True))


@router.put("/{profile_id}/role", response_model=ProfileOutput)
def set_role(
    profile_id: UUID,
    body: RoleUpdate,
    caller: PermissionContext = Depends(get_caller),
    db: Session = Depends(get_db),
):
    return ProfileService(db).set_role(caller, profile_id, body.role)


@router.delete("/{profile_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_profile(
    profile_id: UUID,
    caller: PermissionContext = Depends(get_caller),
    db: Session = Depends(get_db),
) -> Response:
    ProfileService(db).delete_profile(caller, profile_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
