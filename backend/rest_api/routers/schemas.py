"""
Pydantic schemas for the portal API.

Request schemas only check types; range, blank-text and transition rules are
enforced by the domain services so they surface as field-level 400s.
Update schemas forbid unknown fields, which rejects writes to derived or
immutable columns before they reach a service.
"""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel

from shared.utils.schemas import ComplaintCategoryType, ComplaintStatusType, Role


# =============================================================================
# Area Schemas
# =============================================================================


class AreaOutput(BaseModel):
    id: UUID
    name: str
    district: str
    state: str
    pincode: str | None = None
    created_at: datetime

    model_config = {"from_attributes": True}


class AreaCreate(BaseModel):
    name: str
    district: str
    state: str | None = None
    pincode: str | None = None

    model_config = {"extra": "forbid"}


class AreaUpdate(BaseModel):
    name: str | None = None
    district: str | None = None
    state: str | None = None
    pincode: str | None = None

    model_config = {"extra": "forbid"}


# =============================================================================
# Profile Schemas
# =============================================================================


class ProfileOutput(BaseModel):
    id: UUID
    user_id: str
    full_name: str
    phone: str | None = None
    area_id: UUID | None = None
    role: Role
    is_verified: bool
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class ProfileActivity(BaseModel):
    complaints_filed: int
    ratings_given: int
    vendors_owned: int


class MeOutput(BaseModel):
    profile: ProfileOutput
    activity: ProfileActivity


class ProfileCreate(BaseModel):
    full_name: str
    phone: str | None = None
    area_id: UUID | None = None

    model_config = {"extra": "forbid"}


class ProfileUpdate(BaseModel):
    full_name: str | None = None
    phone: str | None = None
    area_id: UUID | None = None
    role: Role | None = None
    is_verified: bool | None = None

    model_config = {"extra": "forbid"}


class RoleUpdate(BaseModel):
    role: Role

    model_config = {"extra": "forbid"}


# =============================================================================
# Vendor Schemas
# =============================================================================


class VendorOutput(BaseModel):
    id: UUID
    profile_id: UUID
    business_name: str
    food_types: list[str]
    location_description: str
    area_id: UUID
    license_number: str | None = None
    is_licensed: bool
    average_rating: float
    total_ratings: int
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class VendorCreate(BaseModel):
    business_name: str
    food_types: list[str] = []
    location_description: str
    area_id: UUID
    license_number: str | None = None
    is_licensed: bool = False

    model_config = {"extra": "forbid"}


class VendorUpdate(BaseModel):
    business_name: str | None = None
    food_types: list[str] | None = None
    location_description: str | None = None
    area_id: UUID | None = None
    license_number: str | None = None
    is_licensed: bool | None = None

    model_config = {"extra": "forbid"}


# =============================================================================
# Complaint Schemas
# =============================================================================


class ComplaintOutput(BaseModel):
    id: UUID
    complainant_id: UUID
    vendor_id: UUID | None = None
    area_id: UUID
    category: ComplaintCategoryType
    title: str
    description: str
    status: ComplaintStatusType
    priority: int
    assigned_to: UUID | None = None
    resolution_notes: str | None = None
    resolved_at: datetime | None = None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class ComplaintCreate(BaseModel):
    area_id: UUID
    vendor_id: UUID | None = None
    category: str
    title: str
    description: str
    priority: int = 1

    model_config = {"extra": "forbid"}


class ComplaintUpdate(BaseModel):
    area_id: UUID | None = None
    vendor_id: UUID | None = None
    category: str | None = None
    title: str | None = None
    description: str | None = None
    priority: int | None = None
    status: str | None = None
    assigned_to: UUID | None = None
    resolution_notes: str | None = None

    model_config = {"extra": "forbid"}


class ComplaintAssign(BaseModel):
    assigned_to: UUID | None = None

    model_config = {"extra": "forbid"}


# =============================================================================
# Rating Schemas
# =============================================================================


class RatingOutput(BaseModel):
    id: UUID
    vendor_id: UUID
    reviewer_id: UUID
    rating: int
    review: str | None = None
    food_quality_rating: int | None = None
    price_rating: int | None = None
    hygiene_rating: int | None = None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class RatingCreate(BaseModel):
    vendor_id: UUID
    rating: int
    review: str | None = None
    food_quality_rating: int | None = None
    price_rating: int | None = None
    hygiene_rating: int | None = None

    model_config = {"extra": "forbid"}


class RatingUpdate(BaseModel):
    vendor_id: UUID | None = None
    rating: int | None = None
    review: str | None = None
    food_quality_rating: int | None = None
    price_rating: int | None = None
    hygiene_rating: int | None = None

    model_config = {"extra": "forbid"}


# =============================================================================
# Stats Schemas
# =============================================================================


class DashboardStats(BaseModel):
    total_complaints: int
    pending_complaints: int
    investigating_complaints: int
    resolved_complaints: int
    dismissed_complaints: int
    total_vendors: int
    total_ratings: int
    average_rating: float


# =============================================================================
# Identity Webhook Schemas
# =============================================================================


class IdentityUser(BaseModel):
    id: str
    email: str | None = None
    phone: str | None = None
    user_metadata: dict = {}


class IdentityEvent(BaseModel):
    type: str
    user: IdentityUser


class IdentityEventResult(BaseModel):
    type: str
    provisioned: bool = False
    deleted: bool = False
    profile_id: UUID | None = None
