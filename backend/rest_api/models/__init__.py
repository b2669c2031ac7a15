"""
SQLAlchemy ORM Models Package.

Models are organized into one module per table:
- base: Base class, UUID primary key and timestamp mixins
- area: Area
- profile: Profile
- vendor: Vendor
- complaint: Complaint
- rating: Rating
"""

from .base import Base, TimestampMixin, UUIDPrimaryKeyMixin, utcnow
from .area import Area
from .profile import Profile
from .vendor import Vendor
from .complaint import Complaint
from .rating import Rating

__all__ = [
    "Base",
    "TimestampMixin",
    "UUIDPrimaryKeyMixin",
    "utcnow",
    "Area",
    "Profile",
    "Vendor",
    "Complaint",
    "Rating",
]
