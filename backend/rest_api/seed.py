"""
Seed data for development and testing.
Creates the reference areas profiles, vendors and complaints point at.
"""

from sqlalchemy import select
from sqlalchemy.orm import Session

from rest_api.models import Area
from shared.config.constants import DEFAULT_AREA_STATE
from shared.config.logging import get_logger
from shared.infrastructure.db import safe_commit

logger = get_logger(__name__)


# (name, district, pincode)
SEED_AREAS: list[tuple[str, str, str]] = [
    ("Vijayawada Central", "Krishna", "520001"),
    ("Guntur City", "Guntur", "522001"),
    ("Visakhapatnam Beach Road", "Visakhapatnam", "530001"),
    ("Tirupati Town", "Chittoor", "517501"),
    ("Rajamahendravaram", "East Godavari", "533101"),
    ("Kurnool City", "Kurnool", "518001"),
    ("Nellore Town", "Nellore", "524001"),
    ("Anantapur City", "Anantapur", "515001"),
    ("Eluru Town", "West Godavari", "534001"),
    ("Kadapa City", "Kadapa", "516001"),
]


def seed_areas(db: Session) -> int:
    """
    Insert the reference areas that are missing (matched by name and district).
    Idempotent. Returns the number of areas inserted.
    """
    existing = set(db.execute(select(Area.name, Area.district)).tuples())
    inserted = 0
    for name, district, pincode in SEED_AREAS:
        if (name, district) in existing:
            continue
        db.add(Area(name=name, district=district, state=DEFAULT_AREA_STATE, pincode=pincode))
        inserted += 1
    return inserted


def seed(db: Session) -> None:
    """
    Seed the database with initial data.
    Idempotent: only inserts if data doesn't exist.
    """
    inserted = seed_areas(db)
    if not inserted:
        logger.info("Database already seeded, skipping")
        return

    safe_commit(db)
    logger.info("Database seeded", areas=inserted)
