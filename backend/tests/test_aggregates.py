"""
Tests for vendor rating aggregates.
"""

from decimal import Decimal

from sqlalchemy import select

from rest_api.models import Rating, Vendor
from rest_api.services.domain import ProfileService, RatingService
from rest_api.services.domain.aggregates import (
    compute_aggregate,
    recompute_all_vendor_aggregates,
    round_average,
)
from tests.conftest import caller_for


def _aggregate(db_session, vendor_id):
    vendor = db_session.get(Vendor, vendor_id)
    db_session.refresh(vendor)
    return vendor.average_rating, vendor.total_ratings


class TestRoundAverage:
    """Pure rounding rules."""

    def test_no_ratings_is_zero(self):
        assert round_average(0, 0) == Decimal("0.0")

    def test_rounds_half_up(self):
        # 4 + 4 + 5 + 5 + 5 + 4 + 4 + 4 = 35 over 8 = 4.375 -> 4.4
        assert round_average(35, 8) == Decimal("4.4")
        # 7 / 2 = 3.5 stays 3.5; 11 / 4 = 2.75 -> 2.8
        assert round_average(7, 2) == Decimal("3.5")
        assert round_average(11, 4) == Decimal("2.8")

    def test_compute_aggregate(self):
        assert compute_aggregate([5, 4, 4]) == (Decimal("4.3"), 3)
        assert compute_aggregate([]) == (Decimal("0.0"), 0)


class TestRatingLifecycle:
    """Aggregates follow every rating write in the same transaction."""

    def test_worked_example(self, db_session, vendor, consumer, other_consumer):
        """Submit 4, submit 2, edit the 4 to 5, delete the 2."""
        service = RatingService(db_session)
        assert _aggregate(db_session, vendor.id) == (Decimal("0.0"), 0)

        rating_a = service.submit_rating(caller_for(consumer), {"vendor_id": vendor.id, "rating": 4})
        assert _aggregate(db_session, vendor.id) == (Decimal("4.0"), 1)

        rating_b = service.submit_rating(caller_for(other_consumer), {"vendor_id": vendor.id, "rating": 2})
        assert _aggregate(db_session, vendor.id) == (Decimal("3.0"), 2)

        service.update_rating(caller_for(consumer), rating_a.id, {"rating": 5})
        assert _aggregate(db_session, vendor.id) == (Decimal("3.5"), 2)

        service.delete_rating(caller_for(other_consumer), rating_b.id)
        assert _aggregate(db_session, vendor.id) == (Decimal("5.0"), 1)

    def test_moving_rating_recomputes_both_vendors(self, db_session, make_vendor, consumer, other_consumer):
        first = make_vendor("First Stall")
        second = make_vendor("Second Stall")
        service = RatingService(db_session)

        moved = service.submit_rating(caller_for(consumer), {"vendor_id": first.id, "rating": 2})
        service.submit_rating(caller_for(other_consumer), {"vendor_id": first.id, "rating": 4})
        assert _aggregate(db_session, first.id) == (Decimal("3.0"), 2)

        service.update_rating(caller_for(consumer), moved.id, {"vendor_id": second.id})

        assert _aggregate(db_session, first.id) == (Decimal("4.0"), 1)
        assert _aggregate(db_session, second.id) == (Decimal("2.0"), 1)

    def test_unchanged_update_leaves_aggregate(self, db_session, vendor, consumer):
        service = RatingService(db_session)
        rating = service.submit_rating(caller_for(consumer), {"vendor_id": vendor.id, "rating": 3})

        service.update_rating(caller_for(consumer), rating.id, {"rating": 3})

        assert _aggregate(db_session, vendor.id) == (Decimal("3.0"), 1)

    def test_deleting_last_rating_resets_to_zero(self, db_session, vendor, consumer):
        service = RatingService(db_session)
        rating = service.submit_rating(caller_for(consumer), {"vendor_id": vendor.id, "rating": 1})

        service.delete_rating(caller_for(consumer), rating.id)

        assert _aggregate(db_session, vendor.id) == (Decimal("0.0"), 0)


class TestProfileDeletionRecompute:
    """Removing a reviewer rebuilds the aggregates of vendors they rated."""

    def test_reviewer_deletion_recomputes(self, db_session, vendor, consumer, other_consumer):
        service = RatingService(db_session)
        service.submit_rating(caller_for(consumer), {"vendor_id": vendor.id, "rating": 1})
        service.submit_rating(caller_for(other_consumer), {"vendor_id": vendor.id, "rating": 5})
        assert _aggregate(db_session, vendor.id) == (Decimal("3.0"), 2)

        ProfileService(db_session).delete_profile(caller_for(consumer), consumer.id)

        assert _aggregate(db_session, vendor.id) == (Decimal("5.0"), 1)
        assert db_session.scalars(select(Rating).where(Rating.vendor_id == vendor.id)).all()[0].rating == 5


class TestRecomputeAll:
    def test_repairs_drifted_aggregates(self, db_session, vendor, consumer):
        RatingService(db_session).submit_rating(caller_for(consumer), {"vendor_id": vendor.id, "rating": 4})

        vendor.average_rating = Decimal("1.0")
        vendor.total_ratings = 9
        db_session.commit()

        assert recompute_all_vendor_aggregates(db_session) == 1
        db_session.commit()

        assert _aggregate(db_session, vendor.id) == (Decimal("4.0"), 1)
