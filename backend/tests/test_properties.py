"""
Property-based tests using Hypothesis.

These check the invariants that must hold for any sequence of ratings,
not just the hand-picked examples in test_aggregates.py.
"""

import uuid
from decimal import Decimal

import pytest
from hypothesis import HealthCheck, given, settings
from hypothesis import strategies as st

from shared.config.constants import Roles
from shared.utils.exceptions import ValidationError
from shared.utils.validators import escape_like_pattern, validate_rating_value
from rest_api.models import Profile, Vendor
from rest_api.services.domain import RatingService
from rest_api.services.domain.aggregates import compute_aggregate, round_average
from tests.conftest import caller_for


ratings = st.lists(st.integers(min_value=1, max_value=5), max_size=30)


class TestAggregateProperties:

    @given(values=ratings)
    @settings(max_examples=100)
    def test_average_within_scale(self, values):
        """Average is 0.0 with no ratings, otherwise within [1.0, 5.0]."""
        average, count = compute_aggregate(values)
        assert count == len(values)
        if values:
            assert Decimal("1.0") <= average <= Decimal("5.0")
        else:
            assert average == Decimal("0.0")

    @given(values=ratings.filter(bool))
    @settings(max_examples=100)
    def test_rounding_error_at_most_half_step(self, values):
        average, _ = compute_aggregate(values)
        exact = Decimal(sum(values)) / Decimal(len(values))
        assert abs(average - exact) <= Decimal("0.05")
        assert average.as_tuple().exponent == -1

    @given(total=st.integers(min_value=1, max_value=500), count=st.integers(min_value=1, max_value=100))
    def test_scaling_both_terms_keeps_average(self, total, count):
        assert round_average(total, count) == round_average(total * 2, count * 2)


class TestRatingValueProperties:

    @given(value=st.integers())
    def test_only_one_to_five_accepted(self, value):
        if 1 <= value <= 5:
            assert validate_rating_value("rating", value) == value
        else:
            with pytest.raises(ValidationError):
                validate_rating_value("rating", value)


class TestLikeEscapingProperties:

    @given(term=st.text(alphabet="ab%_\\", max_size=20))
    def test_no_unescaped_wildcards(self, term):
        escaped = escape_like_pattern(term)
        i = 0
        while i < len(escaped):
            if escaped[i] == "\\":
                assert i + 1 < len(escaped) and escaped[i + 1] in "\\%_"
                i += 2
                continue
            assert escaped[i] not in "%_"
            i += 1


class TestStoredAggregateProperties:

    @given(values=ratings)
    @settings(
        max_examples=20,
        deadline=None,
        suppress_health_check=[HealthCheck.function_scoped_fixture],
    )
    def test_stored_aggregate_matches_ratings(self, db_session, area, values):
        """After any run of submissions the stored aggregate equals the recomputed one."""
        owner = Profile(user_id=f"identity-{uuid.uuid4()}", full_name="Owner", role=Roles.VENDOR)
        db_session.add(owner)
        db_session.flush()
        vendor = Vendor(
            profile_id=owner.id,
            business_name="Property Stall",
            food_types=[],
            location_description="Somewhere",
            area_id=area.id,
        )
        db_session.add(vendor)
        db_session.commit()

        service = RatingService(db_session)
        for value in values:
            reviewer = Profile(user_id=f"identity-{uuid.uuid4()}", full_name="Reviewer")
            db_session.add(reviewer)
            db_session.commit()
            service.submit_rating(caller_for(reviewer), {"vendor_id": vendor.id, "rating": value})

        db_session.refresh(vendor)
        assert (vendor.average_rating, vendor.total_ratings) == compute_aggregate(values)
