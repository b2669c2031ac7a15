"""
Tests for ProfileService: provisioning, role changes and cascading deletion.
"""

import pytest
from sqlalchemy import select

from shared.config.constants import Roles
from shared.security.auth import CallerIdentity
from shared.utils.exceptions import AuthorizationError, ConflictError, ProfileNotFoundError
from rest_api.models import Complaint, Profile, Rating, Vendor
from rest_api.services.domain import ComplaintService, ProfileService, RatingService
from rest_api.services.domain.profile_service import display_name
from rest_api.services.permissions import PermissionContext
from tests.conftest import caller_for


class TestProvisioning:

    def test_creates_consumer_profile(self, db_session):
        identity = CallerIdentity(id="identity-new", phone="+919000000001", full_name="Sita Devi")

        profile, created = ProfileService(db_session).provision(identity)

        assert created is True
        assert profile.user_id == "identity-new"
        assert profile.full_name == "Sita Devi"
        assert profile.phone == "+919000000001"
        assert profile.role == Roles.CONSUMER
        assert profile.area_id is None
        assert profile.is_verified is False

    @pytest.mark.parametrize("full_name", [None, "", "   "])
    def test_falls_back_to_default_name(self, db_session, full_name):
        profile, _ = ProfileService(db_session).provision(CallerIdentity(id="identity-anon", full_name=full_name))
        assert profile.full_name == "User"

    def test_is_idempotent(self, db_session):
        service = ProfileService(db_session)
        identity = CallerIdentity(id="identity-twice", full_name="First Name")

        first, created_first = service.provision(identity)
        second, created_second = service.provision(CallerIdentity(id="identity-twice", full_name="Other Name"))

        assert (created_first, created_second) == (True, False)
        assert first.id == second.id
        assert second.full_name == "First Name"
        assert db_session.scalar(
            select(Profile.id).where(Profile.user_id == "identity-twice")
        ) == first.id
        assert db_session.query(Profile).count() == 1

    def test_display_name_trims(self):
        assert display_name(CallerIdentity(id="x", full_name="  Kiran  ")) == "Kiran"


class TestCreateProfile:

    def test_existing_profile_conflicts(self, db_session, consumer):
        with pytest.raises(ConflictError):
            ProfileService(db_session).create_profile(caller_for(consumer), {"full_name": "Again"})

    def test_creates_own_profile(self, db_session, area):
        caller = PermissionContext(CallerIdentity(id="identity-explicit"), None)

        profile = ProfileService(db_session).create_profile(
            caller, {"full_name": "Explicit Person", "area_id": area.id}
        )

        assert profile.user_id == "identity-explicit"
        assert profile.area_id == area.id
        assert profile.role == Roles.CONSUMER


class TestUpdateProfile:

    def test_owner_edits_contact_details(self, db_session, consumer, area):
        updated = ProfileService(db_session).update_profile(
            caller_for(consumer), consumer.id, {"phone": "+919811111111", "area_id": area.id}
        )
        assert updated.phone == "+919811111111"
        assert updated.area_id == area.id

    def test_owner_cannot_change_own_role(self, db_session, consumer):
        with pytest.raises(AuthorizationError):
            ProfileService(db_session).update_profile(caller_for(consumer), consumer.id, {"role": "admin"})
        db_session.refresh(consumer)
        assert consumer.role == Roles.CONSUMER

    def test_owner_cannot_verify_self(self, db_session, consumer):
        with pytest.raises(AuthorizationError):
            ProfileService(db_session).update_profile(caller_for(consumer), consumer.id, {"is_verified": True})

    def test_admin_sets_role(self, db_session, consumer, admin):
        updated = ProfileService(db_session).set_role(caller_for(admin), consumer.id, Roles.AUTHORITY)
        assert updated.role == Roles.AUTHORITY

    def test_other_consumer_denied(self, db_session, consumer, other_consumer):
        with pytest.raises(AuthorizationError):
            ProfileService(db_session).update_profile(
                caller_for(other_consumer), consumer.id, {"full_name": "Renamed"}
            )


class TestMe:

    def test_activity_counts(self, db_session, vendor, vendor_owner, consumer, area):
        RatingService(db_session).submit_rating(caller_for(consumer), {"vendor_id": vendor.id, "rating": 4})
        ComplaintService(db_session).file_complaint(
            caller_for(consumer),
            {"area_id": area.id, "category": "pricing", "title": "Overpriced", "description": "Rs 50 for tea"},
        )

        profile, counts = ProfileService(db_session).get_me(caller_for(consumer))

        assert profile.id == consumer.id
        assert counts == {"complaints_filed": 1, "ratings_given": 1, "vendors_owned": 0}
        assert ProfileService(db_session).activity_counts(vendor_owner.id)["vendors_owned"] == 1


class TestDeleteProfile:

    def test_cascades(self, db_session, vendor, vendor_owner, consumer, authority, area):
        """Deleting a vendor owner removes vendors and their ratings; complaints keep a null vendor."""
        RatingService(db_session).submit_rating(caller_for(consumer), {"vendor_id": vendor.id, "rating": 3})
        complaint = ComplaintService(db_session).file_complaint(
            caller_for(consumer),
            {
                "area_id": area.id,
                "vendor_id": vendor.id,
                "category": "hygiene",
                "title": "Dirty plates",
                "description": "Plates reused without washing",
            },
        )
        owned_complaint = ComplaintService(db_session).file_complaint(
            caller_for(vendor_owner),
            {"area_id": area.id, "category": "other", "title": "Stall damaged", "description": "Cart hit"},
        )
        ComplaintService(db_session).assign_complaint(caller_for(authority), owned_complaint.id, authority.id)

        ProfileService(db_session).delete_profile(caller_for(vendor_owner), vendor_owner.id)

        assert db_session.get(Profile, vendor_owner.id) is None
        assert db_session.query(Vendor).count() == 0
        assert db_session.query(Rating).count() == 0
        remaining = db_session.scalars(select(Complaint)).all()
        assert [c.id for c in remaining] == [complaint.id]
        db_session.refresh(remaining[0])
        assert remaining[0].vendor_id is None

    def test_assigned_complaints_become_unassigned(self, db_session, consumer, authority, admin, area):
        complaint = ComplaintService(db_session).file_complaint(
            caller_for(consumer),
            {"area_id": area.id, "category": "other", "title": "Blocked lane", "description": "Carts block lane"},
        )
        ComplaintService(db_session).assign_complaint(caller_for(admin), complaint.id, authority.id)

        ProfileService(db_session).delete_profile(caller_for(admin), authority.id)

        db_session.refresh(complaint)
        assert complaint.assigned_to is None

    def test_delete_for_identity(self, db_session, consumer):
        service = ProfileService(db_session)

        assert service.delete_for_identity(consumer.user_id) is True
        assert service.delete_for_identity(consumer.user_id) is False
        with pytest.raises(ProfileNotFoundError):
            service.get_profile(consumer.id)

    def test_other_consumer_cannot_delete(self, db_session, consumer, other_consumer):
        with pytest.raises(AuthorizationError):
            ProfileService(db_session).delete_profile(caller_for(other_consumer), consumer.id)
