"""
Tests for the row-level policy matrix.

Policies are evaluated against transient model instances; no database is
needed.
"""

import uuid

import pytest

from shared.config.constants import Roles
from shared.security.auth import CallerIdentity
from shared.utils.exceptions import AuthenticationError, AuthorizationError
from rest_api.models import Area, Complaint, Profile, Rating, Vendor
from rest_api.services.permissions import Action, PermissionContext, get_policy


def _profile(role: str = Roles.CONSUMER) -> Profile:
    return Profile(id=uuid.uuid4(), user_id=f"identity-{uuid.uuid4()}", full_name="Someone", role=role)


def _ctx(profile: Profile) -> PermissionContext:
    return PermissionContext(CallerIdentity(id=profile.user_id), profile)


@pytest.fixture
def people():
    return {role: _profile(role) for role in Roles.ALL}


class TestAnonymous:

    @pytest.mark.parametrize("model", [Area, Profile, Vendor, Rating])
    def test_public_tables_readable(self, model):
        assert PermissionContext.anonymous().can(Action.READ, model.__tablename__, model())

    def test_complaints_not_readable(self):
        complaint = Complaint(complainant_id=uuid.uuid4())
        assert not PermissionContext.anonymous().can(Action.READ, complaint)

    def test_writes_need_identity(self):
        with pytest.raises(AuthenticationError):
            PermissionContext.anonymous().authorize(Action.CREATE, Rating(reviewer_id=uuid.uuid4()))


class TestAreaPolicy:

    def test_only_admin_writes(self, people):
        area = Area()
        for role, profile in people.items():
            for action in (Action.CREATE, Action.UPDATE, Action.DELETE):
                assert _ctx(profile).can(action, area) is (role == Roles.ADMIN)


class TestProfilePolicy:

    def test_insert_own_row_only(self, people):
        identity = CallerIdentity(id="identity-self")
        ctx = PermissionContext(identity, None)
        assert ctx.can(Action.CREATE, Profile(user_id="identity-self"))
        assert not ctx.can(Action.CREATE, Profile(user_id="identity-other"))

    def test_role_field_admin_only(self, people):
        me = people[Roles.CONSUMER]
        policy = get_policy(Profile)
        assert policy.can_write_fields(_ctx(me), me, {"full_name", "phone"})
        assert not policy.can_write_fields(_ctx(me), me, {"role"})
        assert policy.can_write_fields(_ctx(people[Roles.ADMIN]), me, {"role", "is_verified"})

    def test_authorize_fields_raises(self, people):
        me = people[Roles.CONSUMER]
        with pytest.raises(AuthorizationError):
            _ctx(me).authorize_fields(me, me, ["is_verified"])


class TestVendorPolicy:

    def test_owner_edits_owner_or_admin_deletes(self, people):
        owner = people[Roles.VENDOR]
        vendor = Vendor(profile_id=owner.id)
        assert _ctx(owner).can(Action.UPDATE, vendor)
        assert not _ctx(people[Roles.ADMIN]).can(Action.UPDATE, vendor)
        assert _ctx(owner).can(Action.DELETE, vendor)
        assert _ctx(people[Roles.ADMIN]).can(Action.DELETE, vendor)
        assert not _ctx(people[Roles.AUTHORITY]).can(Action.UPDATE, vendor)
        assert not _ctx(people[Roles.CONSUMER]).can(Action.CREATE, vendor)


class TestComplaintPolicy:

    def test_matrix(self, people):
        complainant = people[Roles.CONSUMER]
        assignee = _profile(Roles.AUTHORITY)
        outsider = _profile(Roles.CONSUMER)
        complaint = Complaint(complainant_id=complainant.id, assigned_to=assignee.id)

        for profile in (complainant, assignee, people[Roles.AUTHORITY], people[Roles.ADMIN]):
            assert _ctx(profile).can(Action.READ, complaint)
            assert _ctx(profile).can(Action.UPDATE, complaint)
        for profile in (outsider, people[Roles.VENDOR]):
            assert not _ctx(profile).can(Action.READ, complaint)
            assert not _ctx(profile).can(Action.UPDATE, complaint)

        assert _ctx(complainant).can(Action.DELETE, complaint)
        assert _ctx(people[Roles.ADMIN]).can(Action.DELETE, complaint)
        assert not _ctx(assignee).can(Action.DELETE, complaint)

    def test_assignment_without_role_is_read_only(self, people):
        demoted = _profile(Roles.CONSUMER)
        complaint = Complaint(complainant_id=people[Roles.CONSUMER].id, assigned_to=demoted.id)
        policy = get_policy(Complaint)

        assert _ctx(demoted).can(Action.READ, complaint)
        assert not _ctx(demoted).can(Action.UPDATE, complaint)
        assert not policy.can_write_fields(_ctx(demoted), complaint, {"status"})

    def test_workflow_fields(self, people):
        complainant = people[Roles.CONSUMER]
        complaint = Complaint(complainant_id=complainant.id)
        policy = get_policy(Complaint)

        assert policy.can_write_fields(_ctx(complainant), complaint, {"title", "description"})
        assert not policy.can_write_fields(_ctx(complainant), complaint, {"status"})
        assert policy.can_write_fields(_ctx(people[Roles.AUTHORITY]), complaint, {"status", "assigned_to"})


class TestRatingPolicy:

    def test_update_owner_only_delete_owner_or_admin(self, people):
        reviewer = people[Roles.CONSUMER]
        rating = Rating(reviewer_id=reviewer.id)

        assert _ctx(reviewer).can(Action.UPDATE, rating)
        assert not _ctx(people[Roles.ADMIN]).can(Action.UPDATE, rating)
        assert _ctx(people[Roles.ADMIN]).can(Action.DELETE, rating)
        assert not _ctx(people[Roles.AUTHORITY]).can(Action.DELETE, rating)


class TestPolicyRegistry:

    @pytest.mark.parametrize("table", ["areas", "profiles", "vendors", "complaints", "ratings"])
    def test_every_table_has_policy(self, table):
        assert get_policy(table).table_name == table
