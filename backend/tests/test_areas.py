"""
Tests for AreaService and the area seed.
"""

import pytest

from shared.config.constants import DEFAULT_AREA_STATE
from shared.utils.exceptions import AuthorizationError, ConflictError, NotFoundError, ValidationError
from rest_api.models import Area
from rest_api.seed import SEED_AREAS, seed_areas
from rest_api.services.domain import AreaService
from tests.conftest import caller_for


class TestAreaAdministration:

    def test_admin_creates_with_default_state(self, db_session, admin):
        area = AreaService(db_session).create_area(
            caller_for(admin), {"name": "Governorpet", "district": "NTR"}
        )
        assert area.state == DEFAULT_AREA_STATE
        assert area.pincode is None

    @pytest.mark.parametrize("role_fixture", ["consumer", "vendor_owner", "authority"])
    def test_non_admin_cannot_create(self, request, db_session, role_fixture):
        caller = caller_for(request.getfixturevalue(role_fixture))
        with pytest.raises(AuthorizationError):
            AreaService(db_session).create_area(caller, {"name": "Governorpet", "district": "NTR"})
        assert db_session.query(Area).count() == 0

    def test_requires_name(self, db_session, admin):
        with pytest.raises(ValidationError) as exc_info:
            AreaService(db_session).create_area(caller_for(admin), {"name": " ", "district": "NTR"})
        assert exc_info.value.field == "name"

    def test_unreferenced_area_can_change(self, db_session, area, admin):
        service = AreaService(db_session)
        service.update_area(caller_for(admin), area.id, {"pincode": "520011"})
        assert area.pincode == "520011"

        service.delete_area(caller_for(admin), area.id)
        with pytest.raises(NotFoundError):
            service.get_area(area.id)

    def test_referenced_area_is_locked(self, db_session, area, vendor, admin):
        service = AreaService(db_session)

        with pytest.raises(ConflictError):
            service.update_area(caller_for(admin), area.id, {"name": "Renamed"})
        with pytest.raises(ConflictError):
            service.delete_area(caller_for(admin), area.id)

        db_session.refresh(area)
        assert area.name == "Benz Circle"

    def test_list_search(self, db_session, area, other_area):
        assert [a.id for a in AreaService(db_session).list_areas(search="beach")] == [other_area.id]


class TestSeedAreas:

    def test_seed_is_idempotent(self, db_session):
        assert seed_areas(db_session) == len(SEED_AREAS)
        db_session.commit()
        assert seed_areas(db_session) == 0
        assert db_session.query(Area).count() == len(SEED_AREAS)
