"""
Tests for updated_at maintenance and the resolved_at listener.
"""

from datetime import datetime, timezone

from rest_api.models import Complaint
from rest_api.services.domain import ProfileService
from tests.conftest import caller_for


OLD = datetime(2000, 1, 1, tzinfo=timezone.utc)


class TestUpdatedAt:

    def test_set_on_insert(self, consumer):
        assert consumer.created_at is not None
        assert consumer.updated_at is not None

    def test_refreshed_on_update(self, db_session, consumer):
        before = consumer.updated_at

        ProfileService(db_session).update_profile(caller_for(consumer), consumer.id, {"full_name": "New Name"})

        assert consumer.updated_at >= before
        assert consumer.created_at <= consumer.updated_at

    def test_caller_value_overridden(self, db_session, consumer):
        consumer.full_name = "Changed"
        consumer.updated_at = OLD
        db_session.commit()

        db_session.refresh(consumer)
        assert consumer.updated_at.replace(tzinfo=None) > OLD.replace(tzinfo=None)


class TestResolvedAtListener:

    def test_direct_status_write_sets_and_clears(self, db_session, consumer, area):
        complaint = Complaint(
            complainant_id=consumer.id,
            area_id=area.id,
            category="other",
            title="Direct write",
            description="Bypassing the service",
        )
        db_session.add(complaint)
        db_session.commit()
        assert complaint.resolved_at is None

        complaint.status = "resolved"
        db_session.commit()
        assert complaint.resolved_at is not None

        complaint.status = "investigating"
        db_session.commit()
        assert complaint.resolved_at is None

    def test_resolved_at_ignored_while_open(self, db_session, consumer, area):
        complaint = Complaint(
            complainant_id=consumer.id,
            area_id=area.id,
            category="other",
            title="Early timestamp",
            description="Sets resolved_at on a pending complaint",
            resolved_at=OLD,
        )
        db_session.add(complaint)
        db_session.commit()

        assert complaint.resolved_at is None
