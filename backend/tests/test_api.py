"""
End-to-end tests through the HTTP API.
"""

import json
import uuid

from shared.security.auth import sign_identity_token
from shared.security.request_signing import create_webhook_signer
from rest_api.models import Profile, Rating
from tests.conftest import auth_headers_for


def _signed(body: dict) -> tuple[bytes, dict[str, str]]:
    raw = json.dumps(body).encode()
    headers = create_webhook_signer().get_headers(raw)
    headers["Content-Type"] = "application/json"
    return raw, headers


class TestAuthentication:

    def test_write_without_token_is_401(self, client, vendor):
        response = client.post("/api/ratings", json={"vendor_id": str(vendor.id), "rating": 4})
        assert response.status_code == 401
        assert response.json()["error"] == "authentication_error"

    def test_garbage_token_is_401(self, client):
        response = client.get("/api/profiles/me", headers={"Authorization": "Bearer not-a-jwt"})
        assert response.status_code == 401

    def test_expired_token_is_401(self, client):
        token = sign_identity_token("identity-late", ttl_seconds=-3600)
        response = client.get("/api/profiles/me", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 401
        assert response.json()["detail"] == "Token has expired"

    def test_first_request_provisions_profile(self, client, db_session):
        response = client.get("/api/profiles/me", headers=auth_headers_for("identity-fresh", "Meena"))

        assert response.status_code == 200
        data = response.json()
        assert data["profile"]["full_name"] == "Meena"
        assert data["profile"]["role"] == "consumer"
        assert data["activity"] == {"complaints_filed": 0, "ratings_given": 0, "vendors_owned": 0}
        assert db_session.query(Profile).filter(Profile.user_id == "identity-fresh").count() == 1


class TestPublicReads:

    def test_vendor_listing_is_public(self, client, vendor):
        response = client.get("/api/vendors")
        assert response.status_code == 200
        data = response.json()
        assert [v["id"] for v in data] == [str(vendor.id)]
        assert data[0]["average_rating"] == 0.0
        assert data[0]["total_ratings"] == 0

    def test_area_listing_is_public(self, client, area):
        response = client.get("/api/areas")
        assert response.status_code == 200
        assert response.json()[0]["name"] == "Benz Circle"

    def test_complaints_need_identity(self, client, area, consumer):
        client.post(
            "/api/complaints",
            json={"area_id": str(area.id), "category": "other", "title": "Noise", "description": "Loud"},
            headers=auth_headers_for(consumer.user_id),
        )
        assert client.get("/api/complaints").status_code == 401
        mine = client.get("/api/complaints", headers=auth_headers_for(consumer.user_id))
        assert [c["title"] for c in mine.json()] == ["Noise"]


class TestRatingsApi:

    def test_duplicate_returns_existing_id(self, client, vendor, consumer, db_session):
        headers = auth_headers_for(consumer.user_id)
        first = client.post("/api/ratings", json={"vendor_id": str(vendor.id), "rating": 4}, headers=headers)
        assert first.status_code == 201

        second = client.post("/api/ratings", json={"vendor_id": str(vendor.id), "rating": 1}, headers=headers)

        assert second.status_code == 409
        body = second.json()
        assert body["error"] == "duplicate_rating"
        assert body["existing_rating_id"] == first.json()["id"]
        assert db_session.query(Rating).count() == 1

        vendor_body = client.get(f"/api/vendors/{vendor.id}").json()
        assert vendor_body["average_rating"] == 4.0
        assert vendor_body["total_ratings"] == 1

    def test_out_of_range_is_400_with_field(self, client, vendor, consumer):
        response = client.post(
            "/api/ratings",
            json={"vendor_id": str(vendor.id), "rating": 6},
            headers=auth_headers_for(consumer.user_id),
        )
        assert response.status_code == 400
        assert response.json() == {
            "detail": "rating must be between 1 and 5",
            "error": "validation_error",
            "field": "rating",
        }

    def test_derived_fields_rejected_by_schema(self, client, vendor, vendor_owner):
        response = client.patch(
            f"/api/vendors/{vendor.id}",
            json={"average_rating": 5.0},
            headers=auth_headers_for(vendor_owner.user_id),
        )
        assert response.status_code == 422
        assert response.json()["field"] == "average_rating"

    def test_foreign_edit_is_403(self, client, vendor, consumer, other_consumer):
        created = client.post(
            "/api/ratings",
            json={"vendor_id": str(vendor.id), "rating": 4},
            headers=auth_headers_for(consumer.user_id),
        ).json()

        response = client.patch(
            f"/api/ratings/{created['id']}",
            json={"rating": 1},
            headers=auth_headers_for(other_consumer.user_id),
        )

        assert response.status_code == 403
        assert response.json()["detail"] == "Access denied"

    def test_unknown_rating_is_404(self, client, consumer):
        response = client.delete(f"/api/ratings/{uuid.uuid4()}", headers=auth_headers_for(consumer.user_id))
        assert response.status_code == 404
        assert response.json()["error"] == "not_found"


class TestComplaintsApi:

    def test_file_and_resolve(self, client, area, consumer, authority):
        filed = client.post(
            "/api/complaints",
            json={
                "area_id": str(area.id),
                "category": "hygiene",
                "title": "Uncovered food",
                "description": "Snacks left uncovered",
                "priority": 2,
            },
            headers=auth_headers_for(consumer.user_id),
        )
        assert filed.status_code == 201
        complaint_id = filed.json()["id"]
        assert filed.json()["status"] == "pending"

        denied = client.patch(
            f"/api/complaints/{complaint_id}",
            json={"status": "resolved"},
            headers=auth_headers_for(consumer.user_id),
        )
        assert denied.status_code == 403

        assigned = client.put(
            f"/api/complaints/{complaint_id}/assignee",
            json={"assigned_to": str(authority.id)},
            headers=auth_headers_for(authority.user_id),
        )
        assert assigned.status_code == 200
        assert assigned.json()["assigned_to"] == str(authority.id)

        resolved = client.patch(
            f"/api/complaints/{complaint_id}",
            json={"status": "resolved", "resolution_notes": "Vendor warned"},
            headers=auth_headers_for(authority.user_id),
        )
        assert resolved.status_code == 200
        assert resolved.json()["resolved_at"] is not None

    def test_outsider_read_is_403(self, client, area, consumer, other_consumer):
        filed = client.post(
            "/api/complaints",
            json={"area_id": str(area.id), "category": "pricing", "title": "Overcharge", "description": "Rs 40"},
            headers=auth_headers_for(consumer.user_id),
        ).json()

        response = client.get(f"/api/complaints/{filed['id']}", headers=auth_headers_for(other_consumer.user_id))
        assert response.status_code == 403


class TestProfilesApi:

    def test_self_promotion_is_403(self, client, consumer):
        response = client.patch(
            f"/api/profiles/{consumer.id}",
            json={"role": "admin"},
            headers=auth_headers_for(consumer.user_id),
        )
        assert response.status_code == 403

    def test_admin_sets_role(self, client, consumer, admin):
        response = client.put(
            f"/api/profiles/{consumer.id}/role",
            json={"role": "authority"},
            headers=auth_headers_for(admin.user_id),
        )
        assert response.status_code == 200
        assert response.json()["role"] == "authority"

    def test_unknown_role_is_422(self, client, consumer, admin):
        response = client.put(
            f"/api/profiles/{consumer.id}/role",
            json={"role": "superuser"},
            headers=auth_headers_for(admin.user_id),
        )
        assert response.status_code == 422


class TestIdentityWebhook:

    def test_user_created_provisions(self, client, db_session):
        raw, headers = _signed(
            {"type": "user.created", "user": {"id": "identity-hook", "user_metadata": {"full_name": "Hook User"}}}
        )

        response = client.post("/api/identity/events", content=raw, headers=headers)

        assert response.status_code == 200
        assert response.json()["provisioned"] is True
        profile = db_session.query(Profile).filter(Profile.user_id == "identity-hook").one()
        assert profile.full_name == "Hook User"
        assert profile.role == "consumer"

        repeat = client.post("/api/identity/events", content=raw, headers=headers)
        assert repeat.json()["profile_id"] == str(profile.id)
        assert db_session.query(Profile).count() == 1

    def test_user_deleted_removes_profile(self, client, consumer, db_session):
        raw, headers = _signed({"type": "user.deleted", "user": {"id": consumer.user_id}})

        response = client.post("/api/identity/events", content=raw, headers=headers)

        assert response.status_code == 200
        assert response.json()["deleted"] is True
        assert db_session.get(Profile, consumer.id) is None

    def test_bad_signature_is_401(self, client, db_session):
        raw, headers = _signed({"type": "user.created", "user": {"id": "identity-forged"}})
        headers["X-Signature"] = "0" * 64

        response = client.post("/api/identity/events", content=raw, headers=headers)

        assert response.status_code == 401
        assert db_session.query(Profile).count() == 0

    def test_unknown_event_is_ignored(self, client):
        raw, headers = _signed({"type": "user.updated", "user": {"id": "identity-x"}})
        response = client.post("/api/identity/events", content=raw, headers=headers)
        assert response.status_code == 200
        assert response.json()["provisioned"] is False


class TestStatsApi:

    def test_dashboard(self, client, vendor, consumer, area):
        headers = auth_headers_for(consumer.user_id)
        client.post("/api/ratings", json={"vendor_id": str(vendor.id), "rating": 5}, headers=headers)
        client.post(
            "/api/complaints",
            json={"area_id": str(area.id), "category": "other", "title": "Crowding", "description": "Crowded lane"},
            headers=headers,
        )

        data = client.get("/api/stats/dashboard").json()

        assert data["total_complaints"] == 1
        assert data["pending_complaints"] == 1
        assert data["total_vendors"] == 1
        assert data["total_ratings"] == 1
        assert data["average_rating"] == 5.0
