"""
End-to-end tests of the HTTP API through FastAPI's TestClient.
"""

import pytest

from franchise_hub_api.app.core.config import settings
from franchise_hub_api.app.core.store import reset_store

from conftest import auth_headers


FRANCHISE_BODY = {
    "name": "Chai Point",
    "description": "Tea and snacks kiosk",
    "category": "FOOD_BEVERAGE",
    "franchise_fee": 1000000,
    "initial_investment": {"min": 500000, "max": 1500000},
}

APPLICATION_PERSONAL_INFO = {"first_name": "Asha", "last_name": "Verma", "email": "asha@example.com"}


def _create_franchise(client, headers):
    response = client.post("/api/v1/franchises/", json=FRANCHISE_BODY, headers=headers)
    assert response.status_code == 201
    return response.json()


def _apply(client, headers, franchise_id):
    response = client.post(
        "/api/v1/applications/",
        json={"franchise_id": franchise_id, "personal_info": APPLICATION_PERSONAL_INFO},
        headers=headers,
    )
    assert response.status_code == 201
    return response.json()


class TestAuth:
    def test_login_with_demo_account(self, client):
        response = client.post(
            "/api/v1/auth/login", json={"email": "business@demo.com", "password": "password123"}
        )

        assert response.status_code == 200
        body = response.json()
        assert body["token_type"] == "bearer"
        assert body["user"]["role"] == "BUSINESS"
        assert "password_hash" not in body["user"]

    def test_wrong_password(self, client):
        response = client.post("/api/v1/auth/login", json={"email": "business@demo.com", "password": "nope"})
        assert response.status_code == 401

    def test_register_then_me(self, client):
        response = client.post(
            "/api/v1/auth/register",
            json={"email": "new@example.com", "first_name": "New", "role": "PARTNER", "password": "secret1"},
        )
        assert response.status_code == 201
        token = response.json()["access_token"]

        me = client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {token}"})
        assert me.status_code == 200
        assert me.json()["email"] == "new@example.com"

    def test_duplicate_registration(self, client):
        response = client.post(
            "/api/v1/auth/register",
            json={"email": "partner@demo.com", "first_name": "Dup", "role": "PARTNER", "password": "secret1"},
        )
        assert response.status_code == 400

    def test_missing_and_unknown_tokens(self, client):
        assert client.get("/api/v1/auth/me").status_code == 401
        assert client.get("/api/v1/auth/me", headers=auth_headers("ghost@example.com")).status_code == 401
        bad = {"Authorization": "Bearer not.a.token"}
        assert client.get("/api/v1/auth/me", headers=bad).status_code == 401


class TestFranchises:
    def test_public_listing_and_lookup(self, client, business_headers):
        created = _create_franchise(client, business_headers)

        assert [f["id"] for f in client.get("/api/v1/franchises/").json()] == [created["id"]]
        assert client.get(f"/api/v1/franchises/{created['id']}").json()["name"] == "Chai Point"
        assert client.get("/api/v1/franchises/missing").status_code == 404
        assert len(client.get("/api/v1/franchises/search", params={"query": "tea"}).json()) == 1

    def test_partner_cannot_create(self, client, partner_headers):
        response = client.post("/api/v1/franchises/", json=FRANCHISE_BODY, headers=partner_headers)
        assert response.status_code == 403

    def test_owner_checks(self, client, business_headers):
        created = _create_franchise(client, business_headers)
        client.post(
            "/api/v1/auth/register",
            json={"email": "rival@example.com", "first_name": "Rival", "role": "BUSINESS", "password": "secret1"},
        )
        rival = auth_headers("rival@example.com")

        response = client.patch(f"/api/v1/franchises/{created['id']}", json={"name": "Mine"}, headers=rival)
        assert response.status_code == 403

        response = client.patch(
            f"/api/v1/franchises/{created['id']}/status", json={"is_active": False}, headers=business_headers
        )
        assert response.json()["status"] == "INACTIVE"

        response = client.delete(f"/api/v1/franchises/{created['id']}", headers=business_headers)
        assert response.status_code == 204

    def test_null_name_is_rejected(self, client, business_headers):
        created = _create_franchise(client, business_headers)

        response = client.patch(f"/api/v1/franchises/{created['id']}", json={"name": None}, headers=business_headers)
        assert response.status_code == 400

        reset_store()
        assert client.get(f"/api/v1/franchises/{created['id']}").json()["name"] == "Chai Point"


def test_naive_due_date_then_mark_overdue(client, business_headers, partner_headers):
    franchise = _create_franchise(client, business_headers)
    app_id = _apply(client, partner_headers, franchise["id"])["id"]
    request_id = client.post(
        f"/api/v1/applications/{app_id}/payment-requests",
        json={"amount": 25000, "purpose": "Initial inventory"},
        headers=business_headers,
    ).json()["id"]

    response = client.patch(
        f"/api/v1/payments/requests/{request_id}", json={"due_date": "2024-01-01T00:00:00"}, headers=business_headers
    )
    assert response.status_code == 200
    assert response.json()["due_date"] == "2024-01-01T00:00:00Z"

    response = client.post("/api/v1/payments/requests/mark-overdue", headers=business_headers)
    assert response.status_code == 200
    assert [(r["id"], r["status"]) for r in response.json()] == [(request_id, "OVERDUE")]


def test_application_lifecycle(client, business_headers, partner_headers):
    franchise = _create_franchise(client, business_headers)
    application = _apply(client, partner_headers, franchise["id"])
    app_id = application["id"]
    assert application["application_fee"] == 6000

    response = client.post(
        f"/api/v1/applications/{app_id}/payment",
        json={"payment_method": "UPI", "upi_id": "asha@okbank"},
        headers=partner_headers,
    )
    assert response.status_code == 201
    assert response.json()["status"] == "COMPLETED"

    again = client.post(f"/api/v1/applications/{app_id}/payment", headers=partner_headers)
    assert again.status_code == 400

    response = client.post(
        f"/api/v1/applications/{app_id}/approve", json={"notes": "Welcome"}, headers=business_headers
    )
    assert response.json()["status"] == "APPROVED"

    timeline = client.get(f"/api/v1/applications/{app_id}/timeline", headers=partner_headers).json()
    assert [e["status"] for e in timeline] == ["SUBMITTED", "UNDER_REVIEW", "APPROVED"]

    unread = client.get("/api/v1/notifications/unread-count", headers=partner_headers).json()
    assert unread == {"count": 1}

    response = client.post(
        f"/api/v1/applications/{app_id}/payment-requests",
        json={"amount": 25000, "purpose": "Initial inventory"},
        headers=business_headers,
    )
    assert response.status_code == 201
    request_id = response.json()["id"]

    response = client.post(
        "/api/v1/payments/settlement", json={"payment_request_ids": [request_id]}, headers=partner_headers
    )
    assert response.status_code == 200
    assert [t["amount"] for t in response.json()] == [25000]

    partnerships = client.get("/api/v1/partnerships/", headers=partner_headers).json()
    assert partnerships[0]["total_investment"] == 31000

    stats = client.get("/api/v1/dashboard/stats", headers=business_headers).json()
    assert stats["total_revenue"] == 31000

    response = client.post(
        f"/api/v1/applications/{app_id}/deactivate",
        json={"reason": "MUTUAL_AGREEMENT"},
        headers=business_headers,
    )
    assert response.json()["status"] == "DEACTIVATED"


def test_applications_are_scoped_to_parties(client, business_headers, partner_headers):
    franchise = _create_franchise(client, business_headers)
    application = _apply(client, partner_headers, franchise["id"])
    client.post(
        "/api/v1/auth/register",
        json={"email": "other@example.com", "first_name": "Other", "role": "PARTNER", "password": "secret1"},
    )
    stranger = auth_headers("other@example.com")

    assert client.get(f"/api/v1/applications/{application['id']}", headers=stranger).status_code == 403
    assert client.get("/api/v1/applications/", headers=stranger).json() == []
    assert len(client.get("/api/v1/applications/", headers=business_headers).json()) == 1
    assert client.get("/api/v1/applications/missing", headers=partner_headers).status_code == 404


def test_reject_with_reason_opens_refund(client, business_headers, partner_headers):
    franchise = _create_franchise(client, business_headers)
    app_id = _apply(client, partner_headers, franchise["id"])["id"]
    client.post(f"/api/v1/applications/{app_id}/payment", headers=partner_headers)

    response = client.post(
        f"/api/v1/applications/{app_id}/reject", json={"reason": "Territory taken"}, headers=business_headers
    )
    assert response.json()["rejection_reason"] == "Territory taken"

    refunds = client.get("/api/v1/payments/refunds", headers=business_headers).json()
    assert len(refunds) == 1
    response = client.post(f"/api/v1/payments/refunds/{refunds[0]['id']}/process", headers=business_headers)
    assert response.json()["status"] == "COMPLETED"


class TestStorageMaintenance:
    def test_counts(self, client, business_headers):
        counts = client.get("/api/v1/storage/counts", headers=business_headers).json()
        assert counts["users"] == 2

    def test_clear_requires_debug(self, client, business_headers, monkeypatch):
        assert client.delete("/api/v1/storage/", headers=business_headers).status_code == 403

        monkeypatch.setattr(settings, "debug", True)
        assert client.delete("/api/v1/storage/", headers=business_headers).status_code == 204


@pytest.mark.parametrize(
    "path",
    ["/api/v1/dashboard/revenue-chart", "/api/v1/dashboard/applications-chart", "/api/v1/applications/statistics"],
)
def test_business_only_routes(client, partner_headers, business_headers, path):
    assert client.get(path, headers=partner_headers).status_code == 403
    assert client.get(path, headers=business_headers).status_code == 200


def test_notifications_belong_to_their_recipient(client, business_headers, partner_headers):
    franchise = _create_franchise(client, business_headers)
    app_id = _apply(client, partner_headers, franchise["id"])["id"]
    client.post(f"/api/v1/applications/{app_id}/approve", headers=business_headers)

    notifications = client.get("/api/v1/notifications/", headers=partner_headers).json()
    assert len(notifications) == 1
    notification_id = notifications[0]["id"]

    assert client.post(f"/api/v1/notifications/{notification_id}/read", headers=business_headers).status_code == 403
    response = client.post(
        "/api/v1/notifications/read", json={"notification_ids": [notification_id]}, headers=business_headers
    )
    assert response.json() == {"count": 0}

    response = client.post(f"/api/v1/notifications/{notification_id}/read", headers=partner_headers)
    assert response.json()["status"] == "READ"
    assert client.delete(f"/api/v1/notifications/{notification_id}", headers=partner_headers).status_code == 204
    assert client.get("/api/v1/notifications/", headers=partner_headers).json() == []


def test_transactions_are_scoped_to_caller(client, business_headers, partner_headers):
    franchise = _create_franchise(client, business_headers)
    app_id = _apply(client, partner_headers, franchise["id"])["id"]
    client.post(f"/api/v1/applications/{app_id}/payment", headers=partner_headers)

    for headers in (business_headers, partner_headers):
        transactions = client.get("/api/v1/payments/transactions", headers=headers).json()
        assert [t["application_id"] for t in transactions] == [app_id]

    transaction_id = transactions[0]["id"]
    response = client.get(f"/api/v1/payments/transactions/{transaction_id}", headers=business_headers)
    assert response.status_code == 200
    assert client.get("/api/v1/payments/transactions/missing", headers=business_headers).status_code == 404
