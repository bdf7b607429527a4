"""Tests for customer registration."""

from conftest import count_rows, make_order_request
from veggie_shop.models import User
from veggie_shop.services.order_service import OrderService

REGISTRATION = {
    "email": "asha.patil@example.com",
    "first_name": "Asha",
    "last_name": "Patil",
    "phone": "+91 98200 12345",
}


class TestRegisterEndpoint:
    def test_register_user(self, client, seeded_db):
        response = client.post("/api/users", json=REGISTRATION)

        assert response.status_code == 201
        data = response.json()
        assert data["email"] == "asha.patil@example.com"
        assert data["first_name"] == "Asha"
        assert seeded_db.get(User, data["id"]).phone == "+91 98200 12345"

    def test_phone_is_optional(self, client):
        body = {k: v for k, v in REGISTRATION.items() if k != "phone"}

        response = client.post("/api/users", json=body)

        assert response.status_code == 201
        assert response.json()["phone"] is None

    def test_names_are_trimmed(self, client):
        response = client.post("/api/users", json=dict(REGISTRATION, first_name="  Asha "))

        assert response.json()["first_name"] == "Asha"

    def test_duplicate_email_is_a_conflict(self, client, seeded_db):
        client.post("/api/users", json=REGISTRATION)

        response = client.post("/api/users", json=dict(REGISTRATION, email="Asha.Patil@Example.com"))

        assert response.status_code == 409
        assert response.json()["detail"] == "Email 'asha.patil@example.com' is already registered"
        assert seeded_db.query(User).filter(User.email == "asha.patil@example.com").count() == 1

    def test_invalid_email(self, client):
        response = client.post("/api/users", json=dict(REGISTRATION, email="not-an-email"))

        assert response.status_code == 422

    def test_blank_name(self, client):
        response = client.post("/api/users", json=dict(REGISTRATION, last_name="   "))

        assert response.status_code == 422


class TestCurrentUserEndpoint:
    def test_get_me(self, client, customer):
        response = client.get("/api/users/me", headers={"X-User-Id": str(customer.id)})

        assert response.status_code == 200
        assert response.json()["email"] == customer.email

    def test_get_me_unknown_user(self, client):
        response = client.get("/api/users/me", headers={"X-User-Id": "999"})

        assert response.status_code == 404

    def test_get_me_without_identity(self, client):
        assert client.get("/api/users/me").status_code == 401


def test_registered_user_can_place_order(client, seeded_db, publisher):
    user_id = client.post("/api/users", json=REGISTRATION).json()["id"]

    order = OrderService(seeded_db, event_publisher=publisher).create_order(
        user_id, make_order_request([(2, 1)])
    )

    assert order.user_id == user_id
    assert count_rows(seeded_db) == (1, 1)
