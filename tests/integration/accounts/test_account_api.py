import pytest
from django.contrib.auth import get_user_model

from modules.accounts.models import Profile

pytestmark = pytest.mark.integration

REGISTER_URL = "/api/v1/register/"
ME_URL = "/api/v1/me/"
USERS_URL = "/api/v1/users/"


def _registration(**overrides):
    payload = {
        "username": "kanya",
        "email": "kanya@example.com",
        "password": "Tangy-Pomelo-2024",
        "first_name": "Kanya",
        "last_name": "Srisuk",
    }
    payload.update(overrides)
    return payload


class TestRegister:
    def test_register_returns_tokens(self, api_client):
        response = api_client.post(REGISTER_URL, _registration(), format="json")

        assert response.status_code == 201
        assert response.data["user"]["username"] == "kanya"
        assert response.data["user"]["role"] == "user"
        assert response.data["access"]
        assert response.data["refresh"]
        user = get_user_model().objects.get(username="kanya")
        assert not user.is_staff
        assert Profile.objects.filter(user=user).exists()

    def test_access_token_authenticates(self, api_client):
        tokens = api_client.post(REGISTER_URL, _registration(), format="json").data

        api_client.credentials(HTTP_AUTHORIZATION=f"Bearer {tokens['access']}")
        response = api_client.get(ME_URL)

        assert response.status_code == 200
        assert response.data["email"] == "kanya@example.com"

    def test_duplicate_email_is_409(self, api_client, customer):
        response = api_client.post(
            REGISTER_URL, _registration(email=customer.email), format="json"
        )
        assert response.status_code == 409

    def test_weak_password_is_400(self, api_client):
        response = api_client.post(
            REGISTER_URL, _registration(password="123"), format="json"
        )
        assert response.status_code == 400
        assert "password" in response.data

    def test_token_endpoint_accepts_new_account(self, api_client):
        api_client.post(REGISTER_URL, _registration(), format="json")

        response = api_client.post(
            "/api/v1/auth/token/",
            {"username": "kanya", "password": "Tangy-Pomelo-2024"},
            format="json",
        )

        assert response.status_code == 200
        assert "access" in response.data


class TestMe:
    def test_requires_authentication(self, api_client):
        assert api_client.get(ME_URL).status_code == 401

    def test_get_creates_missing_profile(self, customer_client, customer):
        response = customer_client.get(ME_URL)

        assert response.status_code == 200
        assert response.data["username"] == customer.username
        assert response.data["address"] == ""
        assert Profile.objects.filter(user=customer).exists()

    def test_patch_updates_user_and_profile(self, customer_client, customer):
        response = customer_client.patch(
            ME_URL,
            {"first_name": "Somchai", "address": "12 Silom Rd", "line_user_id": "U123"},
            format="json",
        )

        assert response.status_code == 200
        assert response.data["first_name"] == "Somchai"
        assert response.data["address"] == "12 Silom Rd"
        assert Profile.objects.get(user=customer).line_user_id == "U123"

    def test_patch_email_taken_is_409(self, customer_client, other_customer):
        response = customer_client.patch(
            ME_URL, {"email": other_customer.email}, format="json"
        )
        assert response.status_code == 409


class TestUserAdministration:
    def test_list_is_admin_only(self, customer_client, staff_client, customer):
        assert customer_client.get(USERS_URL).status_code == 403

        response = staff_client.get(USERS_URL)
        assert response.status_code == 200
        assert customer.username in {u["username"] for u in response.data["results"]}

    def test_promote_and_demote(self, staff_client, customer):
        url = f"{USERS_URL}{customer.id}/role/"

        response = staff_client.put(url, {"role": "admin"}, format="json")
        assert response.status_code == 200
        assert response.data["role"] == "admin"
        customer.refresh_from_db()
        assert customer.is_staff

        staff_client.patch(url, {"role": "user"}, format="json")
        customer.refresh_from_db()
        assert not customer.is_staff

    def test_invalid_role_is_400(self, staff_client, customer):
        response = staff_client.put(
            f"{USERS_URL}{customer.id}/role/", {"role": "owner"}, format="json"
        )

        assert response.status_code == 400
        assert response.data["detail"] == (
            'Invalid role. Role must be either "user" or "admin".'
        )

    def test_unknown_user_is_404(self, staff_client):
        response = staff_client.put(
            f"{USERS_URL}999999/role/", {"role": "admin"}, format="json"
        )
        assert response.status_code == 404

    def test_customer_cannot_change_roles(self, customer_client, customer):
        response = customer_client.put(
            f"{USERS_URL}{customer.id}/role/", {"role": "admin"}, format="json"
        )
        assert response.status_code == 403


class TestEditAndDeactivate:
    def test_owner_edits_own_account(self, customer_client, customer):
        response = customer_client.patch(
            f"{USERS_URL}{customer.id}/", {"first_name": "Somchai"}, format="json"
        )

        assert response.status_code == 200
        assert response.data["first_name"] == "Somchai"

    def test_admin_edits_another_account(self, staff_client, customer):
        response = staff_client.patch(
            f"{USERS_URL}{customer.id}/",
            {"email": "somchai.k@example.com"},
            format="json",
        )

        assert response.status_code == 200
        customer.refresh_from_db()
        assert customer.email == "somchai.k@example.com"

    def test_edit_someone_else_is_403(self, other_client, customer):
        response = other_client.patch(
            f"{USERS_URL}{customer.id}/", {"first_name": "X"}, format="json"
        )
        assert response.status_code == 403

    def test_edit_weak_password_is_400(self, customer_client, customer):
        response = customer_client.patch(
            f"{USERS_URL}{customer.id}/", {"password": "123"}, format="json"
        )
        assert response.status_code == 400

    def test_edit_email_taken_is_409(self, customer_client, customer, other_customer):
        response = customer_client.patch(
            f"{USERS_URL}{customer.id}/", {"email": other_customer.email}, format="json"
        )
        assert response.status_code == 409

    def test_owner_deactivates_own_account(self, customer_client, customer):
        response = customer_client.delete(f"{USERS_URL}{customer.id}/")

        assert response.status_code == 204
        customer.refresh_from_db()
        assert customer.is_active is False
        assert get_user_model().objects.filter(id=customer.id).exists()

    def test_admin_deactivates_account(self, staff_client, customer):
        assert staff_client.delete(f"{USERS_URL}{customer.id}/").status_code == 204
        customer.refresh_from_db()
        assert customer.is_active is False

    def test_deactivate_someone_else_is_403(self, other_client, customer):
        assert other_client.delete(f"{USERS_URL}{customer.id}/").status_code == 403

    def test_deactivate_unknown_user_is_404(self, staff_client):
        assert staff_client.delete(f"{USERS_URL}999999/").status_code == 404

    def test_deactivated_account_cannot_get_token(self, api_client, customer):
        customer.is_active = False
        customer.save()

        response = api_client.post(
            "/api/v1/auth/token/",
            {"username": "somchai", "password": "fruit-lover-123"},
            format="json",
        )
        assert response.status_code == 401
