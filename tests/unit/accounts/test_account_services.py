import pytest

from modules.accounts.dtos import EditUserDTO, RegisterUserDTO, UpdateProfileDTO
from modules.accounts.exceptions import (
    InvalidRole,
    UserAccessDenied,
    UserAlreadyExists,
    UserNotFound,
)
from modules.accounts.models import Profile, Role, role_of
from modules.accounts.repositories.django_repository import UserDjangoRepository
from modules.accounts.services import AccountService

pytestmark = pytest.mark.unit


@pytest.fixture()
def service():
    return AccountService(UserDjangoRepository())


def _register(service, **overrides):
    data = {
        "username": "nok",
        "email": "nok@example.com",
        "password": "Tangy-Pomelo-2024",
        "first_name": "Nok",
        "last_name": "Srisuk",
    }
    data.update(overrides)
    return service.register(RegisterUserDTO(**data))


class TestRegister:
    def test_creates_regular_user_with_profile(self, service):
        user = _register(service)

        assert user.check_password("Tangy-Pomelo-2024")
        assert role_of(user) == Role.USER
        assert Profile.objects.filter(user=user).exists()

    def test_duplicate_email_is_case_insensitive(self, service, customer):
        with pytest.raises(UserAlreadyExists):
            _register(service, email="SOMCHAI@example.com")

    def test_duplicate_username(self, service, customer):
        with pytest.raises(UserAlreadyExists):
            _register(service, username="somchai")


class TestProfile:
    def test_profile_created_on_first_read(self, service, customer):
        user = service.get_profile(customer.id)
        assert user.profile.line_user_id == ""

    def test_partial_update(self, service, customer):
        user = service.update_profile(
            customer.id,
            UpdateProfileDTO(phone="0812345678", line_user_id="U-abc"),
        )

        assert user.profile.phone == "0812345678"
        assert user.profile.line_user_id == "U-abc"
        assert user.email == "somchai@example.com"

    def test_email_taken_by_someone_else(self, service, customer, other_customer):
        with pytest.raises(UserAlreadyExists):
            service.update_profile(
                customer.id, UpdateProfileDTO(email="malee@example.com")
            )

    def test_keeping_own_email_is_fine(self, service, customer):
        user = service.update_profile(
            customer.id, UpdateProfileDTO(email="somchai@example.com", first_name="S")
        )
        assert user.first_name == "S"


class TestRoles:
    def test_promote_and_demote(self, service, customer):
        assert service.set_role(customer.id, "admin").is_staff is True
        assert service.set_role(customer.id, "user").is_staff is False

    def test_invalid_role(self, service, customer):
        with pytest.raises(InvalidRole):
            service.set_role(customer.id, "superuser")

    def test_unknown_user(self, service):
        with pytest.raises(UserNotFound):
            service.set_role(999, "admin")


class TestEditUser:
    def test_owner_changes_username_and_password(self, service, customer):
        user = service.edit_user(
            customer.id,
            customer,
            EditUserDTO(username="somchai.k", password="Sweet-Longan-77"),
        )

        assert user.username == "somchai.k"
        assert user.check_password("Sweet-Longan-77")
        assert user.email == "somchai@example.com"

    def test_admin_edits_anyone(self, service, customer, staff_user):
        user = service.edit_user(customer.id, staff_user, EditUserDTO(last_name="K"))
        assert user.last_name == "K"

    def test_other_customer_is_denied(self, service, customer, other_customer):
        with pytest.raises(UserAccessDenied):
            service.edit_user(customer.id, other_customer, EditUserDTO(first_name="X"))

    def test_username_taken(self, service, customer, other_customer):
        with pytest.raises(UserAlreadyExists):
            service.edit_user(customer.id, customer, EditUserDTO(username="malee"))


class TestDeactivate:
    def test_owner_closes_own_account(self, service, customer):
        user = service.deactivate(customer.id, customer)

        assert user.is_active is False
        customer.refresh_from_db()
        assert customer.is_active is False

    def test_admin_closes_any_account(self, service, customer, staff_user):
        assert service.deactivate(customer.id, staff_user).is_active is False

    def test_other_customer_is_denied(self, service, customer, other_customer):
        with pytest.raises(UserAccessDenied):
            service.deactivate(customer.id, other_customer)

        customer.refresh_from_db()
        assert customer.is_active is True

    def test_unknown_user(self, service, staff_user):
        with pytest.raises(UserNotFound):
            service.deactivate(999_999, staff_user)
