"""Account API views.

``register`` is public; ``me`` serves the caller's own account.  The
``users`` endpoints are for administrators, except that owners may also
edit or deactivate their own account.
"""

from __future__ import annotations

from pydantic import ValidationError as PydanticValidationError
from rest_framework import status
from rest_framework.decorators import action
from rest_framework.mixins import ListModelMixin
from rest_framework.permissions import AllowAny, IsAdminUser, IsAuthenticated
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.viewsets import GenericViewSet, ViewSet
from rest_framework_simplejwt.tokens import RefreshToken

from modules.accounts.dtos import EditUserDTO, RegisterUserDTO, UpdateProfileDTO
from modules.accounts.exceptions import (
    InvalidRole,
    UserAccessDenied,
    UserAlreadyExists,
    UserNotFound,
)
from modules.accounts.repositories.django_repository import UserDjangoRepository
from modules.accounts.serializers import (
    EditUserSerializer,
    ProfileSerializer,
    RegisterSerializer,
    RoleSerializer,
    UpdateProfileSerializer,
    UserSerializer,
)
from modules.accounts.services import AccountService

ERROR_STATUS = {
    UserNotFound: status.HTTP_404_NOT_FOUND,
    UserAccessDenied: status.HTTP_403_FORBIDDEN,
    UserAlreadyExists: status.HTTP_409_CONFLICT,
    InvalidRole: status.HTTP_400_BAD_REQUEST,
}
DOMAIN_ERRORS = tuple(ERROR_STATUS)


def _error_response(exc: Exception) -> Response:
    return Response({"detail": str(exc)}, status=ERROR_STATUS[type(exc)])


class AccountViewSet(ViewSet):
    """Registration and the caller's own profile."""

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._service = AccountService(UserDjangoRepository())

    def get_permissions(self):
        if self.action == "register":
            return [AllowAny()]
        return [IsAuthenticated()]

    def register(self, request: Request) -> Response:
        """POST /api/v1/register/"""
        serializer = RegisterSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            dto = RegisterUserDTO(**serializer.validated_data)
        except PydanticValidationError as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_400_BAD_REQUEST)

        try:
            user = self._service.register(dto)
        except DOMAIN_ERRORS as exc:
            return _error_response(exc)

        refresh = RefreshToken.for_user(user)
        return Response(
            {
                "user": UserSerializer(user).data,
                "access": str(refresh.access_token),
                "refresh": str(refresh),
            },
            status=status.HTTP_201_CREATED,
        )

    def me(self, request: Request) -> Response:
        """GET /api/v1/me/"""
        user = self._service.get_profile(request.user.id)
        return Response(ProfileSerializer(user).data)

    def update_me(self, request: Request) -> Response:
        """PATCH /api/v1/me/"""
        serializer = UpdateProfileSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            dto = UpdateProfileDTO(**serializer.validated_data)
            user = self._service.update_profile(request.user.id, dto)
        except PydanticValidationError as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_400_BAD_REQUEST)
        except DOMAIN_ERRORS as exc:
            return _error_response(exc)
        return Response(ProfileSerializer(user).data)


class UserViewSet(ListModelMixin, GenericViewSet):
    """Administrator view of all users; edit and deactivate also serve owners."""

    permission_classes = [IsAdminUser]
    serializer_class = UserSerializer

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._service = AccountService(UserDjangoRepository())

    def get_permissions(self):
        if self.action in {"partial_update", "destroy"}:
            return [IsAuthenticated()]
        return super().get_permissions()

    def get_queryset(self):
        return self._service.list_users()

    def partial_update(self, request: Request, pk: str | None = None) -> Response:
        """PATCH /api/v1/users/{pk}/ (owner or admin)."""
        serializer = EditUserSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            dto = EditUserDTO(**serializer.validated_data)
            user = self._service.edit_user(pk, request.user, dto)
        except PydanticValidationError as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_400_BAD_REQUEST)
        except DOMAIN_ERRORS as exc:
            return _error_response(exc)
        return Response(UserSerializer(user).data)

    def destroy(self, request: Request, pk: str | None = None) -> Response:
        """DELETE /api/v1/users/{pk}/ (owner or admin; deactivates)."""
        try:
            self._service.deactivate(pk, request.user)
        except DOMAIN_ERRORS as exc:
            return _error_response(exc)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=True, methods=["put", "patch"])
    def role(self, request: Request, pk: str | None = None) -> Response:
        """PUT /api/v1/users/{pk}/role/"""
        serializer = RoleSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            user = self._service.set_role(pk, serializer.validated_data["role"])
        except DOMAIN_ERRORS as exc:
            return _error_response(exc)
        return Response(UserSerializer(user).data)
