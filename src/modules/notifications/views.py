"""Notification API views (the caller's own notifications only)."""

from __future__ import annotations

from rest_framework import status
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.viewsets import ViewSet

from modules.notifications.exceptions import NotificationNotFound
from modules.notifications.repositories.django_repository import (
    NotificationDjangoRepository,
)
from modules.notifications.serializers import (
    NotificationQuerySerializer,
    NotificationSerializer,
)
from modules.notifications.services import NotificationService


class NotificationViewSet(ViewSet):
    permission_classes = [IsAuthenticated]

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._service = NotificationService(NotificationDjangoRepository())

    def list(self, request: Request) -> Response:
        """GET /api/v1/notifications/?is_read=&limit=&offset="""
        query = NotificationQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        result = self._service.list_for_user(request.user.id, **query.validated_data)
        return Response(
            {
                "results": NotificationSerializer(
                    result["notifications"], many=True
                ).data,
                "unread_count": result["unread_count"],
            }
        )

    @action(detail=True, methods=["put", "patch", "post"])
    def read(self, request: Request, pk: str | None = None) -> Response:
        """PUT /api/v1/notifications/{pk}/read/"""
        try:
            notification = self._service.mark_read(pk, request.user.id)
        except NotificationNotFound:
            return Response(
                {"detail": "Notification not found."},
                status=status.HTTP_404_NOT_FOUND,
            )
        return Response(NotificationSerializer(notification).data)

    @action(detail=False, methods=["put", "patch", "post"], url_path="mark-all-read")
    def mark_all_read(self, request: Request) -> Response:
        """PUT /api/v1/notifications/mark-all-read/"""
        count = self._service.mark_all_read(request.user.id)
        return Response({"updated": count})

    def destroy(self, request: Request, pk: str | None = None) -> Response:
        """DELETE /api/v1/notifications/{pk}/"""
        try:
            self._service.delete(pk, request.user.id)
        except NotificationNotFound:
            return Response(
                {"detail": "Notification not found."},
                status=status.HTTP_404_NOT_FOUND,
            )
        return Response(status=status.HTTP_204_NO_CONTENT)
