"""Invoice API views."""

from __future__ import annotations

from django.http import HttpResponse
from rest_framework import status
from rest_framework.decorators import action
from rest_framework.permissions import IsAdminUser, IsAuthenticated
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.viewsets import GenericViewSet

from modules.invoices.exceptions import InvoiceNotFound, InvoiceRendererUnavailable
from modules.invoices.models import Invoice
from modules.invoices.serializers import InvoiceListSerializer, InvoiceSerializer
from modules.orders.factories import build_invoice_service


class InvoiceViewSet(GenericViewSet):
    """Invoices are issued by the order lifecycle; this API only reads them."""

    queryset = Invoice.objects.all()
    permission_classes = [IsAuthenticated]

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._service = build_invoice_service()

    def get_permissions(self):
        if self.action == "all_invoices":
            return [IsAdminUser()]
        return super().get_permissions()

    def get_queryset(self):
        if self.action == "all_invoices":
            return self._service.list_all_invoices()
        return self._service.list_invoices_for_user(self.request.user.id)

    def _paginated(self, queryset) -> Response:
        page = self.paginate_queryset(queryset)
        if page is not None:
            return self.get_paginated_response(
                InvoiceListSerializer(page, many=True).data
            )
        return Response(InvoiceListSerializer(queryset, many=True).data)

    def list(self, request: Request) -> Response:
        """GET /api/v1/invoices/ (the caller's own invoices)."""
        return self._paginated(self.get_queryset())

    @action(detail=False, methods=["get"], url_path="all")
    def all_invoices(self, request: Request) -> Response:
        """GET /api/v1/invoices/all/ (admin)."""
        return self._paginated(self.get_queryset())

    def retrieve(self, request: Request, pk: str | None = None) -> Response:
        """GET /api/v1/invoices/{pk}/"""
        try:
            invoice = self._service.get_invoice(pk, request.user)
        except InvoiceNotFound:
            return Response(
                {"detail": "Invoice not found."}, status=status.HTTP_404_NOT_FOUND
            )
        return Response(InvoiceSerializer(invoice).data)

    @action(detail=False, methods=["get"], url_path=r"order/(?P<order_id>\d+)")
    def by_order(self, request: Request, order_id: str | None = None) -> Response:
        """GET /api/v1/invoices/order/{order_id}/"""
        try:
            invoice = self._service.get_invoice_for_order(order_id, request.user)
        except InvoiceNotFound:
            return Response(
                {"detail": "Invoice not found."}, status=status.HTTP_404_NOT_FOUND
            )
        return Response(InvoiceSerializer(invoice).data)

    @action(detail=True, methods=["get"])
    def download(self, request: Request, pk: str | None = None):
        """GET /api/v1/invoices/{pk}/download/ (PDF)."""
        try:
            invoice = self._service.get_invoice(pk, request.user)
            pdf = self._service.render_pdf(invoice)
        except InvoiceNotFound:
            return Response(
                {"detail": "Invoice not found."}, status=status.HTTP_404_NOT_FOUND
            )
        except InvoiceRendererUnavailable as exc:
            return Response(
                {"detail": str(exc)}, status=status.HTTP_501_NOT_IMPLEMENTED
            )
        response = HttpResponse(pdf, content_type="application/pdf")
        response["Content-Disposition"] = (
            f'attachment; filename="{invoice.invoice_number}.pdf"'
        )
        return response
