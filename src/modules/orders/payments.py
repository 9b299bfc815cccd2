"""Pluggable PromptPay QR generation.

The generator is configured by dotted path in ``PROMPTPAY_QR_GENERATOR``;
an empty value disables the QR endpoint.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Optional, Protocol, TypedDict

from django.conf import settings
from django.utils.module_loading import import_string


class PaymentQr(TypedDict):
    payload: str
    image: str


class IPromptPayQrGenerator(Protocol):
    def generate_for_amount(self, amount: Decimal, reference: str) -> PaymentQr: ...


def load_qr_generator() -> Optional[IPromptPayQrGenerator]:
    path = getattr(settings, "PROMPTPAY_QR_GENERATOR", "")
    if not path:
        return None
    return import_string(path)()
