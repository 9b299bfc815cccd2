"""LINE Messaging API push client.

Push messages are fire-and-forget: a missing access token or recipient
skips the call, and transport or HTTP errors are logged, never raised.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any, Dict, List, Optional

import httpx
import structlog
from django.conf import settings
from django.utils import timezone

logger = structlog.get_logger(__name__)

BRAND_GREEN = "#1DB446"
MUTED_GREY = "#8C8C8C"
TOTAL_RED = "#E63946"


class LinePushNotifier:
    def __init__(
        self,
        access_token: str,
        api_url: str,
        timeout: float = 10.0,
        client: Optional[httpx.Client] = None,
    ) -> None:
        self._access_token = access_token
        self._api_url = api_url
        self._timeout = timeout
        self._client = client

    @classmethod
    def from_settings(cls) -> "LinePushNotifier":
        return cls(
            access_token=settings.LINE_MESSAGING_CHANNEL_ACCESS_TOKEN,
            api_url=settings.LINE_MESSAGING_API_URL,
            timeout=settings.LINE_MESSAGING_TIMEOUT_SECONDS,
        )

    @property
    def is_configured(self) -> bool:
        return bool(self._access_token)

    def send(self, line_user_id: str, messages: List[Dict[str, Any]]) -> bool:
        """Push ``messages`` to one LINE user; ``True`` on a 2xx reply."""
        log = logger.bind(line_user_id=line_user_id)
        if not self.is_configured or not line_user_id:
            log.info(
                "line_push.skipped",
                reason="not_configured" if not self.is_configured else "no_recipient",
            )
            return False

        payload = {"to": line_user_id, "messages": messages}
        headers = {"Authorization": f"Bearer {self._access_token}"}
        try:
            if self._client is not None:
                response = self._client.post(
                    self._api_url, json=payload, headers=headers, timeout=self._timeout
                )
            else:
                with httpx.Client(timeout=self._timeout) as client:
                    response = client.post(self._api_url, json=payload, headers=headers)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            log.error(
                "line_push.rejected",
                status_code=exc.response.status_code,
                body=exc.response.text[:500],
            )
            return False
        except httpx.HTTPError as exc:
            log.error("line_push.transport_error", error=str(exc))
            return False

        log.info("line_push.sent", message_count=len(messages))
        return True


def _row(label: str, value: str, **value_style: Any) -> Dict[str, Any]:
    return {
        "type": "box",
        "layout": "horizontal",
        "contents": [
            {"type": "text", "text": label, "size": "sm", "color": MUTED_GREY},
            {"type": "text", "text": value, "size": "sm", "align": "end", **value_style},
        ],
    }


def build_payment_confirmation_message(
    order_number: str,
    total_amount: Decimal,
    invoice_id: Optional[int],
    frontend_url: str,
) -> Dict[str, Any]:
    """Flex message confirming a paid order, linking to its invoice page."""
    bill_url = (
        f"{frontend_url.rstrip('/')}/bills/BillPage?invoiceId={invoice_id or ''}"
    )
    paid_on = timezone.localdate().strftime("%d/%m/%Y")
    total_row = _row(
        "Total", f"฿{total_amount}", weight="bold", color=TOTAL_RED
    )
    total_row["margin"] = "lg"
    date_row = _row("Paid on", paid_on)
    date_row["margin"] = "sm"
    return {
        "type": "flex",
        "altText": f"Thank you! Order {order_number} has been paid.",
        "contents": {
            "type": "bubble",
            "header": {
                "type": "box",
                "layout": "vertical",
                "contents": [
                    {
                        "type": "text",
                        "text": "Payment complete",
                        "weight": "bold",
                        "size": "lg",
                        "color": BRAND_GREEN,
                    },
                    {
                        "type": "text",
                        "text": "Thank you for shopping with us!",
                        "size": "sm",
                        "color": MUTED_GREY,
                    },
                ],
            },
            "body": {
                "type": "box",
                "layout": "vertical",
                "contents": [
                    _row("Order", order_number, weight="bold"),
                    date_row,
                    {"type": "separator", "margin": "lg"},
                    total_row,
                ],
            },
            "footer": {
                "type": "box",
                "layout": "vertical",
                "contents": [
                    {
                        "type": "button",
                        "action": {
                            "type": "uri",
                            "label": "View order",
                            "uri": bill_url,
                        },
                        "style": "primary",
                        "color": BRAND_GREEN,
                    }
                ],
            },
        },
    }
