"""Stock reconciliation policy.

Maps an order status change to the inventory effect it requires.  The
policy is pure: it never touches the database and is evaluated once per
transition, then applied to every line of the order.
"""

from __future__ import annotations

import enum

from modules.orders.constants import COMMITTED_STATES, OrderStatus


class StockEffect(enum.Enum):
    RESERVE = "reserve"
    RELEASE = "release"
    NOOP = "noop"


def is_committed(status: str) -> bool:
    return status in COMMITTED_STATES


def decide(old_status: str, new_status: str) -> StockEffect:
    """Return the stock effect of moving from ``old_status`` to ``new_status``.

    - uncommitted -> committed: ``RESERVE``
    - committed -> cancelled: ``RELEASE``
    - anything else: ``NOOP``
    """
    was_committed = is_committed(old_status)
    if not was_committed and is_committed(new_status):
        return StockEffect.RESERVE
    if was_committed and new_status == OrderStatus.CANCELLED:
        return StockEffect.RELEASE
    return StockEffect.NOOP
