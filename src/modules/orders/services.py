"""Order service layer (Use Cases).

Orchestrates order creation, status transitions with stock
reconciliation, customer payment, and the expired-order sweep.  The
service owns every transaction boundary; repositories and the inventory
ledger run inside it and only report raw outcomes.

Business rules enforced:
- Creation validates each line against the catalog (unit-aware amount,
  advisory stock check) and never touches stock.
- Status transitions follow ``VALID_TRANSITIONS``; the order row is
  locked for the whole transition.
- Entering a committed status reserves every line; cancelling a
  committed order releases every line.  A failed reservation rolls the
  whole transition back.
- Entering ``paid`` issues the invoice (at most one per order).
- Notifications and push messages run only after commit.
"""

from __future__ import annotations

from decimal import Decimal
from typing import TYPE_CHECKING, Any, Callable, Dict, List, Optional

import structlog
from django.conf import settings
from django.db import DEFAULT_DB_ALIAS, transaction

from modules.catalog.exceptions import FruitNotFound
from modules.catalog.models import UnitType
from modules.orders.constants import (
    AWAITING_PAYMENT_STATES,
    MOST_BOUGHT_LIMIT,
    OrderStatus,
)
from modules.orders.events import (
    OrderPaid,
    OrderStatusChanged,
    PaymentSlipUploaded,
)
from modules.orders.exceptions import (
    InsufficientStock,
    InvalidOrderStatus,
    InvalidQuantity,
    OrderAccessDenied,
    OrderNotFound,
    PaymentQrUnavailable,
    PaymentSlipAlreadyExists,
)
from modules.orders.models import line_subtotal
from modules.orders.payments import load_qr_generator
from modules.orders.reconciliation import StockEffect, decide

if TYPE_CHECKING:
    from modules.catalog.models import Fruit
    from modules.catalog.repositories.interfaces import (
        IFruitRepository,
        IInventoryLedger,
    )
    from modules.orders.dispatcher import SideEffectDispatcher
    from modules.orders.dtos import CreateOrderDTO
    from modules.orders.models import Order
    from modules.orders.payments import IPromptPayQrGenerator, PaymentQr
    from modules.orders.repositories.interfaces import IOrderRepository
    from shared.domain.events import DomainEvent

logger = structlog.get_logger(__name__)

KG_PRECISION = Decimal("0.001")

# Runs on the locked order before its status changes; returns extra events.
PreTransitionHook = Callable[["Order"], List["DomainEvent"]]


class OrderService:
    """Application service for Order use-cases.

    Receives repositories, the inventory ledger and the side-effect
    dispatcher via constructor injection (DIP).  ``using`` names the
    database connection every transaction runs on.
    """

    def __init__(
        self,
        order_repository: IOrderRepository,
        fruit_repository: IFruitRepository,
        ledger: IInventoryLedger,
        dispatcher: SideEffectDispatcher,
        qr_generator: Optional[IPromptPayQrGenerator] = None,
        using: str = DEFAULT_DB_ALIAS,
    ) -> None:
        self._order_repo = order_repository
        self._fruit_repo = fruit_repository
        self._ledger = ledger
        self._dispatcher = dispatcher
        self._qr_generator = qr_generator
        self._using = using

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def create_order(self, dto: CreateOrderDTO) -> Order:
        """Create a pending order from the requested lines.

        Steps:
        1. For each line: load the fruit, resolve its unit, validate the
           amount, check stock (advisory only), snapshot the price.
        2. Persist header + items + initial history in one transaction.

        Stock is not touched; it is committed on ``confirmed``/``paid``.

        Raises:
            FruitNotFound: a fruit does not exist.
            InvalidQuantity: non-positive amount, or fractional pieces.
            InsufficientStock: current stock is below the requested amount.
        """
        log = logger.bind(user_id=dto.user_id)
        log.info("order.creation_started", item_count=len(dto.items))

        fruits = self._fruit_repo.get_many([item.fruit_id for item in dto.items])
        lines: List[Dict[str, Any]] = []
        total = Decimal("0.00")

        for item in dto.items:
            fruit = fruits.get(item.fruit_id)
            if fruit is None:
                raise FruitNotFound(f"Fruit {item.fruit_id} not found.")

            amount = self._validate_amount(fruit, item.amount)
            if fruit.stock < amount:
                log.warning(
                    "order.insufficient_stock",
                    fruit_id=fruit.id,
                    available=str(fruit.stock),
                    requested=str(amount),
                )
                raise InsufficientStock(
                    f"Insufficient stock for {fruit.name}. "
                    f"Available: {fruit.stock}, Requested: {amount}",
                    fruit_id=fruit.id,
                )

            subtotal = line_subtotal(fruit.price, amount)
            total += subtotal
            lines.append(
                {
                    "fruit_id": fruit.id,
                    "quantity": amount,
                    "price": fruit.price,
                    "subtotal": subtotal,
                }
            )

        shipping = dto.shipping
        with transaction.atomic(using=self._using):
            order = self._order_repo.create(
                {
                    "user_id": dto.user_id,
                    "total_amount": total,
                    "shipping_address": shipping.shipping_address,
                    "shipping_city": shipping.shipping_city,
                    "shipping_postal_code": shipping.shipping_postal_code,
                    "shipping_country": shipping.shipping_country
                    or settings.DEFAULT_SHIPPING_COUNTRY,
                    "payment_method": shipping.payment_method
                    or settings.DEFAULT_PAYMENT_METHOD,
                    "notes": dto.notes,
                    "items": lines,
                }
            )
            self._order_repo.add_history(
                order_id=order.id,
                status=OrderStatus.PENDING,
                notes="Order created",
                user_id=dto.user_id,
            )

        log.info(
            "order.created",
            order_id=order.id,
            order_number=order.order_number,
            total_amount=str(total),
        )
        return self._order_repo.get_by_id(order.id) or order

    def transition_status(
        self,
        order_id: int,
        new_status: str,
        actor: Optional[int] = None,
        notes: str = "",
    ) -> Order:
        """Move an order to ``new_status`` and reconcile stock.

        ``actor`` is the id of the user performing the change; ``None``
        means the system.  Requesting the current status of a non-terminal
        order is a no-op.

        Raises:
            InvalidOrderStatus: unknown status or forbidden transition.
            OrderNotFound: order does not exist.
            InsufficientStock: a line could not be reserved (nothing changes).
        """
        if new_status not in OrderStatus.values:
            raise InvalidOrderStatus(f"Unknown order status '{new_status}'.")
        return self._apply_transition(order_id, new_status, actor, notes)

    def confirm_payment_by_owner(self, order_id: int, user_id: int) -> Order:
        """Let the customer mark their own unpaid order as paid.

        Raises:
            OrderNotFound: order does not exist.
            OrderAccessDenied: caller is not the owner.
            InvalidOrderStatus: order is not awaiting payment.
            InsufficientStock: stock can no longer cover the order.
        """

        def check(order: Order) -> List[DomainEvent]:
            self._ensure_owner(order, user_id)
            self._ensure_awaiting_payment(order)
            return []

        return self._apply_transition(
            order_id,
            OrderStatus.PAID,
            user_id,
            "Payment confirmed by customer",
            before=check,
        )

    def upload_payment_slip(
        self,
        order_id: int,
        user_id: int,
        image_data: bytes,
        amount: Optional[Decimal],
        payment_date=None,
        notes: str = "",
        content_type: str = "image/jpeg",
    ) -> Order:
        """Attach a payment slip and mark the order paid.

        The slip row is written before the status flips, in the same
        transaction, so a rejected transition leaves no orphan slip.

        Raises:
            OrderNotFound: order does not exist.
            OrderAccessDenied: caller is not the owner.
            InvalidOrderStatus: order is not awaiting payment.
            PaymentSlipAlreadyExists: a slip was already uploaded.
            InsufficientStock: stock can no longer cover the order.
        """

        def attach_slip(order: Order) -> List[DomainEvent]:
            self._ensure_owner(order, user_id)
            self._ensure_awaiting_payment(order)
            if self._order_repo.has_payment_slip(order.id):
                raise PaymentSlipAlreadyExists(
                    f"Order {order.order_number} already has a payment slip."
                )
            self._order_repo.add_payment_slip(
                order.id,
                {
                    "image_data": image_data,
                    "content_type": content_type,
                    "amount": amount,
                    "payment_date": payment_date,
                    "notes": notes,
                },
            )
            logger.info("order.payment_slip_stored", order_id=order.id)
            return [PaymentSlipUploaded(aggregate_id=order.id)]

        return self._apply_transition(
            order_id,
            OrderStatus.PAID,
            user_id,
            notes or "Payment slip uploaded",
            before=attach_slip,
        )

    def cancel_expired_orders(self, max_age_minutes: int) -> List[str]:
        """Cancel pending orders older than ``max_age_minutes``.

        Each order is cancelled in its own transaction through the normal
        transition path.  Orders that left ``pending`` in the meantime are
        skipped.  Returns the cancelled order numbers.

        Raises:
            ValueError: if ``max_age_minutes`` is outside ``[0, 1440]``.
        """
        expired_ids = self._order_repo.list_expired_pending(max_age_minutes)
        cancelled: List[str] = []

        def still_pending(order: Order) -> List[DomainEvent]:
            if order.status != OrderStatus.PENDING:
                raise InvalidOrderStatus(
                    f"Order {order.order_number} is no longer pending."
                )
            return []

        for order_id in expired_ids:
            try:
                order = self._apply_transition(
                    order_id,
                    OrderStatus.CANCELLED,
                    None,
                    f"Payment not received within {max_age_minutes} minutes",
                    before=still_pending,
                )
            except (InvalidOrderStatus, OrderNotFound) as exc:
                logger.info("order.expiry_skipped", order_id=order_id, reason=str(exc))
                continue
            cancelled.append(order.order_number)

        logger.info(
            "order.expired_swept",
            max_age_minutes=max_age_minutes,
            found=len(expired_ids),
            cancelled=len(cancelled),
        )
        return cancelled

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_order(self, order_id) -> Order:
        """Retrieve a single order by ID.

        Raises:
            OrderNotFound: if the order does not exist.
        """
        order = self._order_repo.get_by_id(order_id)
        if not order:
            raise OrderNotFound(f"Order {order_id} not found.")
        return order

    def get_order_for_user(self, order_id, user) -> Order:
        """Retrieve an order visible to ``user`` (owner or admin).

        Raises:
            OrderNotFound: if the order does not exist.
            OrderAccessDenied: if ``user`` is neither owner nor admin.
        """
        order = self.get_order(order_id)
        if not user.is_staff:
            self._ensure_owner(order, user.id)
        return order

    def list_orders_for_user(self, user_id: int):
        return self._order_repo.list_for_user(user_id)

    def list_all_orders(self, filters: Optional[Dict[str, Any]] = None):
        return self._order_repo.list(filters)

    def most_bought_fruits(
        self, user_id: int, limit: int = MOST_BOUGHT_LIMIT
    ) -> List[Dict[str, Any]]:
        return self._order_repo.most_bought_fruits(user_id, limit)

    def payment_qr(self, order_id, user) -> PaymentQr:
        """Build the PromptPay QR for the order's total.

        Raises:
            OrderNotFound / OrderAccessDenied: see ``get_order_for_user``.
            PaymentQrUnavailable: if no generator is configured.
        """
        order = self.get_order_for_user(order_id, user)
        generator = self._qr_generator or load_qr_generator()
        if generator is None:
            raise PaymentQrUnavailable("No PromptPay QR generator configured.")
        return generator.generate_for_amount(order.total_amount, order.order_number)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _apply_transition(
        self,
        order_id,
        new_status: str,
        actor: Optional[int],
        notes: str,
        before: Optional[PreTransitionHook] = None,
    ) -> Order:
        with transaction.atomic(using=self._using):
            order = self._order_repo.get_for_update(order_id)
            if not order:
                raise OrderNotFound(f"Order {order_id} not found.")

            old_status = order.status
            log = logger.bind(
                order_id=order.id, old_status=old_status, new_status=new_status
            )

            extra_events = before(order) if before else []

            if old_status == new_status:
                if order.is_terminal:
                    log.warning("order.invalid_transition")
                    raise InvalidOrderStatus(
                        f"Order {order.order_number} is already {old_status}."
                    )
                log.info("order.transition_noop")
                return self._order_repo.get_by_id(order.id) or order

            if not order.can_transition_to(new_status):
                log.warning("order.invalid_transition")
                raise InvalidOrderStatus(
                    f"Cannot transition from {old_status} to {new_status}."
                )

            effect = decide(old_status, new_status)
            self._apply_stock_effect(order, effect)

            self._order_repo.update_status(order, new_status)
            self._order_repo.add_history(
                order_id=order.id,
                status=new_status,
                notes=notes,
                old_status=old_status,
                user_id=actor,
            )
            log.info("order.status_updated", stock_effect=effect.value)

            events: List[DomainEvent] = [
                *extra_events,
                OrderStatusChanged(
                    aggregate_id=order.id,
                    old_status=old_status,
                    new_status=new_status,
                ),
            ]
            if new_status == OrderStatus.PAID:
                self._dispatcher.issue_invoice(order)
                events.append(OrderPaid(aggregate_id=order.id))
            self._dispatcher.publish_after_commit(*events)

        return self._order_repo.get_by_id(order.id) or order

    def _apply_stock_effect(self, order: Order, effect: StockEffect) -> None:
        """Apply one reconciliation effect to every line, by ascending fruit id."""
        if effect is StockEffect.NOOP:
            return

        items = sorted(order.items.all(), key=lambda item: item.fruit_id)
        for item in items:
            if effect is StockEffect.RESERVE:
                fruit = self._ledger.reserve(item.fruit_id, item.quantity, self._using)
                if fruit is None:
                    raise InsufficientStock(
                        f"Insufficient stock for {item.fruit.name}. "
                        f"Requested: {item.quantity}",
                        fruit_id=item.fruit_id,
                    )
                logger.info(
                    "order.stock_reserved",
                    order_id=order.id,
                    fruit_id=item.fruit_id,
                    quantity=str(item.quantity),
                )
            else:
                self._ledger.release(item.fruit_id, item.quantity, self._using)
                logger.info(
                    "order.stock_released",
                    order_id=order.id,
                    fruit_id=item.fruit_id,
                    quantity=str(item.quantity),
                )

    @staticmethod
    def _validate_amount(fruit: Fruit, amount: Decimal) -> Decimal:
        if amount is None or amount <= 0:
            raise InvalidQuantity(
                f"Amount for {fruit.name} must be greater than zero."
            )
        if fruit.unit == UnitType.PIECE:
            if amount != amount.to_integral_value():
                raise InvalidQuantity(
                    f"{fruit.name} is sold by the piece; quantity must be a whole number."
                )
            return amount.quantize(Decimal("1"))
        if amount != amount.quantize(KG_PRECISION):
            raise InvalidQuantity(
                f"Weight for {fruit.name} supports at most three decimal places."
            )
        return amount

    @staticmethod
    def _ensure_owner(order: Order, user_id: int) -> None:
        if order.user_id != user_id:
            raise OrderAccessDenied(
                f"Order {order.order_number} belongs to another user."
            )

    @staticmethod
    def _ensure_awaiting_payment(order: Order) -> None:
        if order.status not in AWAITING_PAYMENT_STATES:
            raise InvalidOrderStatus(
                f"Order {order.order_number} is not awaiting payment ({order.status})."
            )
