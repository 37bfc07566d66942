"""Order service layer (Use Cases).

Keeps product stock and order/payment status consistent.  All write
operations are atomic; the service defines the unit-of-work boundary.

Rules enforced:
- Creation is all-or-nothing: every product must exist, be active and have
  enough stock, otherwise nothing is decremented.
- Stock is taken with the repository's conditional decrement, never with
  read-modify-write, and in product-id order.
- Only pending orders can be cancelled; cancellation returns every line
  item's quantity to stock exactly once.
- Payment status follows ``PAYMENT_TRANSITIONS``; confirming a completed
  payment again changes nothing.
- Every order status change is recorded in the history.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, List, Optional, Tuple

import structlog
from django.db import IntegrityError, transaction
from django.utils import timezone

from modules.core.exceptions import Conflict, DomainError
from modules.orders.constants import OrderStatus, PaymentMethod, PaymentStatus
from modules.orders.events import (
    OrderCancelled,
    OrderCreated,
    OrderStatusChanged,
    PaymentCompleted,
    PaymentFailed,
)
from modules.orders.exceptions import (
    InsufficientStock,
    InvalidOrderStatus,
    InvalidPaymentTransition,
    OrderAccessDenied,
    OrderNotFound,
    PaymentAlreadyCompleted,
    PaymentAmountMismatch,
    PaymentReferenceMismatch,
    PriceMismatch,
)
from modules.products.exceptions import InactiveProduct, ProductNotFound

if TYPE_CHECKING:
    from modules.orders.dtos import CreateOrderDTO
    from modules.orders.models import Order
    from modules.orders.repositories.interfaces import IOrderRepository
    from modules.payments.dtos import PaymentInitiation, PaymentResult
    from modules.payments.gateways.interfaces import IPaymentGateway
    from modules.products.repositories.interfaces import IProductRepository

logger = structlog.get_logger(__name__)


class OrderService:
    """Application service for Order use-cases.

    Receives repositories and the payment gateway via constructor
    injection (DIP).  The gateway is optional for callers that never touch
    payments; it is resolved from settings on first use otherwise.
    """

    def __init__(
        self,
        order_repository: IOrderRepository,
        product_repository: IProductRepository,
        payment_gateway: Optional[IPaymentGateway] = None,
    ) -> None:
        self._order_repo = order_repository
        self._product_repo = product_repository
        self._gateway = payment_gateway

    @property
    def gateway(self) -> IPaymentGateway:
        if self._gateway is None:
            from modules.payments.gateways import get_payment_gateway

            self._gateway = get_payment_gateway()
        return self._gateway

    # ------------------------------------------------------------------
    # Creation
    # ------------------------------------------------------------------

    @transaction.atomic
    def create_order(self, dto: CreateOrderDTO) -> Order:
        """Create a new order, reserving stock for every line item.

        Steps:
        1. Return the existing order if the idempotency key was seen.
        2. For each item, in product-id order: resolve the product, check
           it is active and the client price matches, then decrement stock
           conditionally.
        3. Persist order + items with a price snapshot.
        4. Record the initial status history and ``OrderCreated``.

        If any step fails, stock already reserved by this call is released
        before the error propagates.

        Raises:
            ProductNotFound: a product does not exist.
            InactiveProduct: a product is withdrawn from sale.
            PriceMismatch: the client price differs from the catalog.
            InsufficientStock: not enough stock for a product.
        """
        log = logger.bind(user_id=dto.user_id)
        log.info("order.creation_started", item_count=len(dto.items))

        if dto.idempotency_key:
            existing = self.find_by_idempotency_key(dto.user_id, dto.idempotency_key)
            if existing:
                log.info(
                    "order.idempotency_hit",
                    order_id=str(existing.id),
                    key=dto.idempotency_key,
                )
                return existing

        reserved: List[Tuple[str, int]] = []
        lines: List[Dict[str, Any]] = []
        try:
            for item in sorted(dto.items, key=lambda i: str(i.product_id)):
                product_id = str(item.product_id)
                product = self._product_repo.get_by_id(product_id)
                if not product:
                    raise ProductNotFound(f"Product {product_id} not found.")
                if not product.is_active:
                    raise InactiveProduct(f"{product.name} is not available for sale.")
                if item.unit_price is not None and item.unit_price != product.price:
                    raise PriceMismatch(
                        f"Price of {product.name} is now {product.price}."
                    )
                if not self._product_repo.decrement_stock(product_id, item.quantity):
                    log.warning(
                        "order.insufficient_stock",
                        product_id=product_id,
                        requested=item.quantity,
                    )
                    raise InsufficientStock(product.name)

                reserved.append((product_id, item.quantity))
                log.info(
                    "order.stock_reserved",
                    product_id=product_id,
                    quantity=item.quantity,
                )
                lines.append(
                    {
                        "product_id": product.id,
                        "quantity": item.quantity,
                        "unit_price": product.price,
                    }
                )

            order = self._order_repo.create(
                {
                    "user_id": dto.user_id,
                    "items": lines,
                    "shipping_address": dto.shipping_address,
                    "phone": dto.phone,
                    "city": dto.city,
                    "notes": dto.notes,
                    "payment_method": dto.payment_method,
                    "payment_status": (
                        PaymentStatus.INITIATED
                        if dto.payment_method == PaymentMethod.ONLINE
                        else PaymentStatus.PENDING
                    ),
                    "idempotency_key": dto.idempotency_key,
                }
            )
        except DomainError:
            self._release_stock(reserved, log)
            raise
        except IntegrityError as exc:
            # lost an idempotency-key race against a concurrent request
            self._release_stock(reserved, log)
            raise Conflict(
                "A request with this idempotency key is already being processed.",
                code="duplicate_request",
            ) from exc

        order.add_domain_event(
            OrderCreated(
                aggregate_id=order.id,
                user_id=str(dto.user_id),
                total_amount=str(order.total_amount),
            )
        )
        self._order_repo.save(order)
        self._order_repo.add_history(
            order_id=order.id,
            status=OrderStatus.PENDING,
            notes="Order created",
            user_id=dto.user_id,
        )

        log.info(
            "order.created",
            order_id=str(order.id),
            total_amount=str(order.total_amount),
        )
        return self._order_repo.get_by_id(str(order.id)) or order

    def find_by_idempotency_key(self, user_id: Any, key: str) -> Optional[Order]:
        """The order an earlier request with *key* created, if any.

        Raises:
            Conflict: the key belongs to another user's order.
        """
        existing = self._order_repo.get_by_idempotency_key(key)
        if existing and not existing.is_owned_by(user_id):
            raise Conflict("Idempotency key already used.", code="idempotency_key_reused")
        return existing

    def _release_stock(self, reserved: List[Tuple[str, int]], log: Any) -> None:
        for product_id, quantity in reserved:
            self._product_repo.increment_stock(product_id, quantity)
            log.info("order.stock_released", product_id=product_id, quantity=quantity)

    # ------------------------------------------------------------------
    # Cancellation / status
    # ------------------------------------------------------------------

    @transaction.atomic
    def cancel_order(
        self,
        order_id: str,
        user_id: Any,
        notes: str = "",
        *,
        as_admin: bool = False,
    ) -> Order:
        """Cancel a pending order and return its stock.

        Raises:
            OrderNotFound: order does not exist.
            OrderAccessDenied: caller is neither owner nor admin.
            InvalidOrderStatus: order is not pending (already cancelled
                included).
        """
        order = self._order_repo.get_for_update(str(order_id))
        if not order:
            raise OrderNotFound(f"Order {order_id} not found.")
        if not as_admin and not order.is_owned_by(user_id):
            raise OrderAccessDenied()
        return self._cancel_locked(order, user_id, notes)

    def _cancel_locked(self, order: Order, actor_id: Any, notes: str) -> Order:
        log = logger.bind(order_id=str(order.id), current_status=order.status)

        if order.status != OrderStatus.PENDING:
            log.warning("order.cancel_not_allowed")
            raise InvalidOrderStatus(
                f"Only pending orders can be cancelled; order is {order.status}."
            )
        old_status = order.status
        # the conditional flip decides which of two racing cancels restores stock
        if not self._order_repo.transition_status(
            str(order.id), OrderStatus.PENDING, OrderStatus.CANCELLED
        ):
            log.warning("order.cancel_lost_race")
            raise InvalidOrderStatus("Order is no longer pending.")

        for item in sorted(order.items.all(), key=lambda i: str(i.product_id)):
            self._product_repo.increment_stock(str(item.product_id), item.quantity)
            log.info(
                "order.stock_released",
                product_id=str(item.product_id),
                quantity=item.quantity,
            )

        order.status = OrderStatus.CANCELLED
        order.add_domain_event(
            OrderCancelled(aggregate_id=order.id, cancelled_by=str(actor_id or ""))
        )
        self._order_repo.save(order)
        self._order_repo.add_history(
            order_id=order.id,
            status=OrderStatus.CANCELLED,
            notes=notes or "Order cancelled",
            old_status=old_status,
            user_id=actor_id,
        )

        log.info("order.cancelled")
        return self._order_repo.get_by_id(str(order.id)) or order

    @transaction.atomic
    def update_status(
        self,
        order_id: str,
        new_status: str,
        notes: str = "",
        actor_id: Any = None,
    ) -> Order:
        """Administrative status change, validated against the state machine.

        ``cancelled`` takes the cancellation path so stock is restored.

        Raises:
            OrderNotFound: order does not exist.
            InvalidOrderStatus: transition is not allowed.
        """
        order = self._order_repo.get_for_update(str(order_id))
        if not order:
            raise OrderNotFound(f"Order {order_id} not found.")

        if new_status == OrderStatus.CANCELLED:
            return self._cancel_locked(order, actor_id, notes)

        log = logger.bind(
            order_id=str(order_id),
            current_status=order.status,
            new_status=new_status,
        )
        if not order.can_transition_to(new_status):
            log.warning("order.invalid_transition")
            raise InvalidOrderStatus(
                f"Cannot transition from {order.status} to {new_status}."
            )

        old_status = order.status
        self._change_status(order, new_status, notes, actor_id)
        self._order_repo.save(order)
        log.info("order.status_updated", old_status=old_status)
        return self._order_repo.get_by_id(str(order_id)) or order

    def _change_status(
        self, order: Order, new_status: str, notes: str, actor_id: Any
    ) -> None:
        """Move a locked order along the state machine and record it."""
        old_status = order.status
        if not self._order_repo.transition_status(str(order.id), old_status, new_status):
            raise InvalidOrderStatus(f"Order is no longer {old_status}.")
        order.status = new_status
        order.add_domain_event(
            OrderStatusChanged(
                aggregate_id=order.id, old_status=old_status, new_status=new_status
            )
        )
        self._order_repo.add_history(
            order_id=order.id,
            status=new_status,
            notes=notes,
            old_status=old_status,
            user_id=actor_id,
        )

    # ------------------------------------------------------------------
    # Payments
    # ------------------------------------------------------------------

    def initiate_payment(self, order_id: str, user_id: Any) -> PaymentInitiation:
        """Start an online payment for the caller's order.

        The gateway request runs outside any transaction.  The order is
        locked only afterwards, checked again and given the new reference.

        Raises:
            OrderNotFound / OrderAccessDenied: unknown or foreign order.
            InvalidOrderStatus: order is cancelled.
            PaymentAlreadyCompleted: order is already paid.
            PaymentGatewayError: the gateway refused the request.
        """
        order = self._payable_order(self._order_repo.get_by_id(str(order_id)), order_id, user_id)
        initiation = self.gateway.initiate(order, order.total_amount)

        with transaction.atomic():
            order = self._payable_order(
                self._order_repo.get_for_update(str(order_id)), order_id, user_id
            )
            order.payment_method = PaymentMethod.ONLINE
            order.payment_status = PaymentStatus.INITIATED
            order.payment_details = {
                "pidx": initiation.reference,
                "payment_url": initiation.payment_url,
                "initiated_at": timezone.now().isoformat(),
            }
            self._order_repo.save(order)

        logger.info(
            "payment.initiated",
            order_id=str(order.id),
            reference=initiation.reference,
            amount=str(order.total_amount),
        )
        return initiation

    @staticmethod
    def _payable_order(order: Optional[Order], order_id: str, user_id: Any) -> Order:
        if not order:
            raise OrderNotFound(f"Order {order_id} not found.")
        if not order.is_owned_by(user_id):
            raise OrderAccessDenied()
        if order.status == OrderStatus.CANCELLED:
            raise InvalidOrderStatus("Cannot pay for a cancelled order.")
        if order.is_paid:
            raise PaymentAlreadyCompleted()
        return order

    @transaction.atomic
    def confirm_payment(self, order_id: str, result: PaymentResult) -> Order:
        """Apply a gateway outcome to the order.

        A completed payment moves a pending order to ``processing``.  Stock
        is never touched here.  Re-applying the outcome an order already
        has is a no-op.

        Raises:
            OrderNotFound: order does not exist.
            InvalidOrderStatus: completing payment of a cancelled order.
            InvalidPaymentTransition: outcome contradicts the current state.
            PaymentAmountMismatch: the gateway settled a different amount.
        """
        order = self._order_repo.get_for_update(str(order_id))
        if not order:
            raise OrderNotFound(f"Order {order_id} not found.")

        log = logger.bind(
            order_id=str(order.id),
            payment_status=order.payment_status,
            outcome=result.status,
        )
        if result.status == "pending":
            log.info("payment.still_pending")
            return order

        target = PaymentStatus.COMPLETED if result.is_completed else PaymentStatus.FAILED
        if order.payment_status == target:
            log.info("payment.already_applied")
            return order
        if not order.can_transition_payment_to(target):
            log.warning("payment.invalid_transition")
            raise InvalidPaymentTransition(
                f"Cannot move payment from {order.payment_status} to {target}."
            )
        if target == PaymentStatus.COMPLETED and order.status == OrderStatus.CANCELLED:
            log.warning("payment.completed_for_cancelled_order")
            raise InvalidOrderStatus("Cannot complete payment of a cancelled order.")
        if (
            target == PaymentStatus.COMPLETED
            and result.amount is not None
            and result.amount != order.total_amount
        ):
            log.warning(
                "payment.amount_mismatch",
                paid=str(result.amount),
                expected=str(order.total_amount),
            )
            raise PaymentAmountMismatch(
                f"Paid {result.amount} but the order total is {order.total_amount}."
            )

        now = timezone.now().isoformat()
        details = dict(order.payment_details or {})
        order.payment_status = target
        if target == PaymentStatus.COMPLETED:
            details.update(transaction_id=result.transaction_id, completed_at=now)
            order.add_domain_event(
                PaymentCompleted(
                    aggregate_id=order.id, transaction_id=result.transaction_id or ""
                )
            )
            if order.status == OrderStatus.PENDING:
                self._change_status(
                    order, OrderStatus.PROCESSING, "Payment completed", None
                )
        else:
            details.update(failed_at=now)
            order.add_domain_event(
                PaymentFailed(aggregate_id=order.id, reason=str(result.raw.get("status", "")))
            )
        order.payment_details = details
        self._order_repo.save(order)

        log.info("payment.completed" if result.is_completed else "payment.failed")
        return self._order_repo.get_by_id(str(order.id)) or order

    def verify_payment(self, order_id: str, reference: str, user_id: Any = None) -> Order:
        """Look *reference* up at the gateway and apply the outcome.

        The gateway call happens outside any transaction; only the state
        change in ``confirm_payment`` holds the order lock.

        Raises:
            OrderNotFound / OrderAccessDenied: unknown or foreign order.
            PaymentReferenceMismatch: *reference* was not issued for it.
        """
        order = self._order_repo.get_by_id(str(order_id))
        if not order:
            raise OrderNotFound(f"Order {order_id} not found.")
        if user_id is not None and not order.is_owned_by(user_id):
            raise OrderAccessDenied()
        if not reference or (order.payment_details or {}).get("pidx") != reference:
            raise PaymentReferenceMismatch()

        result = self.gateway.verify(reference)
        return self.confirm_payment(str(order.id), result)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_order(self, order_id: str, user_id: Any, *, as_admin: bool = False) -> Order:
        """Retrieve an order visible to the caller.

        Raises:
            OrderNotFound: order does not exist.
            OrderAccessDenied: order belongs to someone else.
        """
        order = self._order_repo.get_by_id(str(order_id))
        if not order:
            raise OrderNotFound(f"Order {order_id} not found.")
        if not as_admin and not order.is_owned_by(user_id):
            raise OrderAccessDenied()
        return order

    def list_orders(
        self,
        user_id: Any,
        *,
        as_admin: bool = False,
        filters: Optional[Dict[str, Any]] = None,
    ) -> List[Order]:
        """Buyers see their own orders; administrators see all of them."""
        filters = dict(filters or {})
        if not as_admin:
            filters["user_id"] = user_id
        return self._order_repo.list(filters)
