"""Order service: creation, status transitions and admin reads.

Status graph (strict mode, the default)::

    pending -> processing -> shipped -> delivered
    pending ------------------^
    pending | processing -> cancelled

Setting the current status again is a no-op. Entering `shipped` writes one
ShippedOrder row and entering `cancelled` one CancelledOrder row, in the same
transaction as a conditional status update keyed on the status that was
read, so two concurrent transitions cannot both write an audit row.

With strict mode off any enumerated status is accepted by update_status and
only the shipped audit row is written, as the admin panel originally did.
"""
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, Iterable, List, Optional

import pydantic
from sqlalchemy import func, select, update
from sqlalchemy.exc import SQLAlchemyError

from ..app.config import Config
from ..data.database import SessionLocal, session_scope
from ..data.models import (
    CancelledOrder,
    DEFAULT_CANCEL_REASON,
    DeliveryType,
    Order,
    OrderItem,
    OrderStatus,
    Product,
    ShippedOrder,
    User,
)
from ..schemas.order_models import (
    CancelledOrderOut,
    DashboardStats,
    LineItem,
    OrderOut,
    ShippedOrderOut,
    ShippingAddress,
)
from ..utils.errors import InvalidTransitionError, NotFoundError, StoreError, ValidationError
from ..utils.logger import get_logger
from ..utils.security import mask_pii

logger = get_logger("orders")

TRANSITIONS: Dict[OrderStatus, frozenset] = {
    OrderStatus.pending: frozenset({OrderStatus.processing, OrderStatus.shipped, OrderStatus.cancelled}),
    OrderStatus.processing: frozenset({OrderStatus.shipped, OrderStatus.cancelled}),
    OrderStatus.shipped: frozenset({OrderStatus.delivered}),
    OrderStatus.delivered: frozenset(),
    OrderStatus.cancelled: frozenset(),
}

NOT_CANCELLABLE = (OrderStatus.shipped, OrderStatus.delivered)

STATS_RANGES = {"7d": 7, "30d": 30, "90d": 90, "1y": 365}
RECENT_ORDERS = 10


def _inline_dispatch(fn: Callable, *args) -> None:
    fn(*args)


def _blank(value: Optional[str]) -> bool:
    return value is None or not str(value).strip()


def validate_order_input(line_items: Iterable[Any], total_amount: Any, shipping_address: Any):
    """Check a new order payload; returns (items, total, address) or raises ValidationError."""
    try:
        items = [item if isinstance(item, LineItem) else LineItem.model_validate(item) for item in line_items or []]
    except pydantic.ValidationError as e:
        raise ValidationError(f"Invalid product line: {e.errors()[0]['msg']}") from e
    if not items:
        raise ValidationError("Products are required")
    if any(item.quantity < 1 for item in items):
        raise ValidationError("Quantity must be at least 1")

    if isinstance(total_amount, bool):
        total_amount = None
    try:
        total = float(total_amount) if total_amount is not None else None
    except (TypeError, ValueError):
        total = None
    if total is None or not total > 0:
        raise ValidationError("Valid total amount is required")

    if shipping_address is None:
        raise ValidationError("Complete shipping address is required")
    try:
        address = (
            shipping_address
            if isinstance(shipping_address, ShippingAddress)
            else ShippingAddress.model_validate(shipping_address)
        )
    except pydantic.ValidationError as e:
        raise ValidationError("Delivery type must be 'office' or 'home'") from e
    if _blank(address.phone_number) or _blank(address.wilaya) or _blank(address.daira):
        raise ValidationError("Complete shipping address is required")
    if address.delivery_type is None:
        raise ValidationError("Delivery type must be 'office' or 'home'")
    if address.delivery_type == DeliveryType.home and _blank(address.home_address):
        raise ValidationError("Home address is required for home delivery")

    return items, total, address


def parse_status(value: Any) -> OrderStatus:
    try:
        return OrderStatus(value)
    except ValueError:
        allowed = ", ".join(s.value for s in OrderStatus)
        raise ValidationError(f"Invalid status '{value}', expected one of: {allowed}") from None


class OrderService:
    def __init__(self, session_factory: Callable = None, notifier=None, dispatch: Callable = None,
                 strict_transitions: bool = None):
        self.session_factory = session_factory or SessionLocal
        self.notifier = notifier
        self.dispatch = dispatch or _inline_dispatch
        self.strict_transitions = Config.ORDER_STRICT_TRANSITIONS if strict_transitions is None else strict_transitions

    # -- creation ---------------------------------------------------------------

    def create_order(self, user_id: int, line_items, total_amount, shipping_address,
                     dispatch: Callable = None) -> OrderOut:
        items, total, address = validate_order_input(line_items, total_amount, shipping_address)

        try:
            with session_scope(self.session_factory) as db:
                if db.get(User, user_id) is None:
                    raise ValidationError("Unknown user")
                wanted = {item.product_id for item in items}
                products = {p.id: p for p in db.scalars(select(Product).where(Product.id.in_(wanted)))}
                unknown = wanted - set(products)
                if unknown:
                    missing = ", ".join(str(i) for i in sorted(unknown))
                    raise ValidationError(f"Unknown product(s): {missing}")

                order = Order(
                    user_id=user_id,
                    total_amount=total,
                    status=OrderStatus.pending,
                    delivery_type=address.delivery_type,
                    wilaya=address.wilaya.strip(),
                    daira=address.daira.strip(),
                    home_address=address.home_address,
                    phone_number=address.phone_number.strip(),
                    notes=address.notes,
                    country=address.country,
                    items=[
                        OrderItem(
                            product_id=item.product_id,
                            quantity=item.quantity,
                            size=item.size,
                            color=item.color,
                            product_name=products[item.product_id].name,
                            unit_price=products[item.product_id].sale_price or products[item.product_id].price,
                        )
                        for item in items
                    ],
                )
                db.add(order)
                db.flush()
                db.refresh(order)
                created = OrderOut.from_order(order)
        except SQLAlchemyError as e:
            logger.exception("Error creating order")
            raise StoreError("Error creating order") from e

        logger.info(
            "Order %s created for user %s (%d line(s), total %.2f, phone %s)",
            created.id, user_id, len(items), total, mask_pii(address.phone_number),
        )
        self._schedule_notification(created, dispatch or self.dispatch)
        return created

    def _schedule_notification(self, order: OrderOut, dispatch: Callable) -> None:
        if self.notifier is None:
            return
        try:
            dispatch(self._notify, order)
        except Exception:
            logger.exception("Could not schedule notification for order %s", order.id)

    def _notify(self, order: OrderOut) -> None:
        # Never let a broken mailer fail a sale
        try:
            self.notifier.notify_new_order(order)
        except Exception as e:
            logger.error("Email notification failed for order %s: %s", order.id, e)

    # -- transitions ------------------------------------------------------------

    def update_status(self, order_id: int, new_status, tracking_number: str = None,
                      estimated_delivery: datetime = None) -> OrderOut:
        status = parse_status(new_status)
        try:
            with session_scope(self.session_factory) as db:
                order = self._get(db, order_id)
                previous = order.status
                if status != previous:
                    if status == OrderStatus.cancelled and self.strict_transitions:
                        self._cancel(db, order, reason=None)
                    else:
                        self._check_transition(previous, status)
                        if status == OrderStatus.shipped:
                            db.add(ShippedOrder(
                                order_id=order.id,
                                tracking_number=tracking_number,
                                estimated_delivery=estimated_delivery,
                            ))
                        self._compare_and_set(db, order, previous, status)
                    logger.info("Order %s: %s -> %s", order.id, previous.value, status.value)
                updated = OrderOut.from_order(order)
        except SQLAlchemyError as e:
            logger.exception("Error updating order %s", order_id)
            raise StoreError("Error updating order status") from e
        return updated

    def cancel_order(self, order_id: int, reason: str = None) -> CancelledOrderOut:
        try:
            with session_scope(self.session_factory) as db:
                order = self._get(db, order_id)
                record = self._cancel(db, order, reason)
                cancelled = CancelledOrderOut.model_validate(record)
        except SQLAlchemyError as e:
            logger.exception("Error cancelling order %s", order_id)
            raise StoreError("Error cancelling order") from e
        return cancelled

    def delete_order(self, order_id: int) -> None:
        try:
            with session_scope(self.session_factory) as db:
                order = self._get(db, order_id)
                db.delete(order)
        except SQLAlchemyError as e:
            logger.exception("Error deleting order %s", order_id)
            raise StoreError("An error occurred while deleting the order.") from e
        logger.info("Order %s deleted", order_id)

    def _check_transition(self, previous: OrderStatus, status: OrderStatus) -> None:
        if self.strict_transitions and status not in TRANSITIONS[previous]:
            raise InvalidTransitionError(f"Cannot change order status from {previous.value} to {status.value}")

    def _cancel(self, db, order: Order, reason: Optional[str]) -> CancelledOrder:
        if order.status in NOT_CANCELLABLE:
            raise InvalidTransitionError("Cannot cancel shipped or delivered orders")
        if order.status == OrderStatus.cancelled:
            existing = db.scalars(
                select(CancelledOrder).where(CancelledOrder.order_id == order.id).order_by(CancelledOrder.id)
            ).first()
            if existing is not None:
                return existing

        previous = order.status
        record = CancelledOrder(order_id=order.id, reason=(reason or "").strip() or DEFAULT_CANCEL_REASON)
        db.add(record)
        db.flush()
        self._compare_and_set(db, order, previous, OrderStatus.cancelled)
        logger.info("Order %s cancelled (%s)", order.id, record.reason)
        return record

    @staticmethod
    def _compare_and_set(db, order: Order, expected: OrderStatus, status: OrderStatus) -> None:
        result = db.execute(
            update(Order)
            .where(Order.id == order.id, Order.status == expected)
            .values(status=status)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            raise InvalidTransitionError("Order status changed concurrently, please retry")
        db.refresh(order)

    # -- reads ------------------------------------------------------------------

    @staticmethod
    def _get(db, order_id: int, user_id: int = None) -> Order:
        query = select(Order).where(Order.id == order_id)
        if user_id is not None:
            query = query.where(Order.user_id == user_id)
        order = db.scalars(query).first()
        if order is None:
            raise NotFoundError("Order not found")
        return order

    def get_order(self, order_id: int, user_id: int = None) -> OrderOut:
        try:
            with session_scope(self.session_factory) as db:
                return OrderOut.from_order(self._get(db, order_id, user_id))
        except SQLAlchemyError as e:
            logger.exception("Error fetching order %s", order_id)
            raise StoreError("Error fetching order") from e

    def list_user_orders(self, user_id: int) -> List[OrderOut]:
        return self._list(select(Order).where(Order.user_id == user_id).order_by(Order.id))

    def list_all_orders(self) -> List[OrderOut]:
        return self._list(select(Order).order_by(Order.id))

    def list_cancelled_orders(self) -> List[CancelledOrderOut]:
        return self._list_audit(CancelledOrder, CancelledOrderOut, "cancelled")

    def list_shipped_orders(self) -> List[ShippedOrderOut]:
        return self._list_audit(ShippedOrder, ShippedOrderOut, "shipped")

    def _list_audit(self, model, schema, label: str):
        try:
            with session_scope(self.session_factory) as db:
                rows = db.scalars(select(model).order_by(model.id)).all()
                return [schema.model_validate(r) for r in rows]
        except SQLAlchemyError as e:
            logger.exception("Error listing %s orders", label)
            raise StoreError(f"Error listing {label} orders") from e

    def _list(self, query) -> List[OrderOut]:
        try:
            with session_scope(self.session_factory) as db:
                return [OrderOut.from_order(o) for o in db.scalars(query).all()]
        except SQLAlchemyError as e:
            raise StoreError(f"Error listing orders: {e}") from e

    def dashboard_stats(self, range: str = "30d") -> DashboardStats:
        if range not in STATS_RANGES:
            range = "30d"
        start = datetime.now(timezone.utc).replace(tzinfo=None) - timedelta(days=STATS_RANGES[range])
        in_range = Order.created_at >= start

        try:
            with session_scope(self.session_factory) as db:
                total_orders = db.scalar(select(func.count(Order.id)).where(in_range)) or 0
                revenue = db.scalar(
                    select(func.coalesce(func.sum(Order.total_amount), 0.0))
                    .where(in_range, Order.status != OrderStatus.cancelled)
                ) or 0.0
                by_status = {
                    status.value: count
                    for status, count in db.execute(
                        select(Order.status, func.count(Order.id)).where(in_range).group_by(Order.status)
                    )
                }
                recent = db.scalars(
                    select(Order).where(in_range).order_by(Order.created_at.desc(), Order.id.desc()).limit(RECENT_ORDERS)
                ).all()

                return DashboardStats(
                    range=range,
                    total_products=db.scalar(select(func.count(Product.id))) or 0,
                    total_orders=total_orders,
                    total_revenue=float(revenue),
                    total_users=db.scalar(select(func.count(User.id))) or 0,
                    pending_orders=by_status.get("pending", 0),
                    processing_orders=by_status.get("processing", 0),
                    shipped_orders=by_status.get("shipped", 0),
                    delivered_orders=by_status.get("delivered", 0),
                    cancelled_orders=by_status.get("cancelled", 0),
                    orders_by_status=by_status,
                    average_order_value=float(revenue) / total_orders if total_orders else 0.0,
                    featured_products=db.scalar(select(func.count(Product.id)).where(Product.featured.is_(True))) or 0,
                    out_of_stock_products=db.scalar(select(func.count(Product.id)).where(Product.in_stock.is_(False))) or 0,
                    recent_orders=[OrderOut.from_order(o) for o in recent],
                )
        except SQLAlchemyError as e:
            logger.exception("Error fetching dashboard stats")
            raise StoreError("Error fetching dashboard stats") from e
