"""Order related pydantic models with stricter types.

- Use Enum for delivery type and status to prevent invalid values.
- Shipping fields stay optional here; the order service reports what is
  missing with a descriptive message instead of a bare schema error.
"""
from datetime import datetime
from typing import Dict, List, Optional

from pydantic import Field

from .base import CamelModel
from ..data.models import DeliveryType, OrderStatus, DEFAULT_COUNTRY


class LineItem(CamelModel):
    product_id: int = Field(alias="product")
    quantity: int = 1
    size: Optional[str] = None
    color: Optional[str] = None


class ShippingAddress(CamelModel):
    delivery_type: Optional[DeliveryType] = None
    wilaya: Optional[str] = None
    daira: Optional[str] = None
    home_address: Optional[str] = None
    phone_number: Optional[str] = None
    notes: Optional[str] = None
    country: str = DEFAULT_COUNTRY


class OrderCreate(CamelModel):
    line_items: List[LineItem] = Field(default_factory=list, alias="products")
    total_amount: Optional[float] = None
    shipping_address: Optional[ShippingAddress] = None


class OrderItemOut(LineItem):
    product_id: Optional[int] = Field(default=None, alias="product")
    name: Optional[str] = None
    unit_price: Optional[float] = None


class OrderOut(CamelModel):
    id: int
    user_id: int
    customer_email: Optional[str] = None
    line_items: List[OrderItemOut] = Field(alias="products")
    total_amount: float
    shipping_address: ShippingAddress
    status: OrderStatus
    created_at: Optional[datetime] = None

    @classmethod
    def from_order(cls, order) -> "OrderOut":
        """Build from an ORM Order; call while its session is still open."""
        return cls(
            id=order.id,
            user_id=order.user_id,
            customer_email=order.user.email if order.user else None,
            line_items=[
                OrderItemOut(
                    product_id=item.product_id,
                    quantity=item.quantity,
                    size=item.size,
                    color=item.color,
                    name=item.product_name,
                    unit_price=item.unit_price,
                )
                for item in order.items
            ],
            total_amount=order.total_amount,
            shipping_address=ShippingAddress(
                delivery_type=order.delivery_type,
                wilaya=order.wilaya,
                daira=order.daira,
                home_address=order.home_address,
                phone_number=order.phone_number,
                notes=order.notes,
                country=order.country,
            ),
            status=order.status,
            created_at=order.created_at,
        )


class StatusUpdate(CamelModel):
    status: str
    tracking_number: Optional[str] = None
    estimated_delivery: Optional[datetime] = None


class CancelRequest(CamelModel):
    reason: Optional[str] = None


class ShippedOrderOut(CamelModel):
    id: int
    order_id: Optional[int] = Field(default=None, alias="originalOrder")
    tracking_number: Optional[str] = None
    estimated_delivery: Optional[datetime] = None
    created_at: Optional[datetime] = None


class CancelledOrderOut(CamelModel):
    id: int
    order_id: Optional[int] = Field(default=None, alias="originalOrder")
    reason: str
    created_at: Optional[datetime] = None


class CancelResponse(CamelModel):
    message: str
    cancelled_order: CancelledOrderOut


class MessageResponse(CamelModel):
    message: str


class DashboardStats(CamelModel):
    range: str
    total_products: int
    total_orders: int
    total_revenue: float
    total_users: int
    pending_orders: int
    processing_orders: int
    shipped_orders: int
    delivered_orders: int
    cancelled_orders: int
    orders_by_status: Dict[str, int]
    average_order_value: float
    featured_products: int
    out_of_stock_products: int
    recent_orders: List[OrderOut]
