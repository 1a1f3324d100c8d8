from sqlalchemy import Column, Integer, String, Float, DateTime, ForeignKey, Enum, Boolean, JSON, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from .database import Base
import enum


class DeliveryType(str, enum.Enum):
    office = "office"
    home = "home"


class OrderStatus(str, enum.Enum):
    pending = "pending"
    processing = "processing"
    shipped = "shipped"
    delivered = "delivered"
    cancelled = "cancelled"


DEFAULT_CANCEL_REASON = "No reason provided"
DEFAULT_COUNTRY = "Algeria"


class Product(Base):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, index=True, nullable=False)
    description = Column(Text, nullable=False, default="")
    price = Column(Float, nullable=False)
    sale_price = Column(Float, nullable=True)  # null unless 0 < sale_price < price
    categories = Column(JSON, nullable=False, default=list)
    images = Column(JSON, nullable=False, default=list)
    sizes = Column(JSON, nullable=False, default=list)
    colors = Column(JSON, nullable=False, default=list)
    in_stock = Column(Boolean, nullable=False, default=True)
    featured = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    order_items = relationship("OrderItem", back_populates="product")


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String, unique=True, index=True, nullable=False)
    first_name = Column(String, nullable=True)
    last_name = Column(String, nullable=True)
    is_admin = Column(Boolean, nullable=False, default=False)

    orders = relationship("Order", back_populates="user")


class Order(Base):
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    total_amount = Column(Float, nullable=False)
    status = Column(Enum(OrderStatus), nullable=False, default=OrderStatus.pending, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)

    # shipping address
    delivery_type = Column(Enum(DeliveryType), nullable=False)
    wilaya = Column(String, nullable=False)
    daira = Column(String, nullable=False)
    home_address = Column(String, nullable=True)
    phone_number = Column(String, nullable=False)
    notes = Column(String, nullable=True)
    country = Column(String, nullable=False, default=DEFAULT_COUNTRY)

    user = relationship("User", back_populates="orders")
    items = relationship("OrderItem", back_populates="order", cascade="all, delete-orphan", order_by="OrderItem.id")


class OrderItem(Base):
    __tablename__ = "order_items"

    id = Column(Integer, primary_key=True, index=True)
    order_id = Column(Integer, ForeignKey("orders.id", ondelete="CASCADE"), nullable=False)
    # Nulled when the product is deleted; the name and price stay on the line
    product_id = Column(Integer, ForeignKey("products.id", ondelete="SET NULL"), nullable=True)
    quantity = Column(Integer, nullable=False)
    size = Column(String, nullable=True)
    color = Column(String, nullable=True)
    product_name = Column(String, nullable=True)
    unit_price = Column(Float, nullable=True)

    order = relationship("Order", back_populates="items")
    product = relationship("Product", back_populates="order_items")


class ShippedOrder(Base):
    __tablename__ = "shipped_orders"

    id = Column(Integer, primary_key=True, index=True)
    # deleting an order leaves its audit rows behind
    order_id = Column(Integer, ForeignKey("orders.id", ondelete="SET NULL"), nullable=True, index=True)
    tracking_number = Column(String, nullable=True)
    estimated_delivery = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    order = relationship("Order")


class CancelledOrder(Base):
    __tablename__ = "cancelled_orders"

    id = Column(Integer, primary_key=True, index=True)
    order_id = Column(Integer, ForeignKey("orders.id", ondelete="SET NULL"), nullable=True, index=True)
    reason = Column(String, nullable=False, default=DEFAULT_CANCEL_REASON)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    order = relationship("Order")


class SiteSettings(Base):
    __tablename__ = "site_settings"

    id = Column(Integer, primary_key=True, index=True)
    site_name = Column(String, nullable=False)
    hero_image_desktop = Column(String, nullable=True)
    hero_image_mobile = Column(String, nullable=True)
    hero_title = Column(String, nullable=False)
    hero_subtitle = Column(String, nullable=False)
    categories = Column(JSON, nullable=False, default=list)
    footer_text = Column(String, nullable=True)
    contact_email = Column(String, nullable=True)
    contact_phone = Column(String, nullable=True)
    social_links = Column(JSON, nullable=False, default=dict)

    # email notifications
    email_enabled = Column(Boolean, nullable=False, default=False)
    admin_email = Column(String, nullable=True)
    smtp_host = Column(String, nullable=True)
    smtp_port = Column(Integer, nullable=False, default=587)
    smtp_user = Column(String, nullable=True)
    smtp_password = Column(String, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
