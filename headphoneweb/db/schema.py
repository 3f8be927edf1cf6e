import enum
from datetime import datetime
from decimal import Decimal
from typing import List, Optional
from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Integer, Numeric, Text, UniqueConstraint
from sqlmodel import Column, Field, Relationship, SQLModel, String
from headphoneweb.common.utils import now


class OrderStatus(str, enum.Enum):
    PENDING = "pending"
    PAID = "paid"
    FAILED = "failed"


class PaymentStatus(str, enum.Enum):
    PENDING = "pending"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class MessageStatus(str, enum.Enum):
    UNREAD = "UNREAD"
    READ = "READ"
    RESPONDED = "RESPONDED"


class Admin(SQLModel, table=True):
    __tablename__ = "admin"

    admin_id: Optional[int] = Field(default=None, primary_key=True)
    username: str = Field(sa_column=Column(String(128), unique=True, nullable=False, index=True))
    password_hash: str = Field(sa_column=Column(Text(), nullable=False))


class Headphones(SQLModel, table=True):
    """Product catalogue."""
    __tablename__ = "headphones"
    __table_args__ = (CheckConstraint("stock_quantity >= 0", name="ck_headphones_stock_non_negative"),)

    product_id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(sa_column=Column(String(255), nullable=False, unique=True))
    description: Optional[str] = Field(default=None, sa_column=Column(Text(), nullable=True))
    price: Decimal = Field(sa_column=Column(Numeric(10, 2), nullable=False))
    stock_quantity: int = Field(default=0, sa_column=Column(Integer, nullable=False, default=0))
    image_url: Optional[str] = Field(default=None, sa_column=Column(String(1024), nullable=True))


class CartSession(SQLModel, table=True):
    __tablename__ = "cart_session"

    session_id: Optional[int] = Field(default=None, primary_key=True)
    # client generated, one row per identifier
    user_identifier: str = Field(sa_column=Column(String(255), unique=True, nullable=False, index=True))
    created_at: datetime = Field(default_factory=now,
        sa_column=Column(DateTime(timezone=True), nullable=False, default=now))
    last_modified: datetime = Field(default_factory=now,
        sa_column=Column(DateTime(timezone=True), nullable=False, default=now, onupdate=now))

    items: List["CartItem"] = Relationship(back_populates="cart_session",
                                           sa_relationship_kwargs={"cascade": "all, delete-orphan"})


class CartItem(SQLModel, table=True):
    __tablename__ = "cart_items"
    __table_args__ = (
        UniqueConstraint("session_id", "product_id", name="uq_cart_items_session_product"),
        CheckConstraint("quantity > 0", name="ck_cart_items_quantity_positive"),
    )

    cart_item_id: Optional[int] = Field(default=None, primary_key=True)
    session_id: int = Field(sa_column=Column(ForeignKey("cart_session.session_id", ondelete="CASCADE"),
                                             index=True, nullable=False))
    product_id: int = Field(sa_column=Column(ForeignKey("headphones.product_id"), nullable=False))
    quantity: int = Field(default=1, nullable=False)

    cart_session: "CartSession" = Relationship(back_populates="items")


class Orders(SQLModel, table=True):
    __tablename__ = "orders"

    order_id: Optional[int] = Field(default=None, primary_key=True)
    payment_intent_id: Optional[str] = Field(default=None,
        sa_column=Column(String(255), unique=True, nullable=True, index=True))
    email: Optional[str] = Field(default=None, sa_column=Column(String(320), nullable=True))
    total_price: Decimal = Field(sa_column=Column(Numeric(10, 2), nullable=False))
    status: str = Field(default=OrderStatus.PENDING.value,
        sa_column=Column(String(32), nullable=False, default=OrderStatus.PENDING.value))
    created_at: datetime = Field(default_factory=now,
        sa_column=Column(DateTime(timezone=True), nullable=False, default=now))
    updated_at: datetime = Field(default_factory=now,
        sa_column=Column(DateTime(timezone=True), nullable=False, default=now, onupdate=now))

    order_items: List["OrderItem"] = Relationship(back_populates="order",
                                                  sa_relationship_kwargs={"cascade": "all, delete-orphan"})


class OrderItem(SQLModel, table=True):
    """Keeps the unit price at purchase time since catalogue prices change."""
    __tablename__ = "order_items"

    order_item_id: Optional[int] = Field(default=None, primary_key=True)
    order_id: int = Field(sa_column=Column(ForeignKey("orders.order_id", ondelete="CASCADE"),
                                           index=True, nullable=False))
    product_id: int = Field(sa_column=Column(ForeignKey("headphones.product_id"), nullable=False))
    quantity: int = Field(default=1, nullable=False)
    price_at_time: Decimal = Field(sa_column=Column(Numeric(10, 2), nullable=False))

    order: "Orders" = Relationship(back_populates="order_items")


class Payment(SQLModel, table=True):
    __tablename__ = "payment"

    payment_id: Optional[int] = Field(default=None, primary_key=True)
    # 1:1 with orders, kept in lockstep with orders.status
    order_id: int = Field(sa_column=Column(ForeignKey("orders.order_id", ondelete="CASCADE"),
                                           unique=True, nullable=False))
    stripe_payment_id: Optional[str] = Field(default=None, sa_column=Column(String(255), nullable=True))
    payment_status: str = Field(default=PaymentStatus.PENDING.value,
        sa_column=Column(String(32), nullable=False, default=PaymentStatus.PENDING.value))
    amount_received: Optional[Decimal] = Field(default=None, sa_column=Column(Numeric(10, 2), nullable=True))
    payment_date: Optional[datetime] = Field(default=None,
        sa_column=Column(DateTime(timezone=True), nullable=True))


class ContactMessage(SQLModel, table=True):
    __tablename__ = "contact_message"

    message_id: Optional[int] = Field(default=None, primary_key=True)
    name: Optional[str] = Field(default=None, sa_column=Column(String(255), nullable=True))
    email: str = Field(sa_column=Column(String(320), nullable=False))
    message: str = Field(sa_column=Column(Text(), nullable=False))
    message_date: datetime = Field(default_factory=now,
        sa_column=Column(DateTime(timezone=True), nullable=False, default=now, index=True))
    status: str = Field(default=MessageStatus.UNREAD.value,
        sa_column=Column(String(16), nullable=False, default=MessageStatus.UNREAD.value))
    admin_response: Optional[str] = Field(default=None, sa_column=Column(Text(), nullable=True))
    responded_at: Optional[datetime] = Field(default=None,
        sa_column=Column(DateTime(timezone=True), nullable=True))
    updated_at: datetime = Field(default_factory=now,
        sa_column=Column(DateTime(timezone=True), nullable=False, default=now, onupdate=now))
