"""Order model."""
from sqlalchemy import Column, BigInteger, String, Numeric, DateTime, Enum, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from coffeeshop.database import Base, BigIntegerPK
import enum


class OrderStatus(enum.Enum):
    """Order status enum. Checkout only ever writes PLACED."""
    PLACED = "placed"
    ON_PROGRESS = "on_progress"
    SENDING = "sending"
    DONE = "done"
    CANCELLED = "cancelled"


ORDER_NUMBER_PREFIX = '#ORD-'


def format_order_number(order_id: int) -> str:
    """Human-readable order number, zero-padded to at least three digits."""
    return f"{ORDER_NUMBER_PREFIX}{order_id:03d}"


class Order(Base):
    """Order header created once per successful checkout."""

    __tablename__ = 'orders'

    id = Column(BigIntegerPK, primary_key=True, autoincrement=True)
    order_number = Column(String(32), nullable=True, unique=True)
    account_id = Column(BigInteger, ForeignKey('account.id'), nullable=False, index=True)
    email = Column(String(255), nullable=False)
    full_name = Column(String(100), nullable=False)
    address = Column(String(255), nullable=False)
    phone = Column(String(20), nullable=False)
    delivery_id = Column(BigInteger, ForeignKey('delivery.id'), nullable=False)
    payment_method_id = Column(BigInteger, ForeignKey('payment_method.id'), nullable=False)
    subtotal = Column(Numeric(12, 2), nullable=False)
    tax = Column(Numeric(12, 2), nullable=False)
    delivery_fee = Column(Numeric(12, 2), nullable=False)
    total = Column(Numeric(12, 2), nullable=False)
    status = Column(Enum(OrderStatus, name='order_status'), nullable=False, default=OrderStatus.PLACED)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    # Relationships
    account = relationship('Account', back_populates='orders')
    delivery = relationship('Delivery')
    payment_method = relationship('PaymentMethod')
    lines = relationship('OrderLine', back_populates='order', cascade='all, delete-orphan')

    def __repr__(self):
        return f"<Order(id={self.id}, order_number='{self.order_number}', total={self.total}, status={self.status.value})>"
