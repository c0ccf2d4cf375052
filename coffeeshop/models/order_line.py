"""Order line model."""
from sqlalchemy import Column, BigInteger, Integer, String, Numeric, ForeignKey
from sqlalchemy.orm import relationship
from coffeeshop.database import Base, BigIntegerPK


class OrderLine(Base):
    """Product entry of an order, priced at checkout time."""

    __tablename__ = 'product_orders'

    id = Column(BigIntegerPK, primary_key=True, autoincrement=True)
    order_id = Column(BigInteger, ForeignKey('orders.id'), nullable=False, index=True)
    product_id = Column(BigInteger, ForeignKey('product.id'), nullable=False)
    quantity = Column(Integer, nullable=False)
    subtotal = Column(Numeric(12, 2), nullable=False)
    size = Column(String(30), nullable=True)
    variant = Column(String(30), nullable=True)

    # Relationships
    order = relationship('Order', back_populates='lines')
    product = relationship('Product')

    def __repr__(self):
        return f"<OrderLine(id={self.id}, order_id={self.order_id}, product_id={self.product_id}, quantity={self.quantity})>"
