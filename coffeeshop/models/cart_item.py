"""Cart item model."""
from sqlalchemy import Column, BigInteger, Integer, DateTime, ForeignKey, UniqueConstraint, CheckConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from coffeeshop.database import Base, BigIntegerPK


class CartItem(Base):
    """One cart line per (account, product, size, variant)."""

    __tablename__ = 'cart'
    __table_args__ = (
        UniqueConstraint(
            'account_id', 'product_id', 'size_id', 'variant_id',
            name='uq_cart_line', postgresql_nulls_not_distinct=True
        ),
        CheckConstraint('quantity > 0', name='ck_cart_quantity_positive'),
    )

    id = Column(BigIntegerPK, primary_key=True, autoincrement=True)
    account_id = Column(BigInteger, ForeignKey('account.id'), nullable=False, index=True)
    product_id = Column(BigInteger, ForeignKey('product.id'), nullable=False)
    size_id = Column(BigInteger, ForeignKey('size.id'), nullable=True)
    variant_id = Column(BigInteger, ForeignKey('variant.id'), nullable=True)
    quantity = Column(Integer, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    # Relationships
    account = relationship('Account', back_populates='cart_items')
    product = relationship('Product')
    size = relationship('Size')
    variant = relationship('Variant')

    def __repr__(self):
        return f"<CartItem(id={self.id}, account_id={self.account_id}, product_id={self.product_id}, quantity={self.quantity})>"
