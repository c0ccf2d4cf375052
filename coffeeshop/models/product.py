"""Product model."""
from sqlalchemy import Column, BigInteger, String, Boolean, Integer, Numeric, DateTime, ForeignKey, CheckConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from coffeeshop.database import Base, BigIntegerPK


class Product(Base):
    """Product sold in the shop."""

    __tablename__ = 'product'
    __table_args__ = (
        CheckConstraint('stock >= 0', name='ck_product_stock_non_negative'),
    )

    id = Column(BigIntegerPK, primary_key=True, autoincrement=True)
    name = Column(String(100), nullable=False)
    description = Column(String, nullable=True)
    category_id = Column(BigInteger, ForeignKey('category.id'), nullable=True)
    price_original = Column(Numeric(12, 2), nullable=False)
    price_discount = Column(Numeric(12, 2), nullable=False, default=0, server_default='0')
    flash_sale = Column(Boolean, nullable=False, default=False, server_default='false')
    stock = Column(Integer, nullable=False, default=0, server_default='0')
    image = Column(String(255), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    # Relationships
    category = relationship('Category', foreign_keys=[category_id])

    def __repr__(self):
        return f"<Product(id={self.id}, name='{self.name}', stock={self.stock})>"

    @property
    def effective_price(self):
        """Discounted price while the flash sale is on, original price otherwise."""
        return effective_price(self.price_original, self.price_discount, self.flash_sale)


def effective_price(price_original, price_discount, flash_sale):
    """Unit price a customer pays right now."""
    return price_discount if flash_sale else price_original
