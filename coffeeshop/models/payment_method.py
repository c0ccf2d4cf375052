"""Payment method model."""
from sqlalchemy import Column, String
from coffeeshop.database import Base, BigIntegerPK


class PaymentMethod(Base):
    """Payment method chosen at checkout."""

    __tablename__ = 'payment_method'

    id = Column(BigIntegerPK, primary_key=True, autoincrement=True)
    name = Column(String(50), nullable=False, unique=True)

    def to_dict(self):
        return {'id': self.id, 'name': self.name}

    def __repr__(self):
        return f"<PaymentMethod(id={self.id}, name='{self.name}')>"
