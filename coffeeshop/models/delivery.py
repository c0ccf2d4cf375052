"""Delivery model."""
from sqlalchemy import Column, String, Numeric
from coffeeshop.database import Base, BigIntegerPK


class Delivery(Base):
    """Delivery option with a flat fee. Reference data, never edited by checkout."""

    __tablename__ = 'delivery'

    id = Column(BigIntegerPK, primary_key=True, autoincrement=True)
    name = Column(String(50), nullable=False, unique=True)
    fee = Column(Numeric(12, 2), nullable=False, default=0, server_default='0')

    def to_dict(self):
        return {'id': self.id, 'name': self.name, 'fee': float(self.fee)}

    def __repr__(self):
        return f"<Delivery(id={self.id}, name='{self.name}', fee={self.fee})>"
