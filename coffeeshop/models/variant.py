"""Variant reference model."""
from sqlalchemy import Column, String
from coffeeshop.database import Base, BigIntegerPK


class Variant(Base):
    """Serving variant (Hot, Ice)."""

    __tablename__ = 'variant'

    id = Column(BigIntegerPK, primary_key=True, autoincrement=True)
    name = Column(String(30), nullable=False, unique=True)

    def __repr__(self):
        return f"<Variant(id={self.id}, name='{self.name}')>"
