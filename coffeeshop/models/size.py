"""Size reference model."""
from sqlalchemy import Column, String
from coffeeshop.database import Base, BigIntegerPK


class Size(Base):
    """Cup size offered for a product (Regular, Medium, Large)."""

    __tablename__ = 'size'

    id = Column(BigIntegerPK, primary_key=True, autoincrement=True)
    name = Column(String(30), nullable=False, unique=True)

    def __repr__(self):
        return f"<Size(id={self.id}, name='{self.name}')>"
