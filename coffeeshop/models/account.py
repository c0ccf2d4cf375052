"""Account model - customers and staff who authenticate with a bearer token."""
from sqlalchemy import Column, String, Boolean, DateTime
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from werkzeug.security import generate_password_hash, check_password_hash
from coffeeshop.database import Base, BigIntegerPK


class Account(Base):
    """Account with the contact details used as checkout defaults."""

    __tablename__ = 'account'

    id = Column(BigIntegerPK, primary_key=True, autoincrement=True)
    email = Column(String(255), nullable=False, unique=True)
    password_hash = Column(String(255), nullable=True)
    full_name = Column(String(100), nullable=True)
    address = Column(String(255), nullable=True)
    phone = Column(String(20), nullable=True)
    role = Column(String(20), nullable=False, default='user', server_default='user')
    active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    # Relationships
    cart_items = relationship('CartItem', back_populates='account', cascade='all, delete-orphan')
    orders = relationship('Order', back_populates='account')

    def set_password(self, password):
        self.password_hash = generate_password_hash(password, method='scrypt')

    def check_password(self, password):
        """False for accounts created without a password (seeded or CLI-issued)."""
        if not self.password_hash:
            return False
        return check_password_hash(self.password_hash, password)

    def to_profile_dict(self):
        return {
            'id': self.id,
            'fullname': self.full_name,
            'email': self.email,
            'phone': self.phone,
            'address': self.address,
        }

    def __repr__(self):
        return f"<Account(id={self.id}, email='{self.email}', role='{self.role}')>"
