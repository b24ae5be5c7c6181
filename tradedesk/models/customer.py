"""Customer model."""
from sqlalchemy import Column, BigInteger, Integer, String, Text, Numeric, DateTime, UniqueConstraint
from sqlalchemy.sql import func
from tradedesk.database import Base


class Customer(Base):
    """Customer defaults remembered from past orders, keyed by phone."""
    
    __tablename__ = 'customer'
    __table_args__ = (
        UniqueConstraint('account_id', 'phone', name='uq_customer_account_phone'),
    )
    
    id = Column(BigInteger().with_variant(Integer, 'sqlite'), primary_key=True, autoincrement=True)
    account_id = Column(String(128), nullable=False, index=True)
    phone = Column(String(50), nullable=False)
    name = Column(String(200), nullable=False)
    last_place = Column(Text, nullable=True)
    last_transport = Column(Numeric(14, 4), nullable=True)
    last_driver = Column(String(200), nullable=True)
    last_payment_method = Column(String(20), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())
    
    def __repr__(self):
        return f"<Customer(id={self.id}, name='{self.name}', phone='{self.phone}')>"
