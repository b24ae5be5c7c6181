"""Supplier model."""
from sqlalchemy import Column, BigInteger, Integer, String, Numeric, DateTime, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from tradedesk.database import Base


class Supplier(Base):
    """Supplier price list (steel tiers + optional cement pricing)."""
    
    __tablename__ = 'supplier'
    __table_args__ = (
        UniqueConstraint('account_id', 'name', name='uq_supplier_account_name'),
    )
    
    id = Column(BigInteger().with_variant(Integer, 'sqlite'), primary_key=True, autoincrement=True)
    account_id = Column(String(128), nullable=False, index=True)
    name = Column(String(200), nullable=False)
    
    # Cement pricing: price_per_batch buys batch_quantity_bags (both NULL when not sold)
    cement_price_per_batch = Column(Numeric(12, 2), nullable=True)
    cement_batch_quantity_bags = Column(Numeric(12, 3), nullable=True)
    
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())
    
    # Relationships
    steel_tiers = relationship(
        'SupplierSteelTier',
        back_populates='supplier',
        cascade='all, delete-orphan',
        order_by='SupplierSteelTier.position'
    )
    
    def __repr__(self):
        return f"<Supplier(id={self.id}, name='{self.name}')>"
