"""Supplier steel tier model (price per steel diameter)."""
from sqlalchemy import Column, BigInteger, Integer, String, Numeric, ForeignKey
from sqlalchemy.orm import relationship
from tradedesk.database import Base


class SupplierSteelTier(Base):
    """
    One steel diameter offered by a supplier.
    
    price_per_batch buys batch_quantity_kg of that diameter.
    """
    
    __tablename__ = 'supplier_steel_tier'
    
    id = Column(BigInteger().with_variant(Integer, 'sqlite'), primary_key=True, autoincrement=True)
    supplier_id = Column(BigInteger, ForeignKey('supplier.id', ondelete='CASCADE'), nullable=False, index=True)
    position = Column(Integer, nullable=False, default=0)
    diameter_label = Column(String(50), nullable=False)
    price_per_batch = Column(Numeric(12, 2), nullable=False)
    batch_quantity_kg = Column(Numeric(12, 3), nullable=False)
    
    # Relationships
    supplier = relationship('Supplier', back_populates='steel_tiers')
    
    def __repr__(self):
        return f"<SupplierSteelTier(id={self.id}, diameter='{self.diameter_label}', price={self.price_per_batch})>"
