"""Customer order line model."""
from sqlalchemy import Column, BigInteger, Integer, String, Numeric, ForeignKey
from sqlalchemy.orm import relationship
from tradedesk.database import Base


class CustomerOrderLine(Base):
    """One priced line of a customer order."""
    
    __tablename__ = 'customer_order_line'
    
    id = Column(BigInteger().with_variant(Integer, 'sqlite'), primary_key=True, autoincrement=True)
    order_id = Column(String(64), ForeignKey('customer_order.id', ondelete='CASCADE'), nullable=False, index=True)
    position = Column(Integer, nullable=False, default=0)
    item_id = Column(String(64), nullable=False)
    
    kind = Column(String(10), nullable=False)  # 'Steel', 'Cement' or 'Other'
    supplier_name = Column(String(200), nullable=True)
    diameter_label = Column(String(50), nullable=True)
    custom_label = Column(String(200), nullable=True)
    custom_unit_price = Column(Numeric(24, 12), nullable=True)
    
    quantity = Column(Numeric(14, 4), nullable=False)
    unit_price = Column(Numeric(24, 12), nullable=False)
    line_total = Column(Numeric(28, 10), nullable=False)
    
    # Relationships
    order = relationship('CustomerOrder', back_populates='lines')
    
    def __repr__(self):
        return f"<CustomerOrderLine(id={self.id}, kind='{self.kind}', qty={self.quantity})>"
