"""Customer order model."""
from sqlalchemy import Column, String, Text, Numeric, DateTime, Enum
from sqlalchemy.orm import relationship
from tradedesk.database import Base
from tradedesk.domain import OrderStatus


class CustomerOrder(Base):
    """
    Finalized order (priced snapshot).
    
    The id is assigned by the order wizard, so edits overwrite the same row.
    Totals are stored as computed at submit time and never re-derived.
    Amounts keep their fractional digits; they are rounded only for display.
    """
    
    __tablename__ = 'customer_order'
    
    id = Column(String(64), primary_key=True)
    account_id = Column(String(128), nullable=False, index=True)
    
    customer_name = Column(String(200), nullable=False)
    customer_phone = Column(String(50), nullable=False, index=True)
    place = Column(Text, nullable=False)
    transport = Column(Numeric(14, 4), nullable=True)  # NULL when never entered
    driver_name = Column(String(200), nullable=True)
    payment_method = Column(String(20), nullable=False)
    
    # Order-level discount: 'percent' or 'flat'
    discount_amount = Column(Numeric(14, 4), nullable=False, default=0)
    discount_mode = Column(String(10), nullable=False, default='percent')
    
    subtotal = Column(Numeric(28, 10), nullable=False)
    discount_value = Column(Numeric(28, 10), nullable=False)
    final_total = Column(Numeric(28, 10), nullable=False)
    
    status = Column(Enum(OrderStatus, name='order_status'), nullable=False, default=OrderStatus.PENDING)
    created_at = Column(DateTime, nullable=False)
    updated_at = Column(DateTime, nullable=True)
    
    # Relationships
    lines = relationship(
        'CustomerOrderLine',
        back_populates='order',
        cascade='all, delete-orphan',
        order_by='CustomerOrderLine.position'
    )
    
    def __repr__(self):
        return f"<CustomerOrder(id={self.id}, total={self.final_total}, status={self.status.value})>"
