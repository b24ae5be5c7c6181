"""
Unit tests for domain types.
"""

import pytest
from datetime import datetime
from decimal import Decimal
from tradedesk.domain import (
    DiscountMode, DiscountSpec, FinalizedOrder, ItemKind, LineItem, OrderStatus, PaymentMethod,
    SteelTier, normalize_item_kind, normalize_order_status, normalize_payment_method
)
from tradedesk.exceptions import ValidationError


class TestNormalizers:
    """Tests for enum normalizers."""
    
    def test_payment_method(self):
        assert normalize_payment_method('upi') == PaymentMethod.UPI
        assert normalize_payment_method(' Cash ') == PaymentMethod.CASH
        assert normalize_payment_method('') is None
        with pytest.raises(ValidationError):
            normalize_payment_method('Cheque')
    
    def test_order_status(self):
        assert normalize_order_status('in progress') == OrderStatus.IN_PROGRESS
        assert normalize_order_status('Completed') == OrderStatus.COMPLETE
        with pytest.raises(ValidationError):
            normalize_order_status(None)
    
    def test_item_kind(self):
        assert normalize_item_kind('STEEL') == ItemKind.STEEL
        with pytest.raises(ValidationError):
            normalize_item_kind('Sand')


class TestCatalogTypes:
    """Tests for SteelTier/CementPricing validation."""
    
    def test_tier_needs_positive_values(self):
        with pytest.raises(ValidationError):
            SteelTier('10mm', Decimal('0'), Decimal('1000'))
        with pytest.raises(ValidationError):
            SteelTier('10mm', Decimal('650'), Decimal('-1'))
    
    def test_discount_mode_from_string(self):
        assert DiscountSpec(Decimal('5'), 'FLAT').mode == DiscountMode.FLAT
        with pytest.raises(ValidationError):
            DiscountSpec(Decimal('5'), 'half')


class TestFinalizedOrder:
    """Tests for FinalizedOrder serialization."""
    
    def test_dict_round_trip(self, order_factory):
        order = order_factory(order_id='o-1', created_at=datetime(2026, 1, 10, 9, 0))
        assert FinalizedOrder.from_dict(order.to_dict()) == order
    
    def test_from_partial_record(self):
        """Older records with missing fields load with empty values."""
        order = FinalizedOrder.from_dict({
            'id': 'legacy',
            'status': 'Completed',
            'payment_method': 'Cheque',
            'items': [{'kind': 'Cement', 'quantity': '10', 'unit_price': '350'}],
            'created_at': '2025-12-01T10:00:00',
        })
        
        assert order.status == OrderStatus.COMPLETE
        assert order.payment_method is None
        assert order.transport is None
        assert order.items[0].line_total == Decimal('3500.00')
        assert order.totals.final_total == Decimal('0')
    
    def test_line_item_display_name(self):
        other = LineItem.create('Other', Decimal('1'), custom_label='Binding wire')
        steel = LineItem.create('Steel', Decimal('1'))
        assert other.display_name == 'Binding wire'
        assert steel.display_name == 'Steel'
        assert not steel.is_priced
