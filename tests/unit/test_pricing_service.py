"""
Unit tests for the pricing service (unit price resolution).
"""

import pytest
from decimal import Decimal
from tradedesk.domain import ItemKind, LineItem, SupplierCatalogEntry
from tradedesk.exceptions import PricingContractError
from tradedesk.services.pricing_service import find_supplier, price_line_item, resolve_unit_price


class TestResolveUnitPrice:
    """Tests for resolve_unit_price."""
    
    def test_steel_tier_price_per_kg(self, steel_supplier):
        """6500 per 1000 kg resolves to 6.5 per kg; 200 kg is 1300."""
        item = LineItem.create(ItemKind.STEEL, Decimal('200'), supplier_name='Shree Steel', diameter_label='12mm')
        
        unit_price = resolve_unit_price(item, steel_supplier)
        
        assert unit_price == Decimal('6.5')
        assert price_line_item(item, [steel_supplier]).line_total == Decimal('1300.00')
    
    def test_cement_price_per_bag(self, cement_supplier):
        item = LineItem.create(ItemKind.CEMENT, Decimal('10'), supplier_name='Ambuja Depot')
        assert resolve_unit_price(item, cement_supplier) == Decimal('350')
    
    def test_other_uses_custom_price_without_catalog(self):
        """Other items return their custom price regardless of the catalog."""
        item = LineItem.create(ItemKind.OTHER, Decimal('3'), custom_label='Binding wire',
                               custom_unit_price=Decimal('999'))
        
        assert resolve_unit_price(item, None) == Decimal('999')
        assert price_line_item(item, []).unit_price == Decimal('999')
    
    def test_missing_diameter_is_contract_error(self, steel_supplier):
        """No fallback price for a diameter the supplier does not list."""
        item = LineItem.create(ItemKind.STEEL, Decimal('100'), supplier_name='Shree Steel', diameter_label='16mm')
        
        with pytest.raises(PricingContractError) as exc_info:
            resolve_unit_price(item, steel_supplier)
        
        assert exc_info.value.diameter_label == '16mm'
        assert exc_info.value.status_code == 422
    
    def test_diameter_match_is_exact(self, steel_supplier):
        item = LineItem.create(ItemKind.STEEL, Decimal('100'), supplier_name='Shree Steel', diameter_label='10 mm')
        with pytest.raises(PricingContractError):
            resolve_unit_price(item, steel_supplier)
    
    def test_cement_from_steel_only_supplier(self, steel_supplier):
        item = LineItem.create(ItemKind.CEMENT, Decimal('5'), supplier_name='Shree Steel')
        with pytest.raises(PricingContractError) as exc_info:
            resolve_unit_price(item, steel_supplier)
        assert exc_info.value.supplier_name == 'Shree Steel'
    
    def test_unknown_supplier(self, catalog_entries):
        item = LineItem.create(ItemKind.CEMENT, Decimal('5'), supplier_name='Nobody')
        with pytest.raises(PricingContractError):
            price_line_item(item, catalog_entries)


class TestPriceLineItem:
    """Tests for price_line_item."""
    
    def test_returns_priced_copy(self, catalog_entries):
        item = LineItem.create(ItemKind.STEEL, Decimal('500'), supplier_name='Shree Steel', diameter_label='10mm')
        
        priced = price_line_item(item, catalog_entries)
        
        assert item.unit_price is None
        assert priced.id == item.id
        assert priced.unit_price == Decimal('0.65')
        assert priced.line_total == Decimal('325.00')
    
    def test_find_supplier_by_exact_name(self, catalog_entries):
        assert find_supplier(catalog_entries, 'Ambuja Depot').offers_cement
        assert find_supplier(catalog_entries, 'ambuja depot') is None
        assert find_supplier(None, 'Ambuja Depot') is None
    
    def test_empty_catalog_entry_has_no_offers(self):
        entry = SupplierCatalogEntry(name='Empty')
        assert not entry.offers_steel
        assert not entry.offers_cement
        assert entry.diameters == []
