"""
Unit tests for the order wizard.
"""

import pytest
from datetime import datetime
from decimal import Decimal
from tradedesk.domain import Customer, DiscountMode, ItemKind, OrderStatus, PaymentMethod
from tradedesk.exceptions import (
    BusinessLogicError, NotFoundError, PersistenceError, PricingContractError, ValidationError
)
from tradedesk.services.order_wizard_service import OrderWizard, WizardStep


class FailingOrderRepository:
    """Order repository whose writes always fail."""
    
    def __init__(self, error):
        self.error = error
        self.attempts = 0
    
    def load(self):
        return []
    
    def write(self, order):
        self.attempts += 1
        raise self.error
    
    def get(self, order_id):
        return None
    
    def subscribe(self, on_snapshot):
        on_snapshot([])
        return lambda: None


class BrokenCustomerRepository:
    """Customer repository whose upserts fail with an unexpected error."""
    
    def __init__(self):
        self.attempts = 0
    
    def get(self, phone):
        return None
    
    def upsert(self, customer):
        self.attempts += 1
        raise RuntimeError('customer store down')


def fill_items(wizard):
    wizard.add_item(ItemKind.STEEL, Decimal('500'), supplier_name='Shree Steel', diameter_label='10mm')
    wizard.add_item(ItemKind.CEMENT, Decimal('10'), supplier_name='Ambuja Depot')


def fill_customer(wizard, **overrides):
    fields = dict(
        customer_name='Ravi Kumar',
        customer_phone='9876543210',
        place='Site B',
        transport=Decimal('200'),
        driver_name='Mohan',
        payment_method=PaymentMethod.CASH,
    )
    fields.update(overrides)
    wizard.set_customer_info(**fields)


def go_to_review(wizard):
    fill_items(wizard)
    wizard.next()
    fill_customer(wizard)
    wizard.next()


class TestItemsStep:
    """Tests for the items step."""
    
    def test_no_items_blocks_next(self, wizard):
        with pytest.raises(ValidationError) as exc_info:
            wizard.next()
        
        assert exc_info.value.fields == ('no items',)
        assert wizard.step == WizardStep.ITEMS
    
    def test_items_are_priced_on_entry(self, wizard):
        item = wizard.add_item(ItemKind.STEEL, Decimal('200'), supplier_name='Shree Steel', diameter_label='12mm')
        assert item.unit_price == Decimal('6.5')
        assert item.line_total == Decimal('1300.00')
    
    def test_missing_item_fields_reported_together(self, wizard):
        with pytest.raises(ValidationError) as exc_info:
            wizard.add_item(ItemKind.STEEL, None)
        assert set(exc_info.value.fields) == {'quantity', 'supplier_name', 'diameter_label'}
        assert wizard.draft.items == []
    
    def test_other_item_needs_label_and_price(self, wizard):
        with pytest.raises(ValidationError) as exc_info:
            wizard.add_item(ItemKind.OTHER, Decimal('1'))
        assert set(exc_info.value.fields) == {'custom_label', 'custom_unit_price'}
    
    def test_unknown_tier_is_not_added(self, wizard):
        with pytest.raises(PricingContractError):
            wizard.add_item(ItemKind.STEEL, Decimal('1'), supplier_name='Shree Steel', diameter_label='32mm')
        assert wizard.draft.items == []
    
    def test_update_reprices(self, wizard):
        item = wizard.add_item(ItemKind.STEEL, Decimal('100'), supplier_name='Shree Steel', diameter_label='10mm')
        
        updated = wizard.update_item(item.id, diameter_label='12mm')
        
        assert updated.id == item.id
        assert updated.unit_price == Decimal('6.5')
        assert wizard.preview_totals().subtotal == Decimal('650.00')
    
    def test_failed_update_restores_item(self, wizard):
        item = wizard.add_item(ItemKind.STEEL, Decimal('100'), supplier_name='Shree Steel', diameter_label='10mm')
        
        with pytest.raises(PricingContractError):
            wizard.update_item(item.id, diameter_label='40mm')
        
        assert wizard.draft.find_item(item.id) == item
    
    def test_unit_price_cannot_be_patched(self, wizard):
        item = wizard.add_item(ItemKind.CEMENT, Decimal('1'), supplier_name='Ambuja Depot')
        with pytest.raises(ValidationError):
            wizard.update_item(item.id, unit_price=Decimal('1'))
    
    def test_update_unknown_item(self, wizard):
        with pytest.raises(NotFoundError):
            wizard.update_item('nope', quantity=Decimal('1'))
    
    def test_switching_kind_drops_unused_fields(self, wizard):
        item = wizard.add_item(ItemKind.STEEL, Decimal('1'), supplier_name='Shree Steel', diameter_label='10mm')
        updated = wizard.update_item(item.id, kind='Cement', supplier_name='Ambuja Depot')
        assert updated.kind == ItemKind.CEMENT
        assert updated.diameter_label == ''
        assert updated.unit_price == Decimal('350')


class TestNavigation:
    """Tests for next/back."""
    
    def test_missing_customer_fields_reported_together(self, wizard):
        fill_items(wizard)
        wizard.next()
        
        with pytest.raises(ValidationError) as exc_info:
            wizard.next()
        
        assert exc_info.value.fields == ('customer_name', 'customer_phone', 'place', 'payment_method')
        assert wizard.step == WizardStep.CUSTOMER_INFO
    
    def test_back_keeps_data(self, wizard):
        go_to_review(wizard)
        
        assert wizard.back() == WizardStep.CUSTOMER_INFO
        assert wizard.back() == WizardStep.ITEMS
        assert wizard.back() == WizardStep.ITEMS
        assert len(wizard.draft.items) == 2
        assert wizard.draft.place == 'Site B'
    
    def test_submit_only_from_review(self, wizard):
        fill_items(wizard)
        with pytest.raises(BusinessLogicError):
            wizard.submit()
    
    def test_attach_customer_from_past_orders(self, order_repository, wizard, order_factory):
        order_repository.write(order_factory(customer_phone='555', place='Site A'))
        wizard.set_customer_info(place='Site B')
        
        customer = wizard.attach_customer('555')
        
        assert customer.last_known_place == 'Site A'
        assert wizard.draft.place == 'Site B'
        assert wizard.draft.customer_phone == '555'
        assert wizard.draft.driver_name == 'Mohan'
    
    def test_attach_unknown_customer(self, wizard):
        assert wizard.attach_customer('000') is None
        assert wizard.draft.customer_phone == ''


class TestSubmit:
    """Tests for submit."""
    
    def test_end_to_end_totals(self, wizard, order_repository, orders):
        go_to_review(wizard)
        wizard.set_discount(Decimal('10'), DiscountMode.PERCENT)
        
        order = wizard.submit()
        
        assert order.totals.subtotal == Decimal('3825.00')
        assert order.totals.pre_discount_total == Decimal('4025.00')
        assert order.totals.discount_value == Decimal('402.50')
        assert order.totals.final_total == Decimal('3622.50')
        assert order.status == OrderStatus.PENDING
        assert order.created_at == datetime(2026, 1, 12, 15, 30)
        assert order.updated_at is None
        assert wizard.step == WizardStep.SUBMITTED
        assert not wizard.store.has_draft
        assert order_repository.get(order.id) == order
        assert orders.get(order.id) == order
    
    def test_submit_remembers_customer(self, wizard, customer_repository):
        go_to_review(wizard)
        wizard.submit()
        
        customer = customer_repository.get('9876543210')
        
        assert customer == Customer(
            name='Ravi Kumar', phone='9876543210', last_known_place='Site B',
            last_known_transport=Decimal('200.00'), last_known_driver='Mohan',
            last_known_payment_method=PaymentMethod.CASH
        )
    
    @pytest.mark.parametrize('kind', [PersistenceError.NETWORK, PersistenceError.PERMISSION])
    def test_failed_write_keeps_review_and_draft(self, customer_repository, catalog, kind):
        """The draft survives a failed write so the user can retry."""
        repository = FailingOrderRepository(PersistenceError(kind))
        wizard = OrderWizard(repository, customer_repository, catalog)
        wizard.start_new()
        go_to_review(wizard)
        
        with pytest.raises(PersistenceError) as exc_info:
            wizard.submit()
        
        assert exc_info.value.kind == kind
        assert wizard.step == WizardStep.REVIEW
        assert len(wizard.draft.items) == 2
        assert wizard.draft.customer_name == 'Ravi Kumar'
        assert wizard.draft.place == 'Site B'
        assert customer_repository.get('9876543210') is None
    
    def test_unexpected_write_error_is_wrapped(self, customer_repository, catalog):
        repository = FailingOrderRepository(RuntimeError('socket closed'))
        wizard = OrderWizard(repository, customer_repository, catalog)
        wizard.start_new()
        go_to_review(wizard)
        
        with pytest.raises(PersistenceError) as exc_info:
            wizard.submit()
        
        assert exc_info.value.kind == PersistenceError.UNKNOWN
        assert wizard.step == WizardStep.REVIEW
    
    def test_customer_upsert_failure_keeps_submitted_order(self, order_repository, store, catalog):
        """A failing customer update after the write neither raises nor invites a second write."""
        customers = BrokenCustomerRepository()
        wizard = OrderWizard(order_repository, customers, catalog)
        wizard.start_new()
        go_to_review(wizard)
        
        order = wizard.submit()
        
        assert customers.attempts == 1
        assert wizard.step == WizardStep.SUBMITTED
        assert wizard.last_submitted == order
        assert not wizard.store.has_draft
        assert list(store.orders) == [order.id]
    
    def test_transport_not_entered_is_not_stored_as_zero(self, wizard, customer_repository):
        """An order without transport leaves the customer's transport unset for the next order."""
        fill_items(wizard)
        wizard.next()
        fill_customer(wizard, transport=None)
        wizard.next()
        
        order = wizard.submit()
        
        assert order.transport is None
        assert order.totals.transport_cost == Decimal('0')
        assert order.totals.final_total == Decimal('3825.00')
        assert customer_repository.get('9876543210').last_known_transport is None
        
        wizard.start_new()
        wizard.attach_customer('9876543210')
        assert wizard.draft.transport is None
        assert wizard.draft.place == 'Site B'
    
    def test_transport_not_entered_keeps_known_transport(self, wizard, customer_repository):
        customer_repository.upsert(Customer(name='Ravi Kumar', phone='9876543210',
                                            last_known_transport=Decimal('150')))
        fill_items(wizard)
        wizard.next()
        fill_customer(wizard, transport=None)
        wizard.next()
        
        wizard.submit()
        
        assert customer_repository.get('9876543210').last_known_transport == Decimal('150')
    
    def test_edit_overwrites_same_order(self, wizard, order_repository, store):
        go_to_review(wizard)
        original = wizard.submit()
        
        wizard.edit(original)
        wizard.add_item(ItemKind.OTHER, Decimal('2'), custom_label='Binding wire', custom_unit_price=Decimal('50'))
        wizard.next()
        wizard.next()
        edited = wizard.submit()
        
        assert edited.id == original.id
        assert edited.created_at == original.created_at
        assert edited.updated_at == datetime(2026, 1, 12, 15, 30)
        assert edited.totals.subtotal == Decimal('3925.00')
        assert len(store.orders) == 1
    
    def test_no_edits_after_submit(self, wizard):
        go_to_review(wizard)
        wizard.submit()
        with pytest.raises(BusinessLogicError):
            wizard.back()
    
    def test_abandon_writes_nothing(self, wizard, store):
        go_to_review(wizard)
        wizard.abandon()
        assert store.orders == {}
        assert wizard.step == WizardStep.ITEMS
        assert not wizard.store.has_draft
