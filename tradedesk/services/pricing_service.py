"""Pricing service - resolves the unit price of a line item from the supplier catalog."""

from dataclasses import replace
from decimal import Decimal
from typing import Iterable, Optional

from tradedesk.domain import ItemKind, LineItem, SupplierCatalogEntry
from tradedesk.exceptions import PricingContractError


def find_supplier(entries: Iterable[SupplierCatalogEntry], name: str) -> Optional[SupplierCatalogEntry]:
    """Return the catalog entry named `name`, or None."""
    for entry in entries or ():
        if entry.name == name:
            return entry
    return None


def resolve_unit_price(item: LineItem, catalog_entry: Optional[SupplierCatalogEntry]) -> Decimal:
    """
    Resolve the per-unit price of an item.

    - Other: the custom unit price, verbatim (no catalog lookup)
    - Steel: price_per_batch / batch_quantity_kg of the tier whose diameter
      label matches exactly
    - Cement: price_per_batch / batch_quantity_bags of the cement block

    Raises:
        PricingContractError: if the supplier does not offer the kind or tier.
            The UI should never let such a combination through, so there is
            no fallback price.
    """
    if item.kind == ItemKind.OTHER:
        if item.custom_unit_price is None:
            raise PricingContractError(
                f'Item "{item.custom_label}" has no custom unit price',
                kind=item.kind.value
            )
        return item.custom_unit_price

    if catalog_entry is None:
        raise PricingContractError(
            f'Supplier "{item.supplier_name}" is not in the catalog',
            supplier_name=item.supplier_name, kind=item.kind.value
        )

    if item.kind == ItemKind.STEEL:
        tier = catalog_entry.steel_tier(item.diameter_label)
        if tier is None:
            raise PricingContractError(
                f'Supplier "{catalog_entry.name}" has no steel price for diameter "{item.diameter_label}"',
                supplier_name=catalog_entry.name, kind=item.kind.value,
                diameter_label=item.diameter_label
            )
        return tier.unit_price

    if item.kind == ItemKind.CEMENT:
        if catalog_entry.cement is None:
            raise PricingContractError(
                f'Supplier "{catalog_entry.name}" does not sell cement',
                supplier_name=catalog_entry.name, kind=item.kind.value
            )
        return catalog_entry.cement.unit_price

    raise PricingContractError(f'Unsupported item kind: {item.kind}', kind=str(item.kind))


def price_line_item(item: LineItem, entries: Iterable[SupplierCatalogEntry]) -> LineItem:
    """Return a copy of `item` carrying its resolved unit price."""
    entry = None if item.kind == ItemKind.OTHER else find_supplier(entries, item.supplier_name)
    return replace(item, unit_price=resolve_unit_price(item, entry))
