"""Catalog service - supplier price lists (steel tiers and cement pricing)."""

import logging
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from tradedesk.domain import CementPricing, ItemKind, SteelTier, SupplierCatalogEntry, normalize_item_kind
from tradedesk.exceptions import BusinessLogicError, NotFoundError, ValidationError
from tradedesk.services.pricing_service import find_supplier
from tradedesk.utils.number_format import parse_decimal

logger = logging.getLogger(__name__)


class CatalogSnapshot:
    """
    Latest supplier catalog received from a subscription.

    Pass `on_snapshot` as the subscription callback. A missing snapshot is an
    empty catalog.
    """

    def __init__(self, entries: Optional[Iterable[SupplierCatalogEntry]] = None):
        self._entries: Tuple[SupplierCatalogEntry, ...] = tuple(entries or ())

    def on_snapshot(self, entries: Optional[Iterable[SupplierCatalogEntry]]) -> None:
        self._entries = tuple(entries or ())
        logger.debug(f"[CATALOG] Snapshot received: {len(self._entries)} suppliers")

    @property
    def entries(self) -> Tuple[SupplierCatalogEntry, ...]:
        return self._entries

    def find(self, name: str) -> Optional[SupplierCatalogEntry]:
        return find_supplier(self._entries, name)

    def suppliers_for(self, kind) -> List[SupplierCatalogEntry]:
        """Suppliers that can price items of `kind` (none for Other)."""
        kind = normalize_item_kind(kind)
        if kind == ItemKind.STEEL:
            return [entry for entry in self._entries if entry.offers_steel]
        if kind == ItemKind.CEMENT:
            return [entry for entry in self._entries if entry.offers_cement]
        return []


def _raw_tiers(raw: Dict[str, Any]) -> Sequence[Dict[str, Any]]:
    # older records store tiers under "steelDetails"
    tiers = raw.get('steel_tiers')
    if tiers is None:
        tiers = raw.get('steelDetails')
    return tiers or []


def _raw_cement(raw: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    cement = raw.get('cement')
    if cement:
        return cement
    if raw.get('cementPrice') not in (None, '') or raw.get('cementQty') not in (None, ''):
        return {'price': raw.get('cementPrice'), 'qty': raw.get('cementQty')}
    return None


def build_catalog_entry(raw: Dict[str, Any]) -> SupplierCatalogEntry:
    """
    Build a validated catalog entry from raw input.

    Expected shape:
      {
        "name": str,
        "steel_tiers": [{"diameter": "10mm", "price": 6500, "qty": 1000}, ...],
        "cement": {"price": 3500, "qty": 10} | None,
      }

    Raises:
        ValidationError: listing every invalid field
    """
    errors = []
    name = (raw.get('name') or '').strip()
    if not name:
        errors.append('name')

    tiers = []
    seen_diameters = set()
    for index, tier in enumerate(_raw_tiers(raw)):
        diameter = str(tier.get('diameter') or tier.get('diameter_label') or '').strip()
        try:
            price = parse_decimal(tier.get('price'), f'steel_tiers[{index}].price', allow_zero=False)
            qty = parse_decimal(tier.get('qty'), f'steel_tiers[{index}].qty', allow_zero=False)
        except ValidationError as e:
            errors.extend(e.fields)
            continue
        if not diameter or diameter in seen_diameters:
            errors.append(f'steel_tiers[{index}].diameter')
            continue
        if price is None or qty is None:
            errors.append(f'steel_tiers[{index}]')
            continue
        seen_diameters.add(diameter)
        tiers.append(SteelTier(diameter_label=diameter, price_per_batch=price, batch_quantity_kg=qty))

    cement = None
    raw_cement = _raw_cement(raw)
    if raw_cement is not None:
        try:
            price = parse_decimal(raw_cement.get('price'), 'cement.price', allow_zero=False)
            qty = parse_decimal(raw_cement.get('qty'), 'cement.qty', allow_zero=False)
            if price is None or qty is None:
                errors.append('cement')
            else:
                cement = CementPricing(price_per_batch=price, batch_quantity_bags=qty)
        except ValidationError as e:
            errors.extend(e.fields)

    if not errors and not tiers and cement is None:
        errors.extend(['steel_tiers', 'cement'])

    if errors:
        raise ValidationError(*errors)

    return SupplierCatalogEntry(name=name, steel_tiers=tuple(tiers), cement=cement)


def add_supplier(repository, entries: Iterable[SupplierCatalogEntry], raw: Dict[str, Any]) -> SupplierCatalogEntry:
    """Validate and save a new supplier; names are unique within the catalog."""
    entry = build_catalog_entry(raw)
    if find_supplier(entries, entry.name) is not None:
        raise BusinessLogicError(f'Supplier "{entry.name}" already exists.', status_code=409)

    repository.save_supplier(entry)
    logger.info(f"[CATALOG] Supplier added: {entry.name} ({len(entry.steel_tiers)} steel tiers, "
                f"cement={'yes' if entry.cement else 'no'})")
    return entry


def update_supplier(
    repository,
    entries: Iterable[SupplierCatalogEntry],
    name: str,
    raw: Dict[str, Any]
) -> SupplierCatalogEntry:
    """Replace a supplier's pricing; a rename must not collide with another supplier."""
    entries = tuple(entries or ())
    if find_supplier(entries, name) is None:
        raise NotFoundError(f'Supplier "{name}" not found.')

    entry = build_catalog_entry(raw)
    if entry.name != name:
        if find_supplier(entries, entry.name) is not None:
            raise BusinessLogicError(f'Supplier "{entry.name}" already exists.', status_code=409)
        repository.delete_supplier(name)

    repository.save_supplier(entry)
    logger.info(f"[CATALOG] Supplier updated: {name}" + (f" -> {entry.name}" if entry.name != name else ""))
    return entry


def delete_supplier(repository, entries: Iterable[SupplierCatalogEntry], name: str) -> None:
    if find_supplier(entries, name) is None:
        raise NotFoundError(f'Supplier "{name}" not found.')
    repository.delete_supplier(name)
    logger.info(f"[CATALOG] Supplier deleted: {name}")
