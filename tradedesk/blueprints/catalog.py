"""Catalog blueprint - supplier price lists."""
from flask import Blueprint, current_app, g, jsonify, request

from tradedesk.exceptions import BusinessLogicError
from tradedesk.middleware import current_workspace, require_account
from tradedesk.services import catalog_service
from tradedesk.utils.formatters import money_inr

catalog_bp = Blueprint('catalog', __name__, url_prefix='/catalog')


def _json_body():
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise BusinessLogicError('Expected a JSON object body.')
    return data


def _entry_dict(entry):
    data = entry.to_dict()
    for tier, model in zip(data['steel_tiers'], entry.steel_tiers):
        tier['unit_price'] = str(model.unit_price)
        tier['price_display'] = money_inr(model.price_per_batch)
    if entry.cement is not None:
        data['cement']['unit_price'] = str(entry.cement.unit_price)
        data['cement']['price_display'] = money_inr(entry.cement.price_per_batch)
    return data


@catalog_bp.route('/suppliers', methods=['GET'])
@require_account
def list_suppliers():
    """List suppliers; ?kind=Steel|Cement keeps only those that price that kind."""
    workspace = current_workspace()
    kind = request.args.get('kind', '').strip()
    entries = workspace.catalog.suppliers_for(kind) if kind else workspace.catalog.entries
    return jsonify({'suppliers': [_entry_dict(entry) for entry in entries]})


@catalog_bp.route('/suppliers', methods=['POST'])
@require_account
def create_supplier():
    workspace = current_workspace()
    entry = catalog_service.add_supplier(
        workspace.catalog_repository, workspace.catalog.entries, _json_body()
    )
    current_app.logger.info(f"[CATALOG] account={g.account_id} created supplier {entry.name}")
    return jsonify({'status': 'ok', 'supplier': _entry_dict(entry)}), 201


@catalog_bp.route('/suppliers/<name>', methods=['PUT'])
@require_account
def update_supplier(name):
    workspace = current_workspace()
    entry = catalog_service.update_supplier(
        workspace.catalog_repository, workspace.catalog.entries, name, _json_body()
    )
    return jsonify({'status': 'ok', 'supplier': _entry_dict(entry)})


@catalog_bp.route('/suppliers/<name>', methods=['DELETE'])
@require_account
def delete_supplier(name):
    workspace = current_workspace()
    catalog_service.delete_supplier(workspace.catalog_repository, workspace.catalog.entries, name)
    return jsonify({'status': 'ok'})
