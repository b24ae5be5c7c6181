"""Orders blueprint - order list, status changes and the order wizard."""
from decimal import Decimal

from flask import Blueprint, current_app, g, jsonify, request

from tradedesk.exceptions import BusinessLogicError, NotFoundError
from tradedesk.middleware import current_workspace, require_account
from tradedesk.services.order_service import list_orders, update_order_status
from tradedesk.services.totals_service import summarize_orders
from tradedesk.utils.formatters import datetime_in, money_inr
from tradedesk.utils.number_format import parse_decimal

orders_bp = Blueprint('orders', __name__, url_prefix='/orders')

ITEM_FIELDS = ('kind', 'quantity', 'supplier_name', 'diameter_label', 'custom_label', 'custom_unit_price')
CUSTOMER_FIELDS = ('customer_name', 'customer_phone', 'place', 'transport', 'driver_name', 'payment_method')


def _json_body():
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise BusinessLogicError('Expected a JSON object body.')
    return data


def _parse_item_fields(data, fields):
    """Pick known item fields from the body, parsing the numeric ones."""
    values = {name: data[name] for name in fields if name in data}
    if 'quantity' in values:
        values['quantity'] = parse_decimal(values['quantity'], 'quantity')
    if 'custom_unit_price' in values:
        values['custom_unit_price'] = parse_decimal(values['custom_unit_price'], 'custom_unit_price')
    return values


def _order_dict(order):
    data = order.to_dict()
    data['final_total_display'] = money_inr(order.totals.final_total)
    data['created_at_display'] = datetime_in(order.created_at)
    return data


def _wizard_state(wizard):
    """Current step, draft and totals preview."""
    state = {
        'step': wizard.step.value,
        'draft': None,
        'totals': None,
    }
    if wizard.store.has_draft:
        totals = wizard.preview_totals()
        state['draft'] = wizard.draft.to_dict()
        state['totals'] = totals.to_dict()
        state['final_total_display'] = money_inr(totals.final_total)
    if wizard.last_submitted is not None:
        state['last_submitted'] = _order_dict(wizard.last_submitted)
    return state


# ---------------------------------------------------------------------
# Persisted orders
# ---------------------------------------------------------------------

@orders_bp.route('/', methods=['GET'])
@require_account
def list_all():
    """List orders newest first; optional ?status= and ?phone= filters."""
    workspace = current_workspace()
    orders = list_orders(
        workspace.orders.orders,
        status=request.args.get('status') or None,
        phone=request.args.get('phone', '').strip() or None
    )
    summary = summarize_orders(orders)
    return jsonify({
        'orders': [_order_dict(order) for order in orders],
        'summary': summary.to_dict(),
        'final_total_display': money_inr(summary.final_total)
    })


@orders_bp.route('/<order_id>/status', methods=['POST'])
@require_account
def change_status(order_id):
    workspace = current_workspace()
    status = _json_body().get('status')
    order = update_order_status(workspace.order_repository, workspace.orders, order_id, status)
    return jsonify({'status': 'ok', 'order': _order_dict(order)})


@orders_bp.route('/<order_id>/edit', methods=['POST'])
@require_account
def edit(order_id):
    """Open a persisted order in the wizard."""
    workspace = current_workspace()
    order = workspace.orders.get(order_id) or workspace.order_repository.get(order_id)
    if order is None:
        raise NotFoundError(f'Order {order_id} not found.')
    workspace.wizard.edit(order)
    return jsonify(_wizard_state(workspace.wizard))


# ---------------------------------------------------------------------
# Wizard
# ---------------------------------------------------------------------

@orders_bp.route('/draft', methods=['GET'])
@require_account
def draft_state():
    return jsonify(_wizard_state(current_workspace().wizard))


@orders_bp.route('/draft', methods=['POST'])
@require_account
def new_draft():
    wizard = current_workspace().wizard
    wizard.start_new()
    return jsonify(_wizard_state(wizard)), 201


@orders_bp.route('/draft', methods=['DELETE'])
@require_account
def abandon_draft():
    wizard = current_workspace().wizard
    wizard.abandon()
    return jsonify({'status': 'ok'})


@orders_bp.route('/draft/items', methods=['POST'])
@require_account
def add_item():
    wizard = current_workspace().wizard
    values = _parse_item_fields(_json_body(), ITEM_FIELDS)
    kind = values.pop('kind', None)
    quantity = values.pop('quantity', None)
    item = wizard.add_item(kind, quantity, **values)
    state = _wizard_state(wizard)
    state['item'] = item.to_dict()
    return jsonify(state), 201


@orders_bp.route('/draft/items/<item_id>', methods=['PATCH'])
@require_account
def update_item(item_id):
    wizard = current_workspace().wizard
    patch = _parse_item_fields(_json_body(), ITEM_FIELDS + ('unit_price',))
    item = wizard.update_item(item_id, **patch)
    state = _wizard_state(wizard)
    state['item'] = item.to_dict()
    return jsonify(state)


@orders_bp.route('/draft/items/<item_id>', methods=['DELETE'])
@require_account
def remove_item(item_id):
    wizard = current_workspace().wizard
    if not wizard.remove_item(item_id):
        raise NotFoundError(f'Item {item_id} is not in the order.')
    return jsonify(_wizard_state(wizard))


@orders_bp.route('/draft/customer', methods=['PUT'])
@require_account
def set_customer():
    wizard = current_workspace().wizard
    data = _json_body()
    fields = {name: data[name] for name in CUSTOMER_FIELDS if name in data}
    if 'transport' in fields:
        fields['transport'] = parse_decimal(fields['transport'], 'transport')
    wizard.set_customer_info(**fields)
    return jsonify(_wizard_state(wizard))


@orders_bp.route('/draft/customer/attach', methods=['POST'])
@require_account
def attach_customer():
    """Pre-fill empty customer fields from a known phone number."""
    wizard = current_workspace().wizard
    phone = (_json_body().get('phone') or '').strip()
    if not phone:
        raise BusinessLogicError('Phone is required.')
    customer = wizard.attach_customer(phone)
    state = _wizard_state(wizard)
    state['customer'] = customer.to_dict() if customer else None
    return jsonify(state)


@orders_bp.route('/draft/discount', methods=['PUT'])
@require_account
def set_discount():
    wizard = current_workspace().wizard
    data = _json_body()
    amount = parse_decimal(data.get('amount'), 'discount') or Decimal('0')
    wizard.set_discount(amount, data.get('mode') or 'percent')
    return jsonify(_wizard_state(wizard))


@orders_bp.route('/draft/next', methods=['POST'])
@require_account
def next_step():
    wizard = current_workspace().wizard
    wizard.next()
    return jsonify(_wizard_state(wizard))


@orders_bp.route('/draft/back', methods=['POST'])
@require_account
def previous_step():
    wizard = current_workspace().wizard
    wizard.back()
    return jsonify(_wizard_state(wizard))


@orders_bp.route('/draft/submit', methods=['POST'])
@require_account
def submit():
    wizard = current_workspace().wizard
    order = wizard.submit()
    current_app.logger.info(f"[ORDERS] account={g.account_id} submitted order {order.id}")
    return jsonify({'status': 'ok', 'step': wizard.step.value, 'order': _order_dict(order)}), 201
