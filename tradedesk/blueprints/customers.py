"""Customers blueprint - customer directory built from orders."""
from flask import Blueprint, jsonify, request

from tradedesk.exceptions import NotFoundError
from tradedesk.middleware import current_workspace, require_account
from tradedesk.services.customer_service import (
    find_customer_summary, group_orders_by_customer, search_customers
)
from tradedesk.utils.formatters import datetime_in, money_inr

customers_bp = Blueprint('customers', __name__, url_prefix='/customers')


def _summary_dict(summary, with_orders=False):
    data = summary.to_dict(with_orders=with_orders)
    data['total_display'] = money_inr(summary.totals.final_total)
    data['last_order_at'] = datetime_in(summary.orders[0].created_at)
    return data


@customers_bp.route('/', methods=['GET'])
@require_account
def list_customers():
    """
    Customer directory.
    
    Query params:
        q: name or phone substring
        status: Pending, In Progress, Complete or all
    """
    workspace = current_workspace()
    summaries = search_customers(
        group_orders_by_customer(workspace.orders.orders),
        query=request.args.get('q', ''),
        status=request.args.get('status') or None
    )
    return jsonify({'customers': [_summary_dict(summary) for summary in summaries]})


@customers_bp.route('/<phone>', methods=['GET'])
@require_account
def customer_detail(phone):
    workspace = current_workspace()
    summary = find_customer_summary(workspace.orders.orders, phone)
    if summary is None:
        raise NotFoundError(f'No orders for customer {phone}.')
    data = _summary_dict(summary, with_orders=True)
    data['defaults'] = None
    stored = workspace.customer_repository.get(phone)
    if stored is not None:
        data['defaults'] = stored.to_dict()
    return jsonify({'customer': data})
