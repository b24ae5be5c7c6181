"""Middleware for account context."""
from functools import wraps
from flask import current_app, g, jsonify, request, session


def load_account():
    """
    Load the current account id into g (Flask's per-request global).
    
    Called before each request. Priority: session['account_id'], then the
    account header (ACCOUNT_HEADER, X-Account-Id by default), then
    DEFAULT_ACCOUNT_ID from config.
    """
    header = current_app.config.get('ACCOUNT_HEADER', 'X-Account-Id')
    account_id = (
        session.get('account_id')
        or (request.headers.get(header) or '').strip()
        or current_app.config.get('DEFAULT_ACCOUNT_ID')
    )
    g.account_id = account_id or None


def require_account(f):
    """
    Decorator: Require an account context.
    
    Returns 401 JSON when neither the session, the header nor the config
    provide an account id.
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if not g.get('account_id'):
            return jsonify({'status': 'error', 'message': 'No account selected.'}), 401
        return f(*args, **kwargs)
    return decorated_function


def current_workspace():
    """Workspace of the current account, refreshed from storage."""
    workspace = current_app.extensions['workspaces'].get(g.account_id)
    workspace.refresh()
    return workspace
