"""Main blueprint with health check endpoint."""
from flask import Blueprint, current_app, jsonify
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from tradedesk.database import get_session

main_bp = Blueprint('main', __name__)


@main_bp.route('/health')
def health():
    """
    Health check endpoint that validates database connection.
    
    Returns:
        200: Healthy (DB connected)
        503: Unhealthy (DB error)
    """
    try:
        session = get_session()
        row = session.execute(text("SELECT 1 AS health_check")).fetchone()
    except SQLAlchemyError as e:
        current_app.logger.error(f"[HEALTH] Database check failed: {e}")
        return jsonify({
            'status': 'unhealthy',
            'database': 'disconnected',
            'message': 'Failed to connect to database'
        }), 503
    
    if row and row[0] == 1:
        return jsonify({
            'status': 'healthy',
            'database': 'connected',
            'workspaces': len(current_app.extensions['workspaces'])
        }), 200
    return jsonify({
        'status': 'unhealthy',
        'database': 'error',
        'message': 'Unexpected query result'
    }), 503
