"""
Admin routes and authentication functions.
"""
from flask import current_app, jsonify, request
from . import bp
from nasstore.utils.utils import write_to_log
from nasstore.auth.decorators import admin_required
from nasstore.auth.validation import (
    TOKEN_EXPIRY_TIME,
    generate_admin_token,
    register_admin_token,
    revoke_admin_token,
    validate_pin as check_pin,
)


@bp.route('/api/validatePin', methods=['POST'])
def validate_pin():
    """Validate admin PIN and issue a session token."""
    try:
        data = request.get_json(silent=True) or {}
        pin = data.get('pin')

        if not pin:
            return jsonify({'error': 'PIN is required'}), 400

        if check_pin(pin):
            # Generate a secure session token
            session_token = generate_admin_token()
            register_admin_token(session_token)

            write_to_log('admin', 'Admin PIN validated successfully - entering admin mode', 'info')
            return jsonify({
                'success': True,
                'token': session_token,
                'sessionTimeout': TOKEN_EXPIRY_TIME
            }), 200

        write_to_log('admin', 'Failed admin PIN validation attempt', 'warn')
        return jsonify({'error': 'Invalid PIN'}), 401

    except Exception as e:
        current_app.logger.error(f'Error validating PIN: {str(e)}')
        return jsonify({'error': 'Internal server error'}), 500


@bp.route('/api/logout', methods=['POST'])
def logout():
    """Handle admin logout."""
    token = request.headers.get('X-Admin-Token')
    if token:
        revoke_admin_token(token)

    write_to_log('admin', 'Admin logged out', 'info')
    return jsonify({'success': True}), 200


@bp.route('/api/admin/ping', methods=['GET'])
@admin_required
def admin_ping():
    """
    Lightweight endpoint to keep the admin session alive.
    """
    return jsonify({'success': True}), 200
