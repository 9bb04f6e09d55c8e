"""
Admin route decorator.

@admin_required:
   - Purpose: Restricts access to HTTP routes to admin-authenticated
     users.
   - Validation: Uses `validate_admin_request()` to check the
     `X-Admin-Token` header against the session token store.
   - Error Handling: Returns a JSON error with HTTP status 401 if
     authentication fails, or 500 for internal errors during validation.
   - Usage: Apply `@admin_required` below the route decorator of HTTP
     route functions that should only be accessible by administrators.
"""
from functools import wraps
from flask import current_app, jsonify
from nasstore.auth.validation import validate_admin_request


def admin_required(f):
    """Decorator for admin-only HTTP routes"""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        try:
            if not validate_admin_request():
                return jsonify({'error': 'Admin authentication required'}), 401
        except Exception as e:
            current_app.logger.error(f'Admin validation error: {str(e)}')
            return jsonify({'error': 'Internal server error'}), 500
        return f(*args, **kwargs)
    return decorated_function
