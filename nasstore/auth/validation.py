"""
Core admin validation functions with minimal dependencies.

Admin sessions are short-lived tokens issued after a successful PIN
check and sent back by the client in the X-Admin-Token header.
"""
import os
import time
import uuid
import hashlib
import base64
import random
from typing import Dict
from flask import current_app, request

from nasstore.utils.utils import get_config

# Store for admin session tokens - in-memory cache of valid tokens
# Format: {'token': {'created': timestamp, 'expires': timestamp}}
ADMIN_TOKENS: Dict[str, Dict[str, float]] = {}
# Default token expiry time in seconds (30 minutes)
TOKEN_EXPIRY_TIME = 30 * 60


def generate_admin_token() -> str:
    """
    Generate a secure random token for admin sessions.

    Returns:
        str: A unique secure token string
    """
    # Create a unique token using UUID + timestamp + random bytes
    token_hash = hashlib.sha256()
    token_hash.update(os.urandom(16))
    token_hash.update(str(time.time()).encode())
    token_hash.update(str(uuid.uuid4()).encode())

    # Return as URL-safe base64 string
    return base64.urlsafe_b64encode(token_hash.digest()).decode('utf-8')


def register_admin_token(token: str) -> None:
    """Register a new admin token in the token store."""
    now = time.time()
    ADMIN_TOKENS[token] = {
        'created': now,
        'expires': now + TOKEN_EXPIRY_TIME
    }
    current_app.logger.info(f"Registered new admin token: {token[:5]}*** (expires in {TOKEN_EXPIRY_TIME/60} minutes)")


def revoke_admin_token(token: str) -> bool:
    """Remove a token from the store. Returns True if it was registered."""
    if ADMIN_TOKENS.pop(token, None) is None:
        return False
    current_app.logger.info(f"Admin token invalidated: {token[:5]}***")
    return True


def validate_token_expiry(token: str) -> bool:
    """
    Check if a token exists and has not expired.
    A valid token gets its expiry time refreshed.
    """
    if token not in ADMIN_TOKENS:
        return False

    now = time.time()
    if ADMIN_TOKENS[token]['expires'] < now:
        # Token has expired, remove it
        del ADMIN_TOKENS[token]
        return False

    ADMIN_TOKENS[token]['expires'] = now + TOKEN_EXPIRY_TIME
    return True


def clean_expired_tokens() -> None:
    """Clean up any expired tokens from the token store."""
    now = time.time()
    expired_tokens = [token for token, data in ADMIN_TOKENS.items() if data['expires'] < now]

    for token in expired_tokens:
        del ADMIN_TOKENS[token]

    if expired_tokens:
        current_app.logger.info(f"Cleaned up {len(expired_tokens)} expired admin tokens")


def get_stored_pin() -> str:
    """
    Admin PIN from the configuration file, or the PIN loaded at startup
    when the file has none.
    """
    stored_pin = get_config().get('global', {}).get('admin', {}).get('pin')
    if not stored_pin:
        stored_pin = current_app.config.get('ADMIN_PIN', '')
    return str(stored_pin)


def validate_pin(pin: str) -> bool:
    """Validate PIN against stored configuration."""
    stored_pin = get_stored_pin()
    if not stored_pin:
        current_app.logger.error("Admin PIN not configured")
        return False
    # Ensure both are compared as strings
    return str(pin) == stored_pin


def validate_admin_request() -> bool:
    """
    Validate current request has valid admin credentials.

    Returns:
        bool: True if request has valid admin session; False otherwise
    """
    # Periodically clean expired tokens
    if random.random() < 0.1:  # 10% chance to run cleanup on each request
        clean_expired_tokens()

    token = request.headers.get('X-Admin-Token')
    if not token:
        current_app.logger.warning("Admin validation failed: No X-Admin-Token header found")
        return False

    is_valid = validate_token_expiry(token)
    if not is_valid:
        current_app.logger.warning("Admin validation failed: Invalid token")
    return is_valid
