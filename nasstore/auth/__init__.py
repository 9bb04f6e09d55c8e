"""
Admin authentication: PIN-issued session tokens and route decorators.
"""
