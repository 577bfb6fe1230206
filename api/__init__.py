"""
Token Minter - HTTP API
"""

from .app import create_app, DEFAULT_PORT

__all__ = ["create_app", "DEFAULT_PORT"]
