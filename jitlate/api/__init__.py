"""
HTTP API.
"""

from jitlate.api.app import create_app, serve, validate_request_limits

__all__ = ["create_app", "serve", "validate_request_limits"]
