"""
Middleware package for the LAPSE API.
"""

from .security import setup_security, SecurityHeadersMiddleware, RequestLoggingMiddleware

__all__ = ["setup_security", "SecurityHeadersMiddleware", "RequestLoggingMiddleware"]
