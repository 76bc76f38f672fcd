"""
Middleware components for request processing.
"""

from lifeos.middleware.request_context import RequestContextMiddleware

__all__ = ["RequestContextMiddleware"]
