"""
RechargeEarn landing server package.

Provides the FastAPI application that receives the payment gateway
redirect.
"""

from .app import app, create_app

__all__ = ["app", "create_app"]
