"""
Middleware package for the Realtor Listing API.
Provides request tracking and request size validation.
"""

from .validation import ValidationMiddleware

__all__ = [
    "ValidationMiddleware"
]
