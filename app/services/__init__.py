"""
Service layer for business logic implementation.
Contains services for authentication, property management, and error handling.
"""

from .auth import AuthService
from .property import PropertyService
from .error_handler import ErrorHandlerService

__all__ = [
    "AuthService",
    "PropertyService", 
    "ErrorHandlerService"
]