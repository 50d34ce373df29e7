"""
Database models for the Realtor Listing API.
Includes User, the owner listing index and Property.
"""

from app.models.user import User, UserRole, user_listings
from app.models.property import Property, PropertyType, PropertyStatus

__all__ = [
    "User",
    "UserRole",
    "user_listings",
    "Property",
    "PropertyType",
    "PropertyStatus",
]
