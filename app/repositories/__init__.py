"""
Repository layer for data access operations.
Provides optimized database operations with proper error handling and query optimization.
"""

from app.repositories.base import BaseRepository
from app.repositories.property import PropertyRepository, PropertySearchFilters
from app.repositories.user import UserRepository

__all__ = [
    "BaseRepository",
    "PropertyRepository", 
    "PropertySearchFilters",
    "UserRepository"
]