"""
Property repository for managing property listings with search and filtering.
Provides the listing read path and flush-only writes used by the mutation pipeline.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, and_, func, desc, asc
from sqlalchemy.orm import selectinload
from app.repositories.base import BaseRepository
from app.models.property import Property, PropertyType, PropertyStatus
from typing import Optional, List, Dict, Any, Tuple
import uuid
import logging

logger = logging.getLogger(__name__)


def escape_like(value: str) -> str:
    """Escape LIKE wildcards so user text is matched literally."""
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class PropertySearchFilters:
    """Data class for property search filters."""

    def __init__(
        self,
        location: Optional[str] = None,
        types: Optional[List[PropertyType]] = None,
        statuses: Optional[List[PropertyStatus]] = None,
        is_featured: Optional[bool] = None,
        min_price: Optional[float] = None,
        max_price: Optional[float] = None,
        bedrooms: Optional[int] = None,
        bathrooms: Optional[int] = None,
        owner_id: Optional[uuid.UUID] = None
    ):
        self.location = location
        self.types = types or []
        self.statuses = statuses or []
        self.is_featured = is_featured
        self.min_price = min_price
        self.max_price = max_price
        self.bedrooms = bedrooms
        self.bathrooms = bathrooms
        self.owner_id = owner_id


class PropertyRepository(BaseRepository[Property]):
    """
    Repository for property listings.
    Every read eagerly loads the owner so responses never lazy-load under asyncio.
    """

    def __init__(self, db: AsyncSession):
        super().__init__(Property, db)

    async def create_property(self, property_data: Dict[str, Any]) -> Property:
        """
        Stage a new property in the current transaction.

        Args:
            property_data: Validated model attribute values, including owner_id and images

        Returns:
            Flushed property instance
        """
        created_property = await self.create(property_data)
        logger.info(f"Staged property: {created_property.title} (ID: {created_property.id})")
        return created_property

    async def get_property_with_owner(self, property_id: uuid.UUID) -> Optional[Property]:
        """
        Get a property with its owner loaded.

        Returns:
            Property or None if not found
        """
        try:
            query = (
                select(Property)
                .options(selectinload(Property.owner))
                .where(Property.id == property_id)
                .execution_options(populate_existing=True)
            )
            result = await self.db.execute(query)
            return result.scalar_one_or_none()
        except Exception as e:
            logger.error(f"Failed to get property with owner {property_id}: {e}")
            raise

    async def update_property(self, property_obj: Property, changes: Dict[str, Any]) -> Property:
        """Apply validated changes to a loaded property and flush them."""
        for field, value in changes.items():
            setattr(property_obj, field, value)
        await self.db.flush()
        logger.debug(f"Staged update of property {property_obj.id}: {sorted(changes)}")
        return property_obj

    async def search_properties(
        self,
        filters: PropertySearchFilters,
        skip: int = 0,
        limit: int = 10,
        order_by: str = "created_at",
        order_direction: str = "desc"
    ) -> Tuple[List[Property], int]:
        """
        Search properties with filtering, sorting and pagination.

        Args:
            filters: PropertySearchFilters instance with search criteria
            skip: Number of records to skip for pagination
            limit: Maximum number of records to return
            order_by: Allow-listed column name to order by
            order_direction: 'asc' or 'desc'

        Returns:
            Tuple of (properties list, total count)
        """
        try:
            query = select(Property).options(selectinload(Property.owner))
            count_query = select(func.count(Property.id))

            conditions = self._build_filter_conditions(filters)
            if conditions:
                query = query.where(and_(*conditions))
                count_query = count_query.where(and_(*conditions))

            count_result = await self.db.execute(count_query)
            total_count = count_result.scalar() or 0

            direction = desc if order_direction.lower() == "desc" else asc
            order_field = getattr(Property, order_by, Property.created_at)
            # id breaks ties so consecutive pages never overlap
            query = query.order_by(direction(order_field), direction(Property.id))

            query = query.offset(skip).limit(limit)

            result = await self.db.execute(query)
            properties = result.scalars().all()

            logger.debug(f"Property search returned {len(properties)} of {total_count} total results")
            return list(properties), total_count
        except Exception as e:
            logger.error(f"Failed to search properties: {e}")
            raise

    def _build_filter_conditions(self, filters: PropertySearchFilters) -> List:
        """
        Build SQLAlchemy filter conditions from search filters.

        Args:
            filters: PropertySearchFilters instance

        Returns:
            List of SQLAlchemy conditions
        """
        conditions = []

        # Location filter (case-insensitive literal substring)
        if filters.location:
            conditions.append(
                Property.location.ilike(f"%{escape_like(filters.location)}%", escape="\\")
            )

        if filters.types:
            conditions.append(Property.type.in_(filters.types))
        if filters.statuses:
            conditions.append(Property.status.in_(filters.statuses))

        if filters.is_featured is not None:
            conditions.append(Property.is_featured == filters.is_featured)

        # Price range filters, inclusive
        if filters.min_price is not None:
            conditions.append(Property.price >= filters.min_price)
        if filters.max_price is not None:
            conditions.append(Property.price <= filters.max_price)

        if filters.bedrooms is not None:
            conditions.append(Property.bedrooms == filters.bedrooms)
        if filters.bathrooms is not None:
            conditions.append(Property.bathrooms == filters.bathrooms)

        if filters.owner_id:
            conditions.append(Property.owner_id == filters.owner_id)

        return conditions
