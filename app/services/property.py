"""
Property service implementing the listing mutation pipeline and read path.
Creates and updates run validation, image upload and both database writes as one unit.
"""

from dataclasses import dataclass
from typing import Optional, List, Dict, Any, Mapping, Sequence
from sqlalchemy.ext.asyncio import AsyncSession
from app.database import transaction
from app.repositories.property import PropertyRepository, PropertySearchFilters
from app.repositories.user import UserRepository
from app.models.property import Property, PropertyType, PropertyStatus
from app.services.asset_store import AssetStore, ImageUpload
from app.utils.context import Authenticated
from app.utils.exceptions import (
    APIException,
    NotFoundError,
    UnauthorizedError,
    UpstreamError,
    InsufficientPermissionsError,
    PropertyOwnershipError,
    ResourceLimitExceededError,
)
from app.utils.validators import (
    PropertyFieldValidator,
    validate_uuid,
    parse_enum_filter,
    parse_number_filter,
    parse_int_filter,
    parse_bool_filter,
    normalize_pagination,
    normalize_sort,
)
import uuid
import logging

logger = logging.getLogger(__name__)


@dataclass
class ListingPage:
    """One page of listings plus the totals the client needs to paginate."""
    items: List[Property]
    total: int
    page: int
    limit: int
    total_listings: Optional[int] = None


class PropertyService:
    """
    Property service for the listing mutation pipeline and listing reads.

    Writes follow a fixed order: authorize, validate fields, validate images,
    then inside one transaction upload images, write the property and update
    the owner index. Nothing is persisted unless every step succeeds.
    """

    def __init__(self, db_session: AsyncSession, asset_store: AssetStore):
        self.db = db_session
        self.asset_store = asset_store
        self.property_repo = PropertyRepository(db_session)
        self.user_repo = UserRepository(db_session)

    async def create_property(
        self,
        caller: Authenticated,
        fields: Mapping[str, Any],
        images: Sequence[ImageUpload] = ()
    ) -> Property:
        """
        Create a new listing owned by the calling agent.

        Args:
            caller: Verified identity of the requester
            fields: Raw listing fields keyed by wire name
            images: Images to upload, in display order

        Returns:
            Created property with its owner loaded

        Raises:
            InsufficientPermissionsError: If the caller is not an agent
            ValidationError: If any field or image is invalid
            UpstreamError: If any image upload fails
        """
        if not caller.is_agent:
            raise InsufficientPermissionsError("create properties")

        property_data = PropertyFieldValidator.validate_create(fields)
        self.asset_store.validate_image_batch(images)

        if not await self.user_repo.exists(caller.user_id):
            raise UnauthorizedError("User no longer exists")

        uploaded: List[str] = []
        try:
            async with transaction(self.db):
                uploaded = await self.asset_store.upload_many(images)
                if len(uploaded) != len(images):
                    raise UpstreamError("Failed to upload one or more images")

                property_obj = await self.property_repo.create_property({
                    **property_data,
                    "images": uploaded,
                    "owner_id": caller.user_id,
                })
                property_id = property_obj.id
                await self.user_repo.append_listing(caller.user_id, property_id)
        except APIException:
            await self._discard_uploads(uploaded)
            raise
        except Exception as e:
            logger.error(f"Failed to create property for user {caller.user_id}: {e}", exc_info=True)
            await self._discard_uploads(uploaded)
            raise

        logger.info(f"Property created by user {caller.user_id}: {property_data['title']} (ID: {property_id})")
        return await self.property_repo.get_property_with_owner(property_id)

    async def update_property(
        self,
        caller: Authenticated,
        property_id: Any,
        fields: Mapping[str, Any],
        new_images: Sequence[ImageUpload] = (),
        remove_images: Sequence[str] = ()
    ) -> Property:
        """
        Partially update a listing and its image list.

        Removed URLs are matched against the current images; kept images come
        first and new uploads are appended in order. Removed images are deleted
        from the asset store only after the update commits.

        Raises:
            InvalidIdError: If the id is malformed
            NotFoundError: If the property doesn't exist
            PropertyOwnershipError: If the caller neither owns it nor is an admin
            ValidationError: If a field or image is invalid, or too many images remain
            UpstreamError: If any image upload fails
        """
        property_uuid = validate_uuid(property_id)

        existing = await self.property_repo.get_property_with_owner(property_uuid)
        if not existing:
            raise NotFoundError("Property", str(property_uuid))

        if not caller.can_manage(existing.owner_id):
            logger.warning(f"User {caller.user_id} denied update of property {property_uuid}")
            raise PropertyOwnershipError()

        changes = PropertyFieldValidator.validate_update(fields)

        current_images = list(existing.images or [])
        removal = set(remove_images)
        removed = [url for url in current_images if url in removal]
        kept = [url for url in current_images if url not in removal]

        if len(kept) + len(new_images) > self.asset_store.max_images:
            raise ResourceLimitExceededError("Property images", self.asset_store.max_images)
        self.asset_store.validate_image_batch(new_images)

        uploaded: List[str] = []
        try:
            async with transaction(self.db):
                uploaded = await self.asset_store.upload_many(new_images)
                if len(uploaded) != len(new_images):
                    raise UpstreamError("Failed to upload one or more images")

                if removed or uploaded:
                    changes["images"] = kept + uploaded
                await self.property_repo.update_property(existing, changes)
        except APIException:
            await self._discard_uploads(uploaded)
            raise
        except Exception as e:
            logger.error(f"Failed to update property {property_uuid}: {e}", exc_info=True)
            await self._discard_uploads(uploaded)
            raise

        if removed:
            await self.asset_store.delete_many(removed)

        logger.info(f"Property updated by user {caller.user_id}: {property_uuid}")
        return await self.property_repo.get_property_with_owner(property_uuid)

    async def get_property(self, property_id: Any) -> Property:
        """
        Get a single listing with its owner.

        Raises:
            InvalidIdError: If the id is malformed
            NotFoundError: If property doesn't exist
        """
        property_uuid = validate_uuid(property_id)
        property_obj = await self.property_repo.get_property_with_owner(property_uuid)
        if not property_obj:
            raise NotFoundError("Property", str(property_uuid))
        return property_obj

    async def search_properties(self, params: Mapping[str, Any]) -> ListingPage:
        """
        Search public listings.

        Args:
            params: Raw query values keyed by wire name (location, type, status,
                    isFeatured, minPrice, maxPrice, bedrooms, bathrooms, page,
                    limit, sortBy, order)

        Raises:
            InvalidFilterError: If a filter value cannot be parsed
        """
        return await self._search(params, self.build_filters(params))

    async def get_my_listings(self, caller: Authenticated, params: Mapping[str, Any]) -> ListingPage:
        """Search the caller's own listings, with the unfiltered listing count."""
        filters = self.build_filters(params)
        filters.owner_id = caller.user_id

        page = await self._search(params, filters)
        page.total_listings = await self.user_repo.count_listings(caller.user_id)
        return page

    @staticmethod
    def build_filters(params: Mapping[str, Any]) -> PropertySearchFilters:
        location = params.get("location")
        min_price = parse_number_filter(params.get("minPrice"), "minPrice")
        max_price = parse_number_filter(params.get("maxPrice"), "maxPrice")

        return PropertySearchFilters(
            location=location.strip() if isinstance(location, str) and location.strip() else None,
            types=parse_enum_filter(params.get("type"), PropertyType, "type"),
            statuses=parse_enum_filter(params.get("status"), PropertyStatus, "status"),
            is_featured=parse_bool_filter(params.get("isFeatured"), "isFeatured"),
            min_price=min_price,
            max_price=max_price,
            bedrooms=parse_int_filter(params.get("bedrooms"), "bedrooms"),
            bathrooms=parse_int_filter(params.get("bathrooms"), "bathrooms"),
        )

    async def _search(self, params: Mapping[str, Any], filters: PropertySearchFilters) -> ListingPage:
        page, limit = normalize_pagination(params.get("page"), params.get("limit"))
        order_by, direction = normalize_sort(params.get("sortBy"), params.get("order"))

        items, total = await self.property_repo.search_properties(
            filters,
            skip=(page - 1) * limit,
            limit=limit,
            order_by=order_by,
            order_direction=direction,
        )
        return ListingPage(items=items, total=total, page=page, limit=limit)

    async def _discard_uploads(self, urls: List[str]) -> None:
        """Delete uploads orphaned by an aborted write. Never raises."""
        if not urls:
            return
        deleted = await self.asset_store.delete_many(urls)
        logger.warning(f"Discarded {deleted} of {len(urls)} uploaded images after aborted write")
