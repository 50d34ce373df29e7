"""
Property management API endpoints for listing creation, update, search and detail.
Writes accept multipart form data with property fields and image files.
"""

from fastapi import APIRouter, Depends, Query, Request, status
from starlette.datastructures import UploadFile
from typing import Optional, List, Dict, Any, Tuple

from app.services.asset_store import ImageUpload
from app.services.property import PropertyService, ListingPage
from app.schemas.property import (
    PropertyResponse,
    PropertyMutationResponse,
    PropertyDetailResponse,
    PropertyListResponse,
    MyPropertyListResponse
)
from app.schemas.error import error_responses
from app.utils.context import Authenticated
from app.utils.dependencies import (
    get_property_service,
    require_agent,
    require_agent_or_admin
)
from app.utils.validators import parse_remove_images


router = APIRouter(prefix="/properties", tags=["Properties"])

FILE_FIELDS = ("images", "removeImages", "removeImages[]")


async def read_listing_form(request: Request) -> Tuple[Dict[str, Any], List[ImageUpload], List[str]]:
    """
    Split a listing form into plain fields, image uploads and URLs to remove.

    Returns:
        Tuple of (fields keyed by wire name, images in form order, removeImages URLs)
    """
    form = await request.form()

    fields = {
        key: form.get(key)
        for key in form.keys()
        if key not in FILE_FIELDS and not isinstance(form.get(key), UploadFile)
    }

    images = []
    for item in form.getlist("images"):
        if isinstance(item, UploadFile) and item.filename:
            images.append(ImageUpload(
                filename=item.filename,
                content_type=item.content_type or "",
                data=await item.read()
            ))

    remove_images = parse_remove_images(
        form.getlist("removeImages") + form.getlist("removeImages[]")
    )
    return fields, images, remove_images


def listing_query(
    location: Optional[str] = Query(None, description="Case-insensitive substring of the location"),
    type: Optional[List[str]] = Query(None, description="Property type, repeated or comma-separated"),
    status: Optional[List[str]] = Query(None, description="Property status, repeated or comma-separated"),
    is_featured: Optional[str] = Query(None, alias="isFeatured"),
    min_price: Optional[str] = Query(None, alias="minPrice", description="Inclusive lower price bound"),
    max_price: Optional[str] = Query(None, alias="maxPrice", description="Inclusive upper price bound"),
    bedrooms: Optional[str] = Query(None, description="Exact number of bedrooms"),
    bathrooms: Optional[str] = Query(None, description="Exact number of bathrooms"),
    page: Optional[str] = Query(None, description="Page number, starts from 1"),
    limit: Optional[str] = Query(None, description="Page size, 1 to 100"),
    sort_by: Optional[str] = Query(None, alias="sortBy",
                                   description="createdAt, updatedAt, price, bedrooms, bathrooms or title"),
    order: Optional[str] = Query(None, description="asc or desc")
) -> Dict[str, Any]:
    """Collect raw listing query parameters keyed by wire name."""
    return {
        "location": location,
        "type": type,
        "status": status,
        "isFeatured": is_featured,
        "minPrice": min_price,
        "maxPrice": max_price,
        "bedrooms": bedrooms,
        "bathrooms": bathrooms,
        "page": page,
        "limit": limit,
        "sortBy": sort_by,
        "order": order,
    }


def _page_payload(page: ListingPage) -> Dict[str, Any]:
    return {
        "total": page.total,
        "page": page.page,
        "limit": page.limit,
        "count": len(page.items),
        "data": [PropertyResponse.model_validate(item) for item in page.items],
    }


@router.post(
    "",
    response_model=PropertyMutationResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create new property",
    description="Create a listing with up to 10 images. Requires the Agent role.",
    responses=error_responses(400, 401, 403, 500)
)
async def create_property(
    request: Request,
    caller: Authenticated = Depends(require_agent),
    property_service: PropertyService = Depends(get_property_service)
) -> PropertyMutationResponse:
    """
    Create a new property listing.

    Raises:
        ValidationError: If a field or image is invalid
        UpstreamError: If an image upload fails
    """
    fields, images, _ = await read_listing_form(request)
    property_obj = await property_service.create_property(caller, fields, images)

    return PropertyMutationResponse(
        message="Property created successfully",
        property=PropertyResponse.model_validate(property_obj)
    )


@router.get(
    "",
    response_model=PropertyListResponse,
    status_code=status.HTTP_200_OK,
    summary="List properties with search and filtering",
    description="Paginated listings. An empty page is a normal 200 response.",
    responses=error_responses(400)
)
async def list_properties(
    params: Dict[str, Any] = Depends(listing_query),
    property_service: PropertyService = Depends(get_property_service)
) -> PropertyListResponse:
    page = await property_service.search_properties(params)
    return PropertyListResponse(**_page_payload(page))


@router.get(
    "/mine",
    response_model=MyPropertyListResponse,
    status_code=status.HTTP_200_OK,
    summary="List my properties",
    description="The caller's own listings, with the same filters as the public list.",
    responses=error_responses(400, 401, 403)
)
async def list_my_properties(
    params: Dict[str, Any] = Depends(listing_query),
    caller: Authenticated = Depends(require_agent_or_admin),
    property_service: PropertyService = Depends(get_property_service)
) -> MyPropertyListResponse:
    page = await property_service.get_my_listings(caller, params)
    return MyPropertyListResponse(total_listings=page.total_listings, **_page_payload(page))


@router.get(
    "/{property_id}",
    response_model=PropertyDetailResponse,
    status_code=status.HTTP_200_OK,
    summary="Get property details",
    responses=error_responses(400, 404)
)
async def get_property(
    property_id: str,
    property_service: PropertyService = Depends(get_property_service)
) -> PropertyDetailResponse:
    """
    Get a single property with its owner.

    Raises:
        InvalidIdError: If the id is malformed
        NotFoundError: If the property doesn't exist
    """
    property_obj = await property_service.get_property(property_id)
    return PropertyDetailResponse(data=PropertyResponse.model_validate(property_obj))


@router.put(
    "/{property_id}",
    response_model=PropertyMutationResponse,
    status_code=status.HTTP_200_OK,
    summary="Update property",
    description=(
        "Partially update a listing. New images are appended after the kept ones; "
        "removeImages lists URLs to drop. Requires ownership or the Admin role."
    ),
    responses=error_responses(400, 401, 403, 404, 500)
)
async def update_property(
    property_id: str,
    request: Request,
    caller: Authenticated = Depends(require_agent_or_admin),
    property_service: PropertyService = Depends(get_property_service)
) -> PropertyMutationResponse:
    """
    Update a property listing.

    Raises:
        InvalidIdError: If the id is malformed
        NotFoundError: If the property doesn't exist
        PropertyOwnershipError: If the caller doesn't own the property and isn't an admin
        ValidationError: If a field or image is invalid
    """
    fields, images, remove_images = await read_listing_form(request)
    property_obj = await property_service.update_property(
        caller, property_id, fields, images, remove_images
    )

    return PropertyMutationResponse(
        message="Property updated successfully",
        property=PropertyResponse.model_validate(property_obj)
    )
