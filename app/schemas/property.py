"""
Pydantic schemas for property listing responses.
Listing writes arrive as multipart form data and are validated by PropertyFieldValidator.
"""

from pydantic import Field
from typing import List, Optional
from datetime import datetime
from app.models.property import PropertyType, PropertyStatus
from app.schemas.user import CamelModel, OwnerSummary
import uuid


class PropertyResponse(CamelModel):
    """Schema for property response data."""

    id: uuid.UUID = Field(..., description="Property's unique identifier")
    title: str = Field(..., examples=["Modern Downtown Apartment"])
    description: str
    price: float = Field(..., examples=[250000.0])
    location: str = Field(..., examples=["Lekki, Lagos"])
    bedrooms: int = Field(..., examples=[2])
    bathrooms: int = Field(..., examples=[2])
    square_footage: float = Field(..., examples=[1200.0])
    type: PropertyType
    status: PropertyStatus
    images: List[str] = Field(default_factory=list, description="Ordered image URLs")
    is_featured: bool = False
    owner: OwnerSummary
    created_at: datetime
    updated_at: datetime


class PropertyMutationResponse(CamelModel):
    """Response for create and update."""

    message: str
    property: PropertyResponse


class PropertyDetailResponse(CamelModel):
    data: PropertyResponse


class PropertyListResponse(CamelModel):
    """Schema for paginated property list responses."""

    total: int = Field(..., description="Total number of matching listings")
    page: int = Field(..., description="Current page number")
    limit: int = Field(..., description="Page size")
    count: int = Field(..., description="Number of listings on this page")
    data: List[PropertyResponse]


class MyPropertyListResponse(PropertyListResponse):
    total_listings: Optional[int] = Field(None, description="All listings owned by the caller, unfiltered")
