"""
Property model for sale and rental listings.
Handles listing data, the ordered image list and ownership by a single agent.
"""

from sqlalchemy import String, Text, Integer, Float, Numeric, Boolean, JSON, Uuid, Enum as SQLEnum, Index, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column, relationship
from app.database import Base
import enum
import uuid
from typing import List, TYPE_CHECKING

if TYPE_CHECKING:
    from app.models.user import User


class _LabeledEnum(str, enum.Enum):
    """String enum whose members can be resolved from user input regardless of case."""

    @classmethod
    def parse(cls, value: str):
        normalized = (value or "").strip().lower()
        for member in cls:
            if member.value.lower() == normalized:
                return member
        raise ValueError(value)

    @classmethod
    def labels(cls) -> List[str]:
        return [member.value for member in cls]


class PropertyType(_LabeledEnum):
    """Kind of real-estate unit."""
    HOUSE = "House"
    APARTMENT = "Apartment"
    LAND = "Land"
    COMMERCIAL = "Commercial"
    OTHER = "Other"


class PropertyStatus(_LabeledEnum):
    """Market status of a listing."""
    AVAILABLE = "Available"
    UNDER_CONTRACT = "Under Contract"
    SOLD = "Sold"
    RENTED = "Rented"


MAX_TITLE_LENGTH = 100
MAX_DESCRIPTION_LENGTH = 5000

# Bounds of the price NUMERIC(14, 2) and room count INTEGER columns
MIN_PRICE = 0.01
MAX_PRICE = 999_999_999_999.99
MAX_ROOM_COUNT = 2**31 - 1


class Property(Base):
    """
    Property listing owned by exactly one agent.
    Images are stored as an ordered list of asset store URLs.
    """

    __tablename__ = "properties"

    # Basic property information
    title: Mapped[str] = mapped_column(
        String(MAX_TITLE_LENGTH),
        nullable=False,
        index=True,
        comment="Property listing title"
    )

    description: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        comment="Detailed property description"
    )

    price: Mapped[float] = mapped_column(
        Numeric(precision=14, scale=2, asdecimal=False),
        nullable=False,
        index=True,
        comment="Asking price, strictly positive"
    )

    location: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        index=True,
        comment="Free-text property location"
    )

    # Property specifications
    bedrooms: Mapped[int] = mapped_column(Integer, nullable=False, default=0, index=True)

    bathrooms: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    square_footage: Mapped[float] = mapped_column(
        Float,
        nullable=False,
        comment="Floor area in square feet, strictly positive"
    )

    type: Mapped[PropertyType] = mapped_column(
        SQLEnum(PropertyType),
        nullable=False,
        default=PropertyType.HOUSE,
        index=True
    )

    status: Mapped[PropertyStatus] = mapped_column(
        SQLEnum(PropertyStatus),
        nullable=False,
        default=PropertyStatus.AVAILABLE,
        index=True
    )

    images: Mapped[List[str]] = mapped_column(
        JSON,
        nullable=False,
        default=list,
        comment="Ordered asset store URLs (at most 10)"
    )

    is_featured: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
        index=True
    )

    # Foreign key to the owning agent
    owner_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
        comment="ID of the agent who owns this listing"
    )

    owner: Mapped["User"] = relationship("User", lazy="selectin")

    def __repr__(self) -> str:
        """String representation of the property."""
        return f"<Property(id={self.id}, title={self.title[:30]}..., price={self.price})>"

    @property
    def image_count(self) -> int:
        return len(self.images or [])


# Composite index for location-based searches with price filtering
location_price_index = Index(
    'idx_properties_location_price',
    Property.location,
    Property.price
)

# Composite index for an owner's listings
owner_created_index = Index(
    'idx_properties_owner_created',
    Property.owner_id,
    Property.created_at.desc()
)
