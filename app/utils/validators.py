"""
Validation utilities for listing writes and listing queries.
Converts raw form and query values into typed, range-checked values.
"""

import json
import math
import uuid
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple, Type

from app.models.property import (
    PropertyType,
    PropertyStatus,
    MAX_TITLE_LENGTH,
    MAX_DESCRIPTION_LENGTH,
    MIN_PRICE,
    MAX_PRICE,
    MAX_ROOM_COUNT,
)
from app.utils.exceptions import ValidationError, InvalidIdError, InvalidFilterError


REQUIRED_TEXT_FIELDS = ("title", "description", "location", "type", "status")

# Wire name -> model attribute, for every field a partial update may touch.
UPDATABLE_FIELDS = {
    "title": "title",
    "description": "description",
    "price": "price",
    "location": "location",
    "type": "type",
    "status": "status",
    "bedrooms": "bedrooms",
    "bathrooms": "bathrooms",
    "squareFootage": "square_footage",
    "isFeatured": "is_featured",
}

SORTABLE_FIELDS = {
    "createdAt": "created_at",
    "updatedAt": "updated_at",
    "price": "price",
    "bedrooms": "bedrooms",
    "bathrooms": "bathrooms",
    "title": "title",
}

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 10
MAX_LIMIT = 100
MAX_PAGE = 1_000_000

_TRUE_VALUES = {"true", "1", "yes", "on"}
_FALSE_VALUES = {"false", "0", "no", "off", ""}


def validate_uuid(value: Any, resource: str = "Property") -> uuid.UUID:
    """Parse an identifier, raising InvalidIdError when malformed."""
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value).strip())
    except (ValueError, AttributeError, TypeError):
        raise InvalidIdError(resource)


def _clean_text(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def _to_number(value: Any) -> Optional[float]:
    """Coerce a raw value to a finite float, or None when impossible."""
    if isinstance(value, bool):
        return None
    try:
        number = float(str(value).strip())
    except (TypeError, ValueError):
        return None
    if not math.isfinite(number):
        return None
    return number


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def parse_bool(value: Any, field_name: str) -> bool:
    """Parse a form/query boolean ("true", "false", "1", "0", ...)."""
    if isinstance(value, bool):
        return value
    normalized = _clean_text(value).lower()
    if normalized in _TRUE_VALUES:
        return True
    if normalized in _FALSE_VALUES:
        return False
    raise ValidationError(f"{field_name} must be a boolean")


class PropertyFieldValidator:
    """
    Validates listing fields for create and partial update.
    Every check runs before any side effect; the first failure wins.
    """

    @staticmethod
    def validate_title(value: Any) -> str:
        title = _clean_text(value)
        if not title:
            raise ValidationError("Title cannot be empty")
        if len(title) > MAX_TITLE_LENGTH:
            raise ValidationError(f"Title cannot exceed {MAX_TITLE_LENGTH} characters")
        return title

    @staticmethod
    def validate_description(value: Any) -> str:
        description = _clean_text(value)
        if not description:
            raise ValidationError("Description cannot be empty")
        if len(description) > MAX_DESCRIPTION_LENGTH:
            raise ValidationError(f"Description cannot exceed {MAX_DESCRIPTION_LENGTH} characters")
        return description

    @staticmethod
    def validate_location(value: Any) -> str:
        location = _clean_text(value)
        if not location:
            raise ValidationError("Location cannot be empty")
        return location

    @staticmethod
    def validate_type(value: Any) -> PropertyType:
        try:
            return PropertyType.parse(_clean_text(value))
        except ValueError:
            raise ValidationError(
                f"Invalid property type '{value}'. Must be one of: {', '.join(PropertyType.labels())}"
            )

    @staticmethod
    def validate_status(value: Any) -> PropertyStatus:
        try:
            return PropertyStatus.parse(_clean_text(value))
        except ValueError:
            raise ValidationError(
                f"Invalid property status '{value}'. Must be one of: {', '.join(PropertyStatus.labels())}"
            )

    @staticmethod
    def validate_price(value: Any) -> float:
        price = _to_number(value)
        if price is None or price <= 0:
            raise ValidationError("Price must be a positive number")
        if price < MIN_PRICE:
            raise ValidationError(f"Price must be at least {MIN_PRICE}")
        if price > MAX_PRICE:
            raise ValidationError(f"Price cannot exceed {MAX_PRICE:,.2f}")
        return price

    @staticmethod
    def validate_square_footage(value: Any) -> float:
        square_footage = _to_number(0 if _is_blank(value) else value)
        if square_footage is None or square_footage <= 0:
            raise ValidationError("Square footage must be a positive number")
        return square_footage

    @staticmethod
    def _validate_room_count(value: Any, label: str) -> int:
        count = _to_number(0 if _is_blank(value) else value)
        if count is None or count < 0 or not count.is_integer():
            raise ValidationError(f"{label} must be a non-negative integer")
        if count > MAX_ROOM_COUNT:
            raise ValidationError(f"{label} cannot exceed {MAX_ROOM_COUNT}")
        return int(count)

    @classmethod
    def validate_bedrooms(cls, value: Any) -> int:
        return cls._validate_room_count(value, "Bedrooms")

    @classmethod
    def validate_bathrooms(cls, value: Any) -> int:
        return cls._validate_room_count(value, "Bathrooms")

    @classmethod
    def validate_create(cls, raw: Mapping[str, Any]) -> Dict[str, Any]:
        """
        Validate a full set of listing fields.

        Order: required text fields, enum members, numeric ranges.

        Returns:
            Dictionary of model attribute values

        Raises:
            ValidationError: On the first invalid field
        """
        if any(not _clean_text(raw.get(name)) for name in REQUIRED_TEXT_FIELDS):
            raise ValidationError("Required fields cannot be empty")

        title = cls.validate_title(raw.get("title"))
        description = cls.validate_description(raw.get("description"))
        location = cls.validate_location(raw.get("location"))

        property_type = cls.validate_type(raw.get("type"))
        status = cls.validate_status(raw.get("status"))

        price = cls.validate_price(raw.get("price"))
        bedrooms = cls.validate_bedrooms(raw.get("bedrooms"))
        bathrooms = cls.validate_bathrooms(raw.get("bathrooms"))
        square_footage = cls.validate_square_footage(raw.get("squareFootage"))

        is_featured = raw.get("isFeatured")
        return {
            "title": title,
            "description": description,
            "location": location,
            "type": property_type,
            "status": status,
            "price": price,
            "bedrooms": bedrooms,
            "bathrooms": bathrooms,
            "square_footage": square_footage,
            "is_featured": False if is_featured is None else parse_bool(is_featured, "isFeatured"),
        }

    @classmethod
    def validate_update(cls, raw: Mapping[str, Any]) -> Dict[str, Any]:
        """
        Validate the allow-listed fields present in a partial update.
        Keys outside the allow-list are dropped without error.
        """
        present = {name: raw[name] for name in UPDATABLE_FIELDS if name in raw}
        validators = {
            "title": cls.validate_title,
            "description": cls.validate_description,
            "location": cls.validate_location,
            "type": cls.validate_type,
            "status": cls.validate_status,
            "price": cls.validate_price,
            "bedrooms": cls.validate_bedrooms,
            "bathrooms": cls.validate_bathrooms,
            "squareFootage": cls.validate_square_footage,
            "isFeatured": lambda value: parse_bool(value, "isFeatured"),
        }

        # Same phase order as create: text, enums, numbers, flags
        ordered = ("title", "description", "location", "type", "status",
                   "price", "bedrooms", "bathrooms", "squareFootage", "isFeatured")
        return {
            UPDATABLE_FIELDS[name]: validators[name](present[name])
            for name in ordered
            if name in present
        }


def parse_remove_images(values: Iterable[Any]) -> List[str]:
    """
    Parse the removeImages field, sent either as a JSON-encoded array or
    as a repeated form field.
    """
    urls: List[str] = []
    for value in values:
        text = _clean_text(value)
        if not text:
            continue
        if text.startswith("["):
            try:
                decoded = json.loads(text)
            except json.JSONDecodeError:
                raise ValidationError("removeImages must be a JSON array of URLs")
            if not isinstance(decoded, list) or not all(isinstance(item, str) for item in decoded):
                raise ValidationError("removeImages must be a JSON array of URLs")
            urls.extend(item.strip() for item in decoded if item.strip())
        else:
            urls.append(text)
    return urls


def parse_enum_filter(values: Optional[Iterable[str]], enum_cls: Type, field_name: str) -> List:
    """
    Parse one or many enum values (repeated or comma-separated).

    Raises:
        InvalidFilterError: If any value is not a member
    """
    members = []
    for value in values or []:
        for part in str(value).split(","):
            if not part.strip():
                continue
            try:
                member = enum_cls.parse(part)
            except ValueError:
                raise InvalidFilterError(
                    f"Invalid {field_name} filter '{part.strip()}'. Must be one of: {', '.join(enum_cls.labels())}"
                )
            if member not in members:
                members.append(member)
    return members


def parse_number_filter(value: Optional[str], field_name: str) -> Optional[float]:
    if _is_blank(value):
        return None
    number = _to_number(value)
    if number is None:
        raise InvalidFilterError(f"{field_name} must be a number")
    return number


def parse_int_filter(value: Optional[str], field_name: str) -> Optional[int]:
    number = parse_number_filter(value, field_name)
    if number is None:
        return None
    if number < 0 or not number.is_integer():
        raise InvalidFilterError(f"{field_name} must be a non-negative integer")
    if number > MAX_ROOM_COUNT:
        raise InvalidFilterError(f"{field_name} cannot exceed {MAX_ROOM_COUNT}")
    return int(number)


def parse_bool_filter(value: Optional[str], field_name: str) -> Optional[bool]:
    if _is_blank(value):
        return None
    try:
        return parse_bool(value, field_name)
    except ValidationError:
        raise InvalidFilterError(f"{field_name} must be true or false")


def normalize_pagination(page: Any, limit: Any) -> Tuple[int, int]:
    """Clamp page to 1..MAX_PAGE and limit to 1..100, defaulting invalid input."""
    page_number = _to_number(page)
    if page_number is None or page_number < 1:
        page_value = DEFAULT_PAGE
    else:
        page_value = int(min(page_number, MAX_PAGE))

    limit_number = _to_number(limit)
    if limit_number is None or limit_number < 1:
        limit_value = DEFAULT_LIMIT
    else:
        limit_value = min(int(limit_number), MAX_LIMIT)

    return page_value, limit_value


def normalize_sort(sort_by: Optional[str], order: Optional[str]) -> Tuple[str, str]:
    """Restrict sorting to the allow-list; unknown fields fall back to createdAt."""
    column = SORTABLE_FIELDS.get(_clean_text(sort_by), SORTABLE_FIELDS["createdAt"])
    direction = "asc" if _clean_text(order).lower() == "asc" else "desc"
    return column, direction
