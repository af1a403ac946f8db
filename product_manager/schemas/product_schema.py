# product_manager/schemas/product_schema.py
import enum
from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator
from pydantic.alias_generators import to_camel

from product_manager.config import settings


class ProductStatus(str, enum.Enum):
    DRAFT = "Draft"
    PUBLISHED = "Published"
    ARCHIVED = "Archived"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def iso_timestamp(value: datetime) -> str:
    """ISO 8601 in UTC with millisecond precision and a ``Z`` suffix."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _empty_to_none(v):
    if isinstance(v, str) and not v.strip():
        return None
    return v


class Product(BaseModel):
    """
    A catalog entry. Serialized with camelCase keys (``imageUrl``,
    ``createdAt``) which is also the storage format.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    id: str = Field(min_length=1)
    name: str = Field(min_length=1)
    description: str = ""
    category: str = Field(min_length=1)
    price: float = Field(default=0, ge=0, allow_inf_nan=False)
    status: ProductStatus = ProductStatus.DRAFT
    image_url: Optional[str] = None
    created_at: datetime

    strip_image = field_validator("image_url", mode="before")(_empty_to_none)

    @field_validator("created_at")
    @classmethod
    def assume_utc(cls, v: datetime) -> datetime:
        # naive timestamps would break ordering against aware ones
        if v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v

    @field_serializer("created_at")
    def serialize_created_at(self, v: datetime) -> str:
        return iso_timestamp(v)

    @property
    def display_image_url(self) -> str:
        return self.image_url or settings.PLACEHOLDER_IMAGE_URL.format(id=self.id)

    def to_storage(self) -> dict:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)

    def to_view(self) -> dict:
        data = self.model_dump(mode="json", by_alias=True)
        data["imageUrl"] = self.display_image_url
        return data


class ProductDraft(BaseModel):
    """
    Editable form values. Lax: required fields are checked by
    the form on save so errors can be reported per field.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    name: str = ""
    description: str = ""
    category: str = ""
    price: float = Field(default=0, allow_inf_nan=False)
    status: ProductStatus = ProductStatus.DRAFT
    image_url: Optional[str] = None

    strip_image = field_validator("image_url", mode="before")(_empty_to_none)

    @classmethod
    def from_product(cls, product: Product) -> "ProductDraft":
        return cls(
            name=product.name,
            description=product.description,
            category=product.category,
            price=product.price,
            status=product.status,
            image_url=product.image_url,
        )
