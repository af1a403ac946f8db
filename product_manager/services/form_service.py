import math
import uuid
from datetime import datetime
from typing import Any, Callable, Dict, Optional

from pydantic import ValidationError as SchemaValidationError

from product_manager.schemas.product_schema import Product, ProductDraft, utcnow


class ValidationError(Exception):
    """Form values can't be saved. ``errors`` maps field name to message."""

    def __init__(self, errors: Dict[str, str]):
        self.errors = dict(errors)
        super().__init__("; ".join(f"{k}: {v}" for k, v in self.errors.items()))


def new_product_id() -> str:
    return str(uuid.uuid4())


def merge_draft(draft: ProductDraft, changes: Dict[str, Any]) -> ProductDraft:
    """
    Apply field changes (snake_case or camelCase keys) to a draft. Values
    that can't be coerced (e.g. a non-numeric price) raise ValidationError
    and leave the original draft untouched.
    """
    try:
        return ProductDraft.model_validate({**draft.model_dump(), **changes})
    except SchemaValidationError as e:
        raise ValidationError(_field_errors(e)) from e


def _field_errors(e: SchemaValidationError) -> Dict[str, str]:
    errors = {}
    for err in e.errors():
        field = str(err["loc"][0]) if err.get("loc") else "form"
        errors.setdefault(field, err["msg"])
    return errors


def validate_draft(draft: ProductDraft) -> Dict[str, str]:
    errors = {}
    if not draft.name.strip():
        errors["name"] = "Product Name is required."
    if not draft.category.strip():
        errors["category"] = "Category is required."
    if not math.isfinite(draft.price):
        errors["price"] = "Price must be a finite number."
    elif draft.price < 0:
        errors["price"] = "Price can't be negative."
    return errors


def build_product(
    draft: ProductDraft,
    editing: Optional[Product] = None,
    now: Optional[datetime] = None,
    id_factory: Callable[[], str] = new_product_id,
) -> Product:
    """
    Turn form values into a Product. A new product gets a fresh id and the
    current time; an edited one keeps the id and createdAt it already had.
    """
    errors = validate_draft(draft)
    if errors:
        raise ValidationError(errors)

    try:
        return Product(
            id=editing.id if editing else id_factory(),
            created_at=editing.created_at if editing else (now or utcnow()),
            name=draft.name.strip(),
            description=draft.description,
            category=draft.category.strip(),
            price=draft.price,
            status=draft.status,
            image_url=draft.image_url,
        )
    except SchemaValidationError as e:
        raise ValidationError(_field_errors(e)) from e


def require_description_inputs(draft: ProductDraft):
    """Description generation needs both a name and a category."""
    errors = {}
    if not draft.name.strip():
        errors["name"] = "Please enter a product name first."
    if not draft.category.strip():
        errors["category"] = "Please enter a category first."
    if errors:
        raise ValidationError(errors)
