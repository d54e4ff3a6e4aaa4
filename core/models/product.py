# =============================================================================
# core/models/product.py - Product Schemas
# =============================================================================
# These models define the shape of a product document:
# - ProductCategory: Closed set of categories a product can belong to
# - ProductCreate: Fields submitted by the "new product" forms
# - ProductUpdate: Fields submitted by the edit form (full replacement)
# - Product: A stored product, including its id and owning farm
#
# Validation errors raised here are translated to HTTP 400 by the
# error handlers in app/exceptions.py.
# =============================================================================

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ProductCategory(str, Enum):
    """
    Categories a product can be filed under.

    The set is closed; anything else fails validation.
    """
    FRUIT = "fruit"
    VEGETABLES = "vegetables"
    DAIRY = "dairy"


# Ordered list used to populate <select> elements in the forms
CATEGORIES: list[str] = [category.value for category in ProductCategory]


class ProductCreate(BaseModel):
    """
    Schema for creating a product.

    Form input arrives as strings; price is coerced to a number and the
    category is matched case-insensitively.

    Example:
        {
            "name": "Ruby Grapefruit",
            "price": "1.99",
            "category": "fruit"
        }
    """

    model_config = ConfigDict(str_strip_whitespace=True)

    # Display name of the product
    name: str = Field(
        ...,
        min_length=1,
        max_length=200,
        description="Product name"
    )

    # Unit price; free products are allowed, negative or infinite prices are not
    price: float = Field(
        ...,
        ge=0,
        allow_inf_nan=False,
        description="Unit price"
    )

    category: ProductCategory = Field(
        ...,
        description="One of: fruit, vegetables, dairy"
    )

    @field_validator("category", mode="before")
    @classmethod
    def _normalize_category(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip().lower()
        return value


class ProductUpdate(ProductCreate):
    """
    Schema for updating a product.

    Updates replace every editable field, so all of them are required
    again and validated the same way as on creation. The owning farm is
    not editable.
    """


class Product(ProductCreate):
    """
    A stored product.

    `farm` is the id of the owning farm, or None for products created
    outside of a farm (and for records that predate farms).
    """

    id: str = Field(
        ...,
        description="Document identifier (24-character hex ObjectId)"
    )

    farm: str | None = Field(
        default=None,
        description="Id of the farm that owns this product"
    )
