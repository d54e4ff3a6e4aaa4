# =============================================================================
# core/models/farm.py - Farm Schemas
# =============================================================================
# A farm owns an ordered list of products. The link is stored on both sides
# (farm.products and product.farm); the document store keeps them in sync.
# =============================================================================

from pydantic import BaseModel, ConfigDict, Field, field_validator


class FarmCreate(BaseModel):
    """
    Schema for creating a farm.

    Example:
        {
            "name": "Full Belly Farms",
            "city": "Guinda, CA",
            "email": "info@fullbelly.example"
        }
    """

    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(
        ...,
        min_length=1,
        max_length=200,
        description="Farm name"
    )

    city: str = Field(
        ...,
        min_length=1,
        max_length=200,
        description="City the farm is located in"
    )

    email: str = Field(
        ...,
        min_length=3,
        max_length=320,
        description="Contact email address"
    )

    @field_validator("email")
    @classmethod
    def _check_email(cls, value: str) -> str:
        if "@" not in value:
            raise ValueError("Email address must contain '@'")
        return value


class Farm(FarmCreate):
    """
    A stored farm.

    `products` holds product ids in the order they were added. Each id
    appears at most once.
    """

    id: str = Field(
        ...,
        description="Document identifier (24-character hex ObjectId)"
    )

    products: list[str] = Field(
        default_factory=list,
        description="Ids of the products this farm owns"
    )

    @field_validator("products")
    @classmethod
    def _unique_products(cls, value: list[str]) -> list[str]:
        # dict preserves first-seen order
        return list(dict.fromkeys(value))
