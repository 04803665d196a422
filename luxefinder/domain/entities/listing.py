"""
ListingItem entity representing one marketplace listing.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class ListingSource(str, Enum):
    """Marketplace a listing was read from."""

    EBAY = "ebay"
    VINTED = "vinted"


class Price(BaseModel):
    """Numeric price with its currency code.

    ``value`` is only absent for degraded-mode placeholders; ``display``
    keeps the upstream text (e.g. "45,00 zł") when there was one.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    value: Optional[float] = Field(default=None, ge=0.0, description="Numeric amount")
    currency: str = Field(default="EUR", description="ISO currency code")
    display: Optional[str] = Field(default=None, description="Original price text")


class ListingItem(BaseModel):
    """A normalised listing from any marketplace."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    item_id: str = Field(..., description="Identifier, unique within one response")
    title: str = Field(..., description="Listing title")
    price: Price = Field(default_factory=Price)
    condition: str = Field(default="Unknown", description="Item condition")
    seller: Optional[str] = Field(default=None, description="Seller display name")
    image_url: Optional[str] = Field(default=None, description="Primary image URL")
    item_web_url: Optional[str] = Field(default=None, description="Listing page URL")
    source: ListingSource = Field(..., description="Source marketplace tag")
    marketplace_id: Optional[str] = Field(default=None, description="e.g. EBAY_US or VINTED_PL")
    is_placeholder: bool = Field(default=False, description="Degraded-mode stand-in")

    @field_validator('item_id', 'title')
    @classmethod
    def validate_not_blank(cls, v: str) -> str:
        """Reject empty identifiers and titles."""
        if not v or not v.strip():
            raise ValueError("must not be empty")
        return v

    @field_validator('condition', mode='before')
    @classmethod
    def default_condition(cls, v: Optional[str]) -> str:
        """Missing or blank conditions become "Unknown"."""
        if v is None or not str(v).strip():
            return "Unknown"
        return v

    @property
    def price_value(self) -> Optional[float]:
        return self.price.value

    def to_payload(self) -> dict:
        """Serialize with camelCase keys for the HTTP envelope."""
        return self.model_dump(mode="json", by_alias=True)
