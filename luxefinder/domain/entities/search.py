"""
Search request/response value objects.

Both live for the duration of one HTTP call only.
"""

from collections.abc import Mapping
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

from luxefinder.utils.exceptions import InvalidRequestError
from luxefinder.utils.validators import parse_optional_float, parse_positive_int, split_csv

from .listing import ListingItem
from .marketplace import DEFAULT_BRANDS

MAX_ITEMS_PER_PAGE = 200


class SortKey(str, Enum):
    """Result ordering."""

    PRICE_ASC = "price-asc"
    PRICE_DESC = "price-desc"
    TITLE = "title"

    @classmethod
    def parse(cls, value: Optional[str]) -> "SortKey":
        """Parse a sort parameter; unknown or missing values sort by ascending price."""
        if not value:
            return cls.PRICE_ASC
        normalized = value.strip().lower().replace("_", "-")
        for key in cls:
            if key.value == normalized:
                return key
        return cls.PRICE_ASC


def _first(params: Mapping[str, Any], *names: str) -> Optional[str]:
    """Return the first non-empty value among parameter aliases."""
    for name in names:
        value = params.get(name)
        if value is not None and str(value).strip() != "":
            return str(value)
    return None


def price_within(value: Optional[float], min_price: Optional[float], max_price: Optional[float]) -> bool:
    """Check a parsed price against inclusive bounds; unpriced items only pass when unbounded."""
    if min_price is None and max_price is None:
        return True
    if value is None:
        return False
    low = min_price if min_price is not None else 0.0
    high = max_price if max_price is not None else float("inf")
    return low <= value <= high


class SearchRequest(BaseModel):
    """A marketplace search.

    A non-empty ``query`` suppresses ``brands``; with neither, the default
    brand list is searched.
    """

    query: Optional[str] = Field(default=None, description="Free-text search")
    brands: list[str] = Field(default_factory=list, description="Brand filters")
    category: Optional[str] = Field(default=None, description="Vinted category")
    min_price: Optional[float] = Field(default=None, ge=0.0, description="Inclusive lower bound")
    max_price: Optional[float] = Field(default=None, ge=0.0, description="Inclusive upper bound")
    country: Optional[str] = Field(default=None, description="Marketplace/country code, or ALL")
    page: int = Field(default=1, ge=1, description="1-based page number")
    items_per_page: int = Field(default=24, ge=1, le=MAX_ITEMS_PER_PAGE, description="Page size")
    sort_by: SortKey = Field(default=SortKey.PRICE_ASC, description="Result ordering")

    @model_validator(mode='after')
    def validate_price_bounds(self) -> 'SearchRequest':
        """Ensure min_price <= max_price when both are given."""
        if self.min_price is not None and self.max_price is not None and self.min_price > self.max_price:
            raise ValueError("min_price must not exceed max_price")
        return self

    @property
    def has_query(self) -> bool:
        return bool(self.query and self.query.strip())

    @property
    def search_terms(self) -> list[str]:
        """Terms to fan out over: the query alone, else every brand."""
        if self.has_query:
            return [self.query.strip()]
        return list(self.brands) if self.brands else list(DEFAULT_BRANDS)

    def price_in_range(self, value: Optional[float]) -> bool:
        """Check a parsed price against the inclusive bounds."""
        return price_within(value, self.min_price, self.max_price)

    @classmethod
    def from_params(
        cls,
        params: Mapping[str, Any],
        default_items_per_page: int = 24,
        default_country: Optional[str] = None,
    ) -> "SearchRequest":
        """Build a request from query parameters, accepting the known aliases.

        Args:
            params: Query parameters (``search``/``search_term``,
                ``brand``/``brands``, ``min_price``/``minPrice``,
                ``max_price``/``maxPrice``, ``items_per_page``/``itemsPerPage``,
                ``sortBy``/``sort_by``, ``category``, ``country``, ``page``)
            default_items_per_page: Page size when none is given
            default_country: Country when none is given

        Raises:
            InvalidRequestError: On malformed numbers or inconsistent bounds
        """
        try:
            min_price = parse_optional_float(_first(params, "min_price", "minPrice"), "min_price")
            max_price = parse_optional_float(_first(params, "max_price", "maxPrice"), "max_price")
            page = parse_positive_int(_first(params, "page"), "page", 1)
            items_per_page = parse_positive_int(
                _first(params, "items_per_page", "itemsPerPage"), "items_per_page", default_items_per_page
            )
        except ValueError as e:
            raise InvalidRequestError(str(e)) from e

        if items_per_page > MAX_ITEMS_PER_PAGE:
            raise InvalidRequestError(
                f"items_per_page must not exceed {MAX_ITEMS_PER_PAGE}",
                field="items_per_page",
                value=items_per_page,
            )
        if min_price is not None and max_price is not None and min_price > max_price:
            raise InvalidRequestError(
                "min_price must not exceed max_price",
                field="min_price",
                value=min_price,
            )

        return cls(
            query=_first(params, "search", "search_term"),
            brands=split_csv(_first(params, "brands", "brand")),
            category=_first(params, "category"),
            min_price=min_price,
            max_price=max_price,
            country=_first(params, "country") or default_country,
            page=page,
            items_per_page=items_per_page,
            sort_by=SortKey.parse(_first(params, "sortBy", "sort_by")),
        )


class SearchResponse(BaseModel):
    """Envelope returned by every search endpoint."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    success: bool = True
    items: list[ListingItem] = Field(default_factory=list)
    total_results: int = Field(default=0, ge=0)
    total_pages: int = Field(default=0, ge=0)
    current_page: int = Field(default=1, ge=1)
    message: Optional[str] = None
    error: Optional[str] = None

    @classmethod
    def failure(cls, error: str, message: Optional[str] = None) -> "SearchResponse":
        """Failure envelope: no items, zero totals."""
        return cls(success=False, error=error, message=message)

    def to_payload(self) -> dict:
        """Serialize with camelCase keys, omitting unset message/error."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
