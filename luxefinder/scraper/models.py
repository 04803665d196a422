"""Pydantic data models for scraped Vinted catalogue cards."""

from typing import Optional

from pydantic import BaseModel, Field

from luxefinder.domain.entities.listing import ListingItem, ListingSource, Price
from luxefinder.utils.validators import detect_currency, parse_price

from .utils import extract_item_id_from_url


class ScrapedCard(BaseModel):
    """One catalogue card as found on the page; every field may be missing."""

    title: Optional[str] = Field(default=None, description="Card title text")
    price: Optional[str] = Field(default=None, description="Price text as displayed")
    image: Optional[str] = Field(default=None, description="Image URL")
    url: Optional[str] = Field(default=None, description="Absolute item page URL")
    currency: Optional[str] = Field(default=None, description="Currency code when structured data gave one")

    def is_empty(self) -> bool:
        """True when no field could be extracted."""
        return not (self.title or self.price or self.image or self.url)

    def to_listing(self, index: int, default_currency: str = "EUR") -> ListingItem:
        """Convert to a ListingItem; the id comes from the item URL when possible."""
        item_id = None
        if self.url:
            try:
                item_id = extract_item_id_from_url(self.url)
            except ValueError:
                item_id = None

        return ListingItem(
            item_id=f"vinted_{item_id}" if item_id else f"vinted_scraped_{index}",
            title=(self.title or "").strip() or "Untitled",
            price=Price(
                value=parse_price(self.price),
                currency=self.currency or detect_currency(self.price, default_currency),
                display=self.price,
            ),
            image_url=self.image,
            item_web_url=self.url,
            source=ListingSource.VINTED,
            marketplace_id="VINTED",
        )
