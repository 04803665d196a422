"""HTML/JSON parsing utilities for Vinted catalogue pages.

This module implements two extraction stages:
1. Primary: card containers located by CSS selectors, each field taken from
   the first selector in its list that yields a non-empty value
2. Alternate: JSON-LD structured data, then embedded state JSON, used when
   no card container matches
"""

import json
import re
from typing import Any, Optional
from urllib.parse import urljoin

from bs4 import BeautifulSoup, Tag
from pydantic import ValidationError

from luxefinder.utils import get_logger
from luxefinder.utils.exceptions import PageParsingError

from .models import ScrapedCard

logger = get_logger(__name__)


def _text(value: Any) -> Optional[str]:
    """Strings and numbers as text; anything else (objects, lists) as None."""
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, (str, int, float)):
        return str(value)
    return None


def _image_url(value: Any) -> Optional[str]:
    """Image URL from a string, a list of images or an ImageObject/photo dict."""
    if isinstance(value, list):
        return _image_url(value[0]) if value else None
    if isinstance(value, dict):
        return _text(value.get('url') or value.get('contentUrl'))
    return _text(value)


class VintedCatalogParser:
    """Parser for extracting listing cards from Vinted catalogue HTML."""

    SELECTORS = {
        'containers': [
            '.feed-grid__item',
            '.item-card',
            '.ProductBox',
            '.catalog-item',
            '.ItemBox',
        ],
        'title': [
            '.web_ui__Text__text',
            '.item-title',
            'h3',
            '.title',
            '[data-testid="item-title"]',
            '.ProductBox__title',
            '.item-name',
        ],
        'price': [
            '.web_ui__Text__text--muted',
            '.price',
            '[data-testid="price"]',
            '.price-new',
            '.ProductBox__price',
            '.item-price',
            '.price-value',
        ],
        'image': [
            '.new-item-box__image img',
            'img',
            '.item-image',
            '.ProductBox__image img',
            '.item-photo img',
        ],
        'link': [
            '.new-item-box__overlay',
            'a',
            '.item-link',
            '.ProductBox__link',
        ],
    }

    EMBEDDED_PATTERNS = [
        r'window\.__INITIAL_STATE__\s*=\s*({.+?});',
        r'window\.__PRELOADED_STATE__\s*=\s*({.+?});',
        r'var\s+initialData\s*=\s*({.+?});',
    ]

    def parse_catalog_page(self, html: str, base_url: str = "https://www.vinted.com") -> list[ScrapedCard]:
        """Extract cards from a catalogue page.

        Args:
            html: Page HTML
            base_url: Base URL for constructing absolute links

        Returns:
            Cards with at least one extracted field (possibly empty)

        Raises:
            PageParsingError: If the page has no content at all
        """
        cards, _ = self.parse_with_stage(html, base_url)
        return cards

    def parse_with_stage(
        self, html: str, base_url: str = "https://www.vinted.com"
    ) -> tuple[list[ScrapedCard], bool]:
        """Like parse_catalog_page, also reporting whether structured data was used.

        Returns:
            (cards, used_alternate)
        """
        if not html or not html.strip():
            raise PageParsingError("Empty page content", url=base_url)

        soup = BeautifulSoup(html, 'lxml')

        containers = self._find_containers(soup)
        if containers:
            cards = self.extract_primary(containers, base_url)
            logger.debug(f"Primary extraction: {len(cards)} cards from {len(containers)} containers")
            return cards, False

        logger.info("No card containers matched, trying structured data")
        cards = self.extract_alternate(soup, html, base_url)
        logger.debug(f"Alternate extraction: {len(cards)} cards")
        return cards, True

    def _find_containers(self, soup: BeautifulSoup) -> list[Tag]:
        for selector in self.SELECTORS['containers']:
            found = soup.select(selector)
            if found:
                return found
        return []

    def extract_primary(self, containers: list[Tag], base_url: str) -> list[ScrapedCard]:
        """Selector-based extraction; cards missing every field are discarded."""
        cards = []
        for elem in containers:
            card = ScrapedCard(
                title=self._first_text(elem, self.SELECTORS['title']),
                price=self._first_text(elem, self.SELECTORS['price']),
                image=self._first_attr(elem, self.SELECTORS['image'], ('src', 'data-src')),
                url=self._absolute(self._first_attr(elem, self.SELECTORS['link'], ('href',)), base_url),
            )
            if card.is_empty():
                continue
            cards.append(card)
        return cards

    def extract_alternate(self, soup: BeautifulSoup, html: str, base_url: str) -> list[ScrapedCard]:
        """Structured-data extraction used when no containers were found."""
        cards = self._extract_from_json_ld(soup, base_url)
        if cards:
            return cards
        return self._extract_from_embedded_json(html, base_url)

    def _first_text(self, elem: Tag, selectors: list[str]) -> Optional[str]:
        """Try selectors in order and return the first non-empty text."""
        for selector in selectors:
            found = elem.select_one(selector)
            if found:
                text = found.get_text(strip=True)
                if text:
                    return text
        return None

    def _first_attr(self, elem: Tag, selectors: list[str], attrs: tuple[str, ...]) -> Optional[str]:
        """Try selectors in order and return the first non-empty attribute."""
        for selector in selectors:
            found = elem.select_one(selector)
            if found:
                for attr in attrs:
                    value = found.get(attr)
                    if value:
                        return value
        return None

    def _absolute(self, url: Any, base_url: str) -> Optional[str]:
        url = _text(url)
        if not url:
            return None
        return urljoin(base_url.rstrip('/') + '/', url)

    def _extract_from_json_ld(self, soup: BeautifulSoup, base_url: str) -> list[ScrapedCard]:
        """Extract cards from JSON-LD ItemList/Product blocks."""
        cards = []

        for script in soup.find_all('script', type='application/ld+json'):
            try:
                data = json.loads(script.string or "")
            except json.JSONDecodeError as e:
                logger.debug(f"Failed to parse JSON-LD: {e}")
                continue

            if not isinstance(data, dict):
                continue
            if data.get('@type') == 'ItemList':
                for element in data.get('itemListElement') or []:
                    if isinstance(element, dict):
                        element = element.get('item', element)
                    card = self._card_from_json_ld(element, base_url)
                    if card:
                        cards.append(card)
            elif data.get('@type') == 'Product':
                card = self._card_from_json_ld(data, base_url)
                if card:
                    cards.append(card)

        return cards

    def _card_from_json_ld(self, data: dict, base_url: str) -> Optional[ScrapedCard]:
        if not isinstance(data, dict):
            return None
        offers = data.get('offers') or {}
        if isinstance(offers, list):
            offers = offers[0] if offers else {}
        if not isinstance(offers, dict):
            offers = {}

        return self._build_card(
            title=data.get('name'),
            price=offers.get('price'),
            image=_image_url(data.get('image')),
            url=self._absolute(data.get('url'), base_url),
            currency=offers.get('priceCurrency'),
        )

    def _extract_from_embedded_json(self, html: str, base_url: str) -> list[ScrapedCard]:
        """Extract cards from embedded JavaScript state."""
        cards = []

        for pattern in self.EMBEDDED_PATTERNS:
            for match in re.finditer(pattern, html, re.DOTALL):
                try:
                    data = json.loads(match.group(1))
                except json.JSONDecodeError:
                    continue
                cards.extend(self._cards_from_nested_json(data, base_url))

        return cards

    def _cards_from_nested_json(self, data: dict, base_url: str, max_depth: int = 10) -> list[ScrapedCard]:
        """Recursively search for item arrays in nested JSON."""
        cards: list[ScrapedCard] = []
        if max_depth <= 0 or not isinstance(data, dict):
            return cards

        for key in ('items', 'products', 'results', 'catalogItems'):
            value = data.get(key)
            if not isinstance(value, list):
                continue
            for entry in value:
                if isinstance(entry, dict) and ('id' in entry or 'title' in entry):
                    card = self._card_from_state(entry, base_url)
                    if card:
                        cards.append(card)

        for value in data.values():
            if isinstance(value, dict):
                cards.extend(self._cards_from_nested_json(value, base_url, max_depth - 1))

        return cards

    def _card_from_state(self, entry: dict, base_url: str) -> Optional[ScrapedCard]:
        price = entry.get('price')
        currency = None
        if isinstance(price, dict):
            currency = price.get('currency_code') or price.get('currency')
            price = price.get('amount')

        return self._build_card(
            title=entry.get('title') or entry.get('name'),
            price=price,
            image=_image_url(entry.get('photo')) or _image_url(entry.get('image')),
            url=self._absolute(entry.get('url') or entry.get('path'), base_url),
            currency=currency,
        )

    def _build_card(self, **fields) -> Optional[ScrapedCard]:
        """Card from structured-data values; empty or unusable cards give None."""
        try:
            card = ScrapedCard(**{key: _text(value) for key, value in fields.items()})
        except ValidationError as e:
            logger.debug(f"Skipping unusable structured card: {e}")
            return None
        return None if card.is_empty() else card

