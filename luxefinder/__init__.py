"""LuxeFinder - secondhand luxury listing search.

Aggregates eBay Browse API results across regional marketplaces and
Vinted listings (hosted API or browser fallback) behind one search UI.
"""

__version__ = "0.1.0"
__author__ = "LuxeFinder Team"
