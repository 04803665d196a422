"""Command-line interface for the eBay aggregator.

Usage:
    python -m luxefinder.cli --search "dior bag" --country EBAY_US --pages 2 --output out.xlsx
"""

import argparse
import asyncio
import sys
from pathlib import Path
from typing import Optional

from tqdm import tqdm

from luxefinder.core import LuxuryBagsAggregator, count_pages, paginate
from luxefinder.domain.entities.listing import ListingItem
from luxefinder.domain.entities.search import MAX_ITEMS_PER_PAGE, SearchRequest, SortKey
from luxefinder.ui.export import export_filename, write_workbook
from luxefinder.utils import get_config, get_logger, log_execution_time, set_log_level
from luxefinder.utils.exceptions import AppException

logger = get_logger(__name__)


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    """Parse command-line arguments.

    Returns:
        Parsed arguments
    """
    parser = argparse.ArgumentParser(
        description="Search luxury bags across eBay marketplaces and export to Excel",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Default brand list on the configured marketplace
  python -m luxefinder.cli

  # Free-text search on eBay US, first two pages
  python -m luxefinder.cli --search "dior bag" --country EBAY_US --pages 2 --output out.xlsx

  # Selected brands on every marketplace, most expensive first
  python -m luxefinder.cli --brands "Prada bag,Gucci bag" --country ALL --sort price-desc
        """
    )

    parser.add_argument(
        '--search',
        type=str,
        default=None,
        help='Free-text search (replaces the brand list)'
    )

    parser.add_argument(
        '--brands',
        type=str,
        default=None,
        help='Comma-separated brand searches (default: built-in brand list)'
    )

    parser.add_argument(
        '--country',
        type=str,
        default=None,
        help='eBay marketplace id (e.g. EBAY_US) or ALL (default: from config)'
    )

    parser.add_argument('--min-price', type=float, default=None, help='Inclusive lower price bound')
    parser.add_argument('--max-price', type=float, default=None, help='Inclusive upper price bound')

    parser.add_argument(
        '--sort',
        type=str,
        choices=[key.value for key in SortKey],
        default=SortKey.PRICE_ASC.value,
        help='Result ordering (default: price-asc)'
    )

    parser.add_argument(
        '--pages',
        type=int,
        default=1,
        help='Number of pages to fetch (default: 1)'
    )

    parser.add_argument(
        '--items-per-page',
        type=int,
        default=None,
        help='Page size (default: from config)'
    )

    parser.add_argument(
        '--output',
        type=Path,
        default=None,
        help='Output .xlsx path (default: timestamped file in the current directory)'
    )

    parser.add_argument(
        '--config',
        type=Path,
        default=None,
        help='Path to configuration file (default: auto-detect)'
    )

    parser.add_argument(
        '--log-level',
        type=str,
        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
        default=None,
        help='Override log level'
    )

    args = parser.parse_args(argv)
    if args.pages < 1:
        parser.error("--pages must be at least 1")
    if args.items_per_page is not None and not 1 <= args.items_per_page <= MAX_ITEMS_PER_PAGE:
        parser.error(f"--items-per-page must be between 1 and {MAX_ITEMS_PER_PAGE}")
    return args


async def collect_pages(
    aggregator: LuxuryBagsAggregator, base: SearchRequest, pages: int
) -> list[ListingItem]:
    """Run the aggregation once and take pages 1..``pages`` of the result.

    Stops early after the last available page.
    """
    ordered = await aggregator.collect(base)
    last_page = min(pages, count_pages(len(ordered), base.items_per_page))

    items: list[ListingItem] = []
    for page in tqdm(range(1, last_page + 1), desc="Collecting pages"):
        items.extend(paginate(ordered, page, base.items_per_page))
    if last_page < pages:
        logger.info(f"Reached last page ({last_page})")
    return items


async def main(argv: Optional[list[str]] = None) -> int:
    """Main CLI entry point.

    Returns:
        Exit code (0 for success, 1 for error)
    """
    args = parse_args(argv)

    try:
        config = get_config(args.config)

        set_log_level(logger, args.log_level or config.log_level)

        request = SearchRequest(
            query=args.search,
            brands=[b.strip() for b in (args.brands or "").split(",") if b.strip()],
            min_price=args.min_price,
            max_price=args.max_price,
            country=args.country,
            items_per_page=args.items_per_page or config.ui.items_per_page,
            sort_by=SortKey.parse(args.sort),
        )

        logger.info("=" * 60)
        logger.info("LuxeFinder - eBay aggregation")
        logger.info("=" * 60)
        logger.info(f"Terms: {', '.join(request.search_terms)}")
        logger.info(f"Marketplace: {request.country or config.ebay.default_country}")
        logger.info(f"Pages: {args.pages} x {request.items_per_page}")
        logger.info("=" * 60)

        aggregator = LuxuryBagsAggregator(config.ebay)
        with log_execution_time(logger, "entire aggregation"):
            items = await collect_pages(aggregator, request, args.pages)

        output = write_workbook(items, args.output or Path(export_filename()))

        print("\n" + "=" * 60)
        print("SEARCH SUMMARY")
        print("=" * 60)
        print(f"Items exported: {len(items)}")
        print(f"Output Path: {output}")
        print("=" * 60)

        if items:
            print("\nFirst 5 items:")
            for i, item in enumerate(items[:5], 1):
                print(f"  {i}. {item.title} - {item.price.value} {item.price.currency}")
                print(f"     URL: {item.item_web_url}")

        print("\n✓ Export completed successfully!")
        return 0

    except KeyboardInterrupt:
        logger.warning("Search interrupted by user")
        print("\n✗ Search cancelled by user")
        return 1

    except ValueError as e:
        logger.error(f"Invalid arguments: {e}")
        print(f"\n✗ Invalid arguments: {e}")
        return 1

    except AppException as e:
        logger.error(f"Search failed: {e}", exc_info=True)
        print(f"\n✗ Search failed: {e.message}")
        return 1


def run() -> None:
    sys.exit(asyncio.run(main()))


if __name__ == '__main__':
    run()
