"""Excel export of the currently displayed listings."""

from datetime import datetime, timezone
from io import BytesIO
from pathlib import Path
from typing import Optional, Union

import openpyxl
from openpyxl.styles import Font
from openpyxl.utils import get_column_letter

from luxefinder.domain.entities.listing import ListingItem, ListingSource
from luxefinder.utils import get_logger, log_exception
from luxefinder.utils.exceptions import ExportError

logger = get_logger(__name__)

EXPORT_COLUMNS = [
    "No.",
    "Title",
    "Price",
    "Currency",
    "Condition",
    "Seller",
    "Item URL",
    "Image URL",
    "Item ID",
    "Source",
]
COLUMN_WIDTHS = [8, 40, 12, 10, 15, 20, 50, 50, 20, 10]
SHEET_NAME = "Luxury Bags"
SOURCE_SHEETS = {ListingSource.EBAY: "eBay", ListingSource.VINTED: "Vinted"}


def item_to_row(index: int, item: ListingItem) -> list:
    """One spreadsheet row; ``index`` is 1-based."""
    value = item.price_value
    return [
        index,
        item.title,
        round(value, 2) if value is not None else (item.price.display or "N/A"),
        item.price.currency,
        item.condition or "Unknown",
        item.seller or "Unknown",
        item.item_web_url or "",
        item.image_url or "",
        item.item_id,
        SOURCE_SHEETS.get(item.source, item.source.value),
    ]


def items_to_rows(items: list[ListingItem]) -> list[list]:
    return [item_to_row(index, item) for index, item in enumerate(items, start=1)]


def _write_sheet(sheet, items: list[ListingItem]) -> None:
    sheet.append(EXPORT_COLUMNS)
    for cell in sheet[1]:
        cell.font = Font(bold=True)

    for row in items_to_rows(items):
        sheet.append(row)
        price_cell = sheet.cell(row=sheet.max_row, column=3)
        if isinstance(price_cell.value, float):
            price_cell.number_format = "0.00"

    for column, width in enumerate(COLUMN_WIDTHS, start=1):
        sheet.column_dimensions[get_column_letter(column)].width = width


def build_workbook(sheets: dict[str, list[ListingItem]]) -> openpyxl.Workbook:
    """Create a workbook with one sheet per entry, in order.

    Raises:
        ExportError: If there is nothing to write
    """
    if not sheets:
        raise ExportError("No sheets to export")

    wb = openpyxl.Workbook()
    wb.remove(wb.active)
    for name, items in sheets.items():
        _write_sheet(wb.create_sheet(title=name), items)
    return wb


def merge_for_export(primary: list[ListingItem], extra: list[ListingItem]) -> dict[str, list[ListingItem]]:
    """Sheets for the combined export.

    Items from ``extra`` whose identifier already appears in ``primary`` are
    skipped; placeholders are never exported.
    """
    seen = {item.item_id for item in primary}
    sheets: dict[str, list[ListingItem]] = {}
    for item in list(primary) + [item for item in extra if item.item_id not in seen]:
        if item.is_placeholder:
            continue
        sheets.setdefault(SOURCE_SHEETS.get(item.source, item.source.value), []).append(item)
    return sheets or {SHEET_NAME: []}


def workbook_bytes(items: list[ListingItem], extra: Optional[list[ListingItem]] = None) -> bytes:
    """Serialize the export to ``.xlsx`` bytes for a download button.

    With ``extra`` the items are split into one sheet per source.
    """
    try:
        sheets = merge_for_export(items, extra) if extra is not None else {SHEET_NAME: items}
        buffer = BytesIO()
        build_workbook(sheets).save(buffer)
    except ExportError:
        raise
    except Exception as e:
        log_exception(logger, "build Excel export", e)
        raise ExportError("Failed to export data. Please try again.") from e

    logger.info(f"Exported {sum(len(v) for v in sheets.values())} items to {len(sheets)} sheet(s)")
    return buffer.getvalue()


def write_workbook(items: list[ListingItem], path: Union[str, Path]) -> Path:
    """Write the single-sheet export to ``path``."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(workbook_bytes(items))
    return path


def export_filename(now: Optional[datetime] = None, prefix: str = "luxury-bags") -> str:
    """``luxury-bags-2024-05-01T12-30-00.xlsx`` style name (UTC)."""
    now = now or datetime.now(timezone.utc)
    return f"{prefix}-{now.strftime('%Y-%m-%dT%H-%M-%S')}.xlsx"
