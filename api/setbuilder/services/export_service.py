"""Tabular export files for the downstream workflow."""

import csv
import html
import logging
from datetime import datetime
from decimal import Decimal
from pathlib import Path
from typing import Iterable, List, Optional, Sequence, Tuple

from setbuilder.models.set_job import SetJob
from setbuilder.services.component_repository import ComponentRecord
from setbuilder.services.pricing import (
    CHANNEL_PRICE_FIELDS,
    DEFAULT_CHANNEL_MARKUP,
    DEFAULT_TAX_RATE,
    SetPrice,
    compute_channel_prices,
    compute_set_price,
    format_set_price,
)
from setbuilder.services.property_reconciler import PropertyComponent, reconcile_properties

logger = logging.getLogger(__name__)

CSV_DELIMITER = ";"
DESCRIPTION_BLOCK_END = "\n<br><br>\n"

COMPONENTS_EXPORT_HEADER = [
    "SetJobID",
    "SetType",
    "SetItemID",
    "SetVariantID",
    "ComponentVariantID",
    "SortIndex",
    "RequestedBy",
    "RequestedAt",
]

FURTHER_DATA_EXPORT_HEADER = [
    "SetItemID",
    "SetVariantID",
    "SetType",
    "ImageUrls",
    "BeschreibungHTML",
    "BruttoMindestpreisSet",
    "RequestedByID",
    "PropertyIds",
    "PropertyValues",
] + list(CHANNEL_PRICE_FIELDS)


def timestamped_path(directory: str, prefix: str, now: Optional[datetime] = None) -> Path:
    """``<directory>/<prefix>_YYYY-mm-dd_HHMMSS.csv``"""
    now = now or datetime.now()
    return Path(directory) / f"{prefix}_{now:%Y-%m-%d_%H%M%S}.csv"


def write_csv(path: Path, header: Sequence[str], rows: Iterable[Sequence[str]]) -> Path:
    """Write a semicolon-delimited UTF-8 CSV, creating the directory if needed."""
    path.parent.mkdir(parents=True, exist_ok=True)
    count = 0
    with open(path, "w", newline="", encoding="utf-8") as handle:
        writer = csv.writer(handle, delimiter=CSV_DELIMITER, quotechar='"')
        writer.writerow(header)
        for row in rows:
            writer.writerow(row)
            count += 1
    logger.info(f"Wrote {count} rows to {path}")
    return path


class CsvExportWriter:
    """
    Row-at-a-time CSV export.

    The file (and its directory) is created on the first row; every row is
    flushed before ``write_row`` returns, so callers can commit right after.
    """

    def __init__(self, path: Path, header: Sequence[str]):
        self.path = path
        self.header = header
        self.rows_written = 0
        self._handle = None
        self._writer = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    def _open(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self._handle = open(self.path, "w", newline="", encoding="utf-8")
        self._writer = csv.writer(self._handle, delimiter=CSV_DELIMITER, quotechar='"')
        self._writer.writerow(self.header)

    def write_row(self, row: Sequence[str]) -> None:
        if self._handle is None:
            self._open()
        self._writer.writerow(row)
        self._handle.flush()
        self.rows_written += 1

    def close(self) -> None:
        if self._handle is not None:
            self._handle.close()
            self._handle = None
            logger.info(f"Wrote {self.rows_written} rows to {self.path}")


def format_requested_at(value: datetime) -> str:
    return value.strftime("%d.%m.%Y %H:%M")


def _text(value) -> str:
    return "" if value is None else str(value)


def component_rows(job: SetJob) -> List[List[str]]:
    """One export row per component, in sort order."""
    return [
        [
            str(job.id),
            job.set_type,
            _text(job.new_item_id),
            _text(job.new_variant_id),
            str(item.variant_id),
            str(item.sort_index),
            str(job.requested_by),
            format_requested_at(job.created_at),
        ]
        for item in job.items
    ]


def merge_image_urls(components: List[ComponentRecord]) -> str:
    """All component image URLs, trimmed, comma-joined in component order."""
    urls = []
    for component in components:
        for url in (component.image_urls or "").split(","):
            url = url.strip()
            if url:
                urls.append(url)
    return ",".join(urls)


def merge_descriptions(components: List[ComponentRecord]) -> str:
    """HTML-decoded descriptions, each non-empty block closed by a break."""
    blocks = []
    for component in components:
        description = html.unescape(component.description_html or "")
        if description:
            blocks.append(description + DESCRIPTION_BLOCK_END)
    return "".join(blocks)


def further_data_row(
    job: SetJob,
    components: List[ComponentRecord],
    ignored_property_ids: Iterable = (),
    tax_rate: Decimal = DEFAULT_TAX_RATE,
    markup: Decimal = DEFAULT_CHANNEL_MARKUP,
) -> Tuple[List[str], SetPrice]:
    """
    Build the enriched set row and the price it was computed with.

    Returns:
        Tuple of (row in ``FURTHER_DATA_EXPORT_HEADER`` order, set price)
    """
    price = compute_set_price(components, tax_rate=tax_rate)
    channel_prices = compute_channel_prices(components, markup=markup)
    properties = reconcile_properties(
        [
            PropertyComponent(
                item_properties=c.item_property_ids,
                variation_properties=c.variation_property_ids,
            )
            for c in components
        ],
        ignored_ids=ignored_property_ids,
    )

    row = [
        _text(job.new_item_id),
        _text(job.new_variant_id),
        job.set_type,
        merge_image_urls(components),
        merge_descriptions(components),
        format_set_price(price),
        str(job.requested_by),
        properties.joined_ids(),
        properties.joined_values(),
    ] + [channel_prices[column] for column in CHANNEL_PRICE_FIELDS]
    return row, price
