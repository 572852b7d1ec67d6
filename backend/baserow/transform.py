"""
Raw row -> Product mapping.

Rows arrive from the tabular-data API (or the fallback document) with loosely
typed fields: prices as "10,50" strings or numbers, gallery entries as plain
URLs or file objects with a `url` key, a capitalised `Public` flag. This module
coerces them into the Product shape and drops anything that fails the display
invariants. A bad row is logged and skipped; it never fails the batch.
"""
from __future__ import annotations

import logging
import math
import re
from typing import Any

from pydantic import ValidationError

from backend.errors import TransformError
from models import Product

logger = logging.getLogger(__name__)

# Leading numeric prefix, the way a lenient float parse reads "12.5 BRL" as 12.5.
_LEADING_NUMBER = re.compile(r"^\s*[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?")


def parse_price(value: object) -> float | None:
    """
    Coerce a price from string-or-number into a positive float.

    Zero, negative, non-finite and unparsable values are absent (None), never 0.
    The first comma is read as the decimal separator ("10,50" -> 10.5).
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        match = _LEADING_NUMBER.match(value.replace(",", ".", 1))
        if not match:
            return None
        number = float(match.group())
    else:
        return None

    if not math.isfinite(number) or number <= 0:
        return None
    return number


def parse_int(value: object) -> int | None:
    """Lenient integer read: "12", 12.9 and "12abc" all give 12; anything else None."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if math.isfinite(value) else None
    if isinstance(value, str):
        match = re.match(r"^\s*[+-]?\d+", value)
        return int(match.group()) if match else None
    return None


def parse_order(value: object) -> float:
    """Sort key; anything missing or unparsable sorts as 0."""
    if value is None or isinstance(value, bool):
        return 0.0
    if isinstance(value, (int, float)):
        return float(value) if math.isfinite(value) else 0.0
    if isinstance(value, str):
        match = _LEADING_NUMBER.match(value)
        if match:
            return float(match.group())
    return 0.0


def extract_gallery_url(entry: object) -> str | None:
    """A gallery entry is either a URL string or a file object carrying `url`."""
    if isinstance(entry, dict):
        url = entry.get("url")
        return url if isinstance(url, str) and url else None
    if isinstance(entry, str) and entry:
        return entry
    return None


def build_gallery(raw_gallery: object) -> list[str]:
    if not isinstance(raw_gallery, list):
        return []
    urls: list[str] = []
    for entry in raw_gallery:
        url = extract_gallery_url(entry)
        if url is None:
            logger.debug("Skipping gallery entry without a URL: %r", entry)
            continue
        urls.append(url)
    return urls


def _clean_text(value: object) -> str:
    if not value:
        return ""
    return str(value).strip()


def _read_public_flag(raw: dict[str, Any], public_field: str, default_public: bool) -> bool:
    for key in (public_field, public_field.lower()):
        if key in raw:
            return bool(raw[key])
    return default_public


def map_record(
    raw: dict[str, Any],
    *,
    public_field: str = "Public",
    default_public: bool = False,
) -> Product:
    """
    Map one raw row to a Product, raising TransformError if it breaks an invariant.

    Invariants: positive integer id, non-empty title and description, positive
    price, public flag set.
    """
    if not isinstance(raw, dict):
        raise TransformError(f"Expected a mapping, got {type(raw).__name__}")

    subtitle = _clean_text(raw.get("subtitle")) or None
    payload = {
        "id": parse_int(raw.get("id")) or 0,
        "title": _clean_text(raw.get("title")),
        "subtitle": subtitle,
        "description": _clean_text(raw.get("description")),
        "gallery": build_gallery(raw.get("gallery")),
        "price": parse_price(raw.get("price")),
        "promotional_price": parse_price(raw.get("promotionalPrice")),
        "public": _read_public_flag(raw, public_field, default_public),
        "rating": parse_int(raw.get("Rating", raw.get("rating"))) or None,
        "order": parse_order(raw.get("order")),
    }

    try:
        product = Product.model_validate(payload)
    except ValidationError as exc:
        raise TransformError(f"Invalid product row {raw.get('id')!r}: {exc}") from exc

    if not product.public:
        raise TransformError(f"Product row {product.id} is not public")
    return product


def transform_product(
    raw: dict[str, Any],
    *,
    public_field: str = "Public",
    default_public: bool = False,
) -> Product | None:
    """Map one raw row to a Product, or None (logged) if it cannot be displayed."""
    try:
        return map_record(raw, public_field=public_field, default_public=default_public)
    except TransformError as exc:
        logger.warning("Dropping product row: %s", exc)
        return None


def transform_products(
    rows: list[Any],
    *,
    public_field: str = "Public",
    default_public: bool = False,
) -> list[Product]:
    """Transform a batch, keeping input order and skipping rows that fail."""
    products: list[Product] = []
    for row in rows:
        product = transform_product(row, public_field=public_field, default_public=default_public)
        if product is not None:
            products.append(product)
    return products


def is_displayable(product: Product | None) -> bool:
    return (
        product is not None
        and product.public is True
        and bool(product.title)
        and bool(product.description)
        and product.price > 0
    )
