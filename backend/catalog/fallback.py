"""
Bundled fallback document.

Read only when the remote API is unreachable or returns nothing usable. The
document must be `{"products": [...]}` where each entry has an `id`, string
`title` and `description`, a `gallery` list and a non-negative numeric `price`.
Entries then go through the same row transform as API rows, so a record that
passes the shape check but cannot be displayed (zero price, `public: false`) is
still dropped.
"""
from __future__ import annotations

import json
import logging
from pathlib import Path

from pydantic import ValidationError

from backend.baserow.transform import transform_products
from backend.errors import FallbackValidationError
from models import FallbackDocument, Product

logger = logging.getLogger(__name__)


def validate_fallback_document(data: object) -> FallbackDocument:
    """Check the document shape; raise FallbackValidationError if it is wrong."""
    try:
        return FallbackDocument.model_validate(data)
    except ValidationError as exc:
        raise FallbackValidationError(f"Local data file is invalid: {exc.error_count()} error(s)") from exc


def load_fallback_document(path: Path) -> FallbackDocument:
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise FallbackValidationError(f"Local data file could not be read: {exc}") from exc

    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise FallbackValidationError(f"Local data file is not valid JSON: {exc}") from exc

    return validate_fallback_document(data)


def load_fallback_products(path: Path, *, public_field: str = "Public") -> list[Product]:
    """Load, shape-check and transform the fallback document. Records without a public flag count as public."""
    document = load_fallback_document(path)
    rows = [record.model_dump() for record in document.products]
    products = transform_products(rows, public_field=public_field, default_public=True)
    if not products:
        raise FallbackValidationError("Local data file has no displayable products")
    logger.info("Loaded %d products from %s", len(products), path)
    return products
