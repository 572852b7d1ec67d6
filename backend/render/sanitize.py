"""
Display-safe copies of products.

Text fields are HTML-escaped (quotes included, since they end up in attribute
values too); id and prices are re-coerced so a malformed value renders as 0
instead of leaking through.
"""
from __future__ import annotations

import html
from dataclasses import dataclass, field

from backend.baserow.transform import parse_int, parse_price
from models import Product


@dataclass(frozen=True)
class SafeProduct:
    id: int
    title: str
    subtitle: str | None
    description: str
    gallery: list[str] = field(default_factory=list)
    price: float = 0.0
    promotional_price: float | None = None


def escape_html(text: object) -> str:
    return html.escape(str(text if text is not None else ""), quote=True)


def sanitize_product(product: Product) -> SafeProduct:
    return SafeProduct(
        id=parse_int(product.id) or 0,
        title=escape_html(product.title),
        subtitle=escape_html(product.subtitle) if product.subtitle else None,
        description=escape_html(product.description),
        gallery=[str(url) for url in product.gallery],
        price=parse_price(product.price) or 0.0,
        promotional_price=parse_price(product.promotional_price),
    )


def format_price(value: float) -> str:
    """Two decimals with pt-BR separators: 1234.5 -> "1.234,50"."""
    formatted = f"{value:,.2f}"
    return formatted.translate(str.maketrans({",": ".", ".": ","}))
