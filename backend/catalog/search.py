"""Client-side text search over the loaded catalog."""
from __future__ import annotations

from collections.abc import Sequence

from models import Product


def normalize_term(term: str | None) -> str:
    return (term or "").strip().lower()


def matches_term(product: Product, term: str) -> bool:
    """Case-insensitive substring match on title, subtitle or description. `term` is already normalized."""
    if term in product.title.lower():
        return True
    if product.subtitle and term in product.subtitle.lower():
        return True
    return term in product.description.lower()


def filter_products(products: Sequence[Product], term: str | None) -> list[Product]:
    """
    Re-derive the filtered working set from the full set.

    Blank terms give a copy of the full set in the same order. The input is
    never mutated.
    """
    normalized = normalize_term(term)
    if not normalized:
        return list(products)
    return [product for product in products if matches_term(product, normalized)]
