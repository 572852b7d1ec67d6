from .controller import CatalogController, CatalogState, ElementId, FallbackBanner, sort_by_order
from .debounce import SearchDebouncer
from .fallback import load_fallback_document, load_fallback_products, validate_fallback_document
from .search import filter_products, normalize_term

__all__ = [
    "CatalogController",
    "CatalogState",
    "ElementId",
    "FallbackBanner",
    "SearchDebouncer",
    "filter_products",
    "load_fallback_document",
    "load_fallback_products",
    "normalize_term",
    "sort_by_order",
    "validate_fallback_document",
]
