from .client import CatalogApiClient
from .transform import is_displayable, parse_price, transform_product, transform_products

__all__ = [
    "CatalogApiClient",
    "is_displayable",
    "parse_price",
    "transform_product",
    "transform_products",
]
