from .contact import build_contact_url
from .sanitize import format_price, sanitize_product
from .views import GalleryState, build_card, build_cards, build_detail

__all__ = [
    "GalleryState",
    "build_card",
    "build_cards",
    "build_contact_url",
    "build_detail",
    "format_price",
    "sanitize_product",
]
