"""
Product -> view model mapping.

Every function here is a pure function of its inputs. Products are sanitized
before any field reaches a view, so callers can drop the text into markup
without further escaping. Gallery URLs are passed through as plain strings.
"""
from __future__ import annotations

from dataclasses import dataclass, field

from backend.config import CatalogConfig
from models import (
    BannerView,
    NoResultsView,
    PriceView,
    Product,
    ProductCardView,
    ProductDetailView,
    ThumbnailView,
)

from .contact import build_contact_url
from .sanitize import SafeProduct, format_price, sanitize_product

CARD_PLACEHOLDER_IMAGE = "https://via.placeholder.com/300x250?text=No+Image"
CARD_ERROR_IMAGE = "https://via.placeholder.com/300x250?text=Failed+to+load"
DETAIL_PLACEHOLDER_IMAGE = "https://via.placeholder.com/500x500?text=No+Image"
DETAIL_ERROR_IMAGE = "https://via.placeholder.com/500x500?text=Failed+to+load"


def display_price(product: Product | SafeProduct, config: CatalogConfig) -> str:
    """Price shown in the contact message."""
    price = product.price or 0.0
    if config.prefer_promotional_price and product.promotional_price:
        price = product.promotional_price
    return format_price(price)


def build_price_view(safe: SafeProduct, config: CatalogConfig) -> PriceView:
    original = format_price(safe.price)
    promotional = format_price(safe.promotional_price) if safe.promotional_price else None
    return PriceView(
        original=original,
        promotional=promotional,
        display=display_price(safe, config),
        currency=config.currency_symbol,
    )


def contact_url_for(product: Product, config: CatalogConfig) -> str:
    # The raw title goes into the URL; percent-encoding makes it inert.
    return build_contact_url(product.title, display_price(product, config), config)


def build_card(product: Product, config: CatalogConfig) -> ProductCardView:
    safe = sanitize_product(product)
    gallery_size = len(safe.gallery)
    return ProductCardView(
        id=safe.id,
        title=safe.title,
        subtitle=safe.subtitle,
        description=safe.description,
        main_image=safe.gallery[0] if safe.gallery else CARD_PLACEHOLDER_IMAGE,
        error_image=CARD_ERROR_IMAGE,
        image_alt=safe.title,
        gallery_badge=f"{gallery_size} photos" if gallery_size > 1 else None,
        price=build_price_view(safe, config),
        contact_url=contact_url_for(product, config),
        detail_id=safe.id,
    )


def build_cards(products: list[Product], config: CatalogConfig) -> list[ProductCardView]:
    return [build_card(product, config) for product in products]


@dataclass
class GalleryState:
    """Main image + thumbnail strip for the detail view. Selecting is a local UI toggle."""

    images: list[str]
    title: str
    active_index: int = 0
    placeholder: str = field(default=DETAIL_PLACEHOLDER_IMAGE)

    @property
    def main_image(self) -> str:
        if not self.images:
            return self.placeholder
        return self.images[self.active_index]

    def select(self, index: int) -> bool:
        """Swap the main image to thumbnail `index`. Out-of-range selections are ignored."""
        if not 0 <= index < len(self.images):
            return False
        self.active_index = index
        return True

    def thumbnails(self) -> list[ThumbnailView]:
        if len(self.images) <= 1:
            return []
        thumbs: list[ThumbnailView] = []
        for index, url in enumerate(self.images):
            alt = f"{self.title} - Main" if index == 0 else f"{self.title} - Image {index + 1}"
            thumbs.append(
                ThumbnailView(index=index, url=url, alt=alt, active=index == self.active_index)
            )
        return thumbs


def build_detail(
    product: Product,
    config: CatalogConfig,
    gallery: GalleryState | None = None,
) -> ProductDetailView:
    safe = sanitize_product(product)
    gallery = gallery or GalleryState(images=safe.gallery, title=safe.title)
    return ProductDetailView(
        id=safe.id,
        title=safe.title,
        subtitle=safe.subtitle,
        description=safe.description,
        main_image=gallery.main_image,
        error_image=DETAIL_ERROR_IMAGE,
        image_alt=safe.title,
        thumbnails=gallery.thumbnails(),
        price=build_price_view(safe, config),
        contact_url=contact_url_for(product, config),
    )


def results_info_text(filtered_count: int, total_count: int, search_term: str) -> str | None:
    """Results-count readout; hidden (None) when no search is active."""
    if not search_term:
        return None
    if filtered_count == 1:
        return f"1 result found out of {total_count} products"
    return f"{filtered_count} results found out of {total_count} products"


def no_results_view() -> NoResultsView:
    return NoResultsView(
        heading="No products found",
        message="Try different keywords or browse the whole catalog.",
        action_label="See all products",
    )


def banner_view(reason: str) -> BannerView:
    return BannerView(
        title="Offline mode",
        reason=reason,
        detail="Using local data for now.",
    )
