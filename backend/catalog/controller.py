"""
Catalog controller: owns the page state and drives loading, search and detail views.

Loading runs Idle -> Loading -> Loaded | Error:
  1. Probe the API with a one-row read. A failed probe skips straight to the fallback.
  2. Fetch public products. An empty batch, or one where nothing survives the
     display checks, counts as a failure.
  3. On any failure, read the bundled fallback document. If that works the data
     is adopted and a short-lived banner names the API failure; if not, the
     state ends in Error with both reasons.
  4. Adopted products are sorted by `order` (stable) and become the base for search.

Each load takes a new generation number. A load that finishes after a newer one
has started is discarded, so a forced reload can never be overwritten by a
slower request it superseded.
"""
from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Protocol

from backend.baserow.transform import is_displayable
from backend.config import CatalogConfig
from backend.errors import (
    CatalogError,
    ConnectivityError,
    DataFetchError,
    FallbackValidationError,
)
from backend.render.views import (
    GalleryState,
    banner_view,
    build_cards,
    build_detail,
    contact_url_for,
    no_results_view,
    results_info_text,
)
from models import (
    ContactLink,
    DataSource,
    LoadStatus,
    PageView,
    Product,
    ProductDetailView,
)

from .debounce import SearchDebouncer
from .fallback import load_fallback_products
from .search import filter_products, normalize_term

logger = logging.getLogger(__name__)


class ElementId(str, Enum):
    """Fixed identifiers the page markup provides for each panel and control."""

    LOADING = "loading"
    ERROR = "error"
    PRODUCTS_GRID = "productsGrid"
    MODAL = "productModal"
    SEARCH_INPUT = "searchInput"
    CLEAR_SEARCH = "clearSearch"
    SEARCH_RESULTS_INFO = "searchResultsInfo"


class ProductSource(Protocol):
    async def test_connection(self) -> bool: ...
    async def fetch_products(self, filters: dict[str, Any] | None = None) -> list[Product]: ...


@dataclass
class FallbackBanner:
    reason: str
    expires_at: float

    def is_active(self, now: float) -> bool:
        return now < self.expires_at


@dataclass
class CatalogState:
    status: LoadStatus = LoadStatus.IDLE
    source: DataSource | None = None
    products: list[Product] = field(default_factory=list)
    filtered_products: list[Product] = field(default_factory=list)
    search_term: str = ""
    error_message: str | None = None
    banner: FallbackBanner | None = None
    focus_target: str | None = None
    generation: int = 0


def sort_by_order(products: list[Product]) -> list[Product]:
    """Ascending by `order`; Python's sort is stable, so ties keep their input order."""
    return sorted(products, key=lambda product: product.order)


class CatalogController:
    def __init__(
        self,
        client: ProductSource,
        config: CatalogConfig | None = None,
        *,
        fallback_loader: Callable[[], list[Product]] | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.client = client
        self.config = config or CatalogConfig.from_env()
        self.state = CatalogState()
        self._fallback_loader = fallback_loader or self._load_fallback_file
        self._clock = clock
        self._debouncer = SearchDebouncer(self.config.search_debounce_seconds, self.handle_search)
        self._detail_product: Product | None = None
        self._gallery: GalleryState | None = None

    @property
    def is_loading(self) -> bool:
        return self.state.status is LoadStatus.LOADING

    # -- Loading --

    async def load_products(self, *, force: bool = False) -> CatalogState:
        """
        Run one load. While a load is in flight further calls are ignored unless
        `force` is set, in which case the in-flight load is superseded.
        """
        if self.is_loading and not force:
            logger.info("Load already in progress; ignoring request")
            return self.state

        self.state.generation += 1
        generation = self.state.generation
        self._show_loading()

        try:
            await self._run_load(generation)
        finally:
            if self.is_loading and generation == self.state.generation:
                self._show_error("Unexpected error while loading products")
        return self.state

    async def _run_load(self, generation: int) -> None:
        try:
            products = await self._load_from_api()
        except CatalogError as exc:
            if self._is_stale(generation):
                return
            logger.error("Failed to load products from the API: %s", exc)
            self._load_from_fallback(str(exc))
            return
        except Exception as exc:
            if self._is_stale(generation):
                return
            logger.exception("Unexpected error while loading products from the API")
            self._load_from_fallback(str(exc) or type(exc).__name__)
            return

        if self._is_stale(generation):
            return
        self._adopt(products, DataSource.API)
        logger.info("Loaded %d products from the API", len(products))

    async def _load_from_api(self) -> list[Product]:
        if not await self.client.test_connection():
            raise ConnectivityError(
                "Could not connect to the catalog API. Check your connection or configuration."
            )

        products = await self.client.fetch_products()
        if not isinstance(products, list) or not products:
            raise DataFetchError("No public products found in the API")

        valid = [product for product in products if is_displayable(product)]
        if not valid:
            raise DataFetchError("No valid products found")
        return valid

    def _load_from_fallback(self, api_error: str) -> None:
        logger.warning("Trying local fallback data: %s", api_error)
        try:
            products = self._fallback_loader()
        except FallbackValidationError as exc:
            logger.error("Fallback data failed: %s", exc)
            self._show_error(f"Catalog API unavailable: {api_error}. Local data file also failed: {exc}")
            return
        except Exception as exc:
            logger.exception("Unexpected error while loading fallback data")
            self._show_error(f"Catalog API unavailable: {api_error}. Local data file also failed: {exc}")
            return

        self._adopt(products, DataSource.FALLBACK)
        self.state.banner = FallbackBanner(
            reason=api_error,
            expires_at=self._clock() + self.config.banner_ttl_seconds,
        )

    def _load_fallback_file(self) -> list[Product]:
        return load_fallback_products(self.config.fallback_path, public_field=self.config.public_field)

    def _is_stale(self, generation: int) -> bool:
        if generation != self.state.generation:
            logger.info("Discarding result of superseded load %d", generation)
            return True
        return False

    def _adopt(self, products: list[Product], source: DataSource) -> None:
        self.state.products = sort_by_order(products)
        self.state.filtered_products = filter_products(self.state.products, self.state.search_term)
        self.state.source = source
        self.state.status = LoadStatus.LOADED
        self.state.error_message = None
        self.state.banner = None

    def _show_loading(self) -> None:
        self.state.status = LoadStatus.LOADING
        self.state.error_message = None

    def _show_error(self, message: str) -> None:
        self.state.status = LoadStatus.ERROR
        self.state.error_message = message

    # -- Search --

    def handle_search(self, term: str) -> PageView:
        self.state.search_term = normalize_term(term)
        self.state.filtered_products = filter_products(self.state.products, self.state.search_term)
        self.state.focus_target = None
        return self.page_view()

    def schedule_search(self, term: str) -> None:
        """Debounced search for keystrokes; only the last term of a burst is evaluated."""
        self._debouncer.trigger(term)

    def clear_search(self) -> PageView:
        self._debouncer.cancel()
        self.state.search_term = ""
        self.state.filtered_products = list(self.state.products)
        self.state.focus_target = ElementId.SEARCH_INPUT.value
        return self.page_view()

    # -- Detail / contact --

    def find_product(self, product_id: int) -> Product | None:
        return next((p for p in self.state.products if p.id == product_id), None)

    def product_detail(self, product_id: int) -> ProductDetailView | None:
        """Detail view with the first image selected; the modal state is left alone."""
        product = self.find_product(product_id)
        if product is None:
            return None
        return build_detail(product, self.config)

    def open_detail(self, product_id: int) -> ProductDetailView | None:
        product = self.find_product(product_id)
        if product is None:
            logger.error("Product not found: %s", product_id)
            return None
        self._detail_product = product
        self._gallery = GalleryState(images=list(product.gallery), title=product.title)
        return build_detail(product, self.config, self._gallery)

    @property
    def detail_product_id(self) -> int | None:
        return self._detail_product.id if self._detail_product is not None else None

    def select_image(self, index: int) -> ProductDetailView | None:
        if self._detail_product is None or self._gallery is None:
            return None
        self._gallery.select(index)
        return build_detail(self._detail_product, self.config, self._gallery)

    def close_detail(self) -> None:
        self._detail_product = None
        self._gallery = None

    def contact_link(self, product_id: int) -> ContactLink | None:
        product = self.find_product(product_id)
        if product is None:
            return None
        return ContactLink(product_id=product.id, url=contact_url_for(product, self.config))

    # -- Banner --

    def active_banner(self) -> FallbackBanner | None:
        banner = self.state.banner
        if banner is not None and not banner.is_active(self._clock()):
            self.state.banner = None
            return None
        return banner

    def dismiss_banner(self) -> None:
        self.state.banner = None

    # -- View --

    def page_view(self, search_term: str | None = None) -> PageView:
        """
        Current page state. Passing `search_term` filters the cards for that term
        without touching the stored search, so read-only callers can preview it.
        """
        state = self.state
        if search_term is None:
            term = state.search_term
            filtered = state.filtered_products
        else:
            term = normalize_term(search_term)
            filtered = filter_products(state.products, term)

        loaded = state.status is LoadStatus.LOADED
        results_info = results_info_text(len(filtered), len(state.products), term) if loaded else None
        banner = self.active_banner()
        return PageView(
            status=state.status,
            source=state.source,
            panels={
                ElementId.LOADING.value: state.status is LoadStatus.LOADING,
                ElementId.ERROR.value: state.status is LoadStatus.ERROR,
                ElementId.PRODUCTS_GRID.value: loaded,
                ElementId.SEARCH_RESULTS_INFO.value: results_info is not None,
                ElementId.MODAL.value: self._detail_product is not None,
            },
            error_message=state.error_message,
            cards=build_cards(filtered, self.config) if loaded else [],
            search_term=term,
            results_info=results_info,
            show_clear_search=bool(term),
            no_results=no_results_view() if loaded and term and not filtered else None,
            banner=banner_view(banner.reason) if banner is not None else None,
            focus_target=state.focus_target,
        )
