"""
Tests for the catalog controller.

The remote client is an AsyncMock and the fallback loader a plain callable,
so the load sequence, ordering, search and banner lifetime are checked
without any network or file access.
"""

import asyncio
import tempfile
import unittest
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

from backend.catalog import CatalogController, ElementId
from backend.config import CatalogConfig
from backend.errors import DataFetchError, FallbackValidationError
from models import DataSource, LoadStatus, Product


def _make_product(
    product_id: int,
    title: str,
    *,
    order: float = 0,
    price: float = 20.0,
    promotional_price: float | None = None,
    gallery: list[str] | None = None,
    public: bool = True,
) -> Product:
    return Product(
        id=product_id,
        title=title,
        description=f"{title} description",
        gallery=gallery or [],
        price=price,
        promotional_price=promotional_price,
        public=public,
        order=order,
    )


def _mugs() -> list[Product]:
    return [
        _make_product(1, "Red Mug", order=2),
        _make_product(2, "Blue Mug", order=1),
    ]


class _Clock:
    def __init__(self) -> None:
        self.now = 100.0

    def __call__(self) -> float:
        return self.now


def _client(*, connected: bool = True, products: list[Product] | None = None) -> MagicMock:
    client = MagicMock()
    client.test_connection = AsyncMock(return_value=connected)
    client.fetch_products = AsyncMock(return_value=products if products is not None else _mugs())
    return client


def _controller(client: MagicMock, fallback=None, clock=None, **config) -> CatalogController:
    fallback = fallback or MagicMock(return_value=[_make_product(9, "Fallback Mug")])
    return CatalogController(
        client,
        CatalogConfig(contact_phone="5511999999999", **config),
        fallback_loader=fallback,
        clock=clock or _Clock(),
    )


class TestLoadProducts(unittest.IsolatedAsyncioTestCase):
    async def test_primary_load_sorts_by_order(self) -> None:
        controller = _controller(_client())

        state = await controller.load_products()

        self.assertIs(state.status, LoadStatus.LOADED)
        self.assertIs(state.source, DataSource.API)
        self.assertEqual([p.title for p in state.products], ["Blue Mug", "Red Mug"])
        self.assertEqual(state.filtered_products, state.products)
        view = controller.page_view()
        self.assertEqual([c.title for c in view.cards], ["Blue Mug", "Red Mug"])
        self.assertTrue(view.panels[ElementId.PRODUCTS_GRID.value])
        self.assertFalse(view.panels[ElementId.LOADING.value])
        self.assertIsNone(view.banner)

    async def test_sort_is_stable_for_equal_order(self) -> None:
        products = [
            _make_product(1, "A", order=1),
            _make_product(2, "B", order=0),
            _make_product(3, "C", order=1),
            _make_product(4, "D", order=0),
        ]
        controller = _controller(_client(products=products))

        state = await controller.load_products()

        self.assertEqual([p.id for p in state.products], [2, 4, 1, 3])

    async def test_failed_connectivity_uses_fallback_without_fetching(self) -> None:
        client = _client(connected=False)
        fallback = MagicMock(return_value=[_make_product(9, "Fallback Mug")])
        controller = _controller(client, fallback=fallback)

        state = await controller.load_products()

        client.fetch_products.assert_not_awaited()
        fallback.assert_called_once()
        self.assertIs(state.status, LoadStatus.LOADED)
        self.assertIs(state.source, DataSource.FALLBACK)
        banner = controller.page_view().banner
        assert banner is not None
        self.assertIn("Could not connect", banner.reason)

    async def test_fetch_error_uses_fallback(self) -> None:
        client = _client()
        client.fetch_products.side_effect = DataFetchError("HTTP 500", status_code=500)
        controller = _controller(client)

        state = await controller.load_products()

        self.assertIs(state.source, DataSource.FALLBACK)
        self.assertEqual([p.title for p in state.products], ["Fallback Mug"])

    async def test_empty_or_undisplayable_batch_uses_fallback(self) -> None:
        for products in ([], [_make_product(1, "Hidden", public=False)]):
            with self.subTest(products=products):
                controller = _controller(_client(products=products))
                state = await controller.load_products()
                self.assertIs(state.source, DataSource.FALLBACK)

    async def test_fallback_failure_ends_in_error_with_both_reasons(self) -> None:
        client = _client()
        client.fetch_products.side_effect = DataFetchError("Failed to load products: HTTP 502")
        fallback = MagicMock(
            side_effect=FallbackValidationError("Local data file is invalid: 1 error(s)")
        )
        controller = _controller(client, fallback=fallback)

        state = await controller.load_products()

        self.assertIs(state.status, LoadStatus.ERROR)
        assert state.error_message is not None
        self.assertIn("HTTP 502", state.error_message)
        self.assertIn("Local data file is invalid", state.error_message)
        view = controller.page_view()
        self.assertTrue(view.panels[ElementId.ERROR.value])
        self.assertFalse(view.panels[ElementId.PRODUCTS_GRID.value])
        self.assertEqual(view.cards, [])

    async def test_concurrent_load_is_ignored(self) -> None:
        gate = asyncio.Event()
        client = _client()

        async def slow_fetch(filters=None):
            await gate.wait()
            return _mugs()

        client.fetch_products.side_effect = slow_fetch
        controller = _controller(client)

        first = asyncio.create_task(controller.load_products())
        await asyncio.sleep(0)
        self.assertTrue(controller.is_loading)
        await controller.load_products()
        gate.set()
        await first

        self.assertEqual(client.test_connection.await_count, 1)
        self.assertIs(controller.state.status, LoadStatus.LOADED)

    async def test_forced_reload_discards_superseded_load(self) -> None:
        gate = asyncio.Event()
        client = _client()
        calls = 0

        async def fetch(filters=None):
            nonlocal calls
            calls += 1
            if calls == 1:
                await gate.wait()
                return [_make_product(1, "Stale Mug")]
            return [_make_product(2, "Fresh Mug")]

        client.fetch_products.side_effect = fetch
        controller = _controller(client)

        stale = asyncio.create_task(controller.load_products())
        await asyncio.sleep(0)
        await controller.load_products(force=True)
        gate.set()
        await stale

        self.assertEqual([p.title for p in controller.state.products], ["Fresh Mug"])
        self.assertEqual(controller.state.generation, 2)

    async def test_unexpected_client_error_uses_fallback(self) -> None:
        client = _client()
        client.fetch_products.side_effect = RuntimeError("boom")
        fallback = MagicMock(return_value=[_make_product(9, "Fallback Mug")])
        controller = _controller(client, fallback=fallback)

        with self.assertLogs("backend.catalog.controller", level="ERROR"):
            state = await controller.load_products()

        fallback.assert_called_once()
        self.assertIs(state.status, LoadStatus.LOADED)
        self.assertIs(state.source, DataSource.FALLBACK)
        banner = controller.page_view().banner
        assert banner is not None
        self.assertEqual(banner.reason, "boom")

    async def test_unexpected_fallback_error_ends_in_error(self) -> None:
        client = _client(connected=False)
        controller = _controller(client, fallback=MagicMock(side_effect=ValueError("bad bytes")))

        with self.assertLogs("backend.catalog.controller", level="ERROR"):
            state = await controller.load_products()

        self.assertIs(state.status, LoadStatus.ERROR)
        assert state.error_message is not None
        self.assertIn("Could not connect", state.error_message)
        self.assertIn("bad bytes", state.error_message)

    async def test_undecodable_fallback_file_ends_in_error_and_allows_retry(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "products.json"
            path.write_bytes(b'{"products": [\xff\xfe]}')
            client = _client(connected=False)
            controller = CatalogController(
                client,
                CatalogConfig(contact_phone="5511999999999", fallback_path=path),
                clock=_Clock(),
            )

            state = await controller.load_products()
            self.assertIs(state.status, LoadStatus.ERROR)
            assert state.error_message is not None
            self.assertIn("Local data file also failed", state.error_message)

            await controller.load_products()
            self.assertEqual(client.test_connection.await_count, 2)
            self.assertFalse(controller.is_loading)


class TestFallbackBanner(unittest.IsolatedAsyncioTestCase):
    async def test_banner_expires_after_ttl(self) -> None:
        clock = _Clock()
        controller = _controller(_client(connected=False), clock=clock)
        await controller.load_products()

        clock.now += 9.9
        self.assertIsNotNone(controller.page_view().banner)
        clock.now += 0.2
        self.assertIsNone(controller.page_view().banner)
        self.assertIsNone(controller.state.banner)

    async def test_banner_can_be_dismissed(self) -> None:
        controller = _controller(_client(connected=False))
        await controller.load_products()

        controller.dismiss_banner()

        self.assertIsNone(controller.page_view().banner)
        self.assertIs(controller.state.status, LoadStatus.LOADED)

    async def test_successful_reload_clears_banner(self) -> None:
        client = _client(connected=False)
        controller = _controller(client)
        await controller.load_products()

        client.test_connection.return_value = True
        await controller.load_products()

        self.assertIsNone(controller.state.banner)
        self.assertIs(controller.state.source, DataSource.API)


class TestSearch(unittest.IsolatedAsyncioTestCase):
    async def asyncSetUp(self) -> None:
        self.controller = _controller(_client())
        await self.controller.load_products()

    def test_empty_search_restores_full_set_in_order(self) -> None:
        self.controller.handle_search("red")
        view = self.controller.handle_search("")

        self.assertEqual(self.controller.state.filtered_products, self.controller.state.products)
        self.assertEqual([c.title for c in view.cards], ["Blue Mug", "Red Mug"])
        self.assertIsNone(view.results_info)
        self.assertFalse(view.show_clear_search)

    def test_mug_matches_both(self) -> None:
        view = self.controller.handle_search("mug")

        self.assertEqual(len(view.cards), 2)
        self.assertEqual(view.results_info, "2 results found out of 2 products")
        self.assertTrue(view.panels[ElementId.SEARCH_RESULTS_INFO.value])
        self.assertIsNone(view.no_results)

    def test_single_result_wording(self) -> None:
        view = self.controller.handle_search("  BLUE ")
        self.assertEqual(view.search_term, "blue")
        self.assertEqual(view.results_info, "1 result found out of 2 products")

    def test_green_shows_no_results(self) -> None:
        view = self.controller.handle_search("green")

        self.assertEqual(self.controller.state.filtered_products, [])
        self.assertEqual(view.cards, [])
        self.assertIsNotNone(view.no_results)
        self.assertTrue(view.show_clear_search)
        self.assertEqual(len(self.controller.state.products), 2)

    def test_clear_search_restores_and_focuses_input(self) -> None:
        self.controller.handle_search("green")
        view = self.controller.clear_search()

        self.assertEqual(view.search_term, "")
        self.assertEqual(len(view.cards), 2)
        self.assertEqual(view.focus_target, ElementId.SEARCH_INPUT.value)

    def test_page_view_with_term_leaves_stored_search_alone(self) -> None:
        self.controller.handle_search("red")

        view = self.controller.page_view("blue")

        self.assertEqual([c.title for c in view.cards], ["Blue Mug"])
        self.assertEqual(view.search_term, "blue")
        self.assertEqual(self.controller.state.search_term, "red")
        self.assertEqual([p.title for p in self.controller.state.filtered_products], ["Red Mug"])

    async def test_reload_keeps_active_search(self) -> None:
        self.controller.handle_search("red")
        await self.controller.load_products()
        self.assertEqual([p.title for p in self.controller.state.filtered_products], ["Red Mug"])

    async def test_scheduled_search_runs_once_for_last_term(self) -> None:
        controller = _controller(_client(), search_debounce_seconds=0.01)
        await controller.load_products()

        controller.schedule_search("r")
        controller.schedule_search("re")
        controller.schedule_search("blue")
        self.assertEqual(controller.state.search_term, "")
        await asyncio.sleep(0.2)

        self.assertEqual(controller.state.search_term, "blue")
        self.assertEqual([p.title for p in controller.state.filtered_products], ["Blue Mug"])


class TestDetailAndContact(unittest.IsolatedAsyncioTestCase):
    async def asyncSetUp(self) -> None:
        products = [
            _make_product(
                1,
                "Red <Mug>",
                price=30.0,
                promotional_price=24.5,
                gallery=["https://cdn.example.com/1a.jpg", "https://cdn.example.com/1b.jpg"],
            ),
            _make_product(2, "Blue Mug", price=1234.5),
        ]
        self.controller = _controller(_client(products=products))
        await self.controller.load_products()

    def test_open_detail_and_select_image(self) -> None:
        detail = self.controller.open_detail(1)

        assert detail is not None
        self.assertEqual(detail.title, "Red &lt;Mug&gt;")
        self.assertEqual(detail.main_image, "https://cdn.example.com/1a.jpg")
        self.assertTrue(self.controller.page_view().panels[ElementId.MODAL.value])

        detail = self.controller.select_image(1)
        assert detail is not None
        self.assertEqual(detail.main_image, "https://cdn.example.com/1b.jpg")
        self.assertEqual([t.active for t in detail.thumbnails], [False, True])

        self.controller.close_detail()
        self.assertFalse(self.controller.page_view().panels[ElementId.MODAL.value])
        self.assertIsNone(self.controller.select_image(0))

    def test_product_detail_does_not_open_modal(self) -> None:
        detail = self.controller.product_detail(1)

        assert detail is not None
        self.assertEqual(detail.main_image, "https://cdn.example.com/1a.jpg")
        self.assertIsNone(self.controller.detail_product_id)
        self.assertFalse(self.controller.page_view().panels[ElementId.MODAL.value])
        self.assertIsNone(self.controller.product_detail(404))

    def test_unknown_product_detail_is_none(self) -> None:
        with self.assertLogs("backend.catalog.controller", level="ERROR"):
            self.assertIsNone(self.controller.open_detail(404))

    def test_contact_link_uses_promotional_price(self) -> None:
        link = self.controller.contact_link(1)

        assert link is not None
        self.assertTrue(link.url.startswith("https://wa.me/5511999999999?text="))
        self.assertIn("24%2C50", link.url)
        self.assertIn("Red%20%3CMug%3E", link.url)

    def test_contact_link_unknown_product(self) -> None:
        self.assertIsNone(self.controller.contact_link(404))


class TestPromotionalPricePreference(unittest.IsolatedAsyncioTestCase):
    async def test_original_price_when_promotional_not_preferred(self) -> None:
        products = [_make_product(1, "Mug", price=30.0, promotional_price=24.5)]
        controller = _controller(_client(products=products), prefer_promotional_price=False)
        await controller.load_products()

        link = controller.contact_link(1)

        assert link is not None
        self.assertIn("30%2C00", link.url)
        card = controller.page_view().cards[0]
        self.assertEqual(card.price.display, "30,00")
        self.assertEqual(card.price.promotional, "24,50")
