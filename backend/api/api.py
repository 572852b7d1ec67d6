"""
Catalog API.

Serves the catalog page as view models: the page state, product cards, detail
views and contact links. The initial load runs in the app lifespan. GET routes
only read state; actions that change the page (search, detail modal, gallery,
reload) are POST routes.
"""
from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Request

from backend.baserow import CatalogApiClient
from backend.catalog import CatalogController
from backend.config import CatalogConfig
from models import ContactLink, PageView, ProductCardView, ProductDetailView


def _controller(request: Request) -> CatalogController:
    return request.app.state.controller


def create_app(controller: CatalogController | None = None) -> FastAPI:
    if controller is None:
        config = CatalogConfig.from_env()
        controller = CatalogController(CatalogApiClient(config), config)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        await app.state.controller.load_products()
        yield

    app = FastAPI(title="Product Catalog API", lifespan=lifespan)
    app.state.controller = controller

    @app.get("/health")
    def health(request: Request) -> dict:
        state = _controller(request).state
        return {
            "status": state.status.value,
            "source": state.source.value if state.source else None,
            "products": len(state.products),
        }

    @app.get("/catalog", response_model=PageView)
    def catalog(request: Request, q: str | None = None) -> PageView:
        return _controller(request).page_view(q)

    @app.get("/products", response_model=list[ProductCardView])
    def list_products(request: Request, q: str | None = None) -> list[ProductCardView]:
        return _controller(request).page_view(q).cards

    @app.get("/products/{product_id}", response_model=ProductDetailView)
    def get_product(request: Request, product_id: int) -> ProductDetailView:
        detail = _controller(request).product_detail(product_id)
        if detail is None:
            raise HTTPException(status_code=404, detail=f"Product '{product_id}' not found")
        return detail

    @app.get("/products/{product_id}/contact", response_model=ContactLink)
    def contact(request: Request, product_id: int) -> ContactLink:
        link = _controller(request).contact_link(product_id)
        if link is None:
            raise HTTPException(status_code=404, detail=f"Product '{product_id}' not found")
        return link

    @app.post("/products/{product_id}/detail", response_model=ProductDetailView)
    def open_detail(request: Request, product_id: int) -> ProductDetailView:
        detail = _controller(request).open_detail(product_id)
        if detail is None:
            raise HTTPException(status_code=404, detail=f"Product '{product_id}' not found")
        return detail

    @app.post("/products/{product_id}/gallery/{index}", response_model=ProductDetailView)
    def select_image(request: Request, product_id: int, index: int) -> ProductDetailView:
        ctrl = _controller(request)
        if ctrl.detail_product_id != product_id:
            ctrl.open_detail(product_id)
        detail = ctrl.select_image(index) if ctrl.detail_product_id == product_id else None
        if detail is None:
            raise HTTPException(status_code=404, detail=f"Product '{product_id}' not found")
        return detail

    @app.post("/catalog/detail/close", response_model=PageView)
    def close_detail(request: Request) -> PageView:
        ctrl = _controller(request)
        ctrl.close_detail()
        return ctrl.page_view()

    @app.post("/catalog/reload", response_model=PageView)
    async def reload(request: Request) -> PageView:
        ctrl = _controller(request)
        await ctrl.load_products(force=True)
        return ctrl.page_view()

    @app.post("/catalog/search", response_model=PageView)
    def search(request: Request, q: str = "") -> PageView:
        return _controller(request).handle_search(q)

    @app.post("/catalog/search/clear", response_model=PageView)
    def clear_search(request: Request) -> PageView:
        return _controller(request).clear_search()

    @app.post("/catalog/banner/dismiss", response_model=PageView)
    def dismiss_banner(request: Request) -> PageView:
        ctrl = _controller(request)
        ctrl.dismiss_banner()
        return ctrl.page_view()

    return app


app = create_app()
