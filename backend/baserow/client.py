"""
Remote catalog client for the tabular-rows API.

This is the only place that talks HTTP to the product table. It asks for
human-readable field names, restricts reads to publicly flagged rows and hands
every row to the transform step. Failures surface as DataFetchError, except for
the connectivity probe, which only ever answers True or False.
"""
from __future__ import annotations

import logging
from typing import Any

import httpx

from backend.config import CatalogConfig
from backend.errors import DataFetchError
from models import Product

from .transform import transform_product, transform_products

logger = logging.getLogger(__name__)


class CatalogApiClient:
    def __init__(
        self,
        config: CatalogConfig | None = None,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.config = config or CatalogConfig.from_env()
        self._transport = transport

    @property
    def headers(self) -> dict[str, str]:
        return {
            "Authorization": f"{self.config.auth_scheme} {self.config.api_token}",
            "Content-Type": "application/json",
        }

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=self.config.request_timeout,
            headers=self.headers,
            transport=self._transport,
        )

    def _row_url(self, product_id: int | str) -> str:
        return f"{self.config.api_url.rstrip('/')}/{product_id}/"

    async def test_connection(self) -> bool:
        """Read a single row; True when the API answers with a success status."""
        params = {"user_field_names": "true", "size": "1"}
        try:
            async with self._client() as client:
                response = await client.get(self.config.api_url, params=params)
        except httpx.HTTPError as exc:
            logger.error("Connection test failed: %s", exc)
            return False
        return response.is_success

    async def fetch_products(self, filters: dict[str, Any] | None = None) -> list[Product]:
        """
        Fetch every public row and transform it into Products.

        Extra query parameters in `filters` are appended as-is; None values are skipped.
        Rows that fail validation are dropped; the rest keep API order.
        """
        params: list[tuple[str, str]] = [
            ("user_field_names", "true"),
            (f"filter__{self.config.public_field}__equal", "true"),
        ]
        for key, value in (filters or {}).items():
            if value is not None:
                params.append((key, str(value)))

        logger.info("Fetching products from %s", self.config.api_url)
        try:
            async with self._client() as client:
                response = await client.get(self.config.api_url, params=params)
        except httpx.HTTPError as exc:
            raise DataFetchError(f"Failed to load products: {exc}") from exc

        if not response.is_success:
            raise DataFetchError(
                f"Failed to load products: HTTP {response.status_code} - {response.reason_phrase}",
                status_code=response.status_code,
            )

        try:
            data = response.json()
        except ValueError as exc:
            raise DataFetchError(
                f"Failed to load products: response is not JSON ({exc})",
                status_code=response.status_code,
            ) from exc

        results = data.get("results") if isinstance(data, dict) else None
        if not isinstance(results, list):
            raise DataFetchError(
                "Failed to load products: response has no valid `results` list",
                status_code=response.status_code,
            )

        products = transform_products(results, public_field=self.config.public_field)
        logger.info("Loaded %d of %d product rows from the API", len(products), len(results))
        return products

    async def fetch_product_by_id(self, product_id: int) -> Product | None:
        """Fetch one row; None when it does not exist or is not public."""
        try:
            async with self._client() as client:
                response = await client.get(
                    self._row_url(product_id), params={"user_field_names": "true"}
                )
        except httpx.HTTPError as exc:
            raise DataFetchError(f"Failed to load product {product_id}: {exc}") from exc

        if response.status_code == 404:
            return None
        if not response.is_success:
            raise DataFetchError(
                f"Failed to load product {product_id}: "
                f"HTTP {response.status_code} - {response.reason_phrase}",
                status_code=response.status_code,
            )

        try:
            raw = response.json()
        except ValueError as exc:
            raise DataFetchError(
                f"Failed to load product {product_id}: response is not JSON ({exc})",
                status_code=response.status_code,
            ) from exc

        return transform_product(raw, public_field=self.config.public_field)

    async def search_products(self, term: str) -> list[Product]:
        """Server-side search through the API's `search` parameter."""
        if not term or not term.strip():
            return await self.fetch_products()
        return await self.fetch_products({"search": term.strip()})
