"""
Snapshot script: fetches the public products from the catalog API and writes
them to the fallback document (data/products.json by default), so the bundled
fallback stays close to the live catalog.

Usage:
    CATALOG_API_TOKEN=... uv run python seed.py
"""

import asyncio
import json
import logging
from pathlib import Path

from backend.baserow import CatalogApiClient
from backend.catalog import sort_by_order
from backend.config import CatalogConfig
from models import Product

logger = logging.getLogger(__name__)


def snapshot_document(products: list[Product]) -> dict:
    """Fallback-document shape: {"products": [...]} with the API's field names."""
    records = []
    for product in sort_by_order(products):
        record = product.model_dump(by_alias=True, exclude_none=True)
        record.pop("rating", None)
        records.append(record)
    return {"products": records}


def _write_snapshot(path: Path, products: list[Product]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(snapshot_document(products), indent=2, ensure_ascii=False))
    logger.info("Wrote %d products to %s", len(products), path)


async def seed_fallback(config: CatalogConfig | None = None) -> list[Product]:
    config = config or CatalogConfig.from_env()
    client = CatalogApiClient(config)

    if not await client.test_connection():
        logger.error("Catalog API is not reachable at %s; snapshot not written", config.api_url)
        return []

    products = await client.fetch_products()
    if not products:
        logger.error("Catalog API returned no public products; snapshot not written")
        return []

    _write_snapshot(config.fallback_path, products)
    return products


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(message)s")
    asyncio.run(seed_fallback())
