"""
Paths for the bundled catalog data.

Single source of truth for:
- DATA_DIR: directory holding static catalog data
- FALLBACK_PRODUCTS_PATH: the fallback document used when the remote API is unusable
"""

from pathlib import Path

DATA_DIR: Path = Path(__file__).resolve().parent.parent / "data"
FALLBACK_PRODUCTS_PATH: Path = DATA_DIR / "products.json"
