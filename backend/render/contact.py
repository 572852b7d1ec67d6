"""Deep link for the "I want it" action: a chat-app URL with a prefilled message."""
from __future__ import annotations

from urllib.parse import quote

from backend.config import CatalogConfig

# Characters a browser's encodeURIComponent leaves alone.
_URI_COMPONENT_SAFE = "-_.!~*'()"


def build_contact_message(title: str, display_price: str, config: CatalogConfig) -> str:
    return (
        f"Hi! I'm interested in this product from the {config.shop_name} catalog:\n\n"
        f"📱 *{title}*\n"
        f"💰 Price: {config.currency_symbol} {display_price}\n\n"
        "I'd like more information about availability, payment options and delivery."
    )


def build_contact_url(title: str, display_price: str, config: CatalogConfig) -> str:
    message = build_contact_message(title, display_price, config)
    base = config.contact_base_url.rstrip("/")
    return f"{base}/{config.contact_phone}?text={quote(message, safe=_URI_COMPONENT_SAFE)}"
