from __future__ import annotations

from enum import Enum


class Platform(Enum):
    GOMAG = "gomag"
    MERCHANTPRO = "merchantpro"
    SHOPIFY = "shopify"
    WOOCOMMERCE = "woocommerce"
    MAGENTO = "magento"
    OPENCART = "opencart"
    PRESTASHOP = "prestashop"


PLATFORM_NAMES = tuple(p.name for p in Platform)


def parse_platform(name: str) -> Platform:
    """Case-insensitive lookup by canonical name (e.g. "shopify" -> Platform.SHOPIFY)."""
    key = (name or "").strip().upper()
    try:
        return Platform[key]
    except KeyError:
        raise ValueError(f"Unknown platform {name!r}. Expected one of: {', '.join(PLATFORM_NAMES)}") from None
