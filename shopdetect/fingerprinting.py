from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, FrozenSet, List, Mapping, Tuple

from .platforms import Platform


@dataclass(frozen=True)
class MarkerRule:
    platform: Platform
    markers: Tuple[str, ...]
    evidence: str


@dataclass(frozen=True)
class Classification:
    platforms: FrozenSet[Platform] = frozenset()
    evidence: Mapping[Platform, Tuple[str, ...]] = field(default_factory=lambda: MappingProxyType({}))


# Any-of rules: one hit per platform, evidence text is fixed per rule.
MARKER_RULES: Tuple[MarkerRule, ...] = (
    MarkerRule(Platform.GOMAG, ("gomag",), "Found substring: gomag"),
    MarkerRule(
        Platform.MERCHANTPRO,
        ("merchantpro", "merchant pro", "powered by merchant", "made with merchant"),
        "MerchantPro footer text detected",
    ),
    MarkerRule(
        Platform.SHOPIFY,
        (
            "cdn.shopify.com",
            "myshopify.com",
            "shopify-checkout",
            "shopify-pay",
            "shopify-features",
            "shopify.buy",
            "shopify.theme",
            "shopify.routes",
            "window.shopify",
            "shopifyanalytics",
            "shopifycdn",
            "shopify-section",
        ),
        "Shopify technical markers detected",
    ),
    MarkerRule(
        Platform.WOOCOMMERCE,
        (
            "wp-content/plugins/woocommerce",
            "wp-content/uploads/woocommerce",
            "woocommerce-no-js",
            "wc-ajax",
            "woocommerce_params",
            "wc_add_to_cart_params",
            "woocommerce-cart",
            "woocommerce-checkout",
            "woocommerce-product-gallery",
        ),
        "WooCommerce technical markers detected",
    ),
    MarkerRule(
        Platform.OPENCART,
        (
            "index.php?route=",
            "route=common/home",
            "route=product/product",
            "route=checkout/cart",
            "catalog/view/theme/",
            "catalog/view/javascript/",
        ),
        "OpenCart route/catalog markers detected",
    ),
    MarkerRule(
        Platform.PRESTASHOP,
        (
            "data-prestashop",
            "var prestashop =",
            "prestashop.emit",
            "prestashop-static",
            "/modules/ps_",  # core ps_* modules
            'id="prestashop"',
        ),
        "PrestaShop specific markers detected",
    ),
)

# Magento: each strong marker is worth one point; the form_key pair counts once.
MAGENTO_SCORED_MARKERS: Tuple[Tuple[str, ...], ...] = (
    ("data-mage-init",),
    ("text/x-magento-init",),
    ("/static/version",),
    ("/static/frontend/",),
    ("/static/adminhtml/",),
    ("magento_",),  # Magento_Catalog, magento_theme, ...
    ("mage-cache-sessid",),
    ('name="form_key"', "form_key"),
)
MAGENTO_EXCLUSIVE_MARKERS: Tuple[str, ...] = tuple(m for group in MAGENTO_SCORED_MARKERS for m in group)
# Loaded by plenty of non-Magento sites; evaluated but worth 0 points.
MAGENTO_WEAK_MARKER = "requirejs/require"
MAGENTO_WEAK_WEIGHT = 0
MAGENTO_MIN_SCORE = 2


def magento_score(html_lower: str) -> Tuple[bool, int]:
    """Return (exclusive_marker_seen, score) for lower-cased HTML."""
    exclusive = any(m in html_lower for m in MAGENTO_EXCLUSIVE_MARKERS)
    score = sum(1 for group in MAGENTO_SCORED_MARKERS if any(m in html_lower for m in group))
    if MAGENTO_WEAK_MARKER in html_lower:
        score += MAGENTO_WEAK_WEIGHT
    return exclusive, score


def classify_html(html: str) -> Classification:
    """
    Detect e-commerce platforms from raw page text.

    Case-insensitive substring matching over the markup as served (inline scripts
    included, nothing executed). Every detected platform gets exactly one evidence
    string. No match is a valid outcome and returns an empty Classification.
    """
    lower = (html or "").lower()
    found: Dict[Platform, List[str]] = {}

    def hit(p: Platform, why: str) -> None:
        found.setdefault(p, []).append(why)

    for rule in MARKER_RULES:
        if any(m in lower for m in rule.markers):
            hit(rule.platform, rule.evidence)

    exclusive, score = magento_score(lower)
    if exclusive and score >= MAGENTO_MIN_SCORE:
        hit(Platform.MAGENTO, f"Magento detected (strict markers: score={score})")

    return Classification(
        platforms=frozenset(found),
        evidence=MappingProxyType({p: tuple(found[p]) for p in sorted(found, key=lambda p: p.name)}),
    )


def explain_html(html: str) -> Dict[Platform, List[str]]:
    """Literal markers present per platform, whether or not the platform was declared."""
    lower = (html or "").lower()
    out: Dict[Platform, List[str]] = {}
    for rule in MARKER_RULES:
        hits = [m for m in rule.markers if m in lower]
        if hits:
            out[rule.platform] = hits
    magento_hits = [m for m in MAGENTO_EXCLUSIVE_MARKERS if m in lower]
    if MAGENTO_WEAK_MARKER in lower:
        magento_hits.append(f"{MAGENTO_WEAK_MARKER} (weak, not scored)")
    if magento_hits:
        out[Platform.MAGENTO] = magento_hits
    return out
