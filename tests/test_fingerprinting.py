from __future__ import annotations

import pytest

from shopdetect.fingerprinting import MARKER_RULES, classify_html, explain_html, magento_score
from shopdetect.platforms import Platform


def test_no_markers_is_empty_not_error() -> None:
    res = classify_html("<html><body>Hello world</body></html>")
    assert res.platforms == frozenset()
    assert dict(res.evidence) == {}


def test_empty_and_none_html() -> None:
    assert classify_html("").platforms == frozenset()
    assert classify_html(None).platforms == frozenset()  # type: ignore[arg-type]


def test_shopify_cdn_marker() -> None:
    res = classify_html('<script src="https://cdn.shopify.com/s/files/theme.js"></script>')
    assert res.platforms == {Platform.SHOPIFY}
    assert res.evidence[Platform.SHOPIFY] == ("Shopify technical markers detected",)


def test_matching_is_case_insensitive() -> None:
    res = classify_html("<script>window.Shopify = {}; var PRESTASHOP = 1;</script><div>GoMag</div>")
    assert res.platforms == {Platform.SHOPIFY, Platform.PRESTASHOP, Platform.GOMAG}


def test_each_rule_fires_once_even_with_many_markers() -> None:
    html = "cdn.shopify.com myshopify.com shopify-section shopifyanalytics window.shopify"
    res = classify_html(html)
    assert res.evidence[Platform.SHOPIFY] == ("Shopify technical markers detected",)


@pytest.mark.parametrize("rule", MARKER_RULES, ids=lambda r: r.platform.name)
def test_every_marker_triggers_its_platform(rule) -> None:
    for marker in rule.markers:
        res = classify_html(f"<html>{marker.upper()}</html>")
        assert rule.platform in res.platforms, marker
        assert res.evidence[rule.platform] == (rule.evidence,)


def test_merchantpro_footer_text() -> None:
    res = classify_html("<footer>Powered by Merchant Pro</footer>")
    assert res.platforms == {Platform.MERCHANTPRO}
    assert res.evidence[Platform.MERCHANTPRO] == ("MerchantPro footer text detected",)


def test_gomag_evidence_text() -> None:
    assert classify_html("gomag.ro").evidence[Platform.GOMAG] == ("Found substring: gomag",)


def test_multiple_platforms_can_be_detected_together() -> None:
    html = "wp-content/plugins/woocommerce index.php?route=product/product /modules/ps_shoppingcart"
    res = classify_html(html)
    assert res.platforms == {Platform.WOOCOMMERCE, Platform.OPENCART, Platform.PRESTASHOP}
    assert set(res.evidence) == set(res.platforms)


def test_magento_single_marker_is_not_enough() -> None:
    res = classify_html('<div data-mage-init=\'{"x": {}}\'></div>')
    assert Platform.MAGENTO not in res.platforms
    assert magento_score('<div data-mage-init="">'.lower()) == (True, 1)


def test_magento_two_markers_detected_with_score() -> None:
    res = classify_html('<div data-mage-init="{}"></div><input type="hidden" name="form_key" value="abc">')
    assert res.platforms == {Platform.MAGENTO}
    (reason,) = res.evidence[Platform.MAGENTO]
    assert "score=2" in reason
    assert reason == "Magento detected (strict markers: score=2)"


def test_magento_form_key_pair_counts_once() -> None:
    # name="form_key" also contains form_key; still a single point.
    assert magento_score('name="form_key"') == (True, 1)
    assert Platform.MAGENTO not in classify_html('<input name="form_key">').platforms


def test_magento_weak_requirejs_marker_is_not_scored() -> None:
    html = '<script src="/static/version123/requirejs/require.js"></script>'
    exclusive, score = magento_score(html)
    assert exclusive is True
    assert score == 1
    assert Platform.MAGENTO not in classify_html(html).platforms


def test_magento_full_score() -> None:
    html = " ".join(
        [
            "data-mage-init",
            "text/x-magento-init",
            "/static/version1/",
            "/static/frontend/Magento/luma/",
            "/static/adminhtml/",
            "Magento_Catalog",
            "mage-cache-sessid",
            'name="form_key"',
        ]
    )
    res = classify_html(html)
    assert res.evidence[Platform.MAGENTO] == ("Magento detected (strict markers: score=8)",)


def test_evidence_mapping_is_read_only() -> None:
    res = classify_html("gomag")
    with pytest.raises(TypeError):
        res.evidence[Platform.SHOPIFY] = ("x",)  # type: ignore[index]


def test_explain_html_lists_markers_without_changing_detection() -> None:
    html = "data-mage-init requirejs/require cdn.shopify.com shopify-section"
    markers = explain_html(html)
    assert markers[Platform.SHOPIFY] == ["cdn.shopify.com", "shopify-section"]
    assert markers[Platform.MAGENTO] == ["data-mage-init", "requirejs/require (weak, not scored)"]
    assert Platform.MAGENTO not in classify_html(html).platforms
