from __future__ import annotations

import io
import json

from shopdetect.export import csv_escape, platforms_cell, results_to_csv, write_jsonl
from shopdetect.models import DetectionResult
from shopdetect.platforms import Platform


def test_csv_escape_rules() -> None:
    assert csv_escape("http://a.com/x,y") == '"http://a.com/x,y"'
    assert csv_escape('say "hi"') == '"say ""hi"""'
    assert csv_escape("line\nbreak") == '"line\nbreak"'
    assert csv_escape("cr\rhere") == '"cr\rhere"'
    assert csv_escape("plain") == "plain"
    assert csv_escape("") == ""
    assert csv_escape(None) == ""


def test_platforms_cell_sorted_and_empty_for_errors() -> None:
    ok = DetectionResult.success("a", {Platform.WOOCOMMERCE, Platform.GOMAG, Platform.MAGENTO})
    assert platforms_cell(ok) == "GOMAG|MAGENTO|WOOCOMMERCE"
    assert platforms_cell(DetectionResult.success("b", set())) == ""
    assert platforms_cell(DetectionResult.failure("c", 500, "HTTP 500")) == ""


def test_results_to_csv() -> None:
    results = [
        DetectionResult.success("shop.example", {Platform.SHOPIFY, Platform.GOMAG}),
        DetectionResult.failure("http://a.com/x,y", -1, "ConnectTimeout: timed out"),
        DetectionResult.success("plain.example", set()),
    ]
    assert results_to_csv(results) == (
        "website,platforms\n"
        "shop.example,GOMAG|SHOPIFY\n"
        '"http://a.com/x,y",\n'
        "plain.example,\n"
    )


def test_results_to_csv_empty_has_header_only() -> None:
    assert results_to_csv([]) == "website,platforms\n"


def test_write_jsonl_to_file_object_and_path(tmp_path) -> None:
    results = [
        DetectionResult.success("a.com", {Platform.OPENCART}, {Platform.OPENCART: ["OpenCart route/catalog markers detected"]}),
        DetectionResult.failure("", -1, "Empty URL"),
    ]
    buf = io.StringIO()
    assert write_jsonl(buf, results) == 2
    lines = [json.loads(x) for x in buf.getvalue().splitlines()]
    assert lines[0]["platforms"] == ["OPENCART"]
    assert lines[1] == {"url": "", "ok": False, "statusCode": -1, "error": "Empty URL", "platforms": [], "evidence": {}}

    p = tmp_path / "out.jsonl"
    write_jsonl(p, results)
    assert p.read_text(encoding="utf-8") == buf.getvalue()
