from __future__ import annotations

import argparse
import json
import re
from collections import Counter
from pathlib import Path
from typing import List

from shopdetect.models import DetectionResult
from shopdetect.platforms import Platform


def _load_results(path: Path) -> List[DetectionResult]:
    out: List[DetectionResult] = []
    with path.open("r", encoding="utf-8", errors="replace") as f:
        for line in f:
            s = line.strip()
            if not s:
                continue
            out.append(DetectionResult.from_record(json.loads(s)))
    return out


def _error_category(error: str) -> str:
    # "HTTP 404" stays whole; "ConnectTimeout: ..." -> "ConnectTimeout".
    e = (error or "").strip()
    if e.startswith("HTTP "):
        return e
    return e.split(":", 1)[0].strip() or "unknown"


def main() -> int:
    ap = argparse.ArgumentParser(description="Summarize a platform detection run (JSONL written by detect_list.py).")
    ap.add_argument("--jsonl", required=True, help="Path to outputs JSONL (e.g. outputs/<run>.jsonl)")
    ap.add_argument("--show-rows", type=int, default=8, help="How many ok rows without a platform to list (default 8)")
    args = ap.parse_args()

    results = _load_results(Path(args.jsonl))
    n = len(results)
    if n == 0:
        print("No rows found.")
        return 2

    ok = [r for r in results if r.ok]
    failed = [r for r in results if not r.ok]
    print(f"rows: {n}")
    print(f"ok: {len(ok)}  errors: {len(failed)}")

    print("\nDistributions:")
    platform_counts = Counter(name for r in ok for name in r.sorted_platform_names())
    print(f"- platforms: {dict(sorted(platform_counts.items()))}")
    print(f"- platforms per ok row: {dict(sorted(Counter(len(r.platforms) for r in ok).items()))}")
    print(f"- statusCode: {dict(sorted(Counter(r.status_code for r in results).items()))}")

    multi = Counter("|".join(r.sorted_platform_names()) for r in ok if len(r.platforms) > 1)
    if multi:
        print(f"- multi-platform combos: {dict(multi.most_common(10))}")

    magento_scores = []
    for r in ok:
        for reason in r.evidence.get(Platform.MAGENTO, ()):
            m = re.search(r"score=(\d+)", reason)
            if m:
                magento_scores.append(int(m.group(1)))
    if magento_scores:
        print(f"- magento score: {dict(sorted(Counter(magento_scores).items()))}")

    if failed:
        print("\nTop error categories:")
        for cat, k in Counter(_error_category(r.error or "") for r in failed).most_common(10):
            print(f"- {cat}: {k}")

    show_n = max(0, int(args.show_rows))
    undetected = [r for r in ok if not r.platforms]
    if undetected:
        print(f"\nOk rows with no platform ({len(undetected)}, showing up to {show_n}):")
        for r in undetected[:show_n]:
            print(f"- {r.url} (HTTP {r.status_code})")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
