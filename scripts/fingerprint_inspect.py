from __future__ import annotations

import argparse
import json
import os

from dotenv import load_dotenv

from shopdetect import PageFetcher, classify_html, config_from_env, normalize_url
from shopdetect.fingerprinting import explain_html


def main() -> int:
    load_dotenv(override=False)
    ap = argparse.ArgumentParser(description="Inspect platform markers for one or more URLs/domains (one fetch each).")
    ap.add_argument("urls", nargs="+", help="One or more URLs/domains")
    args = ap.parse_args()

    with PageFetcher(config_from_env(os.environ)) as fetcher:
        for u in args.urls:
            target = normalize_url(u)
            print("\nURL:", u)
            if not target:
                print("  error: Empty URL")
                continue
            outcome = fetcher.fetch(target)
            print("  fetched:", target)
            print("  status:", outcome.status_code)
            if not outcome.ok:
                print("  error:", outcome.message)
                continue
            found = classify_html(outcome.body)
            markers = explain_html(outcome.body)
            print("  platforms:", sorted(p.name for p in found.platforms))
            print("  evidence_json:", json.dumps({p.name: list(v) for p, v in found.evidence.items()}, ensure_ascii=False))
            print("  markers_json:", json.dumps({p.name: v for p, v in sorted(markers.items(), key=lambda kv: kv[0].name)}, ensure_ascii=False))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
