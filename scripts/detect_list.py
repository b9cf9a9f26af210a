from __future__ import annotations

import argparse
import csv
import logging
import os
import re
import sys
import time
from collections import Counter
from pathlib import Path
from typing import List

from dotenv import load_dotenv

from shopdetect import DetectionResult, DetectorConfig, PlatformDetector, RedirectPolicy, config_from_env
from shopdetect.export import results_to_csv, write_jsonl
from shopdetect.urls import normalize_for_dedupe


TXT_SUFFIXES = (".txt", ".list", ".urls")
CSV_DELIMITERS = (",", ";", "\t", "|")


def _run_stamp() -> str:
    return time.strftime("%Y%m%d_%H%M%S")


def _suffix_slug(s: str) -> str:
    slug = re.sub(r"\s+", "_", (s or "").strip())
    return re.sub(r"[^\w-]", "", slug).strip("_")


def _detect_csv_delimiter(sample: str) -> str:
    """Pick the delimiter that occurs most in the header line; ',' if none does."""
    header = next((line for line in (sample or "").splitlines() if line.strip()), "")
    best = max(CSV_DELIMITERS, key=header.count)
    return best if header.count(best) else ","


def _read_txt_urls(path: Path) -> List[str]:
    lines = path.read_text(encoding="utf-8", errors="replace").splitlines()
    return [s for s in (line.strip() for line in lines) if s and not s.startswith("#")]


def _read_csv_urls(path: Path, *, delimiter: str | None, url_column: str) -> List[str]:
    # utf-8-sig: spreadsheet exports often start with a BOM.
    with path.open("r", encoding="utf-8-sig", newline="") as f:
        delim = (delimiter or "").strip() or _detect_csv_delimiter(f.read(4096))
        f.seek(0)
        # Blank cells are kept: they still produce an "Empty URL" row in the output.
        return [(row.get(url_column) or "") for row in csv.DictReader(f, delimiter=delim)]


def _load_input_urls(
    input_path: Path,
    *,
    input_format: str | None,
    csv_delimiter: str | None,
    url_column: str,
) -> List[str]:
    fmt = (input_format or "auto").strip().lower()
    if fmt not in {"auto", "csv", "txt"}:
        raise SystemExit(f"Unsupported --input-format {input_format!r}. Use: auto/csv/txt.")
    if fmt == "auto":
        fmt = "txt" if input_path.suffix.lower() in TXT_SUFFIXES else "csv"
    if fmt == "txt":
        return _read_txt_urls(input_path)
    return _read_csv_urls(input_path, delimiter=csv_delimiter, url_column=url_column)


def _dedupe(urls: List[str]) -> List[str]:
    # Keep the first occurrence.
    seen = set()
    out: List[str] = []
    for u in urls:
        key = normalize_for_dedupe(u)
        if key and key in seen:
            continue
        if key:
            seen.add(key)
        out.append(u)
    return out


def main() -> int:
    load_dotenv(override=False)
    if hasattr(sys.stdout, "reconfigure"):
        sys.stdout.reconfigure(encoding="utf-8", errors="replace")

    try:
        env_cfg = config_from_env(os.environ)
    except ValueError as e:
        raise SystemExit(f"Invalid settings: {e}")

    parser = argparse.ArgumentParser(
        description=(
            "Detect e-commerce platforms for a list of websites.\n\n"
            "Inputs: URLs as arguments and/or --input (TXT: one URL per line, CSV: --url-column).\n"
            "Writes JSONL (full records) + CSV (website,platforms) to outputs/ by default."
        )
    )
    parser.add_argument("urls", nargs="*", help="URLs/domains to check (in addition to --input)")
    parser.add_argument(
        "--input",
        default=os.environ.get("SHOPDETECT_INPUT_PATH") or None,
        help="Path to input file (CSV or TXT). Env: SHOPDETECT_INPUT_PATH",
    )
    parser.add_argument(
        "--input-format",
        default=os.environ.get("SHOPDETECT_INPUT_FORMAT") or "auto",
        help="Input format: auto (default), csv, txt. Env: SHOPDETECT_INPUT_FORMAT",
    )
    parser.add_argument(
        "--csv-delimiter",
        default=os.environ.get("SHOPDETECT_CSV_DELIMITER") or None,
        help="CSV delimiter override (e.g. ';'). Default: auto-detect. Env: SHOPDETECT_CSV_DELIMITER",
    )
    parser.add_argument(
        "--url-column",
        default=os.environ.get("SHOPDETECT_URL_COLUMN", "Website"),
        help="CSV column that contains the URL. Ignored for TXT. Default: Website. Env: SHOPDETECT_URL_COLUMN",
    )
    parser.add_argument("--dedupe", action="store_true", help="Drop rows whose normalized URL was already seen")
    parser.add_argument("--limit", type=int, default=None, help="Optional cap on number of URLs after dedupe")
    parser.add_argument("--out", default=None, help="JSONL output (default: outputs/<timestamp>[_suffix].jsonl)")
    parser.add_argument("--out-csv", default=None, help="CSV output (default: outputs/<timestamp>[_suffix].csv)")
    parser.add_argument("-s", "--suffix", default="", help="Optional suffix added to output filenames")
    parser.add_argument(
        "--workers",
        type=int,
        default=env_cfg.max_workers,
        help=f"Concurrent fetches (default {env_cfg.max_workers}). Env: SHOPDETECT_MAX_WORKERS",
    )
    parser.add_argument(
        "--queue-capacity",
        type=int,
        default=env_cfg.queue_capacity,
        help=f"Pending tasks allowed beyond the running ones (default {env_cfg.queue_capacity}). Env: SHOPDETECT_QUEUE_CAPACITY",
    )
    parser.add_argument(
        "--on-queue-full",
        choices=("block", "reject"),
        default="block" if env_cfg.block_when_full else "reject",
        help="block: wait for a free slot; reject: record the URL as an error. Env: SHOPDETECT_BLOCK_WHEN_FULL",
    )
    parser.add_argument(
        "--request-timeout",
        type=float,
        default=env_cfg.request_timeout_seconds,
        help="Per-request read timeout in seconds. Env: SHOPDETECT_REQUEST_TIMEOUT_SECONDS",
    )
    parser.add_argument(
        "--connect-timeout",
        type=float,
        default=env_cfg.connect_timeout_seconds,
        help="Connect timeout in seconds. Env: SHOPDETECT_CONNECT_TIMEOUT_SECONDS",
    )
    parser.add_argument(
        "--redirect-policy",
        choices=[p.value for p in RedirectPolicy],
        default=env_cfg.redirect_policy.value,
        help="normal: follow except https->http; always; never. Env: SHOPDETECT_REDIRECT_POLICY",
    )
    parser.add_argument("--user-agent", default=env_cfg.user_agent, help="User-Agent header. Env: SHOPDETECT_USER_AGENT")
    parser.add_argument("--progress", action="store_true", help="Print one line per URL as results come in (input order)")
    parser.add_argument(
        "--log-level",
        default=os.environ.get("SHOPDETECT_LOG_LEVEL", "WARNING"),
        help="Logging level for library messages (DEBUG/INFO/WARNING). Env: SHOPDETECT_LOG_LEVEL",
    )
    args = parser.parse_args()

    logging.basicConfig(
        level=str(args.log_level).upper(),
        format="%(asctime)s %(levelname)s %(threadName)s %(name)s: %(message)s",
    )

    urls: List[str] = list(args.urls)
    if args.input:
        input_path = Path(args.input)
        if not input_path.exists():
            raise SystemExit(f"Input file not found: {input_path}")
        urls.extend(
            _load_input_urls(
                input_path,
                input_format=args.input_format,
                csv_delimiter=args.csv_delimiter,
                url_column=args.url_column,
            )
        )
    if args.dedupe:
        urls = _dedupe(urls)
    if args.limit is not None:
        urls = urls[: max(0, args.limit)]
    if not urls:
        print("No URLs given (pass URLs as arguments or use --input).", flush=True)
        return 2

    try:
        cfg = DetectorConfig(
            max_workers=args.workers,
            queue_capacity=args.queue_capacity,
            block_when_full=args.on_queue_full == "block",
            request_timeout_seconds=args.request_timeout,
            connect_timeout_seconds=args.connect_timeout,
            redirect_policy=RedirectPolicy(args.redirect_policy),
            max_redirects=env_cfg.max_redirects,
            user_agent=args.user_agent,
        )
    except ValueError as e:
        raise SystemExit(f"Invalid settings: {e}")

    out_dir = Path("outputs")
    stem = _run_stamp()
    suffix = _suffix_slug(args.suffix)
    if suffix:
        stem = f"{stem}_{suffix}"
    out_path = Path(args.out) if args.out else (out_dir / f"{stem}.jsonl")
    out_csv_path = Path(args.out_csv) if args.out_csv else (out_dir / f"{stem}.csv")
    out_path.parent.mkdir(parents=True, exist_ok=True)
    out_csv_path.parent.mkdir(parents=True, exist_ok=True)

    total = len(urls)

    def _progress(i: int, r: DetectionResult) -> None:
        shown = "|".join(r.sorted_platform_names()) or "-"
        print(f"[{i + 1}/{total}] {r.url} -> {shown if r.ok else 'ERROR ' + str(r.error)}", flush=True)

    print(f"Detecting platforms for {total} URL(s) with {cfg.max_workers} workers", flush=True)
    started = time.monotonic()
    with PlatformDetector(cfg) as detector:
        results = detector.detect_urls(urls, on_result=_progress if args.progress else None)
    elapsed = time.monotonic() - started

    write_jsonl(out_path, results)
    out_csv_path.write_text(results_to_csv(results), encoding="utf-8", newline="")

    ok = sum(1 for r in results if r.ok)
    by_platform = Counter(name for r in results for name in r.sorted_platform_names())
    print(f"\nWrote results (jsonl): {out_path}", flush=True)
    print(f"Wrote results (csv):   {out_csv_path}", flush=True)
    print(f"Run time: {elapsed:.1f}s", flush=True)
    print(f"Completed: ok={ok}, err={total - ok}, total={total}", flush=True)
    print(f"Platforms: {dict(sorted(by_platform.items()))}", flush=True)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
