from __future__ import annotations

import json
from pathlib import Path
from typing import IO, Iterable, Optional, Union

from .models import DetectionResult

CSV_HEADER = "website,platforms"


def csv_escape(value: Optional[str]) -> str:
    if value is None:
        return ""
    must_quote = any(ch in value for ch in (",", '"', "\n", "\r"))
    escaped = value.replace('"', '""')
    return f'"{escaped}"' if must_quote else escaped


def platforms_cell(result: DetectionResult) -> str:
    if not result.ok or not result.platforms:
        return ""
    return "|".join(result.sorted_platform_names())


def results_to_csv(results: Iterable[DetectionResult]) -> str:
    lines = [CSV_HEADER]
    for r in results:
        lines.append(f"{csv_escape(r.url)},{csv_escape(platforms_cell(r))}")
    return "\n".join(lines) + "\n"


def write_jsonl(dest: Union[str, Path, IO[str]], results: Iterable[DetectionResult]) -> int:
    """Write one record per line; returns the number of lines written."""
    if isinstance(dest, (str, Path)):
        with Path(dest).open("w", encoding="utf-8") as f:
            return write_jsonl(f, results)
    n = 0
    for r in results:
        dest.write(json.dumps(r.to_record(), ensure_ascii=False) + "\n")
        n += 1
    return n
