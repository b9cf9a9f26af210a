from __future__ import annotations

from typing import Any, Dict, Tuple

from .platforms import PLATFORM_NAMES

# Field order of one output record (JSONL line / API payload).
RECORD_FIELDS: Tuple[str, ...] = ("url", "ok", "statusCode", "error", "platforms", "evidence")


OUTPUT_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "additionalProperties": False,
    "properties": {
        # Original input, unmodified (not the normalized URL).
        "url": {"type": "string"},
        "ok": {"type": "boolean"},
        # HTTP status, or -1 for empty input / transport failures.
        "statusCode": {"type": "integer"},
        "error": {"type": ["string", "null"]},
        "platforms": {
            "type": "array",
            "uniqueItems": True,
            "items": {"type": "string", "enum": list(PLATFORM_NAMES)},
        },
        # Keyed by platform name; only platforms listed in `platforms` appear.
        "evidence": {
            "type": "object",
            "propertyNames": {"enum": list(PLATFORM_NAMES)},
            "additionalProperties": {"type": "array", "items": {"type": "string"}},
        },
    },
    "required": list(RECORD_FIELDS),
}
