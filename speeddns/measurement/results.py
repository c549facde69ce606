"""
Parser for the ranked CSV written by cfst.

The first row is a header. Column 0 of every other row is an endpoint address;
the tool has already ranked rows best-first, so order is preserved as-is.
"""

from __future__ import annotations

import csv
from pathlib import Path
from typing import List

from speeddns.utils.logging import get_logger

log = get_logger(__name__)


def parse_result_csv(path: Path | str, max_count: int) -> List[str]:
    """
    Return up to `max_count` endpoint addresses in file order.

    An unreadable or malformed file yields an empty list; the caller treats
    "no endpoints" as a failed run rather than crashing.
    """
    endpoints: List[str] = []
    if max_count <= 0:
        return endpoints
    try:
        with Path(path).open("r", newline="", encoding="utf-8") as f:
            rows = list(csv.reader(f))
    except (OSError, UnicodeDecodeError, csv.Error) as exc:
        log.debug("Result file unreadable", extra={"path": str(path), "error": str(exc)})
        return []

    for row in rows[1:]:
        if len(endpoints) >= max_count:
            break
        if row:
            endpoints.append(row[0])
    return endpoints


__all__ = ["parse_result_csv"]
