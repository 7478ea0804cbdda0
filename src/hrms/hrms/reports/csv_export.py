"""CSV rendering for report downloads (header row, CRLF rows, UTF-8 with BOM)."""
from __future__ import annotations

import csv
import io
from typing import Iterable, Mapping, Sequence


def _cell(value) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def rows_to_csv(rows: Iterable[Mapping], columns: Sequence[str]) -> bytes:
    out = io.StringIO()
    writer = csv.DictWriter(out, fieldnames=list(columns), extrasaction="ignore", lineterminator="\r\n")
    writer.writeheader()
    for row in rows:
        writer.writerow({c: _cell(row.get(c)) for c in columns})
    # Excel needs the BOM to detect UTF-8.
    return out.getvalue().encode("utf-8-sig")
