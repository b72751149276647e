"""CSV export of band-power updates."""

import csv
from pathlib import Path
from typing import Any, Iterable, List, Sequence

OUTPUT_COLUMNS = ("dominant", "control_pct", "control_active")


def band_headers(band_names: Sequence[str]) -> List[str]:
    """``timestamp_ms``, then ``<band>_raw`` and ``<band>_norm`` per band, then the outputs."""
    headers = ["timestamp_ms"]
    headers.extend(f"{name}_raw" for name in band_names)
    headers.extend(f"{name}_norm" for name in band_names)
    headers.extend(OUTPUT_COLUMNS)
    return headers


def write_band_table(path: Path, band_names: Sequence[str], rows: Iterable[Sequence[Any]]) -> int:
    """
    Write one row per update under :func:`band_headers` and return the row count.

    Parent directories are created as needed.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    count = 0
    with path.open("w", newline="", encoding="utf-8") as fh:
        writer = csv.writer(fh)
        writer.writerow(band_headers(band_names))
        for row in rows:
            writer.writerow(row)
            count += 1
    return count
