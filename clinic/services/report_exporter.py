from typing import Dict, Iterable, List, Optional
import csv
import io

REPORT_FILENAME = "admin-reports.csv"

def export_csv(rows: Iterable[Dict], fieldnames: Optional[List[str]] = None) -> io.StringIO:
    """Render flat rows as CSV and return the buffer rewound to the start."""
    rows = list(rows)
    if fieldnames is None:
        fieldnames = list(rows[0].keys()) if rows else []

    buffer = io.StringIO()
    writer = csv.DictWriter(buffer, fieldnames=fieldnames)
    writer.writeheader()
    writer.writerows(rows)
    buffer.seek(0)
    return buffer
