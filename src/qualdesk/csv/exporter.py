"""CSV export functionality."""

import csv
import io
from datetime import datetime
from decimal import Decimal
from pathlib import Path
from typing import IO, Iterable, Optional

from qualdesk.core.timezone import now_local, to_local
from qualdesk.domain.models import FACTOR_KEYS, Qualification

CSV_COLUMNS = [
    "instrument_type",
    "market",
    "period",
    "qualification_type",
    "amount",
    "currency",
    *FACTOR_KEYS,
    "factor_sum",
    "unregistered",
    "created_at",
    "last_modified_at",
]


def _format_date(value: Optional[datetime]) -> str:
    return to_local(value).strftime("%d-%m-%Y") if value else ""


def to_row(qualification: Qualification) -> dict[str, str]:
    """Flatten one qualification into CSV cells."""
    row = {
        "instrument_type": qualification.instrument_type,
        "market": qualification.market,
        "period": qualification.period,
        "qualification_type": qualification.qualification_type or "",
        "amount": str(qualification.amount.value),
        "currency": qualification.amount.currency,
        "factor_sum": f"{qualification.factor_sum:.4f}",
        "unregistered": "yes" if qualification.unregistered else "no",
        "created_at": _format_date(qualification.created_at),
        "last_modified_at": _format_date(qualification.last_modified_at),
    }
    for key in FACTOR_KEYS:
        row[key] = str(qualification.factors.get(key, Decimal("0")))
    return row


class CsvExporter:
    """
    CSV exporter for qualification rows.

    Rows are written in the order given; the caller decides whether that is
    the selection or the whole filtered view.
    """

    def write(self, rows: Iterable[Qualification], stream: IO[str]) -> int:
        """Write header and rows to stream. Returns the number of rows."""
        writer = csv.DictWriter(stream, fieldnames=CSV_COLUMNS, quoting=csv.QUOTE_ALL)
        writer.writeheader()
        count = 0
        for qualification in rows:
            writer.writerow(to_row(qualification))
            count += 1
        return count

    def to_text(self, rows: Iterable[Qualification]) -> str:
        buffer = io.StringIO()
        self.write(rows, buffer)
        return buffer.getvalue()

    def export_csv(self, path: str, rows: Iterable[Qualification]) -> int:
        """
        Export rows to a CSV file.

        The file is UTF-8 with a byte order mark so spreadsheet tools pick
        up accented characters.

        Args:
            path: Output file path
            rows: Qualifications to export

        Returns:
            Number of rows written
        """
        file_path = Path(path)
        file_path.parent.mkdir(parents=True, exist_ok=True)

        with open(file_path, "w", newline="", encoding="utf-8-sig") as csvfile:
            return self.write(rows, csvfile)

    @staticmethod
    def default_filename(prefix: str = "qualifications") -> str:
        return f"{prefix}_{now_local().strftime('%Y-%m-%d')}.csv"
