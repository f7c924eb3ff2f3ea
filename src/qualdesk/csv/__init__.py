"""CSV export utilities."""

from qualdesk.csv.exporter import CsvExporter, CSV_COLUMNS

__all__ = [
    "CsvExporter",
    "CSV_COLUMNS",
]
