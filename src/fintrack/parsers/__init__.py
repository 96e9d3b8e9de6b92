"""Format parsers for bank exports."""

from fintrack.parsers.json_rows import load_json_payload, parse_json_rows
from fintrack.parsers.normalize import normalize_row, normalize_rows
from fintrack.parsers.ofx import parse_ofx
from fintrack.parsers.worker import ImportWorker, run_parse_job
from fintrack.parsers.xlsx import parse_xlsx, parse_xlsx_rows

__all__ = [
    "load_json_payload",
    "parse_json_rows",
    "normalize_row",
    "normalize_rows",
    "parse_ofx",
    "ImportWorker",
    "run_parse_job",
    "parse_xlsx",
    "parse_xlsx_rows",
]
