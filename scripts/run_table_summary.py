"""
Summarize a CSV file from the CLI.
"""

from __future__ import annotations

import argparse
import csv
import json
import logging
import sys
from pathlib import Path

from app.services.table_summary_service import get_table_summary_service
from llm_synthesis.schema import AnalysisOptions, TableColumn


def _parse_column_types(options: list[str]) -> dict[str, str]:
    types: dict[str, str] = {}
    for option in options:
        key, sep, column_type = option.partition(":")
        if not sep or not key.strip() or not column_type.strip():
            raise argparse.ArgumentTypeError(f"Invalid column option '{option}', expected key:type.")
        types[key.strip()] = column_type.strip().lower()
    return types


def _load_rows(path: Path) -> tuple[list[dict[str, str | None]], list[str]]:
    with path.open(encoding="utf-8-sig", newline="") as handle:
        reader = csv.DictReader(handle)
        headers = [header for header in (reader.fieldnames or []) if header]
        rows = [
            {key: (value if value not in ("", None) else None) for key, value in row.items() if key}
            for row in reader
        ]
    return rows, headers


def main() -> int:
    parser = argparse.ArgumentParser(description="Generate an AI summary for a CSV table.")
    parser.add_argument("--csv", dest="csv_path", required=True, help="Path to the CSV file.")
    parser.add_argument(
        "--column",
        dest="columns",
        action="append",
        default=[],
        help="Column type as key:type (number, currency, percentage, text, date). Repeatable.",
    )
    parser.add_argument("--title", dest="title", default=None, help="Table name shown in the prompt.")
    parser.add_argument("--context", dest="context", default=None, help="Business context for the analysis.")
    parser.add_argument("--max-rows", dest="max_rows", type=int, default=None, help="Row limit for the sample.")
    parser.add_argument("--quick", action="store_true", help="Return quick previous-month insights only.")
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s [%(name)s] %(message)s")

    try:
        column_types = _parse_column_types(args.columns)
    except argparse.ArgumentTypeError as exc:
        parser.error(str(exc))

    path = Path(args.csv_path)
    if not path.exists():
        print(f"CSV file not found: {path}", file=sys.stderr)
        return 1

    rows, headers = _load_rows(path)
    columns = [
        TableColumn(key=header, header=header, type=column_types.get(header, "text"))
        for header in headers
    ]

    service = get_table_summary_service()
    if args.quick:
        payload: object = {"insights": service.quick_insights(rows, columns, table_name=args.title)}
    else:
        options = AnalysisOptions(table_name=args.title, context=args.context, max_rows=args.max_rows)
        payload = service.summarize(rows, columns, options).model_dump()

    print(json.dumps(payload, indent=2, ensure_ascii=False))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
