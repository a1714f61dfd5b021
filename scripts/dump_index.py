#!/usr/bin/env python3
"""Dump the rows of a SQLite index store.

Usage
-----
::

    python scripts/dump_index.py records.db
    python scripts/dump_index.py records.db --type post --json
    python scripts/dump_index.py records.db --counters counters.json

Options::

    --table NAME         Index table name (default: record_index)
    --type TYPE          Only rows of this record type
    --counters FILE      Also print the counters stored in FILE
    --json               Output as machine-readable JSON
    --output FILE        Write output to FILE instead of stdout
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any

# Allow running from the repo root without installing the package.
_repo = Path(__file__).resolve().parent.parent
_src = _repo / "src"
if _src.is_dir():
    sys.path.insert(0, str(_src))

from pyxrecord import JsonFileCounter, RecordError, SqliteIndexStore  # noqa: E402
from pyxrecord._constants import DEFAULT_COUNTER_KEY  # noqa: E402


def _section(title: str) -> str:
    line = "=" * 60
    return f"\n{line}\n  {title}\n{line}"


def _collect(args: argparse.Namespace) -> dict[str, Any]:
    criteria: dict[str, Any] = {}
    if args.type:
        criteria["type"] = args.type

    with SqliteIndexStore(args.database, table=args.table) as store:
        rows = store.query(criteria)
        schema = sorted(store.schema_fields())

    result: dict[str, Any] = {"database": str(args.database), "schema": schema, "rows": rows}
    if args.counters:
        counter = JsonFileCounter(args.counters)
        result["counters"] = {DEFAULT_COUNTER_KEY: counter.get(DEFAULT_COUNTER_KEY, 0)}
    return result


def _render_text(result: dict[str, Any]) -> str:
    lines = [_section(f"Index store {result['database']}")]
    lines.append(f"  columns: {', '.join(result['schema'])}")
    lines.append(f"  rows: {len(result['rows'])}")
    for row in result["rows"]:
        lines.append("  " + "  ".join(f"{k}={v}" for k, v in row.items()))
    if "counters" in result:
        lines.append(_section("Counters"))
        for key, value in result["counters"].items():
            lines.append(f"  {key}: {value}")
    return "\n".join(lines) + "\n"


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Dump a pyxrecord SQLite index store.")
    parser.add_argument("database", type=Path, help="SQLite database file")
    parser.add_argument("--table", default="record_index", help="Index table name")
    parser.add_argument("--type", help="Only rows of this record type")
    parser.add_argument("--counters", type=Path, help="JSON counter file to include")
    parser.add_argument("--json", action="store_true", help="Output JSON")
    parser.add_argument("--output", type=Path, help="Write to FILE instead of stdout")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING)

    if not args.database.exists():
        print(f"error: {args.database} does not exist", file=sys.stderr)
        return 2

    try:
        result = _collect(args)
    except RecordError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1

    text = json.dumps(result, indent=2) + "\n" if args.json else _render_text(result)
    if args.output:
        args.output.write_text(text, encoding="utf-8")
    else:
        sys.stdout.write(text)
    return 0


if __name__ == "__main__":
    sys.exit(main())
