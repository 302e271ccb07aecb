#!/usr/bin/env python3
"""
Command-line script to extract schema.org items from HTML files.

Usage:
    python run_parser.py page.html
    python run_parser.py page1.html page2.html -o items.json
    python run_parser.py pages/*.html --verbose --log-file parser.log

Prints a JSON list with one entry per file. Exits with status 1 if any
file could not be parsed.
"""

import argparse
import json
import logging
import sys
from pathlib import Path

# Load .env file automatically (SCHEMAORG_PARSER_LOG_LEVEL)
from dotenv import load_dotenv
load_dotenv()

from schemaorg_parser.parser import Parser
from schemaorg_parser.listener import DefaultListener
from schemaorg_parser.exceptions import SchemaParserError
from schemaorg_parser.logger import setup_logger


def parse_file(path: Path) -> dict:
    """Parse one file and return its JSON-ready entry."""
    listener = DefaultListener()
    parser = Parser()
    parser.register_listener(listener)

    try:
        parser.parse_file(path)
    except SchemaParserError as e:
        return {"file": str(path), "status": "error", "error": e.message}

    result = listener.result()
    return {
        "file": str(path),
        "status": "success",
        "items": result.items,
        "itemtypes": [t.model_dump(mode="json") for t in result.itemtypes],
        "total_itemtypes": result.total_itemtypes,
    }


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(
        description="Extract schema.org items (JSON-LD and microdata) from HTML files"
    )
    parser.add_argument("files", nargs="+", help="HTML files to parse")
    parser.add_argument("--output", "-o", help="Output JSON file (default: stdout)")
    parser.add_argument("--verbose", "-v", action="store_true", help="Verbose logging")
    parser.add_argument("--log-file", help="Also write logs to this file")
    args = parser.parse_args(argv)

    if args.verbose:
        setup_logger(level=logging.DEBUG, log_file=args.log_file)
    elif args.log_file:
        setup_logger(log_file=args.log_file)

    results = []
    for filepath in args.files:
        path = Path(filepath)
        print(f"Parsing: {path.name}", file=sys.stderr)

        entry = parse_file(path)
        results.append(entry)

        if entry["status"] == "success":
            print(f"  ✓ {len(entry['items'])} items, {entry['total_itemtypes']} item types", file=sys.stderr)
        else:
            print(f"  ✗ Error: {entry['error']}", file=sys.stderr)

    # ensure_ascii=False keeps non-ASCII text readable
    output = json.dumps(results, indent=2, ensure_ascii=False)

    if args.output:
        Path(args.output).write_text(output, encoding="utf-8")
        print(f"\nSaved to: {args.output}", file=sys.stderr)
    else:
        print(output)

    return 1 if any(r["status"] == "error" for r in results) else 0


if __name__ == "__main__":
    sys.exit(main())
