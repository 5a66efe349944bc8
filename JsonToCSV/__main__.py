"""
json2relcsv - convert a JSON document into relational CSV tables.

Usage:
    python -m JsonToCSV [input.json] --out-dir ./output [--batch] [--print-ast]
"""
import argparse
import logging
import os
import sys

from .core.errors import OutputLocationError
from .core.tree import build_tree, format_tree
from .main import process_json_to_csv

logger = logging.getLogger("json2relcsv")


def delimiter_type(value):
    if len(value) != 1 or value in '"\r\n':
        raise argparse.ArgumentTypeError(
            f"must be a single character other than a quote or line break: {value!r}")
    return value


def parse_args(argv=None):
    parser = argparse.ArgumentParser(
        prog="json2relcsv",
        description="Split a JSON document into relational tables, one CSV file per table.",
    )
    parser.add_argument("input", nargs="?", help="JSON file to read (default: stdin)")
    parser.add_argument("--out-dir", default=".", help="directory for the table files (created if missing)")
    parser.add_argument("--batch", action="store_true",
                        help="buffer all rows and write each table at the end instead of streaming")
    parser.add_argument("--print-ast", action="store_true", help="print the annotated document tree")
    parser.add_argument("--no-merge", action="store_true", help="keep tables that describe the same entity apart")
    parser.add_argument("--alias", action="append", default=[], metavar="A,B",
                        help="comma separated table names that denote the same entity (repeatable)")
    parser.add_argument("--delimiter", default=",", type=delimiter_type, help="field separator (default: ,)")
    parser.add_argument("-v", "--verbose", action="store_true", help="log every discovered table")
    return parser.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    )

    # Undecodable input is a ValueError (UnicodeDecodeError) like malformed JSON
    try:
        if args.input:
            with open(args.input, "r", encoding="utf-8") as f:
                text = f.read()
        else:
            text = sys.stdin.read()
        tree = build_tree(text)
    except (ValueError, OSError) as e:
        logger.error("Could not read JSON input: %s", e)
        return 1

    os.makedirs(args.out_dir, exist_ok=True)
    aliases = [[name.strip() for name in group.split(",") if name.strip()] for group in args.alias]

    try:
        table_names, errors = process_json_to_csv(
            tree,
            args.out_dir,
            streaming=not args.batch,
            merge_tables=not args.no_merge,
            entity_aliases=aliases,
            delimiter=args.delimiter,
        )
    except OutputLocationError as e:
        logger.error("%s", e)
        return 2

    if args.print_ast:
        print(format_tree(tree))

    logger.info("Wrote %d table(s) to %s: %s", len(table_names) - len(errors), args.out_dir,
                ", ".join(table_names))
    return 0


if __name__ == "__main__":
    sys.exit(main())
