"""
Command-line interface for wikdict.
"""
from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import Optional

from . import __version__
from .config import load_settings
from .db import import_jsonl
from .dictionary import Dictionary
from .exceptions import ConfigError, WikdictError
from .models import CoalescedEntry, SearchStrategy
from .resources import pack


def main(argv: Optional[list] = None) -> int:
    """Main entry point for the wikdict CLI."""
    parser = create_parser()
    args = parser.parse_args(argv)

    if not hasattr(args, "func"):
        parser.print_help()
        return 1

    if args.verbose:
        logging.basicConfig(
            level=logging.DEBUG if args.verbose > 1 else logging.INFO,
            format="%(levelname)s %(name)s: %(message)s",
        )

    try:
        return args.func(args)
    except ConfigError as e:
        print(f"\n  [CONFIG ERROR] {e}")
        if e.line:
            print(f"                Line: {e.line}")
        return 1
    except (WikdictError, FileNotFoundError) as e:
        print(f"\n  [ERROR] {e}")
        return 1


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="wikdict",
        description="Offline dictionary lookup",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "--config",
        type=Path,
        help="YAML settings file (default: $WIKDICT_CONFIG or ~/.wikdict/config.yaml)",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="count",
        default=0,
        help="Log progress (-vv for debug detail)",
    )

    subparsers = parser.add_subparsers(title="commands", dest="command")

    # search command
    search_parser = subparsers.add_parser(
        "search",
        help="Search headwords",
    )
    search_parser.add_argument("query", help="Text to search for")
    search_parser.add_argument(
        "--trigram",
        action="store_true",
        help="Match anywhere in the word instead of at the start",
    )
    search_parser.set_defaults(func=cmd_search)

    # show command
    show_parser = subparsers.add_parser(
        "show",
        help="Show a word's senses and add it to history",
    )
    show_parser.add_argument("word", help="Exact headword (case-sensitive)")
    show_parser.set_defaults(func=cmd_show)

    # history command
    history_parser = subparsers.add_parser(
        "history",
        help="List recently viewed words",
    )
    history_parser.add_argument(
        "--clear",
        action="store_true",
        help="Forget all recently viewed words",
    )
    history_parser.set_defaults(func=cmd_history)

    # resolve command
    resolve_parser = subparsers.add_parser(
        "resolve",
        help="Print the store path, unpacking the archive if needed",
    )
    resolve_parser.set_defaults(func=cmd_resolve)

    # pack command
    pack_parser = subparsers.add_parser(
        "pack",
        help="Compress a store into a packaged archive",
    )
    pack_parser.add_argument("database", type=Path, help="Store to compress")
    pack_parser.add_argument("archive", type=Path, help="Archive to write")
    pack_parser.set_defaults(func=cmd_pack)

    # build command
    build_parser = subparsers.add_parser(
        "build",
        help="Build a store from a wiktextract JSONL dump",
    )
    build_parser.add_argument("source", type=Path, help="JSONL file")
    build_parser.add_argument("database", type=Path, help="Store to create")
    build_parser.set_defaults(func=cmd_build)

    return parser


def _dictionary(args: argparse.Namespace) -> Dictionary:
    return Dictionary(load_settings(args.config))


def cmd_search(args: argparse.Namespace) -> int:
    """Handle search command."""
    dictionary = _dictionary(args)
    strategy = SearchStrategy.TRIGRAM if args.trigram else SearchStrategy.PREFIX
    session = dictionary.search_session(debounce=0.0)

    async def run() -> None:
        await session.set_strategy(strategy)
        await session.set_query(args.query)

    asyncio.run(run())

    if session.error is not None:
        print(f"\n  [ERROR] {session.error}")
        return 1

    entries = session.displayed_entries
    if not entries:
        print("No matches.")
        return 0

    for entry in entries:
        _print_row(entry)
    return 0


def cmd_show(args: argparse.Namespace) -> int:
    """Handle show command."""
    dictionary = _dictionary(args)
    entry = dictionary.lookup(args.word)
    if entry is None:
        print(f"Word {args.word!r} not found.")
        return 1

    print(f"\n{entry.word}")
    for pos, senses in entry.grouped_by_part_of_speech():
        print(f"\n  {pos}")
        for i, sense in enumerate(senses, 1):
            print(f"    {i}. {sense.definition}")
            for example in sense.examples:
                print(f"       “{example}”")
            if sense.etymology:
                print(f"       Etymology: {sense.etymology}")

    dictionary.load_history()
    dictionary.record_view(entry)
    return 0


def cmd_history(args: argparse.Namespace) -> int:
    """Handle history command."""
    dictionary = _dictionary(args)

    if args.clear:
        dictionary.history.clear()
        print("History cleared.")
        return 0

    entries = dictionary.load_history()
    if not entries:
        print("Words you look up will appear here.")
        return 0

    print(f"\nRecently viewed ({len(entries)}):\n")
    for entry in entries:
        _print_row(entry)
    return 0


def cmd_resolve(args: argparse.Namespace) -> int:
    """Handle resolve command."""
    path = _dictionary(args).resolve_database_path()
    print(path)
    return 0


def cmd_pack(args: argparse.Namespace) -> int:
    """Handle pack command."""
    if not args.database.exists():
        print(f"\n  [ERROR] File not found: {args.database}")
        return 1
    size = pack(args.database, args.archive)
    print(f"Wrote {args.archive} ({size} bytes)")
    return 0


def cmd_build(args: argparse.Namespace) -> int:
    """Handle build command."""
    if not args.source.exists():
        print(f"\n  [ERROR] File not found: {args.source}")
        return 1
    if args.database.exists():
        print(f"\n  [ERROR] Refusing to overwrite {args.database}")
        return 1
    imported, skipped = import_jsonl(args.source, args.database)
    print(f"Imported {imported} entries into {args.database}")
    if skipped:
        print(f"Skipped {skipped} unusable line(s)")
    return 0


def _print_row(entry: CoalescedEntry) -> None:
    print(f"  {entry.word:<24} {entry.parts_of_speech}")
    if entry.primary_gloss:
        print(f"      {entry.primary_gloss}")


if __name__ == "__main__":
    sys.exit(main())
