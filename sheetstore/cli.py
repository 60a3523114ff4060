"""Command line helper for inspecting sheet-backed tables."""

from __future__ import annotations

import argparse
import asyncio
import dataclasses
import json
import sys
from pathlib import Path

from sheetstore.entities import Blog
from sheetstore.logging_config import configure_logging
from sheetstore.repository import SheetRepository
from sheetstore.settings import SettingsError, SheetsSettings, load_settings
from sheetstore.sheets_client import SheetsClientError, build_client

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_NOT_FOUND = 2


def _repository(settings: SheetsSettings, client=None) -> SheetRepository:
    if client is None:
        client = build_client(settings.spreadsheet_id, settings.credentials)
    return SheetRepository(
        client,
        aliases=settings.aliases(),
        profile=settings.profile(),
        columns=settings.read_columns,
        serialize_writes=settings.serialize_writes,
    )


def command_check(args: argparse.Namespace, settings: SheetsSettings, client=None) -> int:
    if client is None:
        client = build_client(settings.spreadsheet_id, settings.credentials)
    asyncio.run(client.health_check())
    print(f"Spreadsheet {settings.spreadsheet_id} is reachable.")
    return EXIT_OK


def command_list(args: argparse.Namespace, settings: SheetsSettings, client=None) -> int:
    repository = _repository(settings, client)
    sheet_name = args.sheet or settings.default_sheet
    items = asyncio.run(repository.get_all(Blog, sheet_name))
    print(json.dumps([dataclasses.asdict(item) for item in items], indent=2, default=str))
    return EXIT_OK


def command_delete(args: argparse.Namespace, settings: SheetsSettings, client=None) -> int:
    repository = _repository(settings, client)
    sheet_name = args.sheet or settings.default_sheet
    if not asyncio.run(repository.delete(args.id, sheet_name)):
        print(f"No row with id {args.id} in sheet {sheet_name!r}.", file=sys.stderr)
        return EXIT_NOT_FOUND
    print(f"Deleted {args.id} from {sheet_name!r}.")
    return EXIT_OK


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Google Sheets entity store tool")
    parser.add_argument("--settings", type=Path, help="Path to a JSON settings file")
    parser.add_argument("--log-file", type=Path, help="Write logs to this file instead of stderr")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    check_parser = subparsers.add_parser("check", help="Confirm the spreadsheet is reachable")
    check_parser.set_defaults(func=command_check)

    list_parser = subparsers.add_parser("list", help="Print every row of a sheet as JSON")
    list_parser.add_argument("sheet", nargs="?", help="Worksheet title (defaults to the configured sheet)")
    list_parser.set_defaults(func=command_list)

    delete_parser = subparsers.add_parser("delete", help="Delete the row holding an id")
    delete_parser.add_argument("id", help="Identifier of the row to delete")
    delete_parser.add_argument("--sheet", help="Worksheet title (defaults to the configured sheet)")
    delete_parser.set_defaults(func=command_delete)

    return parser


def main(argv: list[str] | None = None, *, client=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        settings = load_settings(args.settings)
    except SettingsError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return EXIT_ERROR

    configure_logging("DEBUG" if args.verbose else settings.log_level, args.log_file)

    try:
        return args.func(args, settings, client)
    except SheetsClientError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return EXIT_ERROR


if __name__ == "__main__":
    sys.exit(main())
