"""
Limitless lifelogs command line front end.

Everything goes through LifelogOperations, so the CLI sees exactly the
results (and failures) a tool server would.
"""

from __future__ import annotations

import argparse
import json
import sys
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional

from . import __version__
from .config import API_KEY_ENV_VAR, DEFAULT_SEARCH_FETCH_LIMIT
from .criteria import ASC, DIRECTIONS
from .dates import (PERIODS, day_bounds, get_day_range, get_tz, local_timezone_name,
                    parse_date_spec, parse_week_spec)
from .errors import ConfigError, InvalidParams
from .models import LifelogRecord
from .operations import LifelogOperations
from .results import Result
from .search import SearchResult
from .util import progress_print


# ── Output Helpers ───────────────────────────────────────────────────────────
def stream_json(logs: Iterable[Dict[str,Any]]):
    sys.stdout.write("[")
    first = True
    for lg in logs:
        if not first:
            sys.stdout.write(",")
        json.dump(lg, sys.stdout, separators=(",",":"))
        first = False
    sys.stdout.write("]\n")
    sys.stdout.flush()

def print_markdown(records: Iterable[LifelogRecord]):
    for lg in records:
        if lg.markdown:
            print(lg.markdown)

def _records(result: Result) -> List[LifelogRecord]:
    if isinstance(result.data, LifelogRecord):
        return [result.data]
    if isinstance(result.data, SearchResult):
        return list(result.data.matches)
    return list(result.data or [])

def emit(result: Result, args) -> int:
    if not result.ok:
        print(f"Error: {result.message}", file=sys.stderr)
        return 1
    progress_print(result.message, args.quiet)
    records = _records(result)
    if args.raw:
        if isinstance(result.data, LifelogRecord):
            print(json.dumps(result.data.to_dict(), indent=2))
        else:
            stream_json(lg.to_dict() for lg in records)
    else:
        print_markdown(records)
    return 0


# ── Command Handlers ────────────────────────────────────────────────────────
def _list_kwargs(args) -> Dict[str,Any]:
    return dict(
        limit=args.limit,
        timezone=args.timezone,
        include_markdown=args.include_markdown,
        include_headings=args.include_headings,
    )

def _today(args):
    return datetime.now(get_tz(args.timezone or local_timezone_name())).date()

def handle_list(ops: LifelogOperations, args) -> Result:
    if args.date and (args.start or args.end):
        raise InvalidParams("--date cannot be combined with --start/--end", field="date")
    if args.date:
        return ops.list_by_date(args.date, direction=args.direction, **_list_kwargs(args))
    if args.start or args.end:
        if not (args.start and args.end):
            raise InvalidParams("--start and --end must be given together", field="start")
        return ops.list_by_range(args.start, args.end, direction=args.direction, **_list_kwargs(args))
    return ops.list_recent(**_list_kwargs(args))

def handle_get(ops: LifelogOperations, args) -> Result:
    return ops.get_by_id(args.id, include_markdown=args.include_markdown,
                         include_headings=args.include_headings)

def handle_recent(ops: LifelogOperations, args) -> Result:
    return ops.list_recent(**_list_kwargs(args))

def handle_search(ops: LifelogOperations, args) -> Result:
    return ops.search(args.term, fetch_limit=args.fetch_limit, **_list_kwargs(args))

def handle_get_date(ops: LifelogOperations, args) -> Result:
    target = parse_date_spec(args.date_spec, _today(args))
    progress_print(f"Fetching logs for date: {target}", args.quiet)
    return ops.list_by_date(target.isoformat(), direction=args.direction, **_list_kwargs(args))

def handle_week(ops: LifelogOperations, args) -> Result:
    start_day, end_day = parse_week_spec(args.week_spec, _today(args).year)
    start, end = day_bounds(start_day, end_day, get_tz(args.timezone or local_timezone_name()))
    progress_print(f"Fetching logs for week: {args.week_spec} ({start_day} to {end_day})", args.quiet)
    return ops.list_by_range(start, end, direction=args.direction or ASC, **_list_kwargs(args))

def handle_period(ops: LifelogOperations, args) -> Result:
    start_day, end_day = get_day_range(_today(args), args.period)
    start, end = day_bounds(start_day, end_day, get_tz(args.timezone or local_timezone_name()))
    return ops.list_by_range(start, end, direction=ASC, **_list_kwargs(args))


# ── CLI Setup ────────────────────────────────────────────────────────────────
def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="limitless", description="Query your Limitless lifelogs")
    parser.add_argument("-v","--verbose", action="store_true", help="Enable verbose output for debugging.")
    parser.add_argument("--quiet", action="store_true", help="Suppress progress messages to stderr.")
    parser.add_argument("--raw", action="store_true", help="Output raw JSON instead of formatted markdown.")
    parser.add_argument("--include-markdown", action=argparse.BooleanOptionalAction, default=True, help="Include markdown in the output.")
    parser.add_argument("--include-headings", action=argparse.BooleanOptionalAction, default=True, help="Include headings in the markdown output.")
    parser.add_argument("--timezone", type=str, help="IANA timezone for dates (default: the local zone).")
    parser.add_argument("--limit", type=int, help="Maximum number of results to return (max 100).")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    subs = parser.add_subparsers(dest="cmd", title="Commands", required=True)

    p_list = subs.add_parser("list", help="List lifelogs for a date, a start/end range, or the most recent ones.")
    list_group = p_list.add_mutually_exclusive_group()
    list_group.add_argument("--date", type=str, metavar="YYYY-MM-DD", help="Fetch logs for a single specific date.")
    list_group.add_argument("--start", type=str, metavar="START", help="Start date or datetime (requires --end).")
    p_list.add_argument("--end", type=str, metavar="END", help="End date or datetime (requires --start).")
    p_list.add_argument("--direction", choices=DIRECTIONS, help="Sort direction (default asc for dates and ranges).")
    p_list.set_defaults(func=handle_list)

    p_get_id = subs.add_parser("get-lifelog-by-id", help="Get a specific lifelog by its ID.")
    p_get_id.add_argument("id", type=str, help="The ID of the lifelog to retrieve.")
    p_get_id.set_defaults(func=handle_get)

    p_recent = subs.add_parser("recent", help="List the most recent lifelogs, newest first.")
    p_recent.set_defaults(func=handle_recent)

    p_search = subs.add_parser("search", help="Keyword search within the most recent lifelogs.")
    p_search.add_argument("term", type=str, help="Text to look for in titles and markdown.")
    p_search.add_argument("--fetch-limit", type=int, default=DEFAULT_SEARCH_FETCH_LIMIT,
                          help=f"How many recent lifelogs to scan (default {DEFAULT_SEARCH_FETCH_LIMIT}, max 100).")
    p_search.set_defaults(func=handle_search)

    p_get_date = subs.add_parser("get", help="Get logs for a date spec (YYYY-MM-DD, M/D, d-N, w-N, m-N, y-N).")
    p_get_date.add_argument("date_spec", type=str, help="The date specification (e.g., 2024-07-15, 7/15, d-1, w-2).")
    p_get_date.add_argument("--direction", choices=DIRECTIONS, help="Sort direction for logs.")
    p_get_date.set_defaults(func=handle_get_date)

    p_week = subs.add_parser("week", help="Get logs for a week number (e.g., 7) or ISO week (e.g., 2024-W07).")
    p_week.add_argument("week_spec", type=str, help="The week specification (number or YYYY-WNN).")
    p_week.add_argument("--direction", choices=DIRECTIONS, help="Sort direction for logs (defaults to asc).")
    p_week.set_defaults(func=handle_week)

    for per in PERIODS:
        p_time = subs.add_parser(per, help=f"Fetch logs for {per.replace('-', ' ')}.")
        p_time.set_defaults(func=handle_period, period=per)

    return parser

def main(argv: Optional[List[str]]=None, ops: Optional[LifelogOperations]=None) -> int:
    args = build_parser().parse_args(argv)
    if ops is None:
        try:
            ops = LifelogOperations.from_env(verbose=args.verbose)
        except ConfigError as e:
            print(f"Error: {e}", file=sys.stderr)
            print(f"Set {API_KEY_ENV_VAR} before running this command.", file=sys.stderr)
            return 1
    try:
        result = args.func(ops, args)
    except InvalidParams as e:
        result = Result.failure(e)
    return emit(result, args)
