"""Command line interface for dllist."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

from rich.console import Console
from rich.markup import escape

from .api import build_lists, verify_list_file
from .config import resolve_config
from .logging import configure_logging
from .packing.errors import DlListError
from .reporting import (
    REPORTER_CHOICES,
    get_reporter,
    make_reporter,
    set_reporter,
    set_verbosity,
)


def _build_cmd(args: argparse.Namespace) -> int:
    cfg = resolve_config(
        args.config,
        catalog=args.catalog,
        metadata=args.metadata,
        output_dir=args.output,
        concurrency=args.jobs,
        regions=args.region or None,
        compress=False if args.no_compress else None,
        generate_titles=False if args.no_titles else None,
    )
    build_lists(cfg)
    return 0


def _verify_cmd(args: argparse.Namespace) -> int:
    info = verify_list_file(args.file, compressed=not args.raw)
    if args.json:
        print(json.dumps(info, indent=2, sort_keys=True))
    return 0


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="dllist", description="Download list generator"
    )
    p.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Increase verbosity (repeatable)",
    )
    p.add_argument(
        "-r",
        "--reporter",
        choices=REPORTER_CHOICES,
        default="plain",
        help="Reporter backend: plain (default), rich, json (JSONL events), silent",
    )
    sub = p.add_subparsers(dest="cmd", required=True)

    b = sub.add_parser("build", help="Build every region/language list")
    b.add_argument("-c", "--config", type=Path, help="JSON/YAML config file")
    b.add_argument("--catalog", type=Path, help="Catalog document")
    b.add_argument("--metadata", type=Path, help="Title metadata document")
    b.add_argument("-o", "--output", type=Path, help="Output root directory")
    b.add_argument(
        "-j", "--jobs", type=int, help="Maximum concurrent builds"
    )
    b.add_argument(
        "--region",
        action="append",
        help="Restrict to a region (JAPAN, NTSC, PAL); repeatable",
    )
    b.add_argument(
        "--no-compress",
        action="store_true",
        help="Store the raw payload instead of LZ10",
    )
    b.add_argument(
        "--no-titles",
        action="store_true",
        help="Skip title generation (empty title table)",
    )
    b.set_defaults(func=_build_cmd)

    v = sub.add_parser("verify", help="Check a stored list's size and CRC")
    v.add_argument("file", type=Path)
    v.add_argument(
        "--raw", action="store_true", help="File is not LZ10 compressed"
    )
    v.add_argument("--json", action="store_true", help="Print header as JSON")
    v.set_defaults(func=_verify_cmd)

    return p


def _report_fatal(exc: DlListError) -> None:
    rep = get_reporter()
    rep.flush()
    console = Console(stderr=True, highlight=False)
    console.print("[bold red]An error has occurred![/]")
    console.print(
        "[bold]dllist has encountered a fatal error![/]\n\n"
        f"[bold]Reason:[/] {escape(str(exc))}"
    )
    details = exc.to_dict()
    rep.error(details.pop("message"), **details)


def main(argv: list[str] | None = None) -> int:
    argv = argv if argv is not None else sys.argv[1:]
    parser = build_parser()
    args = parser.parse_args(argv)
    set_reporter(make_reporter(args.reporter))
    set_verbosity(args.verbose)
    configure_logging(args.verbose)
    try:
        return args.func(args)
    except DlListError as exc:
        _report_fatal(exc)
        return 1


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
