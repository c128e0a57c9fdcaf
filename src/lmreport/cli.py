"""CLI entry point for lmreport."""

import argparse
import sys
from pathlib import Path

from rich.console import Console

from lmreport import __version__


def _console(no_color: bool) -> Console:
    return Console(force_terminal=not no_color, no_color=no_color, highlight=False)


def _setup_logging(verbose: bool):
    from lmreport.logging_config import configure_logging
    configure_logging(level="DEBUG" if verbose else "WARNING")


def _load(path: Path, tool, by_tool_dir: bool):
    from lmreport.catalog import load_directory
    from lmreport.parsers.lmstat import parse_report_file

    if path.is_dir():
        return load_directory(path, by_tool_dir=by_tool_dir)
    return parse_report_file(path, tool)


def cmd_report(args) -> int:
    if not args.path.exists():
        print(f"Error: '{args.path}' does not exist", file=sys.stderr)
        return 1

    from lmreport.catalog import filter_by_tool
    from lmreport.report.terminal import render_records

    records = _load(args.path, args.tool, args.by_tool_dir)
    if args.path.is_dir():
        records = filter_by_tool(records, args.tool)

    console = _console(args.no_color)
    render_records(records, console=console)

    if args.output:
        from lmreport.report.json_report import write_json_report
        write_json_report(records, args.output)
        console.print(f"\n[dim]JSON report saved to: {args.output}[/dim]")
    return 0


def cmd_tools(args) -> int:
    if not args.directory.is_dir():
        print(f"Error: '{args.directory}' is not a directory", file=sys.stderr)
        return 1

    from lmreport.catalog import available_tools

    for tool in available_tools(args.directory):
        print(tool)
    return 0


def cmd_feature(args) -> int:
    if not args.directory.is_dir():
        print(f"Error: '{args.directory}' is not a directory", file=sys.stderr)
        return 1

    from lmreport.analysis.usage import feature_usage_detail
    from lmreport.catalog import load_directory
    from lmreport.report.terminal import render_feature_detail

    detail = feature_usage_detail(load_directory(args.directory), args.tool, args.feature)
    console = _console(args.no_color)
    if detail is None:
        console.print(f"[yellow]Feature '{args.feature}' not found for tool '{args.tool}'.[/yellow]")
        return 0

    render_feature_detail(detail, console=console)
    if args.output:
        from lmreport.report.json_report import write_json_report
        write_json_report(detail, args.output)
        console.print(f"\n[dim]JSON report saved to: {args.output}[/dim]")
    return 0


def cmd_watch(args) -> int:
    if not args.directory.is_dir():
        print(f"Error: '{args.directory}' is not a directory", file=sys.stderr)
        return 1

    from lmreport.catalog import load_directory
    from lmreport.report.terminal import render_records
    from lmreport.watcher import ChangeWatcher

    console = _console(args.no_color)
    render_records(load_directory(args.directory), console=console)

    def on_change(changes):
        console.rule(
            f"added {len(changes.added)} | removed {len(changes.removed)} | "
            f"modified {len(changes.modified)}"
        )
        render_records(load_directory(args.directory), console=console)

    watcher = ChangeWatcher(args.directory)
    try:
        watcher.poll(args.interval, on_change, max_polls=args.max_polls)
    except KeyboardInterrupt:
        console.print("\n[dim]Stopped.[/dim]")
    return 0


def cmd_serve(args) -> int:
    try:
        import uvicorn
        from lmreport.api import create_app
        from lmreport.config import get_settings
    except ImportError as e:
        print(f"Error: cannot load the API server: {e}", file=sys.stderr)
        return 1

    overrides = {
        key: value for key, value in (
            ("HOST", args.host), ("PORT", args.port), ("INCOMING_DIR", args.incoming),
        ) if value is not None
    }
    settings = get_settings().model_copy(update=overrides)
    uvicorn.run(create_app(settings), host=settings.HOST, port=settings.PORT, log_config=None)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="lmreport",
        description="Extract license usage from license manager status reports",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("report", help="Parse a report file or directory")
    p.add_argument("path", type=Path, help="Report file or incoming directory")
    p.add_argument("-t", "--tool", default=None,
                   help="Tool name for a single file, or tool filter for a directory")
    p.add_argument("--by-tool-dir", action="store_true",
                   help="Directory holds one subdirectory per tool")
    p.add_argument("-o", "--output", type=Path, default=None, help="Write JSON report to file")
    p.add_argument("--no-color", action="store_true", help="Disable colored terminal output")
    p.add_argument("-v", "--verbose", action="store_true", help="Show detailed parsing progress")
    p.set_defaults(func=cmd_report)

    p = sub.add_parser("tools", help="List the tools found in a directory")
    p.add_argument("directory", type=Path)
    p.add_argument("-v", "--verbose", action="store_true", help="Show detailed parsing progress")
    p.set_defaults(func=cmd_tools)

    p = sub.add_parser("feature", help="Show checkouts of one feature")
    p.add_argument("directory", type=Path)
    p.add_argument("tool")
    p.add_argument("feature")
    p.add_argument("-o", "--output", type=Path, default=None, help="Write JSON report to file")
    p.add_argument("--no-color", action="store_true", help="Disable colored terminal output")
    p.add_argument("-v", "--verbose", action="store_true", help="Show detailed parsing progress")
    p.set_defaults(func=cmd_feature)

    p = sub.add_parser("watch", help="Re-render whenever the directory changes")
    p.add_argument("directory", type=Path)
    p.add_argument("-i", "--interval", type=float, default=5.0, help="Seconds between polls")
    p.add_argument("--max-polls", type=int, default=None, help="Stop after this many polls")
    p.add_argument("--no-color", action="store_true", help="Disable colored terminal output")
    p.add_argument("-v", "--verbose", action="store_true", help="Show detailed parsing progress")
    p.set_defaults(func=cmd_watch)

    p = sub.add_parser("serve", help="Run the HTTP API")
    p.add_argument("--host", default=None)
    p.add_argument("--port", type=int, default=None)
    p.add_argument("--incoming", type=Path, default=None, help="Incoming report directory")
    p.set_defaults(func=cmd_serve, verbose=None)

    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)
    if args.verbose is not None:
        _setup_logging(args.verbose)
    sys.exit(args.func(args))
