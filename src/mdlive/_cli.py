"""mdlive CLI — mdlive FILE / mdlive --static FILE.

Entry point for the ``mdlive`` command-line interface.
"""

from __future__ import annotations

import argparse
import sys


def _build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for the mdlive CLI."""
    parser = argparse.ArgumentParser(
        prog="mdlive",
        description="Live Markdown preview in the browser.",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {_get_version()}",
    )
    parser.add_argument(
        "file",
        nargs="?",
        default=None,
        help="Markdown file to preview ('-' or omitted with --static reads stdin)",
    )
    parser.add_argument(
        "--static", action="store_true", help="Render once to an HTML file and open it",
    )
    parser.add_argument("--output", default=None, help="Output path for --static")
    parser.add_argument("--host", default=None, help="Bind address (default 127.0.0.1)")
    parser.add_argument("--port", type=int, default=None, help="Bind port (default 3030)")
    parser.add_argument(
        "--no-browser", action="store_true", help="Do not open a browser window",
    )
    parser.add_argument(
        "--polling", action="store_true", help="Poll for changes instead of OS notifications",
    )
    parser.add_argument(
        "--poll-interval", type=int, default=None, metavar="MS",
        help="Polling interval in milliseconds (default 300)",
    )
    parser.add_argument(
        "--config-dir", default=None, help="Directory holding mdlive.yaml / mdlive.toml",
    )

    return parser


def _get_version() -> str:
    """Get the package version."""
    from mdlive import __version__

    return __version__


def _run_static(args: argparse.Namespace) -> None:
    """Render once, open the file, wait for Enter, then clean up."""
    from mdlive.app import render_static
    from mdlive.banner import print_static_summary
    from mdlive.browser import select_opener

    if args.file in (None, "-"):
        path = render_static(text=sys.stdin.read(), output=args.output)
    else:
        path = render_static(args.file, output=args.output)
    print_static_summary(path)

    if args.no_browser:
        return

    select_opener().open(path.as_uri())
    if args.output is not None:
        return

    # The temp file must outlive the browser loading it.
    print("  Press Enter to exit...", file=sys.stderr)
    try:
        sys.stdin.readline()
    finally:
        path.unlink(missing_ok=True)


def _run_preview(args: argparse.Namespace) -> None:
    from mdlive.app import preview

    preview(
        args.file,
        host=args.host,
        port=args.port,
        open_browser=False if args.no_browser else None,
        watch_backend="polling" if args.polling else None,
        poll_interval_ms=args.poll_interval,
        config_dir=args.config_dir,
    )


def main(argv: list[str] | None = None) -> None:
    """CLI entry point."""
    from mdlive._errors import MdliveError

    parser = _build_parser()
    args = parser.parse_args(argv)

    if not args.static and args.file in (None, "-"):
        print("mdlive: no input file given (stdin needs --static)", file=sys.stderr)
        sys.exit(1)

    try:
        if args.static:
            _run_static(args)
        else:
            _run_preview(args)
    except MdliveError as exc:
        print(f"mdlive: {exc}", file=sys.stderr)
        sys.exit(1)
    except KeyboardInterrupt:
        sys.exit(0)


if __name__ == "__main__":
    main()
