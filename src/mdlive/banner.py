"""Startup banner — status output for the preview.

Prints the document, the URL, and the active watch backend to stderr.
Detects ``NO_COLOR`` / ``TERM`` for safe fallback.
"""

from __future__ import annotations

import os
import sys
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from pathlib import Path

    from mdlive.config import LiveConfig


# ---------------------------------------------------------------------------
# ANSI helpers; honour NO_COLOR (https://no-color.org)
# ---------------------------------------------------------------------------

def _supports_color() -> bool:
    """Return True if the terminal supports ANSI colors."""
    if os.environ.get("NO_COLOR"):
        return False
    if os.environ.get("TERM") == "dumb":
        return False
    return hasattr(sys.stderr, "isatty") and sys.stderr.isatty()


_COLOR = _supports_color()

_RESET = "\033[0m" if _COLOR else ""
_BOLD = "\033[1m" if _COLOR else ""
_DIM = "\033[2m" if _COLOR else ""
_CYAN = "\033[36m" if _COLOR else ""
_GREEN = "\033[32m" if _COLOR else ""
_YELLOW = "\033[33m" if _COLOR else ""


def _clickable_url(url: str) -> str:
    """Wrap *url* in an OSC 8 hyperlink escape if the terminal supports it."""
    if not _COLOR:
        return url
    return f"\033]8;;{url}\033\\{_BOLD}{_CYAN}{url}{_RESET}\033]8;;\033\\"


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def format_banner(
    config: LiveConfig,
    *,
    version: int = 1,
    backend: str | None = None,
    load_ms: float = 0.0,
    warnings: list[str] | None = None,
) -> str:
    """Build the live-preview banner text."""
    from mdlive import __version__

    mode = f"{_GREEN}[live]{_RESET}" if config.live else f"{_YELLOW}[serve]{_RESET}"
    lines: list[str] = [
        "",
        f"  {_BOLD}mdlive{_RESET} {_DIM}v{__version__}{_RESET}  {mode}",
        f"  {_DIM}{'─' * 43}{_RESET}",
    ]

    timing = f" {_DIM}in {load_ms:.0f}ms{_RESET}" if load_ms > 0 else ""
    lines.append(f"  {_DIM}├─{_RESET} {config.source.name} rendered{timing} (revision {version})")
    if config.live:
        watching = backend or config.watch_backend
        lines.append(f"  {_DIM}├─{_RESET} watching: {watching}")
        lines.append(f"  {_DIM}└─{_RESET} reload stream on {_DIM}/events{_RESET}")
    else:
        lines.append(f"  {_DIM}└─{_RESET} not watching (static snapshot)")

    lines.append("")
    lines.append(f"  {_clickable_url(config.url)}")

    if warnings:
        lines.append("")
        lines.extend(f"  {_YELLOW}!{_RESET} {w}" for w in warnings)

    lines.append("")
    return "\n".join(lines)


def print_banner(config: LiveConfig, **kwargs: object) -> None:
    """Print the startup banner to stderr.  Keyword arguments as ``format_banner``."""
    print(format_banner(config, **kwargs), file=sys.stderr)  # type: ignore[arg-type]


def print_static_summary(path: Path) -> None:
    """Print where a one-shot render was written."""
    print(f"  Wrote {_DIM}{path}{_RESET}", file=sys.stderr)
