"""Browser launch — open the preview URL in the user's browser.

Opening is a capability chosen once at startup:

- ``CommandOpener``: the platform's own launcher (``open`` on macOS,
  ``cmd /C start`` on Windows, ``xdg-open`` on Linux and the BSDs)
- ``WebBrowserOpener``: the standard ``webbrowser`` module, for anything else
- ``NullOpener``: does nothing (``--no-browser``, headless runs)

A failed launch is reported on stderr and never stops the preview.
"""

from __future__ import annotations

import subprocess
import sys
import webbrowser
from typing import Protocol


class BrowserOpener(Protocol):
    """Opens a URL (or file path) in a browser.  Returns ``True`` on success."""

    name: str

    def open(self, url: str) -> bool: ...


class CommandOpener:
    """Launch through an external command, detached from the preview process.

    Args:
        command: Argument prefix; the URL is appended as the last argument.

    """

    name = "command"

    def __init__(self, command: tuple[str, ...]) -> None:
        self.command = command

    def __repr__(self) -> str:
        return f"CommandOpener({self.command!r})"

    def open(self, url: str) -> bool:
        try:
            subprocess.Popen(
                [*self.command, url],
                stdin=subprocess.DEVNULL,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
            )
        except OSError as exc:
            print(f"  Could not open browser ({self.command[0]}): {exc}", file=sys.stderr)
            return False
        return True


class WebBrowserOpener:
    """Launch via the standard library's ``webbrowser`` module."""

    name = "webbrowser"

    def open(self, url: str) -> bool:
        try:
            opened = webbrowser.open(url)
        except webbrowser.Error as exc:
            print(f"  Could not open browser: {exc}", file=sys.stderr)
            return False
        if not opened:
            print(f"  Could not open browser; visit {url}", file=sys.stderr)
        return opened


class NullOpener:
    """Never opens anything."""

    name = "none"

    def open(self, url: str) -> bool:
        return False


def select_opener(platform: str | None = None, *, enabled: bool = True) -> BrowserOpener:
    """Pick the opener for *platform* (defaults to ``sys.platform``)."""
    if not enabled:
        return NullOpener()
    platform = sys.platform if platform is None else platform
    if platform == "darwin":
        return CommandOpener(("open",))
    if platform == "win32":
        # The empty argument is the window title ``start`` expects first.
        return CommandOpener(("cmd", "/C", "start", ""))
    if platform.startswith(("linux", "freebsd", "openbsd", "netbsd")):
        return CommandOpener(("xdg-open",))
    return WebBrowserOpener()
