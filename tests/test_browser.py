"""Tests for mdlive.browser — opener selection and launch failures."""

from __future__ import annotations

import subprocess
import webbrowser
from unittest.mock import patch

import pytest

from mdlive.browser import CommandOpener, NullOpener, WebBrowserOpener, select_opener


class TestSelectOpener:
    """select_opener() — one strategy per platform."""

    def test_disabled(self) -> None:
        assert isinstance(select_opener("linux", enabled=False), NullOpener)

    @pytest.mark.parametrize(
        "platform, command",
        [
            ("darwin", ("open",)),
            ("win32", ("cmd", "/C", "start", "")),
            ("linux", ("xdg-open",)),
            ("freebsd14", ("xdg-open",)),
        ],
    )
    def test_platform_commands(self, platform: str, command: tuple[str, ...]) -> None:
        opener = select_opener(platform)
        assert isinstance(opener, CommandOpener)
        assert opener.command == command

    def test_unknown_platform_uses_webbrowser(self) -> None:
        assert isinstance(select_opener("emscripten"), WebBrowserOpener)

    def test_defaults_to_current_platform(self) -> None:
        assert select_opener().name in {"command", "webbrowser"}


class TestCommandOpener:
    def test_launches_detached(self) -> None:
        with patch("mdlive.browser.subprocess.Popen") as popen:
            assert CommandOpener(("xdg-open",)).open("http://127.0.0.1:3030/") is True
        args, kwargs = popen.call_args
        assert args[0] == ["xdg-open", "http://127.0.0.1:3030/"]
        assert kwargs["stdout"] is subprocess.DEVNULL

    def test_missing_command_is_not_fatal(self, capsys: pytest.CaptureFixture[str]) -> None:
        with patch("mdlive.browser.subprocess.Popen", side_effect=FileNotFoundError("nope")):
            assert CommandOpener(("xdg-open",)).open("http://x/") is False
        assert "Could not open browser" in capsys.readouterr().err


class TestWebBrowserOpener:
    def test_success(self) -> None:
        with patch("mdlive.browser.webbrowser.open", return_value=True):
            assert WebBrowserOpener().open("http://x/") is True

    def test_no_browser_available(self, capsys: pytest.CaptureFixture[str]) -> None:
        with patch("mdlive.browser.webbrowser.open", return_value=False):
            assert WebBrowserOpener().open("http://x/") is False
        assert "visit http://x/" in capsys.readouterr().err

    def test_error_is_not_fatal(self) -> None:
        with patch("mdlive.browser.webbrowser.open", side_effect=webbrowser.Error("x")):
            assert WebBrowserOpener().open("http://x/") is False


class TestNullOpener:
    def test_never_opens(self) -> None:
        with patch("mdlive.browser.subprocess.Popen") as popen:
            assert NullOpener().open("http://x/") is False
        popen.assert_not_called()
