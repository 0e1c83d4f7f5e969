"""Tests for mdlive._errors."""

from mdlive._errors import (
    ConfigError,
    MdliveError,
    NotReadyError,
    ServeError,
    SourceError,
    WatchError,
)


class TestErrorHierarchy:
    """All mdlive errors inherit from MdliveError."""

    def test_mdlive_error_is_exception(self) -> None:
        assert issubclass(MdliveError, Exception)

    def test_startup_errors_inherit(self) -> None:
        for error_cls in (ConfigError, SourceError, WatchError, ServeError):
            assert issubclass(error_cls, MdliveError)

    def test_not_ready_inherits(self) -> None:
        assert issubclass(NotReadyError, MdliveError)

    def test_catch_all_mdlive_errors(self) -> None:
        """All specific errors are catchable via MdliveError."""
        for error_cls in (ConfigError, SourceError, WatchError, ServeError, NotReadyError):
            try:
                raise error_cls("test")
            except MdliveError:
                pass
