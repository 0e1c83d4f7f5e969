"""mdlive configuration.

LiveConfig is the central configuration object, frozen after creation.
"""

from dataclasses import dataclass
from pathlib import Path

from mdlive._errors import ConfigError
from mdlive._types import BackendName

_BACKENDS = frozenset({"auto", "native", "polling"})


@dataclass(frozen=True, slots=True)
class LiveConfig:
    """Configuration for one preview session.

    Attributes:
        source: Path to the Markdown file to preview. Always resolved to an
            absolute path on construction, since watchfiles reports absolute
            paths.
        host: Bind address for the preview server.
        port: Bind port for the preview server.
        live: Watch the file and push reloads. False renders once.
        open_browser: Open the preview in a browser after startup.
        watch_backend: ``auto`` tries native notifications and falls back to
            polling; ``native`` and ``polling`` force one strategy.
        poll_interval_ms: Delay between polls for the polling backend.
        debounce_ms: Window in which watchfiles coalesces bursts of events.
        queue_size: Pending reload signals kept per viewer before the oldest
            is dropped.
        heartbeat_interval: Seconds between SSE keep-alive comments.
        title: Document title. Defaults to the source file name.

    """

    source: Path
    host: str = "127.0.0.1"
    port: int = 3030
    live: bool = True
    open_browser: bool = True
    watch_backend: BackendName = "auto"
    poll_interval_ms: int = 300
    debounce_ms: int = 50
    queue_size: int = 8
    heartbeat_interval: float = 15.0
    title: str | None = None

    def __post_init__(self) -> None:
        if not isinstance(self.source, Path):
            object.__setattr__(self, "source", Path(self.source))
        if not self.source.is_absolute():
            object.__setattr__(self, "source", self.source.resolve())

        if self.watch_backend not in _BACKENDS:
            msg = (
                f"watch_backend must be one of {sorted(_BACKENDS)}, "
                f"got {self.watch_backend!r}"
            )
            raise ConfigError(msg)
        if not 0 <= self.port <= 65535:
            msg = f"port out of range: {self.port}"
            raise ConfigError(msg)
        if not 50 <= self.poll_interval_ms <= 5000:
            msg = f"poll_interval_ms must be between 50 and 5000, got {self.poll_interval_ms}"
            raise ConfigError(msg)
        if self.debounce_ms < 0:
            msg = f"debounce_ms must not be negative, got {self.debounce_ms}"
            raise ConfigError(msg)
        if self.queue_size < 1:
            msg = f"queue_size must be at least 1, got {self.queue_size}"
            raise ConfigError(msg)
        # chirp's EventStream accepts heartbeats between 1s and 300s
        if not 1.0 <= self.heartbeat_interval <= 300.0:
            msg = f"heartbeat_interval must be between 1 and 300, got {self.heartbeat_interval}"
            raise ConfigError(msg)

    @property
    def document_title(self) -> str:
        """Title shown in the browser tab."""
        return self.title or self.source.name

    @property
    def url(self) -> str:
        """Root URL of the preview server."""
        return f"http://{self.host}:{self.port}/"
