"""Shared type definitions for mdlive."""

from collections.abc import Callable
from typing import Literal

# Classification of a filesystem event for the watched document
type WatchKind = Literal["modified", "other"]

# Which watch strategy to use
type BackendName = Literal["auto", "native", "polling"]

# Rendered HTML fragment (no <html>/<body> wrapper)
type HtmlFragment = str

# Markdown source text -> HTML fragment
type RenderFunc = Callable[[str], HtmlFragment]
