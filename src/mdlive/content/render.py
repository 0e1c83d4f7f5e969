"""Markdown rendering via Patitas.

The render function is pure: Markdown text in, HTML fragment out.  It never
raises.  Input Patitas rejects (for example adversarially deep nesting) is
shown as escaped preformatted text instead of failing the whole render.
"""

from __future__ import annotations

import html
from functools import cache

from patitas import Markdown
from patitas.errors import PatitasError

# GitHub-flavoured extensions: tables, strikethrough,
# task lists, footnotes, plus inline/block math.
PLUGINS: tuple[str, ...] = ("table", "strikethrough", "task_lists", "footnotes", "math")


@cache
def _markdown() -> Markdown:
    """Shared Markdown processor (immutable config, safe across threads)."""
    return Markdown(plugins=list(PLUGINS))


def render_markdown(source: str) -> str:
    """Render Markdown *source* to an HTML fragment."""
    try:
        return _markdown()(source)
    except (PatitasError, RecursionError):
        return f"<pre>{html.escape(source)}</pre>\n"
