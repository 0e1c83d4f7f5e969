"""Document template — wraps a rendered fragment in a complete HTML page.

The page embeds the packaged stylesheet inline so a static preview file is
self-contained, and in live mode carries the reload client.
"""

from __future__ import annotations

import html
from functools import cache
from pathlib import Path

from mdlive.reactive.hmr import inject_reload_client

_TEMPLATE = """\
<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="UTF-8">
<meta name="viewport" content="width=device-width, initial-scale=1.0">
<meta name="generator" content="mdlive">
<title>{title}</title>
<style>
{css}
</style>
</head>
<body>
<article class="markdown-body">
{fragment}
</article>
</body>
</html>
"""


def _theme_path() -> Path:
    """Return the absolute path to the bundled theme directory."""
    return Path(__file__).parent / "theme"


@cache
def default_css() -> str:
    """The bundled stylesheet (read once)."""
    return (_theme_path() / "style.css").read_text(encoding="utf-8")


def build_document(
    title: str,
    fragment: str,
    *,
    live: bool,
    css: str | None = None,
) -> str:
    """Return a complete HTML document.

    Args:
        title: Document title, usually the source file name.  Escaped.
        fragment: Rendered HTML body, inserted as-is.
        live: Embed the reload client.
        css: Stylesheet to embed instead of the bundled theme.

    """
    document = _TEMPLATE.format(
        title=html.escape(title),
        css=default_css() if css is None else css,
        fragment=fragment,
    )
    return inject_reload_client(document) if live else document
