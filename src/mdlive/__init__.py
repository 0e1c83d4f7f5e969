"""mdlive — live Markdown preview in the browser.

Renders a local Markdown file to HTML and keeps every open browser tab in
sync with the file as it changes on disk.

Quick start::

    import mdlive

    mdlive.preview("README.md")

Two modes::

    mdlive.preview("README.md")          # Watch, re-render, push reloads
    mdlive.render_static("README.md")    # Render once to an HTML file

Built on:

    patitas     Markdown parser   (renders the document)
    chirp       Web framework     (serves the preview)
    pounce      ASGI server       (runs the app)
    watchfiles  File watcher      (detects edits)

"""

# PEP 703: Declare this module as free-threading safe
_Py_mod_gil = 0

__version__ = "0.1.0"
__all__ = [
    "LiveConfig",
    "__version__",
    "preview",
    "render_static",
]


def __getattr__(name: str) -> object:
    """Lazy imports for the public API.

    Keeps ``import mdlive`` fast; chirp and watchfiles load on first use.
    """
    if name == "LiveConfig":
        from mdlive.config import LiveConfig

        return LiveConfig

    if name == "preview":
        from mdlive.app import preview

        return preview

    if name == "render_static":
        from mdlive.app import render_static

        return render_static

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)
