"""Reload client — the browser half of the push channel.

A small script embedded in every live document.  It opens an EventSource on
the server's push endpoint and reloads the page whenever a ``reload``
directive arrives.  If the connection drops (server restarted, laptop
asleep), EventSource reconnects on its own; the page reloads once the
stream is back so nothing published in the meantime is missed.
"""

from __future__ import annotations

from mdlive.reactive.broadcaster import RELOAD

SSE_ENDPOINT = "/events"

# Native EventSource only; no client-side dependencies.
_RELOAD_SCRIPT = """\
<script data-mdlive-reload>
(function() {
  var src = new EventSource('%(endpoint)s');
  var dropped = false;
  src.onmessage = function(e) {
    if (e.data === '%(directive)s') location.reload();
  };
  src.onopen = function() {
    if (dropped) location.reload();
  };
  src.onerror = function() {
    dropped = true;
  };
})();
</script>
""" % {"endpoint": SSE_ENDPOINT, "directive": RELOAD}


def inject_reload_client(body: str) -> str:
    """Insert the reload script before the last ``</body>`` (or append if none).

    The last tag is used because a rendered fragment may itself contain raw
    ``</body>`` text.
    """
    for tag in ("</body>", "</html>"):
        head, found, tail = body.rpartition(tag)
        if found:
            return f"{head}{_RELOAD_SCRIPT}{tag}{tail}"
    return body + _RELOAD_SCRIPT
