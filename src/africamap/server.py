"""Local development server hosting the responsive map page."""

from __future__ import annotations

import http.server
import json
import logging
import threading
import webbrowser
from typing import Any
from urllib.parse import parse_qs, urlparse

from .app import bootstrap
from .config import AppConfig
from .controller import CallbackNotifier, ResponsiveController
from .surface import MapContainer

_LOGGER = logging.getLogger("africamap.server")

_HOST_PAGE = """<!doctype html>
<html lang='en'>
<head>
  <meta charset='utf-8'>
  <meta name='viewport' content='width=device-width, initial-scale=1'>
  <title>Central Africa</title>
  <style>
    body { font-family: Helvetica, Arial, sans-serif; margin: 0 auto; max-width: 960px; padding: 16px; }
    #map { width: 100%; }
  </style>
</head>
<body>
  <div id='map'></div>
  <script>
    var revision = -1;
    var container = document.getElementById('map');
    function reportWidth() {
      fetch('/resize?width=' + container.clientWidth, {method: 'POST'});
    }
    function poll() {
      fetch('/revision').then(function (r) { return r.json(); }).then(function (data) {
        if (data.revision === revision) { return; }
        revision = data.revision;
        fetch('/map.svg').then(function (r) { return r.text(); }).then(function (svg) {
          container.innerHTML = svg;
        });
      });
    }
    window.addEventListener('resize', reportWidth);
    reportWidth();
    setInterval(poll, 300);
  </script>
</body>
</html>
"""


class MapSession:
    """Owns the container and controller behind the HTTP handler."""

    def __init__(self, cfg: AppConfig) -> None:
        self._revision = 0
        self._revision_lock = threading.Lock()
        self.container = MapContainer(
            cfg.viewport.container_selector,
            width=cfg.viewport.default_width,
        )
        self.controller: ResponsiveController = bootstrap(
            cfg,
            self.container,
            CallbackNotifier(self._bump_revision),
        )

    @property
    def revision(self) -> int:
        with self._revision_lock:
            return self._revision

    def _bump_revision(self) -> None:
        with self._revision_lock:
            self._revision += 1

    def resize(self, width: float) -> None:
        self.container.width = width
        self.controller.handle_resize()

    def status(self) -> dict[str, Any]:
        layout = self.controller.layout
        return {
            "revision": self.revision,
            "width": self.container.width,
            "mobile": self.controller.is_mobile,
            "layout": layout.to_dict() if layout is not None else None,
        }


class _Handler(http.server.BaseHTTPRequestHandler):
    session: MapSession

    def do_GET(self) -> None:  # noqa: N802
        path = urlparse(self.path).path
        if path in {"/", "/index.html"}:
            self._send(200, "text/html; charset=utf-8", _HOST_PAGE)
        elif path == "/map.svg":
            self._send(200, "image/svg+xml; charset=utf-8", self.session.controller.svg_markup())
        elif path == "/revision":
            self._send(200, "application/json", json.dumps(self.session.status()))
        else:
            self._send(404, "text/plain; charset=utf-8", "Not found")

    def do_POST(self) -> None:  # noqa: N802
        parsed = urlparse(self.path)
        if parsed.path != "/resize":
            self._send(404, "text/plain; charset=utf-8", "Not found")
            return
        raw = parse_qs(parsed.query).get("width", [""])[0]
        try:
            width = float(raw)
        except ValueError:
            self._send(400, "text/plain; charset=utf-8", f"Invalid width: {raw!r}")
            return
        self.session.resize(width)
        self._send(204, "text/plain; charset=utf-8", "")

    def log_message(self, format: str, *args: Any) -> None:  # noqa: A002
        _LOGGER.debug("%s - %s", self.address_string(), format % args)

    def _send(self, status: int, content_type: str, body: str) -> None:
        payload = body.encode("utf-8")
        self.send_response(status)
        if status != 204:
            self.send_header("Content-Type", content_type)
            self.send_header("Content-Length", str(len(payload)))
        self.end_headers()
        if payload and status != 204:
            self.wfile.write(payload)


def serve(cfg: AppConfig, *, open_browser: bool = True) -> int:
    session = MapSession(cfg)
    handler = type("MapHandler", (_Handler,), {"session": session})

    for port in range(cfg.serve.port_start, cfg.serve.port_end + 1):
        try:
            httpd = http.server.ThreadingHTTPServer((cfg.serve.host, port), handler)
        except OSError as exc:
            _LOGGER.warning("Port %d unavailable (%s); trying %d", port, exc, port + 1)
            continue
        url = f"http://{cfg.serve.host}:{port}"
        _LOGGER.info("Serving responsive map at %s", url)
        if open_browser:
            webbrowser.open(url)
        try:
            httpd.serve_forever()
        except KeyboardInterrupt:
            _LOGGER.info("Server stopped.")
        finally:
            session.controller.dispose()
            httpd.server_close()
        return 0

    session.controller.dispose()
    _LOGGER.error(
        "Could not find an open port between %d and %d.",
        cfg.serve.port_start,
        cfg.serve.port_end,
    )
    return 1
