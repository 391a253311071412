"""Development server for bookclub.

Serves the built site with live reload for local authoring:
- Injects a reload script into HTML responses.
- Rejects directory listings and missing paths with a 404.
- Watches source folders and reruns the build in a subprocess; connected
  browsers reload only when that build succeeds.

A failed build never touches the served output: each build writes into a
staging directory that replaces the output directory only on success.

Key classes:
- DevServer: Main class for running the development server.
- _ReloadHandler: HTTP request handler that injects reload script and enforces 404s.
- _ChangeHandler: File system event handler for triggering rebuilds.
"""

from __future__ import annotations

import asyncio
import functools
import json
import os
import shutil
import subprocess
import sys
import threading
import time
from http.server import SimpleHTTPRequestHandler, ThreadingHTTPServer
from pathlib import Path

import websockets
from watchdog.events import FileSystemEventHandler
from watchdog.observers import Observer

from .build import CONFIG_FILENAME, load_config, load_manifest, resolve_dir
from .errors import ConfigError
from .utils import display_path


class _ReloadHandler(SimpleHTTPRequestHandler):
    """HTTP request handler that injects live reload script into HTML pages.

    Attributes:
        reload_script: JavaScript code for WebSocket connection to trigger reloads.
    """

    reload_script_template = """
    <script>
    (() => {{
      const ws = new WebSocket('ws://' + location.hostname + ':{ws_port}');
      ws.onmessage = (event) => {{
        const data = JSON.parse(event.data || '{{}}');
        if (data.type === 'reload') location.reload();
      }};
    }})();
    </script>
    """
    reload_script = reload_script_template.format(ws_port=3001)

    def end_headers(self):
        self.send_header("Cache-Control", "no-cache, no-store, must-revalidate")
        super().end_headers()

    def list_directory(self, path):  # pragma: no cover - exercised via send_head
        # Never expose directory listings; treat as missing content.
        return self._serve_404()

    def _serve_404(self):
        self.send_error(404, "File not found")
        return None

    def send_head(self):
        path = self.translate_path(self.path)
        path_obj = Path(path)
        if path_obj.is_dir():
            index_path = path_obj / "index.html"
            if index_path.exists():
                path = str(index_path)
                path_obj = index_path
            else:
                return self._serve_404()
        elif not path_obj.exists():
            return self._serve_404()

        if path.endswith(".html"):
            content = path_obj.read_text(encoding="utf-8")
            if "</body>" in content:
                content = content.replace("</body>", f"{self.reload_script}</body>")
            else:
                content += self.reload_script
            encoded = content.encode("utf-8")
            self.send_response(200)
            self.send_header("Content-type", "text/html; charset=utf-8")
            self.send_header("Content-Length", str(len(encoded)))
            self.end_headers()
            self.wfile.write(encoded)
            return None
        return super().send_head()


class DevServer:
    """Development server with live reload functionality.

    Attributes:
        project_root: Root directory of the project.
        config: Site configuration.
        output_dir: Directory where built site is served.
        ws_port: Port for WebSocket connections.
        http_port: Port for HTTP server.
        _observer: File system observer for changes.
        _ws_clients: Set of connected WebSocket clients.
        _loop: Event loop for WebSocket handling.
    """

    def __init__(
        self, project_root: Path, http_port: int | None = None, ws_port: int | None = None
    ):
        """Initialize the development server.

        Args:
            project_root: Root directory of the project.
            http_port: Optional override for HTTP port.
            ws_port: Optional override for the live reload port.
        """
        self.project_root = project_root
        self.config = load_config(project_root)
        self.output_dir = resolve_dir(project_root, self.config, "output_dir")
        self._staging_dir = self.output_dir.with_name(self.output_dir.name + ".staging")
        self._backup_dir = self.output_dir.with_name(self.output_dir.name + ".previous")
        base_http = int(http_port or self.config.get("port", 3000))
        resolved_ws = (
            ws_port
            if ws_port is not None
            else (
                base_http + 1
                if http_port is not None
                else self.config.get("ws_port", base_http + 1)
            )
        )
        self.ws_port = int(resolved_ws)
        self.http_port = base_http
        self._reload_script = _ReloadHandler.reload_script_template.format(ws_port=self.ws_port)
        self._observer: Observer | None = None
        self._ws_clients: set = set()
        self._loop = asyncio.new_event_loop()
        self._rebuilding = False
        self._last_rebuild_at = 0.0
        self._last_signature: tuple | None = None
        self._debounce_seconds = 0.05
        self._post_build_delay = 0.05

    def start(self) -> None:  # pragma: no cover - integration path
        self._last_signature = self._compute_signature()
        if not self.run_build():
            print("Initial build failed; fix the error above and save to retry.")
        self.output_dir.mkdir(parents=True, exist_ok=True)
        threading.Thread(target=self._start_http, daemon=True).start()
        threading.Thread(target=self._start_ws, daemon=True).start()
        self._start_watcher()
        try:
            while True:
                time.sleep(1)
        except KeyboardInterrupt:
            self.stop()

    def stop(self) -> None:
        if self._observer:
            self._observer.stop()
            self._observer.join()
        self._loop.call_soon_threadsafe(self._loop.stop)

    def _start_http(self) -> None:  # pragma: no cover - integration path
        handler_cls = type(
            "_ReloadHandlerWithPort",
            (_ReloadHandler,),
            {"reload_script": self._reload_script},
        )
        handler = functools.partial(handler_cls, directory=str(self.output_dir))
        httpd = ThreadingHTTPServer(("", self.http_port), handler)
        print(f"Serving {self.output_dir} at http://localhost:{self.http_port}")
        httpd.serve_forever()

    def _start_ws(self) -> None:  # pragma: no cover - integration path
        asyncio.set_event_loop(self._loop)
        try:
            self._loop.run_until_complete(self._run_ws_server())
        except OSError as exc:
            print(f"WebSocket server failed to start (port {self.ws_port}): {exc}")
            return

    async def _run_ws_server(self) -> None:  # pragma: no cover - integration path
        async with websockets.serve(self._ws_handler, "0.0.0.0", self.ws_port):
            await asyncio.Future()  # Run forever

    async def _ws_handler(self, websocket):
        self._ws_clients.add(websocket)
        try:
            await websocket.wait_closed()
        finally:
            self._ws_clients.discard(websocket)

    def _broadcast_reload(self):
        message = json.dumps({"type": "reload"})
        asyncio.run_coroutine_threadsafe(self._async_broadcast(message), self._loop)

    async def _async_broadcast(self, message: str):
        stale = set()
        for ws in self._ws_clients:
            try:
                await ws.send(message)
            except Exception:
                stale.add(ws)
        for ws in stale:
            self._ws_clients.discard(ws)

    def watch_paths(self) -> list[Path]:
        """Directories watched recursively for source changes.

        Covers the folders holding manifest documents, the meetings folder and
        the assets folder. The project root itself is watched separately and
        non-recursively, for the configuration file.
        """
        try:
            entries = load_manifest(self.project_root, self.config)
        except ConfigError as exc:
            print(f"Ignoring manifest while watching: {exc.message}")
            entries = []
        candidates = [(self.project_root / entry.source).parent for entry in entries]
        candidates.append(resolve_dir(self.project_root, self.config, "meetings_dir"))
        candidates.append(resolve_dir(self.project_root, self.config, "assets_dir"))
        paths: list[Path] = []
        for candidate in candidates:
            if candidate == self.project_root or candidate in paths:
                continue
            if candidate.is_dir():
                paths.append(candidate)
        return paths

    def _start_watcher(self) -> None:
        handler = _ChangeHandler(self)
        observer = Observer()
        for watch_path in self.watch_paths():
            observer.schedule(handler, str(watch_path), recursive=True)
        # Watch root for bookclub.yaml and root-level documents
        observer.schedule(handler, str(self.project_root), recursive=False)
        observer.start()
        self._observer = observer

    def build_command(self, output_dir: Path) -> list[str]:
        return [sys.executable, "-m", "bookclub", "build", "--output-dir", str(output_dir)]

    def run_build(self) -> bool:
        """Run one build in a subprocess and publish it on success.

        Returns:
            True if the build succeeded and the output directory was replaced.
        """
        staging = self._prepare_staging_dir()
        result = subprocess.run(
            self.build_command(staging),
            cwd=self.project_root,
            capture_output=True,
            text=True,
        )
        if result.stdout.strip():
            print(result.stdout.rstrip())
        if result.returncode != 0:
            print(f"Build failed (exit {result.returncode}); keeping previous output.")
            if result.stderr.strip():
                print(result.stderr.rstrip())
            shutil.rmtree(staging, ignore_errors=True)
            return False
        self._activate_staging(staging)
        return True

    def rebuild(self) -> None:
        """Rebuild until the sources stop changing.

        Events arriving during a build are not lost: once a build finishes the
        source signature is taken again, and any edit made meanwhile triggers
        one more build.
        """
        if self._rebuilding:
            return
        wait = self._debounce_seconds - (time.time() - self._last_rebuild_at)
        if wait > 0:
            time.sleep(wait)
        signature = self._compute_signature()
        if signature is not None and signature == self._last_signature:
            return
        self._rebuilding = True
        try:
            while True:
                print("Change detected; rebuilding...")
                succeeded = self.run_build()
                self._last_signature = signature
                if succeeded:
                    if self._post_build_delay:
                        time.sleep(self._post_build_delay)
                    self._broadcast_reload()
                signature = self._compute_signature()
                if signature == self._last_signature:
                    break
        finally:
            self._rebuilding = False
            self._last_rebuild_at = time.time()

    def _compute_signature(self) -> tuple | None:
        entries: list[tuple] = []
        files: list[Path] = [self.project_root / CONFIG_FILENAME]
        for root in self.watch_paths():
            files.extend(sorted(root.rglob("*")))
        for path in files:
            if path.is_dir():
                continue
            try:
                stat = path.stat()
            except OSError:
                continue
            rel = display_path(path, self.project_root)
            entries.append((str(rel), stat.st_mtime_ns, stat.st_size))
        return tuple(entries) if entries else None

    def _prepare_staging_dir(self) -> Path:
        staging = self._staging_dir
        if staging.exists():
            shutil.rmtree(staging)
        staging.mkdir(parents=True, exist_ok=True)
        return staging

    def _activate_staging(self, staging: Path) -> None:
        target = self.output_dir
        backup = self._backup_dir
        if backup.exists():
            shutil.rmtree(backup)
        # os.replace cannot overwrite a non-empty directory; move it aside first.
        if target.exists():
            os.replace(target, backup)
        os.replace(staging, target)
        shutil.rmtree(backup, ignore_errors=True)


class _ChangeHandler(FileSystemEventHandler):
    def __init__(self, server: DevServer):
        super().__init__()
        self.server = server

    def on_any_event(self, event):
        if event.is_directory:
            return
        path = Path(event.src_path)
        # Skip changes in output/staging directories
        for ignored in (
            self.server.output_dir,
            getattr(self.server, "_staging_dir", None),
            getattr(self.server, "_backup_dir", None),
        ):
            if not ignored:
                continue
            try:
                path.relative_to(ignored)
                return
            except ValueError:
                pass
        self.server.rebuild()
