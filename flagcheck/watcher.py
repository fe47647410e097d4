"""
File system watcher for live flag reconfiguration.

Watches a single config file and, after a quiet period, reports that it
changed. Editors often save in several steps (truncate, write, rename), so
changes are debounced.
"""

import time
from pathlib import Path
from typing import Callable

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer


class ConfigEventHandler(FileSystemEventHandler):
    """
    Tracks modifications of one config file.

    Key behaviors:
    - Ignores every other file in the watched directory
    - Treats a rename onto the config path as a modification
    - Debounces bursts of events into a single change notification
    """

    DEBOUNCE_SECONDS = 0.5

    def __init__(self, config_path: Path, on_change: Callable[[Path], None]):
        super().__init__()
        self.config_path = config_path.resolve()
        self.on_change = on_change
        self.pending_since: float | None = None

    def _matches(self, path: str | bytes) -> bool:
        if isinstance(path, bytes):
            path = path.decode()
        return Path(path).resolve() == self.config_path

    def on_any_event(self, event: FileSystemEvent) -> None:
        if event.is_directory:
            return
        if event.event_type not in ("created", "modified", "moved"):
            return

        paths = [event.src_path]
        if event.event_type == "moved":
            paths = [getattr(event, "dest_path", "")]
        if any(self._matches(p) for p in paths if p):
            self.pending_since = time.monotonic()

    def flush_pending(self, now: float | None = None) -> bool:
        """Fire `on_change` once the debounce window has passed. Returns True if fired."""
        if self.pending_since is None:
            return False
        now = time.monotonic() if now is None else now
        if now - self.pending_since < self.DEBOUNCE_SECONDS:
            return False
        self.pending_since = None
        self.on_change(self.config_path)
        return True


def watch_config(config_path: Path, on_change: Callable[[Path], None]) -> tuple[Observer, ConfigEventHandler]:
    """
    Start watching the config file's directory.

    Returns:
        Tuple of (observer, handler) - caller should call observer.stop() to stop watching
    """
    handler = ConfigEventHandler(config_path, on_change)

    observer = Observer()
    observer.schedule(handler, str(handler.config_path.parent), recursive=False)
    observer.start()

    return observer, handler


def run_watch_loop(config_path: Path, on_change: Callable[[Path], None]) -> None:
    """
    Run the watch loop until interrupted.

    Change callbacks run on this thread, never on the observer thread.
    """
    observer, handler = watch_config(config_path, on_change)

    try:
        while True:
            time.sleep(0.25)
            handler.flush_pending()
    except KeyboardInterrupt:
        pass
    finally:
        observer.stop()
        observer.join()
