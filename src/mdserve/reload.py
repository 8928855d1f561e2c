"""
Live reload: watch the serving root and tell connected pages to refresh.
"""

import logging
import os
import threading
from typing import Iterator, Optional

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

from .config import RELOAD_KEEPALIVE

logger = logging.getLogger(__name__)


class ReloadNotifier:
    """A change counter that request threads can block on."""

    def __init__(self):
        self._condition = threading.Condition()
        self._version = 0
        self._closed = False

    @property
    def version(self) -> int:
        with self._condition:
            return self._version

    @property
    def closed(self) -> bool:
        with self._condition:
            return self._closed

    def notify(self):
        with self._condition:
            self._version += 1
            self._condition.notify_all()

    def close(self):
        """Wake all waiters and make further waits return immediately."""
        with self._condition:
            self._closed = True
            self._condition.notify_all()

    def wait(self, version: int, timeout: Optional[float] = None) -> int:
        """Block until the counter moves past `version`, the timeout expires or the notifier closes."""
        with self._condition:
            self._condition.wait_for(lambda: self._version != version or self._closed, timeout=timeout)
            return self._version

    def stream(self, keepalive: float = RELOAD_KEEPALIVE) -> Iterator[str]:
        """Server-Sent Events stream emitting 'reload' after each change."""
        version = self.version
        yield "retry: 1000\n\n"
        while not self.closed:
            current = self.wait(version, timeout=keepalive)
            if current != version:
                version = current
                yield "data: reload\n\n"
            else:
                yield ": keepalive\n\n"


class ChangeHandler(FileSystemEventHandler):
    """Forwards file changes under the root to a notifier."""

    def __init__(self, root_directory: str, notifier: ReloadNotifier):
        super().__init__()
        self.root_directory = root_directory
        self.notifier = notifier

    def should_notify(self, event: FileSystemEvent) -> bool:
        if event.is_directory:
            return False
        path = os.fsdecode(event.src_path)
        relative = os.path.relpath(path, self.root_directory)
        return not any(part.startswith('.') for part in relative.split(os.sep))

    def on_any_event(self, event: FileSystemEvent):
        if event.event_type in ('opened', 'closed', 'closed_no_write'):
            return
        if self.should_notify(event):
            logger.debug(f"Change detected: {event.event_type} {event.src_path}")
            self.notifier.notify()


class DirectoryWatcher:
    """Runs a watchdog observer over the serving root."""

    def __init__(self, root_directory: str, notifier: ReloadNotifier):
        self.root_directory = root_directory
        self.notifier = notifier
        self.observer = None

    def start(self) -> bool:
        """
        Start watching. Failures are logged and reported as False so the
        server keeps running without live reload.
        """
        observer = Observer()
        observer.daemon = True
        try:
            observer.schedule(ChangeHandler(self.root_directory, self.notifier), self.root_directory, recursive=True)
            observer.start()
        except (OSError, RuntimeError) as e:
            logger.warning(f"Live reload disabled, could not watch {self.root_directory}: {e}")
            return False

        self.observer = observer
        logger.info(f"Watching {self.root_directory} for changes")
        return True

    def stop(self):
        self.notifier.close()
        if self.observer is not None:
            self.observer.stop()
            self.observer.join(timeout=5)
            self.observer = None
