"""
File Watch Module - Change notifications for individual log files

watchdog observes directories, so every watched file schedules its parent
directory once and events are filtered down to the watched paths.
"""
import logging
import os
import threading
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Set

from watchdog.events import FileSystemEventHandler
from watchdog.observers import Observer

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class WatchResult:
    success: bool
    already_watching: bool = False
    error: Optional[str] = None


def _normalize(path: str) -> str:
    return os.path.normcase(os.path.abspath(os.fsdecode(path)))


class LogFileEventHandler(FileSystemEventHandler):
    """Forwards modified/created/moved-to events of watched files"""

    def __init__(self, callback: Optional[Callable[[str], None]] = None):
        super().__init__()
        self.callback = callback
        # normalized path -> path as given by the caller
        self.watched_files: Dict[str, str] = {}
        self._lock = threading.Lock()

    def add_file(self, file_path: str) -> None:
        with self._lock:
            self.watched_files[_normalize(file_path)] = file_path

    def remove_file(self, file_path: str) -> None:
        with self._lock:
            self.watched_files.pop(_normalize(file_path), None)

    def _process_event(self, path) -> None:
        with self._lock:
            original = self.watched_files.get(_normalize(path))
        if original is not None and self.callback:
            self.callback(original)

    def on_modified(self, event):
        if not event.is_directory:
            self._process_event(event.src_path)

    def on_created(self, event):
        # rotation: a new file replaced the watched one
        if not event.is_directory:
            self._process_event(event.src_path)

    def on_moved(self, event):
        if not event.is_directory:
            self._process_event(event.dest_path)


class LogFileWatcher:
    """
    Watch individual log files and notify listeners on change

    Callbacks run on the watchdog observer thread.
    """

    def __init__(self):
        self.observer = Observer()
        self.event_handler = LogFileEventHandler(callback=self._dispatch)
        self.watched_directories: Dict[str, object] = {}  # {directory: watchdog_schedule_object}
        self._files_per_directory: Dict[str, Set[str]] = {}
        self._listeners: List[Callable[[str], None]] = []
        self._lock = threading.Lock()

    def watch_file(self, file_path: str) -> WatchResult:
        """Start delivering change notifications for file_path"""
        key = _normalize(file_path)
        directory = os.path.dirname(key)

        # The observer takes its own lock in schedule/unschedule and holds it
        # while dispatching to listeners, so self._lock is never held across
        # observer calls.
        with self._lock:
            if key in self.event_handler.watched_files:
                return WatchResult(success=True, already_watching=True)
            observer = self.observer
            needs_schedule = directory not in self.watched_directories

        if not os.path.isdir(directory):
            logger.warning("Cannot watch %s: directory not found", file_path)
            return WatchResult(success=False, error=f"Directory not found: {directory}")

        schedule_object = None
        if needs_schedule:
            try:
                schedule_object = observer.schedule(self.event_handler, directory, recursive=False)
            except OSError as e:
                logger.warning("Cannot watch %s: %s", file_path, e)
                return WatchResult(success=False, error=str(e))

        duplicate = None
        with self._lock:
            if schedule_object is not None:
                if directory in self.watched_directories:
                    # scheduled concurrently by another caller
                    duplicate = schedule_object
                else:
                    self.watched_directories[directory] = schedule_object
            self._files_per_directory.setdefault(directory, set()).add(key)
            self.event_handler.add_file(file_path)
            if not observer.is_alive():
                observer.start()

        if duplicate is not None:
            observer.unschedule(duplicate)

        logger.info("Started watching: %s", file_path)
        return WatchResult(success=True)

    def unwatch_file(self, file_path: str) -> WatchResult:
        """Stop notifications for file_path"""
        key = _normalize(file_path)
        directory = os.path.dirname(key)

        schedule_object = None
        with self._lock:
            if key not in self.event_handler.watched_files:
                return WatchResult(success=False, error="Watcher not found")

            self.event_handler.remove_file(file_path)
            files = self._files_per_directory.get(directory, set())
            files.discard(key)

            if not files:
                self._files_per_directory.pop(directory, None)
                schedule_object = self.watched_directories.pop(directory, None)
            observer = self.observer

        if schedule_object is not None:
            observer.unschedule(schedule_object)

        logger.info("Stopped watching: %s", file_path)
        return WatchResult(success=True)

    def on_file_changed(self, callback: Callable[[str], None]) -> None:
        """Register callback(path) for changes of any watched file"""
        with self._lock:
            self._listeners.append(callback)

    def remove_listener(self, callback: Optional[Callable[[str], None]] = None) -> None:
        """Remove one listener, or all of them when callback is None"""
        with self._lock:
            if callback is None:
                self._listeners.clear()
            elif callback in self._listeners:
                self._listeners.remove(callback)

    def list_watched_files(self) -> List[str]:
        return list(self.event_handler.watched_files.values())

    def _dispatch(self, file_path: str) -> None:
        with self._lock:
            listeners = list(self._listeners)
        for listener in listeners:
            try:
                listener(file_path)
            except Exception:
                logger.exception("File change listener failed for %s", file_path)

    def stop_all(self) -> None:
        """Stop the observer and forget every watched file"""
        with self._lock:
            observer = self.observer
            if observer.is_alive():
                # a stopped observer thread cannot be restarted
                self.observer = Observer()
            self.watched_directories.clear()
            self._files_per_directory.clear()
            for path in list(self.event_handler.watched_files.values()):
                self.event_handler.remove_file(path)

        if observer.is_alive():
            observer.stop()
            observer.join()
        logger.info("All file watching stopped.")
