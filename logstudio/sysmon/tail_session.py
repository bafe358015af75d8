"""
Tail Session Module - Keeps one log file's entries in sync with the disk

Ties together the file reader, the watchdog watcher and the incremental
loader. Change notifications that arrive while a reload is running are
coalesced into a single follow-up reload, so the loader never sees two
overlapping cycles.

Reloads triggered by the watcher run on a worker thread owned by the
session, never on the watchdog observer thread: the observer holds its own
lock while delivering events, and stopping a watch needs that lock.
"""
import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Optional, Tuple

from logstudio.core.incremental import IncrementalLoader, ReloadResult
from logstudio.core.log_parser import LogEntry
from logstudio.core.schema import LogSchema, DEFAULT_SCHEMA

from .file_watch import LogFileWatcher
from .log_reader import read_log_file

logger = logging.getLogger(__name__)


class TailSession:
    """Incrementally loaded view of a single log file"""

    def __init__(
        self,
        file_path: str,
        schema: LogSchema = DEFAULT_SCHEMA,
        reader: Callable = read_log_file,
        on_update: Optional[Callable[[ReloadResult], None]] = None,
    ):
        """
        Initialize a tail session

        Args:
            file_path: Log file to follow
            schema: Parsing schema
            reader: Callable returning a ReadResult for a path
            on_update: Called with every ReloadResult that changed the entries
        """
        self.file_path = file_path
        self.loader = IncrementalLoader(schema)
        self.reader = reader
        self.on_update = on_update

        self.watcher: Optional[LogFileWatcher] = None
        self._executor: Optional[ThreadPoolExecutor] = None

        # _state_lock guards the coalescing flags, _load_lock the loader
        self._state_lock = threading.Lock()
        self._load_lock = threading.Lock()
        self._running = False
        self._pending = False

    @property
    def entries(self) -> Tuple[LogEntry, ...]:
        return self.loader.entries

    def refresh(self) -> Optional[ReloadResult]:
        """
        Run a reload cycle, or queue one if a cycle is in flight

        Returns:
            Result of the last cycle this call ran, None when it was coalesced
            into a cycle already running on another thread
        """
        with self._state_lock:
            if self._running:
                self._pending = True
                return None
            self._running = True

        result = None
        try:
            while True:
                result = self._reload_once()
                with self._state_lock:
                    if not self._pending:
                        self._running = False
                        break
                    self._pending = False
        except BaseException:
            with self._state_lock:
                self._running = False
                self._pending = False
            raise

        return result

    def _reload_once(self) -> ReloadResult:
        with self._load_lock:
            read = self.reader(self.file_path)
            if not read.success:
                return self.loader.reload_failed(read.error or "read failed")
            result = self.loader.reload(read.content)

        if result.changed and self.on_update:
            self.on_update(result)
        return result

    def set_schema(self, schema: LogSchema) -> Optional[ReloadResult]:
        """Switch schema and re-parse the whole file"""
        with self._load_lock:
            self.loader.set_schema(schema)
        return self.refresh()

    def start(self, watcher: LogFileWatcher) -> bool:
        """
        Load the file and follow changes through watcher

        Returns:
            True when the watch was registered
        """
        self.refresh()
        self.watcher = watcher
        with self._state_lock:
            if self._executor is None:
                self._executor = ThreadPoolExecutor(max_workers=1,
                                                    thread_name_prefix="tail-session")
        watcher.on_file_changed(self._on_file_changed)
        result = watcher.watch_file(self.file_path)
        if not result.success:
            logger.warning("Live updates disabled for %s: %s", self.file_path, result.error)
        return result.success

    def stop(self) -> None:
        """Stop following changes; an update already running is not waited for"""
        if self.watcher is None:
            return
        self.watcher.remove_listener(self._on_file_changed)
        self.watcher.unwatch_file(self.file_path)
        self.watcher = None

        with self._state_lock:
            executor, self._executor = self._executor, None
        if executor is not None:
            executor.shutdown(wait=False, cancel_futures=True)

    def _on_file_changed(self, file_path: str) -> None:
        # runs on the watchdog observer thread: hand off, do not reload here
        if file_path != self.file_path:
            return

        with self._state_lock:
            executor = self._executor
            if executor is None:
                return
            executor.submit(self._background_refresh)

    def _background_refresh(self) -> None:
        try:
            self.refresh()
        except Exception:
            logger.exception("Background reload of %s failed", self.file_path)
