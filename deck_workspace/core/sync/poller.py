"""
File Change Poller.

Detects external edits to slide files by periodically comparing modification
timestamps, for environments without a native filesystem-event API.

A ``WatchSession`` owns the watch entries for one (project root, watched
paths) pair and carries the cancellation token for that pair. The
``FileChangePoller`` schedules one session at a time on the running event
loop and replaces it whenever the watched pair changes.
"""

import asyncio
import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Awaitable, Callable, Dict, List, Optional, Sequence, Tuple, Any, Union

from ..errors import WatchIOError
from .events import FileChangeEvent, WatchEntry, WatchState

logger = logging.getLogger(__name__)

TimestampFetcher = Callable[[str], Awaitable[Optional[float]]]
ChangeCallback = Callable[[str], None]
ErrorReporter = Callable[[str], None]

DEFAULT_POLL_INTERVAL_MS = 2000


@dataclass
class SessionMetrics:
    """Counters for one watch session"""
    ticks: int = 0
    checks: int = 0
    changes_detected: int = 0
    check_errors: int = 0
    started_at: datetime = field(default_factory=datetime.now)
    last_tick_at: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "ticks": self.ticks,
            "checks": self.checks,
            "changes_detected": self.changes_detected,
            "check_errors": self.check_errors,
            "started_at": self.started_at.isoformat(),
            "last_tick_at": self.last_tick_at.isoformat() if self.last_tick_at else None
        }


class WatchSession:
    """
    Timestamp baselines and cancellation token for one watched path set.

    Every await inside the session is followed by a token check, so once
    ``cancel()`` has been called no notification leaves the session, even if
    a timestamp fetch started earlier resolves afterwards.
    """

    def __init__(
        self,
        project_root: Union[str, Path],
        watched_paths: Sequence[str],
        fetch_timestamp: TimestampFetcher,
        on_file_change: ChangeCallback,
        report_error: Optional[ErrorReporter] = None,
        event_callback: Optional[Callable[[FileChangeEvent], None]] = None
    ):
        """
        Initialize the watch session.

        Args:
            project_root: Directory relative watched paths are resolved against
            watched_paths: Paths to check, in the order they are checked
            fetch_timestamp: Async collaborator returning a modification time
            on_file_change: Called with the resolved path of each changed file
            report_error: Optional sink for per-path error messages
            event_callback: Optional callback receiving the full change event
        """
        self.session_id = str(uuid.uuid4())
        self.project_root = Path(project_root)
        self.watched_paths: Tuple[str, ...] = tuple(watched_paths)
        self._fetch_timestamp = fetch_timestamp
        self._on_file_change = on_file_change
        self._report_error = report_error
        self._event_callback = event_callback

        # One entry per distinct path, in supplied order
        self.entries: Dict[str, WatchEntry] = {}
        for path in self.watched_paths:
            if path not in self.entries:
                self.entries[path] = WatchEntry(path=path, resolved_path=self.resolve(path))

        self.state = WatchState.IDLE
        self.metrics = SessionMetrics()
        self._active = True

    def resolve(self, path: str) -> str:
        """Join a watched path with the project root; absolute paths pass through"""
        candidate = Path(path)
        if candidate.is_absolute():
            return str(candidate)
        return str(self.project_root / candidate)

    @property
    def is_active(self) -> bool:
        return self._active

    def cancel(self) -> None:
        """Invalidate the session token; takes effect immediately"""
        if self._active:
            self._active = False
            self.state = WatchState.IDLE
            logger.debug(f"Cancelled watch session {self.session_id}")

    def baselines(self) -> Dict[str, Optional[float]]:
        """Current baseline timestamp per watched path"""
        return {path: entry.last_seen_timestamp for path, entry in self.entries.items()}

    async def initialize(self) -> None:
        """Record the current timestamp of every watched path as its baseline"""
        if not self._active:
            return

        self.state = WatchState.INITIALIZING
        for entry in self.entries.values():
            timestamp = await self._fetch(entry)
            if not self._active:
                return
            if timestamp is not None:
                entry.last_seen_timestamp = timestamp

        self.state = WatchState.POLLING
        baseline_count = sum(1 for entry in self.entries.values() if entry.has_baseline)
        logger.info(
            f"Watching {len(self.entries)} files under {self.project_root} "
            f"({baseline_count} baselines)"
        )

    async def poll(self) -> List[FileChangeEvent]:
        """
        Run one polling tick over all watched paths.

        Returns:
            Change events emitted during this tick
        """
        if not self._active:
            return []

        self.metrics.ticks += 1
        self.metrics.last_tick_at = datetime.now()

        events = []
        for entry in list(self.entries.values()):
            if not self._active:
                break
            event = await self._check(entry)
            if event is not None:
                events.append(event)
        return events

    async def _fetch(self, entry: WatchEntry) -> Optional[float]:
        try:
            return await self._fetch_timestamp(entry.resolved_path)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            if not self._active:
                return None
            error = WatchIOError(entry.path, e)
            entry.error_count += 1
            entry.last_error = str(error)
            self.metrics.check_errors += 1
            logger.warning(str(error))
            self._report(str(error))
            return None

    async def _check(self, entry: WatchEntry) -> Optional[FileChangeEvent]:
        self.metrics.checks += 1
        timestamp = await self._fetch(entry)
        if timestamp is None or not self._active:
            return None

        previous = entry.last_seen_timestamp
        entry.last_seen_timestamp = timestamp

        if previous is None or not timestamp > previous:
            return None

        event = FileChangeEvent(
            session_id=self.session_id,
            path=entry.path,
            resolved_path=entry.resolved_path,
            previous_timestamp=previous,
            timestamp=timestamp
        )
        self.metrics.changes_detected += 1
        logger.info(f"File changed: {entry.path}")
        self._emit(event)
        return event

    def _emit(self, event: FileChangeEvent) -> None:
        if not self._active:
            return
        try:
            self._on_file_change(event.resolved_path)
            if self._event_callback:
                self._event_callback(event)
        except Exception as e:
            logger.exception(f"File change callback failed for {event.path}")
            self._report(f"File change handler failed for {event.path}: {e}")

    def _report(self, message: str) -> None:
        if self._report_error is None:
            return
        try:
            self._report_error(message)
        except Exception:
            logger.exception("Error reporter failed")

    def get_status(self) -> Dict[str, Any]:
        return {
            "session_id": self.session_id,
            "project_root": str(self.project_root),
            "state": self.state.value,
            "is_active": self._active,
            "watched_paths": len(self.entries),
            "baselines": self.baselines(),
            "metrics": self.metrics.to_dict()
        }


class FileChangePoller:
    """
    Interval-driven file change detection.

    Features:
    - One watch session per (project root, watched paths) pair
    - Baselines recorded before the first tick
    - Per-path error isolation, reported through ``report_error``
    - Synchronous teardown: replacing or stopping a session invalidates its
      token and cancels its timer task before returning

    Must be driven from a running asyncio event loop.
    """

    def __init__(
        self,
        fetch_timestamp: TimestampFetcher,
        on_file_change: ChangeCallback,
        report_error: Optional[ErrorReporter] = None,
        poll_interval_ms: int = DEFAULT_POLL_INTERVAL_MS,
        event_callback: Optional[Callable[[FileChangeEvent], None]] = None
    ):
        """
        Initialize the poller.

        Args:
            fetch_timestamp: Async collaborator returning a modification time
            on_file_change: Called with the resolved path of each changed file
            report_error: Optional sink for non-fatal errors
            poll_interval_ms: Milliseconds between two ticks
            event_callback: Optional callback receiving full change events
        """
        if poll_interval_ms <= 0:
            raise ValueError("Poll interval must be positive")

        self.fetch_timestamp = fetch_timestamp
        self.on_file_change = on_file_change
        self.report_error = report_error
        self.event_callback = event_callback
        self._poll_interval_ms = poll_interval_ms

        self._session: Optional[WatchSession] = None
        self._session_key: Optional[Tuple[str, Tuple[str, ...]]] = None
        self._task: Optional[asyncio.Task] = None

    @property
    def poll_interval_ms(self) -> int:
        return self._poll_interval_ms

    @property
    def session(self) -> Optional[WatchSession]:
        return self._session

    @property
    def state(self) -> WatchState:
        if self._session is None:
            return WatchState.IDLE
        return self._session.state

    @property
    def is_watching(self) -> bool:
        return self._session is not None and self._session.is_active

    def watch(
        self,
        project_root: Optional[Union[str, Path]],
        watched_paths: Sequence[str]
    ) -> Optional[WatchSession]:
        """
        Start watching a path set, replacing any previous session.

        Calling again with the same pair keeps the running session. An empty
        path list or a missing project root leaves the poller idle.

        Returns:
            The active session, or None when idle
        """
        paths = tuple(watched_paths)
        key = (str(project_root), paths) if project_root else None

        if key is not None and key == self._session_key and self.is_watching:
            return self._session

        self.stop()

        if not project_root or not paths:
            logger.debug("Nothing to watch; poller stays idle")
            return None

        loop = asyncio.get_running_loop()
        session = WatchSession(
            project_root=project_root,
            watched_paths=paths,
            fetch_timestamp=self.fetch_timestamp,
            on_file_change=self.on_file_change,
            report_error=self.report_error,
            event_callback=self.event_callback
        )
        self._session = session
        self._session_key = key
        self._task = loop.create_task(self._run(session))

        logger.debug(
            f"Started watch session {session.session_id} "
            f"({len(paths)} paths, every {self._poll_interval_ms}ms)"
        )
        return session

    def set_poll_interval(self, poll_interval_ms: int) -> None:
        """Change the interval; a running session is restarted fresh"""
        if poll_interval_ms <= 0:
            raise ValueError("Poll interval must be positive")
        if poll_interval_ms == self._poll_interval_ms:
            return

        self._poll_interval_ms = poll_interval_ms
        if self.is_watching and self._session_key is not None:
            project_root, paths = self._session_key
            self.stop()
            self.watch(project_root, paths)

    def stop(self) -> None:
        """Tear down the current session synchronously"""
        if self._session is not None:
            self._session.cancel()
        if self._task is not None and not self._task.done():
            self._task.cancel()

        self._session = None
        self._session_key = None
        self._task = None

    async def aclose(self) -> None:
        """Stop and wait for the timer task to finish"""
        task = self._task
        self.stop()
        if task is not None:
            try:
                await task
            except asyncio.CancelledError:
                pass

    async def _run(self, session: WatchSession) -> None:
        interval = self._poll_interval_ms / 1000.0

        await session.initialize()
        while session.is_active:
            await asyncio.sleep(interval)
            if not session.is_active:
                break
            try:
                await session.poll()
            except Exception as e:
                logger.warning(f"Error in poll tick: {e}")

    def get_status(self) -> Dict[str, Any]:
        """
        Get status information.

        Returns:
            Dictionary with status information
        """
        return {
            "state": self.state.value,
            "is_watching": self.is_watching,
            "poll_interval_ms": self._poll_interval_ms,
            "session": self._session.get_status() if self._session else None
        }

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.aclose()
