"""
Workspace Coordinator.

Composes the slide deck, the canvas view state, the shortcut dispatcher and
the file change poller. It reacts to deck changes by picking a default
selection, loads the content of the selected slide, and derives progress
from the deck order.

Content loading follows "last request wins": every request takes the next
value of a sequence number, and a fetch that resolves after a newer request
was issued is discarded.
"""

import asyncio
import logging
import os
from pathlib import Path
from typing import Awaitable, Callable, Iterable, Optional, Union, Any, Dict

from ..canvas.shortcuts import CanvasAction, ShortcutDispatcher, POINTER_DOUBLE_CLICK
from ..canvas.view_state import CanvasViewState
from ..deck.model import DeckChange, SlideDeckModel
from ..deck.scanner import watched_paths
from ..errors import ContentLoadError
from ..models.config import WorkspaceConfig
from ..models.slides import Slide
from ..models.workspace import WorkspaceState
from ..sync.poller import FileChangePoller, TimestampFetcher
from ..sync.sources import ContentRevisionSource, FileSystemSource
from .console import ConsoleLog

logger = logging.getLogger(__name__)

ContentFetcher = Callable[[str], Awaitable[str]]
ErrorReporter = Callable[[str], None]


def same_file(left: Union[str, Path], right: Union[str, Path]) -> bool:
    """Compare two paths lexically, without touching the filesystem"""
    return os.path.normcase(os.path.abspath(left)) == os.path.normcase(os.path.abspath(right))


class WorkspaceCoordinator:
    """
    Reconciles selection, content loading and progress for one workspace.

    Rules applied whenever the deck changes:
    1. A non-empty deck without selection selects its first slide.
    2. A selection that is no longer part of the deck clears the content.
    3. A new selection issues exactly one content fetch for its path.
    4. Progress is ``(position + 1) / total * 100``, or 0 without a valid
       selection.
    5. A failed fetch clears the content and is reported, never raised.

    Content fetches run as tasks on the running event loop, so selection
    changes must happen inside it.
    """

    def __init__(
        self,
        fetch_content: ContentFetcher,
        report_error: Optional[ErrorReporter] = None,
        deck: Optional[SlideDeckModel] = None,
        view: Optional[CanvasViewState] = None,
        shortcuts: Optional[ShortcutDispatcher] = None,
        fetch_timestamp: Optional[TimestampFetcher] = None,
        poll_interval_ms: int = 2000,
        on_content_change: Optional[Callable[[Optional[str]], None]] = None,
        on_file_change: Optional[Callable[[str], None]] = None
    ):
        """
        Initialize the coordinator.

        Args:
            fetch_content: Async collaborator returning the text of a slide
            report_error: Sink for non-fatal errors
            deck: Slide deck to coordinate (a new empty deck by default)
            view: Canvas view state (default bounds if omitted)
            shortcuts: Shortcut dispatcher (default bindings if omitted)
            fetch_timestamp: Enables file watching when given
            poll_interval_ms: Interval of the file change poller
            on_content_change: Called with the new content whenever it changes
            on_file_change: Called with the path of every detected file change
        """
        self._fetch_content = fetch_content
        self._report_error = report_error
        self.deck = deck if deck is not None else SlideDeckModel()
        self.view = view if view is not None else CanvasViewState()
        self.shortcuts = shortcuts if shortcuts is not None else ShortcutDispatcher()
        self.on_content_change = on_content_change
        self.on_file_change = on_file_change

        self.poller: Optional[FileChangePoller] = None
        if fetch_timestamp is not None:
            self.poller = FileChangePoller(
                fetch_timestamp=fetch_timestamp,
                on_file_change=self.handle_file_change,
                report_error=self._report,
                poll_interval_ms=poll_interval_ms
            )

        self.project_root: Optional[Path] = None

        # Content state
        self._request_seq = 0
        self._requested_slide_id: Optional[str] = None
        self._requested_path: Optional[str] = None
        self._fetch_task: Optional[asyncio.Task] = None
        self._content: Optional[str] = None
        self._content_slide_id: Optional[str] = None
        self._loading = False
        self._last_error: Optional[str] = None

        # Reentrancy guard for reconciliation
        self._reconciling = False
        self._reconcile_pending = False

        self._register_shortcuts()
        self._remove_deck_listener = self.deck.add_listener(self._on_deck_change)

    @classmethod
    def from_config(
        cls,
        config: WorkspaceConfig,
        console: Optional[ConsoleLog] = None,
        source: Optional[FileSystemSource] = None,
        **kwargs
    ) -> 'WorkspaceCoordinator':
        """
        Build a filesystem-backed coordinator from configuration.

        Args:
            config: Workspace configuration
            console: Console receiving reported errors
            source: Filesystem collaborator (a new FileSystemSource by default)
            **kwargs: Callbacks forwarded to the constructor
        """
        source = source or FileSystemSource()
        if config.polling.change_signal == "content-hash":
            fetch_timestamp = ContentRevisionSource().fetch_timestamp
        else:
            fetch_timestamp = source.fetch_timestamp

        on_zoom_change = kwargs.pop('on_zoom_change', None)
        return cls(
            fetch_content=source.fetch_content,
            report_error=console.report_error if console else None,
            view=CanvasViewState.from_config(config.canvas, on_zoom_change=on_zoom_change),
            fetch_timestamp=fetch_timestamp,
            poll_interval_ms=config.polling.poll_interval_ms,
            **kwargs
        )

    def _register_shortcuts(self) -> None:
        self.shortcuts.register_handler(CanvasAction.PREVIOUS_SLIDE, self.previous_slide)
        self.shortcuts.register_handler(CanvasAction.NEXT_SLIDE, self.next_slide)
        self.shortcuts.register_handler(CanvasAction.ZOOM_IN, self.view.zoom_in)
        self.shortcuts.register_handler(CanvasAction.ZOOM_OUT, self.view.zoom_out)
        self.shortcuts.register_handler(CanvasAction.RESET_ZOOM, self.view.reset)

    # Derived state

    @property
    def current_slide_id(self) -> Optional[str]:
        return self.deck.current_slide_id

    @property
    def loaded_content(self) -> Optional[str]:
        return self._content

    @property
    def content_slide_id(self) -> Optional[str]:
        """Slide the loaded content belongs to"""
        return self._content_slide_id

    @property
    def is_loading(self) -> bool:
        return self._loading

    @property
    def progress(self) -> float:
        """Position of the selected slide as a percentage of the deck"""
        total = len(self.deck)
        position = self.deck.current_index
        if total == 0 or position is None:
            return 0.0
        return ((position + 1) / total) * 100

    def snapshot(self) -> WorkspaceState:
        return WorkspaceState(
            current_slide_id=self.deck.current_slide_id,
            loaded_content=self._content,
            progress_percent=self.progress,
            is_loading=self._loading,
            last_error=self._last_error
        )

    # Project lifecycle

    def open_project(self, project_root: Union[str, Path], slides: Iterable[Slide]) -> None:
        """
        Show a newly opened project.

        Resets the view, replaces the deck (selecting its first slide) and
        restarts file watching over the slide paths.
        """
        # Resolved once here so change paths can be compared lexically
        self.project_root = Path(project_root).resolve()
        slides = list(slides)
        logger.info(f"Opening project {self.project_root} with {len(slides)} slides")

        self.view.reset()
        self._invalidate_requests()
        self.deck.set_slides(slides, keep_selection=False)
        self._watch(slides)

    def set_slides(self, slides: Iterable[Slide]) -> None:
        """Replace the deck after a rescan; keeps the selection when still valid"""
        slides = list(slides)
        self.deck.set_slides(slides)
        self._watch(slides)

    def close_project(self) -> None:
        if self.poller:
            self.poller.stop()
        self._invalidate_requests()
        self.deck.set_slides([], keep_selection=False)
        self.view.reset()
        self.project_root = None

    def _watch(self, slides: Iterable[Slide]) -> None:
        if self.poller is None:
            return
        if self.project_root is None:
            self.poller.stop()
            return
        self.poller.watch(self.project_root, watched_paths(slides, self.project_root))

    # User intents

    def on_slide_select(self, slide_id: str) -> bool:
        return self.deck.select(slide_id)

    def on_slide_reorder(self, from_index: int, to_index: int) -> bool:
        return self.deck.move_slide(from_index, to_index)

    def next_slide(self) -> bool:
        return self.deck.next()

    def previous_slide(self) -> bool:
        return self.deck.previous()

    def handle_key(self, combo: str) -> bool:
        return self.shortcuts.dispatch(combo)

    def handle_double_click(self) -> bool:
        return self.shortcuts.dispatch_pointer(POINTER_DOUBLE_CLICK)

    def handle_file_change(self, path: str) -> None:
        """
        React to an external edit.

        The consumer callback sees every change; the selected slide is
        reloaded when its own file changed.
        """
        if self.on_file_change:
            try:
                self.on_file_change(path)
            except Exception:
                logger.exception(f"File change callback failed for {path}")

        slide = self.deck.current_slide
        if slide is not None and same_file(slide.path, path):
            logger.debug(f"Reloading {slide} after external change")
            self.reload()

    def reload(self) -> None:
        """Fetch the selected slide's content again"""
        slide = self.deck.current_slide
        if slide is not None:
            self._request_content(slide)

    # Reconciliation

    def _on_deck_change(self, change: DeckChange) -> None:
        self._reconcile()

    def _reconcile(self) -> None:
        if self._reconciling:
            self._reconcile_pending = True
            return

        self._reconciling = True
        try:
            while True:
                self._reconcile_pending = False
                self._apply_rules()
                if not self._reconcile_pending:
                    break
        finally:
            self._reconciling = False

    def _apply_rules(self) -> None:
        deck = self.deck

        if deck.current_slide_id is None and not deck.is_empty:
            deck.select(deck.slides[0].id)
            return

        slide = deck.current_slide
        if slide is None:
            if self._requested_slide_id is not None or self._content is not None:
                self._invalidate_requests()
                self._set_content(None, None)
            return

        if slide.id != self._requested_slide_id or slide.path != self._requested_path:
            self._request_content(slide)

    def _invalidate_requests(self) -> None:
        """Make every in-flight fetch stale"""
        self._request_seq += 1
        self._requested_slide_id = None
        self._requested_path = None
        self._loading = False

    def _request_content(self, slide: Slide) -> None:
        self._request_seq += 1
        token = self._request_seq
        self._requested_slide_id = slide.id
        self._requested_path = slide.path
        self._loading = True

        loop = asyncio.get_running_loop()
        self._fetch_task = loop.create_task(self._load_content(token, slide))
        logger.debug(f"Requested content for {slide} (request {token})")

    async def _load_content(self, token: int, slide: Slide) -> None:
        try:
            content = await self._fetch_content(slide.path)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            if token != self._request_seq:
                logger.debug(f"Ignoring failure of stale request {token} for {slide}")
                return
            error = ContentLoadError(slide.path, e)
            self._loading = False
            self._last_error = str(error)
            self._set_content(None, None)
            logger.warning(str(error))
            self._report(str(error))
            return

        if token != self._request_seq:
            logger.debug(f"Discarding stale content for {slide} (request {token})")
            return

        self._loading = False
        self._last_error = None
        self._set_content(slide.id, content)

    def _set_content(self, slide_id: Optional[str], content: Optional[str]) -> None:
        changed = content != self._content or slide_id != self._content_slide_id
        self._content = content
        self._content_slide_id = slide_id
        if changed and self.on_content_change:
            try:
                self.on_content_change(content)
            except Exception:
                logger.exception("Content change callback failed")

    def _report(self, message: str) -> None:
        if self._report_error is None:
            return
        try:
            self._report_error(message)
        except Exception:
            logger.exception("Error reporter failed")

    async def wait_for_content(self) -> None:
        """Wait until the most recent content request has settled"""
        while self._fetch_task is not None and not self._fetch_task.done():
            await asyncio.wait([self._fetch_task])

    def get_status(self) -> Dict[str, Any]:
        return {
            "project_root": str(self.project_root) if self.project_root else None,
            "slides": len(self.deck),
            "state": self.snapshot().to_dict(),
            "scale": self.view.scale,
            "request_seq": self._request_seq,
            "poller": self.poller.get_status() if self.poller else None
        }

    async def aclose(self) -> None:
        """Stop watching and drop pending content requests"""
        if self.poller:
            await self.poller.aclose()
        self._invalidate_requests()
        task = self._fetch_task
        if task is not None and not task.done():
            task.cancel()
            await asyncio.wait([task])
        self._fetch_task = None
        self._remove_deck_listener()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.aclose()
