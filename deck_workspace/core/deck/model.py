"""
Slide Deck Model.

Holds the ordered slide collection and the current selection, and exposes
reordering and prev/next navigation. All mutations notify listeners
synchronously before returning.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Iterable, List, Optional, Tuple

from ..errors import InvalidIndexError
from ..models.slides import Slide, ReorderCommand

logger = logging.getLogger(__name__)


class DeckChangeType(Enum):
    """Kinds of deck mutations reported to listeners"""
    SLIDES_REPLACED = "slides_replaced"
    SLIDE_MOVED = "slide_moved"
    SELECTION_CHANGED = "selection_changed"


@dataclass(frozen=True)
class DeckChange:
    """Notification describing one deck mutation"""
    change_type: DeckChangeType
    slide_id: Optional[str] = None
    previous_slide_id: Optional[str] = None
    from_index: Optional[int] = None
    to_index: Optional[int] = None


DeckListener = Callable[[DeckChange], None]


class SlideDeckModel:
    """
    Ordered slide collection with a single current selection.

    The selection is tracked by slide id, so reordering never changes which
    slide is selected. Replacing the collection keeps the selected id even if
    it no longer exists; such a selection is "stale" and ``current_index``
    returns None until a valid slide is selected.
    """

    def __init__(self, slides: Optional[Iterable[Slide]] = None):
        self._slides: List[Slide] = []
        self._current_slide_id: Optional[str] = None
        self._listeners: List[DeckListener] = []

        if slides is not None:
            self._slides = self._validated(slides)

    @staticmethod
    def _validated(slides: Iterable[Slide]) -> List[Slide]:
        result = list(slides)
        seen = set()
        for slide in result:
            if slide.id in seen:
                raise ValueError(f"Duplicate slide id in deck: {slide.id}")
            seen.add(slide.id)
        return result

    # Listeners

    def add_listener(self, listener: DeckListener) -> Callable[[], None]:
        """
        Register a callback for deck changes.

        Returns:
            Callable that removes the listener again
        """
        self._listeners.append(listener)

        def remove() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return remove

    def _notify(self, change: DeckChange) -> None:
        for listener in list(self._listeners):
            try:
                listener(change)
            except Exception:
                logger.exception(f"Deck listener failed for {change.change_type.value}")

    # Collection

    @property
    def slides(self) -> Tuple[Slide, ...]:
        return tuple(self._slides)

    def __len__(self) -> int:
        return len(self._slides)

    def __iter__(self):
        return iter(tuple(self._slides))

    @property
    def is_empty(self) -> bool:
        return not self._slides

    @property
    def slide_ids(self) -> List[str]:
        return [slide.id for slide in self._slides]

    def set_slides(self, slides: Iterable[Slide], keep_selection: bool = True) -> None:
        """
        Replace the whole collection, e.g. after an external rescan.

        Args:
            slides: New slides in display order
            keep_selection: Keep the selected id (it may become stale);
                False clears the selection as part of the same change

        Raises:
            ValueError: If two slides share an id
        """
        self._slides = self._validated(slides)
        if not keep_selection:
            self._current_slide_id = None
        logger.debug(f"Deck rebuilt with {len(self._slides)} slides")
        self._notify(DeckChange(
            change_type=DeckChangeType.SLIDES_REPLACED,
            slide_id=self._current_slide_id
        ))

    def index_of(self, slide_id: Optional[str]) -> Optional[int]:
        """Position of a slide in the current order, or None if absent"""
        if slide_id is None:
            return None
        for position, slide in enumerate(self._slides):
            if slide.id == slide_id:
                return position
        return None

    def get(self, slide_id: str) -> Optional[Slide]:
        position = self.index_of(slide_id)
        return self._slides[position] if position is not None else None

    def contains(self, slide_id: Optional[str]) -> bool:
        return self.index_of(slide_id) is not None

    def display_number(self, slide_id: str) -> Optional[int]:
        """1-based position shown to the user"""
        position = self.index_of(slide_id)
        return position + 1 if position is not None else None

    # Selection

    @property
    def current_slide_id(self) -> Optional[str]:
        return self._current_slide_id

    @property
    def current_index(self) -> Optional[int]:
        return self.index_of(self._current_slide_id)

    @property
    def current_slide(self) -> Optional[Slide]:
        position = self.current_index
        return self._slides[position] if position is not None else None

    @property
    def has_stale_selection(self) -> bool:
        """True when the selected id is no longer part of the deck"""
        return self._current_slide_id is not None and self.current_index is None

    def select(self, slide_id: str) -> bool:
        """
        Select a slide by id.

        Unknown ids are ignored. Selecting the already selected slide does not
        notify listeners.

        Returns:
            True if the selection changed
        """
        if not self.contains(slide_id):
            logger.debug(f"Ignoring selection of unknown slide {slide_id}")
            return False
        if slide_id == self._current_slide_id:
            return False
        return self._set_selection(slide_id)

    def clear_selection(self) -> bool:
        if self._current_slide_id is None:
            return False
        return self._set_selection(None)

    def _set_selection(self, slide_id: Optional[str]) -> bool:
        previous = self._current_slide_id
        self._current_slide_id = slide_id
        self._notify(DeckChange(
            change_type=DeckChangeType.SELECTION_CHANGED,
            slide_id=slide_id,
            previous_slide_id=previous
        ))
        return True

    def next(self) -> bool:
        """Select the following slide; stays put on the last slide"""
        return self._step(1)

    def previous(self) -> bool:
        """Select the preceding slide; stays put on the first slide"""
        return self._step(-1)

    def _step(self, delta: int) -> bool:
        position = self.current_index
        if position is None:
            return False
        target = position + delta
        if target < 0 or target >= len(self._slides):
            return False
        return self._set_selection(self._slides[target].id)

    # Reordering

    def _check_move(self, from_index: int, to_index: int) -> None:
        length = len(self._slides)
        if length < 2 or not (0 <= from_index < length) or not (0 <= to_index < length):
            raise InvalidIndexError(from_index, to_index, length)

    def move_slide(self, from_index: int, to_index: int) -> bool:
        """
        Move the slide at ``from_index`` so it ends up at ``to_index``.

        The slide is removed first and then inserted into the remaining
        sequence, so every other slide keeps its relative order. Out of range
        indices, equal indices and decks with fewer than two slides leave the
        order unchanged.

        Args:
            from_index: Current position of the slide to move
            to_index: Target position after the move

        Returns:
            True if the order changed
        """
        if from_index == to_index:
            return False
        try:
            self._check_move(from_index, to_index)
        except InvalidIndexError as e:
            logger.debug(f"Ignoring reorder: {e}")
            return False

        slide = self._slides.pop(from_index)
        self._slides.insert(to_index, slide)

        logger.debug(f"Moved {slide} from {from_index} to {to_index}")
        self._notify(DeckChange(
            change_type=DeckChangeType.SLIDE_MOVED,
            slide_id=slide.id,
            from_index=from_index,
            to_index=to_index
        ))
        return True

    def apply(self, command: ReorderCommand) -> bool:
        """Apply a reorder command produced by the input layer"""
        return self.move_slide(command.from_index, command.to_index)
