"""
Keyboard shortcut dispatch for the preview canvas.

Maps key combos to logical canvas actions and invokes the handler registered
for each action. Dispatch can be gated off while another input context (a
text field, a dialog) owns keyboard focus.
"""

import logging
from contextlib import contextmanager
from enum import Enum
from typing import Callable, Dict, Iterator, List, Mapping, Optional, Union

logger = logging.getLogger(__name__)


class CanvasAction(Enum):
    """Logical actions triggered by shortcuts"""
    PREVIOUS_SLIDE = "previous_slide"
    NEXT_SLIDE = "next_slide"
    ZOOM_IN = "zoom_in"
    ZOOM_OUT = "zoom_out"
    RESET_ZOOM = "reset_zoom"


DEFAULT_KEY_BINDINGS: Dict[str, CanvasAction] = {
    "left": CanvasAction.PREVIOUS_SLIDE,
    "up": CanvasAction.PREVIOUS_SLIDE,
    "right": CanvasAction.NEXT_SLIDE,
    "down": CanvasAction.NEXT_SLIDE,
    "space": CanvasAction.NEXT_SLIDE,
    "shift+space": CanvasAction.PREVIOUS_SLIDE,
    "ctrl+=": CanvasAction.ZOOM_IN,
    "ctrl+-": CanvasAction.ZOOM_OUT,
    "ctrl+0": CanvasAction.RESET_ZOOM,
}

POINTER_DOUBLE_CLICK = "double_click"

# Modifiers in canonical order
MODIFIERS = ("ctrl", "alt", "shift", "meta")

KEY_ALIASES = {
    "arrowleft": "left",
    "arrowright": "right",
    "arrowup": "up",
    "arrowdown": "down",
    " ": "space",
    "spacebar": "space",
    "control": "ctrl",
    "option": "alt",
    "cmd": "meta",
    "command": "meta",
    "plus": "=",
    "+": "=",
    "equal": "=",
    "minus": "-",
}


def normalize_combo(combo: str) -> str:
    """
    Canonical form of a key combo.

    Lowercases keys, resolves aliases such as ``ArrowLeft`` or ``Control``
    and orders modifiers as ctrl, alt, shift, meta.

    Raises:
        ValueError: If the combo has no non-modifier key
    """
    if combo == " ":
        return "space"

    raw = combo.strip().lower()
    if raw == "+":
        parts = [raw]
    elif raw.endswith("++"):
        # "ctrl++" means ctrl and the plus key
        parts = raw[:-2].split("+") + ["+"]
    else:
        parts = raw.split("+")

    keys = [KEY_ALIASES.get(part.strip(), part.strip()) for part in parts]
    modifiers = {key for key in keys if key in MODIFIERS}
    others = [key for key in keys if key not in MODIFIERS]

    if len(others) != 1 or not others[0]:
        raise ValueError(f"Invalid key combo: {combo!r}")

    ordered = [modifier for modifier in MODIFIERS if modifier in modifiers]
    return "+".join(ordered + others)


ActionHandler = Callable[[], object]


class ShortcutDispatcher:
    """
    Routes key combos to action handlers.

    Each binding only invokes the handler of its action; dispatching an
    unbound combo or an action without a handler does nothing.
    """

    def __init__(self, bindings: Optional[Mapping[str, Union[CanvasAction, str]]] = None):
        self._bindings: Dict[str, CanvasAction] = {}
        self._handlers: Dict[CanvasAction, ActionHandler] = {}
        self._enabled = True
        self._focus_depth = 0

        for combo, action in (bindings if bindings is not None else DEFAULT_KEY_BINDINGS).items():
            self.bind(combo, action)

    @property
    def bindings(self) -> Dict[str, CanvasAction]:
        return dict(self._bindings)

    def bind(self, combo: str, action: Union[CanvasAction, str]) -> None:
        self._bindings[normalize_combo(combo)] = CanvasAction(action)

    def unbind(self, combo: str) -> None:
        self._bindings.pop(normalize_combo(combo), None)

    def combos_for(self, action: CanvasAction) -> List[str]:
        return sorted(combo for combo, bound in self._bindings.items() if bound == action)

    def action_for(self, combo: str) -> Optional[CanvasAction]:
        try:
            return self._bindings.get(normalize_combo(combo))
        except ValueError:
            return None

    def register_handler(self, action: CanvasAction, handler: ActionHandler) -> None:
        self._handlers[action] = handler

    # Gate

    @property
    def enabled(self) -> bool:
        return self._enabled and self._focus_depth == 0

    def enable(self) -> None:
        self._enabled = True

    def disable(self) -> None:
        self._enabled = False

    @contextmanager
    def input_focus(self) -> Iterator[None]:
        """Suspend dispatch while another input context owns focus"""
        self._focus_depth += 1
        try:
            yield
        finally:
            self._focus_depth -= 1

    # Dispatch

    def trigger(self, action: CanvasAction) -> bool:
        """
        Invoke the handler of an action if dispatch is enabled.

        Returns:
            True if a handler ran
        """
        if not self.enabled:
            return False
        handler = self._handlers.get(action)
        if handler is None:
            return False
        handler()
        return True

    def dispatch(self, combo: str) -> bool:
        """
        Handle a key combo.

        Returns:
            True if the combo was bound and its handler ran
        """
        action = self.action_for(combo)
        if action is None:
            return False
        logger.debug(f"Shortcut {combo} -> {action.value}")
        return self.trigger(action)

    def dispatch_pointer(self, gesture: str) -> bool:
        """Handle a pointer gesture; a double-click resets the zoom"""
        if gesture != POINTER_DOUBLE_CLICK:
            return False
        return self.trigger(CanvasAction.RESET_ZOOM)
