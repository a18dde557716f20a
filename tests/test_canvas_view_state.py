"""
Tests for the canvas view state and keyboard shortcut dispatch.
"""

import math
import pytest
from unittest.mock import Mock

from deck_workspace.core.canvas.shortcuts import (
    CanvasAction,
    DEFAULT_KEY_BINDINGS,
    POINTER_DOUBLE_CLICK,
    ShortcutDispatcher,
    normalize_combo,
)
from deck_workspace.core.canvas.view_state import CanvasViewState
from deck_workspace.core.models.config import CanvasConfig


class TestCanvasViewState:
    """Test zoom clamping and reset"""

    @pytest.fixture
    def on_zoom(self):
        return Mock()

    @pytest.fixture
    def view(self, on_zoom):
        return CanvasViewState(on_zoom_change=on_zoom)

    def test_initial_transform_is_identity(self, view):
        assert view.scale == 1.0
        assert view.offset == (0.0, 0.0)
        assert view.transform.is_identity

    @pytest.mark.parametrize("requested,expected", [
        (0.01, 0.1),
        (0.5, 0.5),
        (2.0, 2.0),
        (50.0, 5.0),
        (-3.0, 0.1),
    ])
    def test_set_scale_clamps(self, view, on_zoom, requested, expected):
        """Listeners receive the clamped value"""
        assert view.set_scale(requested) == expected
        assert view.scale == expected
        on_zoom.assert_called_once_with(expected)

    def test_non_finite_scale_ignored(self, view, on_zoom):
        view.set_scale(2.0)
        on_zoom.reset_mock()

        assert view.set_scale(math.nan) == 2.0
        assert view.set_scale(math.inf) == 2.0
        assert view.scale == 2.0
        on_zoom.assert_not_called()

    def test_zoom_in_and_out(self, view):
        assert view.zoom_in() == pytest.approx(1.2)
        assert view.zoom_out() == pytest.approx(1.0)

    def test_repeated_zoom_stays_in_bounds(self, view):
        for _ in range(50):
            view.zoom_in()
        assert view.scale == 5.0

        for _ in range(100):
            view.zoom_out()
        assert view.scale == 0.1

    def test_reset_restores_identity(self, view, on_zoom):
        view.set_scale(3.0)
        view.pan(10, -5)
        on_zoom.reset_mock()

        view.reset()

        assert view.scale == 1.0
        assert view.offset == (0.0, 0.0)
        on_zoom.assert_called_once_with(1.0)

    def test_double_click_resets(self, view):
        view.set_scale(0.3)

        view.double_click()

        assert view.scale == 1.0

    def test_reset_to_fit_requests_fit(self):
        on_fit = Mock()
        view = CanvasViewState(on_fit_request=on_fit)
        view.set_scale(4.0)

        view.reset_to_fit()

        assert view.scale == 1.0
        on_fit.assert_called_once_with()

    def test_pan_and_set_offset(self, view):
        view.pan(5, 5)
        view.pan(-2, 3)
        assert view.offset == (3.0, 8.0)

        view.set_offset(1, 1)
        assert view.offset == (1.0, 1.0)

    def test_transform_is_a_copy(self, view):
        transform = view.transform
        transform.scale = 4.0

        assert view.scale == 1.0

    def test_failing_zoom_listener_does_not_break_zoom(self):
        view = CanvasViewState(on_zoom_change=Mock(side_effect=RuntimeError("boom")))

        assert view.set_scale(2.0) == 2.0

    @pytest.mark.parametrize("kwargs", [
        {"min_scale": 2.0},
        {"max_scale": 0.5},
        {"zoom_step": 1.0},
        {"min_scale": 0},
    ])
    def test_invalid_bounds_rejected(self, kwargs):
        with pytest.raises(ValueError):
            CanvasViewState(**kwargs)

    def test_from_config(self):
        view = CanvasViewState.from_config(CanvasConfig(min_scale=0.5, max_scale=2.0, zoom_step=2.0))

        assert view.zoom_in() == 2.0
        assert view.zoom_in() == 2.0
        view.reset()
        assert view.zoom_out() == 0.5
        assert view.zoom_out() == 0.5


class TestNormalizeCombo:
    """Test key combo normalization"""

    @pytest.mark.parametrize("combo,expected", [
        ("ArrowLeft", "left"),
        ("Right", "right"),
        (" ", "space"),
        ("Space", "space"),
        ("Shift+Space", "shift+space"),
        ("Control+=", "ctrl+="),
        ("ctrl++", "ctrl+="),
        ("ctrl+plus", "ctrl+="),
        ("Ctrl+Minus", "ctrl+-"),
        ("shift+ctrl+0", "ctrl+shift+0"),
        ("cmd+alt+k", "alt+meta+k"),
    ])
    def test_normalize(self, combo, expected):
        assert normalize_combo(combo) == expected

    @pytest.mark.parametrize("combo", ["", "ctrl", "ctrl+shift", "a+b"])
    def test_invalid_combos(self, combo):
        with pytest.raises(ValueError):
            normalize_combo(combo)


class TestShortcutDispatcher:
    """Test routing of key combos to actions"""

    @pytest.fixture
    def handlers(self):
        return {action: Mock() for action in CanvasAction}

    @pytest.fixture
    def dispatcher(self, handlers):
        dispatcher = ShortcutDispatcher()
        for action, handler in handlers.items():
            dispatcher.register_handler(action, handler)
        return dispatcher

    @pytest.mark.parametrize("combo,action", [
        ("ArrowLeft", CanvasAction.PREVIOUS_SLIDE),
        ("ArrowUp", CanvasAction.PREVIOUS_SLIDE),
        ("ArrowRight", CanvasAction.NEXT_SLIDE),
        ("ArrowDown", CanvasAction.NEXT_SLIDE),
        (" ", CanvasAction.NEXT_SLIDE),
        ("shift+space", CanvasAction.PREVIOUS_SLIDE),
        ("ctrl+=", CanvasAction.ZOOM_IN),
        ("ctrl+-", CanvasAction.ZOOM_OUT),
        ("ctrl+0", CanvasAction.RESET_ZOOM),
    ])
    def test_default_bindings(self, dispatcher, handlers, combo, action):
        """Each combo runs only the handler of its action"""
        assert dispatcher.dispatch(combo) is True

        handlers[action].assert_called_once_with()
        for other, handler in handlers.items():
            if other != action:
                handler.assert_not_called()

    def test_every_action_has_a_default_binding(self):
        assert set(DEFAULT_KEY_BINDINGS.values()) == set(CanvasAction)

    def test_unbound_combo_ignored(self, dispatcher, handlers):
        assert dispatcher.dispatch("ctrl+k") is False
        assert dispatcher.dispatch("ctrl") is False
        for handler in handlers.values():
            handler.assert_not_called()

    def test_double_click_resets_zoom(self, dispatcher, handlers):
        assert dispatcher.dispatch_pointer(POINTER_DOUBLE_CLICK) is True
        handlers[CanvasAction.RESET_ZOOM].assert_called_once_with()

        assert dispatcher.dispatch_pointer("click") is False

    def test_disabled_dispatcher_ignores_keys(self, dispatcher, handlers):
        dispatcher.disable()
        assert dispatcher.dispatch("right") is False

        dispatcher.enable()
        assert dispatcher.dispatch("right") is True
        handlers[CanvasAction.NEXT_SLIDE].assert_called_once_with()

    def test_input_focus_suspends_dispatch(self, dispatcher, handlers):
        with dispatcher.input_focus():
            assert dispatcher.enabled is False
            with dispatcher.input_focus():
                assert dispatcher.dispatch("right") is False
            assert dispatcher.dispatch("right") is False

        assert dispatcher.enabled is True
        assert dispatcher.dispatch("right") is True
        assert handlers[CanvasAction.NEXT_SLIDE].call_count == 1

    def test_missing_handler(self):
        dispatcher = ShortcutDispatcher()
        assert dispatcher.dispatch("right") is False

    def test_custom_bindings(self, handlers):
        dispatcher = ShortcutDispatcher({"j": "next_slide", "k": CanvasAction.PREVIOUS_SLIDE})
        for action, handler in handlers.items():
            dispatcher.register_handler(action, handler)

        assert dispatcher.dispatch("right") is False
        assert dispatcher.dispatch("J") is True
        assert dispatcher.combos_for(CanvasAction.PREVIOUS_SLIDE) == ["k"]

    def test_bind_and_unbind(self, dispatcher):
        dispatcher.bind("Ctrl+Plus", CanvasAction.ZOOM_OUT)
        assert dispatcher.action_for("ctrl+=") == CanvasAction.ZOOM_OUT

        dispatcher.unbind("ctrl+=")
        assert dispatcher.action_for("ctrl+=") is None
