"""
Canvas View State.

Transform controller for the preview canvas: holds the zoom scale and pan
offset, clamps the scale and notifies listeners of the clamped value. The
rendering layer reads the transform; fitting content to the viewport is left
to it and only requested from here.
"""

import logging
import math
from typing import Callable, Optional

from ..models.config import CanvasConfig
from ..models.view import ViewTransform

logger = logging.getLogger(__name__)

ZoomCallback = Callable[[float], None]


class CanvasViewState:
    """Zoom and pan state of the preview canvas"""

    def __init__(
        self,
        min_scale: float = 0.1,
        max_scale: float = 5.0,
        zoom_step: float = 1.2,
        on_zoom_change: Optional[ZoomCallback] = None,
        on_fit_request: Optional[Callable[[], None]] = None
    ):
        """
        Initialize the view state.

        Args:
            min_scale: Smallest allowed scale
            max_scale: Largest allowed scale
            zoom_step: Factor applied by zoom_in / zoom_out
            on_zoom_change: Called with the clamped scale after every change
            on_fit_request: Called when the content should be fitted to the viewport

        Raises:
            ValueError: If the bounds exclude 1.0 or the step is not above 1
        """
        # Validates the bounds the same way configuration files are validated
        config = CanvasConfig(min_scale=min_scale, max_scale=max_scale, zoom_step=zoom_step)

        self.min_scale = config.min_scale
        self.max_scale = config.max_scale
        self.zoom_step = config.zoom_step
        self.on_zoom_change = on_zoom_change
        self.on_fit_request = on_fit_request

        self._transform = ViewTransform.identity()

    @classmethod
    def from_config(
        cls,
        config: CanvasConfig,
        on_zoom_change: Optional[ZoomCallback] = None,
        on_fit_request: Optional[Callable[[], None]] = None
    ) -> 'CanvasViewState':
        return cls(
            min_scale=config.min_scale,
            max_scale=config.max_scale,
            zoom_step=config.zoom_step,
            on_zoom_change=on_zoom_change,
            on_fit_request=on_fit_request
        )

    @property
    def transform(self) -> ViewTransform:
        return self._transform.model_copy()

    @property
    def scale(self) -> float:
        return self._transform.scale

    @property
    def offset(self):
        return (self._transform.offset_x, self._transform.offset_y)

    def clamp(self, scale: float) -> float:
        return min(self.max_scale, max(self.min_scale, scale))

    def set_scale(self, scale: float) -> float:
        """
        Apply a scale, clamped to the configured bounds.

        Non-finite values are ignored.

        Returns:
            The scale now in effect
        """
        if not math.isfinite(scale):
            logger.warning(f"Ignoring non-finite scale {scale}")
            return self._transform.scale

        clamped = self.clamp(scale)
        self._transform.scale = clamped
        self._notify_zoom(clamped)
        return clamped

    def zoom_in(self) -> float:
        return self.set_scale(self._transform.scale * self.zoom_step)

    def zoom_out(self) -> float:
        return self.set_scale(self._transform.scale / self.zoom_step)

    def pan(self, dx: float, dy: float) -> None:
        """Shift the pan offset by a delta"""
        self._transform.offset_x += dx
        self._transform.offset_y += dy

    def set_offset(self, x: float, y: float) -> None:
        self._transform.offset_x = x
        self._transform.offset_y = y

    def reset(self) -> None:
        """Restore scale 1.0 and recenter"""
        self._transform = ViewTransform.identity()
        self._notify_zoom(self._transform.scale)

    def reset_to_fit(self) -> None:
        """Reset, then ask the renderer to fit the content into the viewport"""
        self.reset()
        if self.on_fit_request:
            try:
                self.on_fit_request()
            except Exception:
                logger.exception("Fit request handler failed")

    def double_click(self) -> None:
        """Pointer double-click resets the transform"""
        self.reset()

    def _notify_zoom(self, scale: float) -> None:
        if self.on_zoom_change is None:
            return
        try:
            self.on_zoom_change(scale)
        except Exception:
            logger.exception("Zoom change handler failed")
