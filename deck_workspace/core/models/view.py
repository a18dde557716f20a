"""
View transform model for the preview canvas.
"""

from pydantic import BaseModel, Field, ConfigDict


class ViewTransform(BaseModel):
    """Zoom scale and pan offset applied to the preview canvas"""
    model_config = ConfigDict(validate_assignment=True)

    scale: float = Field(default=1.0, gt=0)
    offset_x: float = 0.0
    offset_y: float = 0.0

    @classmethod
    def identity(cls) -> 'ViewTransform':
        """Unscaled, centered transform"""
        return cls()

    @property
    def is_identity(self) -> bool:
        return self.scale == 1.0 and self.offset_x == 0.0 and self.offset_y == 0.0

    @property
    def zoom_percent(self) -> int:
        """Scale rounded to a whole percentage for display"""
        return round(self.scale * 100)
