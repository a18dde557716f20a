"""
Slide models for deck-workspace.

A slide is one rendered document (an SVG file) in the ordered deck of a
project. The stored ``index`` is only a position hint recorded at discovery
time; the displayed position always comes from the deck's current order.
"""

from pathlib import Path
from typing import Any, Dict, Optional
from pydantic import BaseModel, Field, ConfigDict, field_validator


class Slide(BaseModel):
    """A single slide document in a deck"""
    model_config = ConfigDict(
        frozen=True,
        str_strip_whitespace=True
    )

    id: str = Field(..., min_length=1)
    path: str = Field(..., min_length=1)
    thumbnail: Optional[str] = None
    index: int = Field(default=0, ge=0)

    @field_validator('path', mode='before')
    @classmethod
    def coerce_path(cls, v: Any) -> Any:
        """Accept Path objects for the slide path"""
        if isinstance(v, Path):
            return str(v)
        return v

    @property
    def file_name(self) -> str:
        """File name component of the slide path"""
        return Path(self.path).name

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for logging/serialization"""
        return {
            "id": self.id,
            "path": self.path,
            "thumbnail": self.thumbnail,
            "index": self.index
        }

    def __str__(self) -> str:
        return f"Slide({self.id})"


class ReorderCommand(BaseModel):
    """
    Request to move one slide to another position.

    Produced by the input layer (e.g. a drag and drop gesture) and applied
    through ``SlideDeckModel.apply``. Both indices refer to positions in the
    deck at the time the command is applied.
    """
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    from_index: int = Field(..., alias="from")
    to_index: int = Field(..., alias="to")

    @property
    def is_noop(self) -> bool:
        """Commands that leave the order untouched"""
        return self.from_index == self.to_index
