"""Pydantic schemas for conversion requests."""

from pydantic import BaseModel, ConfigDict, Field


class ConversionRequest(BaseModel):
    """Declared metadata of an inbound clip.

    Built by the update dispatcher from the platform's video object and
    never mutated afterwards.
    """
    model_config = ConfigDict(frozen=True)

    file_id: str = Field(..., min_length=1, description="Opaque remote file handle")
    height: int = Field(..., ge=1, description="Declared frame height in pixels")
    width: int = Field(..., ge=1, description="Declared frame width in pixels")
    duration: int = Field(default=0, ge=0, description="Declared duration in seconds")
    file_size: int = Field(default=0, ge=0, description="Declared size in bytes")

    @property
    def side(self) -> int:
        """Display length of the resulting note."""
        return min(self.height, self.width)
