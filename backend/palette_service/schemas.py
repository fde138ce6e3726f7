"""
Palette Service API Schemas
Pydantic models for palette generation and saved-palette request/response validation.
"""
import re
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator

HEX_PATTERN = r"^#[0-9A-Fa-f]{6}$"


class HealthResponse(BaseModel):
    """Health check response."""
    status: str = Field("ok", description="Service health status")
    version: str = Field(..., description="Service version")
    service: str = Field("palette-service", description="Service name")


class ErrorResponse(BaseModel):
    """Error response."""
    message: str = Field(..., description="Error message")


# ============================================================================
# PALETTE GENERATION
# ============================================================================

class GeneratePaletteRequest(BaseModel):
    """Encoded photo to derive a palette from."""
    image: Optional[str] = Field(
        None,
        description="Data-URI (data:image/...;base64,...) or bare base64 image"
    )


class GeneratePaletteResponse(BaseModel):
    """Palette derived from the uploaded image."""
    palette: List[str] = Field(
        ...,
        description="Hex colors ordered by frequency, most frequent first"
    )


# ============================================================================
# SAVED PALETTES
# ============================================================================

def _check_hex_colors(colors: Optional[List[str]]) -> Optional[List[str]]:
    if colors is None:
        return colors
    for color in colors:
        if not re.match(HEX_PATTERN, color):
            raise ValueError(f"Invalid hex color: {color}")
    return colors


class SavedPaletteModel(BaseModel):
    """A saved palette entry."""
    id: str = Field(..., description="Palette identifier")
    colors: List[str] = Field(..., description="Hex colors")
    name: str = Field(..., description="Display name")


class PaletteListResponse(BaseModel):
    """All saved palettes in insertion order."""
    palettes: List[SavedPaletteModel]


class CreatePaletteRequest(BaseModel):
    """Save a palette to the list."""
    colors: List[str] = Field(..., max_length=32, description="Hex colors to save")
    name: Optional[str] = Field(None, max_length=80, description="Display name")

    @field_validator("colors")
    @classmethod
    def validate_colors(cls, v):
        return _check_hex_colors(v)


class UpdatePaletteRequest(BaseModel):
    """Partial update of a saved palette."""
    colors: Optional[List[str]] = Field(None, max_length=32, description="Replacement colors")
    name: Optional[str] = Field(None, max_length=80, description="New display name")

    @field_validator("colors")
    @classmethod
    def validate_colors(cls, v):
        return _check_hex_colors(v)


class MetricsSummaryResponse(BaseModel):
    """In-process metrics snapshot."""
    uptime_seconds: float
    counters: Dict[str, int]
    timing_stats: Dict[str, Dict[str, float]]
    palette_size_stats: Dict[str, Any]
