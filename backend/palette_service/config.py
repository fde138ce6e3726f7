"""
Palette Service Configuration
Manages environment variables and defaults for palette generation and storage.
"""
import os
from typing import List, Optional


class Config:
    """Configuration class for the palette service."""
    
    # Decoding limits
    MAX_FILE_MB: int = int(os.environ.get("PALETTE_MAX_FILE_MB", "10"))
    MAX_EDGE: int = int(os.environ.get("PALETTE_MAX_EDGE", "100"))
    
    # Extraction defaults
    DARK_THRESHOLD: int = int(os.environ.get("PALETTE_DARK_THRESHOLD", "30"))
    MIN_COLORS: int = int(os.environ.get("PALETTE_MIN_COLORS", "3"))
    MAX_COLORS: int = int(os.environ.get("PALETTE_MAX_COLORS", "5"))
    
    # Logging
    LOG_LEVEL: str = os.environ.get("PALETTE_LOG_LEVEL", "INFO")
    
    # Storage (empty path keeps palettes in memory only)
    STORE_PATH: Optional[str] = os.environ.get("PALETTE_STORE_PATH", "palettes.json") or None
    
    # CORS settings
    ALLOWED_ORIGINS: str = os.environ.get(
        "PALETTE_ALLOWED_ORIGINS",
        "http://localhost:3000,http://localhost:3001"
    )
    
    # Observability
    METRICS_ENABLED: bool = bool(int(os.environ.get("PALETTE_METRICS_ENABLED", "1")))
    
    # Default name given to newly saved palettes
    DEFAULT_PALETTE_NAME: str = "Name"
    
    @classmethod
    def allowed_origins(cls) -> List[str]:
        """Split ALLOWED_ORIGINS into a list, dropping blanks."""
        return [origin.strip() for origin in cls.ALLOWED_ORIGINS.split(",") if origin.strip()]
    
    @classmethod
    def validate_max_edge(cls, max_edge: int) -> bool:
        """Validate max_edge parameter."""
        return 1 <= max_edge <= 4096
    
    @classmethod
    def validate_dark_threshold(cls, threshold: int) -> bool:
        """Validate darkness threshold (channel value, exclusive)."""
        return 0 <= threshold <= 256
    
    @classmethod
    def validate_color_bounds(cls, min_colors: int, max_colors: int) -> bool:
        """Validate palette size bounds."""
        return 1 <= min_colors <= max_colors


# Global config instance
config = Config()
