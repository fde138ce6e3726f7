"""
Palette Service ID Utilities
Generate request IDs for tracing and identifiers for saved palettes.
"""
import time
import uuid
from datetime import datetime

def generate_request_id(prefix: str = "pal") -> str:
    """
    Generate a unique request ID for tracking.
    
    Args:
        prefix: Short tag identifying the operation
        
    Returns:
        Unique request ID string
    """
    timestamp = datetime.now().strftime("%Y%m%d%H%M%S")
    short_uuid = str(uuid.uuid4())[:8]
    return f"{prefix}-{timestamp}-{short_uuid}"


def generate_palette_id() -> str:
    """Millisecond timestamp id for a newly saved palette."""
    return str(int(time.time() * 1000))
