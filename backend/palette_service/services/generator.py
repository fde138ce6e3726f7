"""
Palette Generation Orchestrator

Runs the decode → extract pipeline for one encoded image, with request-scoped
logging, timings and metrics. Failures propagate; the HTTP layer decides how
they are reported.
"""

import time
from typing import List, Optional

from palette_service.config import config
from palette_service.services.extraction import extract_palette
from palette_service.services.imaging import decode_image
from palette_service.utils.ids import generate_request_id
from palette_service.utils.logging import get_logger
from palette_service.utils.metrics import get_metrics


class PaletteGenerator:
    """Turns an encoded image into an ordered list of hex colors."""

    def __init__(self,
                 max_edge: Optional[int] = None,
                 dark_threshold: Optional[int] = None,
                 min_colors: Optional[int] = None,
                 max_colors: Optional[int] = None):
        self.max_edge = max_edge if max_edge is not None else config.MAX_EDGE
        self.dark_threshold = dark_threshold if dark_threshold is not None else config.DARK_THRESHOLD
        self.min_colors = min_colors if min_colors is not None else config.MIN_COLORS
        self.max_colors = max_colors if max_colors is not None else config.MAX_COLORS

        if not config.validate_max_edge(self.max_edge):
            raise ValueError(f"Invalid max_edge: {self.max_edge}")
        if not config.validate_dark_threshold(self.dark_threshold):
            raise ValueError(f"Invalid dark_threshold: {self.dark_threshold}")
        if not config.validate_color_bounds(self.min_colors, self.max_colors):
            raise ValueError(f"Invalid palette size bounds: {self.min_colors}-{self.max_colors}")

    def generate(self, image_payload: str, request_id: Optional[str] = None) -> List[str]:
        """
        Decode an encoded image and extract its palette.

        Args:
            image_payload: Data-URI or bare base64 image string
            request_id: Optional id used to correlate log lines

        Returns:
            Ordered list of #RRGGBB strings (possibly empty)

        Raises:
            ImageDecodeError: If the payload cannot be decoded
        """
        request_id = request_id or generate_request_id()
        log = get_logger()
        metrics = get_metrics()
        start_time = time.time()

        log.info("Starting palette generation", extra={"request_id": request_id})

        try:
            decoded = decode_image(image_payload, max_edge=self.max_edge)
            decode_time = time.time() - start_time
            log.debug(f"Decoded image to {decoded.width}x{decoded.height}",
                      extra={"request_id": request_id, "ms_decode": decode_time * 1000})

            extract_start = time.time()
            palette = extract_palette(
                decoded.data,
                decoded.pixel_count,
                dark_threshold=self.dark_threshold,
                min_colors=self.min_colors,
                max_colors=self.max_colors,
            )
            extract_time = time.time() - extract_start
        except Exception as e:
            error_time = time.time() - start_time
            log.error(f"Palette generation failed: {e}",
                      extra={
                          "request_id": request_id,
                          "ms_total": error_time * 1000,
                          "result": "error",
                          "error_type": type(e).__name__
                      })
            if config.METRICS_ENABLED:
                metrics.increment_failure_count(type(e).__name__.lower())
            raise

        total_time = time.time() - start_time
        log.info("Palette generation completed",
                 extra={
                     "request_id": request_id,
                     "dims": f"{decoded.width}x{decoded.height}",
                     "colors": len(palette),
                     "ms_decode": decode_time * 1000,
                     "ms_extract": extract_time * 1000,
                     "ms_total": total_time * 1000,
                     "result": "ok" if palette else "empty"
                 })

        if config.METRICS_ENABLED:
            metrics.increment_counter("palette_requests_total")
            if not palette:
                metrics.increment_counter("palette_empty_total")
            metrics.record_timing("palette_decode", decode_time * 1000)
            metrics.record_timing("palette_extract", extract_time * 1000)
            metrics.record_timing("palette_total", total_time * 1000)
            metrics.record_palette_size(len(palette))

        return palette
