"""
Palette export.

Serializes a palette as CSS custom properties or JSON, and renders a PNG
swatch strip for quick visual checks.
"""

import base64
import json
from typing import Optional, Sequence, Tuple

import cv2
import numpy as np
from loguru import logger

from palette_studio.config import config
from palette_studio.schemas import ExportEntry, ExportRGB, Swatch
from ..observability import performance_monitor
from .conversions import contrast_ratio

_WHITE = (255, 255, 255)
_BLACK = (0, 0, 0)


def to_css_variables(palette: Sequence[Swatch]) -> str:
    """Render ``--color-N`` custom properties in palette order, 1-based."""
    lines = [f"  --color-{i}: {swatch.color};" for i, swatch in enumerate(palette, start=1)]
    return ":root {\n" + "\n".join(lines) + "\n}"


def to_export_entries(palette: Sequence[Swatch]) -> list:
    return [
        ExportEntry(hex=swatch.color, rgb=ExportRGB(r=swatch.r, g=swatch.g, b=swatch.b))
        for swatch in palette
    ]


def to_json(palette: Sequence[Swatch], indent: int = 2) -> str:
    """Render a JSON array of ``{"hex", "rgb": {"r", "g", "b"}}`` objects."""
    return json.dumps([entry.model_dump() for entry in to_export_entries(palette)], indent=indent)


def label_color_for(rgb: Tuple[int, int, int]) -> Tuple[int, int, int]:
    """Pick black or white text, whichever contrasts more with ``rgb``."""
    return _WHITE if contrast_ratio(rgb, _WHITE) >= contrast_ratio(rgb, _BLACK) else _BLACK


def render_swatch_strip(palette: Sequence[Swatch],
                        chip_size: Optional[int] = None,
                        highlight_index: Optional[int] = None,
                        show_labels: bool = True,
                        border_width: int = 2) -> str:
    """
    Render a horizontal strip of color chips.

    Args:
        palette: Swatches to render, left to right
        chip_size: Size of each chip in pixels
        highlight_index: Index of a chip to outline (e.g. the active swatch)
        show_labels: Whether to draw the 1-based index on each chip
        border_width: Width of the highlight outline

    Returns:
        Base64-encoded PNG image string
    """
    if not palette:
        raise ValueError("Empty palette provided")
    chip_size = config.SWATCH_CHIP_SIZE if chip_size is None else chip_size
    if not config.validate_chip_size(chip_size):
        raise ValueError(f"Invalid chip_size: {chip_size}")
    if highlight_index is not None and not 0 <= highlight_index < len(palette):
        raise ValueError(f"highlight_index {highlight_index} out of range [0, {len(palette)})")

    with performance_monitor("swatch_strip_render", chip_count=len(palette)):
        img = np.zeros((chip_size, chip_size * len(palette), 3), dtype=np.uint8)

        for i, swatch in enumerate(palette):
            x_start = i * chip_size
            img[:, x_start:x_start + chip_size] = (swatch.b, swatch.g, swatch.r)  # BGR for OpenCV

            if show_labels:
                r, g, b = label_color_for(swatch.rgb)
                cv2.putText(img, str(i + 1), (x_start + 4, chip_size - 6),
                            cv2.FONT_HERSHEY_SIMPLEX, chip_size / 100, (b, g, r), 1)

        if highlight_index is not None:
            x_start = highlight_index * chip_size
            r, g, b = label_color_for(palette[highlight_index].rgb)
            cv2.rectangle(img, (x_start, 0), (x_start + chip_size - 1, chip_size - 1),
                          (b, g, r), border_width)

        success, buffer = cv2.imencode('.png', img)
        if not success:
            raise RuntimeError("Failed to encode swatch strip as PNG")

    b64_string = base64.b64encode(buffer.tobytes()).decode('ascii')
    logger.debug(f"Encoded swatch strip: {img.shape[1]}×{img.shape[0]} -> {len(b64_string)} chars")
    return b64_string
