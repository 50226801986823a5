"""
Palette editing session.

Holds the loaded bitmap and the ordered palette, and applies user actions:
loading or clearing an image, appending and deleting swatches, and dragging
one swatch at a time over the rendered image. Every change replaces whole
Swatch records.
"""

from typing import Optional, Tuple

import numpy as np
from loguru import logger

from palette_studio.config import config
from palette_studio.errors import DragInProgress, NoImageLoaded, SwatchNotFound
from palette_studio.schemas import RenderedSurface, Swatch
from .bitmap import Bitmap, make_sample_gradient
from .extraction import extract_palette, swatch_at
from .positioning import reposition, resample


class PaletteSession:
    """Single-threaded palette state for one loaded image."""

    def __init__(self, rng: Optional[np.random.Generator] = None):
        self._rng = rng if rng is not None else np.random.default_rng(config.RNG_SEED)
        self._bitmap: Optional[Bitmap] = None
        self._palette: Tuple[Swatch, ...] = ()
        self._active_id: Optional[str] = None
        self._drag_origin: Optional[Swatch] = None

    @property
    def bitmap(self) -> Optional[Bitmap]:
        return self._bitmap

    @property
    def palette(self) -> Tuple[Swatch, ...]:
        return self._palette

    @property
    def active_id(self) -> Optional[str]:
        return self._active_id

    @property
    def is_dragging(self) -> bool:
        return self._active_id is not None

    def get(self, swatch_id: str) -> Swatch:
        for swatch in self._palette:
            if swatch.id == swatch_id:
                return swatch
        raise SwatchNotFound(swatch_id)

    def _require_bitmap(self) -> Bitmap:
        if self._bitmap is None:
            raise NoImageLoaded("No image loaded")
        return self._bitmap

    def _reset_drag(self) -> None:
        self._active_id = None
        self._drag_origin = None

    def _replace(self, swatch: Swatch) -> None:
        self._palette = tuple(swatch if s.id == swatch.id else s for s in self._palette)

    def load(self, bitmap: Bitmap, sample_stride: Optional[int] = None,
             max_colors: Optional[int] = None) -> Tuple[Swatch, ...]:
        """Load a new image and replace the palette with a fresh extraction."""
        palette = extract_palette(bitmap, sample_stride=sample_stride,
                                  max_colors=max_colors, rng=self._rng)
        self._bitmap = bitmap
        self._palette = tuple(palette)
        self._reset_drag()
        logger.bind(
            width=bitmap.width,
            height=bitmap.height,
            colors=[s.color for s in self._palette]
        ).info("Palette loaded")
        return self._palette

    def load_sample(self) -> Tuple[Swatch, ...]:
        """Load the built-in gradient sample image."""
        return self.load(make_sample_gradient(), sample_stride=config.SAMPLE_STRIDE)

    def clear(self) -> None:
        """Drop the image and its palette."""
        self._bitmap = None
        self._palette = ()
        self._reset_drag()
        logger.debug("Cleared image and palette")

    def add_swatch(self) -> Swatch:
        """Append a swatch sampled near the image center."""
        bitmap = self._require_bitmap()
        jitter = config.ADD_JITTER_PX
        offset_x = int(np.floor((self._rng.random() - 0.5) * jitter))
        offset_y = int(np.floor((self._rng.random() - 0.5) * jitter))
        x = max(0, min(bitmap.width // 2 + offset_x, bitmap.width - 1))
        y = max(0, min(bitmap.height // 2 + offset_y, bitmap.height - 1))

        swatch = swatch_at(bitmap, x, y)
        self._palette = self._palette + (swatch,)
        logger.debug(f"Added swatch {swatch.id} {swatch.color} at ({x}, {y})")
        return swatch

    def remove_swatch(self, swatch_id: str) -> Swatch:
        """Delete a swatch by id."""
        swatch = self.get(swatch_id)
        if self._active_id == swatch_id:
            self._reset_drag()
        self._palette = tuple(s for s in self._palette if s.id != swatch_id)
        logger.debug(f"Removed swatch {swatch_id}")
        return swatch

    def begin_drag(self, swatch_id: str) -> Swatch:
        """Make ``swatch_id`` the single active swatch."""
        self._require_bitmap()
        if self._active_id is not None and self._active_id != swatch_id:
            raise DragInProgress(f"Swatch {self._active_id} is already being dragged")
        swatch = self.get(swatch_id)
        if self._active_id is None:
            self._drag_origin = swatch
        self._active_id = swatch_id
        return swatch

    def drag_to(self, surface: RenderedSurface, client_x: float, client_y: float) -> Optional[Swatch]:
        """
        Move the active swatch under the pointer.

        ``client_x``/``client_y`` share a coordinate system with the surface's
        left/top. Without an active drag this does nothing and returns None.
        """
        if self._active_id is None:
            return None
        bitmap = self._require_bitmap()

        fields = resample(bitmap, surface.width, surface.height,
                          client_x - surface.left, client_y - surface.top)
        updated = reposition(self.get(self._active_id), fields)
        self._replace(updated)
        return updated

    def end_drag(self) -> Optional[Swatch]:
        """Finish the drag, keeping the last position."""
        if self._active_id is None:
            return None
        swatch = self.get(self._active_id)
        self._reset_drag()
        logger.debug(f"Swatch {swatch.id} settled at ({swatch.x}, {swatch.y}) {swatch.color}")
        return swatch

    def cancel_drag(self) -> Optional[Swatch]:
        """Abort the drag and restore the swatch as it was when the drag began."""
        if self._active_id is None:
            return None
        origin = self._drag_origin
        self._replace(origin)
        self._reset_drag()
        logger.debug(f"Drag of swatch {origin.id} cancelled")
        return origin
