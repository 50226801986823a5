"""
Palette Studio error types.

All errors signal malformed input and are deterministic; there is no retry
policy. Callers fix the input or surface the failure.
"""


class PaletteError(ValueError):
    """Base class for palette studio errors."""
    pass


class InvalidBitmap(PaletteError):
    """Bitmap has non-positive dimensions, an empty buffer, or cannot be decoded."""
    pass


class InvalidSampleStride(PaletteError):
    """Sampling stride is not an integer >= 1."""
    pass


class OutOfBounds(PaletteError):
    """Pixel coordinates fall outside the bitmap."""

    def __init__(self, x: int, y: int, width: int, height: int):
        self.x = x
        self.y = y
        self.width = width
        self.height = height
        super().__init__(
            f"Pixel ({x}, {y}) outside bitmap bounds [0, {width - 1}]×[0, {height - 1}]"
        )


class InvalidChannel(PaletteError):
    """Color channel value outside [0, 255] or malformed hex color."""
    pass


class InvalidSurface(PaletteError):
    """Rendered surface or target bitmap has a non-positive size."""
    pass


class NoImageLoaded(PaletteError):
    """Operation requires a loaded bitmap."""
    pass


class DragInProgress(PaletteError):
    """A drag session is already active for another swatch."""
    pass


class SwatchNotFound(PaletteError, KeyError):
    """No swatch with the given id exists in the palette."""

    def __init__(self, swatch_id: str):
        self.swatch_id = swatch_id
        super().__init__(f"Swatch not found: {swatch_id}")

    def __str__(self) -> str:
        return f"Swatch not found: {self.swatch_id}"
