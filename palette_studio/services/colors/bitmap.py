"""
Decoded bitmaps and pixel access.

A Bitmap wraps a read-only RGBA uint8 array of shape (height, width, 4).
Ingestion helpers decode files and base64 payloads with Pillow; the core only
ever reads the pixel data.
"""

import base64
import binascii
import numbers
from io import BytesIO
from pathlib import Path
from typing import NamedTuple, Sequence, Union

import numpy as np
from loguru import logger
from PIL import Image

from palette_studio.config import config
from palette_studio.errors import InvalidBitmap, OutOfBounds
from .conversions import hex_to_rgb


class Pixel(NamedTuple):
    """Raw RGBA channel values of one pixel."""
    r: int
    g: int
    b: int
    a: int


def _to_channel_bytes(array: np.ndarray) -> np.ndarray:
    """
    Convert channel data to uint8 without wrapping or truncating.

    Non-uint8 input must hold whole numbers in [0, 255].
    """
    array = np.asarray(array)
    if array.dtype == np.uint8:
        return array
    if array.dtype.kind not in "iuf":
        raise InvalidBitmap(f"Unsupported pixel dtype {array.dtype}")
    if array.size and (
        not np.all(np.isfinite(array))
        or array.min() < 0 or array.max() > 255
        or (array.dtype.kind == "f" and not np.all(np.equal(np.floor(array), array)))
    ):
        raise InvalidBitmap(f"Pixel values must be whole numbers in [0, 255] (dtype {array.dtype})")
    return array.astype(np.uint8)


class Bitmap:
    """Immutable decoded raster with row-major RGBA pixels."""

    __slots__ = ("_pixels",)

    def __init__(self, pixels: np.ndarray):
        pixels = np.array(_to_channel_bytes(pixels), dtype=np.uint8, copy=True)
        if pixels.ndim != 3 or pixels.shape[2] != 4:
            raise InvalidBitmap(f"Expected RGBA array of shape (H, W, 4), got {pixels.shape}")
        if pixels.shape[0] <= 0 or pixels.shape[1] <= 0:
            raise InvalidBitmap(f"Bitmap dimensions must be positive, got {pixels.shape[1]}×{pixels.shape[0]}")
        pixels.setflags(write=False)
        self._pixels = pixels

    @property
    def pixels(self) -> np.ndarray:
        """Read-only (height, width, 4) uint8 view."""
        return self._pixels

    @property
    def width(self) -> int:
        return int(self._pixels.shape[1])

    @property
    def height(self) -> int:
        return int(self._pixels.shape[0])

    def contains(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def __repr__(self) -> str:
        return f"Bitmap({self.width}×{self.height})"

    @classmethod
    def from_buffer(cls, width: int, height: int, buffer: Union[bytes, bytearray, memoryview, Sequence[int]]) -> "Bitmap":
        """
        Build a bitmap from a row-major RGBA byte buffer.

        Raises:
            InvalidBitmap: non-positive dimensions, empty buffer, or a buffer
                whose length is not width * height * 4
        """
        if width <= 0 or height <= 0:
            raise InvalidBitmap(f"Bitmap dimensions must be positive, got {width}×{height}")
        data = np.frombuffer(bytes(buffer), dtype=np.uint8)
        if data.size == 0:
            raise InvalidBitmap("Bitmap buffer is empty")
        expected = width * height * 4
        if data.size != expected:
            raise InvalidBitmap(f"Buffer holds {data.size} bytes, expected {expected} for {width}×{height} RGBA")
        return cls(data.reshape(height, width, 4))

    @classmethod
    def from_array(cls, array: np.ndarray) -> "Bitmap":
        """
        Build a bitmap from a grayscale, RGB or RGBA array.

        Non-uint8 arrays are accepted only when every value is a whole number
        in [0, 255]; nothing is rescaled or wrapped.
        """
        array = np.asarray(array)
        if array.size == 0:
            raise InvalidBitmap("Bitmap array is empty")
        if array.ndim == 2:
            array = np.repeat(array[:, :, None], 3, axis=2)
        if array.ndim != 3 or array.shape[2] not in (3, 4):
            raise InvalidBitmap(f"Unsupported array shape {array.shape}")
        if array.shape[2] == 3:
            alpha = np.full(array.shape[:2] + (1,), 255, dtype=np.uint8)
            array = np.concatenate([_to_channel_bytes(array), alpha], axis=2)
        return cls(array)

    @classmethod
    def from_image(cls, image: Image.Image) -> "Bitmap":
        """Build a bitmap from a Pillow image, converting to RGBA."""
        return cls(np.asarray(image.convert("RGBA"), dtype=np.uint8))

    @classmethod
    def open(cls, path: Union[str, Path]) -> "Bitmap":
        """Decode an image file into a bitmap."""
        path = Path(path)
        try:
            with Image.open(path) as image:
                bitmap = cls.from_image(image)
        except OSError as e:
            raise InvalidBitmap(f"Cannot decode image {path}: {e}") from e
        logger.info(f"Decoded {path.name} into {bitmap!r}")
        return bitmap

    @classmethod
    def from_base64(cls, b64_data: str) -> "Bitmap":
        """Decode base64 image data (optionally a data URL) into a bitmap."""
        # Remove data URL prefix if present
        if ',' in b64_data:
            b64_data = b64_data.split(',', 1)[1]
        try:
            img_bytes = base64.b64decode(b64_data, validate=True)
            with Image.open(BytesIO(img_bytes)) as image:
                return cls.from_image(image)
        except (binascii.Error, OSError) as e:
            raise InvalidBitmap(f"Invalid base64 image data: {e}") from e


def get_pixel(bitmap: Bitmap, x: int, y: int) -> Pixel:
    """
    Read the raw RGBA values at (x, y).

    The accessor never clamps: callers wanting clamping semantics clamp
    before calling.

    Raises:
        TypeError: if x or y is not an integer
        OutOfBounds: if (x, y) lies outside the bitmap
    """
    if not isinstance(x, numbers.Integral) or not isinstance(y, numbers.Integral):
        raise TypeError(f"Pixel coordinates must be integers, got ({x!r}, {y!r})")
    x, y = int(x), int(y)
    if not bitmap.contains(x, y):
        raise OutOfBounds(x, y, bitmap.width, bitmap.height)
    r, g, b, a = bitmap.pixels[y, x]
    return Pixel(int(r), int(g), int(b), int(a))


def make_sample_gradient(width: int = None, height: int = None, stops: Sequence[str] = None) -> Bitmap:
    """
    Render the built-in sample image: a diagonal linear gradient from the
    top-left to the bottom-right corner through evenly spaced color stops.
    """
    width = config.SAMPLE_WIDTH if width is None else width
    height = config.SAMPLE_HEIGHT if height is None else height
    stops = config.SAMPLE_STOPS if stops is None else stops
    if width <= 0 or height <= 0:
        raise InvalidBitmap(f"Bitmap dimensions must be positive, got {width}×{height}")
    if len(stops) == 0:
        raise ValueError("Sample gradient needs at least one color stop")

    # Project pixel centers onto the (width, height) gradient vector
    ys, xs = np.mgrid[0:height, 0:width].astype(np.float64)
    t = ((xs + 0.5) * width + (ys + 0.5) * height) / float(width * width + height * height)
    t = np.clip(t, 0.0, 1.0)

    positions = np.linspace(0.0, 1.0, len(stops))
    colors = np.array([hex_to_rgb(stop) for stop in stops], dtype=np.float64)

    rgba = np.empty((height, width, 4), dtype=np.uint8)
    for channel in range(3):
        rgba[:, :, channel] = np.rint(np.interp(t, positions, colors[:, channel])).astype(np.uint8)
    rgba[:, :, 3] = 255

    logger.debug(f"Rendered sample gradient {width}×{height} with stops {list(stops)}")
    return Bitmap(rgba)
