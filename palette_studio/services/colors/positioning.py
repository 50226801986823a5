"""
Swatch repositioning over a rendered image.

Maps pointer positions on a displayed (possibly scaled) image to native
bitmap pixels and re-derives the swatch color there.
"""

import math
from typing import Tuple

from palette_studio.errors import InvalidSurface
from palette_studio.schemas import Swatch, SwatchFields
from .bitmap import Bitmap, get_pixel


def _clamp(value, low, high):
    return max(low, min(value, high))


def to_native(rendered_width: float, rendered_height: float,
              bitmap_width: int, bitmap_height: int,
              pointer_x: float, pointer_y: float) -> Tuple[int, int]:
    """
    Convert a pointer position on the rendered surface to bitmap coordinates.

    The pointer is clamped to [0, rendered_width] × [0, rendered_height],
    scaled independently on each axis, floored, then clamped to valid pixel
    indices. Aspect ratio differences are preserved, not corrected.

    Raises:
        InvalidSurface: if any width or height is not positive
    """
    if rendered_width <= 0 or rendered_height <= 0:
        raise InvalidSurface(f"Rendered surface must have positive size, got {rendered_width}×{rendered_height}")
    if bitmap_width <= 0 or bitmap_height <= 0:
        raise InvalidSurface(f"Bitmap must have positive size, got {bitmap_width}×{bitmap_height}")

    relative_x = _clamp(pointer_x, 0, rendered_width)
    relative_y = _clamp(pointer_y, 0, rendered_height)
    scale_x = bitmap_width / rendered_width
    scale_y = bitmap_height / rendered_height

    native_x = math.floor(relative_x * scale_x)
    native_y = math.floor(relative_y * scale_y)
    return _clamp(native_x, 0, bitmap_width - 1), _clamp(native_y, 0, bitmap_height - 1)


def resample(bitmap: Bitmap, rendered_width: float, rendered_height: float,
             pointer_x: float, pointer_y: float) -> SwatchFields:
    """Re-read the swatch fields under the pointer. Pure and idempotent."""
    x, y = to_native(rendered_width, rendered_height, bitmap.width, bitmap.height,
                     pointer_x, pointer_y)
    pixel = get_pixel(bitmap, x, y)
    return SwatchFields.from_rgb(x, y, pixel.r, pixel.g, pixel.b)


def reposition(swatch: Swatch, fields: SwatchFields) -> Swatch:
    """Replace every field of ``swatch`` except its id."""
    return fields.assign(swatch.id)
