"""
Palette Studio Swatch ID Utilities
Generate unique swatch IDs for the process lifetime.
"""
import itertools
from datetime import datetime

_sequence = itertools.count(1)


def generate_swatch_id() -> str:
    """
    Generate a unique swatch ID.

    The trailing sequence number is process-wide, so IDs never repeat even
    when many swatches are created within the same second.

    Returns:
        Unique swatch ID string
    """
    timestamp = datetime.now().strftime("%Y%m%d%H%M%S")
    return f"sw-{timestamp}-{next(_sequence):06d}"

