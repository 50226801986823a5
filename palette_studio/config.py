"""
Palette Studio Configuration
Manages environment variables and defaults for extraction and palette editing.
"""
import os
from typing import Optional


def _optional_int(name: str) -> Optional[int]:
    value = os.environ.get(name)
    return int(value) if value not in (None, "") else None


class Config:
    """Configuration class for Palette Studio services."""

    # Logging
    LOG_LEVEL: str = os.environ.get("PALETTE_STUDIO_LOG_LEVEL", "INFO")

    # Extraction defaults
    MAX_COLORS: int = int(os.environ.get("PALETTE_STUDIO_MAX_COLORS", "5"))
    STRIDE_DIVISOR: int = int(os.environ.get("PALETTE_STUDIO_STRIDE_DIVISOR", "50"))
    BUCKET_WIDTH: int = int(os.environ.get("PALETTE_STUDIO_BUCKET_WIDTH", "64"))
    ALPHA_THRESHOLD: int = int(os.environ.get("PALETTE_STUDIO_ALPHA_THRESHOLD", "128"))

    # Random padding / placement; unset seed means a fresh generator per call
    RNG_SEED: Optional[int] = _optional_int("PALETTE_STUDIO_RNG_SEED")
    ADD_JITTER_PX: int = int(os.environ.get("PALETTE_STUDIO_ADD_JITTER_PX", "50"))

    # Built-in sample image
    SAMPLE_WIDTH: int = int(os.environ.get("PALETTE_STUDIO_SAMPLE_WIDTH", "800"))
    SAMPLE_HEIGHT: int = int(os.environ.get("PALETTE_STUDIO_SAMPLE_HEIGHT", "600"))
    SAMPLE_STRIDE: int = 20
    SAMPLE_STOPS = ("#FFE9D2", "#ADD4E5", "#017CC3")

    # Export rendering
    SWATCH_CHIP_SIZE: int = int(os.environ.get("PALETTE_STUDIO_SWATCH_CHIP_SIZE", "40"))

    # Observability
    METRICS_HISTORY: int = int(os.environ.get("PALETTE_STUDIO_METRICS_HISTORY", "1000"))

    @classmethod
    def validate_bucket_width(cls, width: int) -> bool:
        """Validate quantization bucket width."""
        return 1 <= width <= 256

    @classmethod
    def validate_chip_size(cls, chip_size: int) -> bool:
        """Validate swatch chip size."""
        return 4 <= chip_size <= 512


# Global config instance
config = Config()
