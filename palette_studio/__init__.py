"""
Palette Studio

Extracts representative color palettes from raster images and supports
repositioning, inspecting and exporting the extracted swatches.
"""

__version__ = "1.0.0"
