"""
Palette Studio Colors Module

Provides color space conversion, bitmap pixel access, fixed-grid palette
extraction, swatch repositioning and palette export.
"""
