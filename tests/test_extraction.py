"""
Unit tests for palette extraction.

Tests the fixed-grid quantization pipeline:
- grid sampling and transparency filtering
- bucket ranking with first-encounter tie-breaking
- authentic pixel read-back and random padding
"""

import numpy as np
import pytest

from palette_studio.errors import InvalidBitmap, InvalidSampleStride
from palette_studio.services.colors.bitmap import Bitmap
from palette_studio.services.colors.conversions import rgb_to_hex, rgb_to_hsl
from palette_studio.services.colors.extraction import (
    default_sample_stride, extract_palette, quantize_keys, rank_buckets
)
from palette_studio.services.observability import get_metrics_collector


def assert_consistent(swatch, bitmap):
    assert swatch.color == rgb_to_hex(swatch.r, swatch.g, swatch.b)
    assert (swatch.h, swatch.s, swatch.l) == tuple(rgb_to_hsl(swatch.r, swatch.g, swatch.b))
    assert 0 <= swatch.x < bitmap.width
    assert 0 <= swatch.y < bitmap.height


class TestDefaultStride:
    """Test default sampling stride derivation"""

    def test_small_images_use_every_pixel(self):
        assert default_sample_stride(1, 1) == 1
        assert default_sample_stride(49, 500) == 1

    def test_scales_with_shorter_side(self):
        assert default_sample_stride(800, 600) == 12
        assert default_sample_stride(100, 1000) == 2

    def test_explicit_zero_divisor_rejected(self):
        with pytest.raises(ValueError):
            default_sample_stride(100, 100, divisor=0)


class TestQuantization:
    """Test bucket key packing"""

    def test_quantize_keys(self):
        rgb = np.array([[255, 0, 63], [64, 127, 128]], dtype=np.uint8)
        keys = quantize_keys(rgb, 64)
        assert keys[0] == (192 << 16) | (0 << 8) | 0
        assert keys[1] == (64 << 16) | (64 << 8) | 128

    def test_same_bucket_for_nearby_colors(self):
        rgb = np.array([[10, 20, 200], [12, 25, 210]], dtype=np.uint8)
        keys = quantize_keys(rgb, 64)
        assert keys[0] == keys[1]


class TestRankBuckets:
    """Test frequency ranking of quantization buckets"""

    def test_ranked_by_count(self, split_bitmap):
        buckets = rank_buckets(split_bitmap, sample_stride=1)
        assert len(buckets) == 2
        assert buckets[0].count == 70 * 100
        assert buckets[1].count == 30 * 100
        assert buckets[0].quantized_rgb == (0, 0, 192)

    def test_first_coordinate_remembered(self, split_bitmap):
        blue, green = rank_buckets(split_bitmap, sample_stride=1)
        assert (blue.x, blue.y) == (0, 0)
        assert (green.x, green.y) == (70, 0)

    def test_ties_keep_encounter_order(self):
        pixels = np.zeros((2, 2, 4), dtype=np.uint8)
        pixels[:, :, 3] = 255
        pixels[0, 0, :3] = (0, 200, 0)     # green first
        pixels[0, 1, :3] = (200, 0, 0)     # then red
        pixels[1, 0, :3] = (200, 0, 0)
        pixels[1, 1, :3] = (0, 200, 0)
        buckets = rank_buckets(Bitmap(pixels), sample_stride=1)
        assert [b.quantized_rgb for b in buckets] == [(0, 192, 0), (192, 0, 0)]

    def test_transparent_samples_skipped(self):
        pixels = np.zeros((4, 4, 4), dtype=np.uint8)
        pixels[:, :] = (255, 255, 255, 127)
        pixels[3, 3] = (0, 0, 255, 128)
        buckets = rank_buckets(Bitmap(pixels), sample_stride=1)
        assert len(buckets) == 1
        assert (buckets[0].x, buckets[0].y) == (3, 3)

    def test_stride_limits_samples(self, split_bitmap):
        buckets = rank_buckets(split_bitmap, sample_stride=10)
        assert sum(b.count for b in buckets) == 100
        assert all(b.x % 10 == 0 and b.y % 10 == 0 for b in buckets)

    @pytest.mark.parametrize("bucket_width", [0, 257])
    def test_invalid_bucket_width(self, split_bitmap, bucket_width):
        with pytest.raises(ValueError):
            rank_buckets(split_bitmap, sample_stride=1, bucket_width=bucket_width)

    def test_fully_transparent_bitmap(self, make_bitmap):
        bitmap = make_bitmap(5, 5, rgba=(10, 10, 10, 0))
        assert rank_buckets(bitmap, sample_stride=1) == []


class TestExtractPalette:
    """Test the full extraction contract"""

    def test_solid_red_scenario(self, red_bitmap, rng):
        palette = extract_palette(red_bitmap, sample_stride=10, max_colors=5, rng=rng)
        assert len(palette) == 5
        for swatch in palette:
            assert swatch.color == "#FF0000"
            assert (swatch.h, swatch.s, swatch.l) == (0, 100, 50)
            assert_consistent(swatch, red_bitmap)

    def test_unique_ids(self, split_bitmap, rng):
        palette = extract_palette(split_bitmap, sample_stride=3, max_colors=8, rng=rng)
        assert len(palette) == 8
        assert len({s.id for s in palette}) == 8

    def test_authentic_pixel_not_bucket_color(self, split_bitmap, rng):
        palette = extract_palette(split_bitmap, sample_stride=1, max_colors=2, rng=rng)
        assert palette[0].color == "#0C19D2"
        assert (palette[0].x, palette[0].y) == (0, 0)
        assert palette[1].color == "#1EDC28"

    def test_ranked_entries_precede_padding(self, split_bitmap, rng):
        palette = extract_palette(split_bitmap, sample_stride=1, max_colors=5, rng=rng)
        assert [s.color for s in palette[:2]] == ["#0C19D2", "#1EDC28"]
        for swatch in palette[2:]:
            assert_consistent(swatch, split_bitmap)

    def test_one_by_one_bitmap(self, make_bitmap, rng):
        bitmap = make_bitmap(1, 1, rgba=(17, 34, 51, 255))
        palette = extract_palette(bitmap, max_colors=5, rng=rng)
        assert len(palette) == 5
        assert {s.color for s in palette} == {"#112233"}
        assert all((s.x, s.y) == (0, 0) for s in palette)

    def test_transparent_bitmap_is_all_padding(self, make_bitmap, rng):
        bitmap = make_bitmap(6, 4, rgba=(1, 2, 3, 0))
        palette = extract_palette(bitmap, sample_stride=1, max_colors=3, rng=rng)
        assert len(palette) == 3
        for swatch in palette:
            assert swatch.color == "#010203"
            assert_consistent(swatch, bitmap)

    def test_seeded_padding_is_reproducible(self):
        pixels = np.random.default_rng(7).integers(0, 256, size=(20, 20, 4), dtype=np.uint8)
        pixels[:, :, 3] = 255
        bitmap = Bitmap(pixels)
        first = extract_palette(bitmap, sample_stride=19, max_colors=6, rng=np.random.default_rng(3))
        second = extract_palette(bitmap, sample_stride=19, max_colors=6, rng=np.random.default_rng(3))
        assert [(s.x, s.y, s.color) for s in first] == [(s.x, s.y, s.color) for s in second]

    def test_many_buckets_truncated(self, rng):
        pixels = np.zeros((1, 8, 4), dtype=np.uint8)
        pixels[:, :, 3] = 255
        for i in range(8):
            pixels[0, i, :3] = (i * 32, 255 - i * 32, 0)
        palette = extract_palette(Bitmap(pixels), sample_stride=1, max_colors=3, rng=rng)
        assert len(palette) == 3

    def test_default_stride_used(self, red_bitmap, rng):
        extract_palette(red_bitmap, rng=rng)
        recent = get_metrics_collector().get_recent_metrics(limit=1)[0]
        assert recent["operation_name"] == "palette_extraction"
        assert recent["context"]["sample_stride"] == 2

    @pytest.mark.parametrize("stride", [0, -3, 1.5, True])
    def test_invalid_stride(self, red_bitmap, stride):
        with pytest.raises(InvalidSampleStride):
            extract_palette(red_bitmap, sample_stride=stride)

    @pytest.mark.parametrize("max_colors", [0, -1, 2.5, "3", True])
    def test_invalid_max_colors(self, red_bitmap, max_colors):
        with pytest.raises(ValueError):
            extract_palette(red_bitmap, max_colors=max_colors)

    def test_numpy_integer_max_colors(self, red_bitmap, rng):
        assert len(extract_palette(red_bitmap, sample_stride=10, max_colors=np.int64(3), rng=rng)) == 3

    def test_not_a_bitmap(self):
        with pytest.raises(InvalidBitmap):
            extract_palette(np.zeros((4, 4, 4), dtype=np.uint8))
