"""
Tests for the numpy pixel adjustments.
"""
import numpy as np
import pytest

from expose_builder.images.adjustments import (
    adjust_brightness,
    auto_levels,
    convolve,
    luma,
    luma_variance,
    sharpen,
)


def rgba(values, alpha=255):
    """(h, w) grey values -> RGBA array"""
    grey = np.asarray(values, dtype=np.uint8)
    pixels = np.stack([grey, grey, grey, np.full_like(grey, alpha)], axis=-1)
    return pixels


class TestAutoLevels:

    def test_full_strength_stretches_to_full_range(self):
        pixels = rgba([[50, 100], [150, 100]])
        result = auto_levels(pixels, strength=1.0)
        assert result[..., :3].min() == 0
        assert result[..., :3].max() == 255

    def test_zero_strength_is_identity(self):
        pixels = rgba([[50, 100], [150, 100]])
        assert np.array_equal(auto_levels(pixels, strength=0.0), pixels)

    def test_alpha_kept_and_input_untouched(self):
        pixels = rgba([[50, 100], [150, 100]], alpha=128)
        before = pixels.copy()
        result = auto_levels(pixels)
        assert np.array_equal(pixels, before)
        assert (result[..., 3] == 128).all()

    def test_rejects_non_rgba(self):
        with pytest.raises(ValueError):
            auto_levels(np.zeros((4, 4, 3), dtype=np.uint8))


class TestConvolve:

    def test_sharpen_keeps_flat_areas(self):
        pixels = rgba(np.full((5, 5), 100))
        result = sharpen(pixels)
        assert (result[..., :3] == 100).all()
        assert (result[..., 3] == 255).all()

    def test_sharpen_increases_edge_contrast(self):
        values = np.array([[100, 100, 200, 200]] * 4)
        result = sharpen(rgba(values))
        assert result[1, 1, 0] < 100
        assert result[1, 2, 0] > 200 or result[1, 2, 0] == 255

    def test_flat_identity_kernel(self):
        pixels = rgba([[10, 20, 30], [40, 50, 60]])
        kernel = [0, 0, 0, 0, 1, 0, 0, 0, 0]
        assert np.array_equal(convolve(pixels, kernel)[..., :3], pixels[..., :3])

    def test_even_kernel_rejected(self):
        with pytest.raises(ValueError):
            convolve(rgba([[1, 2], [3, 4]]), np.ones((2, 2)))


class TestBrightnessAndVariance:

    def test_brightness_clamps(self):
        result = adjust_brightness(rgba([[10, 220]]), 60)
        assert result[0, 0, 0] == 70
        assert result[0, 1, 0] == 255

    def test_zero_delta_returns_equal_copy(self):
        pixels = rgba([[10, 220]])
        result = adjust_brightness(pixels, 0)
        assert result is not pixels
        assert np.array_equal(result, pixels)

    def test_luma_of_grey_is_grey_value(self):
        assert luma(rgba([[80]]))[0, 0] == pytest.approx(80)

    def test_variance(self):
        assert luma_variance(rgba(np.full((4, 4), 90))) == 0.0
        checker = np.indices((4, 4)).sum(axis=0) % 2 * 255
        assert luma_variance(rgba(checker)) > 1000
