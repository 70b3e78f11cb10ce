"""
Pixel-level photo adjustments.

All functions take an RGBA uint8 array of shape (h, w, 4) and return a new
array; the input is never modified.
"""
import numpy as np

LUMA_WEIGHTS = np.array([0.2126, 0.7152, 0.0722], dtype=np.float64)

SHARPEN_KERNEL = np.array([
    [0, -1, 0],
    [-1, 5, -1],
    [0, -1, 0],
], dtype=np.float64)


def _to_uint8(values: np.ndarray) -> np.ndarray:
    return np.clip(np.rint(values), 0, 255).astype(np.uint8)


def _check(pixels: np.ndarray) -> np.ndarray:
    pixels = np.asarray(pixels)
    if pixels.ndim != 3 or pixels.shape[2] != 4:
        raise ValueError(f"expected an RGBA array of shape (h, w, 4), got {pixels.shape}")
    return pixels


def luma(pixels: np.ndarray) -> np.ndarray:
    """Rec. 709 luma per pixel as float array of shape (h, w)"""
    pixels = _check(pixels)
    return pixels[..., :3].astype(np.float64) @ LUMA_WEIGHTS


def auto_levels(pixels: np.ndarray, strength: float = 0.9) -> np.ndarray:
    """
    Stretch contrast so the luma range spans 0..255.

    Each colour channel is remapped from [min_luma, max_luma] to [0, 255]
    and blended with the original by `strength` (0 = unchanged, 1 = full
    stretch). Alpha is kept.
    """
    pixels = _check(pixels)
    strength = float(max(0.0, min(1.0, strength)))
    if pixels.size == 0:
        return pixels.copy()

    y = luma(pixels)
    low = float(y.min())
    span = max(1.0, float(y.max()) - low)

    rgb = pixels[..., :3].astype(np.float64)
    stretched = (rgb - low) / span * 255.0
    blended = stretched * strength + rgb * (1.0 - strength)

    result = pixels.copy()
    result[..., :3] = _to_uint8(blended)
    return result


def convolve(pixels: np.ndarray, kernel: np.ndarray) -> np.ndarray:
    """
    Apply a square kernel to the colour channels.

    Samples outside the image take the nearest edge pixel; the output is
    fully opaque.
    """
    pixels = _check(pixels)
    kernel = np.asarray(kernel, dtype=np.float64)
    if kernel.ndim == 1:
        side = int(round(kernel.size ** 0.5))
        kernel = kernel.reshape(side, side)
    if kernel.shape[0] != kernel.shape[1] or kernel.shape[0] % 2 == 0:
        raise ValueError("kernel must be square with an odd side length")

    half = kernel.shape[0] // 2
    height, width = pixels.shape[:2]
    rgb = pixels[..., :3].astype(np.float64)
    padded = np.pad(rgb, ((half, half), (half, half), (0, 0)), mode='edge')

    acc = np.zeros_like(rgb)
    for dy in range(kernel.shape[0]):
        for dx in range(kernel.shape[1]):
            weight = kernel[dy, dx]
            if weight:
                acc += weight * padded[dy:dy + height, dx:dx + width]

    result = np.empty_like(pixels)
    result[..., :3] = _to_uint8(acc)
    result[..., 3] = 255
    return result


def sharpen(pixels: np.ndarray) -> np.ndarray:
    return convolve(pixels, SHARPEN_KERNEL)


def adjust_brightness(pixels: np.ndarray, delta: float) -> np.ndarray:
    """Add `delta` to every colour channel, clamped to 0..255"""
    pixels = _check(pixels)
    result = pixels.copy()
    if delta:
        result[..., :3] = _to_uint8(pixels[..., :3].astype(np.float64) + delta)
    return result


def luma_variance(pixels: np.ndarray) -> float:
    """Population variance of the luma values (higher = more detail/contrast)"""
    y = luma(pixels)
    if y.size == 0:
        return 0.0
    return float(y.var())
