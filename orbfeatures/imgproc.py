"""Image operations needed by the feature extractor."""

from __future__ import annotations

from collections.abc import Iterable

import numpy as np

from .keypoint import KeyPoint

# Bresenham circle of radius 3 as (dx, dy), in order around the centre.
_CIRCLE: tuple[tuple[int, int], ...] = (
    (0, 3), (1, 3), (2, 2), (3, 1), (3, 0), (3, -1), (2, -2), (1, -3),
    (0, -3), (-1, -3), (-2, -2), (-3, -1), (-3, 0), (-3, 1), (-2, 2), (-1, 3),
)
_ARC = 9
_RADIUS = 3
FAST_KEYPOINT_SIZE = 7.0


def _as_gray(image) -> np.ndarray:
    array = np.asarray(image)
    if array.ndim != 2:
        raise ValueError(f"expected a single-channel 2-D image, got shape {array.shape}")
    return array


def _to_uint8(values: np.ndarray) -> np.ndarray:
    return np.clip(np.rint(values), 0, 255).astype(np.uint8)


def _fast_scores(img: np.ndarray) -> np.ndarray:
    """Return the corner score of every interior pixel (border excluded)."""
    height, width = img.shape
    r = _RADIUS
    centre = img[r:height - r, r:width - r].astype(np.int32)
    ring = np.stack([
        img[r + dy:height - r + dy, r + dx:width - r + dx].astype(np.int32)
        for dx, dy in _CIRCLE
    ])
    brighter = ring - centre
    darker = centre - ring
    best = np.full(centre.shape, np.iinfo(np.int32).min, dtype=np.int32)
    for diffs in (brighter, darker):
        extended = np.concatenate([diffs, diffs[:_ARC - 1]])
        for start in range(len(_CIRCLE)):
            np.maximum(best, extended[start:start + _ARC].min(axis=0), out=best)
    return best - 1


def fast(image, threshold: int, nonmax_suppression: bool) -> list[KeyPoint]:
    """Detect FAST-9/16 corners.

    A pixel is a corner when nine contiguous pixels of the surrounding
    circle are all brighter than it by more than ``threshold`` or all darker
    by more than ``threshold``. The response is the largest threshold for
    which the pixel is still a corner. With ``nonmax_suppression`` only
    corners whose response beats all eight neighbours are kept. Keypoints
    come in row-major order.
    """
    img = _as_gray(image)
    threshold = min(max(int(threshold), 0), 255)
    height, width = img.shape
    if height < 2 * _RADIUS + 1 or width < 2 * _RADIUS + 1:
        return []

    scores = _fast_scores(img)
    corners = scores >= threshold
    score_map = np.where(corners, scores, 0)

    if nonmax_suppression:
        padded = np.pad(score_map, 1, mode="constant")
        h, w = score_map.shape
        keep = corners.copy()
        for dy in (-1, 0, 1):
            for dx in (-1, 0, 1):
                if dx == 0 and dy == 0:
                    continue
                neighbour = padded[1 + dy:1 + dy + h, 1 + dx:1 + dx + w]
                keep &= score_map > neighbour
        corners = keep

    rows, cols = np.nonzero(corners)
    return [
        KeyPoint(
            x=float(col + _RADIUS),
            y=float(row + _RADIUS),
            size=FAST_KEYPOINT_SIZE,
            response=float(score_map[row, col]),
        )
        for row, col in zip(rows.tolist(), cols.tolist())
    ]


def _gaussian_kernel(ksize: int, sigma: float) -> np.ndarray:
    if sigma <= 0:
        sigma = 0.3 * ((ksize - 1) * 0.5 - 1) + 0.8
    offsets = np.arange(ksize, dtype=np.float64) - (ksize - 1) / 2.0
    kernel = np.exp(-(offsets * offsets) / (2.0 * sigma * sigma))
    return kernel / kernel.sum()


def _filter_axis(data: np.ndarray, kernel: np.ndarray, axis: int) -> np.ndarray:
    radius = len(kernel) // 2
    pad = [(0, 0), (0, 0)]
    pad[axis] = (radius, radius)
    padded = np.pad(data, pad, mode="reflect")
    length = data.shape[axis]
    out = np.zeros(data.shape, dtype=np.float64)
    for k, weight in enumerate(kernel):
        window = padded[k:k + length, :] if axis == 0 else padded[:, k:k + length]
        out += weight * window
    return out


def gaussian_blur(image, ksize: int, sigma: float) -> np.ndarray:
    """Blur with a square Gaussian kernel, reflecting at the borders.

    A non-positive ``sigma`` is derived from ``ksize``.
    """
    img = _as_gray(image)
    if ksize < 1 or ksize % 2 == 0:
        raise ValueError("ksize must be a positive odd number")
    kernel = _gaussian_kernel(ksize, sigma)
    data = img.astype(np.float64)
    data = _filter_axis(data, kernel, axis=0)
    data = _filter_axis(data, kernel, axis=1)
    return _to_uint8(data)


def _linear_taps(src_len: int, dst_len: int) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
    scale = src_len / dst_len
    pos = (np.arange(dst_len, dtype=np.float64) + 0.5) * scale - 0.5
    lo = np.floor(pos).astype(np.int64)
    frac = pos - lo
    below = lo < 0
    frac[below] = 0.0
    lo[below] = 0
    above = lo >= src_len - 1
    frac[above] = 0.0
    lo[above] = src_len - 1
    hi = np.minimum(lo + 1, src_len - 1)
    return lo, hi, frac


def resize_linear(image, width: int, height: int) -> np.ndarray:
    """Resize to ``width`` x ``height`` with bilinear interpolation."""
    img = _as_gray(image)
    if width <= 0 or height <= 0:
        raise ValueError("target width and height must be positive")
    if img.size == 0:
        raise ValueError("cannot resize an empty image")
    src_h, src_w = img.shape
    x0, x1, fx = _linear_taps(src_w, width)
    y0, y1, fy = _linear_taps(src_h, height)
    data = img.astype(np.float64)
    top = data[y0][:, x0] * (1.0 - fx) + data[y0][:, x1] * fx
    bottom = data[y1][:, x0] * (1.0 - fx) + data[y1][:, x1] * fx
    result = top * (1.0 - fy)[:, None] + bottom * fy[:, None]
    return _to_uint8(result)


def reflect_border(image, border: int) -> np.ndarray:
    """Pad by ``border`` pixels on every side, mirroring without repeating the edge."""
    img = _as_gray(image)
    if border < 0:
        raise ValueError("border must not be negative")
    return np.pad(img, border, mode="reflect")


def retain_best(keypoints: Iterable[KeyPoint], n: int) -> list[KeyPoint]:
    """Keep the ``n`` strongest keypoints and any that tie with the weakest kept.

    The result is ordered by decreasing response. A negative ``n`` keeps all.
    """
    ordered = sorted(keypoints, key=lambda kp: kp.response, reverse=True)
    if n < 0 or len(ordered) <= n:
        return ordered
    if n == 0:
        return []
    cutoff = ordered[n - 1].response
    return [kp for kp in ordered if kp.response >= cutoff]