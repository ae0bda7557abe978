"""Geometric gates used when searching for keypoint matches."""

from __future__ import annotations

from collections.abc import Sequence

import numpy as np

from .keypoint import KeyPoint

_FRONTAL_VIEW_COS = 0.998
_FRONTAL_RADIUS = 2.5
_OBLIQUE_RADIUS = 4.0
# Chi-square value at 95% for one degree of freedom.
_EPIPOLAR_CHI2 = 3.84


def radius_by_viewing_cos(view_cos: float) -> float:
    """Return the search window factor for a point seen at the given viewing cosine.

    Points seen almost head-on get a tighter window than oblique ones.
    """
    if view_cos > _FRONTAL_VIEW_COS:
        return _FRONTAL_RADIUS
    return _OBLIQUE_RADIUS


def _fundamental(f12) -> np.ndarray:
    matrix = np.asarray(f12, dtype=np.float32)
    if matrix.shape != (3, 3):
        raise ValueError(f"fundamental matrix must be 3x3, got shape {matrix.shape}")
    return matrix


def check_dist_epipolar_line(
    kp1: KeyPoint,
    kp2: KeyPoint,
    f12,
    level_sigma2: Sequence[float],
) -> bool:
    """Tell whether ``kp2`` lies close enough to the epipolar line of ``kp1``.

    The line in the second image is ``l = x1^T F12``. The squared distance
    from ``kp2`` to it must be below the 95% chi-square bound scaled by the
    variance of ``kp2``'s pyramid level. A degenerate line never matches.
    """
    f = _fundamental(f12)
    if not 0 <= kp2.octave < len(level_sigma2):
        raise IndexError(
            f"octave {kp2.octave} is outside the {len(level_sigma2)} known pyramid levels"
        )

    x1 = np.float32(kp1.x)
    y1 = np.float32(kp1.y)
    a = x1 * f[0, 0] + y1 * f[1, 0] + f[2, 0]
    b = x1 * f[0, 1] + y1 * f[1, 1] + f[2, 1]
    c = x1 * f[0, 2] + y1 * f[1, 2] + f[2, 2]

    num = a * np.float32(kp2.x) + b * np.float32(kp2.y) + c
    den = a * a + b * b
    if den == 0:
        return False

    dsqr = float(num * num / den)
    return dsqr < _EPIPOLAR_CHI2 * float(level_sigma2[kp2.octave])