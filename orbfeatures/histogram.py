"""Rotation-consistency check for keypoint matches.

Matches are binned by the difference of their keypoint angles. Only the
three most populated bins are trusted, so matches whose rotation disagrees
with the dominant ones can be discarded.
"""

from __future__ import annotations

import math
from collections.abc import Sequence, Sized

import numpy as np

HISTO_LENGTH = 30
_MINOR_FRACTION = np.float32(0.1)


def compute_three_maxima(
    histogram: Sequence[Sized],
) -> tuple[int | None, int | None, int | None]:
    """Return the indices of the three most populated bins.

    Empty bins are never chosen, and on a tie the earlier bin wins. The
    second and third bins are dropped (``None``) when they hold fewer than a
    tenth of the entries of the first; the third alone is dropped when only
    it falls below that fraction.
    """
    max1 = max2 = max3 = 0
    ind1: int | None = None
    ind2: int | None = None
    ind3: int | None = None

    for index, bin_ in enumerate(histogram):
        size = len(bin_)
        if size > max1:
            max3, max2, max1 = max2, max1, size
            ind3, ind2, ind1 = ind2, ind1, index
        elif size > max2:
            max3, max2 = max2, size
            ind3, ind2 = ind2, index
        elif size > max3:
            max3 = size
            ind3 = index

    limit = _MINOR_FRACTION * np.float32(max1)
    if max2 < limit:
        ind2 = None
        ind3 = None
    elif max3 < limit:
        ind3 = None
    return ind1, ind2, ind3


class RotationHistogram:
    """Histogram of the angle differences of matched keypoint pairs."""

    def __init__(self, length: int = HISTO_LENGTH) -> None:
        if length < 1:
            raise ValueError("histogram length must be at least 1")
        self.length = int(length)
        self._factor = np.float32(1.0) / np.float32(self.length)
        self.bins: list[list[int]] = [[] for _ in range(self.length)]

    def _bin_of(self, angle1: float, angle2: float) -> int:
        rot = np.float32(angle1) - np.float32(angle2)
        if rot < 0.0:
            rot = np.float32(rot + np.float32(360.0))
        scaled = float(np.float32(rot * self._factor))
        bin_ = math.floor(scaled + 0.5)
        if bin_ == self.length:
            bin_ = 0
        if not 0 <= bin_ < self.length:
            raise ValueError(
                f"rotation {float(rot)} falls outside a histogram of {self.length} bins"
            )
        return bin_

    def add(self, angle1: float, angle2: float, index: int) -> int:
        """Record ``index`` under the bin of ``angle1 - angle2``; return that bin."""
        bin_ = self._bin_of(angle1, angle2)
        self.bins[bin_].append(index)
        return bin_

    def inconsistent(self) -> list[int]:
        """Return the recorded indices lying outside the three dominant bins.

        Indices come in bin order, and in insertion order within a bin.
        """
        keep = {i for i in compute_three_maxima(self.bins) if i is not None}
        return [
            index
            for bin_number, bin_ in enumerate(self.bins)
            if bin_number not in keep
            for index in bin_
        ]