"""Hamming distance between binary descriptors and nearest-neighbour search."""

from __future__ import annotations

from collections.abc import Iterable
from typing import NamedTuple

import numpy as np

TH_HIGH = 100
TH_LOW = 50
DESCRIPTOR_BITS = 256


class BestMatches(NamedTuple):
    """Result of a nearest-neighbour search among candidate descriptors.

    ``index`` is the position of the closest candidate, or ``None`` when
    there were no candidates. ``distance`` and ``second_distance`` are the
    best and second-best Hamming distances; both start at 256, the number
    of bits in a descriptor, so an unmatched slot keeps that value.
    """

    index: int | None
    distance: int
    second_distance: int


def _as_bytes(descriptor) -> np.ndarray:
    if isinstance(descriptor, (bytes, bytearray, memoryview)):
        array = np.frombuffer(bytes(descriptor), dtype=np.uint8)
    else:
        array = np.asarray(descriptor)
        if array.dtype != np.uint8:
            if not np.issubdtype(array.dtype, np.integer):
                raise TypeError(f"descriptor must hold bytes, got dtype {array.dtype}")
            if array.size and (array.min() < 0 or array.max() > 255):
                raise ValueError("descriptor values must lie in 0..255")
            array = array.astype(np.uint8)
    if array.ndim != 1:
        raise ValueError(f"descriptor must be one-dimensional, got shape {array.shape}")
    return array


def descriptor_distance(a, b) -> int:
    """Return the number of differing bits between two binary descriptors."""
    first = _as_bytes(a)
    second = _as_bytes(b)
    if first.shape != second.shape:
        raise ValueError(
            f"descriptors differ in length: {first.size} and {second.size} bytes"
        )
    return int(np.unpackbits(np.bitwise_xor(first, second)).sum())


def best_two_matches(query, candidates: Iterable) -> BestMatches:
    """Find the closest and second-closest candidates to ``query``.

    Candidates are compared in order; on a tie the earlier one stays best.
    A candidate that does not beat the best but beats the second-best
    replaces only the second-best distance.
    """
    best_index: int | None = None
    best = DESCRIPTOR_BITS
    second = DESCRIPTOR_BITS
    for index, candidate in enumerate(candidates):
        dist = descriptor_distance(query, candidate)
        if dist < best:
            second = best
            best = dist
            best_index = index
        elif dist < second:
            second = dist
    return BestMatches(best_index, best, second)