"""Image keypoint record shared by the extractor and the matcher."""

from __future__ import annotations

from dataclasses import dataclass, replace


@dataclass(slots=True)
class KeyPoint:
    """A detected image feature.

    ``x`` and ``y`` are pixel coordinates, ``size`` is the diameter of the
    meaningful neighbourhood, ``angle`` is the orientation in degrees
    (``-1`` when not computed), ``response`` is the detector score and
    ``octave`` is the pyramid level the point was found on.
    """

    x: float
    y: float
    size: float = 0.0
    angle: float = -1.0
    response: float = 0.0
    octave: int = 0

    def scaled(self, factor: float) -> KeyPoint:
        """Return a copy with both coordinates multiplied by ``factor``."""
        return replace(self, x=self.x * factor, y=self.y * factor)

    def shifted(self, dx: float, dy: float) -> KeyPoint:
        """Return a copy moved by ``(dx, dy)``."""
        return replace(self, x=self.x + dx, y=self.y + dy)