"""FAST corner detection, quadtree keypoint distribution and binary descriptor matching helpers."""

__version__ = "0.1.0"