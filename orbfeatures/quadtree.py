"""Quadtree spreading of keypoints so that they cover the image evenly."""

from __future__ import annotations

import math
from collections import deque
from collections.abc import Iterable
from dataclasses import dataclass, field

from .keypoint import KeyPoint

Point = tuple[int, int]


@dataclass(eq=False)
class ExtractorNode:
    """A rectangular cell of the quadtree holding the keypoints inside it.

    Corners are ``(x, y)`` integer pairs: upper-left, upper-right,
    bottom-left and bottom-right. ``no_more`` marks a node that holds a
    single keypoint and is never divided again.
    """

    ul: Point
    ur: Point
    bl: Point
    br: Point
    keys: list[KeyPoint] = field(default_factory=list)
    no_more: bool = False

    def divide(self) -> tuple[ExtractorNode, ExtractorNode, ExtractorNode, ExtractorNode]:
        """Split into four children and hand each keypoint to the one containing it.

        Children come in the order upper-left, upper-right, bottom-left,
        bottom-right.
        """
        half_x = math.ceil((self.ur[0] - self.ul[0]) / 2)
        half_y = math.ceil((self.br[1] - self.ul[1]) / 2)
        ul_x, ul_y = self.ul

        n1 = ExtractorNode(
            ul=self.ul,
            ur=(ul_x + half_x, ul_y),
            bl=(ul_x, ul_y + half_y),
            br=(ul_x + half_x, ul_y + half_y),
        )
        n2 = ExtractorNode(
            ul=n1.ur,
            ur=self.ur,
            bl=n1.br,
            br=(self.ur[0], ul_y + half_y),
        )
        n3 = ExtractorNode(
            ul=n1.bl,
            ur=n1.br,
            bl=self.bl,
            br=(n1.br[0], self.bl[1]),
        )
        n4 = ExtractorNode(
            ul=n3.ur,
            ur=n2.br,
            bl=n3.br,
            br=self.br,
        )

        split_x = n1.ur[0]
        split_y = n1.br[1]
        for kp in self.keys:
            if kp.x < split_x:
                (n1 if kp.y < split_y else n3).keys.append(kp)
            elif kp.y < split_y:
                n2.keys.append(kp)
            else:
                n4.keys.append(kp)

        children = (n1, n2, n3, n4)
        for child in children:
            if len(child.keys) == 1:
                child.no_more = True
        return children


def _expand_largest(
    nodes: list[ExtractorNode], expandable: list[ExtractorNode], n: int
) -> list[ExtractorNode]:
    """Divide the most populated nodes first until ``n`` nodes exist or nothing changes."""
    while True:
        prev_size = len(nodes)
        ordered = sorted(expandable, key=lambda node: len(node.keys))
        expandable = []
        for node in reversed(ordered):
            for child in node.divide():
                if child.keys:
                    nodes.insert(0, child)
                    if len(child.keys) > 1:
                        expandable.append(child)
            nodes.remove(node)
            if len(nodes) >= n:
                break
        if len(nodes) >= n or len(nodes) == prev_size:
            return nodes


def distribute_oct_tree(
    keypoints: Iterable[KeyPoint],
    min_x: int,
    max_x: int,
    min_y: int,
    max_y: int,
    n: int,
) -> list[KeyPoint]:
    """Spread keypoints over the region and keep the strongest of each cell.

    Keypoint coordinates are relative to ``(min_x, min_y)``. The region is
    subdivided until there are at least ``n`` cells or no cell can be split
    further; the keypoint with the highest response in each cell is kept.
    """
    points = list(keypoints)
    if not points:
        return []
    width = max_x - min_x
    height = max_y - min_y
    if width <= 0 or height <= 0:
        raise ValueError("the region to distribute over must have positive width and height")

    n_ini = max(1, math.floor(width / height + 0.5))
    h_x = width / n_ini

    initial: list[ExtractorNode] = []
    for i in range(n_ini):
        left = int(h_x * i)
        right = int(h_x * (i + 1))
        initial.append(ExtractorNode(ul=(left, 0), ur=(right, 0), bl=(left, height), br=(right, height)))

    for kp in points:
        index = min(max(int(kp.x / h_x), 0), n_ini - 1)
        initial[index].keys.append(kp)

    nodes = [node for node in initial if node.keys]
    for node in nodes:
        if len(node.keys) == 1:
            node.no_more = True

    while True:
        prev_size = len(nodes)
        front: deque[ExtractorNode] = deque()
        kept: list[ExtractorNode] = []
        expandable: list[ExtractorNode] = []
        for node in nodes:
            if node.no_more:
                kept.append(node)
                continue
            for child in node.divide():
                if child.keys:
                    front.appendleft(child)
                    if len(child.keys) > 1:
                        expandable.append(child)
        nodes = list(front) + kept

        if len(nodes) >= n or len(nodes) == prev_size:
            break
        if len(nodes) + 3 * len(expandable) > n:
            nodes = _expand_largest(nodes, expandable, n)
            break

    return [max(node.keys, key=lambda kp: kp.response) for node in nodes]