"""
Collision Detection
===================

Axis-aligned bounding-box overlap with padded hitboxes.
"""

from __future__ import annotations

from typing import NamedTuple


class Rect(NamedTuple):
    """
    Axis-aligned rectangle.

    `top` and `bottom` are the two vertical edges with top <= bottom
    numerically. The overlap test does not depend on which way y points.
    """
    left: float
    right: float
    top: float
    bottom: float

    @property
    def width(self) -> float:
        return self.right - self.left

    @property
    def height(self) -> float:
        return self.bottom - self.top

    @property
    def center(self) -> tuple:
        return ((self.left + self.right) / 2, (self.top + self.bottom) / 2)


def check_collision(a: Rect, b: Rect) -> bool:
    """
    Test two rectangles for overlap.

    Touching edges count as a collision. The test is symmetric.

    Args:
        a: First rectangle.
        b: Second rectangle.

    Returns:
        False if the rectangles are separated along either axis, else True.
    """
    return not (
        a.right < b.left
        or a.left > b.right
        or a.bottom < b.top
        or a.top > b.bottom
    )


def padded_hitbox(
    left: float,
    bottom: float,
    width: float,
    height: float,
    padding: float
) -> Rect:
    """
    Build a hitbox from visual bounds shrunk by a fraction on each side.

    Args:
        left: Left edge of the visual bounds.
        bottom: Bottom edge (y-up) of the visual bounds.
        width: Visual width.
        height: Visual height.
        padding: Fraction of width/height removed from each side.

    Returns:
        The padded hitbox.
    """
    pad_x = width * padding
    pad_y = height * padding
    return Rect(
        left=left + pad_x,
        right=left + width - pad_x,
        top=bottom + pad_y,
        bottom=bottom + height - pad_y,
    )
