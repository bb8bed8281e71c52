"""Wall-relative geometry for furniture items.

The continuity cost terms compare each item's distance to its nearest wall
(``d``) and its orientation relative to that wall (``theta_wall``) between
successive states. These fields are derived from the item position and must be
refreshed whenever the position changes.
"""

import logging
import math

from enum import Enum

import numpy as np

from layoutsmith.layout.room import FurnitureItem, LayoutState, Room
from layoutsmith.utils import vector_math

console_logger = logging.getLogger(__name__)


class WallDirection(Enum):
    """Cardinal direction for room walls. Declaration order breaks distance ties."""

    WEST = "west"
    EAST = "east"
    SOUTH = "south"
    NORTH = "north"

    def get_inward_normal(self) -> tuple[float, float]:
        """Get unit normal vector pointing INTO the room.

        Returns:
            (nx, ny) unit vector pointing into room interior.
        """
        if self == WallDirection.NORTH:
            return (0.0, -1.0)
        elif self == WallDirection.SOUTH:
            return (0.0, 1.0)
        elif self == WallDirection.EAST:
            return (-1.0, 0.0)
        else:  # WEST
            return (1.0, 0.0)


def nearest_wall(room: Room, p: np.ndarray) -> tuple[WallDirection, float]:
    """Find the wall closest to a point.

    Args:
        room: Room bounds.
        p: Point (x, y) in room coordinates.

    Returns:
        Tuple of (wall direction, distance from the point to that wall).
    """
    x, y = float(p[0]), float(p[1])
    distances = {
        WallDirection.WEST: x,
        WallDirection.EAST: room.width - x,
        WallDirection.SOUTH: y,
        WallDirection.NORTH: room.height - y,
    }
    # min() keeps the first of equal values, i.e. enum declaration order.
    wall = min(distances, key=distances.__getitem__)
    return wall, distances[wall]


def _angle_between(theta: float, normal: tuple[float, float]) -> float:
    """Absolute angle in [0, pi] between a heading and a direction vector."""
    normal_angle = math.atan2(normal[1], normal[0])
    diff = (theta - normal_angle) % (2.0 * math.pi)
    return min(diff, 2.0 * math.pi - diff)


def compute_wall_fields(room: Room, item: FurnitureItem) -> tuple[float, float]:
    """Compute ``(d, theta_wall)`` for an item without modifying it.

    ``d`` is measured from the footprint edge facing the nearest wall, clamped
    at zero. ``theta_wall`` is the absolute angle between the item heading and
    the nearest wall's inward normal, so an item facing straight into the room
    has ``theta_wall == 0``.
    """
    wall, center_distance_to_wall = nearest_wall(room, item.p)
    half_width, half_height = item.half_extents
    if wall in (WallDirection.WEST, WallDirection.EAST):
        edge_distance = center_distance_to_wall - half_width
    else:
        edge_distance = center_distance_to_wall - half_height

    return max(0.0, edge_distance), _angle_between(
        item.theta, wall.get_inward_normal()
    )


def update_derived_fields(state: LayoutState, index: int) -> FurnitureItem:
    """Recompute ``d`` and ``theta_wall`` of ``state.objects[index]`` in place.

    Returns:
        The updated item.
    """
    item = state.objects[index]
    item.d, item.theta_wall = compute_wall_fields(state.room, item)
    return item


def update_all_derived_fields(state: LayoutState) -> LayoutState:
    """Refresh the derived fields of every item in ``state`` in place."""
    for index in range(len(state.objects)):
        update_derived_fields(state, index)
    return state


def center_distance(item_a: FurnitureItem, item_b: FurnitureItem) -> float:
    """Euclidean distance between two item centers."""
    return vector_math.magnitude(vector_math.subtract(item_a.p, item_b.p))
