import logging

from dataclasses import dataclass, field
from typing import Any

import numpy as np

console_logger = logging.getLogger(__name__)


def _lookup(data: dict[str, Any], *keys: str, default: Any = None) -> Any:
    """Return the first present key from ``keys``.

    Layout descriptions arrive either in snake_case or in the camelCase shape
    produced by the browser front end (e.g. ``thetaWall``).
    """
    for key in keys:
        if key in data:
            return data[key]
    return default


@dataclass(frozen=True)
class Room:
    """Axis-aligned rectangular room with its origin at the bottom-left corner."""

    width: float
    """Extent of the room along x."""

    height: float
    """Extent of the room along y."""

    def __post_init__(self) -> None:
        if not (np.isfinite(self.width) and np.isfinite(self.height)):
            raise ValueError(
                f"Room dimensions must be finite, got {self.width}x{self.height}"
            )
        if self.width <= 0 or self.height <= 0:
            raise ValueError(
                f"Room dimensions must be positive, got {self.width}x{self.height}"
            )

    def to_dict(self) -> dict[str, float]:
        return {"width": float(self.width), "height": float(self.height)}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Room":
        # The front end nests the dimensions under "size".
        size = data.get("size", data)
        return cls(width=float(size["width"]), height=float(size["height"]))


@dataclass
class CostZone:
    """Circular zone attached to a furniture item.

    Used both for accessibility areas (space that should stay reachable) and
    for view frustum zones (space that should stay visible).
    """

    offset: np.ndarray
    """Zone center relative to the owning item's position."""

    radius: float
    """Zone radius. Added to the observer's baseline to form the cost denominator."""

    def __post_init__(self) -> None:
        self.offset = np.array(self.offset, dtype=float)
        try:
            self.radius = float(self.radius)
        except (TypeError, ValueError) as e:
            raise ValueError(
                f"Cost zone at offset {self.offset.tolist()} has a non-numeric "
                f"radius: {self.radius!r}"
            ) from e

    def clone(self) -> "CostZone":
        return CostZone(offset=self.offset.copy(), radius=self.radius)

    def to_dict(self) -> dict[str, Any]:
        return {"offset": self.offset.tolist(), "radius": self.radius}

    @classmethod
    def from_dict(
        cls, data: dict[str, Any], offset_key: str, radius_key: str
    ) -> "CostZone":
        """Deserialize a zone.

        Args:
            data: Zone dictionary.
            offset_key: Legacy key holding the offset ("a" or "v").
            radius_key: Legacy key holding the radius ("ad" or "vd").
        """
        offset = _lookup(data, "offset", offset_key)
        radius = _lookup(data, "radius", radius_key)
        if offset is None or radius is None:
            raise ValueError(f"Cost zone is missing offset or radius: {data}")
        return cls(offset=offset, radius=radius)


@dataclass(frozen=True)
class PairwiseCost:
    """Preferred distance from an item to the items of another type."""

    type: str
    """Furniture type the distance refers to."""

    distance: float
    """Target center-to-center distance."""


@dataclass
class FurnitureItem:
    """A single piece of furniture and its cost-relevant geometry."""

    id: str
    """Unique identifier, stable across every state derived from the same input."""

    p: np.ndarray
    """Center position (x, y). Mutated in place by the perturbation generator."""

    width: float
    """Footprint extent along x."""

    height: float
    """Footprint extent along y."""

    b: float = 0.0
    """Baseline term combined with each zone radius to form a cost denominator."""

    accessibility_areas: list[CostZone] = field(default_factory=list)
    """Zones around this item that should remain reachable by other items."""

    view_frustum: list[CostZone] = field(default_factory=list)
    """Zones around this item that should remain visible."""

    theta: float = 0.0
    """Orientation of the item's front in radians, measured from the +x axis."""

    d: float = 0.0
    """Distance from the center to the nearest wall. Derived from ``p``."""

    theta_wall: float = 0.0
    """Angle from ``theta`` to the nearest wall inward normal. Derived from ``p``."""

    type: str | None = None
    """Furniture category (e.g. 'chair'). Only the pairwise cost reads it."""

    pairwise_cost: PairwiseCost | None = None
    """Optional target distance to the nearest items of a given type."""

    def __post_init__(self) -> None:
        self.p = np.array(self.p, dtype=float)
        if self.p.shape != (2,):
            raise ValueError(f"Item {self.id} position must be 2D, got {self.p}")

    @property
    def half_extents(self) -> tuple[float, float]:
        return self.width / 2.0, self.height / 2.0

    def clone(self) -> "FurnitureItem":
        """Return a structurally independent copy of this item."""
        return FurnitureItem(
            id=self.id,
            p=self.p.copy(),
            width=self.width,
            height=self.height,
            b=self.b,
            accessibility_areas=[zone.clone() for zone in self.accessibility_areas],
            view_frustum=[zone.clone() for zone in self.view_frustum],
            theta=self.theta,
            d=self.d,
            theta_wall=self.theta_wall,
            type=self.type,
            # PairwiseCost is frozen, so sharing it is safe.
            pairwise_cost=self.pairwise_cost,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "p": self.p.tolist(),
            "width": self.width,
            "height": self.height,
            "b": self.b,
            "accessibility_areas": [z.to_dict() for z in self.accessibility_areas],
            "view_frustum": [z.to_dict() for z in self.view_frustum],
            "theta": self.theta,
            "d": self.d,
            "theta_wall": self.theta_wall,
            "type": self.type,
            "pairwise_cost": (
                {
                    "type": self.pairwise_cost.type,
                    "distance": self.pairwise_cost.distance,
                }
                if self.pairwise_cost
                else None
            ),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "FurnitureItem":
        if "id" not in data or "p" not in data:
            raise ValueError(f"Furniture item requires 'id' and 'p': {data}")

        pairwise_data = _lookup(data, "pairwise_cost", "pairwiseCost")
        pairwise = (
            PairwiseCost(
                type=str(pairwise_data["type"]),
                distance=float(pairwise_data["distance"]),
            )
            if pairwise_data
            else None
        )

        return cls(
            id=str(data["id"]),
            p=data["p"],
            width=float(data["width"]),
            height=float(data["height"]),
            b=float(data.get("b", 0.0)),
            accessibility_areas=[
                CostZone.from_dict(z, offset_key="a", radius_key="ad")
                for z in _lookup(
                    data, "accessibility_areas", "accessibilityAreas", default=[]
                )
            ],
            view_frustum=[
                CostZone.from_dict(z, offset_key="v", radius_key="vd")
                for z in _lookup(data, "view_frustum", "viewFrustum", default=[])
            ],
            theta=float(data.get("theta", 0.0)),
            d=float(data.get("d", 0.0)),
            theta_wall=float(_lookup(data, "theta_wall", "thetaWall", default=0.0)),
            type=data.get("type"),
            pairwise_cost=pairwise,
        )


@dataclass
class LayoutState:
    """A room together with an ordered sequence of furniture items.

    The order of ``objects`` is significant: continuity costs compare items at
    the same index between two states, so every state derived from another must
    keep the same order. Swaps exchange positions, never list entries.
    """

    room: Room
    """Bounding room. Never mutated."""

    objects: list[FurnitureItem] = field(default_factory=list)
    """Furniture items in a fixed order."""

    def __post_init__(self) -> None:
        seen: set[str] = set()
        for item in self.objects:
            if item.id in seen:
                raise ValueError(f"Duplicate furniture id in layout: {item.id}")
            seen.add(item.id)

    def clone(self) -> "LayoutState":
        """Return a deep, structurally independent copy of this state."""
        # Room is frozen and can be shared.
        return LayoutState(
            room=self.room, objects=[item.clone() for item in self.objects]
        )

    @property
    def ids(self) -> list[str]:
        return [item.id for item in self.objects]

    def get_object(self, object_id: str) -> FurnitureItem | None:
        for item in self.objects:
            if item.id == object_id:
                return item
        return None

    def to_dict(self) -> dict[str, Any]:
        return {
            "room": self.room.to_dict(),
            "objects": [item.to_dict() for item in self.objects],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "LayoutState":
        """Build a layout from a plain dictionary.

        Accepts both the snake_case shape produced by ``to_dict`` and the
        camelCase shape used by the browser front end.
        """
        if "room" not in data:
            raise ValueError("Layout description requires a 'room' entry")
        objects = [FurnitureItem.from_dict(o) for o in data.get("objects", [])]
        state = cls(room=Room.from_dict(data["room"]), objects=objects)
        console_logger.debug(
            f"Loaded layout with {len(objects)} items in a "
            f"{state.room.width}x{state.room.height} room"
        )
        return state
