"""Room and furniture data model."""

from layoutsmith.layout.room import (
    CostZone,
    FurnitureItem,
    LayoutState,
    PairwiseCost,
    Room,
)

__all__ = ["CostZone", "FurnitureItem", "LayoutState", "PairwiseCost", "Room"]
