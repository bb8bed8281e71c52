"""Energy function for furniture layouts.

The energy of a candidate layout is a weighted sum of four active terms:

- accessibility: items intruding into other items' accessibility zones
- visibility: items intruding into other items' view frustum zones
- continuity in distance: change of each item's wall distance since the
  previous state
- continuity in angle: change of each item's wall-relative orientation since
  the previous state

Continuity dominates by default so that successive accepted states animate
smoothly. A fifth pairwise term (preferred distance between typed items) is
available but weighted zero unless configured.
"""

import logging
import math

from dataclasses import dataclass
from typing import Literal

from omegaconf import DictConfig

from layoutsmith.layout.room import CostZone, FurnitureItem, LayoutState
from layoutsmith.layout.wall_geometry import center_distance
from layoutsmith.utils import vector_math

console_logger = logging.getLogger(__name__)


class CostConfigurationError(ValueError):
    """Raised when a cost zone produces a non-positive or non-finite denominator.

    This signals malformed input (e.g. ``b + radius <= 0``) and aborts the run.
    """


@dataclass
class CostWeights:
    """Weights of the individual energy terms."""

    accessibility: float = 0.1
    visibility: float = 0.01
    continuity_distance: float = 1.0
    continuity_angle: float = 10.0
    pairwise: float = 0.0
    """Zero keeps the pairwise term out of the energy."""

    @classmethod
    def from_config(cls, cfg: DictConfig) -> "CostWeights":
        defaults = cls()
        return cls(
            accessibility=cfg.get("accessibility", defaults.accessibility),
            visibility=cfg.get("visibility", defaults.visibility),
            continuity_distance=cfg.get(
                "continuity_distance", defaults.continuity_distance
            ),
            continuity_angle=cfg.get("continuity_angle", defaults.continuity_angle),
            pairwise=cfg.get("pairwise", defaults.pairwise),
        )


@dataclass
class CostBreakdown:
    """Individual cost terms of one evaluation and their weighted total."""

    accessibility: float
    visibility: float
    continuity_distance: float
    continuity_angle: float
    pairwise: float
    total: float

    def to_description(self) -> str:
        return (
            f"accessibility={self.accessibility:.4f} "
            f"visibility={self.visibility:.4f} "
            f"continuity_distance={self.continuity_distance:.4f} "
            f"continuity_angle={self.continuity_angle:.4f} "
            f"pairwise={self.pairwise:.4f} total={self.total:.4f}"
        )


def _zone_cost(
    objs: list[FurnitureItem],
    zone_kind: Literal["accessibility", "visibility"],
) -> float:
    """Shared body of the accessibility and visibility terms.

    For every ordered pair (observer i, target j) of distinct items and every
    zone of j, adds ``max(0, 1 - |i.p - (j.p + offset)| / (i.b + radius))``.
    """
    cost = 0.0
    for observer in objs:
        for target in objs:
            if observer.id == target.id:
                continue

            zones: list[CostZone] = (
                target.accessibility_areas
                if zone_kind == "accessibility"
                else target.view_frustum
            )
            for zone in zones:
                try:
                    denominator = float(observer.b + zone.radius)
                except TypeError as e:
                    raise CostConfigurationError(
                        f"Non-numeric denominator at {zone_kind}: observer "
                        f"{observer.id} (b={observer.b!r}) against target "
                        f"{target.id} (zone radius={zone.radius!r})"
                    ) from e
                if not math.isfinite(denominator) or denominator <= 0:
                    raise CostConfigurationError(
                        f"Division by {denominator} at {zone_kind}: observer "
                        f"{observer.id} (b={observer.b}) against target "
                        f"{target.id} (zone radius={zone.radius})"
                    )

                zone_center = vector_math.add(target.p, zone.offset)
                distance = vector_math.magnitude(
                    vector_math.subtract(observer.p, zone_center)
                )
                cost += max(0.0, 1.0 - distance / denominator)

    return cost


def accessibility_cost(objs: list[FurnitureItem]) -> float:
    """Penalty for items standing inside other items' accessibility areas."""
    return _zone_cost(objs, "accessibility")


def visibility_cost(objs: list[FurnitureItem]) -> float:
    """Penalty for items standing inside other items' view frustum zones."""
    return _zone_cost(objs, "visibility")


def continuity_cost(
    current: list[FurnitureItem], previous: list[FurnitureItem]
) -> tuple[float, float]:
    """Index-aligned change of wall distance and wall angle between two states.

    Both sequences must hold the same items in the same order.

    Returns:
        Tuple of (distance cost, angle cost).
    """
    if len(current) != len(previous):
        raise ValueError(
            f"Cannot compare layouts with {len(current)} and {len(previous)} items"
        )

    distance_cost = 0.0
    angle_cost = 0.0
    for cur, prev in zip(current, previous):
        distance_cost += abs(cur.d - prev.d)
        angle_cost += abs(cur.theta_wall - prev.theta_wall)
    return distance_cost, angle_cost


def pairwise_cost(objs: list[FurnitureItem]) -> float:
    """Deviation from preferred distances between typed items.

    For every item declaring a ``pairwise_cost``, sums
    ``|target distance - center distance|`` over all other items of the
    target type.
    """
    cost = 0.0
    for i, item in enumerate(objs):
        if item.pairwise_cost is None:
            continue
        for j, other in enumerate(objs):
            if i == j or other.type != item.pairwise_cost.type:
                continue
            cost += abs(item.pairwise_cost.distance - center_distance(item, other))
    return cost


class CostModel:
    """Weighted energy over a candidate layout and its predecessor."""

    def __init__(self, weights: CostWeights | None = None):
        self.weights = weights or CostWeights()

    def evaluate(self, candidate: LayoutState, previous: LayoutState) -> CostBreakdown:
        """Compute every cost term for ``candidate`` relative to ``previous``."""
        acc = accessibility_cost(candidate.objects)
        vis = visibility_cost(candidate.objects)
        dist, angle = continuity_cost(candidate.objects, previous.objects)
        # Skipped entirely when disabled; it is O(n^2) and unused by default.
        pair = pairwise_cost(candidate.objects) if self.weights.pairwise else 0.0

        w = self.weights
        total = (
            w.accessibility * acc
            + w.visibility * vis
            + w.continuity_distance * dist
            + w.continuity_angle * angle
            + w.pairwise * pair
        )
        breakdown = CostBreakdown(
            accessibility=acc,
            visibility=vis,
            continuity_distance=dist,
            continuity_angle=angle,
            pairwise=pair,
            total=total,
        )
        console_logger.debug(f"Costs: {breakdown.to_description()}")
        return breakdown

    def energy(self, candidate: LayoutState, previous: LayoutState) -> float:
        """Scalar energy of ``candidate`` given ``previous``. Lower is better."""
        return self.evaluate(candidate, previous).total
