"""Random neighbour generation for the annealing search."""

import logging

import numpy as np

from layoutsmith.layout.room import LayoutState
from layoutsmith.layout.wall_geometry import update_derived_fields
from layoutsmith.optimizer.gaussian import GaussianSampler

console_logger = logging.getLogger(__name__)

# Lower bound of the jitter standard deviation once the schedule has cooled.
JITTER_STDEV_FLOOR = 0.5


def _fits(
    state: LayoutState, half_extents: tuple[float, float], p: np.ndarray
) -> bool:
    half_width, half_height = half_extents
    return (
        0.0 <= p[0] - half_width
        and p[0] + half_width <= state.room.width
        and 0.0 <= p[1] - half_height
        and p[1] + half_height <= state.room.height
    )


class PerturbationGenerator:
    """Proposes a neighbouring layout by swapping and jittering item positions.

    Every call applies ``num_swaps`` random position swaps followed by Gaussian
    jitter on every item. The jitter standard deviation is
    ``temperature / initial_temperature + 0.5`` in units of the item's half
    extents, so moves shrink as the schedule cools. Moves that would push an
    item's footprint outside the room are rejected per axis.
    """

    def __init__(self, num_swaps: int = 1, rng: np.random.Generator | None = None):
        if num_swaps < 0:
            raise ValueError(f"num_swaps must be non-negative, got {num_swaps}")
        self.num_swaps = num_swaps
        self._rng = rng if rng is not None else np.random.default_rng()
        self._gaussian = GaussianSampler(self._rng)

    def swap_positions(self, state: LayoutState, index_a: int, index_b: int) -> bool:
        """Exchange the positions of two items in place.

        Equal indices are a no-op. A swap that would leave either footprint
        outside the room is skipped.

        Returns:
            True if the positions were exchanged.
        """
        if index_a == index_b:
            return False

        item_a = state.objects[index_a]
        item_b = state.objects[index_b]
        if not (
            _fits(state, item_a.half_extents, item_b.p)
            and _fits(state, item_b.half_extents, item_a.p)
        ):
            return False

        item_a.p, item_b.p = item_b.p, item_a.p
        return True

    def propose(
        self, state: LayoutState, temperature: float, initial_temperature: float
    ) -> LayoutState:
        """Generate a candidate from ``state``.

        Args:
            state: Current layout. Not modified.
            temperature: Current annealing temperature.
            initial_temperature: Temperature at the start of the schedule.

        Returns:
            A new, independent layout.
        """
        if not state.objects:
            raise ValueError("Cannot perturb a layout without furniture")

        candidate = state.clone()
        num_items = len(candidate.objects)

        for _ in range(self.num_swaps):
            index_a = int(self._rng.integers(num_items))
            index_b = int(self._rng.integers(num_items))
            self.swap_positions(candidate, index_a, index_b)

        stdev = temperature / initial_temperature + JITTER_STDEV_FLOOR
        room = candidate.room
        rejected = 0
        for index, item in enumerate(candidate.objects):
            half_width, half_height = item.half_extents
            new_x = item.p[0] + self._gaussian.sample(0.0, stdev) * half_width
            new_y = item.p[1] + self._gaussian.sample(0.0, stdev) * half_height

            if 0.0 <= new_x - half_width and new_x + half_width <= room.width:
                item.p[0] = new_x
            else:
                rejected += 1
            if 0.0 <= new_y - half_height and new_y + half_height <= room.height:
                item.p[1] = new_y
            else:
                rejected += 1

            # Swaps also move items, so every item is refreshed.
            update_derived_fields(candidate, index)

        if rejected:
            console_logger.debug(
                f"Rejected {rejected} out-of-bounds axis moves at T={temperature:.3f}"
            )
        return candidate
