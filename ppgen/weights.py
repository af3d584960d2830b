"""
Position weight table.

Every character position starts with the same weight. Each time a position
is picked for a pattern its weight drops by the configured repeat drop rate,
and once the weight reaches zero the position cannot be picked again. This
spreads the revealed characters over the whole password instead of asking
for the same few positions in every challenge.
"""

from __future__ import annotations

from typing import Dict, List

from .config import PartialPassConfig

INITIAL_WEIGHT = 100


class WeightTable:
    """
    Mutable position -> weight mapping owned by a single generation run.
    """

    def __init__(self, bits_range: int, drop: int) -> None:
        if bits_range < 1:
            raise ValueError("bits_range must be greater than 0")
        if drop < 1:
            raise ValueError("drop must be greater than 0")
        self.drop = drop
        self._weights: Dict[int, int] = {
            position: INITIAL_WEIGHT for position in range(bits_range)
        }

    @classmethod
    def fresh(cls, config: PartialPassConfig) -> "WeightTable":
        return cls(config.bits_range, config.repeat_drop_rate)

    def __len__(self) -> int:
        return len(self._weights)

    def weight(self, position: int) -> int:
        return self._weights[position]

    @property
    def weights(self) -> Dict[int, int]:
        """Copy of the current weights, for reports."""
        return dict(self._weights)

    def remaining_positions(self) -> List[int]:
        """
        Positions that can still be selected (weight above zero),
        in ascending order.
        """
        return [position for position, weight in self._weights.items() if weight > 0]

    def penalize(self, position: int) -> None:
        """Lower the weight of a selected position. Unknown positions are ignored."""
        if position in self._weights:
            self._weights[position] -= self.drop

    def is_exhausted(self) -> bool:
        return not any(weight > 0 for weight in self._weights.values())
