"""
Random selection of character positions for one pattern.
"""

from __future__ import annotations

import random
from typing import List

from .weights import WeightTable


def sample_positions(
    table: WeightTable,
    characters_min: int,
    characters_max: int,
    rng: random.Random,
) -> List[int]:
    """
    Draw a random set of positions for a single pattern.

    - Only positions still eligible in the weight table are candidates.
    - The number of positions is uniform in [characters_min, k] where
      k = min(characters_max, number of candidates).
    - Positions are drawn without replacement and every drawn position is
      penalized in the table, so later patterns see the lower weight.

    Returns the positions in ascending order, or an empty list when fewer
    than characters_min positions are still eligible.
    """
    candidates = table.remaining_positions()
    upper = min(characters_max, len(candidates))
    if upper < characters_min:
        return []

    target = rng.randint(characters_min, upper)

    positions: List[int] = []
    for _ in range(target):
        index = rng.randrange(len(candidates))
        position = candidates.pop(index)
        table.penalize(position)
        positions.append(position)

    positions.sort()
    return positions
