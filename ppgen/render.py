"""
Text rendering of a login challenge.

The pattern is decoded into one slot per character position: positions the
user has to type get an input box, all others a blank placeholder. The
bits_range used here must match the one used to generate the hashes.
"""

from __future__ import annotations

from typing import List

from .codec import decode_pattern


def active_slots(pattern: int, bits_range: int) -> List[int]:
    """1-based numbers of the characters the user is asked for."""
    return [
        position + 1
        for position, bit in enumerate(decode_pattern(pattern, bits_range))
        if bit
    ]


def render_challenge(
    pattern: int,
    bits_range: int,
    *,
    active: str = "[ ]",
    blank: str = " - ",
) -> str:
    """
    Two lines: position numbers on top and the slots below them.

        1   2   3   4   5
       [ ]  -  [ ]  -  [ ]
    """
    bits = decode_pattern(pattern, bits_range)
    width = max(len(active), len(blank), len(str(bits_range)))

    numbers = " ".join(str(position).center(width) for position in range(1, bits_range + 1))
    slots = " ".join((active if bit else blank).center(width) for bit in bits)
    return f"{numbers}\n{slots}"
