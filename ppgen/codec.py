"""
Pattern codec:
Converts sets of character positions to and from pattern integers, and
cuts the selected characters out of a password.

A pattern is the integer whose bit i is 1 when character position i must be
typed by the user. Bit 0 is the least significant bit, so position 0 (the
first character) is the lowest bit.
"""

from __future__ import annotations

from typing import Iterable, List, Sequence, Tuple

from .config import MAX_BITS_RANGE


def _check_bits_range(bits_range: int) -> None:
    if bits_range < 1 or bits_range > MAX_BITS_RANGE:
        raise ValueError(
            f"bits_range must be between 1 and {MAX_BITS_RANGE}, got {bits_range}"
        )


def encode_pattern(positions: Iterable[int], bits_range: int) -> int:
    """
    Pack a set of positions [0, 2, 4, ...] into a pattern integer.
    """
    _check_bits_range(bits_range)

    pattern = 0
    for position in positions:
        if not 0 <= position < bits_range:
            raise ValueError(
                f"position {position} is outside of bits_range {bits_range}"
            )
        pattern |= 1 << position
    return pattern


def decode_pattern(pattern: int, bits_range: int) -> List[int]:
    """
    Unpack a pattern into a list of bits_range flags (0/1), one per
    character position, first position first.
    """
    _check_bits_range(bits_range)
    if pattern < 0 or pattern >> bits_range:
        raise ValueError(
            f"pattern {pattern} does not fit in {bits_range} bits"
        )
    return [(pattern >> position) & 1 for position in range(bits_range)]


def pattern_positions(pattern: int) -> List[int]:
    """
    Positions of the set bits of a pattern, ascending.
    """
    if pattern < 0:
        raise ValueError(f"pattern must not be negative, got {pattern}")

    positions: List[int] = []
    position = 0
    while pattern:
        if pattern & 1:
            positions.append(position)
        pattern >>= 1
        position += 1
    return positions


def count_bits(pattern: int) -> int:
    return bin(pattern).count("1")


def trim_password(password: str | bytes, bits_range: int, encoding: str = "utf-8") -> str:
    """
    Cut the password down to at most bits_range characters.

    Bytes are decoded with the given encoding first so multi-byte characters
    are never split; the limit counts characters, not bytes.

    Raises ValueError when the bytes do not decode, or when the kept
    characters cannot be hashed (lone surrogates left by undecodable input).
    """
    if isinstance(password, (bytes, bytearray)):
        try:
            password = bytes(password).decode(encoding)
        except UnicodeDecodeError as exc:
            raise ValueError(f"Password is not valid {encoding} text.") from exc

    trimmed = password[:bits_range]
    try:
        trimmed.encode("utf-8")
    except UnicodeEncodeError as exc:
        raise ValueError(
            f"Password contains a character that cannot be hashed at position {exc.start}."
        ) from exc
    return trimmed


def split_characters(text: str) -> Tuple[str, ...]:
    return tuple(text)


def select_characters(positions: Iterable[int], characters: Sequence[str]) -> str:
    """
    Join the characters found at the given positions, in ascending order.

    Positions beyond the end of the password add nothing, so a short
    password never breaks hashing.
    """
    size = len(characters)
    return "".join(
        characters[position] if 0 <= position < size else ""
        for position in sorted(positions)
    )
