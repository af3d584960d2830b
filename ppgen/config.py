"""
Configuration for the partial password hash generator.
"""

from __future__ import annotations

import codecs
from dataclasses import dataclass, fields
from typing import Any, Mapping

# Repeat drop rates: how much a position's weight drops each time it is
# selected for a pattern. Bigger drops exhaust positions sooner, so fewer
# patterns can be generated but generation is faster.
REPEAT_DROP_TINY = 1
REPEAT_DROP_SMALL = 10
REPEAT_DROP_MEDIUM = 25
REPEAT_DROP_BIG = 50

REPEAT_DROP_RATES = (
    REPEAT_DROP_TINY,
    REPEAT_DROP_SMALL,
    REPEAT_DROP_MEDIUM,
    REPEAT_DROP_BIG,
)

# Patterns are stored in a signed 64-bit integer column, so the widest
# pattern has 63 usable bits.
MAX_BITS_RANGE = 63

# Original camelCase option names, accepted by from_mapping().
_CAMEL_CASE_KEYS = {
    "bitsRange": "bits_range",
    "charactersMin": "characters_min",
    "charactersMax": "characters_max",
    "passwordsMin": "passwords_min",
    "passwordsMax": "passwords_max",
    "repeatDropRate": "repeat_drop_rate",
    "maxCollisionRetries": "max_collision_retries",
}

# Old 0..3 repeatDropRate flags and the drop each one stands for.
_LEGACY_DROP_FLAGS = {
    0: REPEAT_DROP_TINY,
    1: REPEAT_DROP_SMALL,
    2: REPEAT_DROP_MEDIUM,
    3: REPEAT_DROP_BIG,
}


class PartialPassConfigError(ValueError):
    """Raised when the generator configuration is invalid."""


def _require_int(name: str, value: Any) -> int:
    # bool is an int subclass but never a sensible bound.
    if isinstance(value, bool) or not isinstance(value, int):
        raise PartialPassConfigError(
            f"Invalid {name} parameter. Required value must be an integer, "
            f"got {value!r}."
        )
    return value


@dataclass(frozen=True)
class PartialPassConfig:
    # Maximum number of password characters taken into account.
    # Longer passwords are silently trimmed to this length.
    # This is also the width of the pattern bitmask.
    bits_range: int = 20

    # Bounds on how many characters the user is asked to type.
    characters_min: int = 3
    characters_max: int = 5

    # Bounds on how many partial hashes are generated for the user.
    # The real number may be smaller when positions run out.
    passwords_min: int = 5
    passwords_max: int = 8

    # Weight drop per selection, one of REPEAT_DROP_RATES.
    repeat_drop_rate: int = REPEAT_DROP_SMALL

    # Used to decode bytes passwords before trimming them.
    encoding: str = "utf-8"

    # How many times a colliding pattern is re-sampled before giving up
    # on the current pattern.
    max_collision_retries: int = 100

    def __post_init__(self) -> None:
        bits_range = _require_int("bits_range", self.bits_range)
        if bits_range < 1 or bits_range > MAX_BITS_RANGE:
            raise PartialPassConfigError(
                "Invalid bits_range parameter. Required value must be an "
                f"integer between 1 and {MAX_BITS_RANGE}, got {bits_range}."
            )

        characters_max = _require_int("characters_max", self.characters_max)
        if characters_max < 1 or characters_max > bits_range:
            raise PartialPassConfigError(
                "Invalid characters_max parameter. Required value must be "
                "greater than 0 and not greater than bits_range "
                f"(got {characters_max}, bits_range={bits_range})."
            )

        characters_min = _require_int("characters_min", self.characters_min)
        if characters_min < 1:
            raise PartialPassConfigError(
                "Invalid characters_min parameter. Required value must be "
                "greater than 0."
            )
        if characters_min > bits_range:
            raise PartialPassConfigError(
                "Invalid characters_min parameter. It cannot be greater than "
                f"bits_range ({characters_min} > {bits_range})."
            )
        if characters_min > characters_max:
            raise PartialPassConfigError(
                "Invalid characters_min parameter. It cannot be greater than "
                f"characters_max ({characters_min} > {characters_max})."
            )

        passwords_max = _require_int("passwords_max", self.passwords_max)
        if passwords_max < 1:
            raise PartialPassConfigError(
                "Invalid passwords_max parameter. Required value must be "
                "greater than 0."
            )

        passwords_min = _require_int("passwords_min", self.passwords_min)
        if passwords_min < 1 or passwords_min > passwords_max:
            raise PartialPassConfigError(
                "Invalid passwords_min parameter. Required value must be "
                "greater than 0 and not greater than passwords_max "
                f"(got {passwords_min}, passwords_max={passwords_max})."
            )

        if self.repeat_drop_rate not in REPEAT_DROP_RATES or isinstance(
            self.repeat_drop_rate, bool
        ):
            raise PartialPassConfigError(
                "Invalid repeat_drop_rate parameter. Required value must be "
                f"one of {REPEAT_DROP_RATES}, got {self.repeat_drop_rate!r}."
            )

        retries = _require_int("max_collision_retries", self.max_collision_retries)
        if retries < 1:
            raise PartialPassConfigError(
                "Invalid max_collision_retries parameter. Required value must "
                "be greater than 0."
            )

        try:
            codecs.lookup(self.encoding)
        except (LookupError, TypeError) as exc:
            raise PartialPassConfigError(
                f"Invalid encoding parameter: unknown codec {self.encoding!r}."
            ) from exc

    @property
    def max_pattern(self) -> int:
        """Largest pattern value this configuration can produce."""
        return (1 << self.bits_range) - 1

    def as_dict(self) -> dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in fields(self)}

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "PartialPassConfig":
        """
        Build a configuration from a plain mapping, e.g. a parsed JSON file.

        Missing keys keep their defaults. See normalize_mapping() for the
        accepted key names.
        """
        return cls(**normalize_mapping(data))


def normalize_mapping(data: Mapping[str, Any]) -> dict[str, Any]:
    """
    Rename mapping keys to PartialPassConfig field names.

    Both snake_case field names and the camelCase names used by older
    configuration files are accepted. Under the old ``repeatDropRate`` name
    the value is the 0..3 flag of those files, translated to its drop.
    Unknown keys are rejected.
    """
    known = {f.name for f in fields(PartialPassConfig)}
    values: dict[str, Any] = {}
    for key, value in data.items():
        name = _CAMEL_CASE_KEYS.get(key, key)
        if name not in known:
            raise PartialPassConfigError(f"Unknown configuration key {key!r}.")
        if key == "repeatDropRate":
            if (
                isinstance(value, bool)
                or not isinstance(value, int)
                or value not in _LEGACY_DROP_FLAGS
            ):
                raise PartialPassConfigError(
                    "Invalid repeatDropRate parameter. Required value must be "
                    f"0, 1, 2 or 3, got {value!r}."
                )
            value = _LEGACY_DROP_FLAGS[value]
        values[name] = value
    return values


# Default configuration instance you can import elsewhere
DEFAULT_CONFIG = PartialPassConfig()
