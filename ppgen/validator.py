"""
Validation of a partial password typed by the user.
"""

from __future__ import annotations

import logging
from typing import Optional, Sequence, Union

from .hashing import DEFAULT_HASHER, PasswordHasher

logger = logging.getLogger(__name__)


def join_characters(characters: Union[str, Sequence[str]]) -> str:
    """
    Form fields come in as one value per character box; join them into
    the string that was hashed.
    """
    if isinstance(characters, str):
        return characters
    return "".join(characters)


def validate_partial_password(
    pattern: int,
    characters: Union[str, Sequence[str]],
    stored_hash: Optional[str],
    hasher: PasswordHasher | None = None,
) -> bool:
    """
    Check the characters typed for ``pattern`` against its stored hash.

    A missing hash is a plain mismatch: callers cannot tell an unknown
    pattern from a wrong answer.
    """
    if not stored_hash:
        logger.debug("No stored hash for pattern %d", pattern)
        return False

    ok = (hasher or DEFAULT_HASHER).verify(join_characters(characters), stored_hash)
    logger.debug("Partial password for pattern %d %s", pattern, "accepted" if ok else "rejected")
    return ok
