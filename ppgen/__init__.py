"""
Partial password hash generator package.
"""

from .config import (
    DEFAULT_CONFIG,
    MAX_BITS_RANGE,
    REPEAT_DROP_BIG,
    REPEAT_DROP_MEDIUM,
    REPEAT_DROP_SMALL,
    REPEAT_DROP_TINY,
    PartialPassConfig,
    PartialPassConfigError,
)
from .codec import decode_pattern, encode_pattern, select_characters
from .generator import generate_partial_hashes, generate_partial_hashes_with_meta
from .hashing import ScryptHasher
from .service import PartialPasswordError, PartialPasswordService
from .store import FilePatternStore, MemoryPatternStore, PatternStoreError
from .validator import validate_partial_password

__all__ = [
    "PartialPassConfig",
    "PartialPassConfigError",
    "DEFAULT_CONFIG",
    "MAX_BITS_RANGE",
    "REPEAT_DROP_TINY",
    "REPEAT_DROP_SMALL",
    "REPEAT_DROP_MEDIUM",
    "REPEAT_DROP_BIG",
    "encode_pattern",
    "decode_pattern",
    "select_characters",
    "generate_partial_hashes",
    "generate_partial_hashes_with_meta",
    "ScryptHasher",
    "validate_partial_password",
    "PartialPasswordService",
    "PartialPasswordError",
    "MemoryPatternStore",
    "FilePatternStore",
    "PatternStoreError",
]
