"""
Partial password hash generator.

Given a raw password, builds a mapping of pattern -> hash where every hash
covers only the characters selected by its pattern. The raw password itself
is never hashed or stored.
"""

from __future__ import annotations

import logging
import random
import secrets
import time
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from .codec import encode_pattern, select_characters, split_characters, trim_password
from .config import DEFAULT_CONFIG, PartialPassConfig
from .hashing import DEFAULT_HASHER, PasswordHasher
from .sampler import sample_positions
from .weights import WeightTable

logger = logging.getLogger(__name__)


def default_rng() -> random.Random:
    """Random source used when the caller does not inject one."""
    return secrets.SystemRandom()


@dataclass
class GenerationSession:
    """
    All mutable state of one generation run.

    A session is created per call and owned by it, so independent runs
    never share a weight table or a hash mapping.
    """

    config: PartialPassConfig
    characters: Tuple[str, ...]
    weights: WeightTable
    rng: random.Random
    hasher: PasswordHasher
    hashes: Dict[int, str] = field(default_factory=dict)
    collisions: int = 0
    stopped_early: bool = False

    @classmethod
    def start(
        cls,
        raw_password: str | bytes,
        config: PartialPassConfig,
        hasher: PasswordHasher,
        rng: random.Random,
    ) -> "GenerationSession":
        trimmed = trim_password(raw_password, config.bits_range, config.encoding)
        return cls(
            config=config,
            characters=split_characters(trimmed),
            weights=WeightTable.fresh(config),
            rng=rng,
            hasher=hasher,
        )

    def next_positions(self) -> Optional[List[int]]:
        """
        Sample positions until they form a pattern not generated yet.

        Returns None when no more patterns can be built: either too few
        positions are still eligible or the collision retry cap was hit.
        """
        cfg = self.config
        for _ in range(cfg.max_collision_retries):
            positions = sample_positions(
                self.weights, cfg.characters_min, cfg.characters_max, self.rng
            )
            if not positions:
                return None
            if encode_pattern(positions, cfg.bits_range) not in self.hashes:
                return positions
            self.collisions += 1

        logger.info(
            "Gave up on a pattern after %d colliding attempts",
            cfg.max_collision_retries,
        )
        return None

    def add_partial_hash(self, positions: List[int]) -> int:
        pattern = encode_pattern(positions, self.config.bits_range)
        self.hashes[pattern] = self.hasher.hash(
            select_characters(positions, self.characters)
        )
        logger.debug("Generated pattern %d (%d characters)", pattern, len(positions))
        return pattern


@dataclass
class PartialGenerationMeta:
    """
    Full result of one partial hash generation, without any password
    material.
    """

    # Generated pattern -> hash mapping
    hashes: Dict[int, str]

    # How many hashes were asked for and whether generation ran out early
    requested: int
    stopped_early: bool

    # Length of the trimmed password used for the patterns
    trimmed_length: int

    # Final state of the weight table
    final_weights: Dict[int, int]
    remaining_positions: List[int]
    collisions: int

    elapsed_seconds: float
    config: PartialPassConfig

    @property
    def generated(self) -> int:
        return len(self.hashes)

    def report(self) -> dict:
        """JSON-friendly summary, e.g. for the command line generator test."""
        return {
            "conditions": self.config.as_dict(),
            "trimmed_length": self.trimmed_length,
            "requested": self.requested,
            "generated": self.generated,
            "stopped_early": self.stopped_early,
            "collisions": self.collisions,
            "final_weights": {str(k): v for k, v in self.final_weights.items()},
            "remaining_positions": self.remaining_positions,
            "generated_in": f"{self.elapsed_seconds:.4f}s",
            "hashes": {str(k): v for k, v in self.hashes.items()},
        }


def generate_partial_hashes_with_meta(
    raw_password: str | bytes,
    config: PartialPassConfig | None = None,
    *,
    hasher: PasswordHasher | None = None,
    rng: random.Random | None = None,
) -> PartialGenerationMeta:
    """
    Generation pipeline with metadata:

    - Trim the password to bits_range characters and split it.
    - Pick how many hashes to generate, uniformly in
      [passwords_min, passwords_max].
    - For each hash sample a fresh pattern, cut out its characters and
      hash them.
    - Stop early once the weight table cannot produce a new pattern.
    """
    cfg = config or DEFAULT_CONFIG
    session = GenerationSession.start(
        raw_password,
        cfg,
        hasher or DEFAULT_HASHER,
        rng or default_rng(),
    )

    started = time.perf_counter()
    requested = session.rng.randint(cfg.passwords_min, cfg.passwords_max)

    if not session.characters:
        logger.info("Empty password, no partial hashes generated")
        session.stopped_early = True
    else:
        for _ in range(requested):
            positions = session.next_positions()
            if positions is None:
                session.stopped_early = True
                break
            session.add_partial_hash(positions)

    elapsed = time.perf_counter() - started
    if session.stopped_early:
        logger.info(
            "Generated %d of %d requested partial hashes (positions exhausted)",
            len(session.hashes),
            requested,
        )
    else:
        logger.info("Generated %d partial hashes in %.3fs", len(session.hashes), elapsed)

    return PartialGenerationMeta(
        hashes=session.hashes,
        requested=requested,
        stopped_early=session.stopped_early,
        trimmed_length=len(session.characters),
        final_weights=session.weights.weights,
        remaining_positions=session.weights.remaining_positions(),
        collisions=session.collisions,
        elapsed_seconds=elapsed,
        config=cfg,
    )


def generate_partial_hashes(
    raw_password: str | bytes,
    config: PartialPassConfig | None = None,
    *,
    hasher: PasswordHasher | None = None,
    rng: random.Random | None = None,
) -> Dict[int, str]:
    """
    High-level function: return only the pattern -> hash mapping.
    """
    meta = generate_partial_hashes_with_meta(raw_password, config, hasher=hasher, rng=rng)
    return meta.hashes
