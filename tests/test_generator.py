import logging
import random
import threading

import pytest

from ppgen.codec import count_bits, pattern_positions, select_characters
from ppgen.config import REPEAT_DROP_RATES, PartialPassConfig
from ppgen.generator import generate_partial_hashes, generate_partial_hashes_with_meta


class RecordingHasher:
    """Keeps the plaintext of every hash so tests can inspect what was hashed."""

    def __init__(self):
        self.plaintexts = {}

    def hash(self, plaintext):
        token = f"h{len(self.plaintexts)}"
        self.plaintexts[token] = plaintext
        return token

    def verify(self, plaintext, hashed):
        return self.plaintexts.get(hashed) == plaintext


def test_single_full_pattern(rng, fast_hasher):
    cfg = PartialPassConfig(
        bits_range=3,
        characters_min=3,
        characters_max=3,
        passwords_min=1,
        passwords_max=1,
    )
    hashes = generate_partial_hashes("xyz", cfg, hasher=fast_hasher, rng=rng)
    assert list(hashes) == [7]
    assert fast_hasher.verify("xyz", hashes[7])


def test_hashes_cover_selected_characters(rng):
    hasher = RecordingHasher()
    cfg = PartialPassConfig(
        bits_range=5, characters_min=2, characters_max=3, passwords_min=4, passwords_max=6
    )
    hashes = generate_partial_hashes("abcde", cfg, hasher=hasher, rng=rng)
    assert hashes
    for pattern, hashed in hashes.items():
        expected = select_characters(pattern_positions(pattern), "abcde")
        assert hasher.plaintexts[hashed] == expected


def test_randomized_runs_keep_invariants():
    rng = random.Random(1234)
    hasher = RecordingHasher()
    for _ in range(100):
        bits_range = rng.randint(1, 24)
        characters_max = rng.randint(1, bits_range)
        characters_min = rng.randint(1, characters_max)
        passwords_max = rng.randint(1, 12)
        cfg = PartialPassConfig(
            bits_range=bits_range,
            characters_min=characters_min,
            characters_max=characters_max,
            passwords_min=rng.randint(1, passwords_max),
            passwords_max=passwords_max,
            repeat_drop_rate=rng.choice(REPEAT_DROP_RATES),
        )
        password = "".join(rng.choice("abcdefXYZ0123!?") for _ in range(rng.randint(1, 30)))

        meta = generate_partial_hashes_with_meta(password, cfg, hasher=hasher, rng=rng)

        assert len(meta.hashes) <= meta.requested
        assert cfg.passwords_min <= meta.requested <= cfg.passwords_max
        if not meta.stopped_early:
            assert len(meta.hashes) == meta.requested
        assert len(set(meta.hashes)) == len(meta.hashes)
        assert len(set(meta.hashes.values())) == len(meta.hashes)
        for pattern in meta.hashes:
            assert 0 < pattern < 2**bits_range
            assert characters_min <= count_bits(pattern) <= characters_max


def test_empty_password_gives_no_hashes(rng, fast_hasher):
    meta = generate_partial_hashes_with_meta("", hasher=fast_hasher, rng=rng)
    assert meta.hashes == {}
    assert meta.stopped_early
    assert meta.trimmed_length == 0


def test_long_password_is_trimmed(rng):
    hasher = RecordingHasher()
    cfg = PartialPassConfig(
        bits_range=4, characters_min=4, characters_max=4, passwords_min=1, passwords_max=1
    )
    meta = generate_partial_hashes_with_meta("mySamplePassword2001", cfg, hasher=hasher, rng=rng)
    assert meta.trimmed_length == 4
    assert list(hasher.plaintexts.values()) == ["mySa"]


def test_multibyte_password_from_bytes(rng):
    hasher = RecordingHasher()
    cfg = PartialPassConfig(
        bits_range=3, characters_min=3, characters_max=3, passwords_min=1, passwords_max=1
    )
    generate_partial_hashes("żółw".encode("utf-8"), cfg, hasher=hasher, rng=rng)
    assert list(hasher.plaintexts.values()) == ["żół"]


def test_big_drop_rate_runs_out_early(rng):
    # Two selections exhaust a position, so four positions allow at most
    # four single-character patterns.
    cfg = PartialPassConfig(
        bits_range=4,
        characters_min=1,
        characters_max=1,
        passwords_min=20,
        passwords_max=20,
        repeat_drop_rate=50,
    )
    meta = generate_partial_hashes_with_meta("abcd", cfg, hasher=RecordingHasher(), rng=rng)
    assert meta.stopped_early
    assert set(meta.hashes) <= {1, 2, 4, 8}
    assert meta.remaining_positions == []
    assert all(weight <= 0 for weight in meta.final_weights.values())


def test_collision_retries_are_capped(rng):
    # A single position can only ever give pattern 1.
    cfg = PartialPassConfig(
        bits_range=1,
        characters_min=1,
        characters_max=1,
        passwords_min=3,
        passwords_max=3,
        repeat_drop_rate=1,
        max_collision_retries=5,
    )
    meta = generate_partial_hashes_with_meta("a", cfg, hasher=RecordingHasher(), rng=rng)
    assert list(meta.hashes) == [1]
    assert meta.stopped_early
    assert meta.collisions == 5
    # One selection for the pattern plus one per collision.
    assert meta.final_weights == {0: 100 - 6}


def test_report_has_no_password_material(rng):
    hasher = RecordingHasher()
    cfg = PartialPassConfig(bits_range=6, characters_min=2, characters_max=3)
    meta = generate_partial_hashes_with_meta("secret", cfg, hasher=hasher, rng=rng)
    report = meta.report()
    assert report["generated"] == len(meta.hashes)
    assert report["conditions"]["bits_range"] == 6
    assert "secret" not in str(report)


def test_generation_is_logged_without_characters(rng, caplog):
    cfg = PartialPassConfig(bits_range=6, characters_min=2, characters_max=3)
    with caplog.at_level(logging.DEBUG, logger="ppgen"):
        generate_partial_hashes("qwerty", cfg, hasher=RecordingHasher(), rng=rng)
    assert "partial hashes" in caplog.text
    assert "qwerty" not in caplog.text


def test_parallel_runs_are_independent():
    cfg = PartialPassConfig(bits_range=10, characters_min=2, characters_max=4)
    results = {}

    def run(seed):
        hasher = RecordingHasher()
        meta = generate_partial_hashes_with_meta(
            "parallel-password", cfg, hasher=hasher, rng=random.Random(seed)
        )
        results[seed] = (sorted(meta.hashes), meta.final_weights)

    threads = [threading.Thread(target=run, args=(seed,)) for seed in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    for seed in range(8):
        hasher = RecordingHasher()
        meta = generate_partial_hashes_with_meta(
            "parallel-password", cfg, hasher=hasher, rng=random.Random(seed)
        )
        assert results[seed] == (sorted(meta.hashes), meta.final_weights)


def test_unhashable_password_fails_before_hashing(rng):
    hasher = RecordingHasher()
    with pytest.raises(ValueError, match="cannot be hashed"):
        generate_partial_hashes("a\udcffc", hasher=hasher, rng=rng)
    assert hasher.plaintexts == {}
