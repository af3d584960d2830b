"""
Partial password service: ties the generator, a pattern store and the
validator together for registration and login flows.

Typical use:

    service = PartialPasswordService(FilePatternStore("passwords.json"))

    # registration / password change
    service.save_partial_hashes(user_id, password)

    # login
    pattern = service.get_random_partial_pattern(user_id)
    ... show the boxes for `pattern`, collect the typed characters ...
    ok = service.validate_partial_password(user_id, pattern, typed)

Generating many hashes with a large bits_range and a slow hash can take a
noticeable time. Callers serving web requests may want to run
save_partial_hashes() outside the request or under their own timeout.
"""

from __future__ import annotations

import logging
import random
from typing import Callable, Dict, List, Optional, Sequence, Union

from .config import DEFAULT_CONFIG, PartialPassConfig
from .generator import PartialGenerationMeta, default_rng, generate_partial_hashes_with_meta
from .hashing import DEFAULT_HASHER, PasswordHasher
from .store import PartialHashRow, PatternStore
from .validator import validate_partial_password

logger = logging.getLogger(__name__)

PasswordProvider = Callable[[str], Optional[str]]


class PartialPasswordError(ValueError):
    """Raised when partial hashes cannot be saved for a user."""


class PartialPasswordService:
    """
    Storage-facing partial password operations for one configuration.

    ``password_provider`` is an optional fallback used by
    save_partial_hashes() when no password is passed in, e.g. a lookup of
    the password the user just submitted in a registration form.
    """

    def __init__(
        self,
        store: PatternStore,
        config: PartialPassConfig | None = None,
        hasher: PasswordHasher | None = None,
        rng: random.Random | None = None,
        password_provider: PasswordProvider | None = None,
    ) -> None:
        self.store = store
        self.config = config or DEFAULT_CONFIG
        self.hasher = hasher or DEFAULT_HASHER
        self.rng = rng or default_rng()
        self.password_provider = password_provider

    def generate(self, password: str | bytes) -> PartialGenerationMeta:
        return generate_partial_hashes_with_meta(
            password, self.config, hasher=self.hasher, rng=self.rng
        )

    @staticmethod
    def format_rows(user_id: str, hashes: Dict[int, str]) -> List[PartialHashRow]:
        """Turn a pattern -> hash mapping into rows ready for bulk insert."""
        return [
            PartialHashRow(user_id=str(user_id), pattern=pattern, password_hash=password_hash)
            for pattern, password_hash in hashes.items()
        ]

    def delete_previous_partial_hashes(self, user_id: str) -> int:
        return self.store.delete_user(user_id)

    def save_partial_hashes(
        self,
        user_id: str | None,
        password: str | bytes | None = None,
        hashes: Dict[int, str] | None = None,
        delete_previous: bool = True,
    ) -> int:
        """
        Store the user's partial hashes and return the number of rows written.

        - ``hashes`` already generated are stored as they are.
        - Otherwise hashes are generated from ``password``, or from the
          password provider when no password is given.
        - With ``delete_previous`` the user's older rows are removed first.

        Raises PartialPasswordError when there is no user id or no password
        to generate from. Nothing is deleted in that case.
        """
        if user_id is None or user_id == "":
            raise PartialPasswordError("No user_id given.")

        if not hashes:
            if not password and self.password_provider is not None:
                password = self.password_provider(str(user_id))
            if not password:
                raise PartialPasswordError("No password given.")
            hashes = self.generate(password).hashes

        if delete_previous:
            deleted = self.delete_previous_partial_hashes(str(user_id))
            if deleted:
                logger.info("Removed %d previous partial hashes for user %s", deleted, user_id)

        written = self.store.insert_many(self.format_rows(str(user_id), hashes))
        logger.info("Saved %d partial hashes for user %s", written, user_id)
        return written

    def get_partial_hash_for_pattern(self, user_id: str, pattern: int) -> Optional[str]:
        return self.store.get_hash(user_id, pattern)

    def get_random_partial_pattern(self, user_id: str) -> Optional[int]:
        return self.store.random_pattern(user_id, self.rng)

    def validate_partial_password(
        self,
        user_id: str,
        pattern: int,
        characters: Union[str, Sequence[str]],
    ) -> bool:
        stored = self.get_partial_hash_for_pattern(user_id, pattern)
        return validate_partial_password(pattern, characters, stored, self.hasher)
