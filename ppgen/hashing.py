"""
One-way hashing of partial passwords.

Hash strings are self-describing so verification never depends on the
current defaults:

    scrypt$n=<n>$r=<r>$p=<p>$<salt base64>$<key base64>

Every call to ``hash`` uses a fresh random salt, so the same characters give
a different string each time.
"""

from __future__ import annotations

import base64
import binascii
import os
from typing import Protocol

from cryptography.exceptions import InvalidKey  # pip install cryptography
from cryptography.hazmat.primitives.kdf.scrypt import Scrypt

SCRYPT_PREFIX = "scrypt"


class PasswordHasher(Protocol):
    """Anything able to hash and verify partial passwords."""

    def hash(self, plaintext: str) -> str:
        ...

    def verify(self, plaintext: str, hashed: str) -> bool:
        ...


class ScryptHasher:
    """
    Memory-hard scrypt hashing backed by ``cryptography``.

    The cost parameters only affect new hashes; stored hashes carry their
    own parameters.
    """

    def __init__(
        self,
        n: int = 2**14,
        r: int = 8,
        p: int = 1,
        salt_length: int = 16,
        key_length: int = 32,
    ) -> None:
        if n < 2 or n & (n - 1):
            raise ValueError("scrypt n must be a power of 2 greater than 1")
        self.n = n
        self.r = r
        self.p = p
        self.salt_length = salt_length
        self.key_length = key_length

    def hash(self, plaintext: str) -> str:
        try:
            data = plaintext.encode("utf-8")
        except UnicodeEncodeError as exc:
            raise ValueError("Cannot hash text with unencodable characters.") from exc

        salt = os.urandom(self.salt_length)
        kdf = Scrypt(salt=salt, length=self.key_length, n=self.n, r=self.r, p=self.p)
        key = kdf.derive(data)
        return "$".join(
            [
                SCRYPT_PREFIX,
                f"n={self.n}",
                f"r={self.r}",
                f"p={self.p}",
                base64.b64encode(salt).decode("ascii"),
                base64.b64encode(key).decode("ascii"),
            ]
        )

    def verify(self, plaintext: str, hashed: str) -> bool:
        """
        Re-derive the key with the stored salt and parameters and compare
        it in constant time. Malformed hashes simply do not match.
        """
        try:
            prefix, n_part, r_part, p_part, salt_b64, key_b64 = hashed.split("$")
            if prefix != SCRYPT_PREFIX:
                return False
            n = int(n_part.removeprefix("n="))
            r = int(r_part.removeprefix("r="))
            p = int(p_part.removeprefix("p="))
            salt = base64.b64decode(salt_b64, validate=True)
            expected = base64.b64decode(key_b64, validate=True)
        except (AttributeError, ValueError, binascii.Error):
            return False

        if not expected:
            return False

        try:
            kdf = Scrypt(salt=salt, length=len(expected), n=n, r=r, p=p)
        except ValueError:
            # Bad cost parameters in the stored string.
            return False

        try:
            data = plaintext.encode("utf-8")
        except (AttributeError, UnicodeEncodeError):
            # Such text can never have been hashed.
            return False

        try:
            kdf.verify(data, expected)
        except InvalidKey:
            return False
        return True


DEFAULT_HASHER = ScryptHasher()
