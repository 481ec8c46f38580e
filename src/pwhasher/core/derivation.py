"""PBKDF2 key derivation."""

from __future__ import annotations

import hashlib
import logging
from enum import Enum

from pwhasher.core.errors import DerivationError

logger = logging.getLogger(__name__)


class Algorithm(Enum):
    """Supported derivation algorithms, keyed by their record identifier."""

    SHA512_PBKDF2 = "sha512"

    @property
    def identifier(self) -> str:
        return self.value

    @property
    def digest_name(self) -> str:
        """Name of the HMAC digest passed to ``hashlib.pbkdf2_hmac``."""

        return _DIGEST_NAMES[self]

    @classmethod
    def from_identifier(cls, identifier: str) -> "Algorithm | None":
        for algorithm in cls:
            if algorithm.value == identifier:
                return algorithm
        return None


_DIGEST_NAMES = {
    Algorithm.SHA512_PBKDF2: "sha512",
}

DEFAULT_ALGORITHM = Algorithm.SHA512_PBKDF2


def derive(
    password: bytes,
    salt: bytes,
    iterations: int,
    length: int,
    algorithm: Algorithm = DEFAULT_ALGORITHM,
) -> bytes:
    """Return ``length`` bytes of PBKDF2 output for the given inputs."""

    if not password:
        raise DerivationError("Password must not be empty.")
    if not salt:
        raise DerivationError("Salt must not be empty.")
    if iterations < 1:
        raise DerivationError("Iteration count must be at least 1.")
    if length < 1:
        raise DerivationError("Derived key length must be at least 1.")

    try:
        derived = hashlib.pbkdf2_hmac(
            algorithm.digest_name, password, salt, iterations, dklen=length
        )
    except (ValueError, OverflowError) as exc:
        logger.error("PBKDF2 derivation with %s failed: %s", algorithm.digest_name, exc)
        raise DerivationError(f"Key derivation with {algorithm.digest_name} failed.") from exc
    return derived
