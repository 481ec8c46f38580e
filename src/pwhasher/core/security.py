"""Password hashing and verification."""

from __future__ import annotations

import logging
import os
import threading
from dataclasses import dataclass
from typing import Callable, Union

from pwhasher.core.config import HasherConfig
from pwhasher.core.derivation import DEFAULT_ALGORITHM, derive
from pwhasher.core.errors import InvalidHashError
from pwhasher.core.record import HashRecord, parse_record

logger = logging.getLogger(__name__)

RandomSource = Callable[[int], bytes]


class Password:
    """Plaintext credential that never shows up in reprs or logs."""

    __slots__ = ("_value",)

    def __init__(self, value: str | bytes) -> None:
        if not isinstance(value, (str, bytes)):
            raise TypeError("Password must be str or bytes.")
        if not value:
            raise ValueError("Password must not be empty.")
        if isinstance(value, str):
            try:
                value = value.encode("utf-8")
            except UnicodeEncodeError as exc:
                raise ValueError("Password is not valid Unicode text.") from exc
        self._value = value

    def as_bytes(self) -> bytes:
        return self._value

    def __repr__(self) -> str:
        return "Password('********')"

    __str__ = __repr__


@dataclass(frozen=True)
class PasswordHash:
    """Encoded hash record as handed to, and read back from, storage."""

    value: str

    def __str__(self) -> str:
        return self.value


PasswordLike = Union[Password, str, bytes]
StoredHash = Union[PasswordHash, str]


def _as_password(password: PasswordLike) -> Password:
    return password if isinstance(password, Password) else Password(password)


def _as_encoded(stored: StoredHash) -> str:
    return stored.value if isinstance(stored, PasswordHash) else stored


def slow_equals(a: bytes, b: bytes) -> bool:
    """Compare two byte strings without stopping at the first difference.

    Only the shorter length is iterated, so unequal lengths still finish
    early; the length difference is folded into the result up front.
    """

    diff = len(a) ^ len(b)
    for x, y in zip(a, b):
        diff |= x ^ y
    return diff == 0


class PasswordHasher:
    """Create and verify salted PBKDF2-HMAC-SHA512 password hashes.

    Instances hold only an immutable config and a random source, so a
    single hasher can be shared between threads. ``random_source`` must be
    thread-safe; it defaults to ``os.urandom``.
    """

    def __init__(
        self,
        config: HasherConfig | None = None,
        random_source: RandomSource = os.urandom,
    ) -> None:
        self.config = config or HasherConfig()
        self._random_source = random_source

    def create_hash(self, password: PasswordLike) -> PasswordHash:
        """Hash a password with a fresh salt and return the encoded record."""

        secret = _as_password(password)
        salt = self._random_source(self.config.salt_length)
        if len(salt) != self.config.salt_length:
            raise ValueError(
                f"Random source returned {len(salt)} bytes, expected {self.config.salt_length}."
            )
        hash_bytes = derive(
            secret.as_bytes(),
            salt,
            self.config.iteration_count,
            self.config.hash_length,
            DEFAULT_ALGORITHM,
        )
        record = HashRecord(
            algorithm=DEFAULT_ALGORITHM,
            iterations=self.config.iteration_count,
            salt=salt,
            hash=hash_bytes,
        )
        logger.debug("Created password hash %r", record)
        return PasswordHash(record.encode())

    def parse(self, stored: StoredHash) -> HashRecord:
        """Decode a stored record, raising an ``InvalidHashError`` subclass if corrupt."""

        try:
            return parse_record(_as_encoded(stored))
        except InvalidHashError as exc:
            logger.warning("Rejected stored password hash (%s): %s", exc.kind.value, exc)
            raise

    def verify_password(self, password: PasswordLike, stored: StoredHash) -> bool:
        """Check a password against a stored record.

        The record's own iteration count and hash length are used, never the
        current config. A wrong password returns ``False``; a corrupt record
        raises.
        """

        secret = _as_password(password)
        record = self.parse(stored)
        candidate = derive(
            secret.as_bytes(),
            record.salt,
            record.iterations,
            record.hash_size,
            record.algorithm,
        )
        matched = slow_equals(record.hash, candidate)
        logger.debug("Password verification %s", "succeeded" if matched else "failed")
        return matched

    def needs_rehash(self, stored: StoredHash) -> bool:
        """Return True if a record was created with different parameters than the current config."""

        record = self.parse(stored)
        return (
            record.algorithm is not DEFAULT_ALGORITHM
            or record.iterations != self.config.iteration_count
            or record.hash_size != self.config.hash_length
            or len(record.salt) != self.config.salt_length
        )


_default_hasher: PasswordHasher | None = None
_default_hasher_lock = threading.Lock()


def get_hasher() -> PasswordHasher:
    """Return a process-wide hasher configured from the environment."""

    global _default_hasher
    with _default_hasher_lock:
        if _default_hasher is None:
            _default_hasher = PasswordHasher(HasherConfig.from_env())
        return _default_hasher


def hash_password(password: PasswordLike) -> str:
    """Return an encoded salted PBKDF2 hash for storage."""

    return get_hasher().create_hash(password).value


def verify_password(password: PasswordLike, stored_hash: StoredHash) -> bool:
    """Validate a password against a stored hash record."""

    return get_hasher().verify_password(password, stored_hash)
