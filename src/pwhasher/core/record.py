"""Encoding and parsing of stored hash records.

A record is a single colon-delimited string::

    sha512:<iterations>:<hash size>:<base64 salt>:<base64 hash>

Parsing validates every field before any derivation happens, so a corrupt
record fails fast without paying the iteration cost.
"""

from __future__ import annotations

import base64
import binascii
import re
from dataclasses import dataclass

from pwhasher.core.derivation import Algorithm
from pwhasher.core.errors import (
    Base64DecodeError,
    HashSizeMismatchError,
    InvalidHashSizeError,
    InvalidIterationCountError,
    MalformedHashError,
    UnsupportedAlgorithmError,
)

SEPARATOR = ":"
HASH_SECTIONS = 5
ALGORITHM_INDEX = 0
ITERATION_INDEX = 1
HASH_SIZE_INDEX = 2
SALT_INDEX = 3
HASH_INDEX = 4

# Numeric fields must fit a signed 32-bit integer.
MAX_FIELD_VALUE = 2**31 - 1
MIN_FIELD_VALUE = -(2**31)

_DECIMAL = re.compile(r"-?[0-9]{1,10}")


@dataclass(frozen=True)
class HashRecord:
    algorithm: Algorithm
    iterations: int
    salt: bytes
    hash: bytes

    @property
    def hash_size(self) -> int:
        return len(self.hash)

    def encode(self) -> str:
        return SEPARATOR.join(
            [
                self.algorithm.identifier,
                str(self.iterations),
                str(self.hash_size),
                _to_base64(self.salt),
                _to_base64(self.hash),
            ]
        )

    def __repr__(self) -> str:
        return (
            f"HashRecord(algorithm={self.algorithm.identifier!r}, "
            f"iterations={self.iterations}, hash_size={self.hash_size}, "
            f"salt_size={len(self.salt)})"
        )


def _to_base64(data: bytes) -> str:
    return base64.b64encode(data).decode("ascii")


def _from_base64(text: str, label: str) -> bytes:
    if not text:
        raise Base64DecodeError(f"The {label} field is empty.")
    try:
        return base64.b64decode(text.encode("ascii"), validate=True)
    except (binascii.Error, UnicodeEncodeError) as exc:
        raise Base64DecodeError(f"Base64 decoding of {label} failed.") from exc


def _parse_decimal(text: str) -> int | None:
    # int() alone would accept whitespace, underscores and non-ASCII digits.
    if not _DECIMAL.fullmatch(text):
        return None
    value = int(text)
    if not MIN_FIELD_VALUE <= value <= MAX_FIELD_VALUE:
        return None
    return value


def parse_record(encoded: str) -> HashRecord:
    """Decode and validate an encoded hash record."""

    params = encoded.split(SEPARATOR)
    if len(params) != HASH_SECTIONS:
        raise MalformedHashError(
            f"Expected {HASH_SECTIONS} fields in the password hash, found {len(params)}."
        )

    algorithm = Algorithm.from_identifier(params[ALGORITHM_INDEX])
    if algorithm is None:
        raise UnsupportedAlgorithmError(f"Unsupported hash type: {params[ALGORITHM_INDEX]!r}")

    iterations = _parse_decimal(params[ITERATION_INDEX])
    if iterations is None:
        raise InvalidIterationCountError("Could not parse the iteration count as an integer.")
    if iterations < 1:
        raise InvalidIterationCountError("Invalid number of iterations. Must be >= 1.")

    salt = _from_base64(params[SALT_INDEX], "salt")
    hash_bytes = _from_base64(params[HASH_INDEX], "hash")

    declared_size = _parse_decimal(params[HASH_SIZE_INDEX])
    if declared_size is None:
        raise InvalidHashSizeError("Could not parse the hash size as an integer.")
    if declared_size != len(hash_bytes):
        raise HashSizeMismatchError(
            f"Declared hash size {declared_size} does not match decoded length {len(hash_bytes)}."
        )

    return HashRecord(algorithm=algorithm, iterations=iterations, salt=salt, hash=hash_bytes)
