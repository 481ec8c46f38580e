"""Error kinds raised by the password hasher."""

from __future__ import annotations

from enum import Enum


class ErrorKind(str, Enum):
    """Closed set of failure kinds callers can match on."""

    CONFIGURATION = "configuration"
    MALFORMED_HASH = "malformed_hash"
    UNSUPPORTED_ALGORITHM = "unsupported_algorithm"
    INVALID_ITERATION_COUNT = "invalid_iteration_count"
    BASE64_DECODE = "base64_decode"
    INVALID_HASH_SIZE = "invalid_hash_size"
    HASH_SIZE_MISMATCH = "hash_size_mismatch"
    DERIVATION = "derivation"


class PasswordHasherError(Exception):
    """Base class for every error raised by this package."""

    kind: ErrorKind


class ConfigurationError(PasswordHasherError, ValueError):
    """Raised when a hasher configuration parameter is invalid."""

    kind = ErrorKind.CONFIGURATION


class InvalidHashError(PasswordHasherError, ValueError):
    """Raised when a stored hash record is corrupt or tampered with."""


class MalformedHashError(InvalidHashError):
    kind = ErrorKind.MALFORMED_HASH


class UnsupportedAlgorithmError(InvalidHashError):
    kind = ErrorKind.UNSUPPORTED_ALGORITHM


class InvalidIterationCountError(InvalidHashError):
    kind = ErrorKind.INVALID_ITERATION_COUNT


class Base64DecodeError(InvalidHashError):
    kind = ErrorKind.BASE64_DECODE


class InvalidHashSizeError(InvalidHashError):
    kind = ErrorKind.INVALID_HASH_SIZE


class HashSizeMismatchError(InvalidHashError):
    kind = ErrorKind.HASH_SIZE_MISMATCH


class DerivationError(PasswordHasherError, RuntimeError):
    """Raised when the key-derivation primitive is unavailable or fails.

    This points at a broken deployment rather than bad input, so callers
    should abort instead of retrying.
    """

    kind = ErrorKind.DERIVATION
