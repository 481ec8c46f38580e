"""Salted PBKDF2-HMAC-SHA512 password hashing."""

from pwhasher.core.config import HasherConfig
from pwhasher.core.errors import (
    Base64DecodeError,
    ConfigurationError,
    DerivationError,
    ErrorKind,
    HashSizeMismatchError,
    InvalidHashError,
    InvalidHashSizeError,
    InvalidIterationCountError,
    MalformedHashError,
    PasswordHasherError,
    UnsupportedAlgorithmError,
)
from pwhasher.core.security import (
    Password,
    PasswordHash,
    PasswordHasher,
    hash_password,
    slow_equals,
    verify_password,
)

__all__ = [
    "Base64DecodeError",
    "ConfigurationError",
    "DerivationError",
    "ErrorKind",
    "HashSizeMismatchError",
    "HasherConfig",
    "InvalidHashError",
    "InvalidHashSizeError",
    "InvalidIterationCountError",
    "MalformedHashError",
    "Password",
    "PasswordHash",
    "PasswordHasher",
    "PasswordHasherError",
    "UnsupportedAlgorithmError",
    "hash_password",
    "slow_equals",
    "verify_password",
]
