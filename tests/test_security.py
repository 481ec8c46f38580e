import base64
import logging
import re
import unittest

import pytest

from pwhasher.core import derivation, security
from pwhasher.core.config import HasherConfig
from pwhasher.core.errors import (
    DerivationError,
    ErrorKind,
    HashSizeMismatchError,
    InvalidHashError,
    InvalidIterationCountError,
    MalformedHashError,
)
from pwhasher.core.security import Password, PasswordHash, PasswordHasher, slow_equals

FAST = HasherConfig(iteration_count=2)


def _fixed_random(n: int) -> bytes:
    return bytes(range(n))


def _flip_bit(encoded: str, index: int) -> str:
    fields = encoded.split(":")
    raw = bytearray(base64.b64decode(fields[4]))
    raw[index // 8] ^= 1 << (index % 8)
    fields[4] = base64.b64encode(bytes(raw)).decode()
    return ":".join(fields)


class PasswordHasherTests(unittest.TestCase):
    def setUp(self) -> None:
        self.hasher = PasswordHasher(FAST)

    def test_round_trip(self) -> None:
        for password in ["a", "correcthorsebatterystaple", "pässwörd ✓", "x" * 500]:
            stored = self.hasher.create_hash(password)
            self.assertTrue(self.hasher.verify_password(password, stored))

    def test_wrong_password(self) -> None:
        stored = self.hasher.create_hash("hunter2")
        self.assertFalse(self.hasher.verify_password("hunter3", stored))
        self.assertFalse(self.hasher.verify_password("Hunter2", stored))

    def test_fresh_salt_each_call(self) -> None:
        first = self.hasher.create_hash("same password")
        second = self.hasher.create_hash("same password")
        self.assertNotEqual(first, second)
        self.assertTrue(self.hasher.verify_password("same password", first))
        self.assertTrue(self.hasher.verify_password("same password", second))

    def test_record_layout(self) -> None:
        stored = self.hasher.create_hash("pw").value
        algorithm, iterations, size, salt, hash_ = stored.split(":")
        self.assertEqual(algorithm, "sha512")
        self.assertEqual(iterations, "2")
        self.assertEqual(size, "18")
        self.assertEqual(len(base64.b64decode(salt)), 24)
        self.assertEqual(len(base64.b64decode(hash_)), 18)

    def test_tampered_hash_never_verifies(self) -> None:
        stored = self.hasher.create_hash("tamper me").value
        for bit in range(18 * 8):
            with self.subTest(bit=bit):
                self.assertFalse(self.hasher.verify_password("tamper me", _flip_bit(stored, bit)))

    def test_accepts_plain_string_records(self) -> None:
        stored = self.hasher.create_hash("pw")
        self.assertTrue(self.hasher.verify_password("pw", stored.value))

    def test_accepts_password_objects_and_bytes(self) -> None:
        stored = self.hasher.create_hash(Password("pw"))
        self.assertTrue(self.hasher.verify_password(b"pw", stored))

    def test_malformed_record_raises_instead_of_false(self) -> None:
        stored = self.hasher.create_hash("pw").value
        fields = stored.split(":")
        with self.assertRaises(MalformedHashError):
            self.hasher.verify_password("pw", ":".join(fields[:4]))
        with self.assertRaises(MalformedHashError):
            self.hasher.verify_password("pw", stored + ":AAAA")

    def test_declared_size_mismatch(self) -> None:
        fields = self.hasher.create_hash("pw").value.split(":")
        fields[2] = "17"
        with self.assertRaises(HashSizeMismatchError) as ctx:
            self.hasher.verify_password("pw", ":".join(fields))
        self.assertIs(ctx.exception.kind, ErrorKind.HASH_SIZE_MISMATCH)

    def test_one_byte_hashes(self) -> None:
        hasher = PasswordHasher(HasherConfig(hash_length=1, iteration_count=1, salt_length=1))
        stored = hasher.create_hash("pw").value
        self.assertTrue(stored.startswith("sha512:1:1:"))
        self.assertEqual(len(base64.b64decode(stored.split(":")[4])), 1)
        self.assertTrue(hasher.verify_password("pw", stored))

    def test_empty_password_rejected(self) -> None:
        with self.assertRaises(ValueError):
            self.hasher.create_hash("")


def test_concrete_scenario():
    hasher = PasswordHasher(HasherConfig(hash_length=18, iteration_count=64000, salt_length=24))
    stored = hasher.create_hash("correcthorsebatterystaple").value
    assert re.fullmatch(r"sha512:64000:18:[A-Za-z0-9+/=]+:[A-Za-z0-9+/=]+", stored)
    assert hasher.verify_password("correcthorsebatterystaple", stored)
    assert not hasher.verify_password("wrongpassword", stored)


def test_verification_uses_stored_parameters():
    old = PasswordHasher(HasherConfig(iteration_count=10000, hash_length=32, salt_length=8))
    stored = old.create_hash("legacy password")
    current = PasswordHasher()
    assert current.config.iteration_count == 64000
    assert current.verify_password("legacy password", stored)
    assert not current.verify_password("other password", stored)


def test_injected_random_source_is_deterministic():
    hasher = PasswordHasher(FAST, random_source=_fixed_random)
    first = hasher.create_hash("pw")
    assert first == hasher.create_hash("pw")
    salt = first.value.split(":")[3]
    assert base64.b64decode(salt) == bytes(range(24))


def test_short_random_source_rejected():
    hasher = PasswordHasher(FAST, random_source=lambda n: b"\x00")
    with pytest.raises(ValueError):
        hasher.create_hash("pw")


def test_malformed_record_is_logged_without_password(caplog):
    hasher = PasswordHasher(FAST)
    with caplog.at_level(logging.WARNING, logger="pwhasher.core.security"):
        with pytest.raises(InvalidHashError):
            hasher.verify_password("s3cret-value", "sha512:1:2:3")
    assert "malformed_hash" in caplog.text
    assert "s3cret-value" not in caplog.text


def test_needs_rehash():
    hasher = PasswordHasher(FAST)
    stored = hasher.create_hash("pw")
    assert not hasher.needs_rehash(stored)
    assert PasswordHasher(HasherConfig(iteration_count=3)).needs_rehash(stored)
    assert PasswordHasher(HasherConfig(iteration_count=2, hash_length=32)).needs_rehash(stored)
    assert PasswordHasher(HasherConfig(iteration_count=2, salt_length=16)).needs_rehash(stored)


def test_needs_rehash_rejects_corrupt_records():
    with pytest.raises(MalformedHashError):
        PasswordHasher(FAST).needs_rehash("sha512:2:18")


def test_parse_returns_record():
    hasher = PasswordHasher(FAST, random_source=_fixed_random)
    record = hasher.parse(hasher.create_hash("pw"))
    assert record.iterations == 2
    assert record.salt == bytes(range(24))
    assert record.hash_size == 18


@pytest.mark.parametrize(
    "a, b, expected",
    [
        (b"", b"", True),
        (b"abc", b"abc", True),
        (b"abc", b"abd", False),
        (b"abc", b"xbc", False),
        (b"abc", b"abcd", False),
        (b"abcd", b"abc", False),
        (b"", b"a", False),
        (b"\x00", b"", False),
    ],
)
def test_slow_equals(a, b, expected):
    assert slow_equals(a, b) is expected


def test_password_never_revealed():
    secret = Password("hunter2")
    assert "hunter2" not in repr(secret)
    assert "hunter2" not in str(secret)
    assert secret.as_bytes() == b"hunter2"


def test_password_rejects_bad_values():
    with pytest.raises(ValueError):
        Password("")
    with pytest.raises(ValueError):
        Password("\ud800")
    with pytest.raises(TypeError):
        Password(1234)


def test_password_hash_str():
    assert str(PasswordHash("sha512:1:1:AA==:AA==")) == "sha512:1:1:AA==:AA=="


def test_module_helpers_use_environment(monkeypatch):
    monkeypatch.setenv("PWHASHER_ITERATION_COUNT", "3")
    monkeypatch.setattr(security, "_default_hasher", None)
    stored = security.hash_password("pw")
    assert stored.startswith("sha512:3:18:")
    assert security.verify_password("pw", stored)
    assert not security.verify_password("nope", stored)


def test_oversized_iteration_count_is_a_record_error():
    hasher = PasswordHasher(FAST)
    fields = hasher.create_hash("pw").value.split(":")
    for iterations in ("9" * 5000, str(2**31)):
        fields[1] = iterations
        with pytest.raises(InvalidIterationCountError):
            hasher.verify_password("pw", ":".join(fields))


def test_surrogate_password_rejected_before_hashing():
    with pytest.raises(ValueError):
        PasswordHasher(FAST).create_hash("bad \ud800 text")


def test_provider_failure_propagates_from_hasher(monkeypatch):
    hasher = PasswordHasher(FAST)
    stored = hasher.create_hash("pw")

    def unavailable(*args, **kwargs):
        raise ValueError("unsupported hash type sha512")

    monkeypatch.setattr(derivation.hashlib, "pbkdf2_hmac", unavailable)
    with pytest.raises(DerivationError):
        hasher.create_hash("pw")
    with pytest.raises(DerivationError):
        hasher.verify_password("pw", stored)


if __name__ == "__main__":
    unittest.main()
