"""Command-line entry point for hashing and verifying passwords."""

from __future__ import annotations

import argparse
import getpass
import logging
import sys
from dataclasses import replace

from pwhasher.core.config import HasherConfig
from pwhasher.core.errors import ConfigurationError, DerivationError, InvalidHashError
from pwhasher.core.security import PasswordHasher

logger = logging.getLogger("pwhasher")

EXIT_OK = 0
EXIT_MISMATCH = 1
EXIT_ERROR = 2


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="pwhasher",
        description="Create and verify salted PBKDF2-HMAC-SHA512 password hashes.",
    )
    parser.add_argument("--iterations", type=int, help="Iteration count for new hashes.")
    parser.add_argument("--hash-length", type=int, help="Derived hash length in bytes.")
    parser.add_argument("--salt-length", type=int, help="Salt length in bytes.")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging.")

    subparsers = parser.add_subparsers(dest="command", required=True)

    hash_parser = subparsers.add_parser("hash", help="Hash a password and print the record.")
    hash_parser.add_argument(
        "--password-stdin",
        action="store_true",
        help="Read the password from the first line of stdin instead of prompting.",
    )

    verify_parser = subparsers.add_parser("verify", help="Verify a password against a record.")
    verify_parser.add_argument("record", help="Stored hash record.")
    verify_parser.add_argument(
        "--password-stdin",
        action="store_true",
        help="Read the password from the first line of stdin instead of prompting.",
    )

    subparsers.add_parser("check-config", help="Print the effective configuration.")
    return parser.parse_args(argv)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def _build_config(args: argparse.Namespace) -> HasherConfig:
    config = HasherConfig.from_env()
    overrides = {
        "iteration_count": args.iterations,
        "hash_length": args.hash_length,
        "salt_length": args.salt_length,
    }
    overrides = {key: value for key, value in overrides.items() if value is not None}
    if overrides:
        config = replace(config, **overrides)
    return config


def _read_password(from_stdin: bool) -> str:
    if from_stdin:
        return sys.stdin.readline().rstrip("\r\n")
    return getpass.getpass("Password: ")


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)
    _configure_logging(args.verbose)

    try:
        config = _build_config(args)
    except ConfigurationError as exc:
        print(f"Invalid configuration: {exc}", file=sys.stderr)
        return EXIT_ERROR

    if args.command == "check-config":
        print(f"hash_length={config.hash_length}")
        print(f"iteration_count={config.iteration_count}")
        print(f"salt_length={config.salt_length}")
        return EXIT_OK

    password = _read_password(args.password_stdin)
    if not password:
        print("A password is required.", file=sys.stderr)
        return EXIT_ERROR

    hasher = PasswordHasher(config)
    try:
        if args.command == "hash":
            print(hasher.create_hash(password))
            return EXIT_OK
        if hasher.verify_password(password, args.record):
            print("OK")
            return EXIT_OK
        print("MISMATCH")
        return EXIT_MISMATCH
    except InvalidHashError as exc:
        print(f"Invalid hash record ({exc.kind.value}): {exc}", file=sys.stderr)
        return EXIT_ERROR
    except DerivationError as exc:
        logger.error("Key derivation unavailable: %s", exc)
        return EXIT_ERROR


if __name__ == "__main__":
    raise SystemExit(main())
