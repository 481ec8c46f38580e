"""Configuration and defaults for the password hasher."""

from __future__ import annotations

import os
from dataclasses import asdict, dataclass
from typing import Mapping

from pwhasher.core.errors import ConfigurationError

DEFAULT_HASH_LENGTH = 18
DEFAULT_ITERATION_COUNT = 64000
DEFAULT_SALT_LENGTH = 24

# Environment variables consulted by HasherConfig.from_env.
ENV_OVERRIDES = {
    "hash_length": "PWHASHER_HASH_LENGTH",
    "iteration_count": "PWHASHER_ITERATION_COUNT",
    "salt_length": "PWHASHER_SALT_LENGTH",
}


@dataclass(frozen=True)
class HasherConfig:
    """Parameters used when creating new hashes.

    Stored records carry their own parameters, so changing these never
    breaks verification of older records.
    """

    hash_length: int = DEFAULT_HASH_LENGTH
    iteration_count: int = DEFAULT_ITERATION_COUNT
    salt_length: int = DEFAULT_SALT_LENGTH

    def __post_init__(self) -> None:
        for name, value in asdict(self).items():
            if isinstance(value, bool) or not isinstance(value, int):
                raise ConfigurationError(f"{name} must be an integer, got {value!r}")
            if value < 1:
                raise ConfigurationError(f"{name} must be at least 1")

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "HasherConfig":
        """Build a config from defaults, honoring environment overrides."""

        environ = os.environ if environ is None else environ
        values: dict[str, int] = {}
        for field_name, env_name in ENV_OVERRIDES.items():
            raw = environ.get(env_name)
            if not raw:
                continue
            try:
                values[field_name] = int(raw.strip())
            except ValueError as exc:
                raise ConfigurationError(f"{env_name} must be an integer, got {raw!r}") from exc
        return cls(**values)
