"""Generation of opaque delegated-token secrets."""

from __future__ import annotations

import re
import secrets
import uuid

TOKEN_PREFIX = "tk_"
MIN_ENTROPY_BITS = 240

_TOKEN_PATTERN = re.compile(
    rf"^{re.escape(TOKEN_PREFIX)}[0-9a-f]{{{MIN_ENTROPY_BITS // 4},}}$"
)


class TokenCodec:
    """Produce ``tk_``-prefixed hex secrets from the system CSPRNG."""

    def __init__(self, *, entropy_bytes: int = 60) -> None:
        if entropy_bytes * 8 < MIN_ENTROPY_BITS:
            raise ValueError(
                f"Token secrets need at least {MIN_ENTROPY_BITS} bits of entropy."
            )
        self._entropy_bytes = entropy_bytes

    def generate(self) -> str:
        return TOKEN_PREFIX + secrets.token_hex(self._entropy_bytes)

    @staticmethod
    def new_id() -> str:
        return str(uuid.uuid4())

    @staticmethod
    def looks_like_token(value: str | None) -> bool:
        """True when ``value`` has the shape of a secret this service issued."""
        return bool(value) and _TOKEN_PATTERN.match(value) is not None


__all__ = ["MIN_ENTROPY_BITS", "TOKEN_PREFIX", "TokenCodec"]
