from __future__ import annotations

import hashlib
import secrets


class TransactionIdGenerator:
    """
    Client transaction ids (clTRID).

    - with a seed: MD5 hex of the seed, so callers can correlate on their own key
    - without: 128 random bits from `secrets`, hex encoded

    Both forms are 32 lowercase hex characters.
    """

    __slots__ = ("_last",)

    def __init__(self) -> None:
        self._last: str | None = None

    @property
    def last(self) -> str | None:
        return self._last

    def next(self, seed: object = None) -> str:
        if seed is None:
            trid = secrets.token_hex(16)
        else:
            # Non-bytes seeds hash by their string form, so 42 and "42" agree.
            data = bytes(seed) if isinstance(seed, bytes | bytearray) else str(seed).encode("utf-8")
            trid = hashlib.md5(data).hexdigest()  # noqa: S324 (correlation token, not security)
        self._last = trid
        return trid
