"""Price oracle observations recorded by each pool."""

from __future__ import annotations

import hashlib
import struct
import time
from dataclasses import dataclass, field
from typing import ClassVar

from .errors import AccountError

OBSERVATION_SEED = "observation"
OBSERVATION_NUM = 100
OBSERVATION_UPDATE_DURATION_DEFAULT = 15

_U128_MOD = 1 << 128
_PADDING_LEN = 4
_HEADER = struct.Struct("<?H32s")
_OBSERVATION = struct.Struct("<Q16s16s")
_PADDING = struct.Struct(f"<{_PADDING_LEN}Q")


@dataclass
class Observation:
    """One cumulative price sample; prices are Q32.32 with overflow room."""

    block_timestamp: int = 0
    cumulative_token_0_price_x32: int = 0
    cumulative_token_1_price_x32: int = 0

    LEN: ClassVar[int] = 8 + 16 + 16

    def _pack(self) -> bytes:
        return _OBSERVATION.pack(
            self.block_timestamp,
            self.cumulative_token_0_price_x32.to_bytes(16, "little"),
            self.cumulative_token_1_price_x32.to_bytes(16, "little"),
        )

    @classmethod
    def _unpack(cls, timestamp: int, price_0: bytes, price_1: bytes) -> Observation:
        return cls(timestamp, int.from_bytes(price_0, "little"), int.from_bytes(price_1, "little"))


@dataclass
class ObservationState:
    """Ring buffer of price observations for one pool."""

    initialized: bool = False
    observation_index: int = 0
    pool_id: bytes = bytes(32)
    observations: list[Observation] = field(
        default_factory=lambda: [Observation() for _ in range(OBSERVATION_NUM)]
    )
    padding: list[int] = field(default_factory=lambda: [0] * _PADDING_LEN)

    LEN: ClassVar[int] = 8 + 1 + 2 + 32 + (Observation.LEN * OBSERVATION_NUM) + 8 * 4
    DISCRIMINATOR: ClassVar[bytes] = hashlib.sha256(b"account:ObservationState").digest()[:8]

    def update(self, block_timestamp: int, token_0_price_x32: int, token_1_price_x32: int) -> None:
        """Record prices, at most once per update duration.

        The first call only stamps the time; later calls accumulate
        price multiplied by elapsed time into the next slot.
        """
        index = self.observation_index
        if not self.initialized:
            self.initialized = True
            self.observations[index] = Observation(block_timestamp, 0, 0)
            return

        last = self.observations[index]
        delta_time = max(block_timestamp - last.block_timestamp, 0)
        if delta_time < OBSERVATION_UPDATE_DURATION_DEFAULT:
            return

        delta_0 = token_0_price_x32 * delta_time
        delta_1 = token_1_price_x32 * delta_time
        if delta_0 >= _U128_MOD or delta_1 >= _U128_MOD:
            raise OverflowError("price times elapsed time exceeds 128 bits")

        next_index = 0 if index == OBSERVATION_NUM - 1 else index + 1
        self.observations[next_index] = Observation(
            block_timestamp,
            (last.cumulative_token_0_price_x32 + delta_0) % _U128_MOD,
            (last.cumulative_token_1_price_x32 + delta_1) % _U128_MOD,
        )
        self.observation_index = next_index

    def to_bytes(self) -> bytes:
        """Serialise the account, discriminator first."""
        if len(self.pool_id) != 32:
            raise ValueError(f"pool_id must be 32 bytes, got {len(self.pool_id)}")
        if len(self.observations) != OBSERVATION_NUM:
            raise ValueError(f"observations must hold {OBSERVATION_NUM} entries")
        if len(self.padding) != _PADDING_LEN:
            raise ValueError(f"padding must hold {_PADDING_LEN} words")
        try:
            parts = [
                self.DISCRIMINATOR,
                _HEADER.pack(self.initialized, self.observation_index, self.pool_id),
                *(observation._pack() for observation in self.observations),
                _PADDING.pack(*self.padding),
            ]
        except (struct.error, OverflowError) as exc:
            raise ValueError(f"field out of range: {exc}") from exc
        return b"".join(parts)

    @classmethod
    def from_bytes(cls, data: bytes) -> ObservationState:
        """Parse account data produced by :meth:`to_bytes`."""
        if len(data) < cls.LEN:
            raise AccountError("account data too short for ObservationState")
        if bytes(data[:8]) != cls.DISCRIMINATOR:
            raise AccountError("account discriminator mismatch for ObservationState")
        initialized, index, pool_id = _HEADER.unpack_from(data, 8)
        start = 8 + _HEADER.size
        end = start + Observation.LEN * OBSERVATION_NUM
        observations = [
            Observation._unpack(*values)
            for values in _OBSERVATION.iter_unpack(bytes(data[start:end]))
        ]
        padding = list(_PADDING.unpack_from(data, end))
        return cls(initialized, index, pool_id, observations, padding)


def block_timestamp() -> int:
    """Current unix time in whole seconds."""
    return int(time.time())