"""Events emitted by deposits, withdrawals and swaps."""

from __future__ import annotations

import hashlib
import struct
from dataclasses import dataclass
from enum import IntEnum
from typing import ClassVar


def _event_discriminator(name: str) -> bytes:
    return hashlib.sha256(f"event:{name}".encode()).digest()[:8]


def _require_key(name: str, value: bytes) -> None:
    if len(value) != 32:
        raise ValueError(f"{name} must be 32 bytes, got {len(value)}")


def _check_payload(data: bytes, discriminator: bytes, size: int, name: str) -> None:
    if len(data) != 8 + size:
        raise ValueError(f"{name} payload must be {8 + size} bytes, got {len(data)}")
    if bytes(data[:8]) != discriminator:
        raise ValueError(f"discriminator mismatch for {name}")


class ChangeType(IntEnum):
    """Kind of liquidity change."""

    DEPOSIT = 0
    WITHDRAW = 1


_LP_LAYOUT = struct.Struct("<32s7QB")
_SWAP_LAYOUT = struct.Struct("<32s6QB")


@dataclass(frozen=True)
class LpChangeEvent:
    """Emitted on deposit and withdraw."""

    pool_id: bytes
    lp_amount_before: int
    token_0_vault_before: int
    token_1_vault_before: int
    token_0_amount: int
    token_1_amount: int
    token_0_transfer_fee: int
    token_1_transfer_fee: int
    change_type: ChangeType

    DISCRIMINATOR: ClassVar[bytes] = _event_discriminator("LpChangeEvent")

    def __post_init__(self) -> None:
        _require_key("pool_id", self.pool_id)
        object.__setattr__(self, "change_type", ChangeType(self.change_type))

    def encode(self) -> bytes:
        """Serialise the event, discriminator first."""
        try:
            body = _LP_LAYOUT.pack(
                self.pool_id,
                self.lp_amount_before,
                self.token_0_vault_before,
                self.token_1_vault_before,
                self.token_0_amount,
                self.token_1_amount,
                self.token_0_transfer_fee,
                self.token_1_transfer_fee,
                self.change_type,
            )
        except struct.error as exc:
            raise ValueError(f"field out of range: {exc}") from exc
        return self.DISCRIMINATOR + body

    @classmethod
    def decode(cls, data: bytes) -> LpChangeEvent:
        """Parse bytes produced by :meth:`encode`."""
        _check_payload(data, cls.DISCRIMINATOR, _LP_LAYOUT.size, cls.__name__)
        values = _LP_LAYOUT.unpack_from(data, 8)
        return cls(*values)


@dataclass(frozen=True)
class SwapEvent:
    """Emitted on every swap."""

    pool_id: bytes
    input_vault_before: int
    output_vault_before: int
    input_amount: int
    output_amount: int
    input_transfer_fee: int
    output_transfer_fee: int
    base_input: bool

    DISCRIMINATOR: ClassVar[bytes] = _event_discriminator("SwapEvent")

    def __post_init__(self) -> None:
        _require_key("pool_id", self.pool_id)

    def encode(self) -> bytes:
        """Serialise the event, discriminator first."""
        try:
            body = _SWAP_LAYOUT.pack(
                self.pool_id,
                self.input_vault_before,
                self.output_vault_before,
                self.input_amount,
                self.output_amount,
                self.input_transfer_fee,
                self.output_transfer_fee,
                1 if self.base_input else 0,
            )
        except struct.error as exc:
            raise ValueError(f"field out of range: {exc}") from exc
        return self.DISCRIMINATOR + body

    @classmethod
    def decode(cls, data: bytes) -> SwapEvent:
        """Parse bytes produced by :meth:`encode`."""
        _check_payload(data, cls.DISCRIMINATOR, _SWAP_LAYOUT.size, cls.__name__)
        *values, flag = _SWAP_LAYOUT.unpack_from(data, 8)
        if flag not in (0, 1):
            raise ValueError(f"invalid boolean byte {flag}")
        return cls(*values, base_input=bool(flag))