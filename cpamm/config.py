"""AMM configuration account."""

from __future__ import annotations

import hashlib
import struct
from dataclasses import dataclass, field
from typing import ClassVar

from .errors import AccountError

AMM_CONFIG_SEED = "amm_config"

_PADDING_LEN = 16
_LAYOUT = struct.Struct("<B?H4Q32s32s16Q")


def _require_key(name: str, value: bytes) -> None:
    if len(value) != 32:
        raise ValueError(f"{name} must be 32 bytes, got {len(value)}")


@dataclass
class AmmConfig:
    """Fee rates and owners shared by every pool created under one config."""

    bump: int = 0
    disable_create_pool: bool = False
    index: int = 0
    trade_fee_rate: int = 0
    protocol_fee_rate: int = 0
    fund_fee_rate: int = 0
    create_pool_fee: int = 0
    protocol_owner: bytes = bytes(32)
    fund_owner: bytes = bytes(32)
    padding: list[int] = field(default_factory=lambda: [0] * _PADDING_LEN)

    LEN: ClassVar[int] = 8 + 1 + 1 + 2 + 4 * 8 + 32 * 2 + 8 * 16
    DISCRIMINATOR: ClassVar[bytes] = hashlib.sha256(b"account:AmmConfig").digest()[:8]

    def to_bytes(self) -> bytes:
        """Serialise the account, discriminator first."""
        _require_key("protocol_owner", self.protocol_owner)
        _require_key("fund_owner", self.fund_owner)
        if len(self.padding) != _PADDING_LEN:
            raise ValueError(f"padding must hold {_PADDING_LEN} words")
        try:
            body = _LAYOUT.pack(
                self.bump,
                self.disable_create_pool,
                self.index,
                self.trade_fee_rate,
                self.protocol_fee_rate,
                self.fund_fee_rate,
                self.create_pool_fee,
                self.protocol_owner,
                self.fund_owner,
                *self.padding,
            )
        except struct.error as exc:
            raise ValueError(f"field out of range: {exc}") from exc
        return self.DISCRIMINATOR + body

    @classmethod
    def from_bytes(cls, data: bytes) -> AmmConfig:
        """Parse account data produced by :meth:`to_bytes`."""
        if len(data) < cls.LEN:
            raise AccountError("account data too short for AmmConfig")
        if bytes(data[:8]) != cls.DISCRIMINATOR:
            raise AccountError("account discriminator mismatch for AmmConfig")
        values = _LAYOUT.unpack_from(data, 8)
        return cls(*values[:9], padding=list(values[9:]))