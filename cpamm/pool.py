"""Pool account state."""

from __future__ import annotations

import hashlib
import struct
from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import ClassVar, Protocol

from .errors import AccountError

POOL_SEED = "pool"
POOL_LP_MINT_SEED = "pool_lp_mint"
POOL_VAULT_SEED = "pool_vault"

Q32 = 1 << 32

_PADDING_LEN = 31
_KEY_FIELDS = (
    "amm_config",
    "pool_creator",
    "token_0_vault",
    "token_1_vault",
    "lp_mint",
    "token_0_mint",
    "token_1_mint",
    "token_0_program",
    "token_1_program",
    "observation_key",
)
_LAYOUT = struct.Struct("<" + "32s" * len(_KEY_FIELDS) + "5B" + "7Q" + f"{_PADDING_LEN}Q")


class PoolStatusBitIndex(IntEnum):
    """Bit positions in the pool status byte."""

    DEPOSIT = 0
    WITHDRAW = 1
    SWAP = 2


class PoolStatusBitFlag(Enum):
    """Whether an operation is switched on or off."""

    ENABLE = "enable"
    DISABLE = "disable"


class _MintAccount(Protocol):
    key: bytes
    owner: bytes
    decimals: int


@dataclass
class PoolState:
    """State of one liquidity pool.

    A set bit in ``status`` disables the matching operation.
    """

    amm_config: bytes = bytes(32)
    pool_creator: bytes = bytes(32)
    token_0_vault: bytes = bytes(32)
    token_1_vault: bytes = bytes(32)
    lp_mint: bytes = bytes(32)
    token_0_mint: bytes = bytes(32)
    token_1_mint: bytes = bytes(32)
    token_0_program: bytes = bytes(32)
    token_1_program: bytes = bytes(32)
    observation_key: bytes = bytes(32)
    auth_bump: int = 0
    status: int = 0
    lp_mint_decimals: int = 0
    mint_0_decimals: int = 0
    mint_1_decimals: int = 0
    lp_supply: int = 0
    protocol_fees_token_0: int = 0
    protocol_fees_token_1: int = 0
    fund_fees_token_0: int = 0
    fund_fees_token_1: int = 0
    open_time: int = 0
    recent_epoch: int = 0
    padding: list[int] = field(default_factory=lambda: [0] * _PADDING_LEN)

    LEN: ClassVar[int] = 8 + 10 * 32 + 1 * 5 + 8 * 7 + 8 * 31
    DISCRIMINATOR: ClassVar[bytes] = hashlib.sha256(b"account:PoolState").digest()[:8]

    def initialize(
        self,
        auth_bump: int,
        lp_supply: int,
        open_time: int,
        pool_creator: bytes,
        amm_config: bytes,
        token_0_vault: bytes,
        token_1_vault: bytes,
        token_0_mint: _MintAccount,
        token_1_mint: _MintAccount,
        lp_mint: _MintAccount,
        observation_key: bytes,
        epoch: int,
    ) -> None:
        """Fill in a freshly created pool; mints expose key, owner and decimals."""
        self.amm_config = amm_config
        self.pool_creator = pool_creator
        self.token_0_vault = token_0_vault
        self.token_1_vault = token_1_vault
        self.lp_mint = lp_mint.key
        self.token_0_mint = token_0_mint.key
        self.token_1_mint = token_1_mint.key
        self.token_0_program = token_0_mint.owner
        self.token_1_program = token_1_mint.owner
        self.observation_key = observation_key
        self.auth_bump = auth_bump
        self.lp_mint_decimals = lp_mint.decimals
        self.mint_0_decimals = token_0_mint.decimals
        self.mint_1_decimals = token_1_mint.decimals
        self.lp_supply = lp_supply
        self.protocol_fees_token_0 = 0
        self.protocol_fees_token_1 = 0
        self.fund_fees_token_0 = 0
        self.fund_fees_token_1 = 0
        self.open_time = open_time
        self.recent_epoch = epoch
        self.padding = [0] * _PADDING_LEN

    def set_status(self, status: int) -> None:
        """Replace the whole status byte."""
        if not 0 <= status <= 0xFF:
            raise ValueError(f"status {status} does not fit in a byte")
        self.status = status

    def set_status_by_bit(self, bit: PoolStatusBitIndex, flag: PoolStatusBitFlag) -> None:
        """Enable or disable a single operation."""
        mask = 1 << PoolStatusBitIndex(bit)
        if flag is PoolStatusBitFlag.DISABLE:
            self.status |= mask
        else:
            self.status &= 0xFF ^ mask

    def get_status_by_bit(self, bit: PoolStatusBitIndex) -> bool:
        """Return True when the operation is enabled."""
        return self.status & (1 << PoolStatusBitIndex(bit)) == 0

    def vault_amount_without_fee(self, vault_0: int, vault_1: int) -> tuple[int, int]:
        """Vault balances minus the protocol and fund fees they still hold."""
        fees_0 = self.protocol_fees_token_0 + self.fund_fees_token_0
        fees_1 = self.protocol_fees_token_1 + self.fund_fees_token_1
        if vault_0 < fees_0 or vault_1 < fees_1:
            raise OverflowError("vault holds less than the accrued fees")
        return vault_0 - fees_0, vault_1 - fees_1

    def token_price_x32(self, vault_0: int, vault_1: int) -> tuple[int, int]:
        """Prices of token 0 and token 1 in Q32.32 fixed point."""
        amount_0, amount_1 = self.vault_amount_without_fee(vault_0, vault_1)
        return amount_1 * Q32 // amount_0, amount_0 * Q32 // amount_1

    def to_bytes(self) -> bytes:
        """Serialise the account, discriminator first."""
        keys = [getattr(self, name) for name in _KEY_FIELDS]
        for name, key in zip(_KEY_FIELDS, keys):
            if len(key) != 32:
                raise ValueError(f"{name} must be 32 bytes, got {len(key)}")
        if len(self.padding) != _PADDING_LEN:
            raise ValueError(f"padding must hold {_PADDING_LEN} words")
        try:
            body = _LAYOUT.pack(
                *keys,
                self.auth_bump,
                self.status,
                self.lp_mint_decimals,
                self.mint_0_decimals,
                self.mint_1_decimals,
                self.lp_supply,
                self.protocol_fees_token_0,
                self.protocol_fees_token_1,
                self.fund_fees_token_0,
                self.fund_fees_token_1,
                self.open_time,
                self.recent_epoch,
                *self.padding,
            )
        except struct.error as exc:
            raise ValueError(f"field out of range: {exc}") from exc
        return self.DISCRIMINATOR + body

    @classmethod
    def from_bytes(cls, data: bytes) -> PoolState:
        """Parse account data produced by :meth:`to_bytes`."""
        if len(data) < cls.LEN:
            raise AccountError("account data too short for PoolState")
        if bytes(data[:8]) != cls.DISCRIMINATOR:
            raise AccountError("account discriminator mismatch for PoolState")
        values = _LAYOUT.unpack_from(data, 8)
        fixed = len(_KEY_FIELDS) + 5 + 7
        return cls(*values[:fixed], padding=list(values[fixed:]))