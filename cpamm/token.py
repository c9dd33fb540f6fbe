"""Token balances, transfers and transfer-fee calculations."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum

from .account_load import _b58decode
from .errors import AccountError, InvalidInput, InvalidOwner

U64_MAX = (1 << 64) - 1
MAX_FEE_BASIS_POINTS = 10_000
ONE_IN_BASIS_POINTS = 10_000

TOKEN_PROGRAM_ID = _b58decode("TokenkegQfeZyiNwAJbNbGKPFXCWuBvf9Ss623VQ5DA")
TOKEN_2022_PROGRAM_ID = _b58decode("TokenzQdBNbLqP5VEhdkAS6EPFLC1PHnBqCXEpPxuEb")

MINT_WHITELIST = frozenset(
    _b58decode(address)
    for address in (
        "HVbpJAQGNpkgBaYBZQBR1t7yFdvaYVp2vCQQfKKEN4tM",
        "Crn4x1Y2HUKko7ox2EZMT6N2t2ZyH7eKtwkBGVnhEq1g",
        "FrBfWJ4qE5sCzKm3k3JaAtqZcXUh4LvJygDeketsrsH4",
        "2b1kV6DkPAnxd5ixfnxCpjxmKwqjjaYmCZfHsFu24GXo",
    )
)


class ExtensionType(IntEnum):
    """Extensions a token-2022 mint or account may carry."""

    UNINITIALIZED = 0
    TRANSFER_FEE_CONFIG = 1
    TRANSFER_FEE_AMOUNT = 2
    MINT_CLOSE_AUTHORITY = 3
    CONFIDENTIAL_TRANSFER_MINT = 4
    CONFIDENTIAL_TRANSFER_ACCOUNT = 5
    DEFAULT_ACCOUNT_STATE = 6
    IMMUTABLE_OWNER = 7
    MEMO_TRANSFER = 8
    NON_TRANSFERABLE = 9
    INTEREST_BEARING_CONFIG = 10
    CPI_GUARD = 11
    PERMANENT_DELEGATE = 12
    NON_TRANSFERABLE_ACCOUNT = 13
    TRANSFER_HOOK = 14
    TRANSFER_HOOK_ACCOUNT = 15
    CONFIDENTIAL_TRANSFER_FEE_CONFIG = 16
    CONFIDENTIAL_TRANSFER_FEE_AMOUNT = 17
    METADATA_POINTER = 18
    TOKEN_METADATA = 19


_SUPPORTED_EXTENSIONS = frozenset(
    {
        ExtensionType.TRANSFER_FEE_CONFIG,
        ExtensionType.METADATA_POINTER,
        ExtensionType.TOKEN_METADATA,
    }
)


def _require_u64(name: str, value: int) -> int:
    if not 0 <= value <= U64_MAX:
        raise OverflowError(f"{name} does not fit in an unsigned 64-bit integer")
    return value


def _ceil_div(numerator: int, denominator: int) -> int:
    return -(-numerator // denominator)


@dataclass(frozen=True)
class TransferFee:
    """Fee schedule that takes effect from ``epoch`` onwards."""

    epoch: int = 0
    maximum_fee: int = 0
    transfer_fee_basis_points: int = 0

    def __post_init__(self) -> None:
        if not 0 <= self.transfer_fee_basis_points <= MAX_FEE_BASIS_POINTS:
            raise ValueError("transfer fee basis points out of range")
        _require_u64("maximum_fee", self.maximum_fee)


def _fee(schedule: TransferFee, pre_fee_amount: int) -> int:
    _require_u64("pre_fee_amount", pre_fee_amount)
    bps = schedule.transfer_fee_basis_points
    if bps == 0 or pre_fee_amount == 0:
        return 0
    raw_fee = _ceil_div(pre_fee_amount * bps, ONE_IN_BASIS_POINTS)
    return min(raw_fee, schedule.maximum_fee)


def _pre_fee_amount(schedule: TransferFee, post_fee_amount: int) -> int:
    _require_u64("post_fee_amount", post_fee_amount)
    bps = schedule.transfer_fee_basis_points
    if bps == 0:
        return post_fee_amount
    if post_fee_amount == 0:
        return 0
    if bps == ONE_IN_BASIS_POINTS:
        return _require_u64("pre_fee_amount", schedule.maximum_fee + post_fee_amount)
    raw = _ceil_div(post_fee_amount * ONE_IN_BASIS_POINTS, ONE_IN_BASIS_POINTS - bps)
    if raw - post_fee_amount >= schedule.maximum_fee:
        return _require_u64("pre_fee_amount", post_fee_amount + schedule.maximum_fee)
    return _require_u64("pre_fee_amount", raw)


@dataclass
class TransferFeeConfig:
    """Transfer-fee extension: an older schedule and the one replacing it."""

    older_transfer_fee: TransferFee = field(default_factory=TransferFee)
    newer_transfer_fee: TransferFee = field(default_factory=TransferFee)

    def get_epoch_fee(self, epoch: int) -> TransferFee:
        """Schedule in force during ``epoch``."""
        if epoch >= self.newer_transfer_fee.epoch:
            return self.newer_transfer_fee
        return self.older_transfer_fee

    def calculate_epoch_fee(self, epoch: int, pre_fee_amount: int) -> int:
        """Fee withheld when ``pre_fee_amount`` is sent."""
        return _fee(self.get_epoch_fee(epoch), pre_fee_amount)

    def calculate_inverse_epoch_fee(self, epoch: int, post_fee_amount: int) -> int:
        """Fee needed on top of ``post_fee_amount`` so that it arrives in full."""
        schedule = self.get_epoch_fee(epoch)
        return _fee(schedule, _pre_fee_amount(schedule, post_fee_amount))


@dataclass
class Mint:
    """A token mint; ``owner`` is the token program that manages it."""

    key: bytes
    owner: bytes = TOKEN_PROGRAM_ID
    decimals: int = 0
    supply: int = 0
    mint_authority: bytes | None = None
    transfer_fee_config: TransferFeeConfig | None = None
    extension_types: tuple[ExtensionType, ...] = ()

    def __post_init__(self) -> None:
        types = tuple(ExtensionType(value) for value in self.extension_types)
        if self.transfer_fee_config is not None and ExtensionType.TRANSFER_FEE_CONFIG not in types:
            types = (ExtensionType.TRANSFER_FEE_CONFIG, *types)
        self.extension_types = types


@dataclass
class TokenAccount:
    """Balance of one mint held by ``owner``."""

    key: bytes
    mint: bytes
    owner: bytes
    amount: int = 0


def _move(authority: bytes, source: TokenAccount, destination: TokenAccount, mint: Mint, amount: int) -> None:
    _require_u64("amount", amount)
    if source.mint != mint.key or destination.mint != mint.key:
        raise AccountError("token account does not belong to the mint")
    if source.owner != authority:
        raise InvalidOwner("authority does not own the source account")
    if source.amount < amount:
        raise InvalidInput("insufficient funds")
    _require_u64("destination amount", destination.amount + amount)
    source.amount -= amount
    destination.amount += amount


def transfer_from_user_to_pool_vault(
    authority: bytes, source: TokenAccount, to_vault: TokenAccount, mint: Mint, amount: int
) -> None:
    """Move tokens from a user account into a pool vault; zero is a no-op."""
    if amount == 0:
        return
    _move(authority, source, to_vault, mint, amount)


def transfer_from_pool_vault_to_user(
    authority: bytes, from_vault: TokenAccount, destination: TokenAccount, mint: Mint, amount: int
) -> None:
    """Move tokens out of a pool vault, signed by the pool authority; zero is a no-op."""
    if amount == 0:
        return
    _move(authority, from_vault, destination, mint, amount)


def token_mint_to(authority: bytes, mint: Mint, destination: TokenAccount, amount: int) -> None:
    """Mint new tokens into ``destination``."""
    _require_u64("amount", amount)
    if mint.mint_authority is None or mint.mint_authority != authority:
        raise InvalidOwner("authority may not mint this token")
    if destination.mint != mint.key:
        raise AccountError("token account does not belong to the mint")
    supply = _require_u64("supply", mint.supply + amount)
    balance = _require_u64("destination amount", destination.amount + amount)
    mint.supply = supply
    destination.amount = balance


def token_burn(authority: bytes, mint: Mint, source: TokenAccount, amount: int) -> None:
    """Destroy tokens held in ``source``."""
    _require_u64("amount", amount)
    if source.mint != mint.key:
        raise AccountError("token account does not belong to the mint")
    if source.owner != authority:
        raise InvalidOwner("authority does not own the source account")
    if source.amount < amount:
        raise InvalidInput("insufficient funds")
    source.amount -= amount
    mint.supply = max(mint.supply - amount, 0)


def get_transfer_inverse_fee(mint: Mint, post_fee_amount: int, epoch: int) -> int:
    """Fee to add so that ``post_fee_amount`` arrives after the transfer fee."""
    if mint.owner == TOKEN_PROGRAM_ID:
        return 0
    if post_fee_amount == 0:
        raise InvalidInput("amount after fee must be positive")
    config = mint.transfer_fee_config
    if config is None:
        return 0
    schedule = config.get_epoch_fee(epoch)
    if schedule.transfer_fee_basis_points == MAX_FEE_BASIS_POINTS:
        return schedule.maximum_fee
    return config.calculate_inverse_epoch_fee(epoch, post_fee_amount)


def get_transfer_fee(mint: Mint, pre_fee_amount: int, epoch: int) -> int:
    """Fee withheld when ``pre_fee_amount`` of this mint is transferred."""
    if mint.owner == TOKEN_PROGRAM_ID:
        return 0
    config = mint.transfer_fee_config
    if config is None:
        return 0
    return config.calculate_epoch_fee(epoch, pre_fee_amount)


def is_supported_mint(mint: Mint) -> bool:
    """Whether pools may be created with this mint."""
    if mint.owner == TOKEN_PROGRAM_ID or mint.key in MINT_WHITELIST:
        return True
    return all(extension in _SUPPORTED_EXTENSIONS for extension in mint.extension_types)