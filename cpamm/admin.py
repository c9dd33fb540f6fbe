"""Administrative instructions: fee configs, pool status and fee collection."""

from __future__ import annotations

from enum import IntEnum

from .account_load import _b58decode
from .config import AmmConfig
from .errors import AccountError, InvalidInput, InvalidOwner
from .pool import PoolState
from .token import Mint, TokenAccount, transfer_from_pool_vault_to_user

ADMIN_ID = _b58decode("GThUX1Atko4tqhN2NaiTazWSeFWMuiUvfFnyJyUghFMJ")
CREATE_POOL_FEE_RECEIVER_ID = _b58decode("DNXgeM9EiiaAbaWvwjHj9fQQLAX5ZsfHyvmYUNRAdNC8")
AUTH_SEED = "vault_and_lp_mint_auth_seed"

# Fee rates are expressed in hundredths of a basis point (10^-6).
FEE_RATE_DENOMINATOR_VALUE = 1_000_000

DEFAULT_KEY = bytes(32)
_U16_MAX = (1 << 16) - 1
_U64_MAX = (1 << 64) - 1


class ConfigParam(IntEnum):
    """Which field of an AMM config an update changes."""

    TRADE_FEE_RATE = 0
    PROTOCOL_FEE_RATE = 1
    FUND_FEE_RATE = 2
    PROTOCOL_OWNER = 3
    FUND_OWNER = 4
    CREATE_POOL_FEE = 5
    DISABLE_CREATE_POOL = 6


def _require_u64(name: str, value: int) -> None:
    if not 0 <= value <= _U64_MAX:
        raise InvalidInput(f"{name} does not fit in an unsigned 64-bit integer")


def _require_admin(signer: bytes) -> None:
    if signer != ADMIN_ID:
        raise InvalidOwner()


def _check_trade_fee_rate(rate: int) -> None:
    _require_u64("trade_fee_rate", rate)
    if rate >= FEE_RATE_DENOMINATOR_VALUE:
        raise InvalidInput("trade fee rate must be below the fee denominator")


def _check_share_rates(protocol_fee_rate: int, fund_fee_rate: int) -> None:
    _require_u64("protocol_fee_rate", protocol_fee_rate)
    _require_u64("fund_fee_rate", fund_fee_rate)
    if protocol_fee_rate > FEE_RATE_DENOMINATOR_VALUE:
        raise InvalidInput("protocol fee rate exceeds the fee denominator")
    if fund_fee_rate > FEE_RATE_DENOMINATOR_VALUE:
        raise InvalidInput("fund fee rate exceeds the fee denominator")
    if protocol_fee_rate + fund_fee_rate > FEE_RATE_DENOMINATOR_VALUE:
        raise InvalidInput("protocol and fund fee rates together exceed the fee denominator")


def create_amm_config(
    owner: bytes,
    index: int,
    trade_fee_rate: int,
    protocol_fee_rate: int,
    fund_fee_rate: int,
    create_pool_fee: int,
    bump: int,
) -> AmmConfig:
    """Create a fee config; only the admin may do so and becomes both owners."""
    _require_admin(owner)
    if not 0 <= index <= _U16_MAX:
        raise InvalidInput("config index does not fit in 16 bits")
    _check_trade_fee_rate(trade_fee_rate)
    _check_share_rates(protocol_fee_rate, fund_fee_rate)
    _require_u64("create_pool_fee", create_pool_fee)
    return AmmConfig(
        bump=bump,
        disable_create_pool=False,
        index=index,
        trade_fee_rate=trade_fee_rate,
        protocol_fee_rate=protocol_fee_rate,
        fund_fee_rate=fund_fee_rate,
        create_pool_fee=create_pool_fee,
        protocol_owner=owner,
        fund_owner=owner,
    )


def _checked_new_owner(new_owner: bytes | None) -> bytes:
    if new_owner is None:
        raise InvalidInput("a new owner account is required")
    if new_owner == DEFAULT_KEY:
        raise InvalidInput("new owner must not be the default key")
    return new_owner


def update_amm_config(
    owner: bytes,
    amm_config: AmmConfig,
    param: int,
    value: int,
    new_owner: bytes | None = None,
) -> None:
    """Change one field of a config, chosen by ``param`` (see :class:`ConfigParam`)."""
    _require_admin(owner)
    try:
        which = ConfigParam(param)
    except ValueError:
        raise InvalidInput(f"unknown config parameter {param}") from None

    if which is ConfigParam.TRADE_FEE_RATE:
        _check_trade_fee_rate(value)
        amm_config.trade_fee_rate = value
    elif which is ConfigParam.PROTOCOL_FEE_RATE:
        _check_share_rates(value, amm_config.fund_fee_rate)
        amm_config.protocol_fee_rate = value
    elif which is ConfigParam.FUND_FEE_RATE:
        _check_share_rates(amm_config.protocol_fee_rate, value)
        amm_config.fund_fee_rate = value
    elif which is ConfigParam.PROTOCOL_OWNER:
        amm_config.protocol_owner = _checked_new_owner(new_owner)
    elif which is ConfigParam.FUND_OWNER:
        amm_config.fund_owner = _checked_new_owner(new_owner)
    elif which is ConfigParam.CREATE_POOL_FEE:
        _require_u64("create_pool_fee", value)
        amm_config.create_pool_fee = value
    else:
        amm_config.disable_create_pool = value != 0


def update_pool_status(authority: bytes, pool_state: PoolState, status: int, epoch: int) -> None:
    """Replace the pool's status bits; only the admin may do so."""
    _require_admin(authority)
    if not 0 <= status <= 0xFF:
        raise InvalidInput("status must fit in one byte")
    pool_state.set_status(status)
    pool_state.recent_epoch = epoch


def _collect(
    fee_fields: tuple[str, str],
    allowed_owner: bytes,
    owner: bytes,
    pool_state: PoolState,
    token_0_vault: TokenAccount,
    token_1_vault: TokenAccount,
    vault_0_mint: Mint,
    vault_1_mint: Mint,
    recipient_token_0_account: TokenAccount,
    recipient_token_1_account: TokenAccount,
    amount_0_requested: int,
    amount_1_requested: int,
    epoch: int,
) -> tuple[int, int]:
    if owner not in (allowed_owner, ADMIN_ID):
        raise InvalidOwner()
    if token_0_vault.key != pool_state.token_0_vault:
        raise AccountError("token_0_vault is not the pool's token 0 vault")
    if token_1_vault.key != pool_state.token_1_vault:
        raise AccountError("token_1_vault is not the pool's token 1 vault")
    if vault_0_mint.key != token_0_vault.mint:
        raise AccountError("vault_0_mint is not the mint of token_0_vault")
    if vault_1_mint.key != token_1_vault.mint:
        raise AccountError("vault_1_mint is not the mint of token_1_vault")
    _require_u64("amount_0_requested", amount_0_requested)
    _require_u64("amount_1_requested", amount_1_requested)

    field_0, field_1 = fee_fields
    amount_0 = min(amount_0_requested, getattr(pool_state, field_0))
    amount_1 = min(amount_1_requested, getattr(pool_state, field_1))
    legs = (
        (token_0_vault, recipient_token_0_account, vault_0_mint, amount_0),
        (token_1_vault, recipient_token_1_account, vault_1_mint, amount_1),
    )
    # Validate both transfers up front so a failure leaves nothing half done.
    for vault, recipient, mint, amount in legs:
        if amount == 0:
            continue
        if recipient.mint != mint.key:
            raise AccountError("recipient account does not belong to the vault's mint")
        if vault.amount < amount:
            raise InvalidInput("vault holds less than the fees to collect")

    setattr(pool_state, field_0, getattr(pool_state, field_0) - amount_0)
    setattr(pool_state, field_1, getattr(pool_state, field_1) - amount_1)
    pool_state.recent_epoch = epoch

    for vault, recipient, mint, amount in legs:
        # The pool authority owns the vaults and signs for them.
        transfer_from_pool_vault_to_user(vault.owner, vault, recipient, mint, amount)
    return amount_0, amount_1


def collect_protocol_fee(
    owner: bytes,
    amm_config: AmmConfig,
    pool_state: PoolState,
    token_0_vault: TokenAccount,
    token_1_vault: TokenAccount,
    vault_0_mint: Mint,
    vault_1_mint: Mint,
    recipient_token_0_account: TokenAccount,
    recipient_token_1_account: TokenAccount,
    amount_0_requested: int,
    amount_1_requested: int,
    epoch: int,
) -> tuple[int, int]:
    """Pay accrued protocol fees out of the vaults; returns the amounts sent."""
    return _collect(
        ("protocol_fees_token_0", "protocol_fees_token_1"),
        amm_config.protocol_owner,
        owner,
        pool_state,
        token_0_vault,
        token_1_vault,
        vault_0_mint,
        vault_1_mint,
        recipient_token_0_account,
        recipient_token_1_account,
        amount_0_requested,
        amount_1_requested,
        epoch,
    )


def collect_fund_fee(
    owner: bytes,
    amm_config: AmmConfig,
    pool_state: PoolState,
    token_0_vault: TokenAccount,
    token_1_vault: TokenAccount,
    vault_0_mint: Mint,
    vault_1_mint: Mint,
    recipient_token_0_account: TokenAccount,
    recipient_token_1_account: TokenAccount,
    amount_0_requested: int,
    amount_1_requested: int,
    epoch: int,
) -> tuple[int, int]:
    """Pay accrued fund fees out of the vaults; returns the amounts sent."""
    return _collect(
        ("fund_fees_token_0", "fund_fees_token_1"),
        amm_config.fund_owner,
        owner,
        pool_state,
        token_0_vault,
        token_1_vault,
        vault_0_mint,
        vault_1_mint,
        recipient_token_0_account,
        recipient_token_1_account,
        amount_0_requested,
        amount_1_requested,
        epoch,
    )