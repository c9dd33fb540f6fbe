from types import SimpleNamespace

import pytest

from cpamm.errors import AccountError
from cpamm.pool import Q32, PoolState, PoolStatusBitFlag, PoolStatusBitIndex


def test_get_set_status_by_bit():
    pool_state = PoolState()
    pool_state.set_status(4)  # 0000100
    assert pool_state.get_status_by_bit(PoolStatusBitIndex.SWAP) is False
    assert pool_state.get_status_by_bit(PoolStatusBitIndex.DEPOSIT) is True
    assert pool_state.get_status_by_bit(PoolStatusBitIndex.WITHDRAW) is True

    # disable -> disable, nothing to change
    pool_state.set_status_by_bit(PoolStatusBitIndex.SWAP, PoolStatusBitFlag.DISABLE)
    assert pool_state.get_status_by_bit(PoolStatusBitIndex.SWAP) is False

    # disable -> enable
    pool_state.set_status_by_bit(PoolStatusBitIndex.SWAP, PoolStatusBitFlag.ENABLE)
    assert pool_state.get_status_by_bit(PoolStatusBitIndex.SWAP) is True

    # enable -> enable, nothing to change
    pool_state.set_status_by_bit(PoolStatusBitIndex.SWAP, PoolStatusBitFlag.ENABLE)
    assert pool_state.get_status_by_bit(PoolStatusBitIndex.SWAP) is True

    # enable -> disable
    pool_state.set_status_by_bit(PoolStatusBitIndex.SWAP, PoolStatusBitFlag.DISABLE)
    assert pool_state.get_status_by_bit(PoolStatusBitIndex.SWAP) is False

    pool_state.set_status(5)  # 0000101
    assert pool_state.get_status_by_bit(PoolStatusBitIndex.SWAP) is False
    assert pool_state.get_status_by_bit(PoolStatusBitIndex.DEPOSIT) is False
    assert pool_state.get_status_by_bit(PoolStatusBitIndex.WITHDRAW) is True

    pool_state.set_status(7)  # 0000111
    assert pool_state.get_status_by_bit(PoolStatusBitIndex.SWAP) is False
    assert pool_state.get_status_by_bit(PoolStatusBitIndex.DEPOSIT) is False
    assert pool_state.get_status_by_bit(PoolStatusBitIndex.WITHDRAW) is False

    pool_state.set_status(3)  # 0000011
    assert pool_state.get_status_by_bit(PoolStatusBitIndex.SWAP) is True
    assert pool_state.get_status_by_bit(PoolStatusBitIndex.DEPOSIT) is False
    assert pool_state.get_status_by_bit(PoolStatusBitIndex.WITHDRAW) is False


def test_set_status_by_bit_leaves_other_bits():
    pool_state = PoolState(status=3)
    pool_state.set_status_by_bit(PoolStatusBitIndex.SWAP, PoolStatusBitFlag.DISABLE)
    assert pool_state.status == 7
    pool_state.set_status_by_bit(PoolStatusBitIndex.DEPOSIT, PoolStatusBitFlag.ENABLE)
    assert pool_state.status == 6


@pytest.mark.parametrize("status", [-1, 256])
def test_set_status_out_of_range(status):
    with pytest.raises(ValueError):
        PoolState().set_status(status)


def test_vault_amount_without_fee():
    pool_state = PoolState(
        protocol_fees_token_0=10,
        fund_fees_token_0=5,
        protocol_fees_token_1=7,
        fund_fees_token_1=3,
    )
    assert pool_state.vault_amount_without_fee(100, 200) == (85, 190)


def test_vault_amount_below_fees_raises():
    pool_state = PoolState(protocol_fees_token_1=50)
    with pytest.raises(OverflowError):
        pool_state.vault_amount_without_fee(100, 49)


def test_token_price_x32():
    pool_state = PoolState()
    assert pool_state.token_price_x32(1000, 1000) == (Q32, Q32)
    assert pool_state.token_price_x32(1000, 2000) == (2 * Q32, Q32 // 2)


def test_token_price_with_empty_vault():
    with pytest.raises(ZeroDivisionError):
        PoolState().token_price_x32(0, 10)


def _mint(seed, owner_seed, decimals):
    return SimpleNamespace(key=bytes([seed]) * 32, owner=bytes([owner_seed]) * 32, decimals=decimals)


def test_initialize():
    pool_state = PoolState(protocol_fees_token_0=9, padding=[1] * 31)
    pool_state.initialize(
        auth_bump=253,
        lp_supply=1000,
        open_time=1_700_000_000,
        pool_creator=bytes([1]) * 32,
        amm_config=bytes([2]) * 32,
        token_0_vault=bytes([3]) * 32,
        token_1_vault=bytes([4]) * 32,
        token_0_mint=_mint(5, 8, 6),
        token_1_mint=_mint(6, 9, 9),
        lp_mint=_mint(7, 8, 9),
        observation_key=bytes([10]) * 32,
        epoch=42,
    )
    assert pool_state.token_0_mint == bytes([5]) * 32
    assert pool_state.token_1_program == bytes([9]) * 32
    assert pool_state.mint_0_decimals == 6
    assert pool_state.lp_mint_decimals == 9
    assert pool_state.protocol_fees_token_0 == 0
    assert pool_state.recent_epoch == 42
    assert pool_state.padding == [0] * 31


def test_round_trip():
    pool_state = PoolState(
        amm_config=bytes([2]) * 32,
        token_0_vault=bytes([3]) * 32,
        auth_bump=255,
        status=5,
        lp_supply=10**12,
        fund_fees_token_1=77,
        open_time=123,
        recent_epoch=600,
    )
    data = pool_state.to_bytes()
    assert len(data) == PoolState.LEN
    assert PoolState.from_bytes(data) == pool_state


def test_from_bytes_rejects_wrong_discriminator():
    data = bytearray(PoolState().to_bytes())
    data[3] ^= 1
    with pytest.raises(AccountError):
        PoolState.from_bytes(bytes(data))


def test_from_bytes_rejects_short_data():
    with pytest.raises(AccountError):
        PoolState.from_bytes(PoolState().to_bytes()[:100])


def test_to_bytes_rejects_bad_key():
    with pytest.raises(ValueError):
        PoolState(lp_mint=b"abc").to_bytes()