import hashlib

import pytest

from cpamm.events import ChangeType, LpChangeEvent, SwapEvent

POOL_ID = bytes(range(100, 132))


def _lp_event(change_type=ChangeType.WITHDRAW):
    return LpChangeEvent(
        pool_id=POOL_ID,
        lp_amount_before=1_000_000,
        token_0_vault_before=500_000,
        token_1_vault_before=700_000,
        token_0_amount=1234,
        token_1_amount=5678,
        token_0_transfer_fee=12,
        token_1_transfer_fee=0,
        change_type=change_type,
    )


def _swap_event(base_input=True):
    return SwapEvent(
        pool_id=POOL_ID,
        input_vault_before=900,
        output_vault_before=800,
        input_amount=50,
        output_amount=40,
        input_transfer_fee=1,
        output_transfer_fee=2,
        base_input=base_input,
    )


@pytest.mark.parametrize("change_type", list(ChangeType))
def test_lp_change_round_trip(change_type):
    event = _lp_event(change_type)
    assert LpChangeEvent.decode(event.encode()) == event


@pytest.mark.parametrize("base_input", [True, False])
def test_swap_round_trip(base_input):
    event = _swap_event(base_input)
    assert SwapEvent.decode(event.encode()) == event


def test_lp_change_discriminator_and_tail():
    data = _lp_event(ChangeType.WITHDRAW).encode()
    assert data[:8] == hashlib.sha256(b"event:LpChangeEvent").digest()[:8]
    assert data[-1] == ChangeType.WITHDRAW
    assert data[8:40] == POOL_ID


def test_swap_discriminator():
    data = _swap_event().encode()
    assert data[:8] == hashlib.sha256(b"event:SwapEvent").digest()[:8]
    assert data[-1] == 1


def test_change_type_is_coerced():
    assert _lp_event(0).change_type is ChangeType.DEPOSIT


def test_invalid_change_type_on_decode():
    data = bytearray(_lp_event().encode())
    data[-1] = 2
    with pytest.raises(ValueError):
        LpChangeEvent.decode(bytes(data))


def test_invalid_bool_on_decode():
    data = bytearray(_swap_event().encode())
    data[-1] = 2
    with pytest.raises(ValueError):
        SwapEvent.decode(bytes(data))


def test_decoding_other_event_fails():
    with pytest.raises(ValueError):
        SwapEvent.decode(_lp_event().encode())


def test_bad_pool_id_rejected():
    with pytest.raises(ValueError):
        SwapEvent(b"x", 0, 0, 0, 0, 0, 0, True)


def test_negative_amount_rejected():
    event = SwapEvent(POOL_ID, -1, 0, 0, 0, 0, 0, False)
    with pytest.raises(ValueError):
        event.encode()