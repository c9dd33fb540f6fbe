# cpamm

Account state, fee accounting and price-oracle logic for a constant-product
automated market maker, as plain Python objects. The package has no
dependencies outside the standard library.

## Modules

- `cpamm.config`: `AmmConfig` holds the trade, protocol and fund fee rates,
  the pool creation fee, the `disable_create_pool` switch and the protocol and
  fund owners. `to_bytes` / `from_bytes` give it a fixed binary layout behind
  an 8-byte discriminator.
- `cpamm.pool`: `PoolState` holds the vaults, mints, decimals, LP supply,
  accrued protocol and fund fees, open time and a status byte.
  `PoolStatusBitIndex` (`DEPOSIT`, `WITHDRAW`, `SWAP`) and `PoolStatusBitFlag`
  (`ENABLE`, `DISABLE`) switch single operations on and off. A set bit
  disables an operation. `vault_amount_without_fee` subtracts the accrued fees
  from vault balances. `token_price_x32` returns both prices in Q32.32 fixed
  point. `initialize` fills in a new pool, and `to_bytes` / `from_bytes`
  serialise it.
- `cpamm.oracle`: `ObservationState` is a ring buffer of 100 `Observation`
  entries holding cumulative prices. `update` stamps the time on its first
  call. After that it records at most once every 15 seconds, adds price ×
  elapsed time into the next slot and wraps the result modulo 2¹²⁸.
  `block_timestamp()` returns the current unix time in seconds.
- `cpamm.events`: `LpChangeEvent` (with `ChangeType.DEPOSIT` /
  `ChangeType.WITHDRAW`) and `SwapEvent` are frozen dataclasses with
  `encode` / `decode`.
- `cpamm.math`: `checked_ceil_div(dividend, divisor)` divides and rounds up on
  128-bit amounts. It returns the quotient and the smallest divisor that gives
  that quotient.
- `cpamm.account_load`: `AccountInfo` (key, owner, data, writability,
  lamports) and `AccountLoad`. `AccountLoad` loads a record type from raw
  account data after checking the owner, writability and discriminator.
  `load()` returns a copy. `load_mut()`, `load_init()` and
  `AccountLoad.load_data_mut(...)` are context managers, and each writes the
  record back when its block ends without an exception.
- `cpamm.token`: `Mint`, `TokenAccount`, `ExtensionType`, and `TransferFee` /
  `TransferFeeConfig` with per-epoch fee schedules.
  - `get_transfer_fee` and `get_transfer_inverse_fee` compute transfer fees.
  - `is_supported_mint` decides which mints a pool may use.
  - `transfer_from_user_to_pool_vault`, `transfer_from_pool_vault_to_user`,
    `token_mint_to` and `token_burn` move balances between in-memory accounts.
- `cpamm.admin`: `create_amm_config`, `update_amm_config` (the field is chosen
  by `ConfigParam`), `update_pool_status`, `collect_protocol_fee` and
  `collect_fund_fee`. Creating a config, updating a config and setting pool
  status require the signer to be `ADMIN_ID`. Fee collection also accepts the
  config's protocol or fund owner.
- `cpamm.errors`: `AmmError` and its subclasses `InvalidOwner`,
  `InvalidInput`, `NotApproved`, `ExceededSlippage` and `AccountError`.

Fee rates are in millionths (`FEE_RATE_DENOMINATOR_VALUE = 1_000_000`).
Failed permission or input checks in `cpamm.admin` and `cpamm.token` raise
subclasses of `AmmError`. Failed account-data checks raise `AccountError`.
Values that do not fit their binary field raise `ValueError` during
serialisation, and arithmetic overflow raises `OverflowError`.

## Example

```python
from cpamm.pool import PoolState, PoolStatusBitIndex, PoolStatusBitFlag

pool = PoolState()
pool.set_status(4)
assert not pool.get_status_by_bit(PoolStatusBitIndex.SWAP)

pool.set_status_by_bit(PoolStatusBitIndex.SWAP, PoolStatusBitFlag.ENABLE)
assert pool.get_status_by_bit(PoolStatusBitIndex.SWAP)

price_0, price_1 = pool.token_price_x32(1_000, 4_000)
assert (price_0, price_1) == (4 << 32, 1 << 30)

restored = PoolState.from_bytes(pool.to_bytes())
assert restored == pool
```

## What it does not do

The package contains no swap, deposit, withdraw or pool-creation
instructions, so it does not price trades or issue LP tokens. It provides the
state records, fee and oracle logic, and the administrative actions listed
above. It has no command-line tool. It does not talk to a network. It keeps no
storage of its own: records live in memory or in the byte layouts shown above.

## Running the tests

```
pip install -e ".[test]"
pytest
```