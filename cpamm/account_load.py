"""Typed, checked access to the raw data of program accounts."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar

from .errors import AccountError

_B58_ALPHABET = "123456789ABCDEFGHJKLMNPQRSTUVWXYZabcdefghijkmnopqrstuvwxyz"
_DISCRIMINATOR_LEN = 8

T = TypeVar("T")


def _b58decode(text: str) -> bytes:
    value = 0
    for char in text:
        digit = _B58_ALPHABET.find(char)
        if digit < 0:
            raise ValueError(f"invalid base58 character {char!r}")
        value = value * 58 + digit
    leading_zeros = len(text) - len(text.lstrip("1"))
    body = value.to_bytes((value.bit_length() + 7) // 8, "big")
    return b"\x00" * leading_zeros + body


PROGRAM_ID = _b58decode("CPMMoo8L3F4NbTegBCKVNunggL7H1ZpdTHKxQB5qKP1C")


@dataclass(eq=False)
class AccountInfo:
    """An account as handed to the program: address, owning program and data."""

    key: bytes
    owner: bytes
    data: bytearray = field(default_factory=bytearray)
    is_writable: bool = True
    lamports: int = 0
    _borrowed: bool = field(default=False, init=False, repr=False)

    def __post_init__(self) -> None:
        self.data = bytearray(self.data)


def _record_owner(record_type: type) -> bytes:
    return getattr(record_type, "OWNER", PROGRAM_ID)


def _check_owner(record_type: type, acc_info: AccountInfo) -> None:
    expected = _record_owner(record_type)
    if acc_info.owner != expected:
        raise AccountError(
            f"account {acc_info.key.hex()} is owned by {acc_info.owner.hex()}, "
            f"expected {expected.hex()}"
        )


def _check_writable(acc_info: AccountInfo) -> None:
    if not acc_info.is_writable:
        raise AccountError(f"account {acc_info.key.hex()} is not writable")


def _check_not_borrowed(acc_info: AccountInfo) -> None:
    if acc_info._borrowed:
        raise AccountError(f"data of account {acc_info.key.hex()} is already borrowed")


def _check_discriminator(record_type: type, data: bytearray) -> None:
    if len(data) < _DISCRIMINATOR_LEN:
        raise AccountError("account discriminator not found")
    if bytes(data[:_DISCRIMINATOR_LEN]) != record_type.DISCRIMINATOR:
        raise AccountError(f"account discriminator mismatch for {record_type.__name__}")


@contextmanager
def _borrow_mut(record_type: type, acc_info: AccountInfo, *, initialize: bool = False) -> Iterator[Any]:
    _check_not_borrowed(acc_info)
    if initialize:
        if len(acc_info.data) < _DISCRIMINATOR_LEN:
            raise AccountError("account data too short to hold a discriminator")
        if any(acc_info.data[:_DISCRIMINATOR_LEN]):
            raise AccountError("account discriminator already set")
        acc_info.data[:_DISCRIMINATOR_LEN] = record_type.DISCRIMINATOR
    else:
        _check_discriminator(record_type, acc_info.data)
    record = record_type.from_bytes(bytes(acc_info.data))
    acc_info._borrowed = True
    try:
        yield record
        raw = record.to_bytes()
        acc_info.data[: len(raw)] = raw
    finally:
        acc_info._borrowed = False


@dataclass(frozen=True)
class AccountLoad(Generic[T]):
    """Loader binding an account to the record type stored in it.

    Mutable loads are context managers: the record is written back to the
    account data when the block finishes without an exception.
    """

    record_type: type[T]
    account_info: AccountInfo

    @classmethod
    def try_from(cls, record_type: type[T], acc_info: AccountInfo) -> AccountLoad[T]:
        """Wrap an initialised account, checking owner and discriminator."""
        _check_owner(record_type, acc_info)
        _check_not_borrowed(acc_info)
        _check_discriminator(record_type, acc_info.data)
        return cls(record_type, acc_info)

    @classmethod
    def try_from_unchecked(
        cls, record_type: type[T], program_id: bytes, acc_info: AccountInfo
    ) -> AccountLoad[T]:
        """Wrap an account that may not be initialised yet; only the owner is checked."""
        _check_owner(record_type, acc_info)
        return cls(record_type, acc_info)

    @classmethod
    def load_data_mut(cls, record_type: type[T], acc_info: AccountInfo):
        """Borrow the record of an account directly, without building a loader."""
        _check_owner(record_type, acc_info)
        _check_writable(acc_info)
        return _borrow_mut(record_type, acc_info)

    def load(self) -> T:
        """Return a copy of the stored record."""
        _check_not_borrowed(self.account_info)
        _check_discriminator(self.record_type, self.account_info.data)
        return self.record_type.from_bytes(bytes(self.account_info.data))

    def load_mut(self):
        """Borrow the stored record for reading and writing."""
        _check_writable(self.account_info)
        return _borrow_mut(self.record_type, self.account_info)

    def load_init(self):
        """Borrow a zeroed account for initialisation, writing its discriminator."""
        _check_writable(self.account_info)
        return _borrow_mut(self.record_type, self.account_info, initialize=True)

    def key(self) -> bytes:
        """Address of the wrapped account."""
        return self.account_info.key