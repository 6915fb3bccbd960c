"""Account data records, their storage form and template descriptors."""

from __future__ import annotations

import enum
import struct
from dataclasses import dataclass, field, replace
from typing import Literal

from .address import Pubkey

__all__ = [
    "ACCOUNT_DATA_PADDING",
    "ACCOUNT_DATA_TEMPLATE_SIZE",
    "IsSigner",
    "Access",
    "SeedSuffix",
    "AccountType",
    "AccountData",
    "AccountDataStore",
]

ACCOUNT_DATA_PADDING = 1024
ACCOUNT_DATA_TEMPLATE_SIZE = 1024 * 512

_STORE_HEADER = struct.Struct("<B32s32sQI")
_STORE_TRAILER = struct.Struct("<QB")


class IsSigner(enum.Enum):
    SIGNER = "signer"
    NOT_SIGNER = "not_signer"

    def __bool__(self) -> bool:
        return self is IsSigner.SIGNER


class Access(enum.Enum):
    READ = "read"
    WRITE = "write"

    def __bool__(self) -> bool:
        return self is Access.WRITE


@dataclass(frozen=True)
class SeedSuffix:
    """How the seed of a template account ends: nothing, a sequence number or custom bytes."""

    kind: Literal["blank", "sequence", "custom"]
    value: bytes = b""

    @classmethod
    def blank(cls) -> SeedSuffix:
        return cls("blank")

    @classmethod
    def sequence(cls) -> SeedSuffix:
        return cls("sequence")

    @classmethod
    def custom(cls, value: bytes) -> SeedSuffix:
        return cls("custom", bytes(value))


class AccountType(enum.IntEnum):
    CONTAINER = 0
    UNKNOWN = 1
    SPL_TOKEN = 2
    SPL_TOKEN_2022 = 3
    METAPLEX_FT = 4
    METAPLEX_NFT = 5


@dataclass
class AccountData:
    """An account held in memory.

    ``data`` is the whole available buffer; ``declared_len`` is the account's
    data length, which may be smaller when the buffer carries padding.
    """

    data_type: AccountType = AccountType.CONTAINER
    key: Pubkey = field(default_factory=Pubkey)
    owner: Pubkey = field(default_factory=Pubkey)
    lamports: int = 0
    data: bytearray = field(default_factory=bytearray)
    declared_len: int = 0
    rent_epoch: int = 0
    executable: bool = False
    is_signer: bool = False
    is_writable: bool = False

    @classmethod
    def new_static(cls, key: Pubkey, owner: Pubkey) -> AccountData:
        return cls.new_static_with_size(key, owner, 0)

    @classmethod
    def new_static_with_size(cls, key: Pubkey, owner: Pubkey, data_len: int) -> AccountData:
        return cls(key=key, owner=owner, data=bytearray(data_len), declared_len=data_len)

    @classmethod
    def new_static_with_args(
        cls, key: Pubkey, owner: Pubkey, lamports: int, src_data: bytes, rent_epoch: int
    ) -> AccountData:
        return cls(
            key=key,
            owner=owner,
            lamports=lamports,
            data=bytearray(src_data),
            declared_len=len(src_data),
            rent_epoch=rent_epoch,
        )

    @classmethod
    def new_allocated_for_program(cls, key: Pubkey, owner: Pubkey, data_len: int) -> AccountData:
        return cls(
            key=key,
            owner=owner,
            data=bytearray(data_len + ACCOUNT_DATA_PADDING),
            declared_len=data_len,
        )

    @classmethod
    def new_template_for_program(cls, key: Pubkey, owner: Pubkey) -> AccountData:
        return cls.new_allocated_for_program(key, owner, ACCOUNT_DATA_TEMPLATE_SIZE)

    @classmethod
    def from_store(cls, store: AccountDataStore) -> AccountData:
        return cls(
            data_type=store.data_type,
            key=store.key,
            owner=store.owner,
            lamports=store.lamports,
            data=bytearray(store.data),
            declared_len=len(store.data),
            rent_epoch=store.rent_epoch,
            executable=store.executable,
        )

    def data_len(self) -> int:
        return self.declared_len

    def available_data_len(self) -> int:
        return len(self.data)

    def payload(self) -> memoryview:
        """A writable view of the whole available buffer."""
        return memoryview(self.data)

    def container_type(self) -> int | None:
        if self.declared_len < 4:
            return None
        return int.from_bytes(self.data[:4], "little")

    def with_lamports(self, lamports: int) -> AccountData:
        return replace(self, lamports=lamports, data=bytearray(self.data))

    def _clone_with_buffer(self, buffer_len: int) -> AccountData:
        size = self.declared_len
        buffer = bytearray(buffer_len)
        buffer[:size] = self.data[:size]
        return replace(self, data_type=AccountType.CONTAINER, data=buffer)

    def clone_for_program(self) -> AccountData:
        """Copy with the declared data followed by padding room."""
        return self._clone_with_buffer(self.declared_len + ACCOUNT_DATA_PADDING)

    def clone_for_storage(self) -> AccountData:
        """Copy trimmed to the declared data length."""
        return self._clone_with_buffer(self.declared_len)

    def to_store(self) -> AccountDataStore:
        return AccountDataStore(
            data_type=self.data_type,
            key=self.key,
            owner=self.owner,
            lamports=self.lamports,
            data=bytes(self.data),
            rent_epoch=self.rent_epoch,
            executable=self.executable,
        )


@dataclass(frozen=True)
class AccountDataStore:
    """The storage form of an account, with a compact binary encoding."""

    data_type: AccountType
    key: Pubkey
    owner: Pubkey
    lamports: int
    data: bytes
    rent_epoch: int
    executable: bool

    def to_bytes(self) -> bytes:
        header = _STORE_HEADER.pack(
            int(self.data_type),
            self.key.to_bytes(),
            self.owner.to_bytes(),
            self.lamports,
            len(self.data),
        )
        trailer = _STORE_TRAILER.pack(self.rent_epoch, int(bool(self.executable)))
        return header + bytes(self.data) + trailer

    @classmethod
    def from_bytes(cls, data: bytes) -> AccountDataStore:
        data = bytes(data)
        if len(data) < _STORE_HEADER.size:
            raise ValueError("account store record is truncated")
        type_index, key, owner, lamports, data_len = _STORE_HEADER.unpack_from(data)
        try:
            data_type = AccountType(type_index)
        except ValueError:
            raise ValueError(f"unknown account type index {type_index}") from None
        start = _STORE_HEADER.size
        end = start + data_len
        if len(data) < end + _STORE_TRAILER.size:
            raise ValueError("account store record is truncated")
        rent_epoch, executable = _STORE_TRAILER.unpack_from(data, end)
        if executable not in (0, 1):
            raise ValueError(f"invalid boolean value {executable}")
        if len(data) != end + _STORE_TRAILER.size:
            raise ValueError("account store record has trailing bytes")
        return cls(
            data_type=data_type,
            key=Pubkey(key),
            owner=Pubkey(owner),
            lamports=lamports,
            data=data[start:end],
            rent_epoch=rent_epoch,
            executable=bool(executable),
        )