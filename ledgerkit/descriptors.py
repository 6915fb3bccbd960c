"""Account descriptors for display, and shared references to account data."""

from __future__ import annotations

import logging
import os
import sys
import threading
import time
from dataclasses import dataclass, field
from typing import ClassVar

from .accounts import AccountData, AccountDataStore, AccountType
from .address import Pubkey

__all__ = [
    "LAMPORTS_PER_SOL",
    "minimum_balance",
    "AccountDescriptor",
    "AccountDescriptorList",
    "AccountDataReference",
]

logger = logging.getLogger(__name__)

LAMPORTS_PER_SOL = 1_000_000_000

# Default rent parameters.
_ACCOUNT_STORAGE_OVERHEAD = 128
_LAMPORTS_PER_BYTE_YEAR = 1_000_000_000 // 100 * 365 // (1024 * 1024)
_EXEMPTION_THRESHOLD = 2.0

_COLORS = {"red": 31, "green": 32, "yellow": 33, "cyan": 36}

_WELL_KNOWN_ACCOUNTS = {
    "11111111111111111111111111111111": "□ System Program",
    "Config1111111111111111111111111111111111111": "□ Config",
    "Stake11111111111111111111111111111111111111": "□ Stake",
    "Vote111111111111111111111111111111111111111": "□ Vote",
    "BPFLoaderUpgradeab1e11111111111111111111111": "□ BPFLoaderUpgradeable",
    "Ed25519SigVerify111111111111111111111111111": "□ Ed25519SigVerify",
    "KeccakSecp256k11111111111111111111111111111": "□ KeccakSecp256k",
    "SysvarC1ock11111111111111111111111111111111": "□ Sysvar Clock",
    "SysvarEpochSchedu1e111111111111111111111111": "□ Sysvar Epoch Schedule",
    "SysvarFees111111111111111111111111111111111": "□ Sysvar Fees",
    "Sysvar1nstructions1111111111111111111111111": "□ Sysvar Instructions",
    "SysvarRecentB1ockHashes11111111111111111111": "□ Sysvar Recent Block Hashes",
    "SysvarRent111111111111111111111111111111111": "□ Sysvar Rent",
    "SysvarS1otHashes111111111111111111111111111": "□ Sysvar Slot Hashes",
    "SysvarS1otHistory11111111111111111111111111": "□ Sysvar Slot History",
    "SysvarStakeHistory1111111111111111111111111": "□ Sysvar Stake History",
}


def _colors_enabled() -> bool:
    if os.environ.get("NO_COLOR"):
        return False
    stream = sys.stdout
    return bool(stream is not None and hasattr(stream, "isatty") and stream.isatty())


def _style(text: str, color: str) -> str:
    if not _colors_enabled():
        return text
    return f"\x1b[{_COLORS[color]}m{text}\x1b[0m"


def minimum_balance(data_len: int) -> int:
    """Lamports an account of ``data_len`` bytes needs to be rent exempt."""
    bytes_total = _ACCOUNT_STORAGE_OVERHEAD + data_len
    return int(bytes_total * _LAMPORTS_PER_BYTE_YEAR * _EXEMPTION_THRESHOLD)


@dataclass(frozen=True)
class AccountDescriptor:
    """A summary of an account, without its data."""

    container_names: ClassVar[dict[int, str]] = {}

    key: Pubkey
    owner: Pubkey
    lamports: int
    data_len: int
    rent_epoch: int
    executable: bool
    is_signer: bool
    is_writable: bool
    container_type: int | None = None

    @classmethod
    def from_account_data(cls, account_data: AccountData) -> AccountDescriptor:
        return cls(
            key=account_data.key,
            owner=account_data.owner,
            lamports=account_data.lamports,
            data_len=account_data.data_len(),
            rent_epoch=account_data.rent_epoch,
            executable=account_data.executable,
            is_signer=account_data.is_signer,
            is_writable=account_data.is_writable,
            container_type=account_data.container_type(),
        )

    def _container_columns(self) -> tuple[str, str]:
        if self.container_type is not None:
            name = self.container_names.get(self.container_type)
            if name is None:
                return "n/a", "n/a"
            return f"0x{self.container_type:08x}", name
        return "-", _WELL_KNOWN_ACCOUNTS.get(str(self.key), "-")

    def info(self) -> str:
        """One line describing the account, its container type and balance."""
        sol = f"{self.lamports / LAMPORTS_PER_SOL:>20.10f}"
        required = minimum_balance(self.data_len)
        if self.lamports == required:
            color, status = "green", ""
        elif self.lamports < required:
            color, status = "red", "~"
        else:
            color, status = "yellow", ""

        container_type, container_name = self._container_columns()
        key_text = str(self.key)
        key_text = f"{key_text[:8]}....{key_text[-8:]}"

        return (
            f"{_style(f'{key_text:>20}', 'yellow')} "
            f"{container_type:>10} "
            f"{container_name:<32} "
            f"space: {_style(f'{self.data_len:>6}', 'cyan')} "
            f"{_style(f'{sol:>8}', color)} SOL "
            f"{_style(status, color)}"
        )


@dataclass
class AccountDescriptorList:
    """An ordered list of account descriptors."""

    list: list[AccountDescriptor] = field(default_factory=list)

    def lines(self) -> list[str]:
        return [
            f"[store] [{seq:>8}] {descriptor.info()}"
            for seq, descriptor in enumerate(self.list)
        ]

    def to_log(self) -> None:
        for line in self.lines():
            logger.info("%s", line)


class AccountDataReference:
    """A lockable, shared handle to one account's data."""

    def __init__(self, account_data: AccountData) -> None:
        self.key = account_data.key
        self.timestamp = time.time()
        self.data_type = account_data.data_type
        self.data_len = account_data.available_data_len()
        if self.data_type is AccountType.CONTAINER:
            self.container_type = account_data.container_type() or 0
        else:
            self.container_type = 0
        self.lock = threading.Lock()
        self.account_data = account_data

    @classmethod
    def from_store(cls, store: AccountDataStore) -> AccountDataReference:
        return cls(AccountData.from_store(store))

    def lamports(self) -> int:
        with self.lock:
            return self.account_data.lamports

    def set_lamports(self, lamports: int) -> None:
        with self.lock:
            self.account_data.lamports = lamports

    def clone_for_program(self) -> AccountData:
        with self.lock:
            return self.account_data.clone_for_program()

    def clone_for_storage(self) -> AccountData:
        with self.lock:
            return self.account_data.clone_for_storage()

    def replicate(self) -> AccountDataReference:
        """A new reference holding a storage copy of the data."""
        replica = AccountDataReference(self.clone_for_storage())
        replica.timestamp = self.timestamp
        replica.container_type = self.container_type
        replica.data_type = self.data_type
        replica.data_len = self.data_len
        return replica

    def __repr__(self) -> str:
        return (
            f"AccountDataReference(key={self.key}, container_type=0x{self.container_type:08x}, "
            f"data_len={self.data_len})"
        )