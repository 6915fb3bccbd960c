"""Public keys, account metas, program-derived addresses and address domains."""

from __future__ import annotations

import enum
import hashlib
import os
from dataclasses import dataclass, field

__all__ = [
    "AddressError",
    "Pubkey",
    "is_on_curve",
    "create_program_address",
    "find_program_address",
    "AccountMeta",
    "AddressDomain",
    "ProgramAddressData",
]

PUBKEY_BYTES = 32
MAX_SEEDS = 16
MAX_SEED_LEN = 32
PDA_MARKER = b"ProgramDerivedAddress"

_ALPHABET = "123456789ABCDEFGHJKLMNPQRSTUVWXYZabcdefghijkmnopqrstuvwxyz"
_ALPHABET_INDEX = {ch: i for i, ch in enumerate(_ALPHABET)}

# Edwards25519 field prime and curve constant d = -121665 / 121666.
_P = 2**255 - 19
_D = (-121665 * pow(121666, _P - 2, _P)) % _P


class AddressError(Exception):
    """Raised for invalid keys, seeds or address data."""


def _b58encode(data: bytes) -> str:
    number = int.from_bytes(data, "big")
    chars = []
    while number:
        number, rem = divmod(number, 58)
        chars.append(_ALPHABET[rem])
    leading = len(data) - len(data.lstrip(b"\0"))
    return "1" * leading + "".join(reversed(chars))


def _b58decode(text: str) -> bytes:
    number = 0
    for ch in text:
        try:
            number = number * 58 + _ALPHABET_INDEX[ch]
        except KeyError:
            raise AddressError(f"invalid base58 character {ch!r}") from None
    body = number.to_bytes((number.bit_length() + 7) // 8, "big") if number else b""
    leading = len(text) - len(text.lstrip("1"))
    return b"\0" * leading + body


@dataclass(frozen=True, order=True)
class Pubkey:
    """A 32-byte public key, shown in base58."""

    raw: bytes = field(default=bytes(PUBKEY_BYTES))

    def __post_init__(self) -> None:
        raw = bytes(self.raw)
        if len(raw) != PUBKEY_BYTES:
            raise AddressError(f"public key must be {PUBKEY_BYTES} bytes, got {len(raw)}")
        object.__setattr__(self, "raw", raw)

    @classmethod
    def from_string(cls, text: str) -> Pubkey:
        raw = _b58decode(text)
        if len(raw) != PUBKEY_BYTES:
            raise AddressError(f"decoded key has {len(raw)} bytes, expected {PUBKEY_BYTES}")
        return cls(raw)

    @classmethod
    def new_unique(cls) -> Pubkey:
        return cls(os.urandom(PUBKEY_BYTES))

    def to_bytes(self) -> bytes:
        return self.raw

    def __bytes__(self) -> bytes:
        return self.raw

    def __str__(self) -> str:
        return _b58encode(self.raw)

    def __repr__(self) -> str:
        return f"Pubkey({self})"


def is_on_curve(data: bytes | Pubkey) -> bool:
    """Tell whether 32 bytes decompress to a point on the ed25519 curve."""
    raw = bytes(data)
    if len(raw) != PUBKEY_BYTES:
        return False
    y = (int.from_bytes(raw, "little") & ((1 << 255) - 1)) % _P
    y2 = y * y % _P
    u = (y2 - 1) % _P
    v = (_D * y2 + 1) % _P
    x2 = u * pow(v, _P - 2, _P) % _P
    return x2 == 0 or pow(x2, (_P - 1) // 2, _P) == 1


def create_program_address(seeds, program_id: Pubkey) -> Pubkey:
    """Derive an off-curve address from seeds and a program id."""
    seeds = [bytes(seed) for seed in seeds]
    if len(seeds) > MAX_SEEDS:
        raise AddressError(f"too many seeds: {len(seeds)} > {MAX_SEEDS}")
    hasher = hashlib.sha256()
    for seed in seeds:
        if len(seed) > MAX_SEED_LEN:
            raise AddressError(f"seed too long: {len(seed)} > {MAX_SEED_LEN}")
        hasher.update(seed)
    hasher.update(bytes(program_id))
    hasher.update(PDA_MARKER)
    digest = hasher.digest()
    if is_on_curve(digest):
        raise AddressError("derived address lies on the curve")
    return Pubkey(digest)


def find_program_address(seeds, program_id: Pubkey) -> tuple[Pubkey, int]:
    """Search bumps from 255 down for a valid program address."""
    seeds = [bytes(seed) for seed in seeds]
    for bump in range(255, 0, -1):
        try:
            return create_program_address([*seeds, bytes([bump])], program_id), bump
        except AddressError:
            if len(seeds) + 1 > MAX_SEEDS or any(len(s) > MAX_SEED_LEN for s in seeds):
                raise
    raise AddressError("unable to find a viable program address bump seed")


@dataclass(frozen=True)
class AccountMeta:
    """An account reference within an instruction."""

    pubkey: Pubkey
    is_signer: bool
    is_writable: bool

    @classmethod
    def new(cls, pubkey: Pubkey, is_signer) -> AccountMeta:
        return cls(pubkey, bool(is_signer), True)

    @classmethod
    def new_readonly(cls, pubkey: Pubkey, is_signer) -> AccountMeta:
        return cls(pubkey, bool(is_signer), False)


class AddressDomain(enum.Enum):
    """Which account's key prefixes the seeds of a derived address."""

    NONE = "none"
    DEFAULT = "default"
    AUTHORITY = "authority"
    IDENTITY = "identity"

    def get_seed(self, authority: AccountMeta | None, identity: AccountMeta | None) -> bytes:
        if self is AddressDomain.NONE:
            return b""
        if self is AddressDomain.DEFAULT:
            meta = identity if identity is not None else authority
            if meta is None:
                raise AddressError("Missing identity or authority for default address domain")
            return meta.pubkey.to_bytes()
        if self is AddressDomain.AUTHORITY:
            if authority is None:
                raise AddressError("Missing authority for address domain")
            return authority.pubkey.to_bytes()
        # The identity domain resolves through the authority account.
        if authority is None:
            raise AddressError("Missing identity for address domain")
        return authority.pubkey.to_bytes()


@dataclass(frozen=True)
class ProgramAddressData:
    """A length-prefixed seed read from instruction data."""

    seed: bytes

    @classmethod
    def try_from(cls, data: bytes) -> tuple[ProgramAddressData, int]:
        """Read one seed; return it with the number of bytes consumed."""
        data = bytes(data)
        if len(data) < 1:
            raise AddressError("program address data buffer is empty")
        bytes_used = data[0] + 1
        if bytes_used > len(data):
            raise AddressError(
                f"program address data needs {bytes_used} bytes, only {len(data)} available"
            )
        return cls(data[1:bytes_used]), bytes_used