"""Building blocks for instruction assembly: errors, configs, seed sequences and templates."""

from __future__ import annotations

import enum
import threading
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass, field, replace

from .accounts import Access, IsSigner, SeedSuffix
from .address import AccountMeta, AddressDomain, Pubkey

__all__ = [
    "BuilderError",
    "Gather",
    "find_interface_id",
    "SeedSequence",
    "InstructionBuilderConfig",
    "GenericTemplate",
    "sequence_seed_bytes",
    "encode_template_instruction_data",
]

_MAX_TEMPLATE_DATA_LEN = 0xFF
_U64_MAX = 2**64 - 1


class BuilderError(Exception):
    """Raised when an instruction cannot be assembled."""


class Gather(enum.Enum):
    """Which signing accounts to append when gathering account keys."""

    AUTHORITY = "authority"
    IDENTITY = "identity"
    ALL = "all"


def find_interface_id(program_fn: Callable, handlers: Sequence[Callable]) -> int:
    """Return the position of ``program_fn`` among the registered handlers."""
    for index, handler in enumerate(handlers):
        if handler == program_fn:
            return index
    raise BuilderError("handler is not registered")


class SeedSequence:
    """A thread-safe counter tracking the seed sequence of derived addresses."""

    def __init__(self, value: int = 0) -> None:
        self._lock = threading.Lock()
        self._value = value

    def get(self) -> int:
        with self._lock:
            return self._value

    def set(self, value: int) -> None:
        with self._lock:
            self._value = value

    def advance(self, n: int) -> int:
        """Move the sequence forward by ``n`` and return the new value."""
        with self._lock:
            self._value += n
            return self._value

    def __repr__(self) -> str:
        return f"SeedSequence({self.get()})"


@dataclass
class InstructionBuilderConfig:
    """Authority, identity and sequence settings shared by instruction builders."""

    program_id: Pubkey
    authority: AccountMeta | None = None
    identity: AccountMeta | None = None
    suffix_seed_seq: SeedSequence | None = None
    sequencer: SeedSequence | None = None

    def with_authority(self, authority: Pubkey) -> InstructionBuilderConfig:
        return replace(self, authority=AccountMeta.new(authority, True))

    def with_identity(self, identity: Pubkey) -> InstructionBuilderConfig:
        return replace(self, identity=AccountMeta.new(identity, False))

    def with_sequence(self, sequence: int) -> InstructionBuilderConfig:
        return replace(self, suffix_seed_seq=SeedSequence(sequence))

    def with_sequencer(self, sequencer: SeedSequence) -> InstructionBuilderConfig:
        return replace(self, sequencer=sequencer)


@dataclass(frozen=True)
class GenericTemplate:
    """Describes one program-derived account to be created by an instruction."""

    is_signer: IsSigner = IsSigner.NOT_SIGNER
    access: Access = Access.WRITE
    domain: AddressDomain = AddressDomain.DEFAULT
    suffix: SeedSuffix = field(default_factory=SeedSuffix.sequence)


def sequence_seed_bytes(seq: int) -> bytes:
    """Little-endian bytes of a sequence number with trailing zero bytes dropped."""
    if not 1 <= seq <= _U64_MAX:
        raise ValueError(f"sequence value out of range: {seq}")
    return seq.to_bytes(8, "little").rstrip(b"\0")


def encode_template_instruction_data(data: Iterable[bytes]) -> bytes:
    """Concatenate seeds, each preceded by a one-byte length."""
    out = bytearray()
    for chunk in data:
        chunk = bytes(chunk)
        if len(chunk) >= _MAX_TEMPLATE_DATA_LEN:
            raise BuilderError(
                f"template address data too long: {len(chunk)} bytes "
                f"(limit {_MAX_TEMPLATE_DATA_LEN - 1})"
            )
        out.append(len(chunk))
        out.extend(chunk)
    return bytes(out)