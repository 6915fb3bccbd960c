"""Assembly of structured program instructions with derived template accounts."""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterable

from .accounts import Access, IsSigner, SeedSuffix
from .address import AccountMeta, AddressDomain, Pubkey, find_program_address
from .templates import (
    BuilderError,
    Gather,
    GenericTemplate,
    InstructionBuilderConfig,
    SeedSequence,
    encode_template_instruction_data,
    sequence_seed_bytes,
)

__all__ = ["SYSTEM_PROGRAM_ID", "InstructionBuilder"]

logger = logging.getLogger(__name__)

SYSTEM_PROGRAM_ID = Pubkey(bytes(32))

_U16_MAX = 0xFFFF


def _as_u16(value, what: str) -> int:
    number = int(value)
    if not 0 <= number <= _U16_MAX:
        raise ValueError(f"{what} out of range: {number}")
    return number


class InstructionBuilder:
    """Collects accounts, template descriptors and data for one program instruction.

    The ``with_*`` methods modify the builder and return it, so calls chain.
    Template accounts are resolved into derived addresses by :meth:`seal`.
    """

    def __init__(self, program_id: Pubkey, interface_id: int = 0, handler_id: int = 0) -> None:
        self._lock = threading.RLock()
        self.program_id = program_id
        self.interface_id = _as_u16(interface_id, "interface id")
        self.handler_id = _as_u16(handler_id, "handler id")
        self.authority: AccountMeta | None = None
        self.identity: AccountMeta | None = None

        self._system_accounts: list[AccountMeta] = []
        self._token_accounts: list[AccountMeta] = []
        self._index_accounts: list[AccountMeta] = []
        self._collection_accounts: list[AccountMeta] = []
        self._handler_accounts: list[AccountMeta] = []
        self._handler_instruction_data = bytearray()

        self._generic_template_accounts: list[AccountMeta] = []
        self._generic_template_address_data: list[bytes] = []
        self._generic_template_instruction_data = b""

        self._collection_template_accounts: list[AccountMeta] = []
        self._collection_template_address_data: list[bytes] = []
        self._collection_template_instruction_data = b""

        self._sealed = False
        self._suffix_seed_seq = 0
        self._sequencer: SeedSequence | None = None
        self._generic_descriptors: list[GenericTemplate] = []
        self._collection_descriptors: list[tuple[AccountMeta, int]] = []
        self._tracked_seq: SeedSequence | None = None

    @classmethod
    def from_config(
        cls, config: InstructionBuilderConfig, interface_id: int = 0, handler_id: int = 0
    ) -> InstructionBuilder:
        """A builder taking authority, identity and seed sequence from ``config``."""
        builder = cls(config.program_id, interface_id, handler_id)
        builder.authority = config.authority
        builder.identity = config.identity
        builder._tracked_seq = config.suffix_seed_seq
        if config.suffix_seed_seq is not None:
            builder._suffix_seed_seq = config.suffix_seed_seq.get()
        builder._sequencer = config.sequencer
        return builder

    def is_sealed(self) -> bool:
        with self._lock:
            return self._sealed

    def identity_pubkey(self) -> Pubkey | None:
        with self._lock:
            return self.identity.pubkey if self.identity is not None else None

    def sequence(self) -> int:
        with self._lock:
            return self._suffix_seed_seq

    def generic_template_accounts(self) -> list[AccountMeta]:
        with self._lock:
            return list(self._generic_template_accounts)

    def collection_template_accounts(self) -> list[AccountMeta]:
        with self._lock:
            return list(self._collection_template_accounts)

    def _extend(self, target: list[AccountMeta], accounts: Iterable[AccountMeta]) -> InstructionBuilder:
        with self._lock:
            target.extend(accounts)
        return self

    def with_system_program_account(self) -> InstructionBuilder:
        return self._extend(self._system_accounts, [AccountMeta.new(SYSTEM_PROGRAM_ID, False)])

    def with_system_accounts(self, accounts: Iterable[AccountMeta]) -> InstructionBuilder:
        return self._extend(self._system_accounts, accounts)

    def with_token_accounts(self, accounts: Iterable[AccountMeta]) -> InstructionBuilder:
        return self._extend(self._token_accounts, accounts)

    def with_index_accounts(self, accounts: Iterable[AccountMeta]) -> InstructionBuilder:
        return self._extend(self._index_accounts, accounts)

    def with_collection_accounts(self, accounts: Iterable[AccountMeta]) -> InstructionBuilder:
        return self._extend(self._collection_accounts, accounts)

    def with_handler_accounts(self, accounts: Iterable[AccountMeta]) -> InstructionBuilder:
        return self._extend(self._handler_accounts, accounts)

    def with_instruction_data(self, data: bytes) -> InstructionBuilder:
        with self._lock:
            self._handler_instruction_data.extend(bytes(data))
        return self

    def with_authority(self, authority: Pubkey) -> InstructionBuilder:
        with self._lock:
            self.authority = AccountMeta.new(authority, True)
        return self

    def with_identity(self, identity: Pubkey) -> InstructionBuilder:
        with self._lock:
            self.identity = AccountMeta.new(identity, False)
        return self

    def with_sequencer(self, sequencer: SeedSequence) -> InstructionBuilder:
        with self._lock:
            self._suffix_seed_seq = sequencer.get()
            self._sequencer = sequencer
        return self

    def with_sequence(self, seq: int) -> InstructionBuilder:
        with self._lock:
            if self._tracked_seq is not None:
                raise BuilderError("seed sequence is tracked by the builder config")
            self._suffix_seed_seq = seq
        return self

    def _add_templates(self, templates: Iterable[GenericTemplate]) -> InstructionBuilder:
        with self._lock:
            self._generic_descriptors.extend(templates)
        return self

    def with_account_templates(self, n: int) -> InstructionBuilder:
        return self._add_templates(GenericTemplate() for _ in range(n))

    def with_account_templates_with_custom_suffixes(self, suffixes: Iterable[bytes]) -> InstructionBuilder:
        return self._add_templates(
            GenericTemplate(suffix=SeedSuffix.custom(suffix)) for suffix in suffixes
        )

    def with_account_templates_with_seeds(
        self, seeds: Iterable[tuple[AddressDomain, bytes]]
    ) -> InstructionBuilder:
        return self._add_templates(
            GenericTemplate(domain=domain, suffix=SeedSuffix.custom(suffix))
            for domain, suffix in seeds
        )

    def with_account_templates_with_custom_suffixes_prefixed(
        self, prefix: bytes, suffixes: Iterable[bytes]
    ) -> InstructionBuilder:
        prefix = bytes(prefix)
        return self._add_templates(
            GenericTemplate(suffix=SeedSuffix.custom(prefix + bytes(suffix))) for suffix in suffixes
        )

    def with_custom_account_templates_and_seeds(self, templates: Iterable) -> InstructionBuilder:
        """Add templates given as :class:`GenericTemplate` or (signer, access, domain, suffix) tuples."""
        return self._add_templates(
            t if isinstance(t, GenericTemplate) else GenericTemplate(*t) for t in templates
        )

    def with_collection_template_accounts(
        self, descriptors: Iterable[tuple[AccountMeta, int]]
    ) -> InstructionBuilder:
        """Add collection accounts to be created, each with its address bump."""
        with self._lock:
            for meta, bump in descriptors:
                if not 0 <= bump <= 0xFF:
                    raise BuilderError(f"bump seed out of range: {bump}")
                self._collection_descriptors.append((meta, bump))
        return self

    def instruction_data(self) -> bytes:
        """Template seed data followed by the handler's own data."""
        with self._lock:
            return (
                self._generic_template_instruction_data
                + self._collection_template_instruction_data
                + bytes(self._handler_instruction_data)
            )

    def accounts(self) -> list[AccountMeta]:
        """All accounts of the instruction in their wire order."""
        with self._lock:
            result: list[AccountMeta] = []
            if self.authority is not None:
                result.append(self.authority)
            if self.identity is not None:
                if self.authority is None:
                    raise BuilderError("missing authority - required when using identity")
                result.append(self.identity)
            result.extend(self._system_accounts)
            result.extend(self._token_accounts)
            result.extend(self._index_accounts)
            result.extend(self._collection_accounts)
            result.extend(self._generic_template_accounts)
            result.extend(self._collection_template_accounts)
            result.extend(self._handler_accounts)
            return result

    def _suffix_bytes(self, suffix: SeedSuffix) -> bytes:
        if suffix.kind == "blank":
            return b""
        if suffix.kind == "sequence":
            self._suffix_seed_seq += 1
            return sequence_seed_bytes(self._suffix_seed_seq)
        return suffix.value

    def seal(self) -> InstructionBuilder:
        """Resolve templates into derived accounts and encode their seed data."""
        with self._lock:
            if self._sealed:
                raise BuilderError("seal() has already been invoked")
            self._sealed = True

            if self._generic_descriptors:
                if self._sequencer is not None:
                    self._sequencer.advance(len(self._generic_descriptors))
                else:
                    logger.warning("InstructionBuilder.seal(): missing sequencer")
            elif not self._collection_descriptors:
                return self

            if not any(meta.pubkey == SYSTEM_PROGRAM_ID for meta in self._system_accounts):
                self._system_accounts.insert(0, AccountMeta.new(SYSTEM_PROGRAM_ID, False))

            for template in self._generic_descriptors:
                domain_seed = template.domain.get_seed(self.authority, self.identity)
                suffix = self._suffix_bytes(template.suffix)
                pda, bump = find_program_address([domain_seed, suffix], self.program_id)
                is_signer = bool(template.is_signer)
                if template.access is Access.WRITE:
                    meta = AccountMeta.new(pda, is_signer)
                else:
                    meta = AccountMeta.new_readonly(pda, is_signer)
                self._generic_template_accounts.append(meta)
                self._generic_template_address_data.append(suffix + bytes([bump]))

            for meta, bump in self._collection_descriptors:
                self._collection_template_accounts.append(meta)
                self._collection_template_address_data.append(bytes([bump]))

            self._generic_template_instruction_data = encode_template_instruction_data(
                self._generic_template_address_data
            )
            self._collection_template_instruction_data = encode_template_instruction_data(
                self._collection_template_address_data
            )

            if self._tracked_seq is not None:
                self._tracked_seq.set(self._suffix_seed_seq)
        return self

    def gather_accounts(self, gather: Gather | None = None, first: Pubkey | None = None) -> list[Pubkey]:
        """Keys of the non-system accounts, optionally with signers and a chosen first key."""
        with self._lock:
            metas: list[AccountMeta] = [
                *self._generic_template_accounts,
                *self._token_accounts,
                *self._index_accounts,
                *self._collection_accounts,
                *self._collection_template_accounts,
                *self._handler_accounts,
            ]
            if gather in (Gather.AUTHORITY, Gather.ALL) and self.authority is not None:
                metas.append(self.authority)
            if gather in (Gather.IDENTITY, Gather.ALL) and self.identity is not None:
                metas.append(self.identity)

        keys = [meta.pubkey for meta in metas]
        if first is not None:
            try:
                keys.remove(first)
            except ValueError:
                raise BuilderError(f"account {first} is not among the gathered accounts") from None
            keys.insert(0, first)
        return keys

    def __repr__(self) -> str:
        return (
            f"InstructionBuilder(program_id={self.program_id}, interface_id={self.interface_id}, "
            f"handler_id={self.handler_id}, sealed={self.is_sealed()})"
        )