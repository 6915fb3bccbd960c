# ledgerkit

A library for working with program accounts and structured program
instructions on the client side.

## Modules

- `ledgerkit.address`: `Pubkey` (32 bytes, shown in base58, with
  `from_string`, `new_unique` and `to_bytes`), `AccountMeta` (`new` for
  writable, `new_readonly`), `is_on_curve`, `create_program_address` and
  `find_program_address` (searches bump seeds from 255 down),
  `AddressDomain` for choosing which account key prefixes a derived address's
  seeds, and `ProgramAddressData.try_from` for reading one length-prefixed
  seed from instruction data. Errors are raised as `AddressError`.
- `ledgerkit.accounts`: `AccountData` (an account held in memory, with a
  data buffer and a declared data length; `clone_for_program` adds padding
  room, `clone_for_storage` trims to the declared length), `AccountDataStore`
  with a compact binary encoding (`to_bytes` / `from_bytes`), and the
  `AccountType`, `IsSigner`, `Access` and `SeedSuffix` types.
- `ledgerkit.descriptors`: `AccountDescriptor`, a summary of an account
  whose `info()` gives one display line with container type, space and SOL
  balance (coloured when writing to a terminal, unless `NO_COLOR` is set);
  `AccountDescriptorList` with `lines()` and `to_log()`;
  `minimum_balance` for the rent-exempt balance; and
  `AccountDataReference`, a lock-guarded handle to one account's data.
  Container type names shown by `info()` come from the
  `AccountDescriptor.container_names` mapping, which starts empty.
- `ledgerkit.cache`: `Cache`, a least-recently-used cache of account
  references keyed by public key and weighed by data length (64 MiB by
  default), with `lookup`, `store` and `purge`.
- `ledgerkit.templates`: `InstructionBuilderConfig`, `SeedSequence`,
  `GenericTemplate`, `Gather`, `BuilderError`, `find_interface_id`,
  `sequence_seed_bytes` and `encode_template_instruction_data`.
- `ledgerkit.builder`: `InstructionBuilder`, which collects accounts,
  template descriptors and handler data; `seal()` derives the template
  account addresses, advances the sequencer and encodes the seed data.
  `accounts()` and `instruction_data()` give the results;
  `gather_accounts()` lists the non-system account keys.
- `ledgerkit.dispatch`: `Interface` (ordered handlers, a handler's position
  is its id), `Program` (ordered interfaces) and `Client`, whose
  `execution_context_for(handler)` returns an `InstructionBuilder` addressed
  to that handler. Resolution failures raise `DispatchError`.

## Installation

```
pip install ledgerkit
```

## Example

```python
from ledgerkit.address import Pubkey
from ledgerkit.templates import InstructionBuilderConfig, SeedSequence
from ledgerkit.builder import InstructionBuilder

program_id = Pubkey.new_unique()
authority = Pubkey.new_unique()

config = (
    InstructionBuilderConfig(program_id)
    .with_authority(authority)
    .with_sequencer(SeedSequence())
)

builder = (
    InstructionBuilder.from_config(config, 0, 1)
    .with_account_templates(2)
    .with_instruction_data(b"\x01\x02")
    .seal()
)

accounts = builder.accounts()
data = builder.instruction_data()
```

## What it does not do

The package builds and routes instructions but does not send them anywhere:
there is no network transport, no signing of transactions and no connection
to a ledger. `InstructionBuilder.seal()` produces the template seed data and
account list, but no payload header is prepended to the instruction data.
Account data is not parsed into typed containers or segments, and collection
accounts are added to a builder only as ready-made account metas and bumps.

## Running the tests

```
pip install -e ".[test]"
pytest
```