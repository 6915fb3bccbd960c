import pytest

from ledgerkit.accounts import (
    ACCOUNT_DATA_PADDING,
    ACCOUNT_DATA_TEMPLATE_SIZE,
    AccountData,
    AccountDataStore,
    AccountType,
    SeedSuffix,
)
from ledgerkit.address import Pubkey


def _store(data=b"hello", executable=True):
    return AccountDataStore(
        data_type=AccountType.CONTAINER,
        key=Pubkey.new_unique(),
        owner=Pubkey.new_unique(),
        lamports=5000,
        data=data,
        rent_epoch=7,
        executable=executable,
    )


def test_seed_suffix_variants():
    assert SeedSuffix.blank().kind == "blank"
    assert SeedSuffix.sequence().kind == "sequence"
    custom = SeedSuffix.custom(b"abc")
    assert (custom.kind, custom.value) == ("custom", b"abc")


def test_new_static_is_empty():
    account = AccountData.new_static(Pubkey(), Pubkey())
    assert account.data_len() == 0
    assert account.available_data_len() == 0
    assert account.data_type is AccountType.CONTAINER


def test_default_account_matches_new_static():
    assert AccountData() == AccountData.new_static(Pubkey(), Pubkey())


def test_new_static_with_size():
    account = AccountData.new_static_with_size(Pubkey(), Pubkey(), 16)
    assert account.data_len() == 16
    assert bytes(account.payload()) == bytes(16)


def test_new_static_with_args():
    key, owner = Pubkey.new_unique(), Pubkey.new_unique()
    account = AccountData.new_static_with_args(key, owner, 42, b"\x01\x02\x03", 9)
    assert account.data_len() == 3
    assert bytes(account.payload()) == b"\x01\x02\x03"
    assert (account.key, account.owner, account.lamports, account.rent_epoch) == (key, owner, 42, 9)


def test_allocated_for_program_has_padding():
    account = AccountData.new_allocated_for_program(Pubkey(), Pubkey(), 10)
    assert account.data_len() == 10
    assert account.available_data_len() == 10 + ACCOUNT_DATA_PADDING


def test_template_for_program_size():
    account = AccountData.new_template_for_program(Pubkey(), Pubkey())
    assert account.data_len() == ACCOUNT_DATA_TEMPLATE_SIZE


def test_container_type_needs_four_bytes():
    account = AccountData.new_static_with_args(Pubkey(), Pubkey(), 0, b"\x01\x02\x03", 0)
    assert account.container_type() is None


def test_container_type_reads_little_endian():
    value = 0x01020304
    src = value.to_bytes(4, "little") + b"\xff"
    account = AccountData.new_static_with_args(Pubkey(), Pubkey(), 0, src, 0)
    assert account.container_type() == value


def test_payload_is_writable():
    account = AccountData.new_static_with_size(Pubkey(), Pubkey(), 4)
    account.payload()[0] = 9
    assert account.data[0] == 9


def test_with_lamports_returns_updated_copy():
    account = AccountData.new_static(Pubkey(), Pubkey())
    updated = account.with_lamports(123)
    assert updated.lamports == 123
    assert account.lamports == 0


def test_clone_for_program_and_storage():
    account = AccountData.new_allocated_for_program(Pubkey(), Pubkey(), 4)
    account.payload()[:4] = b"abcd"
    account.is_signer = True
    program = account.clone_for_program()
    storage = program.clone_for_storage()
    assert program.available_data_len() == 4 + ACCOUNT_DATA_PADDING
    assert bytes(program.payload()[:4]) == b"abcd"
    assert storage.available_data_len() == 4
    assert bytes(storage.payload()) == b"abcd"
    assert storage.is_signer is True
    program.payload()[0] = 0
    assert account.data[0] == ord("a")


def test_clone_resets_data_type():
    account = AccountData.new_static_with_size(Pubkey(), Pubkey(), 2)
    account.data_type = AccountType.SPL_TOKEN
    assert account.clone_for_storage().data_type is AccountType.CONTAINER


def test_store_round_trip_through_account_data():
    store = _store()
    account = AccountData.from_store(store)
    assert account.data_len() == len(store.data)
    assert account.is_signer is False and account.is_writable is False
    assert account.to_store() == store


def test_to_store_keeps_whole_buffer():
    account = AccountData.new_allocated_for_program(Pubkey(), Pubkey(), 2)
    assert len(account.to_store().data) == account.available_data_len()


def test_store_bytes_round_trip():
    store = _store()
    assert AccountDataStore.from_bytes(store.to_bytes()) == store


def test_store_bytes_layout():
    store = _store(b"xyz", executable=False)
    raw = store.to_bytes()
    assert raw[0] == int(AccountType.CONTAINER)
    assert raw[1:33] == store.key.to_bytes()
    assert raw[33:65] == store.owner.to_bytes()
    assert raw[65:73] == store.lamports.to_bytes(8, "little")
    assert raw[73:77] == len(store.data).to_bytes(4, "little")
    assert raw[77:80] == b"xyz"
    assert raw[80:88] == store.rent_epoch.to_bytes(8, "little")
    assert raw[88:] == b"\x00"


def test_store_from_bytes_rejects_truncated():
    raw = _store().to_bytes()
    with pytest.raises(ValueError):
        AccountDataStore.from_bytes(raw[:-1])


def test_store_from_bytes_rejects_trailing():
    raw = _store().to_bytes()
    with pytest.raises(ValueError):
        AccountDataStore.from_bytes(raw + b"\x00")


def test_store_from_bytes_rejects_unknown_type():
    raw = bytearray(_store().to_bytes())
    raw[0] = 99
    with pytest.raises(ValueError):
        AccountDataStore.from_bytes(bytes(raw))


def test_store_from_bytes_rejects_bad_bool():
    raw = bytearray(_store().to_bytes())
    raw[-1] = 2
    with pytest.raises(ValueError):
        AccountDataStore.from_bytes(bytes(raw))