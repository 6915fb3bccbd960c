import pytest

from ledgerkit.address import (
    AccountMeta,
    AddressDomain,
    AddressError,
    ProgramAddressData,
    Pubkey,
    create_program_address,
    find_program_address,
    is_on_curve,
)

SYSTEM_PROGRAM = "11111111111111111111111111111111"


def test_default_pubkey_is_system_program_string():
    assert str(Pubkey()) == SYSTEM_PROGRAM


def test_from_string_round_trip():
    key = Pubkey.new_unique()
    assert Pubkey.from_string(str(key)) == key


def test_known_key_round_trip():
    text = "SysvarRent111111111111111111111111111111111"
    assert str(Pubkey.from_string(text)) == text


def test_from_string_rejects_bad_character():
    with pytest.raises(AddressError):
        Pubkey.from_string("0OIl")


def test_from_string_rejects_wrong_length():
    with pytest.raises(AddressError):
        Pubkey.from_string("111")


def test_pubkey_rejects_wrong_size():
    with pytest.raises(AddressError):
        Pubkey(b"\x01" * 31)


def test_new_unique_differs():
    assert Pubkey.new_unique().to_bytes() != Pubkey.new_unique().to_bytes()
    assert len(Pubkey.new_unique().to_bytes()) == 32


def test_zero_key_is_on_curve():
    assert is_on_curve(bytes(32)) is True


def test_base_point_is_on_curve():
    base = bytes.fromhex("58" + "66" * 31)
    assert is_on_curve(base) is True


def test_wrong_length_not_on_curve():
    assert is_on_curve(b"\x00" * 5) is False


def test_find_program_address_is_off_curve_and_consistent():
    program = Pubkey.new_unique()
    pda, bump = find_program_address([b"seed", b"\x01"], program)
    assert not is_on_curve(pda)
    assert 1 <= bump <= 255
    assert create_program_address([b"seed", b"\x01", bytes([bump])], program) == pda


def test_find_program_address_depends_on_program_and_seed():
    program = Pubkey(b"\x07" * 32)
    other_program = Pubkey(b"\x08" * 32)
    pda, bump = find_program_address([b"a"], program)
    assert create_program_address([b"a", bytes([bump])], program) == pda
    assert find_program_address([b"a"], other_program)[0] != pda
    assert find_program_address([b"b"], program)[0] != pda


def test_create_program_address_rejects_long_seed():
    with pytest.raises(AddressError):
        create_program_address([b"x" * 33], Pubkey())


def test_create_program_address_rejects_too_many_seeds():
    with pytest.raises(AddressError):
        create_program_address([b"x"] * 17, Pubkey())


def test_find_program_address_rejects_too_many_seeds():
    with pytest.raises(AddressError):
        find_program_address([b"x"] * 16, Pubkey())


def test_account_meta_constructors():
    key = Pubkey.new_unique()
    writable = AccountMeta.new(key, True)
    readonly = AccountMeta.new_readonly(key, False)
    assert (writable.pubkey, writable.is_signer, writable.is_writable) == (key, True, True)
    assert (readonly.is_signer, readonly.is_writable) == (False, False)


def test_domain_none_is_empty():
    assert AddressDomain.NONE.get_seed(None, None) == b""


def test_domain_default_prefers_identity():
    authority = AccountMeta.new(Pubkey.new_unique(), True)
    identity = AccountMeta.new(Pubkey.new_unique(), False)
    assert AddressDomain.DEFAULT.get_seed(authority, identity) == identity.pubkey.to_bytes()
    assert AddressDomain.DEFAULT.get_seed(authority, None) == authority.pubkey.to_bytes()


def test_domain_default_requires_an_account():
    with pytest.raises(AddressError):
        AddressDomain.DEFAULT.get_seed(None, None)


def test_domain_authority():
    authority = AccountMeta.new(Pubkey.new_unique(), True)
    assert AddressDomain.AUTHORITY.get_seed(authority, None) == authority.pubkey.to_bytes()
    with pytest.raises(AddressError):
        AddressDomain.AUTHORITY.get_seed(None, authority)


def test_domain_identity_resolves_through_authority():
    authority = AccountMeta.new(Pubkey.new_unique(), True)
    identity = AccountMeta.new(Pubkey.new_unique(), False)
    assert AddressDomain.IDENTITY.get_seed(authority, identity) == authority.pubkey.to_bytes()
    with pytest.raises(AddressError):
        AddressDomain.IDENTITY.get_seed(None, identity)


def test_program_address_data_reads_prefixed_seed():
    pad, used = ProgramAddressData.try_from(b"\x03abcrest")
    assert pad.seed == b"abc"
    assert used == 4


def test_program_address_data_empty_seed():
    pad, used = ProgramAddressData.try_from(b"\x00")
    assert (pad.seed, used) == (b"", 1)


def test_program_address_data_rejects_empty_buffer():
    with pytest.raises(AddressError):
        ProgramAddressData.try_from(b"")


def test_program_address_data_rejects_short_buffer():
    with pytest.raises(AddressError):
        ProgramAddressData.try_from(b"\x05ab")