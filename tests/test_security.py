import base64

import pytest

from errors import Forbidden, Unauthorized
from security import (
    MASKED,
    CardCipher,
    Identity,
    Role,
    create_token,
    decode_token,
    derive_key,
    hash_password,
    require_role,
    verify_password,
)
from settings import Settings


def test_derive_key_from_base64():
    raw = bytes(range(32))
    key, source = derive_key(base64.b64encode(raw).decode())
    assert (key, source) == (raw, "base64")


def test_derive_key_from_hex():
    raw = bytes(range(32, 64))
    key, source = derive_key(raw.hex())
    assert (key, source) == (raw, "hex")


def test_derive_key_from_plain_string():
    key, source = derive_key("12345678901234567890123456789012")
    assert source == "raw"
    assert key == b"12345678901234567890123456789012"

    key, source = derive_key("short")
    assert source == "raw"
    assert key == b"short" + b"0" * 27


def test_cipher_round_trip():
    cipher = CardCipher.from_secret("12345678901234567890123456789012")
    token = cipher.encrypt("4111111111111111")
    assert token != cipher.encrypt("4111111111111111")
    assert cipher.decrypt(token) == "4111111111111111"
    assert cipher.last4(token) == "1111"


def test_cipher_masks_garbage():
    cipher = CardCipher(b"k" * 32)
    assert cipher.last4("nothex:zz") == MASKED
    assert cipher.last4("") == MASKED


def test_cipher_rejects_short_key():
    with pytest.raises(ValueError):
        CardCipher(b"short")


def test_token_round_trip():
    settings = Settings(jwt_secret="unit-test-secret-0123456789abcdef")
    identity = Identity(id=7, email="a@b.com", role=Role.ADMIN, name="Ada")
    assert decode_token(create_token(identity, settings), settings) == identity


def test_tampered_token():
    settings = Settings(jwt_secret="unit-test-secret-0123456789abcdef")
    token = create_token(Identity(id=7, email="a@b.com", role=Role.CUSTOMER, name="Ada"), settings)
    with pytest.raises(Unauthorized):
        decode_token(token + "x", settings)


def test_require_role():
    customer = Identity(id=1, email="c@d.com", role=Role.CUSTOMER, name="C")
    assert require_role(customer, Role.CUSTOMER) is customer
    with pytest.raises(Forbidden):
        require_role(customer, Role.ADMIN)


def test_password_hashing():
    hashed = hash_password("admin123")
    assert hashed != "admin123"
    assert verify_password("admin123", hashed)
    assert not verify_password("admin124", hashed)
    assert not verify_password("admin123", "not-a-hash")
