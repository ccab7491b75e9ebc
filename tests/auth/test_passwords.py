"""Unit tests for password hashing."""

from brytashop.auth.passwords import hash_password, verify_password


def test_hash_is_not_plaintext_and_verifies():
    hashed = hash_password("hunter22")

    assert hashed != "hunter22"
    assert hashed.startswith("$2")
    assert verify_password("hunter22", hashed)


def test_wrong_password_rejected():
    hashed = hash_password("hunter22")

    assert not verify_password("hunter23", hashed)


def test_unrecognised_hash_rejected():
    assert not verify_password("hunter22", "not-a-bcrypt-hash")
