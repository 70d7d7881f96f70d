"""Tests for argon2 password hashing and random tokens."""

import pytest

from wren.security import hash_password, needs_rehash, unique_token, verify_password


class TestHashing:
    def test_roundtrip(self) -> None:
        hashed = hash_password("correct horse")
        assert hashed.startswith("$argon2id$")
        assert verify_password("correct horse", hashed)
        assert not verify_password("wrong horse", hashed)

    def test_salted(self) -> None:
        assert hash_password("same") != hash_password("same")

    def test_empty_password_rejected(self) -> None:
        with pytest.raises(ValueError):
            hash_password("")

    def test_empty_inputs_never_verify(self) -> None:
        hashed = hash_password("pw")
        assert not verify_password("", hashed)
        assert not verify_password("pw", "")

    def test_malformed_hash(self) -> None:
        assert not verify_password("pw", "not-a-hash")

    def test_fresh_hash_needs_no_rehash(self) -> None:
        assert not needs_rehash(hash_password("pw"))


class TestUniqueToken:
    def test_length(self) -> None:
        assert len(unique_token()) == 64
        assert len(unique_token(8)) == 16

    def test_random(self) -> None:
        assert unique_token() != unique_token()
