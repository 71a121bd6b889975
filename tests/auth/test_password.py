"""Tests for password hashing and the length policy."""

import pytest

from audiotour.auth.password import (
    PasswordStrengthError,
    check_needs_rehash,
    hash_password,
    validate_password_strength,
    verify_password,
)


class TestPasswordHashing:
    def test_hash_and_verify(self):
        hashed = hash_password("SecurePass1")
        assert verify_password("SecurePass1", hashed) is True

    def test_wrong_password_rejected(self):
        hashed = hash_password("CorrectPass1")
        assert verify_password("WrongPass1", hashed) is False

    def test_hash_is_argon2id_and_salted(self):
        first = hash_password("SecurePass1")
        second = hash_password("SecurePass1")
        assert first.startswith("$argon2id$")
        assert first != second

    def test_plaintext_never_stored(self):
        assert "SecurePass1" not in hash_password("SecurePass1")

    def test_garbage_hash_does_not_raise(self):
        assert verify_password("SecurePass1", "not-a-hash") is False

    def test_fresh_hash_needs_no_rehash(self):
        assert check_needs_rehash(hash_password("SecurePass1")) is False


class TestPasswordPolicy:
    def test_minimum_length_accepted(self):
        validate_password_strength("abcdef")  # Should not raise

    def test_empty_password_rejected(self):
        with pytest.raises(PasswordStrengthError, match="required"):
            validate_password_strength("")

    def test_short_password_rejected(self):
        with pytest.raises(PasswordStrengthError, match="at least 6"):
            validate_password_strength("abcde")

    def test_long_password_rejected(self):
        with pytest.raises(PasswordStrengthError, match="must not exceed"):
            validate_password_strength("x" * 129)

    def test_no_character_class_rules(self):
        validate_password_strength("alllowercase")
        validate_password_strength("123456")
