"""
Unit tests for the temporary password generator.
"""

import pytest

from admissions.modules.applications.credentials import (
    ALL_CHARACTERS,
    DIGITS,
    LOWERCASE,
    SYMBOLS,
    TEMPORARY_PASSWORD_LENGTH,
    UPPERCASE,
    generate_temporary_password,
)


class TestGenerateTemporaryPassword:
    def test_every_password_has_each_character_class(self):
        for _ in range(1000):
            password = generate_temporary_password()

            assert len(password) == TEMPORARY_PASSWORD_LENGTH
            assert any(c in UPPERCASE for c in password)
            assert any(c in LOWERCASE for c in password)
            assert any(c in DIGITS for c in password)
            assert any(c in SYMBOLS for c in password)
            assert all(c in ALL_CHARACTERS for c in password)

    def test_no_look_alike_characters(self):
        for ambiguous in "IOl01":
            assert ambiguous not in ALL_CHARACTERS

    def test_custom_length(self):
        assert len(generate_temporary_password(16)) == 16
        assert len(generate_temporary_password(4)) == 4

    def test_too_short_length_raises(self):
        with pytest.raises(ValueError):
            generate_temporary_password(3)

    def test_passwords_differ(self):
        passwords = {generate_temporary_password() for _ in range(50)}

        assert len(passwords) > 1
