"""Tests for CredentialService."""

import re

from services.credential_service import (
    CASE_CODE_LETTERS,
    SECRET_ALPHABET,
    CredentialService,
)

CASE_CODE_RE = re.compile(r"^WH-\d{3}-[A-HJ-NP-Z]{3}$")


class TestCaseCode:
    """Case code generation."""

    def test_format(self):
        for _ in range(500):
            assert CASE_CODE_RE.match(CredentialService.generate_case_code())

    def test_number_range(self):
        numbers = {
            int(CredentialService.generate_case_code()[3:6]) for _ in range(500)
        }
        assert min(numbers) >= 100
        assert max(numbers) <= 999

    def test_letters_exclude_i_and_o(self):
        assert "I" not in CASE_CODE_LETTERS
        assert "O" not in CASE_CODE_LETTERS
        for _ in range(500):
            letters = CredentialService.generate_case_code()[-3:]
            assert not set(letters) & {"I", "O"}


class TestSecret:
    """Access secret generation."""

    def test_default_length(self):
        assert len(CredentialService.generate_secret()) == 12

    def test_custom_length(self):
        assert len(CredentialService.generate_secret(20)) == 20

    def test_alphabet_has_no_ambiguous_characters(self):
        for ambiguous in "0O1lI":
            assert ambiguous not in SECRET_ALPHABET

    def test_only_alphabet_characters(self):
        for _ in range(200):
            assert set(CredentialService.generate_secret()) <= set(SECRET_ALPHABET)

    def test_secrets_differ(self):
        secrets = {CredentialService.generate_secret() for _ in range(10_000)}
        assert len(secrets) == 10_000


def test_issue_returns_matching_formats():
    credentials = CredentialService.issue()

    assert CASE_CODE_RE.match(credentials.case_code)
    assert len(credentials.secret) == 12
