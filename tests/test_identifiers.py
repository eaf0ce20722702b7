"""
Tests for reference classification.
"""

import pytest

from shelfwise.resolve.identifiers import (
    BARE_ID,
    LITERAL,
    WRAPPED,
    classify,
    extract_identifier,
    is_identifier,
)

UUID = "27D0D443-4E18-40EF-86EE-6F5E15966FC5"


class TestClassify:

    def test_wrapped_reference_extracts_id(self):
        result = classify(f"x-devonthink-item://{UUID}")
        assert result.kind == WRAPPED
        assert result.id == UUID

    def test_wrapped_reference_ignores_query(self):
        result = classify(f"x-devonthink-item://{UUID}?page=3&reveal=1")
        assert result.kind == WRAPPED
        assert result.id == UUID

    def test_bare_uuid(self):
        result = classify(UUID)
        assert result.kind == BARE_ID
        assert result.id == UUID

    def test_short_hyphenated_token_is_bare_id(self):
        assert classify("ABCD-123").kind == BARE_ID

    @pytest.mark.parametrize("token", [
        "ABCDEFGH",          # no hyphen
        "AB-CD",             # too short
        f"Inbox/{UUID}",     # contains separator
        "Smith, John",       # spaces and comma
        "bad-id",            # six characters
        "",
    ])
    def test_literals(self, token):
        result = classify(token)
        assert result.kind == LITERAL
        assert result.id is None

    @pytest.mark.parametrize("token", [None, 42, ["A-B-C-D-E"], {"id": UUID}])
    def test_never_raises_on_non_strings(self, token):
        assert classify(token).kind == LITERAL

    def test_deterministic(self):
        assert classify(UUID) == classify(UUID)


class TestHelpers:

    def test_is_identifier(self):
        assert is_identifier(UUID)
        assert is_identifier(f"x-devonthink-item://{UUID}")
        assert not is_identifier("Authors/Smith")

    def test_extract_identifier(self):
        assert extract_identifier(f"x-devonthink-item://{UUID}?x=1") == UUID
        assert extract_identifier("Inbox") == "Inbox"
