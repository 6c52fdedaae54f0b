"""Tests for project API key helpers."""

import re

import pytest

from vibeship.core.security.api_keys import extract_bearer_token, generate_api_key, mask_api_key


@pytest.mark.unit
class TestApiKeys:
    """Test cases for key generation, masking and header parsing."""

    def test_generate_api_key_format(self):
        key = generate_api_key()
        assert re.fullmatch(r"vs_[0-9a-f]{32}", key)

    def test_generated_keys_are_unique(self):
        assert len({generate_api_key() for _ in range(50)}) == 50

    def test_mask_api_key(self):
        """Test only the first six characters stay visible."""
        masked = mask_api_key("vs_0123456789abcdef0123456789abcdef")
        assert masked == "vs_012••••••"
        assert "789abcdef" not in masked

    def test_mask_short_key_unchanged(self):
        assert mask_api_key("vs_1234") == "vs_1234"

    def test_extract_bearer_token(self):
        assert extract_bearer_token("Bearer vs_abc") == "vs_abc"

    @pytest.mark.parametrize("header", [None, "", "vs_abc", "Basic dXNlcjpwYXNz", "bearer vs_abc"])
    def test_extract_bearer_token_invalid(self, header):
        assert extract_bearer_token(header) is None
