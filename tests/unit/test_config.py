"""
Unit tests for configuration module.
"""

import os
from unittest.mock import patch

import pytest
from pydantic import ValidationError


class TestSettings:
    """Tests for Settings class."""

    def test_settings_loads_from_env(self, mock_settings):
        """Settings should load values from environment variables."""
        assert mock_settings.embedding_model == "test-org/test-model"
        assert mock_settings.chunk_size == 200
        assert mock_settings.embedding_batch_size == 4
        assert mock_settings.retrieval_top_k == 3

    def test_settings_defaults(self):
        """Defaults should match the documented retrieval parameters."""
        with patch.dict(os.environ, {}, clear=True):
            from groundrag.config import Settings

            defaults = Settings(_env_file=None)

        assert defaults.hf_api_key is None
        assert defaults.hf_api_key_value is None
        assert defaults.chunk_size == 500
        assert defaults.embedding_batch_size == 10
        assert defaults.retrieval_top_k == 5
        assert defaults.log_level == "INFO"

    @pytest.mark.parametrize(
        "name,value",
        [
            ("CHUNK_SIZE", "0"),
            ("EMBEDDING_BATCH_SIZE", "0"),
            ("RETRIEVAL_TOP_K", "-1"),
            ("EMBEDDING_TIMEOUT", "0"),
            ("LOG_LEVEL", "VERBOSE"),
        ],
    )
    def test_settings_rejects_invalid_values(self, name, value):
        with patch.dict(os.environ, {name: value}, clear=True):
            from groundrag.config import Settings

            with pytest.raises(ValidationError):
                Settings(_env_file=None)

    def test_settings_log_level_case_insensitive(self):
        with patch.dict(os.environ, {"LOG_LEVEL": "debug"}, clear=True):
            from groundrag.config import Settings

            assert Settings(_env_file=None).log_level == "DEBUG"

    def test_settings_base_url_trailing_slash_stripped(self):
        with patch.dict(os.environ, {"EMBEDDING_BASE_URL": "https://example.test/embed/"}, clear=True):
            from groundrag.config import Settings

            assert Settings(_env_file=None).embedding_base_url == "https://example.test/embed"

    def test_settings_hf_api_key_is_secret(self, mock_settings):
        """API key should be stored as SecretStr."""
        # Direct access should not reveal the value
        assert "test-api-key" not in str(mock_settings.hf_api_key)

        # Explicit method should reveal the value
        assert mock_settings.hf_api_key_value == "test-api-key"

    def test_get_settings_is_cached(self):
        """get_settings should return cached instance."""
        with patch.dict(os.environ, {"HF_API_KEY": "test-key"}):
            from groundrag.config import get_settings

            # Clear cache first
            get_settings.cache_clear()

            settings1 = get_settings()
            settings2 = get_settings()

            assert settings1 is settings2
