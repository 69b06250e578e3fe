"""Tests for configuration validation."""

import pytest

from pdf_chat.config import Settings, validate_required_settings
from pdf_chat.exceptions import ConfigurationError


@pytest.mark.unit
def test_defaults_match_pipeline_constants():
    config = Settings(_env_file=None, google_api_key="key")

    assert config.chunk_size == 1000
    assert config.chunk_overlap == 200
    assert config.index_batch_size == 100
    assert config.preview_length == 150


@pytest.mark.unit
def test_missing_google_key_is_configuration_error():
    config = Settings(_env_file=None, google_api_key="", vector_store="memory")

    with pytest.raises(ConfigurationError) as exc_info:
        validate_required_settings(config)

    assert exc_info.value.missing == ["GOOGLE_API_KEY"]
    assert "GOOGLE_API_KEY" in exc_info.value.message


@pytest.mark.unit
def test_memory_mode_needs_only_google_key():
    config = Settings(_env_file=None, google_api_key="key", vector_store="memory", qdrant_url="")

    validate_required_settings(config)


@pytest.mark.unit
def test_qdrant_mode_reports_every_missing_variable():
    config = Settings(
        _env_file=None,
        google_api_key="",
        vector_store="qdrant",
        qdrant_url="",
        qdrant_api_key="",
        qdrant_collection="",
    )

    with pytest.raises(ConfigurationError) as exc_info:
        validate_required_settings(config)

    assert exc_info.value.missing == [
        "GOOGLE_API_KEY",
        "QDRANT_URL",
        "QDRANT_API_KEY",
        "QDRANT_COLLECTION",
    ]


@pytest.mark.unit
def test_qdrant_mode_with_credentials_is_valid():
    config = Settings(
        _env_file=None,
        google_api_key="key",
        vector_store="qdrant",
        qdrant_url="https://qdrant.example.com",
        qdrant_api_key="secret",
        qdrant_collection="pdf-chat",
    )

    validate_required_settings(config)
