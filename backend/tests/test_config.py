"""
CanvasKV Gateway: Configuration Tests
======================================

What:  Tests for Settings validation and the startup configuration check.
"""

import pytest
from pydantic import ValidationError

from canvaskv.config import Settings


class TestSettings:

    def test_log_level_normalized(self):
        assert Settings(log_level="debug").log_level == "DEBUG"

    def test_invalid_log_level(self):
        with pytest.raises(ValidationError):
            Settings(log_level="LOUD")

    def test_kv_backend_normalized(self):
        assert Settings(kv_backend=" SQL ").kv_backend == "sql"

    def test_invalid_kv_backend(self):
        with pytest.raises(ValidationError):
            Settings(kv_backend="redis")

    def test_enabled_api_list(self):
        settings = Settings(enabled_apis=" Canvas , kv ,")
        assert settings.enabled_api_list == ["canvas", "kv"]

    def test_unknown_api_set(self):
        with pytest.raises(ValidationError):
            Settings(enabled_apis="kv,admin")

    def test_no_api_sets(self):
        assert Settings(enabled_apis="").enabled_api_list == []


class TestValidateRequiredForProduction:

    def test_complete_memory_config(self):
        Settings(api_token="secret", kv_backend="memory").validate_required_for_production()

    def test_missing_api_token(self):
        with pytest.raises(ValueError, match="API_TOKEN"):
            Settings(api_token="").validate_required_for_production()

    def test_cloudflare_credentials_required(self):
        settings = Settings(api_token="secret", kv_backend="cloudflare", cloudflare_account_id="acc")
        with pytest.raises(ValueError) as exc_info:
            settings.validate_required_for_production()

        message = str(exc_info.value)
        assert "CLOUDFLARE_NAMESPACE_ID" in message
        assert "CLOUDFLARE_API_TOKEN" in message
        assert "CLOUDFLARE_ACCOUNT_ID" not in message
