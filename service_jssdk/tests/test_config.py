"""
Tests for JSSDK engine options.
"""

import pytest
from unittest.mock import patch

from service_jssdk.app.config import (
    NONCE_STR_MAX,
    JSSDKOptions,
    PersistenceMode,
    load_options,
    options_from_config,
)
from service_jssdk.app.jssdk import JSSDK
from shared.config import get_config
from shared.errors import ConfigurationError
from service_jssdk.app.testing import APP_ID, SECRET


class TestLoadOptions:
    """Validation performed once at construction."""

    def test_defaults(self):
        """Test defaults for a minimal configuration."""
        options = load_options({"appId": APP_ID, "secret": SECRET})

        assert options.app_id == APP_ID
        assert options.corp is False
        assert options.nonce_str_length == 16
        assert options.type is PersistenceMode.MEMORY
        assert options.redis_host == "127.0.0.1"
        assert options.redis_port == 6379
        assert options.cache is True
        assert options.debug is False

    @pytest.mark.parametrize("raw", [
        {"secret": SECRET},
        {"appId": APP_ID},
        {"appId": "", "secret": SECRET},
        {"appId": APP_ID, "secret": ""},
    ])
    def test_identity_required(self, raw):
        """Test that appId and secret are mandatory."""
        with pytest.raises(ConfigurationError):
            load_options(raw)

    def test_file_mode_requires_both_filenames(self, tmp_path):
        """Test that file persistence needs a path per credential kind."""
        with pytest.raises(ConfigurationError) as excinfo:
            load_options({
                "appId": APP_ID,
                "secret": SECRET,
                "type": "file",
                "tokenFilename": str(tmp_path / "token.json"),
            })

        assert "tokenFilename and ticketFilename" in excinfo.value.message

    def test_redis_mode_requires_host_and_port(self):
        """Test that redis persistence needs connection parameters."""
        with pytest.raises(ConfigurationError):
            load_options({"appId": APP_ID, "secret": SECRET, "type": "redis", "redisHost": ""})
        with pytest.raises(ConfigurationError):
            load_options({"appId": APP_ID, "secret": SECRET, "type": "redis", "redisPort": None})

    @pytest.mark.parametrize("label", [None, "", "none", "mem", "memory", "MEMORY"])
    def test_memory_aliases(self, label):
        """Test that legacy memory labels normalize to one mode."""
        options = load_options({"appId": APP_ID, "secret": SECRET, "type": label})
        assert options.type is PersistenceMode.MEMORY

    def test_unknown_persistence_type(self):
        """Test that unknown persistence labels are rejected."""
        with pytest.raises(ConfigurationError):
            load_options({"appId": APP_ID, "secret": SECRET, "type": "memcached"})

    def test_memory_mode_forces_cache(self):
        """Test that memory persistence always enables the process cache."""
        options = load_options({"appId": APP_ID, "secret": SECRET, "type": "none", "cache": False})
        assert options.cache is True

    def test_file_mode_keeps_cache_setting(self, tmp_path):
        """Test that other modes honor the cache flag."""
        options = load_options({
            "appId": APP_ID,
            "secret": SECRET,
            "type": "file",
            "tokenFilename": str(tmp_path / "token.json"),
            "ticketFilename": str(tmp_path / "ticket.json"),
            "cache": False,
        })
        assert options.type is PersistenceMode.FILE
        assert options.cache is False

    @pytest.mark.parametrize("raw,expected", [
        (None, 16),
        (0, 16),
        (8, 8),
        (32, 32),
        (64, NONCE_STR_MAX),
        (-5, 1),
    ])
    def test_nonce_length_clamped(self, raw, expected):
        """Test that nonce length is clamped to [1, 32]."""
        options = load_options({"appId": APP_ID, "secret": SECRET, "nonceStrLength": raw})
        assert options.nonce_str_length == expected

    def test_snake_case_names_accepted(self):
        """Test that attribute names work as well as wire names."""
        options = load_options(app_id=APP_ID, secret=SECRET, corp=True)
        assert options.app_id == APP_ID
        assert options.corp is True

    def test_overrides_applied_to_existing_options(self):
        """Test deriving options from an existing instance."""
        base = load_options({"appId": APP_ID, "secret": SECRET})
        derived = load_options(base, nonce_str_length=24)

        assert derived.nonce_str_length == 24
        assert base.nonce_str_length == 16

    def test_options_are_immutable(self):
        """Test that options cannot change after construction."""
        options = load_options({"appId": APP_ID, "secret": SECRET})
        with pytest.raises(Exception):
            options.cache = False

    def test_error_details_list_fields(self):
        """Test that configuration errors report the offending fields."""
        with pytest.raises(ConfigurationError) as excinfo:
            load_options({"secret": SECRET})

        assert excinfo.value.code == "CONFIGURATION_ERROR"
        fields = [error["field"] for error in excinfo.value.details["errors"]]
        assert "appId" in fields


class TestOptionsFromConfig:
    """Options derived from environment-backed settings."""

    def test_service_settings_mapped(self, monkeypatch):
        """Test mapping JSSDK_* settings onto engine options."""
        monkeypatch.setenv("JSSDK_APP_ID", APP_ID)
        monkeypatch.setenv("JSSDK_SECRET", SECRET)
        monkeypatch.setenv("JSSDK_PERSISTENCE_TYPE", "redis")
        monkeypatch.setenv("JSSDK_REDIS_HOST", "cache.internal")
        monkeypatch.setenv("JSSDK_REDIS_PORT", "6380")

        options = options_from_config(get_config("jssdk", 8020))

        assert isinstance(options, JSSDKOptions)
        assert options.app_id == APP_ID
        assert options.type is PersistenceMode.REDIS
        assert options.redis_host == "cache.internal"
        assert options.redis_port == 6380

    def test_missing_identity_in_settings(self, monkeypatch):
        """Test that an unconfigured service fails to build options."""
        monkeypatch.delenv("JSSDK_APP_ID", raising=False)
        monkeypatch.delenv("JSSDK_SECRET", raising=False)

        with pytest.raises(ConfigurationError):
            options_from_config(get_config("jssdk", 8020, app_id="", secret=""))


class TestEngineConstruction:
    """Engine construction fails before touching the network or disk."""

    def test_missing_identity_fails_before_io(self):
        """Test that no issuer client or backend is built for bad options."""
        with patch("service_jssdk.app.credentials.cache.IssuerClient") as mock_issuer, \
                patch("service_jssdk.app.credentials.cache.create_backend") as mock_backend:
            with pytest.raises(ConfigurationError):
                JSSDK({"appId": APP_ID, "type": "file"})

            mock_issuer.assert_not_called()
            mock_backend.assert_not_called()
