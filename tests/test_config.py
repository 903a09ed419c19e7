"""
Tests for settings loading.
"""

from pathlib import Path

import pytest

from homeledger.config import (
    AppSettings,
    AuthSettings,
    Settings,
    StorageSettings,
    validate_all_settings,
)


class TestSettings:

    def test_defaults(self, monkeypatch):
        for name in ("HOMELEDGER_AUTH_BCRYPT_ROUNDS", "HOMELEDGER_AUTH_MIN_PASSWORD_LENGTH", "CURRENCY_PREFIX"):
            monkeypatch.delenv(name, raising=False)
        assert AuthSettings().bcrypt_rounds == 10
        assert AuthSettings().min_password_length == 6
        assert AppSettings().currency_prefix == "Rp"
        assert AppSettings().recent_expenses_limit == 5

    def test_env_overrides(self, monkeypatch):
        monkeypatch.setenv("HOMELEDGER_AUTH_BCRYPT_ROUNDS", "12")
        monkeypatch.setenv("HOMELEDGER_STORAGE_DATA_DIR", "/tmp/ledger")
        assert Settings().auth.bcrypt_rounds == 12
        assert Settings().storage.data_dir == Path("/tmp/ledger")

    def test_data_dir_expands_home(self, monkeypatch):
        monkeypatch.setenv("HOMELEDGER_STORAGE_DATA_DIR", "~/ledger")
        assert "~" not in str(StorageSettings().data_dir)

    @pytest.mark.parametrize("rounds", ["3", "16"])
    def test_bcrypt_rounds_bounds(self, monkeypatch, rounds):
        monkeypatch.setenv("HOMELEDGER_AUTH_BCRYPT_ROUNDS", rounds)
        with pytest.raises(ValueError):
            AuthSettings()

    def test_log_level_normalized(self, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "debug")
        assert AppSettings().log_level == "DEBUG"

    def test_unknown_log_level(self, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "loud")
        with pytest.raises(ValueError):
            AppSettings()


class TestValidateAllSettings:

    def test_all_valid(self, monkeypatch):
        monkeypatch.delenv("HOMELEDGER_AUTH_BCRYPT_ROUNDS", raising=False)
        status = validate_all_settings()
        assert status["storage"] and status["auth"] and status["app"]

    def test_reports_invalid_group(self, monkeypatch):
        """Test that a bad value marks only its group as invalid."""
        monkeypatch.setenv("HOMELEDGER_AUTH_BCRYPT_ROUNDS", "99")
        status = validate_all_settings()
        assert status["auth"] is False
        assert "bcrypt_rounds" in status["auth_error"]
        assert status["storage"] is True
