"""
Tests for configuration loading.

Each test runs from an empty directory so a developer's .env file
does not leak in.
"""

from datetime import date
from pathlib import Path

import pytest
from pydantic import ValidationError

from spendwise.config import validate_all_settings
from spendwise.config.settings import AppSettings, GeminiSettings, StorageSettings
from spendwise.models.expense import AssistStatus
from spendwise.orchestrator import ExpenseFormController


@pytest.fixture(autouse=True)
def clean_env(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    for name in ("GEMINI_API_KEY", "NOTES_MIN_LENGTH", "NOTES_MAX_LENGTH", "STORAGE_DATA_PATH"):
        monkeypatch.delenv(name, raising=False)


class TestAppSettings:
    """Tests for AppSettings."""

    def test_defaults(self):
        settings = AppSettings()
        assert settings.notes_min_length == 3
        assert settings.notes_max_length == 100
        assert settings.min_expense_date == date(1900, 1, 1)
        assert settings.supported_formats_list == ["jpeg", "png", "webp", "gif"]
        assert settings.max_upload_size_bytes == 10 * 1024 * 1024

    def test_env_override(self, monkeypatch):
        monkeypatch.setenv("NOTES_MAX_LENGTH", "200")
        assert AppSettings().notes_max_length == 200

    def test_notes_bounds_must_be_ordered(self, monkeypatch):
        monkeypatch.setenv("NOTES_MIN_LENGTH", "10")
        monkeypatch.setenv("NOTES_MAX_LENGTH", "5")
        with pytest.raises(ValidationError):
            AppSettings()


class TestStorageSettings:
    """Tests for StorageSettings."""

    def test_defaults(self):
        settings = StorageSettings()
        assert settings.data_path == Path("data/spendwise.json")
        assert settings.expenses_key == "expenses"

    def test_env_override(self, monkeypatch):
        monkeypatch.setenv("STORAGE_DATA_PATH", "/tmp/other.json")
        assert StorageSettings().data_path == Path("/tmp/other.json")


class TestGeminiSettings:
    """Tests for GeminiSettings."""

    def test_api_key_required(self):
        with pytest.raises(ValidationError):
            GeminiSettings()

    def test_api_key_from_env(self, monkeypatch):
        monkeypatch.setenv("GEMINI_API_KEY", "test-key")
        settings = GeminiSettings()
        assert settings.api_key == "test-key"
        assert settings.model_name == "gemini-1.5-flash"


class TestValidateAllSettings:
    """Tests for validate_all_settings."""

    def test_reports_missing_ai_key(self):
        status = validate_all_settings()
        assert status["gemini"] is False
        assert "gemini_error" in status
        assert status["storage"] is True
        assert status["app"] is True

    def test_all_configured(self, monkeypatch):
        monkeypatch.setenv("GEMINI_API_KEY", "test-key")
        status = validate_all_settings()
        assert status["gemini"] is True


class TestMissingAiKey:
    """The app works without an AI key; only the helpers report it."""

    @pytest.mark.asyncio
    async def test_suggestion_reports_not_configured(self, repository, audit_logger):
        controller = ExpenseFormController(repository, audit_logger=audit_logger)
        controller.open_new()
        controller.set_values(notes="Pizza with friends")

        outcome = await controller.suggest_category()

        assert outcome.status == AssistStatus.FAILED
        assert outcome.title == "AI not configured"
