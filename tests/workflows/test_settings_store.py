"""Tests for the sqlite settings store."""

import pytest

from starsort.errors import ConfigurationError
from workflows.settings_store import (
    PROCESSED_STAR_REPORTS,
    SETTING_KEYS,
    START_DATA_PIPELINE,
    SettingsStore,
    env_var_for,
)


@pytest.fixture
def settings(tmp_path, monkeypatch):
    for key in SETTING_KEYS:
        monkeypatch.delenv(env_var_for(key), raising=False)
    store = SettingsStore(str(tmp_path / "config" / "settings.db"))
    yield store
    store.close()


class TestSettingsStore:

    def test_get_missing_returns_none(self, settings):
        assert settings.get(START_DATA_PIPELINE) is None

    def test_set_and_get(self, settings):
        settings.set(START_DATA_PIPELINE, " gdrive:abc123 ")
        assert settings.get(START_DATA_PIPELINE) == "gdrive:abc123"

    def test_set_is_idempotent(self, settings):
        settings.set(START_DATA_PIPELINE, "local:/data/in")
        settings.set(START_DATA_PIPELINE, "local:/data/in")
        assert settings.get(START_DATA_PIPELINE) == "local:/data/in"

    def test_set_overwrites(self, settings):
        settings.set(START_DATA_PIPELINE, "local:/a")
        settings.set(START_DATA_PIPELINE, "local:/b")
        assert settings.get(START_DATA_PIPELINE) == "local:/b"

    def test_unknown_key_rejected(self, settings):
        with pytest.raises(ConfigurationError):
            settings.set("inbox", "local:/a")

    def test_values_persist(self, settings):
        settings.set(PROCESSED_STAR_REPORTS, "local:/done")
        settings.close()
        reopened = SettingsStore(settings.db_path)
        assert reopened.get(PROCESSED_STAR_REPORTS) == "local:/done"
        reopened.close()

    def test_environment_overrides_store(self, settings, monkeypatch):
        settings.set(START_DATA_PIPELINE, "local:/stored")
        monkeypatch.setenv("STARSORT_STARTDATAPIPELINE", "local:/from-env")
        assert settings.get(START_DATA_PIPELINE) == "local:/from-env"

    def test_require_names_the_key(self, settings):
        with pytest.raises(ConfigurationError) as excinfo:
            settings.require(PROCESSED_STAR_REPORTS)
        assert PROCESSED_STAR_REPORTS in str(excinfo.value)
        assert "STARSORT_PROCESSEDSTARREPORTS" in str(excinfo.value)

    def test_all_lists_every_key(self, settings):
        assert set(settings.all()) == set(SETTING_KEYS)
