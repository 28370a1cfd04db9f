"""Tests for settings."""

import pytest

from visitation.config import Settings
from visitation.mapping.columns import SchemaRevision


class TestSettings:
    """Tests for reading settings."""

    def test_defaults(self):
        settings = Settings()
        assert settings.backend == "memory"
        assert settings.write_revision is SchemaRevision.CURRENT
        assert not settings.seeds_demo_data

    @pytest.mark.parametrize(
        "backend,seed_demo,expected",
        [("memory", True, True), ("memory", False, False), ("postgrest", True, False)],
    )
    def test_demo_data_only_for_memory_backend(self, backend, seed_demo, expected):
        assert Settings(backend=backend, seed_demo=seed_demo).seeds_demo_data is expected

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("VISITATION_BACKEND", "POSTGREST")
        monkeypatch.setenv("VISITATION_POSTGREST_URL", "https://db.example/rest/v1")
        monkeypatch.setenv("VISITATION_WRITE_REVISION", "legacy")
        monkeypatch.setenv("VISITATION_SEED_DEMO", "yes")

        settings = Settings.from_env()

        assert settings.backend == "postgrest"
        assert settings.postgrest_url == "https://db.example/rest/v1"
        assert settings.write_revision is SchemaRevision.LEGACY
        assert settings.seed_demo
        assert not settings.seeds_demo_data

    def test_unknown_backend(self, monkeypatch):
        monkeypatch.setenv("VISITATION_BACKEND", "sqlite")
        with pytest.raises(ValueError):
            Settings.from_env()
