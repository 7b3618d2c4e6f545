"""Unit tests for configuration loading and the application context."""

import os
from unittest.mock import patch

from src.debugkit.runtime.config.config_data import ConfigData
from src.debugkit.runtime.context import (
    AppContext,
    get_config,
    get_context,
    load_config,
    set_config,
    with_context,
)


class TestLoadConfig:
    def test_missing_file_uses_defaults(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        with patch.dict(os.environ, {}, clear=True):
            config = load_config(tmp_path / "absent.yaml")

        assert isinstance(config, ConfigData)
        assert config.database.url == ""

    def test_environment_setting_wins(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        config_file = tmp_path / "config.yaml"
        config_file.write_text('config:\n  app:\n    environment: "development"\n')
        with patch.dict(os.environ, {"ENVIRONMENT": "test"}, clear=True):
            config = load_config(config_file)

        assert config.app.environment == "test"

    def test_config_file_from_environment(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        config_file = tmp_path / "custom.yaml"
        config_file.write_text('config:\n  app:\n    name: "custom"\n')
        with patch.dict(os.environ, {"DEBUGKIT_CONFIG": str(config_file)}, clear=True):
            config = load_config()

        assert config.app.name == "custom"

    def test_dotenv_values_are_substituted(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        (tmp_path / ".env").write_text("SUPABASE_URL=https://fromdotenv.supabase.co\n")
        config_file = tmp_path / "config.yaml"
        config_file.write_text('config:\n  supabase:\n    url: "${SUPABASE_URL:-}"\n')
        with patch.dict(os.environ, {}, clear=True):
            config = load_config(config_file)

        assert config.supabase.url == "https://fromdotenv.supabase.co"


class TestContext:
    def test_set_config_then_get(self):
        config = ConfigData(app={"name": "ctx"})
        set_config(config)
        assert get_config() is config
        assert isinstance(get_context(), AppContext)

    def test_with_context_restores_previous(self):
        outer = ConfigData(app={"name": "outer"})
        inner = ConfigData(app={"name": "inner"})
        set_config(outer)

        with with_context(inner) as active:
            assert active is inner
            assert get_config().app.name == "inner"

        assert get_config().app.name == "outer"
