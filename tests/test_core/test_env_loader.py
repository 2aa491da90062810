"""
Tests for environment key lookup.
"""

from panelsmith.core import env_loader


class TestApiKeys:

    def test_primary_key_wins(self, monkeypatch):
        monkeypatch.setattr(env_loader, "_env_loaded", True)
        monkeypatch.setenv("FIBO_API_KEY", "primary")
        monkeypatch.setenv("BRIA_API_TOKEN", "alias")

        assert env_loader.get_fibo_api_key() == "primary"

    def test_alias_used_when_primary_missing(self, monkeypatch):
        monkeypatch.setattr(env_loader, "_env_loaded", True)
        monkeypatch.delenv("FIBO_API_KEY", raising=False)
        monkeypatch.setenv("BRIA_API_TOKEN", "alias")

        assert env_loader.get_fibo_api_key() == "alias"

    def test_missing_key(self, monkeypatch):
        monkeypatch.setattr(env_loader, "_env_loaded", True)
        monkeypatch.delenv("OPENAI_API_KEY", raising=False)

        assert env_loader.get_openai_api_key() is None


class TestEnsureEnvLoaded:

    def test_loads_dotenv_from_working_directory_once(self, monkeypatch, temp_dir):
        (temp_dir / ".env").write_text("PANELSMITH_TEST_VALUE=from-dotenv\n", encoding="utf-8")
        monkeypatch.chdir(temp_dir)
        monkeypatch.setattr(env_loader, "_env_loaded", False)
        monkeypatch.delenv("PANELSMITH_TEST_VALUE", raising=False)

        assert env_loader.ensure_env_loaded() is True
        assert env_loader.get_api_key("PANELSMITH_TEST_VALUE") == "from-dotenv"
        assert env_loader.ensure_env_loaded() is False
