"""Unit tests for application settings configuration."""

from pathlib import Path

from storefront.config import Settings


def test_settings_uses_backend_env_file_independent_of_cwd():
    """Settings should always include backend/.env as an env source."""
    env_files = Settings.model_config.get("env_file")
    assert env_files is not None

    normalized = {str(Path(item)) for item in env_files}
    expected_backend_env = str(Path(__file__).resolve().parents[2] / ".env")

    assert expected_backend_env in normalized
    assert str(Path(".env")) in normalized


def test_default_invalidation_graph_ships_with_backend():
    graph_file = Path(Settings().invalidation_graph_file)

    assert graph_file.name == "invalidation-graph.yaml"
    assert graph_file.exists()


def test_remote_settings_from_environment(monkeypatch):
    monkeypatch.setenv("REMOTE_API_BASE_URL", "https://shop.example.com/api")
    monkeypatch.setenv("FETCH_DEDUPE_INFLIGHT", "true")

    settings = Settings()

    assert settings.remote_api_base_url == "https://shop.example.com/api"
    assert settings.fetch_dedupe_inflight is True
