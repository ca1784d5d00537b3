"""Tests for the command line interface."""

from pathlib import Path

import pytest
import yaml
from typer.testing import CliRunner

from daybrief.cli import app, build_services
from daybrief.config import ENV_DEFAULTS, ProviderKey, get_settings

runner = CliRunner()


@pytest.fixture
def config_path(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Config pointing every file into a temp dir, with no keys in the environment."""
    for env_name in ENV_DEFAULTS.values():
        monkeypatch.delenv(env_name, raising=False)

    path = tmp_path / "config.yaml"
    path.write_text(
        yaml.dump({
            "paths": {
                "cache_db": str(tmp_path / "cache.db"),
                "settings_file": str(tmp_path / "settings.yaml"),
            }
        }),
        encoding="utf-8",
    )
    return path


def test_config_set_and_status(config_path: Path, tmp_path: Path) -> None:
    """Test a stored key shows up as configured."""
    result = runner.invoke(app, ["config-set", "tianapi_key", "abc123", "--config", str(config_path)])
    assert result.exit_code == 0
    assert yaml.safe_load((tmp_path / "settings.yaml").read_text(encoding="utf-8")) == {"tianapi_key": "abc123"}

    result = runner.invoke(app, ["status", "--config", str(config_path)])
    assert result.exit_code == 0
    assert "✓ tianapi_key (settings)" in result.output
    assert "✗ news_api_key" in result.output
    assert "✓ Domestic news" in result.output
    assert "✗ Weather" in result.output


def test_status_shows_env_origin(config_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Test a key coming only from the environment is labeled as such."""
    monkeypatch.setenv(ENV_DEFAULTS[ProviderKey.NEWS_API], "env-key")

    result = runner.invoke(app, ["status", "--config", str(config_path)])

    assert result.exit_code == 0
    assert f"✓ {ProviderKey.NEWS_API.value} (env)" in result.output
    assert "✓ International news" in result.output


def test_headlines_without_keys_exits_2(config_path: Path) -> None:
    """Test missing configuration maps to exit code 2."""
    result = runner.invoke(app, ["headlines", "--config", str(config_path)])

    assert result.exit_code == 2


def test_build_services_wires_providers(config_path: Path) -> None:
    """Test the service graph built from settings."""
    services = build_services(get_settings(config_path))

    names = [p.name for p in services.news.orchestrator.providers]
    assert names == ["TianAPI", "JisuAPI", "NewsAPI"]
    assert services.news.catalog_source is services.news.orchestrator.providers[0]
    assert services.weather.default_city.name == "Beijing"
    assert not services.news.is_configured()
