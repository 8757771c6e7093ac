import json
from pathlib import Path

import pytest

from sparkline_reports.core.config import ReportsConfig


def test_reports_config_defaults():
    config = ReportsConfig()
    assert config.default_grouping == "day"
    assert config.default_limit == 100
    assert config.default_live_data is False
    assert config.enable_cache is True
    assert config.cache_backend == "memory"
    assert config.max_workers == 1


def test_reports_config_from_env(monkeypatch):
    monkeypatch.setenv("REPORTS_DEFAULT_GROUPING", "month")
    monkeypatch.setenv("REPORTS_DEFAULT_LIMIT", "12")
    monkeypatch.setenv("REPORTS_DEFAULT_LIVE_DATA", "yes")
    monkeypatch.setenv("REPORTS_DEFAULT_DATE_COLUMN", "signed_up_at")
    monkeypatch.setenv("REPORTS_ENABLE_CACHE", "0")
    monkeypatch.setenv("REPORTS_CACHE_BACKEND", "sqlite")
    monkeypatch.setenv("REPORTS_CACHE_DB_PATH", "/tmp/reports.db")
    monkeypatch.setenv("REPORTS_MAX_WORKERS", "4")
    monkeypatch.setenv("REPORTS_QUERY_RETRIES", "5")

    config = ReportsConfig.from_env()

    assert config.default_grouping == "month"
    assert config.default_limit == 12
    assert config.default_live_data is True
    assert config.default_date_column == "signed_up_at"
    assert config.enable_cache is False
    assert config.cache_backend == "sqlite"
    assert config.cache_db_path == "/tmp/reports.db"
    assert config.max_workers == 4
    assert config.query_retries == 5


def test_reports_config_from_env_rejects_non_integers(monkeypatch):
    monkeypatch.setenv("REPORTS_DEFAULT_LIMIT", "many")
    with pytest.raises(ValueError):
        ReportsConfig.from_env()


def test_reports_config_from_file_json(tmp_path: Path):
    data = {"default_grouping": "week", "default_limit": 8, "max_workers": 2}
    path = tmp_path / "config.json"
    path.write_text(json.dumps(data))

    config = ReportsConfig.from_file(str(path))

    assert config.default_grouping == "week"
    assert config.default_limit == 8
    assert config.max_workers == 2
    assert config.enable_cache is True


def test_reports_config_from_file_yaml(tmp_path: Path):
    yaml = pytest.importorskip("yaml")
    data = {"default_grouping": "hour", "enable_cache": False, "cache_backend": "sqlite"}
    path = tmp_path / "config.yaml"
    path.write_text(yaml.safe_dump(data))

    config = ReportsConfig.from_file(str(path))

    assert config.default_grouping == "hour"
    assert config.enable_cache is False
    assert config.cache_backend == "sqlite"


def test_reports_config_from_file_rejects_missing_and_unknown_formats(tmp_path: Path):
    with pytest.raises(FileNotFoundError):
        ReportsConfig.from_file(str(tmp_path / "missing.json"))

    path = tmp_path / "config.toml"
    path.write_text("default_limit = 3")
    with pytest.raises(ValueError):
        ReportsConfig.from_file(str(path))


@pytest.mark.parametrize(
    "overrides",
    [
        {"default_grouping": "fortnight"},
        {"default_limit": 0},
        {"cache_backend": "redis"},
        {"max_workers": 0},
        {"query_retries": 0},
    ],
)
def test_reports_config_validate_rejects_invalid_values(overrides):
    with pytest.raises(ValueError):
        ReportsConfig(**overrides)
