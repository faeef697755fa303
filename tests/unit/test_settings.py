"""Unit tests for settings."""

from pathlib import Path

import pytest

from src.config import Settings, StockSettings, StorageSettings, get_settings, reset_settings


class TestSettings:
    def test_stock_defaults(self):
        stock = StockSettings()
        assert stock.default_minimum_threshold == 5.0
        assert stock.branch_movement_limit == 100
        assert stock.product_movement_limit == 200
        assert stock.branch_transfer_limit == 50
        assert stock.system_user_id == "system"

    def test_stock_env_override(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("STOCK_DEFAULT_MINIMUM_THRESHOLD", "2.5")
        monkeypatch.setenv("STOCK_SYSTEM_USER_ID", "robot")

        stock = StockSettings()

        assert stock.default_minimum_threshold == 2.5
        assert stock.system_user_id == "robot"

    def test_db_path(self, tmp_path: Path):
        storage = StorageSettings(data_dir=tmp_path, db_name="x.db")
        assert storage.db_path == tmp_path / "x.db"

    def test_data_dir_created(self, tmp_path: Path):
        data_dir = tmp_path / "nested" / "data"
        Settings(storage={"data_dir": data_dir})
        assert data_dir.exists()

    def test_get_settings_is_cached_until_reset(self):
        first = get_settings()
        assert get_settings() is first
        reset_settings()
        assert get_settings() is not first
