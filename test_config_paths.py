import json
import tempfile
from pathlib import Path

import config_paths
from sorting import SORT_CYCLE_TOGGLE, SORT_CYCLE_TRI


def test_load_config_defaults_without_json():
    with tempfile.TemporaryDirectory() as tmp:
        cfg_dir = Path(tmp) / "gridkit"
        cfg_dir.mkdir(parents=True, exist_ok=True)
        # point module paths to temp
        orig_dir = config_paths.CONFIG_DIR
        orig_json = config_paths.CONFIG_JSON
        try:
            config_paths.CONFIG_DIR = str(cfg_dir)
            config_paths.CONFIG_JSON = str(cfg_dir / "config.json")
            cfg = config_paths.load_config()
            assert cfg["PAGE_SIZE"] == 10
            assert cfg["SORT_CYCLE"] == SORT_CYCLE_TRI
            assert cfg["DEFAULT_COLUMN_WIDTH"] == 150
            assert cfg["MIN_COLUMN_WIDTH"] == 50
            assert cfg["EMPTY_MESSAGE"] == "No data"
        finally:
            config_paths.CONFIG_DIR = orig_dir
            config_paths.CONFIG_JSON = orig_json


def test_load_config_reads_json_overrides():
    with tempfile.TemporaryDirectory() as tmp:
        cfg_dir = Path(tmp) / "gridkit"
        cfg_dir.mkdir(parents=True, exist_ok=True)
        cfg_path = cfg_dir / "config.json"
        cfg_path.write_text(
            json.dumps(
                {
                    "table": {
                        "page_size": 25,
                        "sort_cycle": "toggle",
                        "page_window": 7,
                        "empty_message": "Nothing to show",
                    },
                    "columns": {"default_width": 120, "min_width": 40},
                }
            )
        )

        orig_dir = config_paths.CONFIG_DIR
        orig_json = config_paths.CONFIG_JSON
        try:
            config_paths.CONFIG_DIR = str(cfg_dir)
            config_paths.CONFIG_JSON = str(cfg_path)
            cfg = config_paths.load_config()
            settings = config_paths.TableSettings.from_config(cfg)
            assert settings.page_size == 25
            assert settings.sort_cycle == SORT_CYCLE_TOGGLE
            assert settings.page_window == 7
            assert settings.empty_message == "Nothing to show"
            assert settings.default_column_width == 120
            assert settings.min_column_width == 40
        finally:
            config_paths.CONFIG_DIR = orig_dir
            config_paths.CONFIG_JSON = orig_json


def test_load_config_ignores_invalid_entries(monkeypatch, tmp_path):
    cfg_path = tmp_path / "config.json"
    cfg_path.write_text(
        json.dumps(
            {
                "table": {"page_size": 0, "sort_cycle": "random", "page_window": True},
                "columns": {"default_width": "wide"},
            }
        )
    )
    monkeypatch.setattr(config_paths, "CONFIG_JSON", str(cfg_path))
    cfg = config_paths.load_config()
    assert cfg["PAGE_SIZE"] == 10
    assert cfg["SORT_CYCLE"] == SORT_CYCLE_TRI
    assert cfg["PAGE_WINDOW"] == 5
    assert cfg["DEFAULT_COLUMN_WIDTH"] == 150


def test_load_config_survives_broken_json(monkeypatch, tmp_path):
    cfg_path = tmp_path / "config.json"
    cfg_path.write_text("{not json")
    monkeypatch.setattr(config_paths, "CONFIG_JSON", str(cfg_path))
    assert config_paths.load_config()["PAGE_SIZE"] == 10


def test_ensure_config_dirs_creates_directory(monkeypatch, tmp_path):
    target = tmp_path / "nested" / "gridkit"
    monkeypatch.setattr(config_paths, "CONFIG_DIR", str(target))
    config_paths.ensure_config_dirs()
    assert target.is_dir()
