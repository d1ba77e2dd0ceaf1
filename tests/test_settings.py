import yaml

import settings_manager
from config import ICON_SIZES, app_config
from settings_manager import DEFAULT_SETTINGS, apply_settings, export_sizes, load_settings, save_settings


def test_missing_file_returns_defaults(tmp_path):
    assert load_settings(tmp_path / "config.yaml") == DEFAULT_SETTINGS


def test_partial_file_is_merged(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(yaml.safe_dump({"fonts": {"embed": False}}), encoding="utf-8")
    settings = load_settings(path)
    assert settings["fonts"] == {"embed": False, "timeout_sec": 20}
    assert settings["logging"]["level"] == "INFO"


def test_malformed_file_keeps_defaults(tmp_path, caplog):
    path = tmp_path / "config.yaml"
    path.write_text("fonts: [oops\n", encoding="utf-8")
    assert load_settings(path) == DEFAULT_SETTINGS
    assert "malformed" in caplog.text


def test_save_then_load(tmp_path):
    path = tmp_path / "nested" / "config.yaml"
    settings = load_settings(path)
    settings["export"]["preview_size"] = 512
    save_settings(settings, path)
    assert load_settings(path)["export"]["preview_size"] == 512


def test_defaults_are_not_shared(tmp_path):
    settings = load_settings(tmp_path / "config.yaml")
    settings["fonts"]["embed"] = False
    assert settings_manager.DEFAULT_SETTINGS["fonts"]["embed"] is True


def test_apply_settings(monkeypatch):
    monkeypatch.setattr(app_config, "embed_fonts", True)
    monkeypatch.setattr(app_config, "font_timeout_sec", 20.0)
    monkeypatch.setattr(app_config, "preview_size", 256)
    apply_settings({"fonts": {"embed": False, "timeout_sec": "5"}, "export": {"preview_size": "bad"}})
    assert app_config.embed_fonts is False
    assert app_config.font_timeout_sec == 5.0
    assert app_config.preview_size == 256


def test_export_sizes():
    assert export_sizes(DEFAULT_SETTINGS) == ICON_SIZES
    assert export_sizes({"export": {"sizes": [256, "32", "x", 32]}}) == (32, 256)
    assert export_sizes({"export": {"sizes": []}}) == ICON_SIZES
