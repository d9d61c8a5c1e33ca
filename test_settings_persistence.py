"""Settings persistence round trips through the platform config dir"""

import json

import pytest

from spectrum_canvas import config


@pytest.fixture
def home(tmp_path, monkeypatch):
    monkeypatch.setattr(config.Path, "home", classmethod(lambda cls: tmp_path))
    return tmp_path


def test_config_dir_is_created_under_home(home):
    config_dir = config.get_config_dir()
    assert config_dir.is_dir()
    assert str(config_dir).startswith(str(home))
    assert config.get_settings_file() == config_dir / "settings.json"


def test_save_and_load(home):
    test_settings = {
        'style': 'radial',
        'sensitivity': 7.5,
        'color': '#ff00aa',
        'device_index': 3,
        'device_keyword': 'monitor',
        'hold_on_end': True,
    }
    config.save_settings(test_settings)

    with open(config.get_settings_file(), 'r') as f:
        assert json.load(f) == test_settings
    assert config.load_settings() == test_settings


def test_unknown_keys_are_not_persisted(home):
    config.save_settings({'style': 'bars', 'window_geometry': [0, 0, 10, 10]})
    assert config.load_settings() == {'style': 'bars'}


def test_missing_file_gives_empty_settings(home):
    assert config.load_settings() == {}


@pytest.mark.parametrize("content", ["{not json", "[1, 2, 3]"])
def test_unreadable_file_gives_empty_settings(home, content):
    config.get_settings_file().write_text(content)
    assert config.load_settings() == {}
