"""
Tests for compiler configuration loading.
"""

import pytest
from metadsl.config import CompilerConfig, config_from_dict, load_config


def test_defaults():
    config = CompilerConfig()
    assert config.debug is False
    assert config.source_type == "mixed"
    assert config.reset_on_compile is False


def test_from_dict_ignores_unknown_keys():
    config = config_from_dict({"debug": True, "colour": "blue"})
    assert config.debug is True


def test_from_empty_dict():
    assert config_from_dict(None) == CompilerConfig()


def test_load_yaml(tmp_path):
    path = tmp_path / "metadsl.yaml"
    path.write_text("debug: true\nsource_type: get\n", encoding="utf-8")
    config = load_config(str(path))
    assert config == CompilerConfig(debug=True, source_type="get")


def test_load_empty_yaml(tmp_path):
    path = tmp_path / "empty.yaml"
    path.write_text("", encoding="utf-8")
    assert load_config(str(path)) == CompilerConfig()


def test_load_non_mapping(tmp_path):
    path = tmp_path / "list.yaml"
    path.write_text("- 1\n- 2\n", encoding="utf-8")
    with pytest.raises(ValueError):
        load_config(str(path))
