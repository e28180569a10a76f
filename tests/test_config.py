"""Tests for settings loading and validation."""

from pathlib import Path

import pytest

from config import ConfigurationError, ConfigurationManager, get_config


def write_settings(tmp_path, text):
    path = tmp_path / "settings.yaml"
    path.write_text(text, encoding="utf-8")
    return str(path)


def test_bundled_settings_load():
    assert get_config("augmentation.min_line_items") == 4
    assert get_config("providers.anthropic.api_version") == "2023-06-01"
    assert get_config("limits.nothing_here", 7) == 7
    assert get_config("providers.timeout_seconds.deeper", "x") == "x"


def test_relative_paths_are_anchored_at_project_root():
    category_db = Path(get_config("paths.category_db"))
    assert category_db.is_absolute()
    assert category_db == Path(__file__).parent.parent / "data" / "categories.db"


def test_instance_is_shared():
    assert ConfigurationManager() is ConfigurationManager()


def test_custom_file(tmp_path):
    path = write_settings(tmp_path, "augmentation:\n  min_fields: 12\n")
    assert ConfigurationManager(path).get("augmentation.min_fields") == 12
    assert get_config("augmentation.min_line_items", 4) == 4


@pytest.mark.parametrize("text", [
    "limits:\n  max_fields: 0\n",
    "limits:\n  max_entities: many\n",
    "augmentation:\n  sparse_fields: -1\n",
    "augmentation:\n  min_fields: true\n",
    "providers:\n  timeout_seconds: 0\n",
    "local_extractor:\n  timeout_seconds: soon\n",
    "providers:\n  openai:\n    endpoint: https://example.test\n",
    "providers:\n  google: gemini\n",
    "limits: 5\n",
    "- just\n- a list\n",
])
def test_invalid_settings_are_rejected(tmp_path, text):
    with pytest.raises(ConfigurationError):
        ConfigurationManager(write_settings(tmp_path, text))


def test_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        ConfigurationManager(str(tmp_path / "absent.yaml"))


def test_failed_load_leaves_no_instance(tmp_path):
    with pytest.raises(ConfigurationError):
        ConfigurationManager(write_settings(tmp_path, "limits:\n  max_fields: 0\n"))
    assert get_config("limits.max_fields") == 200
