import os

import pytest

from stockwatch.utils import config as config_module
from stockwatch.utils.config import load_config


def test_default_config_path_is_relative_to_working_directory():
    assert config_module.CONFIG_PATH == os.getenv("CONFIG_PATH", "config/config.yaml")


def test_load_config_reads_yaml(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("app:\n  name: Test API\n")

    assert load_config(str(path)) == {"app": {"name": "Test API"}}


def test_missing_config_exits(tmp_path):
    with pytest.raises(SystemExit, match="Config not found"):
        load_config(str(tmp_path / "missing.yaml"))


def test_empty_config_exits(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("")

    with pytest.raises(SystemExit, match="Failed to load config"):
        load_config(str(path))
