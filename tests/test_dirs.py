"""Tests for default file locations."""

import pytest

from gmail_filters import dirs


@pytest.fixture
def config_dir(tmp_path, monkeypatch):
    monkeypatch.setattr(dirs, "get_config_dir", lambda: tmp_path)
    return tmp_path


def test_yaml_config_by_default(config_dir):
    assert dirs.default_config_file() == config_dir / "config.yaml"


def test_jsonnet_config_preferred_when_present(config_dir):
    (config_dir / "config.jsonnet").write_text("{}")

    assert dirs.default_config_file() == config_dir / "config.jsonnet"


def test_token_file(config_dir):
    assert dirs.default_token_file() == config_dir / "token.json"
