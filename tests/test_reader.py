"""Tests for loading config files."""

import json

import pytest

from gmail_filters.config_models import Category
from gmail_filters.errors import ConfigError
from gmail_filters.reader import parse_config, read_config

CONFIG = """\
version: v1alpha3
author:
  name: Someone
  email: someone@example.com
labels:
  - name: news
    color:
      background: "#000000"
      text: "#ffffff"
rules:
  - filter:
      or:
        - from: a@example.com
        - list: dev.example.com
    actions:
      archive: true
      markImportant: false
      category: updates
      labels: [news]
"""


class TestParseConfig:
    def test_full_document(self):
        config = parse_config(CONFIG)

        assert config.author.name == "Someone"
        assert config.labels[0].color.background == "#000000"
        (rule,) = config.rules
        assert rule.filter.or_[1].list_ == "dev.example.com"
        assert rule.actions.archive
        assert rule.actions.mark_important is False
        assert rule.actions.mark_spam is None
        assert rule.actions.category == Category.UPDATES

    def test_json_is_accepted(self):
        doc = {"version": "v1alpha3", "rules": [{"filter": {"subject": "x"}, "actions": {"star": True}}]}

        config = parse_config(json.dumps(doc))

        assert config.rules[0].filter.subject == "x"

    def test_unsupported_version(self):
        with pytest.raises(ConfigError, match="unsupported config version: 'v1alpha1'"):
            parse_config("version: v1alpha1\n")

    def test_missing_version(self):
        with pytest.raises(ConfigError, match="unsupported config version: None"):
            parse_config("rules: []\n")

    def test_unknown_field_is_rejected(self):
        with pytest.raises(ConfigError, match="invalid config") as exc_info:
            parse_config("version: v1alpha3\nrules:\n  - filter: {form: a}\n    actions: {archive: true}\n")

        assert "form" in exc_info.value.details

    def test_unknown_category_is_rejected(self):
        with pytest.raises(ConfigError):
            parse_config("version: v1alpha3\nrules:\n  - filter: {from: a}\n    actions: {category: spam}\n")

    def test_not_a_mapping(self):
        with pytest.raises(ConfigError, match="expected a mapping"):
            parse_config("- a\n- b\n")

    def test_yaml_syntax_error(self):
        with pytest.raises(ConfigError, match="parsing"):
            parse_config("version: [unclosed\n")


class TestReadConfig:
    def test_reads_file(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text(CONFIG)

        assert read_config(path).rules[0].actions.labels == ["news"]

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigError, match="config not found"):
            read_config(tmp_path / "missing.yaml")


class TestJsonnet:
    def test_evaluates_with_imports_next_to_config(self, tmp_path):
        (tmp_path / "lib.libsonnet").write_text(
            "{ archive(sender):: { filter: { from: sender }, actions: { archive: true } } }"
        )
        path = tmp_path / "config.jsonnet"
        path.write_text(
            "local lib = import 'lib.libsonnet';\n"
            "{ version: 'v1alpha3', rules: [lib.archive(s) for s in ['a@x.com', 'b@x.com']] }\n"
        )

        config = read_config(path)

        assert [r.filter.from_ for r in config.rules] == ["a@x.com", "b@x.com"]
        assert all(r.actions.archive for r in config.rules)

    def test_library_dir_override(self, tmp_path):
        lib_dir = tmp_path / "lib"
        lib_dir.mkdir()
        (lib_dir / "me.libsonnet").write_text("{ name: 'Someone' }")
        path = tmp_path / "config.jsonnet"
        path.write_text("{ version: 'v1alpha3', author: { name: (import 'me.libsonnet').name } }\n")

        assert read_config(path, lib_dir=lib_dir).author.name == "Someone"

    def test_syntax_error(self, tmp_path):
        path = tmp_path / "config.jsonnet"
        path.write_text("{ version: 'v1alpha3', \n")

        with pytest.raises(ConfigError, match="parsing jsonnet"):
            read_config(path)

    def test_version_still_checked(self, tmp_path):
        path = tmp_path / "config.jsonnet"
        path.write_text("{ version: 'v1alpha2' }\n")

        with pytest.raises(ConfigError, match="unsupported config version"):
            read_config(path)

    def test_strict_schema(self, tmp_path):
        path = tmp_path / "config.jsonnet"
        path.write_text("{ version: 'v1alpha3', rules: [{ filter: { form: 'a' }, actions: { archive: true } }] }\n")

        with pytest.raises(ConfigError, match="invalid config"):
            read_config(path)
