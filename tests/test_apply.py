"""Tests for applying a diff to Gmail."""

import pytest

from gmail_filters.apply import apply
from gmail_filters.diff import GmailConfig, diff, from_config
from gmail_filters.errors import DiffValidationError


@pytest.fixture
def full_diff(make_filter, make_label):
    local = GmailConfig(
        labels=[make_label("a/b/c"), make_label("a"), make_label("recolor", color=("#000000", "#ffffff"))],
        filters=[make_filter(from_="new", add_label="a")],
    )
    upstream = GmailConfig(
        labels=[
            make_label("recolor", id="Label_R"),
            make_label("x", id="Label_X"),
            make_label("x/y/z", id="Label_XYZ"),
        ],
        filters=[make_filter(id="F1", from_="old", archive=True)],
    )
    return diff(local, upstream)


class TestApply:
    def test_step_order(self, full_diff, fake_api, make_filter, make_label):
        api = fake_api()

        apply(full_diff, api, allow_remove_labels=True)

        assert api.calls == [
            ("add_labels", [make_label("a"), make_label("a/b/c")]),
            ("add_filters", [make_filter(from_="new", add_label="a")]),
            ("update_labels", [make_label("recolor", id="Label_R", color=("#000000", "#ffffff"))]),
            ("delete_filters", ["F1"]),
            ("delete_labels", ["Label_XYZ", "Label_X"]),
        ]

    def test_updated_label_keeps_upstream_id(self, full_diff, fake_api):
        api = fake_api()

        apply(full_diff, api)

        (updated,) = dict(api.calls)["update_labels"]
        assert updated.id == "Label_R"

    def test_labels_kept_unless_allowed(self, full_diff, fake_api):
        api = fake_api()

        apply(full_diff, api, allow_remove_labels=False)

        assert "delete_labels" not in api.call_names
        assert api.call_names == ["add_labels", "add_filters", "update_labels", "delete_filters"]

    def test_empty_diff_makes_no_calls(self, make_config, fake_api):
        local = from_config(make_config(rules=[{"filter": {"from": "a"}, "actions": {"archive": True}}]))
        api = fake_api(filters=local.filters)

        apply(diff(local, GmailConfig(filters=local.filters)), api, allow_remove_labels=True)

        assert api.calls == []

    def test_stops_at_first_failure(self, full_diff, fake_api):
        api = fake_api()

        def fail(filters):
            raise RuntimeError("boom")

        api.add_filters = fail

        with pytest.raises(RuntimeError, match="boom"):
            apply(full_diff, api, allow_remove_labels=True)

        assert api.call_names == ["add_labels"]


def test_unsafe_label_removal_is_caught_before_any_call(make_config, make_label, fake_api):
    local = from_config(
        make_config(
            rules=[{"filter": {"from": "a"}, "actions": {"labels": ["old"]}}],
            labels=[{"name": "new"}],
        )
    )
    api = fake_api(labels=[make_label("old", id="Label_1")])
    config_diff = diff(local, GmailConfig(labels=api.list_labels(), filters=api.list_filters()))

    with pytest.raises(DiffValidationError, match='cannot remove label "old"'):
        apply(config_diff, api, allow_remove_labels=True)

    assert api.calls == []


def test_invalid_local_labels_block_apply(make_config, fake_api):
    local = from_config(make_config(labels=[{"name": "a/"}]))
    api = fake_api()

    with pytest.raises(DiffValidationError, match="validating labels"):
        apply(diff(local, GmailConfig()), api)

    assert api.calls == []
