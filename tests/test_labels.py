"""Tests for label validation and diffing."""

import pytest

from gmail_filters.config_models import Label
from gmail_filters.config_models import LabelColor as ConfigLabelColor
from gmail_filters.errors import DiffValidationError, LabelValidationError
from gmail_filters.labels import (
    GmailLabel,
    LabelColor,
    ModifiedLabel,
    diff_labels,
    labels_equivalent,
    labels_from_config,
    validate_labels,
    validate_labels_diff,
)


class TestValidateLabels:
    @pytest.mark.parametrize(
        ("names", "message"),
        [
            ([""], "invalid label without a name"),
            (["/a"], "shouldn't start with /"),
            (["a/"], "shouldn't end with /"),
            (["a", "b", "a"], 'label "a" provided multiple times'),
        ],
    )
    def test_invalid(self, make_label, names, message):
        with pytest.raises(LabelValidationError, match=message):
            validate_labels([make_label(n) for n in names])

    def test_valid_nested(self, make_label):
        validate_labels([make_label("a"), make_label("a/b"), make_label("a/b/c")])

    def test_parent_is_not_required(self, make_label):
        validate_labels([make_label("a/b/c")])


class TestLabelsEquivalent:
    def test_no_local_color_accepts_anything(self, make_label):
        assert labels_equivalent(make_label("a", color=("#000000", "#ffffff")), make_label("a"))

    def test_local_color_requires_upstream_color(self, make_label):
        assert not labels_equivalent(make_label("a"), make_label("a", color=("#000000", "#ffffff")))

    def test_colors_compared(self, make_label):
        upstream = make_label("a", color=("#000000", "#ffffff"))

        assert labels_equivalent(upstream, make_label("a", color=("#000000", "#ffffff")))
        assert not labels_equivalent(upstream, make_label("a", color=("#ffffff", "#000000")))

    def test_ids_are_ignored(self, make_label):
        assert labels_equivalent(make_label("a", id="Label_1"), make_label("a"))


class TestDiffLabels:
    def test_added_removed_modified(self, make_label):
        upstream = [
            make_label("old", id="Label_1"),
            make_label("keep", id="Label_2"),
            make_label("recolor", id="Label_3", color=("#000000", "#ffffff")),
        ]
        local = [make_label("recolor", color=("#ffffff", "#000000")), make_label("new"), make_label("keep")]

        d = diff_labels(upstream, local)

        assert d.added == [make_label("new")]
        assert d.removed == [make_label("old", id="Label_1")]
        assert d.modified == [ModifiedLabel(old=upstream[2], new=local[0])]

    def test_same_labels_produce_empty_diff(self, make_label):
        labels = [make_label("a"), make_label("b")]

        assert diff_labels(labels, list(reversed(labels))).empty()

    def test_render(self, make_label):
        d = diff_labels([make_label("old", id="Label_1")], [make_label("new", color=("#000000", "#ffffff"))])

        rendered = d.render()

        assert "--- Current" in rendered
        assert "+++ TO BE APPLIED" in rendered
        assert "-old\n" in rendered
        assert "+new; color: #000000, #ffffff\n" in rendered
        assert "Label_1" not in rendered

    def test_str_with_id(self, make_label):
        assert str(make_label("a", id="Label_1", color=("#000", "#fff"))) == "a [Label_1]; color: #000, #fff"


class TestValidateLabelsDiff:
    def test_refuses_removing_used_label(self, make_label, make_filter):
        d = diff_labels([make_label("used", id="Label_1")], [make_label("other")])

        with pytest.raises(DiffValidationError, match='cannot remove label "used", used in filter'):
            validate_labels_diff(d, [make_filter(from_="a", add_label="used")])

    def test_allows_removing_unused_label(self, make_label, make_filter):
        d = diff_labels([make_label("unused", id="Label_1")], [make_label("other")])

        validate_labels_diff(d, [make_filter(from_="a", add_label="other")])


def test_labels_from_config():
    labels = [Label(name="a"), Label(name="b", color=ConfigLabelColor(background="#000000", text="#ffffff"))]

    assert labels_from_config(labels) == [
        GmailLabel(name="a"),
        GmailLabel(name="b", color=LabelColor("#000000", "#ffffff")),
    ]
