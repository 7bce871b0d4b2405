"""Shared test fixtures."""

from collections.abc import Sequence

import pytest
import yaml

from gmail_filters.config_models import Config
from gmail_filters.filters import Filter, FilterActions, FilterCriteria
from gmail_filters.labels import GmailLabel, LabelColor
from gmail_filters.reader import parse_config


class FakeGmailAPI:
    """In-memory stand-in for GmailClient that records every mutating call."""

    def __init__(self, labels: Sequence[GmailLabel] = (), filters: Sequence[Filter] = ()):
        self.labels = list(labels)
        self.filters = list(filters)
        self.calls: list[tuple[str, list]] = []

    def list_labels(self) -> list[GmailLabel]:
        return list(self.labels)

    def list_filters(self) -> list[Filter]:
        return list(self.filters)

    def add_labels(self, labels):
        self.calls.append(("add_labels", list(labels)))

    def add_filters(self, filters):
        self.calls.append(("add_filters", list(filters)))

    def update_labels(self, labels):
        self.calls.append(("update_labels", list(labels)))

    def delete_filters(self, ids):
        self.calls.append(("delete_filters", list(ids)))

    def delete_labels(self, ids):
        self.calls.append(("delete_labels", list(ids)))

    @property
    def call_names(self) -> list[str]:
        return [name for name, _ in self.calls]


@pytest.fixture
def make_filter():
    def _make_filter(
        *,
        id: str = "",
        from_: str = "",
        to: str = "",
        subject: str = "",
        query: str = "",
        add_label: str = "",
        archive: bool = False,
        mark_read: bool = False,
        star: bool = False,
        **actions,
    ) -> Filter:
        return Filter(
            criteria=FilterCriteria(from_=from_, to=to, subject=subject, query=query),
            action=FilterActions(add_label=add_label, archive=archive, mark_read=mark_read, star=star, **actions),
            id=id,
        )

    return _make_filter


@pytest.fixture
def make_label():
    def _make_label(name: str, *, id: str = "", color: tuple[str, str] | None = None) -> GmailLabel:
        return GmailLabel(name=name, id=id, color=LabelColor(*color) if color else None)

    return _make_label


@pytest.fixture
def make_config():
    """Build a validated Config from a plain dict, filling in the version."""

    def _make_config(*, rules: list[dict] | None = None, labels: list[dict] | None = None) -> Config:
        doc = {"version": "v1alpha3", "rules": rules or [], "labels": labels or []}
        return parse_config(yaml.safe_dump(doc))

    return _make_config


@pytest.fixture
def fake_api():
    def _fake_api(labels: Sequence[GmailLabel] = (), filters: Sequence[Filter] = ()) -> FakeGmailAPI:
        return FakeGmailAPI(labels, filters)

    return _fake_api
