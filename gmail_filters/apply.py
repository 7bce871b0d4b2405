"""Apply a computed diff to Gmail."""

from collections.abc import Sequence
from dataclasses import replace
import logging
from typing import Protocol

from gmail_filters.diff import ConfigDiff
from gmail_filters.filters import Filter
from gmail_filters.labels import GmailLabel

logger = logging.getLogger(__name__)


class ApplyAPI(Protocol):
    def add_labels(self, labels: Sequence[GmailLabel]) -> None: ...

    def add_filters(self, filters: Sequence[Filter]) -> None: ...

    def update_labels(self, labels: Sequence[GmailLabel]) -> None: ...

    def delete_filters(self, ids: Sequence[str]) -> None: ...

    def delete_labels(self, ids: Sequence[str]) -> None: ...


def apply(diff: ConfigDiff, api: ApplyAPI, allow_remove_labels: bool = False) -> None:
    """Push the diff to Gmail.

    Labels are created before the filters that may reference them, and removed
    only after the filters using them are gone. Parent labels sort before their
    children by name length. The diff is validated before any call is made.
    Stops at the first failure; nothing is rolled back.
    """
    diff.validate()

    if added := sorted(diff.labels_diff.added, key=lambda label: len(label.name)):
        logger.info("Creating %d label(s)", len(added))
        api.add_labels(added)

    if diff.filters_diff.added:
        logger.info("Creating %d filter(s)", len(diff.filters_diff.added))
        api.add_filters(diff.filters_diff.added)

    if diff.labels_diff.modified:
        logger.info("Updating %d label(s)", len(diff.labels_diff.modified))
        api.update_labels([replace(m.new, id=m.old.id) for m in diff.labels_diff.modified])

    if diff.filters_diff.removed:
        logger.info("Deleting %d filter(s)", len(diff.filters_diff.removed))
        api.delete_filters([f.id for f in diff.filters_diff.removed])

    if not allow_remove_labels:
        if diff.labels_diff.removed:
            logger.info("Keeping %d label(s) not in the config", len(diff.labels_diff.removed))
        return
    if removed := sorted(diff.labels_diff.removed, key=lambda label: len(label.name), reverse=True):
        logger.info("Deleting %d label(s)", len(removed))
        api.delete_labels([label.id for label in removed])
