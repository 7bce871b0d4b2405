"""Diff between the local config and the filters and labels currently in Gmail."""

from collections.abc import Sequence
from dataclasses import dataclass, field
import difflib
import hashlib
import logging
from typing import Protocol

import numpy as np
from scipy.optimize import linear_sum_assignment

from gmail_filters.config_models import Config
from gmail_filters.criteria import ParsedRule, parse_rules
from gmail_filters.errors import DiffValidationError, FilterImportError, LabelValidationError
from gmail_filters.filters import Filter, render_filters
from gmail_filters.generator import from_rules
from gmail_filters.labels import (
    GmailLabel,
    LabelsDiff,
    diff_labels,
    labels_from_config,
    validate_labels,
    validate_labels_diff,
)
from gmail_filters.reporting import colorize_diff
from gmail_filters.settings import DEFAULT_CONTEXT_LINES, DEFAULT_SIZE_LIMIT, DiffOptions

logger = logging.getLogger(__name__)


# Filters


@dataclass
class FiltersDiff:
    added: list[Filter] = field(default_factory=list)
    removed: list[Filter] = field(default_factory=list)
    debug_info: bool = False
    context_lines: int = DEFAULT_CONTEXT_LINES
    colorize: bool = False

    def empty(self) -> bool:
        return not (self.added or self.removed)

    def render(self) -> str:
        removed = render_filters(self.removed, self.debug_info)
        added = render_filters(self.added, self.debug_info)
        diff = "".join(
            difflib.unified_diff(
                removed.splitlines(keepends=True),
                added.splitlines(keepends=True),
                fromfile="Current",
                tofile="TO BE APPLIED",
                n=self.context_lines,
            )
        )
        return colorize_diff(diff) if self.colorize else diff

    def __str__(self) -> str:
        return self.render()


def hash_filter(f: Filter) -> str:
    """Content hash of a filter, ignoring its Gmail ID."""
    return hashlib.sha256(repr((f.criteria, f.action)).encode()).hexdigest()


def _hashed(filters: Sequence[Filter]) -> list[tuple[str, Filter]]:
    unique = {hash_filter(f): f for f in filters}
    return sorted(unique.items(), key=lambda item: item[0])


def changed_filters(upstream: Sequence[Filter], local: Sequence[Filter]) -> tuple[list[Filter], list[Filter]]:
    """Return (added, removed): filters only present locally, and only upstream."""
    ups, loc = _hashed(upstream), _hashed(local)
    added: list[Filter] = []
    removed: list[Filter] = []
    i = j = 0
    while i < len(ups) and j < len(loc):
        if ups[i][0] < loc[j][0]:
            removed.append(ups[i][1])
            i += 1
        elif ups[i][0] > loc[j][0]:
            added.append(loc[j][1])
            j += 1
        else:
            i += 1
            j += 1
    removed.extend(f for _, f in ups[i:])
    added.extend(f for _, f in loc[j:])
    return added, removed


def _diff_cost(a: list[str], b: list[str]) -> float:
    return 1 - difflib.SequenceMatcher(a=a, b=b, autojunk=False).ratio()


def reorder_with_hungarian(f1: Sequence[Filter], f2: Sequence[Filter]) -> tuple[list[Filter], list[Filter]]:
    """Reorder two filter lists so that the most similar filters line up.

    Matched pairs come first, in assignment order; unmatched filters of the
    longer list follow in their original order.
    """
    lines1 = [f.render().splitlines(keepends=True) for f in f1]
    lines2 = [f.render().splitlines(keepends=True) for f in f2]
    cost = np.array([[_diff_cost(a, b) for b in lines2] for a in lines1])
    rows, cols = linear_sum_assignment(cost)

    r1 = [f1[i] for i in rows]
    r2 = [f2[j] for j in cols]
    matched1, matched2 = set(rows.tolist()), set(cols.tolist())
    r1.extend(f for i, f in enumerate(f1) if i not in matched1)
    r2.extend(f for j, f in enumerate(f2) if j not in matched2)
    return r1, r2


def diff_filters(
    upstream: Sequence[Filter], local: Sequence[Filter], options: DiffOptions = DiffOptions()
) -> FiltersDiff:
    added, removed = changed_filters(upstream, local)
    if added and removed:
        added, removed = reorder_with_hungarian(added, removed)
    return FiltersDiff(
        added=added,
        removed=removed,
        debug_info=options.debug_info,
        context_lines=options.context_lines,
        colorize=options.colorize,
    )


# Whole config


@dataclass
class GmailConfig:
    labels: list[GmailLabel] = field(default_factory=list)
    filters: list[Filter] = field(default_factory=list)


@dataclass
class ConfigParseResult(GmailConfig):
    rules: list[ParsedRule] = field(default_factory=list)


class FetchAPI(Protocol):
    def list_labels(self) -> list[GmailLabel]: ...

    def list_filters(self) -> list[Filter]: ...


def from_config(config: Config, size_limit: int = DEFAULT_SIZE_LIMIT) -> ConfigParseResult:
    """Compile a config into the Gmail filters and labels it declares."""
    rules = parse_rules(config)
    filters = from_rules(rules, size_limit)
    return ConfigParseResult(labels=labels_from_config(config.labels), filters=filters, rules=rules)


def from_api(api: FetchAPI) -> GmailConfig:
    """Fetch the upstream labels and filters.

    Filters that cannot be imported are left out (and so never touched) as long
    as at least one filter could be imported.
    """
    labels = api.list_labels()
    try:
        filters = api.list_filters()
    except FilterImportError as e:
        if not e.filters:
            raise
        logger.warning("Ignoring %d filter(s) that could not be imported:\n%s", len(e.errors), e.details)
        filters = e.filters
    logger.debug("Fetched %d label(s) and %d filter(s) from Gmail", len(labels), len(filters))
    return GmailConfig(labels=labels, filters=filters)


@dataclass
class ConfigDiff:
    filters_diff: FiltersDiff
    labels_diff: LabelsDiff
    local_config: GmailConfig

    def empty(self) -> bool:
        return self.filters_diff.empty() and self.labels_diff.empty()

    def render(self) -> str:
        parts = []
        if not self.filters_diff.empty():
            parts += ["Filters:", self.filters_diff.render()]
        if not self.labels_diff.empty():
            parts += ["Labels:", self.labels_diff.render()]
        return "\n".join(parts)

    def __str__(self) -> str:
        return self.render()

    def validate(self) -> None:
        """Check the diff is safe to apply. Raises DiffValidationError."""
        if self.labels_diff.empty():
            return
        try:
            validate_labels(self.local_config.labels)
        except LabelValidationError as e:
            raise DiffValidationError(f"validating labels: {e}") from e
        try:
            validate_labels_diff(self.labels_diff, self.local_config.filters)
        except DiffValidationError as e:
            raise DiffValidationError(f"invalid labels diff: {e}") from e


def diff(local: GmailConfig, upstream: GmailConfig, options: DiffOptions = DiffOptions()) -> ConfigDiff:
    """Compute what has to change upstream to match the local config.

    Labels are only compared when the local config declares some, so configs
    that don't manage labels never try to delete them.
    """
    labels_diff = LabelsDiff(colorize=options.colorize)
    if local.labels:
        labels_diff = diff_labels(upstream.labels, local.labels, colorize=options.colorize)
    return ConfigDiff(
        filters_diff=diff_filters(upstream.filters, local.filters, options),
        labels_diff=labels_diff,
        local_config=local,
    )
