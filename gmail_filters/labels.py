"""Labels as managed by the config, and the diff between local and upstream labels."""

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field, replace
import difflib

from gmail_filters import config_models
from gmail_filters.errors import DiffValidationError, LabelValidationError
from gmail_filters.filters import Filter, any_filter_has_label
from gmail_filters.reporting import colorize_diff
from gmail_filters.settings import LABELS_CONTEXT_LINES


@dataclass(frozen=True)
class LabelColor:
    background: str
    text: str


@dataclass(frozen=True)
class GmailLabel:
    name: str
    color: LabelColor | None = None
    id: str = ""

    def __str__(self) -> str:
        parts = [f"{self.name} [{self.id}]" if self.id else self.name]
        if self.color is not None:
            parts.append(f"color: {self.color.background}, {self.color.text}")
        return "; ".join(parts)


def validate_labels(labels: Iterable[GmailLabel]) -> None:
    seen: set[str] = set()
    for label in labels:
        name = label.name
        if not name:
            raise LabelValidationError("invalid label without a name")
        if name.startswith("/"):
            raise LabelValidationError(f"label \"{name}\" shouldn't start with /")
        if name.endswith("/"):
            raise LabelValidationError(f"label \"{name}\" shouldn't end with /")
        if name in seen:
            raise LabelValidationError(f'label "{name}" provided multiple times')
        seen.add(name)


def labels_equivalent(upstream: GmailLabel, local: GmailLabel) -> bool:
    """Whether the upstream label already satisfies the local declaration.

    A local label without a color accepts any upstream color.
    """
    if upstream.name != local.name:
        return False
    if local.color is None:
        return True
    return upstream.color == local.color


def labels_from_config(labels: Iterable[config_models.Label]) -> list[GmailLabel]:
    return [
        GmailLabel(
            name=label.name,
            color=LabelColor(label.color.background, label.color.text) if label.color else None,
        )
        for label in labels
    ]


@dataclass(frozen=True)
class ModifiedLabel:
    old: GmailLabel
    new: GmailLabel


@dataclass
class LabelsDiff:
    added: list[GmailLabel] = field(default_factory=list)
    removed: list[GmailLabel] = field(default_factory=list)
    modified: list[ModifiedLabel] = field(default_factory=list)
    colorize: bool = False

    def empty(self) -> bool:
        return not (self.added or self.removed or self.modified)

    def render(self) -> str:
        # IDs are noise in the diff; only the new side of a modification shows one
        old = [f"{replace(m.old, id='')}\n" for m in self.modified]
        new = [f"{m.new}\n" for m in self.modified]
        old += [f"{replace(label, id='')}\n" for label in self.removed]
        new += [f"{label}\n" for label in self.added]
        diff = "".join(
            difflib.unified_diff(old, new, fromfile="Current", tofile="TO BE APPLIED", n=LABELS_CONTEXT_LINES)
        )
        return colorize_diff(diff) if self.colorize else diff

    def __str__(self) -> str:
        return self.render()


def diff_labels(upstream: Sequence[GmailLabel], local: Sequence[GmailLabel], colorize: bool = False) -> LabelsDiff:
    """Merge-diff two label lists by name."""
    ups = sorted(upstream, key=lambda label: label.name)
    loc = sorted(local, key=lambda label: label.name)
    res = LabelsDiff(colorize=colorize)
    i = j = 0
    while i < len(ups) and j < len(loc):
        u, lo = ups[i], loc[j]
        if u.name < lo.name:
            res.removed.append(u)
            i += 1
        elif u.name > lo.name:
            res.added.append(lo)
            j += 1
        else:
            if not labels_equivalent(u, lo):
                res.modified.append(ModifiedLabel(old=u, new=lo))
            i += 1
            j += 1
    res.removed.extend(ups[i:])
    res.added.extend(loc[j:])
    return res


def validate_labels_diff(diff: LabelsDiff, filters: Iterable[Filter]) -> None:
    """Refuse to remove labels that a local filter still applies."""
    filters = list(filters)
    for label in diff.removed:
        if any_filter_has_label(filters, label.name):
            raise DiffValidationError(f'cannot remove label "{label.name}", used in filter')
