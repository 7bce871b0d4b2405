"""Reverse import: turn the filters and labels of a Gmail account into a config."""

from collections.abc import Sequence

import yaml

from gmail_filters import config_models as cfg
from gmail_filters.errors import SemanticError
from gmail_filters.filters import Filter, FilterActions, FilterCriteria
from gmail_filters.labels import GmailLabel
from gmail_filters.reporting import prettify

PLACEHOLDER_AUTHOR = cfg.Author(name="YOUR NAME HERE (auto imported)", email="your-email@gmail.com")

LABELS_COMMENT = """\
# Note: labels management is optional. If you prefer to use the
# Gmail interface to add and remove labels, you can safely remove
# this section of the config.
"""

_RAW_TRIGGERS = frozenset(" '\"")


def reverse_import(filters: Sequence[Filter], labels: Sequence[GmailLabel]) -> cfg.Config:
    rules = []
    for i, f in enumerate(filters):
        try:
            rules.append(_rule_from_filter(f))
        except SemanticError as e:
            raise SemanticError(
                f"importing filter #{i}: {e}", details=f"Filter (internal representation):\n{prettify(f)}"
            ) from e
    return cfg.Config(
        version=cfg.SUPPORTED_VERSION,
        author=PLACEHOLDER_AUTHOR,
        labels=[_label_from_gmail(label) for label in labels],
        rules=rules,
    )


def _label_from_gmail(label: GmailLabel) -> cfg.Label:
    color = cfg.LabelColor(background=label.color.background, text=label.color.text) if label.color else None
    return cfg.Label(name=label.name, color=color)


def _rule_from_filter(f: Filter) -> cfg.Rule:
    return cfg.Rule(filter=_node_from_criteria(f.criteria), actions=_actions_from_filter(f.action))


def _needs_raw(value: str) -> bool:
    # Values Gmail already had quoted or spaced out must not be quoted again
    return any(ch in _RAW_TRIGGERS for ch in value)


def _node_from_criteria(c: FilterCriteria) -> cfg.FilterNode:
    nodes = []
    if c.from_:
        nodes.append(cfg.FilterNode(from_=c.from_, is_raw=_needs_raw(c.from_)))
    if c.to:
        nodes.append(cfg.FilterNode(to=c.to, is_raw=_needs_raw(c.to)))
    if c.subject:
        nodes.append(cfg.FilterNode(subject=c.subject, is_raw=_needs_raw(c.subject)))
    if c.query:
        nodes.append(cfg.FilterNode(query=c.query))
    if not nodes:
        raise SemanticError("empty criteria")
    if len(nodes) == 1:
        return nodes[0]
    return cfg.FilterNode(and_=nodes)


def _tribool(is_true: bool, is_false: bool) -> bool | None:
    if is_true and is_false:
        raise SemanticError("cannot be both true and false")
    if is_true or is_false:
        return is_true
    return None


def _actions_from_filter(a: FilterActions) -> cfg.Actions:
    try:
        mark_important = _tribool(a.mark_important, a.mark_not_important)
    except SemanticError as e:
        raise SemanticError(f"in 'mark important': {e}") from e
    return cfg.Actions(
        archive=a.archive,
        delete=a.delete,
        mark_read=a.mark_read,
        star=a.star,
        mark_spam=False if a.mark_not_spam else None,
        mark_important=mark_important,
        category=a.category,
        labels=[a.add_label] if a.add_label else [],
        forward=a.forward or None,
    )


def dump_config(config: cfg.Config, header: str = "") -> str:
    """Serialize a config as YAML, with a note above the optional labels section."""
    body = yaml.safe_dump(config.to_yaml_dict(), default_flow_style=False, allow_unicode=True, sort_keys=False)
    lines = []
    for line in body.splitlines(keepends=True):
        if config.labels and line.startswith("labels:"):
            lines.append(LABELS_COMMENT)
        lines.append(line)
    return header + "".join(lines)
