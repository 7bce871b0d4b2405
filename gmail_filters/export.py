"""Conversion between internal filters and Gmail API filter resources."""

from collections.abc import Iterable, Sequence
import logging

from gmail_filters import gmail_api_models as api
from gmail_filters.config_models import Category
from gmail_filters.errors import FilterExportError, FilterImportError, UnsupportedFilterError
from gmail_filters.filters import Filter, FilterActions, FilterCriteria
from gmail_filters.gmail_api_models import SystemLabel
from gmail_filters.labels import GmailLabel
from gmail_filters.reporting import prettify

logger = logging.getLogger(__name__)

_CATEGORY_LABELS: dict[Category, SystemLabel] = {
    Category.PERSONAL: SystemLabel.CATEGORY_PERSONAL,
    Category.SOCIAL: SystemLabel.CATEGORY_SOCIAL,
    Category.UPDATES: SystemLabel.CATEGORY_UPDATES,
    Category.FORUMS: SystemLabel.CATEGORY_FORUMS,
    Category.PROMOTIONS: SystemLabel.CATEGORY_PROMOTIONS,
}
_LABEL_CATEGORIES = {label.value: category for category, label in _CATEGORY_LABELS.items()}


class LabelMap:
    """Bidirectional label name <-> ID lookup, built from the current label list."""

    def __init__(self, labels: Iterable[GmailLabel] = ()):
        self._name_to_id: dict[str, str] = {}
        self._id_to_name: dict[str, str] = {}
        for label in labels:
            self.add_label(label.id, label.name)

    def name_to_id(self, name: str) -> str | None:
        return self._name_to_id.get(name)

    def id_to_name(self, label_id: str) -> str | None:
        return self._id_to_name.get(label_id)

    def add_label(self, label_id: str, name: str) -> None:
        self._name_to_id[name] = label_id
        self._id_to_name[label_id] = name


# Export


def export_filters(filters: Sequence[Filter], label_map: LabelMap) -> list[api.GmailFilter]:
    res = []
    for i, f in enumerate(filters):
        try:
            res.append(export_filter(f, label_map))
        except FilterExportError as e:
            raise FilterExportError(
                f"exporting filter #{i}: {e}", details=f"Filter (internal representation):\n{prettify(f)}"
            ) from e
    return res


def export_filter(f: Filter, label_map: LabelMap) -> api.GmailFilter:
    if f.action.empty():
        raise FilterExportError("no action specified")
    if f.criteria.empty():
        raise FilterExportError("no criteria specified")
    return api.GmailFilter(action=_export_action(f.action, label_map), criteria=_export_criteria(f.criteria))


def _export_action(action: FilterActions, label_map: LabelMap) -> api.FilterAction:
    add: list[str] = []
    remove: list[str] = []
    if action.archive:
        remove.append(SystemLabel.INBOX)
    if action.delete:
        add.append(SystemLabel.TRASH)
    if action.mark_important:
        add.append(SystemLabel.IMPORTANT)
    if action.mark_not_important:
        remove.append(SystemLabel.IMPORTANT)
    if action.mark_read:
        remove.append(SystemLabel.UNREAD)
    if action.mark_not_spam:
        remove.append(SystemLabel.SPAM)
    if action.star:
        add.append(SystemLabel.STARRED)
    if action.category is not None:
        add.append(_CATEGORY_LABELS[action.category])
    if action.add_label:
        label_id = label_map.name_to_id(action.add_label)
        if label_id is None:
            raise FilterExportError(f'label "{action.add_label}" not found')
        add.append(label_id)
    return api.FilterAction(
        add_label_ids=[str(x) for x in add],
        remove_label_ids=[str(x) for x in remove],
        forward=action.forward or None,
    )


def _export_criteria(criteria: FilterCriteria) -> api.FilterCriteria:
    return api.FilterCriteria(
        from_=criteria.from_ or None,
        to=criteria.to or None,
        subject=criteria.subject or None,
        query=criteria.query or None,
    )


# Import


def import_filters(filters: Iterable[api.GmailFilter], label_map: LabelMap) -> list[Filter]:
    """Import Gmail filters, collecting every failure before raising.

    The raised FilterImportError carries the filters that did import, so callers
    can carry on with the supported subset.
    """
    res = []
    errors: dict[str, str] = {}
    for gf in filters:
        try:
            res.append(import_filter(gf, label_map))
        except UnsupportedFilterError as e:
            errors[gf.id or ""] = str(e)
    if errors:
        raise FilterImportError(errors, filters=res)
    logger.debug("Imported %d filter(s)", len(res))
    return res


def import_filter(gf: api.GmailFilter, label_map: LabelMap) -> Filter:
    try:
        action = _import_action(gf.action, label_map)
    except UnsupportedFilterError as e:
        raise UnsupportedFilterError(f"importing action: {e}") from e
    try:
        criteria = _import_criteria(gf.criteria)
    except UnsupportedFilterError as e:
        raise UnsupportedFilterError(f"importing criteria: {e}") from e
    return Filter(criteria=criteria, action=action, id=gf.id or "")


def _import_action(action: api.FilterAction, label_map: LabelMap) -> FilterActions:
    fields: dict = {}
    for label_id in action.add_label_ids:
        if (category := _LABEL_CATEGORIES.get(label_id)) is not None:
            if "category" in fields:
                raise UnsupportedFilterError(f"multiple categories: '{category}', '{fields['category']}'")
            fields["category"] = category
            continue
        match label_id:
            case SystemLabel.TRASH:
                fields["delete"] = True
            case SystemLabel.IMPORTANT:
                fields["mark_important"] = True
            case SystemLabel.STARRED:
                fields["star"] = True
            case _:
                name = label_map.id_to_name(label_id)
                if name is None:
                    raise UnsupportedFilterError(f"unknown label ID '{label_id}'")
                fields["add_label"] = name

    for label_id in action.remove_label_ids:
        match label_id:
            case SystemLabel.INBOX:
                fields["archive"] = True
            case SystemLabel.UNREAD:
                fields["mark_read"] = True
            case SystemLabel.IMPORTANT:
                fields["mark_not_important"] = True
            case SystemLabel.SPAM:
                fields["mark_not_spam"] = True
            case _:
                raise UnsupportedFilterError(f'unsupported label to remove "{label_id}"')

    res = FilterActions(forward=action.forward or "", **fields)
    if res.empty():
        raise UnsupportedFilterError("empty or unsupported action")
    return res


def _import_criteria(criteria: api.FilterCriteria) -> FilterCriteria:
    unsupported = {
        "excludeChats": criteria.exclude_chats,
        "size": criteria.size,
        "sizeComparison": criteria.size_comparison,
    }
    for name, value in unsupported.items():
        if value:
            raise UnsupportedFilterError(f'usage of unsupported field "{name}" (value {value})')

    query = [criteria.query] if criteria.query else []
    if criteria.negated_query:
        query.append(f"-{{{criteria.negated_query}}}")
    if criteria.has_attachment:
        query.append("has:attachment")
    return FilterCriteria(
        from_=criteria.from_ or "",
        to=criteria.to or "",
        subject=criteria.subject or "",
        query=" ".join(query),
    )
