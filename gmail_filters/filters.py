"""Internal representation of Gmail filters and their human-readable rendering."""

from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import Enum, auto
from urllib.parse import quote_plus

from gmail_filters.config_models import Category

GMAIL_SEARCH_URL = "https://mail.google.com/mail/u/0/#search/"


@dataclass(frozen=True)
class FilterCriteria:
    """Matching criteria of a Gmail filter. Empty strings mean "not set"."""

    from_: str = ""
    to: str = ""
    subject: str = ""
    query: str = ""

    def empty(self) -> bool:
        return not (self.from_ or self.to or self.subject or self.query)

    def to_gmail_search(self) -> str:
        """Equivalent query in Gmail search box syntax."""
        parts = []
        if self.from_:
            parts.append(f"from:{self.from_}")
        if self.to:
            parts.append(f"to:{self.to}")
        if self.subject:
            parts.append(f"subject:{self.subject}")
        if self.query:
            parts.append(self.query)
        return " ".join(parts)

    def to_gmail_search_url(self) -> str:
        return GMAIL_SEARCH_URL + quote_plus(self.to_gmail_search())


@dataclass(frozen=True)
class FilterActions:
    add_label: str = ""
    category: Category | None = None
    archive: bool = False
    delete: bool = False
    mark_important: bool = False
    mark_not_important: bool = False
    mark_read: bool = False
    mark_not_spam: bool = False
    star: bool = False
    forward: str = ""

    def empty(self) -> bool:
        return self == FilterActions()


@dataclass(frozen=True)
class Filter:
    """A filter as it exists (or will exist) in Gmail.

    id is set only for filters fetched from Gmail and is excluded from equality.
    """

    criteria: FilterCriteria = field(default_factory=FilterCriteria)
    action: FilterActions = field(default_factory=FilterActions)
    id: str = field(default="", compare=False)

    def has_label(self, name: str) -> bool:
        return self.action.add_label == name

    def render(self) -> str:
        w = _FilterWriter()
        w.write("* Criteria:\n")
        w.param("from", self.criteria.from_)
        w.param("to", self.criteria.to)
        w.param("subject", self.criteria.subject)
        w.param("query", indent_query(self.criteria.query, 2))
        w.write("  Actions:\n")
        w.flag("archive", self.action.archive)
        w.flag("delete", self.action.delete)
        w.flag("mark as important", self.action.mark_important)
        w.flag("never mark as important", self.action.mark_not_important)
        w.flag("never mark as spam", self.action.mark_not_spam)
        w.flag("mark as read", self.action.mark_read)
        w.flag("star", self.action.star)
        w.param("categorize as", self.action.category.value if self.action.category else "")
        w.param("apply label", self.action.add_label)
        w.param("forward to", self.action.forward)
        return w.getvalue()

    def debug_render(self) -> str:
        return (
            f"# Search: {self.criteria.to_gmail_search()}\n"
            f"# URL: {self.criteria.to_gmail_search_url()}\n"
            f"{self.render()}"
        )


def any_filter_has_label(filters: Iterable[Filter], name: str) -> bool:
    return any(f.has_label(name) for f in filters)


def render_filters(filters: Iterable[Filter], debug_info: bool = False) -> str:
    return "\n".join(f.debug_render() if debug_info else f.render() for f in filters)


class _FilterWriter:
    def __init__(self):
        self._parts: list[str] = []

    def write(self, s: str) -> None:
        self._parts.append(s)

    def param(self, name: str, value: str) -> None:
        if value:
            self._parts.append(f"    {name}: {value}\n")

    def flag(self, name: str, value: bool) -> None:
        if value:
            self._parts.append(f"    {name}\n")

    def getvalue(self) -> str:
        return "".join(self._parts)


class _IndentState(Enum):
    OTHER = auto()
    SKIP_SPACES = auto()
    IN_QUOTES = auto()


def indent_query(query: str, level: int) -> str:
    """Pretty-print a Gmail query across lines, one term per line, nested by grouping.

    Returns the query unchanged when it has no grouping or spaces to break on.
    """
    indented, needed = _indent(query, level + 1)
    if not needed:
        return query
    return "\n" + indented.rstrip("\n ")


def _indent(query: str, level: int) -> tuple[str, bool]:
    out = ["  " * level]
    needed = False

    def newline(n: int) -> None:
        nonlocal needed
        out.append("\n" + "  " * n)
        needed = True

    state = _IndentState.SKIP_SPACES
    for ch in query:
        if state is _IndentState.IN_QUOTES:
            out.append(ch)
            if ch == '"':
                state = _IndentState.OTHER
            continue
        if ch == " ":
            if state is _IndentState.SKIP_SPACES:
                continue
            newline(level)
            state = _IndentState.SKIP_SPACES
        elif ch in "{(":
            out.append(ch)
            level += 1
            newline(level)
            state = _IndentState.SKIP_SPACES
        elif ch in "})":
            newline(level - 1)
            out.append(ch)
            level -= 1
            newline(level)
            state = _IndentState.SKIP_SPACES
        elif ch == ":":
            out.append(ch)
            state = _IndentState.SKIP_SPACES
        elif ch == '"':
            out.append(ch)
            state = _IndentState.IN_QUOTES
        else:
            out.append(ch)
            state = _IndentState.OTHER
    return "".join(out), needed
