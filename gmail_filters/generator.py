"""Compile parsed rules into Gmail filters.

A rule's criteria tree is split into pieces small enough for Gmail to accept,
each piece is rendered into the four criteria slots Gmail filters have
(from/to/subject/query), and the result is crossed with the rule's actions.
"""

from collections.abc import Iterable
import logging

from gmail_filters.config_models import Actions
from gmail_filters.criteria import CriteriaAST, Function, Leaf, Node, Operation, ParsedRule
from gmail_filters.errors import RuleError, SemanticError
from gmail_filters.filters import Filter, FilterActions, FilterCriteria
from gmail_filters.settings import DEFAULT_SIZE_LIMIT

logger = logging.getLogger(__name__)

_QUOTE_TRIGGERS = frozenset(" \t{}()")

# Functions with a dedicated criteria slot in a Gmail filter
_SLOT_FUNCTIONS = {Function.FROM: "from_", Function.TO: "to", Function.SUBJECT: "subject"}
# Functions rendered without a "fn:" prefix
_BARE_FUNCTIONS = (Function.HAS, Function.QUERY)


def from_rules(rules: Iterable[ParsedRule], size_limit: int = DEFAULT_SIZE_LIMIT) -> list[Filter]:
    res: list[Filter] = []
    for i, rule in enumerate(rules):
        try:
            res.extend(from_rule(rule, size_limit))
        except SemanticError as e:
            raise RuleError(i, e) from e
    logger.debug("Generated %d filter(s)", len(res))
    return res


def from_rule(rule: ParsedRule, size_limit: int = DEFAULT_SIZE_LIMIT) -> list[Filter]:
    """Translate one rule into the filters implementing it.

    Every criteria chunk is combined with every action chunk.
    """
    criteria = [generate_criteria(c) for c in split_criteria(rule.criteria, size_limit)]
    actions = generate_actions(rule.actions)
    return [Filter(criteria=c, action=a) for c in criteria for a in actions]


# Criteria rendering


def generate_criteria(tree: CriteriaAST) -> FilterCriteria:
    if isinstance(tree, Leaf):
        return _generate_leaf(tree)
    match tree.operation:
        case Operation.OR:
            return FilterCriteria(query=f"{{{_join_children(tree)}}}")
        case Operation.AND:
            res = FilterCriteria()
            for child in tree.children:
                res = _join_criteria(res, generate_criteria(child))
            return res
        case Operation.NOT:
            if len(tree.children) != 1:
                raise SemanticError(f"after 'not' got {len(tree.children)} children, expected 1")
            return FilterCriteria(query=f"-{criteria_to_string(tree.children[0])}")
    raise SemanticError(f"unknown node operation {tree.operation!r}")


def _generate_leaf(leaf: Leaf) -> FilterCriteria:
    query = _leaf_args(leaf)
    if (slot := _SLOT_FUNCTIONS.get(leaf.function)) is not None:
        return FilterCriteria(**{slot: query})
    if leaf.function in _BARE_FUNCTIONS:
        return FilterCriteria(query=query)
    return FilterCriteria(query=f"{leaf.function}:{query}")


def criteria_to_string(tree: CriteriaAST) -> str:
    """Render a criteria subtree as a single Gmail search expression."""
    if isinstance(tree, Node):
        return _group(_join_children(tree), tree.operation)
    query = _leaf_args(tree)
    if tree.function in _BARE_FUNCTIONS:
        return query
    return f"{tree.function}:{query}"


def _join_children(node: Node) -> str:
    return " ".join(q for q in (criteria_to_string(c) for c in node.children) if q)


def _leaf_args(leaf: Leaf) -> str:
    escape = leaf.function != Function.QUERY and not leaf.is_raw
    args = [quote(a) for a in leaf.args] if escape else leaf.args
    query = " ".join(args)
    if len(leaf.args) > 1:
        query = _group(query, leaf.grouping)
    return query


def _group(query: str, op: Operation) -> str:
    match op:
        case Operation.OR:
            return f"{{{query}}}"
        case Operation.AND:
            return f"({query})"
        case Operation.NOT:
            return f"-{query}"
    raise SemanticError(f"cannot group by operation {op}")


def _join_queries(a: str, b: str) -> str:
    if not a:
        return b
    if not b:
        return a
    return f"{a} {b}"


def _join_criteria(a: FilterCriteria, b: FilterCriteria) -> FilterCriteria:
    return FilterCriteria(
        from_=_join_queries(a.from_, b.from_),
        to=_join_queries(a.to, b.to),
        subject=_join_queries(a.subject, b.subject),
        query=_join_queries(a.query, b.query),
    )


def quote(arg: str) -> str:
    """Quote an argument for Gmail search when it would otherwise be split or misparsed."""
    if arg.startswith('"') and arg.endswith('"'):
        return arg
    if any(ch in _QUOTE_TRIGGERS for ch in arg):
        return f'"{arg}"'
    if "+" in arg and "@" not in arg:
        return f'"{arg}"'
    return arg


# Splitting


def count_nodes(tree: CriteriaAST) -> int:
    """Size of a criteria tree: one per leaf argument plus one per inner node."""
    if isinstance(tree, Leaf):
        return len(tree.args)
    return 1 + sum(count_nodes(c) for c in tree.children)


def split_criteria(tree: CriteriaAST, limit: int = DEFAULT_SIZE_LIMIT) -> list[CriteriaAST]:
    """Split a criteria tree into pieces whose OR is equivalent to the original."""
    res: list[CriteriaAST] = []
    for piece in _split_root_or(tree):
        res.extend(split_big_criteria(piece, limit))
    return res


def _split_root_or(tree: CriteriaAST) -> list[CriteriaAST]:
    if isinstance(tree, Node) and tree.operation == Operation.OR:
        return list(tree.children)
    return [tree]


def split_big_criteria(tree: CriteriaAST, limit: int) -> list[CriteriaAST]:
    if count_nodes(tree) <= limit:
        return [tree]
    if tree.root_operation == Operation.OR:
        return _chunk(tree, limit)
    if tree.root_operation == Operation.AND:
        return split_nested_and(tree, limit)
    return [tree]


def split_nested_and(root: CriteriaAST, limit: int) -> list[CriteriaAST]:
    """Split an AND node by chunking its largest OR child.

    Each chunk is re-wrapped in an AND together with copies of the siblings.
    """
    if not isinstance(root, Node):
        return [root]

    big_index, big_size = -1, 0
    for i, child in enumerate(root.children):
        size = count_nodes(child)
        if size > big_size and child.root_operation == Operation.OR:
            big_index, big_size = i, size
    if big_index < 0:
        return [root]

    siblings = [c for i, c in enumerate(root.children) if i != big_index]
    new_limit = max(1, limit - (count_nodes(root) - big_size))
    return [
        Node(Operation.AND, [chunk, *(s.clone() for s in siblings)])
        for chunk in _chunk(root.children[big_index], new_limit)
    ]


def _chunk(tree: CriteriaAST, limit: int) -> list[CriteriaAST]:
    if isinstance(tree, Node):
        return [
            Node(tree.operation, tree.children[i : i + limit]) for i in range(0, len(tree.children), limit)
        ]
    return [
        Leaf(tree.function, tree.grouping, tree.args[i : i + limit], tree.is_raw)
        for i in range(0, len(tree.args), limit)
    ]


# Actions


def generate_actions(actions: Actions) -> list[FilterActions]:
    """Map config actions onto Gmail filter actions.

    Gmail filters apply at most one label, so every label past the first gets
    a filter action of its own.
    """
    if actions.mark_spam is True:
        raise SemanticError("gmail filters don't allow one to send messages to spam directly")

    primary = FilterActions(
        add_label=actions.labels[0] if actions.labels else "",
        category=actions.category,
        archive=actions.archive,
        delete=actions.delete,
        mark_important=actions.mark_important is True,
        mark_not_important=actions.mark_important is False,
        mark_read=actions.mark_read,
        mark_not_spam=actions.mark_spam is False,
        star=actions.star,
        forward=actions.forward or "",
    )
    return [primary, *(FilterActions(add_label=label) for label in actions.labels[1:])]

