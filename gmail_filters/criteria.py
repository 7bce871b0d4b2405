"""Criteria AST: parsing config filter nodes and simplifying the resulting tree."""

from dataclasses import dataclass, field
from enum import IntEnum

from gmail_filters.config_models import Actions, Config, FilterNode, Rule
from gmail_filters.errors import CriteriaSyntaxError, RuleError, SemanticError
from gmail_filters.reporting import prettify

# Bounded number of rewrite rounds; a termination guard rather than a true fixed point.
MAX_SIMPLIFY_PASSES = 4


class Operation(IntEnum):
    """Logical operators. The numeric order is used when sorting children."""

    NONE = 0
    AND = 1
    OR = 2
    NOT = 3

    def __str__(self) -> str:
        return "<none>" if self is Operation.NONE else self.name.lower()


class Function(IntEnum):
    """Field match functions. The numeric order is used when sorting children."""

    NONE = 0
    FROM = 1
    TO = 2
    CC = 3
    BCC = 4
    REPLYTO = 5
    SUBJECT = 6
    LIST = 7
    HAS = 8
    QUERY = 9

    def __str__(self) -> str:
        return "<none>" if self is Function.NONE else self.name.lower()


@dataclass
class Node:
    operation: Operation
    children: list["CriteriaAST"] = field(default_factory=list)

    @property
    def root_operation(self) -> Operation:
        return self.operation

    @property
    def root_function(self) -> Function:
        return Function.NONE

    @property
    def is_leaf(self) -> bool:
        return False

    def clone(self) -> "Node":
        return Node(self.operation, [c.clone() for c in self.children])


@dataclass
class Leaf:
    function: Function
    grouping: Operation = Operation.NONE
    args: list[str] = field(default_factory=list)
    is_raw: bool = False

    @property
    def root_operation(self) -> Operation:
        return self.grouping

    @property
    def root_function(self) -> Function:
        return self.function

    @property
    def is_leaf(self) -> bool:
        return True

    def clone(self) -> "Leaf":
        return Leaf(self.function, self.grouping, list(self.args), self.is_raw)


CriteriaAST = Node | Leaf


@dataclass
class ParsedRule:
    """Intermediate representation of a config rule: simplified criteria plus actions."""

    criteria: CriteriaAST
    actions: Actions


# Parsing

RAW_ALLOWED_FIELDS = ("from", "to", "subject")

_FIELD_FUNCTIONS: dict[str, tuple[Function, str]] = {
    "from": (Function.FROM, "from_"),
    "to": (Function.TO, "to"),
    "cc": (Function.CC, "cc"),
    "bcc": (Function.BCC, "bcc"),
    "replyto": (Function.REPLYTO, "reply_to"),
    "subject": (Function.SUBJECT, "subject"),
    "list": (Function.LIST, "list_"),
    "has": (Function.HAS, "has"),
    "query": (Function.QUERY, "query"),
}


def check_syntax(node: FilterNode) -> None:
    fields = node.non_empty_fields()
    if not fields:
        raise CriteriaSyntaxError("empty filter node")
    if len(fields) > 1:
        raise CriteriaSyntaxError(f"multiple fields specified in the same filter node: {','.join(fields)}")
    if node.is_raw and fields[0] not in RAW_ALLOWED_FIELDS:
        raise CriteriaSyntaxError(f"'isRaw' can be used only with fields {', '.join(RAW_ALLOWED_FIELDS)}")


def parse_criteria(node: FilterNode) -> CriteriaAST:
    """Turn a config filter node into an (unsimplified) criteria tree."""
    check_syntax(node)
    if node.and_:
        return Node(Operation.AND, [parse_criteria(c) for c in node.and_])
    if node.or_:
        return Node(Operation.OR, [parse_criteria(c) for c in node.or_])
    if node.not_ is not None:
        return Node(Operation.NOT, [parse_criteria(node.not_)])

    (name,) = node.non_empty_fields()
    function, attr = _FIELD_FUNCTIONS[name]
    return Leaf(function, Operation.NONE, [getattr(node, attr)], node.is_raw)


def parse_rule(rule: Rule) -> ParsedRule:
    criteria = simplify_criteria(parse_criteria(rule.filter))
    if rule.actions.empty():
        raise SemanticError("empty action")
    return ParsedRule(criteria=criteria, actions=rule.actions)


def parse_rules(config: Config) -> list[ParsedRule]:
    """Parse all config rules, attributing failures to the rule index."""
    res = []
    for i, rule in enumerate(config.rules):
        try:
            res.append(parse_rule(rule))
        except (CriteriaSyntaxError, SemanticError) as e:
            raise RuleError(i, e, details=f"Rule:\n{prettify(rule)}") from e
    return res


# Simplification


def simplify_criteria(tree: CriteriaAST) -> CriteriaAST:
    """Rewrite a criteria tree into its canonical simplified form.

    The input is left untouched. Children are sorted at every level so that
    equivalent trees always render identically.
    """
    tree = tree.clone()
    for _ in range(MAX_SIMPLIFY_PASSES):
        changes = _flatten_associative(tree)
        changes += _merge_leaves(tree)
        tree, removed = _remove_redundancy(tree)
        if changes + removed == 0:
            break
    sort_tree(tree)
    return tree


def _flatten_associative(tree: CriteriaAST) -> int:
    """Inline AND-in-AND and OR-in-OR children."""
    if not isinstance(tree, Node):
        return 0
    count = sum(_flatten_associative(child) for child in tree.children)
    if tree.operation == Operation.NOT:
        return count

    children: list[CriteriaAST] = []
    for child in tree.children:
        if isinstance(child, Node) and child.operation == tree.operation:
            children.extend(child.children)
            count += 1
        else:
            children.append(child)
    tree.children = children
    return count


def _merge_leaves(tree: CriteriaAST) -> int:
    """Merge sibling leaves of the same function into one multi-argument leaf."""
    if not isinstance(tree, Node):
        return 0
    count = sum(_merge_leaves(child) for child in tree.children)
    if len(tree.children) <= 1:
        return count

    children: list[CriteriaAST] = []
    merged: dict[Function, Leaf] = {}
    for child in tree.children:
        if not isinstance(child, Leaf) or (len(child.args) > 1 and child.grouping != tree.operation):
            children.append(child)
            continue
        if (target := merged.get(child.function)) is not None:
            target.args.extend(child.args)
            target.is_raw = target.is_raw or child.is_raw
            count += 1
            continue
        if child.grouping != tree.operation:
            count += 1
        merged[child.function] = Leaf(child.function, tree.operation, list(child.args), child.is_raw)

    children.extend(merged.values())
    tree.children = children
    return count


def _remove_redundancy(tree: CriteriaAST) -> tuple[CriteriaAST, int]:
    """Collapse single-child nodes and double negations."""
    if not isinstance(tree, Node):
        return tree, 0
    count = 0
    children = []
    for child in tree.children:
        new_child, c = _remove_redundancy(child)
        count += c
        children.append(new_child)
    tree.children = children

    if tree.operation == Operation.NOT:
        if len(children) == 1:
            inner = children[0]
            if isinstance(inner, Node) and inner.operation == Operation.NOT and len(inner.children) == 1:
                return inner.children[0], count + 1
        return tree, count
    if len(children) != 1:
        return tree, count
    return children[0], count + 1


def _sort_key(tree: CriteriaAST) -> tuple[bool, Operation, Function]:
    # Leaves first, then by operation (a leaf's grouping), then by function
    return (not tree.is_leaf, tree.root_operation, tree.root_function)


def sort_tree(tree: CriteriaAST) -> None:
    if isinstance(tree, Node):
        for child in tree.children:
            sort_tree(child)
        tree.children.sort(key=_sort_key)
