"""Storage-agnostic predicate tree.

A compiled listing query is a tree of ``And`` / ``Or`` groups over
``Leaf`` comparisons, plus the ``Const`` node for trees that are known
to match everything or nothing.  Nodes are frozen dataclasses, so two
equivalent compilations compare (and hash) equal.

Leaf operators are the primitive comparisons a store must support:
``EQ``, ``IN``, ``GTE``, ``LTE``, ``CONTAINS`` and ``EXISTS``.  RANGE
criteria never reach a store; the compiler lowers them to GTE/LTE.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Union

from .query import Operator


@dataclass(frozen=True)
class Leaf:
    field: str
    op: Operator
    values: tuple[Any, ...] = ()

    @property
    def value(self) -> Any:
        """The single operand of EQ/GTE/LTE/CONTAINS/EXISTS leaves."""
        return self.values[0]


@dataclass(frozen=True)
class And:
    children: tuple[Predicate, ...] = ()


@dataclass(frozen=True)
class Or:
    children: tuple[Predicate, ...] = ()


@dataclass(frozen=True)
class Const:
    value: bool


Predicate = Union[Leaf, And, Or, Const]

TRUE = Const(True)
FALSE = Const(False)


def and_(*children: Predicate) -> Predicate:
    """AND together *children*, collapsing the single-child case."""
    if len(children) == 1:
        return children[0]
    return And(children=tuple(children))


def or_(*children: Predicate) -> Predicate:
    """OR together *children*, collapsing the single-child case."""
    if len(children) == 1:
        return children[0]
    return Or(children=tuple(children))


def describe(node: Predicate) -> str:
    """Render *node* as a compact, human-readable expression for logs."""
    if isinstance(node, Const):
        return "TRUE" if node.value else "FALSE"
    if isinstance(node, Leaf):
        rendered = ", ".join(repr(v) for v in node.values)
        return f"{node.field} {node.op.value} ({rendered})"
    joiner = " AND " if isinstance(node, And) else " OR "
    if not node.children:
        return "TRUE" if isinstance(node, And) else "FALSE"
    return "(" + joiner.join(describe(c) for c in node.children) + ")"


__all__ = [
    "Leaf",
    "And",
    "Or",
    "Const",
    "Predicate",
    "TRUE",
    "FALSE",
    "and_",
    "or_",
    "describe",
]
