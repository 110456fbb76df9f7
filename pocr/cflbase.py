"""Worklist-driven CFL-reachability solving over labelled summary edges."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import AbstractSet, Iterable, Set

from .cfldata import CFLData
from .utils import Label, WorkList


@dataclass(frozen=True)
class CFLItem:
    """A worklist entry: an edge ``src -label-> dst``, marked primary or not."""

    src: int
    dst: int
    label: Label
    primary: bool = field(default=True)

    def __lt__(self, other: "CFLItem") -> bool:
        return (self.src, self.dst, self.label) < (other.src, other.dst, other.label)


class CFLBase(ABC):
    """All-pairs CFL-reachability solver; subclasses give the grammar's summaries.

    A label whose symbol is 0 stands for "no symbol" and never becomes an edge.
    """

    def __init__(self) -> None:
        self.worklist: WorkList[CFLItem] = WorkList()
        self.cfl_data = CFLData()

    # worklist
    def pop_from_worklist(self) -> CFLItem:
        return self.worklist.pop()

    def push_into_worklist(self, src: int, dst: int, label: Label, primary: bool = True) -> bool:
        return self.worklist.push(CFLItem(src, dst, label, primary))

    def is_in_worklist(self, src: int, dst: int, label: Label) -> bool:
        return CFLItem(src, dst, label) in self.worklist

    def is_worklist_empty(self) -> bool:
        return not self.worklist

    # grammar
    @abstractmethod
    def unary_summ(self, label: Label) -> AbstractSet[Label]:
        """Labels derived from a single edge labelled ``label``."""

    @abstractmethod
    def binary_summ(self, left: Label, right: Label) -> AbstractSet[Label]:
        """Labels derived from an edge ``left`` followed by an edge ``right``."""

    # data
    def check_and_add_edge(self, src: int, dst: int, label: Label) -> bool:
        if not label.symbol:
            return False
        return self.cfl_data.check_and_add_edge(src, dst, label)

    def check_and_add_edges_from(self, src: int, dsts: Iterable[int], label: Label) -> Set[int]:
        if not label.symbol:
            return set()
        return self.cfl_data.check_and_add_edges_from(src, dsts, label)

    def check_and_add_edges_to(self, srcs: Iterable[int], dst: int, label: Label) -> Set[int]:
        if not label.symbol:
            return set()
        return self.cfl_data.check_and_add_edges_to(srcs, dst, label)

    # solving
    def solve(self) -> None:
        while not self.is_worklist_empty():
            self.process_cfl_item(self.pop_from_worklist())

    def process_cfl_item(self, item: CFLItem) -> None:
        """Derive new edges from ``item`` via unary and binary rules."""
        for new_label in self.unary_summ(item.label):
            if self.check_and_add_edge(item.src, item.dst, new_label):
                self.push_into_worklist(item.src, item.dst, new_label)

        succs = [(label, list(dsts)) for label, dsts in self.cfl_data.get_succs(item.dst).items()]
        for right, dsts in succs:
            for new_label in self.binary_summ(item.label, right):
                for dst in dsts:
                    if self.check_and_add_edge(item.src, dst, new_label):
                        self.push_into_worklist(item.src, dst, new_label)

        preds = [(label, list(srcs)) for label, srcs in self.cfl_data.get_preds(item.src).items()]
        for left, srcs in preds:
            for new_label in self.binary_summ(left, item.label):
                for src in srcs:
                    if self.check_and_add_edge(src, item.dst, new_label):
                        self.push_into_worklist(src, item.dst, new_label)