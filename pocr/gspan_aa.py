"""Alias analysis solved by semi-naive rounds over old and new edges."""

from __future__ import annotations

from typing import AbstractSet, Dict, Iterable, Set

from .alias import StdAA, Word, _rewritten_binary_summ
from .cfldata import CFLData
from .peg import PEGEdgeKind
from .utils import Label

_Snapshot = Dict[int, Dict[Label, Set[int]]]

_SUMMARY_WORDS = frozenset({Word.M, Word.V, Word.DV, Word.FV, Word.A, Word.Abar})


def _snapshot(data: CFLData) -> _Snapshot:
    return {
        src: {label: set(dsts) for label, dsts in by_label.items() if dsts}
        for src, by_label in data.items()
    }


class GspanAA(StdAA):
    """Round-based solver: each round joins new edges with old and new ones.

    ``cfl_data`` holds the edges found in the last round, ``old_data`` all
    earlier ones. ``reanalyze`` is set while a round finds anything new.
    """

    def __init__(self, graph_name, options=None) -> None:
        super().__init__(graph_name, options)
        self.old_data = CFLData()

    def init_solver(self) -> None:
        graph = self._require_graph()
        seeds = {
            PEGEdgeKind.ASGN: (Word.a, Word.abar),
            PEGEdgeKind.GEP: (Word.f, Word.fbar),
            PEGEdgeKind.DEREF: (Word.d, Word.dbar),
        }
        for edge in graph.edges:
            words = seeds.get(edge.kind)
            if words is None:
                continue
            index = edge.idx if edge.kind == PEGEdgeKind.GEP else 0
            self.check_and_add_edge(edge.src_id, edge.dst_id, Label(words[0], index))
            self.check_and_add_edge(edge.dst_id, edge.src_id, Label(words[1], index))

        for node_id in graph:
            for word in (Word.V, Word.A, Word.Abar):
                self.check_and_add_edge(node_id, node_id, Label(word, 0))

    def solve(self) -> None:
        """Run one round; ``reanalyze`` tells whether another round is needed."""
        self.stat.num_of_iteration += 1
        self.reanalyze = False

        new = _snapshot(self.cfl_data)
        old = _snapshot(self.old_data)
        derived = {src: self._derive(src, new, old) for src in sorted(new.keys() | old.keys())}

        for src, by_label in new.items():
            for label, dsts in by_label.items():
                self.old_data.add_edges_from(src, dsts, label)
        self.cfl_data.clear()

        for src, by_label in derived.items():
            for label, dsts in by_label.items():
                known = old.get(src, {}).get(label, set()) | new.get(src, {}).get(label, set())
                fresh = dsts - known
                if fresh:
                    self.cfl_data.add_edges_from(src, fresh, label)
                    self.reanalyze = True

    def _merge(self, result: Dict[Label, Set[int]], label: Label, targets: Iterable[int]) -> None:
        if not label.symbol:
            return
        targets = set(targets)
        bucket = result.setdefault(label, set())
        before = len(bucket)
        bucket |= targets
        if len(bucket) != before:
            self.stat.checks += len(targets)

    def _derive(self, src: int, new: _Snapshot, old: _Snapshot) -> Dict[Label, Set[int]]:
        result: Dict[Label, Set[int]] = {}

        # old edge followed by a new edge
        for left, mids in old.get(src, {}).items():
            for mid in sorted(mids):
                for right, targets in new.get(mid, {}).items():
                    for label in self.binary_summ(left, right):
                        self._merge(result, label, targets)

        # new edge alone, or followed by an old or a new edge
        for left, mids in new.get(src, {}).items():
            for unary in self.unary_summ(left):
                for mid in sorted(mids):
                    if unary.symbol:
                        bucket = result.setdefault(unary, set())
                        if mid not in bucket:
                            bucket.add(mid)
                            self.stat.checks += 1
                    for source in (old, new):
                        for right, targets in source.get(mid, {}).items():
                            for label in self.binary_summ(left, right):
                                self._merge(result, label, targets)
        return result

    def count_sum_edges(self) -> None:
        """Count summary edges among the settled ones, then add A self-loops."""
        self.stat.num_of_sum_edges = 0
        sources = []
        for src, by_label in self.old_data.items():
            sources.append(src)
            for label, dsts in by_label.items():
                if label.symbol in _SUMMARY_WORDS:
                    self.stat.num_of_sum_edges += len(dsts)
        for src in sources:
            self.old_data.check_and_add_edge(src, src, Label(Word.A, 0))


class GRGspanAA(GspanAA):
    """The round-based solver with the rewritten grammar (no transitive A rules)."""

    def binary_summ(self, left: Label, right: Label) -> AbstractSet[Label]:
        return _rewritten_binary_summ(left, right)