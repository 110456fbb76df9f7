"""Alias analysis solved with spanning trees for the transitive assignment relation."""

from __future__ import annotations

from typing import Any, List, Mapping, Tuple

from .alias import AliasAnalysis, Word
from .cfldata import HybridData, TreeNode
from .peg import PEGEdgeKind
from .utils import Label

_V = Label(Word.V, 0)
_M = Label(Word.M, 0)
_D = Label(Word.d, 0)
_A = Label(Word.a, 0)


def _seed_graph_edges(analysis: AliasAnalysis) -> None:
    """Load the graph's edges with their reverses; queue the assignment edges."""
    graph = analysis._require_graph()
    for edge in graph.edges:
        src, dst = edge.src_id, edge.dst_id
        if edge.kind == PEGEdgeKind.ASGN:
            analysis.cfl_data.add_edge(src, dst, _A)
            analysis.cfl_data.add_edge(dst, src, Label(Word.abar, 0))
            analysis.push_into_worklist(src, dst, _A)
        elif edge.kind == PEGEdgeKind.DEREF:
            analysis.cfl_data.add_edge(src, dst, _D)
            analysis.cfl_data.add_edge(dst, src, Label(Word.dbar, 0))
        elif edge.kind == PEGEdgeKind.GEP:
            analysis.cfl_data.add_edge(src, dst, Label(Word.f, edge.idx))
            analysis.cfl_data.add_edge(dst, src, Label(Word.fbar, edge.idx))


def _field_succs(by_label: Mapping[Label, Any]) -> List[Tuple[Label, List[int]]]:
    return [(label, list(targets)) for label, targets in by_label.items() if label.symbol == Word.f]


def _add_deref_field_summaries(analysis: Any) -> None:
    """Materialise the DV and FV edges, and M self-loops on dereference targets."""
    data = analysis.cfl_data
    for src, by_label in list(data.items()):
        for label, targets in list(by_label.items()):
            if label.symbol == Word.d:
                for target in list(targets):
                    analysis.set_m(target, target)
                    for dst in list(data.get_succs(src, _V)):
                        analysis.check_and_add_edge(target, dst, Label(Word.DV, 0))
            elif label.symbol == Word.f:
                for target in list(targets):
                    for dst in list(data.get_succs(src, _V)):
                        analysis.check_and_add_edge(target, dst, Label(Word.FV, label.index))


class PocrAA(AliasAnalysis):
    """Alias analysis keeping the assignment closure as one spanning tree per node."""

    def __init__(self, graph_name, options=None) -> None:
        super().__init__(graph_name, options)
        self.hybrid_data = HybridData()
        self._tree_entries = 0

    def _vertex(self, node_id: int) -> TreeNode:
        return self.hybrid_data.get_node(node_id, node_id)

    def init_solver(self) -> None:
        _seed_graph_edges(self)
        for node_id in self._require_graph():
            if self.hybrid_data.add_ind(node_id, node_id) is not None:
                self._tree_entries += 1
            self.set_v(node_id, node_id)

    def solve(self) -> None:
        while not self.is_worklist_empty():
            item = self.pop_from_worklist()
            word = item.label.symbol
            src, dst = item.src, item.dst
            if word == Word.a:
                new_edges = self.hybrid_data.add_arc(src, dst)
                self._tree_entries += sum(len(targets) for targets in new_edges.values())
                for v_src in list(self.cfl_data.get_succs(src, _V)):
                    self.push_into_worklist(v_src, dst, _V)
            elif word == Word.M:
                self.set_m(src, dst)
                self.add_v(self._vertex(src), self._vertex(dst))
            elif word == Word.V:
                self.add_v(self._vertex(src), self._vertex(dst))

    def add_v(self, u: TreeNode, v: TreeNode) -> None:
        """Add V between ``u`` and ``v`` and spread it along both subtrees."""
        stack: List[Tuple[TreeNode, TreeNode]] = [(u, v)]
        while stack:
            left, right = stack.pop()
            if not self.set_v(left.id, right.id):
                continue
            pending = [(left, child) for child in list(right.children)]
            pending += [(child, right) for child in list(left.children)]
            stack.extend(reversed(pending))

    def set_v(self, src: int, dst: int) -> bool:
        """Record V in both directions; return False if it was already known."""
        if not self.check_and_add_edge(src, dst, _V):
            return False
        self.check_and_add_edge(dst, src, _V)
        self.check_d_edges(src, dst)
        self.check_f_edges(src, dst)
        return True

    def has_m(self, src: int, dst: int) -> bool:
        self.stat.checks += 1
        if src == dst:
            return True
        return self.cfl_data.has_edge(src, dst, _M)

    def set_m(self, src: int, dst: int) -> None:
        self.check_and_add_edge(src, dst, _M)
        self.check_and_add_edge(dst, src, _M)

    def check_d_edges(self, src: int, dst: int) -> None:
        """Match ``dbar V d``: dereference targets of V-related nodes are memory aliases."""
        src_targets = list(self.cfl_data.get_succs(src, _D))
        dst_targets = list(self.cfl_data.get_succs(dst, _D))
        for src_tgt in src_targets:
            for dst_tgt in dst_targets:
                if self.has_m(src_tgt, dst_tgt):
                    continue
                self.push_into_worklist(src_tgt, dst_tgt, _M)
                for src_pred in list(self.cfl_data.get_preds(src_tgt, _A)):
                    self.push_into_worklist(src_pred, dst_tgt, _A)
                for dst_pred in list(self.cfl_data.get_preds(dst_tgt, _A)):
                    self.push_into_worklist(dst_pred, src_tgt, _A)

    def check_f_edges(self, src: int, dst: int) -> None:
        """Match ``fbar V f`` with equal field offsets."""
        src_fields = _field_succs(self.cfl_data.get_succs(src))
        dst_fields = _field_succs(self.cfl_data.get_succs(dst))
        for src_label, src_targets in src_fields:
            for dst_label, dst_targets in dst_fields:
                if src_label.index != dst_label.index:
                    continue
                for src_tgt in src_targets:
                    for dst_tgt in dst_targets:
                        self.stat.checks += 1
                        self.push_into_worklist(src_tgt, dst_tgt, _V)

    def count_sum_edges(self) -> None:
        self.stat.checks += self.hybrid_data.checks
        _add_deref_field_summaries(self)
        super().count_sum_edges()
        # every tree entry stands for one A and one Abar edge
        self.stat.num_of_sum_edges += self._tree_entries * 2