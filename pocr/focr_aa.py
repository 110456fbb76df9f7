"""Alias analysis solved with an edge-critical graph for the assignment relation."""

from __future__ import annotations

from typing import List, Tuple

from .alias import AliasAnalysis, Word
from .ecg import ECG, ECGNode
from .pocr_aa import _add_deref_field_summaries, _field_succs, _seed_graph_edges
from .utils import Label

_V = Label(Word.V, 0)
_M = Label(Word.M, 0)
_D = Label(Word.d, 0)
_A = Label(Word.a, 0)


class FocrAA(AliasAnalysis):
    """Alias analysis keeping assignment reachability in a reduced graph."""

    def __init__(self, graph_name, options=None) -> None:
        super().__init__(graph_name, options)
        self.ecg = ECG(self.options.ecg_scc)

    def init_solver(self) -> None:
        _seed_graph_edges(self)
        for node_id in self._require_graph():
            self.ecg.add_node(node_id)
            self.set_v(node_id, node_id)

    def solve(self) -> None:
        while not self.is_worklist_empty():
            item = self.pop_from_worklist()
            word = item.label.symbol
            src, dst = item.src, item.dst
            if word == Word.a:
                self.add_arc(src, dst)
                for v_src in list(self.cfl_data.get_succs(src, _V)):
                    self.push_into_worklist(v_src, dst, _V)
            elif word == Word.M:
                self.set_m(src, dst)
                self.add_v(self.ecg.get_node(src), self.ecg.get_node(dst))
            elif word == Word.V:
                self.add_v(self.ecg.get_node(src), self.ecg.get_node(dst))

    def add_arc(self, src: int, dst: int) -> None:
        """Insert ``src -> dst`` as a forward or back edge unless already implied."""
        if self.ecg.is_reachable(src, dst):
            return
        if self.ecg.is_reachable(dst, src):
            self.ecg.insert_back_edge(src, dst)
        else:
            self.ecg.insert_forward_edge(src, dst)

    def add_v(self, u: ECGNode, v: ECGNode) -> None:
        """Add V between ``u`` and ``v`` and spread it along their successors."""
        stack: List[Tuple[ECGNode, ECGNode]] = [(u, v)]
        while stack:
            left, right = stack.pop()
            if not self.set_v(left.id, right.id):
                continue
            pending = [(left, succ) for succ in list(right.successors)]
            pending += [(succ, right) for succ in list(left.successors)]
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
        self.stat.checks += self.ecg.checks
        _add_deref_field_summaries(self)
        super().count_sum_edges()
        # every reachable pair stands for one A and one Abar edge
        self.stat.num_of_sum_edges += self.ecg.count_reachable_pairs() * 2