"""Graph folding for program expression graphs."""

from __future__ import annotations

from typing import List, Tuple

from .peg import PEG, PEGEdgeKind
from .utils import WorkList


class PEGFold:
    """Merges nodes of a PEG that cannot change alias results when kept apart."""

    def __init__(self, peg: PEG) -> None:
        self.peg = peg
        self._foldable_pairs: List[Tuple[int, int]] = []

    def fold_graph(self) -> None:
        """Merge the target of an assignment into its source when that is its only incoming edge."""
        for edge in self.peg.edges:
            if edge.kind != PEGEdgeKind.ASGN:
                continue
            dst = edge.dst
            asgn_in = dst.in_edges_of_kind(PEGEdgeKind.ASGN)
            if len(asgn_in) <= 1 and len(dst.in_edges) == len(asgn_in):
                self._foldable_pairs.append((edge.src_id, edge.dst_id))

        while self._foldable_pairs:
            first, second = self._foldable_pairs.pop()
            src = self.peg.rep_node_id(first)
            dst = self.peg.rep_node_id(second)
            if src != dst:
                self.peg.merge_node_to_rep(dst, src)

    def merge_deref(self) -> None:
        """Merge all dereference targets of a common source, repeatedly."""
        check_nodes: WorkList[int] = WorkList(list(self.peg))
        while check_nodes:
            node = self.peg.get_node(check_nodes.pop())
            children = sorted({edge.dst_id for edge in node.out_edges_of_kind(PEGEdgeKind.DEREF)})
            if len(children) > 1:
                rep = children[0]
                for child in children:
                    self.peg.merge_node_to_rep(child, rep)
                check_nodes.push(rep)