"""Pruning of PEG edges that cannot take part in matched dereference or field paths."""

from __future__ import annotations

import os
from typing import Dict, Optional, Set, Tuple, Union

from .peg import PEG, PEGEdgeKind
from .utils import WorkList

PathLike = Union[str, "os.PathLike[str]"]
Lbl = Tuple[int, int]


class PEGInterDyck:
    """Approximates Dyck reachability on a copy of a PEG to prune the original."""

    def __init__(self, peg: PEG) -> None:
        self.peg = peg
        self.sub_graph: Optional[PEG] = None
        self._rep_subs: Dict[int, Set[int]] = {}
        self.anchors: Dict[int, Set[Lbl]] = {}
        self._worklist: WorkList[int] = WorkList()

    def _require_sub_graph(self) -> PEG:
        if self.sub_graph is None:
            raise RuntimeError("build_sub_graph must be called first")
        return self.sub_graph

    def build_sub_graph(self) -> None:
        """Copy the PEG and collapse every assignment edge."""
        sub = self.peg.copy()
        self.sub_graph = sub
        pairs: WorkList[Tuple[int, int]] = WorkList(
            (edge.src_id, edge.dst_id)
            for edge in sub.edges
            if edge.kind == PEGEdgeKind.ASGN and edge.src_id != edge.dst_id
        )
        while pairs:
            src, dst = pairs.pop()
            sub.merge_node_to_rep(sub.rep_node_id(dst), sub.rep_node_id(src))

    def fast_dyck(self) -> None:
        """Merge targets of equally labelled edges leaving one node until none remain."""
        sub = self._require_sub_graph()
        for node_id in list(sub):
            self.to_worklist(node_id)
        while self._worklist:
            rep = self._worklist.pop()
            for sub_id in sorted(self._rep_subs.get(rep, ())):
                sub.merge_node_to_rep(sub.rep_node_id(sub_id), sub.rep_node_id(rep))
            self.to_worklist(sub.rep_node_id(rep))

    def to_worklist(self, node_id: int) -> None:
        """Queue nodes reached from ``node_id`` by more than one edge with the same label."""
        sub = self._require_sub_graph()
        by_label: Dict[Lbl, Set[int]] = {}
        for edge in sub.get_node(node_id).out_edges:
            by_label.setdefault((int(edge.kind), edge.idx), set()).add(edge.dst_id)
        for lbl in sorted(by_label):
            targets = by_label[lbl]
            if len(targets) > 1:
                rep = min(targets)
                self._worklist.push(rep)
                self._rep_subs[rep] = set(targets)
                self.anchors.setdefault(node_id, set()).add(lbl)

    def prune_edges(self) -> None:
        """Remove from the PEG every non-assignment edge that no anchor uses."""
        sub = self._require_sub_graph()
        for node_id, labels in self.anchors.items():
            rep = sub.rep_node_id(node_id)
            for sub_id in sorted(sub.sub_node_ids(rep)):
                for edge in self.peg.get_node(sub_id).out_edges:
                    if (int(edge.kind), edge.idx) in labels:
                        edge.dyck_contributing = True

        doomed = [
            edge for edge in self.peg.edges
            if edge.kind != PEGEdgeKind.ASGN and not edge.dyck_contributing
        ]
        for edge in doomed:
            self.peg.remove_edge(edge)

    def write_sub_graph(self, path: PathLike) -> None:
        """Write the collapsed graph as tab-separated ``src dst a|d|f [offset]`` lines."""
        sub = self._require_sub_graph()
        with open(path, "w", encoding="utf-8") as out:
            for edge in sub.edges:
                if edge.kind == PEGEdgeKind.ASGN:
                    out.write(f"{edge.src_id}\t{edge.dst_id}\ta\n")
                elif edge.kind == PEGEdgeKind.DEREF:
                    out.write(f"{edge.src_id}\t{edge.dst_id}\td\n")
                elif edge.kind == PEGEdgeKind.GEP:
                    out.write(f"{edge.src_id}\t{edge.dst_id}\tf\t{edge.idx}\n")