"""Program expression graphs: assignment, dereference and field edges."""

from __future__ import annotations

import os
from enum import IntEnum
from typing import Dict, Tuple, Union

from .graph import NodeRef, RepGraph

PathLike = Union[str, "os.PathLike[str]"]


class PEGEdgeKind(IntEnum):
    ASGN = 0
    DEREF = 1
    GEP = 2


_READ_LABELS: Dict[str, PEGEdgeKind] = {
    "a": PEGEdgeKind.ASGN,
    "d": PEGEdgeKind.DEREF,
    "f_i": PEGEdgeKind.GEP,
}

_WRITE_LABELS: Tuple[Tuple[PEGEdgeKind, str, str], ...] = (
    (PEGEdgeKind.ASGN, "a", "abar"),
    (PEGEdgeKind.DEREF, "d", "dbar"),
    (PEGEdgeKind.GEP, "f_i", "fbar_i"),
)


class PEG(RepGraph):
    """A program expression graph; assignment edges are the direct edges."""

    direct_edge_kinds = frozenset({PEGEdgeKind.ASGN})

    def add_edge(self, src: NodeRef, dst: NodeRef, kind: int, idx: int = 0) -> bool:
        """Add an edge; assignment self-loops are refused."""
        src_node, dst_node = self._resolve(src), self._resolve(dst)
        if kind == PEGEdgeKind.ASGN and src_node is dst_node:
            return False
        return super().add_edge(src_node, dst_node, PEGEdgeKind(kind), idx)

    def read_graph(self, path: PathLike) -> None:
        """Read tab-separated ``src dst label [index]`` lines.

        Labels ``a``, ``d`` and ``f_i`` give edges; any other label only adds
        the two nodes.
        """
        with open(path, encoding="utf-8") as graph_file:
            for line_no, line in enumerate(graph_file, 1):
                fields = [word for word in line.rstrip("\r\n").split("\t") if word]
                if not fields:
                    continue
                if len(fields) < 3:
                    raise ValueError(f"{path}:{line_no}: expected source, target and label")
                src, dst, label = int(fields[0]), int(fields[1]), fields[2]
                self.add_node(src)
                self.add_node(dst)
                kind = _READ_LABELS.get(label)
                if kind is None:
                    continue
                if kind is PEGEdgeKind.GEP:
                    if len(fields) < 4:
                        raise ValueError(f"{path}:{line_no}: field edge without an offset")
                    self.add_edge(src, dst, kind, int(fields[3]))
                else:
                    self.add_edge(src, dst, kind)

    def copy(self) -> "PEG":
        """Return an independent copy holding the nodes that have edges."""
        clone = PEG()
        for node_id in self:
            node = self.nodes[node_id]
            if node.has_incoming_edge() or node.has_outgoing_edge():
                clone.add_node(node_id)
        for edge in self.edges:
            clone.add_edge(edge.src_id, edge.dst_id, edge.kind, edge.idx)
        return clone

    def write_graph(self, path: PathLike) -> None:
        """Write every edge together with its reversed (bar) edge."""
        with open(path, "w", encoding="utf-8") as out:
            for src in self:
                node = self.get_node(src)
                for kind, label, bar_label in _WRITE_LABELS:
                    for edge in sorted(node.out_edges_of_kind(kind)):
                        dst = edge.dst_id
                        if kind is PEGEdgeKind.GEP:
                            out.write(f"{src}\t{dst}\t{label}\t{edge.idx}\n")
                            out.write(f"{dst}\t{src}\t{bar_label}\t{edge.idx}\n")
                        else:
                            out.write(f"{src}\t{dst}\t{label}\n")
                            out.write(f"{dst}\t{src}\t{bar_label}\n")