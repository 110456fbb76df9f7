"""Interprocedural value-flow graphs: direct, call and return edges."""

from __future__ import annotations

import os
from enum import IntEnum
from typing import Dict, Tuple, Union

from .graph import NodeRef, RepGraph

PathLike = Union[str, "os.PathLike[str]"]


class IVFGEdgeKind(IntEnum):
    DIRECT_VF = 0
    CALL_VF = 1
    RET_VF = 2


_READ_LABELS: Dict[str, IVFGEdgeKind] = {
    "a": IVFGEdgeKind.DIRECT_VF,
    "call_i": IVFGEdgeKind.CALL_VF,
    "ret_i": IVFGEdgeKind.RET_VF,
}

_WRITE_LABELS: Tuple[Tuple[IVFGEdgeKind, str], ...] = (
    (IVFGEdgeKind.DIRECT_VF, "a"),
    (IVFGEdgeKind.CALL_VF, "call_i"),
    (IVFGEdgeKind.RET_VF, "ret_i"),
)


class IVFG(RepGraph):
    """A value-flow graph; direct value-flow edges are the direct edges."""

    direct_edge_kinds = frozenset({IVFGEdgeKind.DIRECT_VF})

    def add_edge(self, src: NodeRef, dst: NodeRef, kind: int, idx: int = 0) -> bool:
        """Add an edge; direct value-flow self-loops are refused."""
        src_node, dst_node = self._resolve(src), self._resolve(dst)
        if kind == IVFGEdgeKind.DIRECT_VF and src_node is dst_node:
            return False
        return super().add_edge(src_node, dst_node, IVFGEdgeKind(kind), idx)

    def read_graph(self, path: PathLike) -> None:
        """Read tab-separated ``src dst label [callsite]`` lines.

        Labels ``a``, ``call_i`` and ``ret_i`` give edges, ``src`` marks the
        source node; any other label only adds the two nodes.
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
                if label == "src":
                    self.get_node(src).is_src = True
                    continue
                kind = _READ_LABELS.get(label)
                if kind is None:
                    continue
                if kind is IVFGEdgeKind.DIRECT_VF:
                    self.add_edge(src, dst, kind)
                else:
                    if len(fields) < 4:
                        raise ValueError(f"{path}:{line_no}: {label} edge without a callsite")
                    self.add_edge(src, dst, kind, int(fields[3]))

    def copy(self) -> "IVFG":
        """Return an independent copy holding the nodes that have edges."""
        clone = IVFG()
        for node_id in self:
            node = self.nodes[node_id]
            if node.has_incoming_edge() or node.has_outgoing_edge():
                clone.add_node(node_id)
        for edge in self.edges:
            clone.add_edge(edge.src_id, edge.dst_id, edge.kind, edge.idx)
        return clone

    def write_graph(self, path: PathLike) -> None:
        """Write every edge in the format read by :meth:`read_graph`."""
        with open(path, "w", encoding="utf-8") as out:
            for src in self:
                node = self.get_node(src)
                for kind, label in _WRITE_LABELS:
                    for edge in sorted(node.out_edges_of_kind(kind)):
                        if kind is IVFGEdgeKind.DIRECT_VF:
                            out.write(f"{src}\t{edge.dst_id}\t{label}\n")
                        else:
                            out.write(f"{src}\t{edge.dst_id}\t{label}\t{edge.idx}\n")