"""Graphs whose edge kinds are the symbols of a context-free grammar."""

from __future__ import annotations

import os
from typing import Union

from .cfg import CFG
from .graph import NodeRef, RepGraph

PathLike = Union[str, "os.PathLike[str]"]


class CFLGraph(RepGraph):
    """A labelled graph for CFL-reachability; an edge's kind is a grammar symbol id."""

    def __init__(self, grammar: CFG) -> None:
        super().__init__()
        self.grammar = grammar

    def add_edge(self, src: NodeRef, dst: NodeRef, kind: int, idx: int = 0) -> bool:
        """Add an edge labelled with symbol ``kind``; return False if it already exists."""
        return super().add_edge(src, dst, kind, idx)

    def read_graph(self, path: PathLike) -> None:
        """Read tab-separated ``src dst symbol [index]`` lines.

        Lines whose symbol is not in the grammar are skipped entirely. The
        index is used only when the symbol takes one.
        """
        with open(path, encoding="utf-8") as graph_file:
            for line_no, line in enumerate(graph_file, 1):
                fields = [word for word in line.rstrip("\r\n").split("\t") if word]
                if not fields:
                    continue
                if len(fields) < 3:
                    raise ValueError(f"{path}:{line_no}: expected source, target and label")
                src, dst, symbol = int(fields[0]), int(fields[1]), fields[2]
                if not self.grammar.has_symbol(symbol):
                    continue
                kind = self.grammar.symbol_id(symbol)
                self.add_node(src)
                self.add_node(dst)
                if len(fields) == 4 and self.grammar.is_variant_symbol(kind):
                    self.add_edge(src, dst, kind, int(fields[3]))
                else:
                    self.add_edge(src, dst, kind)

    def copy(self) -> "CFLGraph":
        """Return an independent copy, sharing the grammar, holding the nodes that have edges."""
        clone = CFLGraph(self.grammar)
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
                for edge in sorted(node.out_edges):
                    name = self.grammar.symbol_string(edge.kind)
                    if self.grammar.is_variant_symbol(edge.kind):
                        out.write(f"{src}\t{edge.dst_id}\t{name}\t{edge.idx}\n")
                    else:
                        out.write(f"{src}\t{edge.dst_id}\t{name}\n")