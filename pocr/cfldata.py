"""Adjacency storage for labelled summary edges and the hybrid tree index."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, Iterator, Optional, Set, Tuple, Union, overload

from .utils import Label

TypeMap = Dict[Label, Set[int]]


class CFLData:
    """Labelled edges kept both by source (successors) and by target (predecessors)."""

    def __init__(self) -> None:
        self.succ_map: Dict[int, TypeMap] = {}
        self.pred_map: Dict[int, TypeMap] = {}

    def clear(self) -> None:
        self.succ_map.clear()
        self.pred_map.clear()

    def __iter__(self) -> Iterator[int]:
        return iter(self.succ_map)

    def items(self) -> Iterator[Tuple[int, TypeMap]]:
        """Yield ``(source node, label -> targets)`` pairs."""
        return iter(self.succ_map.items())

    @staticmethod
    def _lookup(table: Dict[int, TypeMap], node: int, label: Optional[Label]) -> Union[TypeMap, Set[int]]:
        by_label = table.setdefault(node, {})
        if label is None:
            return by_label
        return by_label.setdefault(label, set())

    @overload
    def get_succs(self, node: int) -> TypeMap: ...

    @overload
    def get_succs(self, node: int, label: Label) -> Set[int]: ...

    def get_succs(self, node, label=None):
        """Return the successors of ``node``, all labels or one label (mutable, created if absent)."""
        return self._lookup(self.succ_map, node, label)

    @overload
    def get_preds(self, node: int) -> TypeMap: ...

    @overload
    def get_preds(self, node: int, label: Label) -> Set[int]: ...

    def get_preds(self, node, label=None):
        """Return the predecessors of ``node``, all labels or one label (mutable, created if absent)."""
        return self._lookup(self.pred_map, node, label)

    def add_edge(self, src: int, dst: int, label: Label) -> None:
        self.get_succs(src, label).add(dst)
        self.get_preds(dst, label).add(src)

    def add_edges_from(self, src: int, dsts: Iterable[int], label: Label) -> None:
        dsts = set(dsts)
        succs = self.get_succs(src, label)
        if dsts - succs:
            succs |= dsts
            for dst in dsts:
                self.get_preds(dst, label).add(src)

    def add_edges_to(self, srcs: Iterable[int], dst: int, label: Label) -> None:
        srcs = set(srcs)
        preds = self.get_preds(dst, label)
        if srcs - preds:
            preds |= srcs
            for src in srcs:
                self.get_succs(src, label).add(dst)

    def check_and_add_edge(self, src: int, dst: int, label: Label) -> bool:
        """Add the edge; return True if it was not present before."""
        self.get_succs(src, label).add(dst)
        preds = self.get_preds(dst, label)
        if src in preds:
            return False
        preds.add(src)
        return True

    def check_and_add_edges_from(self, src: int, dsts: Iterable[int], label: Label) -> Set[int]:
        """Add edges from ``src``; return the targets whose edge is new."""
        dsts = set(dsts)
        new_dsts: Set[int] = set()
        succs = self.get_succs(src, label)
        if dsts - succs:
            succs |= dsts
            for dst in dsts:
                preds = self.get_preds(dst, label)
                if src not in preds:
                    preds.add(src)
                    new_dsts.add(dst)
        return new_dsts

    def check_and_add_edges_to(self, srcs: Iterable[int], dst: int, label: Label) -> Set[int]:
        """Add edges into ``dst``; return the sources whose edge is new."""
        srcs = set(srcs)
        new_srcs: Set[int] = set()
        preds = self.get_preds(dst, label)
        if srcs - preds:
            preds |= srcs
            for src in srcs:
                succs = self.get_succs(src, label)
                if dst not in succs:
                    succs.add(dst)
                    new_srcs.add(src)
        return new_srcs

    def has_edge(self, src: int, dst: int, label: Label) -> bool:
        return dst in self.succ_map.get(src, {}).get(label, ())

    def clear_edges(self, node: int) -> None:
        """Drop the successor and predecessor tables kept under ``node``."""
        self.succ_map.setdefault(node, {}).clear()
        self.pred_map.setdefault(node, {}).clear()


@dataclass(eq=False)
class TreeNode:
    """A node of a reachability tree; children are kept in insertion order."""

    id: int
    children: Dict["TreeNode", None] = field(default_factory=dict, repr=False)

    def __lt__(self, other: "TreeNode") -> bool:
        return self.id < other.id


class HybridData:
    """Per-source spanning trees recording transitive reachability."""

    def __init__(self) -> None:
        self.checks = 0
        # ind_map[v][u] is the node for v in tree(u)
        self.ind_map: Dict[int, Dict[int, TreeNode]] = {}
        self._new_edges: Dict[int, Set[int]] = {}

    def has_ind(self, src: int, dst: int) -> bool:
        self.checks += 1
        return src in self.ind_map.get(dst, {})

    def add_ind(self, src: int, dst: int) -> Optional[TreeNode]:
        """Add node ``dst`` to tree(``src``); return it, or None if it was there."""
        self.checks += 1
        trees = self.ind_map.setdefault(dst, {})
        if src in trees:
            return None
        node = TreeNode(dst)
        trees[src] = node
        return node

    def get_node(self, src: int, dst: int) -> TreeNode:
        """Return the node ``dst`` in tree(``src``)."""
        return self.ind_map[dst][src]

    def insert_tree_edge(self, u: TreeNode, v: TreeNode) -> None:
        u.children[v] = None

    def add_arc(self, src: int, dst: int) -> Dict[int, Set[int]]:
        """Add the arc src -> dst; return the newly reachable pairs as source -> targets."""
        self._new_edges = {}
        if not self.has_ind(src, dst):
            dst_root = self.get_node(dst, dst)
            for root in list(self.ind_map.setdefault(src, {})):
                self.meld(root, self.get_node(root, src), dst_root)
        return self._new_edges

    def meld(self, x: int, u_node: TreeNode, v_node: TreeNode) -> None:
        """Graft the subtree under ``v_node`` into tree(``x``) below ``u_node``."""
        stack = [iter([(u_node, v_node)])]
        while stack:
            pair = next(stack[-1], None)
            if pair is None:
                stack.pop()
                continue
            parent, v = pair
            new_node = self.add_ind(x, v.id)
            if new_node is None:
                continue
            self.insert_tree_edge(parent, new_node)
            self._new_edges.setdefault(x, set()).add(v.id)
            stack.append(iter([(new_node, child) for child in v.children]))