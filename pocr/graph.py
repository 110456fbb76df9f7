"""Labelled multigraph with node merging, shared by the program and value-flow graphs."""

from __future__ import annotations

from typing import Dict, FrozenSet, Iterable, Iterator, List, Set, Tuple, Union

EdgeKey = Tuple[int, int, int, int]


class CFLEdge:
    """A labelled edge; two edges are equal when kind, ends and index agree."""

    __slots__ = ("src", "dst", "kind", "idx", "dyck_contributing")

    def __init__(self, src: "CFLNode", dst: "CFLNode", kind: int, idx: int = 0) -> None:
        self.src = src
        self.dst = dst
        self.kind = kind
        self.idx = idx
        self.dyck_contributing = False

    @property
    def src_id(self) -> int:
        return self.src.id

    @property
    def dst_id(self) -> int:
        return self.dst.id

    @property
    def key(self) -> EdgeKey:
        """The ordering key: kind, source id, target id, index."""
        return (self.kind, self.src.id, self.dst.id, self.idx)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, CFLEdge):
            return NotImplemented
        return self.key == other.key

    def __hash__(self) -> int:
        return hash(self.key)

    def __lt__(self, other: "CFLEdge") -> bool:
        return self.key < other.key

    def __repr__(self) -> str:
        return f"CFLEdge({self.src.id} -> {self.dst.id}, kind={int(self.kind)}, idx={self.idx})"


class CFLNode:
    """A graph node holding its incoming and outgoing edges, also grouped by kind."""

    def __init__(self, node_id: int, direct_kinds: Iterable[int] = ()) -> None:
        self.id = node_id
        self.direct_kinds: FrozenSet[int] = frozenset(direct_kinds)
        self.in_edges: Set[CFLEdge] = set()
        self.out_edges: Set[CFLEdge] = set()
        self.direct_in_edges: Set[CFLEdge] = set()
        self.direct_out_edges: Set[CFLEdge] = set()
        self.is_src = False
        self._in_by_kind: Dict[int, Set[CFLEdge]] = {}
        self._out_by_kind: Dict[int, Set[CFLEdge]] = {}

    def __repr__(self) -> str:
        return f"CFLNode({self.id})"

    def in_edges_of_kind(self, kind: int) -> Set[CFLEdge]:
        return self._in_by_kind.setdefault(kind, set())

    def out_edges_of_kind(self, kind: int) -> Set[CFLEdge]:
        return self._out_by_kind.setdefault(kind, set())

    @staticmethod
    def _insert(target: Set[CFLEdge], edge: CFLEdge) -> bool:
        if edge in target:
            return False
        target.add(edge)
        return True

    @staticmethod
    def _discard(target: Set[CFLEdge], edge: CFLEdge) -> bool:
        if edge not in target:
            return False
        target.discard(edge)
        return True

    def add_in_edge(self, edge: CFLEdge) -> bool:
        """Record an incoming edge; return True if it was new."""
        if edge.dst_id != self.id:
            raise ValueError(f"edge {edge!r} does not end at node {self.id}")
        added_all = self._insert(self.in_edges, edge)
        added_kind = self._insert(self.in_edges_of_kind(edge.kind), edge)
        if edge.kind in self.direct_kinds:
            self.direct_in_edges.add(edge)
        return added_all and added_kind

    def add_out_edge(self, edge: CFLEdge) -> bool:
        """Record an outgoing edge; return True if it was new."""
        if edge.src_id != self.id:
            raise ValueError(f"edge {edge!r} does not start at node {self.id}")
        added_all = self._insert(self.out_edges, edge)
        added_kind = self._insert(self.out_edges_of_kind(edge.kind), edge)
        if edge.kind in self.direct_kinds:
            self.direct_out_edges.add(edge)
        return added_all and added_kind

    def remove_in_edge(self, edge: CFLEdge) -> bool:
        removed_all = self._discard(self.in_edges, edge)
        removed_kind = self._discard(self.in_edges_of_kind(edge.kind), edge)
        if edge.kind in self.direct_kinds:
            self.direct_in_edges.discard(edge)
        return removed_all and removed_kind

    def remove_out_edge(self, edge: CFLEdge) -> bool:
        removed_all = self._discard(self.out_edges, edge)
        removed_kind = self._discard(self.out_edges_of_kind(edge.kind), edge)
        if edge.kind in self.direct_kinds:
            self.direct_out_edges.discard(edge)
        return removed_all and removed_kind

    def has_incoming_edge(self) -> bool:
        return bool(self.in_edges)

    def has_outgoing_edge(self) -> bool:
        return bool(self.out_edges)


NodeRef = Union[int, CFLNode]


class RepGraph:
    """A graph of CFL nodes in which nodes can be merged into representatives."""

    direct_edge_kinds: FrozenSet[int] = frozenset()

    def __init__(self) -> None:
        self.nodes: Dict[int, CFLNode] = {}
        self.node_to_rep: Dict[int, int] = {}
        self.node_to_subs: Dict[int, Set[int]] = {}
        self.max_node_id = 0
        self._edges: Dict[EdgeKey, CFLEdge] = {}

    # nodes
    def __iter__(self) -> Iterator[int]:
        """Iterate over node ids in increasing order."""
        return iter(sorted(self.nodes))

    def __len__(self) -> int:
        return len(self.nodes)

    def add_node(self, node_id: int) -> None:
        if self.has_node(node_id):
            return
        self.nodes[node_id] = CFLNode(node_id, self.direct_edge_kinds)
        self.max_node_id = max(self.max_node_id, node_id)

    def has_node(self, node_id: int) -> bool:
        return node_id in self.nodes

    def get_node(self, node_id: int) -> CFLNode:
        """Return the node standing for ``node_id`` (its representative if merged)."""
        rep_id = self.rep_node_id(node_id)
        try:
            return self.nodes[rep_id]
        except KeyError:
            raise KeyError(f"node {node_id} not found") from None

    def remove_node(self, node: CFLNode) -> None:
        """Drop ``node`` together with any edges still attached to it."""
        if self.nodes.get(node.id) is not node:
            raise KeyError(f"node {node.id} is not in the graph")
        for edge in sorted(node.in_edges | node.out_edges):
            if edge.key in self._edges:
                self.remove_edge(edge)
        del self.nodes[node.id]

    def _resolve(self, ref: NodeRef) -> CFLNode:
        return ref if isinstance(ref, CFLNode) else self.get_node(ref)

    def _ref_id(self, ref: NodeRef) -> int:
        return ref.id if isinstance(ref, CFLNode) else self.rep_node_id(ref)

    # edges
    @property
    def edges(self) -> List[CFLEdge]:
        """All edges, ordered by kind, source, target and index."""
        return sorted(self._edges.values(), key=lambda e: e.key)

    def has_edge(self, src: NodeRef, dst: NodeRef, kind: int, idx: int = 0) -> bool:
        return (kind, self._ref_id(src), self._ref_id(dst), idx) in self._edges

    def get_edge(self, src: NodeRef, dst: NodeRef, kind: int, idx: int = 0) -> CFLEdge:
        key = (kind, self._ref_id(src), self._ref_id(dst), idx)
        try:
            return self._edges[key]
        except KeyError:
            raise KeyError(f"no edge {key}") from None

    def add_edge(self, src: NodeRef, dst: NodeRef, kind: int, idx: int = 0) -> bool:
        """Add an edge between two nodes; return False if it already exists."""
        src_node, dst_node = self._resolve(src), self._resolve(dst)
        if self.has_edge(src_node, dst_node, kind, idx):
            return False
        edge = CFLEdge(src_node, dst_node, kind, idx)
        self._edges[edge.key] = edge
        src_node.add_out_edge(edge)
        dst_node.add_in_edge(edge)
        return True

    def remove_edge(self, edge: CFLEdge) -> None:
        stored = self._edges.pop(edge.key, None)
        if stored is None:
            raise KeyError(f"edge {edge!r} is not in the graph")
        stored.src.remove_out_edge(stored)
        stored.dst.remove_in_edge(stored)

    # representatives
    def rep_node_id(self, node_id: int) -> int:
        return self.node_to_rep.get(node_id, node_id)

    def sub_node_ids(self, node_id: int) -> Set[int]:
        """Return the ids merged into ``node_id``, including itself."""
        subs = self.node_to_subs.setdefault(node_id, set())
        subs.add(node_id)
        return subs

    def set_rep(self, node_id: int, rep_id: int) -> None:
        self.node_to_rep[node_id] = rep_id

    def set_subs(self, node_id: int, subs: Iterable[int]) -> None:
        self.node_to_subs.setdefault(node_id, set()).update(subs)

    def reset_subs(self, node_id: int) -> None:
        self.node_to_subs.pop(node_id, None)

    # merging
    def merge_node_to_rep(self, node_id: int, rep_id: int) -> None:
        """Move the edges of ``node_id`` onto ``rep_id`` and drop the node."""
        if node_id == rep_id or self.rep_node_id(node_id) != node_id:
            return
        node = self.get_node(node_id)
        self.move_edges_to_rep_node(node, self.get_node(rep_id))
        self.update_node_rep_and_subs(node.id, rep_id)
        self.remove_node(node)

    def retarget_dst_of_edge(self, edge: CFLEdge, new_dst: CFLNode) -> None:
        self.add_edge(edge.src_id, new_dst.id, edge.kind, edge.idx)
        self.remove_edge(edge)

    def retarget_src_of_edge(self, edge: CFLEdge, new_src: CFLNode) -> None:
        self.add_edge(new_src.id, edge.dst_id, edge.kind, edge.idx)
        self.remove_edge(edge)

    def move_in_edges_to_rep_node(self, node: CFLNode, rep: CFLNode) -> bool:
        """Retarget incoming edges to ``rep``; return True if any came from inside the merge."""
        inside: List[CFLEdge] = []
        outside: List[CFLEdge] = []
        for edge in sorted(node.in_edges):
            (inside if self.rep_node_id(edge.src_id) == rep.id else outside).append(edge)
        for edge in reversed(outside):
            self.retarget_dst_of_edge(edge, rep)
        for edge in reversed(inside):
            self.retarget_dst_of_edge(edge, rep)
        return bool(inside)

    def move_out_edges_to_rep_node(self, node: CFLNode, rep: CFLNode) -> bool:
        """Move outgoing edges onto ``rep``; return True if any led inside the merge."""
        inside: List[CFLEdge] = []
        outside: List[CFLEdge] = []
        for edge in sorted(node.out_edges):
            (inside if self.rep_node_id(edge.dst_id) == rep.id else outside).append(edge)
        for edge in reversed(outside):
            self.retarget_src_of_edge(edge, rep)
        for edge in reversed(inside):
            self.retarget_src_of_edge(edge, rep)
        return bool(inside)

    def move_edges_to_rep_node(self, node: CFLNode, rep: CFLNode) -> bool:
        moved_in = self.move_in_edges_to_rep_node(node, rep)
        moved_out = self.move_out_edges_to_rep_node(node, rep)
        return moved_in or moved_out

    def update_node_rep_and_subs(self, node_id: int, rep_id: int) -> None:
        self.set_rep(node_id, rep_id)
        node_subs = self.sub_node_ids(node_id)
        for sub_id in node_subs:
            self.set_rep(sub_id, rep_id)
        self.set_subs(rep_id, {node_id} | node_subs)
        self.reset_subs(node_id)