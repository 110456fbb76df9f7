"""Edge-critical graphs: incremental transitive reachability with reduced edges."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Dict, Iterable, Iterator, List, Set, TypeVar, Union

N = TypeVar("N")


def _depth_first(start: N, expand: Callable[[N], Iterable[N]]) -> None:
    """Walk depth-first; ``expand`` does a node's entry work and yields nodes to descend into.

    The yielded iterable is consumed lazily, so a child is only chosen after
    the previous child has been fully explored, as in plain recursion.
    """
    stack: List[Iterator[N]] = [iter(expand(start))]
    done = object()
    while stack:
        nxt = next(stack[-1], done)
        if nxt is done:
            stack.pop()
        else:
            stack.append(iter(expand(nxt)))


@dataclass(eq=False)
class ECGNode:
    """A node of an edge-critical graph."""

    id: int
    successors: Set["ECGNode"] = field(default_factory=set, repr=False)
    predecessors: Set["ECGNode"] = field(default_factory=set, repr=False)

    def __eq__(self, other: object) -> bool:
        return isinstance(other, ECGNode) and other.id == self.id

    def __hash__(self) -> int:
        return hash(self.id)

    def __lt__(self, other: "ECGNode") -> bool:
        return self.id < other.id


class VisitedStack:
    """A stack with constant-time membership tests."""

    def __init__(self) -> None:
        self._stack: List[ECGNode] = []
        self._set: Set[ECGNode] = set()

    def top(self) -> ECGNode:
        if not self._stack:
            raise IndexError("top of an empty stack")
        return self._stack[-1]

    def push(self, node: ECGNode) -> None:
        self._set.add(node)
        self._stack.append(node)

    def pop(self) -> ECGNode:
        node = self._stack.pop()
        self._set.discard(node)
        return node

    def __contains__(self, node: object) -> bool:
        return node in self._set

    def __len__(self) -> int:
        return len(self._stack)


NodeRef = Union[int, ECGNode]


class ECG:
    """Edge-critical graph keeping the reachability closure of inserted arcs."""

    def __init__(self, simplify_cycles: bool = False) -> None:
        self.simplify_cycles = simplify_cycles
        self.checks = 0
        self.node_to_rep: Dict[int, int] = {}
        self.nodes: Dict[int, ECGNode] = {}
        self.reachable: Dict[int, Set[int]] = {}
        self._new_edges: Dict[int, Set[int]] = {}
        self.visited: VisitedStack = VisitedStack()

    # nodes
    def add_node(self, node_id: int) -> None:
        self.nodes[node_id] = ECGNode(node_id)
        self.set_reachable(node_id, node_id)

    def rep_node_id(self, node_id: int) -> int:
        return self.node_to_rep.get(node_id, node_id)

    def get_node(self, node_id: int) -> ECGNode:
        try:
            return self.nodes[node_id]
        except KeyError:
            raise KeyError(f"node {node_id} not found") from None

    def _node(self, ref: NodeRef) -> ECGNode:
        return ref if isinstance(ref, ECGNode) else self.get_node(ref)

    # edges
    def has_edge(self, src: int, dst: int) -> bool:
        return self.get_node(dst) in self.get_node(src).successors

    def add_edge(self, src: NodeRef, dst: NodeRef) -> None:
        src_node, dst_node = self._node(src), self._node(dst)
        src_node.successors.add(dst_node)
        dst_node.predecessors.add(src_node)

    def remove_edge(self, src: NodeRef, dst: NodeRef) -> None:
        src_node, dst_node = self._node(src), self._node(dst)
        src_node.successors.discard(dst_node)
        dst_node.predecessors.discard(src_node)

    # reachability
    def is_reachable(self, node: int, target: int) -> bool:
        self.checks += 1
        return target in self.reachable.get(node, ())

    def set_reachable(self, node: int, target: int) -> None:
        self.reachable.setdefault(node, set()).add(target)

    def record_new_edge(self, node: int, target: int) -> None:
        self._new_edges.setdefault(node, set()).add(target)

    # insertion
    def insert_forward_edge(self, i: int, j: int) -> Dict[int, Set[int]]:
        """Insert i -> j where j does not reach i; return newly reachable pairs."""
        self._new_edges = {}
        vi, vj = self.get_node(i), self.get_node(j)
        self.search_backward(vi, vj)
        self.add_edge(vi, vj)
        return self._new_edges

    def insert_back_edge(self, i: int, j: int) -> Dict[int, Set[int]]:
        """Insert i -> j where j already reaches i; return newly reachable pairs."""
        self._new_edges = {}
        vi, vj = self.get_node(i), self.get_node(j)
        self.search_backward_in_cycle(vi, vj)
        self.add_edge(vi, vj)
        if self.simplify_cycles:
            self.simplify_cycle(vi)
        return self._new_edges

    def search_forward(self, vi: ECGNode, vj: ECGNode) -> None:
        """Make everything reachable from ``vj`` reachable from ``vi``."""

        def expand(v: ECGNode) -> Iterable[ECGNode]:
            self.set_reachable(vi.id, v.id)
            self.record_new_edge(vi.id, v.id)
            return (s for s in list(v.successors) if not self.is_reachable(vi.id, s.id))

        _depth_first(vj, expand)

    def search_backward(self, vi: ECGNode, vj: ECGNode) -> None:
        """Propagate reachability of ``vj`` backwards, dropping edges made redundant."""

        def expand(v: ECGNode) -> Iterable[ECGNode]:
            redundant = [
                succ for succ in v.successors
                if self.is_reachable(vj.id, succ.id) and vj.id != succ.id
            ]
            for succ in reversed(redundant):
                self.remove_edge(v, succ)
            self.search_forward(v, vj)
            return (p for p in list(v.predecessors) if not self.is_reachable(p.id, vj.id))

        _depth_first(vi, expand)

    def search_backward_in_cycle(self, vi: ECGNode, vj: ECGNode) -> None:
        """Propagate reachability of ``vj`` backwards without removing edges."""

        def expand(v: ECGNode) -> Iterable[ECGNode]:
            self.search_forward(v, vj)
            return (p for p in list(v.predecessors) if not self.is_reachable(p.id, vj.id))

        _depth_first(vi, expand)

    def simplify_cycle(self, vi: ECGNode) -> None:
        """Reduce the cycle through ``vi`` to a single chain closing back at ``vi``."""
        self.visited = VisitedStack()
        self.step_into(vi)
        last = self.visited.top()
        if last is not vi:
            self.add_edge(last, vi)

    def step_into(self, vi: ECGNode) -> None:
        visited = self.visited

        def expand(v: ECGNode) -> Iterator[ECGNode]:
            visited.push(v)
            in_cycle = [s for s in v.successors if self.is_reachable(s.id, v.id)]
            for succ in reversed(in_cycle):
                if succ in visited:
                    self.remove_edge(v, succ)
                    continue
                last = visited.top()
                if last is not v:
                    self.remove_edge(v, succ)
                    self.add_edge(last, succ)
                yield succ

        _depth_first(vi, expand)

    # statistics
    def count_reachable_pairs(self) -> int:
        return sum(len(targets) for targets in self.reachable.values())

    def count_ecg_edges(self) -> int:
        """Print and return the number of edges kept in the graph."""
        total = sum(len(node.successors) for node in self.nodes.values())
        print(f"#ECGEdge\t{total}")
        return total


class BSECG:
    """Edge-critical graph kept as plain successor and predecessor sets."""

    _EMPTY: frozenset = frozenset()

    def __init__(self) -> None:
        self.pred_map: Dict[int, Set[int]] = {}
        self.succ_map: Dict[int, Set[int]] = {}
        self.reachable: Dict[int, Set[int]] = {}

    def add_node(self, node_id: int) -> None:
        self.set_reachable(node_id, node_id)

    def get_succs(self, node_id: int) -> Set[int]:
        return self.succ_map.get(node_id, self._EMPTY)

    def get_preds(self, node_id: int) -> Set[int]:
        return self.pred_map.get(node_id, self._EMPTY)

    def has_edge(self, src: int, dst: int) -> bool:
        return dst in self.succ_map.get(src, ())

    def add_edge(self, src: int, dst: int) -> None:
        self.succ_map.setdefault(src, set()).add(dst)
        self.pred_map.setdefault(dst, set()).add(src)

    def remove_edge(self, src: int, dst: int) -> None:
        self.succ_map.setdefault(src, set()).discard(dst)
        self.pred_map.setdefault(dst, set()).discard(src)

    def is_reachable(self, node: int, target: int) -> bool:
        return target in self.reachable.get(node, ())

    def set_reachable(self, node: int, target: int) -> None:
        self.reachable.setdefault(node, set()).add(target)

    def insert_forth_edge(self, i: int, j: int) -> None:
        self.search_back(i, j)
        self.add_edge(i, j)

    def insert_back_edge(self, i: int, j: int) -> None:
        self.search_back_in_cycle(i, j)
        self.add_edge(i, j)

    def search_forth(self, i: int, j: int) -> None:
        def expand(v: int) -> Iterable[int]:
            self.set_reachable(i, v)
            return (s for s in list(self.get_succs(v)) if not self.is_reachable(i, s))

        _depth_first(j, expand)

    def search_back(self, i: int, j: int) -> None:
        def expand(v: int) -> Iterable[int]:
            redundant = [s for s in self.get_succs(v) if self.is_reachable(j, s)]
            for succ in reversed(redundant):
                self.remove_edge(v, succ)
            self.search_forth(v, j)
            return (p for p in list(self.get_preds(v)) if not self.is_reachable(p, j))

        _depth_first(i, expand)

    def search_back_in_cycle(self, i: int, j: int) -> None:
        def expand(v: int) -> Iterable[int]:
            self.search_forth(v, j)
            return (p for p in list(self.get_preds(v)) if not self.is_reachable(p, j))

        _depth_first(i, expand)