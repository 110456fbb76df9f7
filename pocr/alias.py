"""Alias analysis as CFL-reachability over program expression graphs."""

from __future__ import annotations

import os
import time
from enum import IntEnum
from typing import AbstractSet, Dict, Iterable, Iterator, List, Optional, Set, Tuple, Union

from .aastat import TIME_INTERVAL, AAStat
from .cflbase import CFLBase, CFLItem
from .peg import PEG, PEGEdgeKind
from .pegfold import PEGFold
from .peginterdyck import PEGInterDyck
from .utils import CFLOptions, Label

PathLike = Union[str, "os.PathLike[str]"]


class Word(IntEnum):
    """Grammar symbols of the alias grammar; ``FAULT`` means "no symbol"."""

    FAULT = 0
    a = 1
    abar = 2
    d = 3
    dbar = 4
    f = 5
    fbar = 6
    M = 7
    V = 8
    DV = 9
    A = 10
    Abar = 11
    FV = 12


_FAULT = frozenset({Label(Word.FAULT, 0)})


def _one(word: Word, index: int = 0) -> AbstractSet[Label]:
    return frozenset({Label(word, index)})


class _SCCDetection:
    """Strongly connected components of a PEG over all its edges."""

    def __init__(self, graph: PEG) -> None:
        self.graph = graph
        self.topo_stack: List[int] = []
        self._subs: Dict[int, Set[int]] = {}

    def _succs(self, node_id: int) -> Iterator[int]:
        return iter(sorted({edge.dst_id for edge in self.graph.get_node(node_id).out_edges}))

    def sub_nodes(self, rep_id: int) -> Set[int]:
        return self._subs.get(rep_id, {rep_id})

    def find(self) -> None:
        """Find components; ``topo_stack`` ends with the topologically first ones."""
        self.topo_stack = []
        self._subs = {}
        index: Dict[int, int] = {}
        low: Dict[int, int] = {}
        stack: List[int] = []
        on_stack: Set[int] = set()
        counter = 0

        for start in list(self.graph):
            if start in index:
                continue
            index[start] = low[start] = counter
            counter += 1
            stack.append(start)
            on_stack.add(start)
            work: List[Tuple[int, Iterator[int]]] = [(start, self._succs(start))]
            while work:
                v, successors = work[-1]
                advanced = False
                for w in successors:
                    if w not in index:
                        index[w] = low[w] = counter
                        counter += 1
                        stack.append(w)
                        on_stack.add(w)
                        work.append((w, self._succs(w)))
                        advanced = True
                        break
                    if w in on_stack:
                        low[v] = min(low[v], index[w])
                if advanced:
                    continue
                work.pop()
                if work:
                    parent = work[-1][0]
                    low[parent] = min(low[parent], low[v])
                if low[v] == index[v]:
                    component: Set[int] = set()
                    while True:
                        w = stack.pop()
                        on_stack.discard(w)
                        component.add(w)
                        if w == v:
                            break
                    self._subs[v] = component
                    self.topo_stack.append(v)


class AliasAnalysis(CFLBase):
    """Base of the alias analyses: graph loading, simplification and bookkeeping."""

    def __init__(self, graph_name: PathLike, options: Optional[CFLOptions] = None) -> None:
        super().__init__()
        self.graph_name = graph_name
        self.options = options if options is not None else CFLOptions()
        self.reanalyze = False
        self.graph: Optional[PEG] = None
        self.scc: Optional[_SCCDetection] = None
        self.peg_fold: Optional[PEGFold] = None
        self.inter_dyck: Optional[PEGInterDyck] = None
        self.stat = AAStat(self)
        self._deadline: Optional[float] = None

    def _require_graph(self) -> PEG:
        if self.graph is None:
            raise RuntimeError("the analysis has no graph; call initialize first")
        return self.graph

    # running
    def analyze(self) -> None:
        """Read the graph, solve to a fixed point and report statistics.

        Raises TimeoutError when the configured time limit is exceeded.
        """
        self.initialize()
        if self.options.time_out is not None:
            self._deadline = time.monotonic() + self.options.time_out
        try:
            prop_start = self.stat.clock()
            while True:
                self.stat.num_of_iteration += 1
                self.reanalyze = False
                if self.options.solve_cfl:
                    self.solve()
                self._check_deadline()
                if not self.reanalyze:
                    break
            prop_end = self.stat.clock()
            self.stat.time_of_solving += (prop_end - prop_start) / TIME_INTERVAL
        finally:
            self._deadline = None
        self.finalize()

    def _check_deadline(self) -> None:
        if self._deadline is not None and time.monotonic() >= self._deadline:
            raise TimeoutError("Time out!!")

    def initialize(self) -> None:
        graph = PEG()
        graph.read_graph(self.graph_name)
        self.graph = graph
        self.stat = AAStat(self)
        self.stat.set_mem_usage_before()
        self.simplify_graph()
        self.init_solver()

    def init_solver(self) -> None:
        """Seed the solver with the graph's edges; subclasses decide how."""
        raise NotImplementedError(f"{type(self).__name__} does not define init_solver")

    def finalize(self) -> None:
        self.stat.set_mem_usage_after()
        self.dump_stat()
        if self.options.out_graph_fname:
            self._require_graph().write_graph(self.options.out_graph_fname)

    # worklist and data
    def pop_from_worklist(self) -> CFLItem:
        self._check_deadline()
        return super().pop_from_worklist()

    def push_into_worklist(self, src: int, dst: int, label: Label, primary: bool = True) -> bool:
        if label.symbol == Word.FAULT:
            return False
        return super().push_into_worklist(src, dst, label, primary)

    def unary_summ(self, label: Label) -> AbstractSet[Label]:
        return frozenset()

    def binary_summ(self, left: Label, right: Label) -> AbstractSet[Label]:
        return frozenset()

    def check_and_add_edge(self, src: int, dst: int, label: Label) -> bool:
        if not label.symbol:
            return False
        self.stat.checks += 1
        return self.cfl_data.check_and_add_edge(src, dst, label)

    def check_and_add_edges_from(self, src: int, dsts: Iterable[int], label: Label) -> Set[int]:
        if not label.symbol:
            return set()
        dsts = set(dsts)
        self.stat.checks += len(dsts)
        return self.cfl_data.check_and_add_edges_from(src, dsts, label)

    def check_and_add_edges_to(self, srcs: Iterable[int], dst: int, label: Label) -> Set[int]:
        if not label.symbol:
            return set()
        srcs = set(srcs)
        self.stat.checks += len(srcs)
        return self.cfl_data.check_and_add_edges_to(srcs, dst, label)

    # statistics
    def dump_stat(self) -> None:
        if self.stat is not None:
            self.stat.perform_stat()

    def count_sum_edges(self) -> None:
        """Count all summary edges, and V edges separately."""
        self.stat.num_of_sum_edges = 0
        for _src, by_label in self.cfl_data.items():
            for label, dsts in by_label.items():
                self.stat.num_of_sum_edges += len(dsts)
                if label.symbol == Word.V:
                    self.stat.num_of_s_edges += len(dsts)

    # graph simplification
    def simplify_graph(self) -> None:
        start = self.stat.clock()
        if self.options.scc or self.options.graph_simp:
            self.scc_elimination()
        if self.options.gf or self.options.graph_simp:
            self.graph_folding()
        if self.options.inter_dyck:
            self.inter_dyck_gs()
        self.stat.gs_time = (self.stat.clock() - start) / TIME_INTERVAL

    def graph_folding(self) -> None:
        start = self.stat.clock()
        if self.peg_fold is None:
            self.peg_fold = PEGFold(self._require_graph())
        self.peg_fold.fold_graph()
        self.peg_fold.merge_deref()
        self.stat.gf_time = (self.stat.clock() - start) / TIME_INTERVAL

    def inter_dyck_gs(self) -> None:
        start = self.stat.clock()
        if self.inter_dyck is None:
            self.inter_dyck = PEGInterDyck(self._require_graph())
        self.inter_dyck.build_sub_graph()
        self.inter_dyck.fast_dyck()
        self.inter_dyck.prune_edges()
        self.inter_dyck = None
        self.stat.inter_dyck_time = (self.stat.clock() - start) / TIME_INTERVAL

    def scc_elimination(self) -> None:
        start = self.stat.clock()
        if self.scc is None:
            self.scc = _SCCDetection(self._require_graph())
        self.scc_detect()
        self.stat.scc_time = (self.stat.clock() - start) / TIME_INTERVAL

    def scc_detect(self) -> None:
        if self.scc is None:
            self.scc = _SCCDetection(self._require_graph())
        self.scc.find()
        self.merge_scc_cycle()

    def merge_scc_cycle(self) -> None:
        """Merge each component into its representative, topologically first components first."""
        if self.scc is None:
            raise RuntimeError("no strongly connected components have been found")
        for rep_id in reversed(self.scc.topo_stack):
            self.merge_scc_nodes(rep_id, self.scc.sub_nodes(rep_id))

    def merge_scc_nodes(self, rep_id: int, sub_nodes: Iterable[int]) -> None:
        graph = self._require_graph()
        for sub_id in sorted(sub_nodes):
            if sub_id != rep_id:
                graph.merge_node_to_rep(sub_id, rep_id)


class StdAA(AliasAnalysis):
    """The standard worklist solver for the alias grammar."""

    def init_solver(self) -> None:
        graph = self._require_graph()
        seeds = {
            PEGEdgeKind.ASGN: (Word.a, Word.abar),
            PEGEdgeKind.GEP: (Word.f, Word.fbar),
            PEGEdgeKind.DEREF: (Word.d, Word.dbar),
        }
        for edge in graph.edges:
            words = seeds.get(edge.kind)
            if words is None:
                continue
            index = edge.idx if edge.kind == PEGEdgeKind.GEP else 0
            forward, backward = Label(words[0], index), Label(words[1], index)
            self.check_and_add_edge(edge.src_id, edge.dst_id, forward)
            self.check_and_add_edge(edge.dst_id, edge.src_id, backward)
            self.push_into_worklist(edge.src_id, edge.dst_id, forward)
            self.push_into_worklist(edge.dst_id, edge.src_id, backward)

        # V ::= epsilon
        for node_id in graph:
            self.check_and_add_edge(node_id, node_id, Label(Word.V, 0))
            self.push_into_worklist(node_id, node_id, Label(Word.V, 0))
            self.check_and_add_edge(node_id, node_id, Label(Word.A, 0))
            self.check_and_add_edge(node_id, node_id, Label(Word.Abar, 0))

    def binary_summ(self, left: Label, right: Label) -> AbstractSet[Label]:
        lw, rw = left.symbol, right.symbol
        if lw == Word.A and rw == Word.A:
            return _one(Word.A)
        if lw == Word.Abar and rw == Word.Abar:
            return _one(Word.Abar)
        return _rewritten_binary_summ(left, right)

    def unary_summ(self, label: Label) -> AbstractSet[Label]:
        word = label.symbol
        if word == Word.M:
            return _one(Word.V)
        if word == Word.a:
            return _one(Word.A)
        if word == Word.abar:
            return _one(Word.Abar)
        return _FAULT


def _rewritten_binary_summ(left: Label, right: Label) -> AbstractSet[Label]:
    """Binary rules of the alias grammar without the transitive A and Abar rules."""
    lw, rw = left.symbol, right.symbol
    if lw == Word.a and rw == Word.M:
        return _one(Word.A)
    if lw == Word.M and rw == Word.abar:
        return _one(Word.Abar)
    if lw == Word.Abar and rw == Word.V:
        return _one(Word.V)
    if lw == Word.V and rw == Word.A:
        return _one(Word.V)
    if lw == Word.dbar and rw == Word.V:
        return _one(Word.DV)
    if lw == Word.DV and rw == Word.d:
        return _one(Word.M)
    if lw == Word.fbar and rw == Word.V:
        return _one(Word.FV, left.index)
    if lw == Word.FV and rw == Word.f and left.index == right.index:
        return _one(Word.V)
    return _FAULT


class GRAA(StdAA):
    """The standard solver with the rewritten grammar (no transitive A rules)."""

    def binary_summ(self, left: Label, right: Label) -> AbstractSet[Label]:
        return _rewritten_binary_summ(left, right)