"""Statistics gathered while running an alias analysis."""

from __future__ import annotations

import time
from typing import TYPE_CHECKING, Dict, Tuple, Union

if TYPE_CHECKING:  # pragma: no cover
    from .alias import AliasAnalysis

TIME_INTERVAL = 1000.0
_STATUS_FILE = "/proc/self/status"


def _memory_usage_kb() -> Tuple[int, int]:
    """Return ``(resident, virtual)`` memory of this process in KB, or zeros if unknown."""
    values = {"VmRSS:": 0, "VmSize:": 0}
    try:
        with open(_STATUS_FILE, encoding="ascii", errors="replace") as status:
            for line in status:
                words = line.split()
                if len(words) >= 2 and words[0] in values:
                    values[words[0]] = int(words[1])
    except (OSError, ValueError):
        return 0, 0
    return values["VmRSS:"], values["VmSize:"]


def _format_value(value: Union[int, float]) -> str:
    if isinstance(value, float):
        return f"{value:g}"
    return str(value)


class AAStat:
    """Counters, timers and memory figures of one alias analysis run."""

    def __init__(self, aa: "AliasAnalysis") -> None:
        self.aa = aa

        self.num_of_iteration = 0
        self.checks = 0
        self.num_of_sum_edges = 0
        self.num_of_s_edges = 0
        self.num_of_nodes = 0
        self.num_of_edges = 0

        self.time_of_solving = 0.0
        self.start_time = 0.0
        self.end_time = 0.0
        self.scc_time = 0.0
        self.gf_time = 0.0
        self.inter_dyck_time = 0.0
        self.gs_time = 0.0

        self.num_stats: Dict[str, int] = {}
        self.time_stats: Dict[str, float] = {}

        self.vmrss_before = 0
        self.vmrss_after = 0
        self.vmsize_before = 0
        self.vmsize_after = 0

        self.start_clock()

    def start_clock(self) -> None:
        self.start_time = self.clock()

    def end_clock(self) -> None:
        self.end_time = self.clock()

    @staticmethod
    def clock() -> float:
        """Return the current time in milliseconds."""
        return time.perf_counter() * 1000.0

    def set_mem_usage_before(self) -> None:
        self.vmrss_before, self.vmsize_before = _memory_usage_kb()

    def set_mem_usage_after(self) -> None:
        self.vmrss_after, self.vmsize_after = _memory_usage_kb()

    def perform_stat(self) -> None:
        """Print graph figures and, when enabled, the analysis figures."""
        self.end_clock()
        options = self.aa.options

        if options.graph_stat:
            self.peg_stat()

        if not options.p_stat:
            return

        self.aa.count_sum_edges()

        self.time_stats["AnalysisTime"] = self.time_of_solving
        self.time_stats["VmrssInGB"] = (self.vmrss_after - self.vmrss_before) / 1024.0 / 1024.0
        self.num_stats["#Checks"] = self.checks
        self.num_stats["#SumEdges"] = self.num_of_sum_edges - self.num_of_edges
        self.num_stats["#SEdges"] = self.num_of_s_edges

        self.print_stat("CFL-reachability analysis Stats")

    def peg_stat(self) -> None:
        """Count the nodes and (bidirected) edges of the analysed graph and print them."""
        peg = self.aa.graph
        if peg is None:
            raise RuntimeError("the analysis has no graph")
        self.num_of_nodes += len(peg)
        self.num_of_edges += 2 * len(peg.edges)

        self.num_stats["#Nodes"] = self.num_of_nodes
        self.num_stats["#Edges"] = self.num_of_edges
        self.time_stats["GraphSimpTime"] = self.gs_time

        self.print_stat("PEG Stats")

    def print_stat(self, title: str = "") -> None:
        """Print the recorded time figures, then the counts, and forget them."""
        lines = [f"{name}\t{_format_value(value)}" for name, value in self.time_stats.items()]
        lines += [f"{name}\t{_format_value(value)}" for name, value in self.num_stats.items()]
        if lines:
            print("\n".join(lines), flush=True)
        self.num_stats.clear()
        self.time_stats.clear()