"""Basic types, options and helpers shared by the CFL-reachability solvers."""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from typing import Deque, Generic, Hashable, Iterable, List, NamedTuple, Optional, Set, Tuple, TypeVar

_WHITESPACE = " \n\r\t\f\v"

T = TypeVar("T", bound=Hashable)


class Label(NamedTuple):
    """An edge label: a grammar symbol and an optional index (e.g. a field offset)."""

    symbol: int
    index: int = 0


@dataclass
class CFLOptions:
    """Settings that control the analyses.

    ``time_out`` is in seconds; ``None`` means the analysis is not limited.
    """

    time_out: Optional[float] = None
    p_stat: bool = True
    solve_cfl: bool = True
    out_graph_fname: str = ""
    graph_stat: bool = False
    scc: bool = False
    gf: bool = False
    inter_dyck: bool = False
    graph_simp: bool = False
    ucfl: bool = False
    s_pairs_fname: str = ""
    ecg_scc: bool = False


class WorkList(Generic[T]):
    """First-in first-out worklist that holds each item at most once."""

    def __init__(self, items: Iterable[T] = ()) -> None:
        self._queue: Deque[T] = deque()
        self._members: Set[T] = set()
        for item in items:
            self.push(item)

    def push(self, item: T) -> bool:
        """Append ``item``; return False if it is already queued."""
        if item in self._members:
            return False
        self._members.add(item)
        self._queue.append(item)
        return True

    def pop(self) -> T:
        """Remove and return the oldest item; raise IndexError when empty."""
        if not self._queue:
            raise IndexError("pop from an empty worklist")
        item = self._queue.popleft()
        self._members.discard(item)
        return item

    def __contains__(self, item: object) -> bool:
        return item in self._members

    def __len__(self) -> int:
        return len(self._queue)

    def __bool__(self) -> bool:
        return bool(self._queue)


def strip(text: str) -> str:
    """Remove whitespace from both ends of ``text``."""
    return text.strip(_WHITESPACE)


def _is_readable_file(path: str) -> bool:
    try:
        with open(path, "rb"):
            return True
    except OSError:
        return False


def process_args(argv: List[str]) -> Tuple[List[str], List[str]]:
    """Split command-line words into option words and input files.

    The first word (the program name) always stays among the options; every
    later word naming a readable file is taken as an input file.
    """
    options: List[str] = []
    inputs: List[str] = []
    for position, word in enumerate(argv):
        if position > 0 and _is_readable_file(word):
            inputs.append(word)
        else:
            options.append(word)
    return options, inputs