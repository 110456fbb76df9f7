"""Context-free grammars read from text files, with the symbol sets used by the solvers."""

from __future__ import annotations

import os
import sys
from enum import Enum
from typing import Dict, FrozenSet, Set, Tuple, Union

from .utils import strip

PathLike = Union[str, "os.PathLike[str]"]

_EMPTY: FrozenSet[int] = frozenset()

_SECTION_HEADERS = {
    "Production:": "PRODUCTION",
    "Insert:": "INSERT",
    "Follow:": "FOLLOW",
    "Count:": "COUNT",
}


class LineType(Enum):
    """The section of a grammar file that the current line belongs to."""

    PRODUCTION = 0
    INSERT = 1
    FOLLOW = 2
    COUNT = 3


class CFG:
    """A grammar whose symbols are numbered from 1 in order of first appearance.

    Rules have at most two symbols on the right: ``X`` (empty), ``X ::= Y``
    (unary) and ``X ::= Y Z`` (binary).
    """

    def __init__(self) -> None:
        self.line_type = LineType.PRODUCTION
        self.num_of_symbols = 0
        self.symb_to_int: Dict[str, int] = {}
        self.int_to_symb: Dict[int, str] = {}
        self.variable_symbols: Set[int] = set()
        self.transitive_symbols: Set[int] = set()
        self.insert_symbols: Set[int] = set()
        self.follow_symbols: Set[int] = set()
        self.count_symbols: Set[int] = set()
        self.empty_rules: Set[int] = set()
        self.unary_rules: Dict[int, Set[int]] = {}
        self.binary_rules: Dict[Tuple[int, int], Set[int]] = {}

    # symbols
    def has_symbol(self, symbol: str) -> bool:
        return symbol in self.symb_to_int

    def add_symbol(self, symbol: str) -> None:
        """Number ``symbol`` if it is new; a name ending in ``_i`` takes an index."""
        if self.has_symbol(symbol):
            return
        self.num_of_symbols += 1
        self.symb_to_int[symbol] = self.num_of_symbols
        self.int_to_symb[self.num_of_symbols] = symbol
        position = symbol.find("_i")
        if position != -1 and position == len(symbol) - 2:
            self.variable_symbols.add(self.num_of_symbols)

    def symbol_id(self, symbol: str) -> int:
        try:
            return self.symb_to_int[symbol]
        except KeyError:
            raise KeyError(f"unknown grammar symbol {symbol!r}") from None

    def symbol_string(self, symbol_id: int) -> str:
        """Return the name of a symbol, or an empty string for an unknown id."""
        return self.int_to_symb.get(symbol_id, "")

    def is_variant_symbol(self, symbol_id: int) -> bool:
        return symbol_id in self.variable_symbols

    # rules
    def lhs_of_unary(self, rhs: int) -> FrozenSet[int]:
        """Return every ``X`` with a rule ``X ::= rhs``."""
        return frozenset(self.unary_rules.get(rhs, _EMPTY))

    def lhs_of_binary(self, left: int, right: int) -> FrozenSet[int]:
        """Return every ``X`` with a rule ``X ::= left right``."""
        return frozenset(self.binary_rules.get((left, right), _EMPTY))

    def is_transitive(self, symbol_id: int) -> bool:
        return symbol_id in self.transitive_symbols

    def is_insert_symbol(self, symbol_id: int) -> bool:
        return symbol_id in self.insert_symbols

    def is_count_symbol(self, symbol_id: int) -> bool:
        return symbol_id in self.count_symbols

    # parsing
    def parse_grammar(self, path: PathLike) -> None:
        """Read a grammar file, find transitive symbols and print a summary."""
        self.read_grammar_file(path)
        self.detect_transitive_symbols()
        self.print_stat()

    def read_grammar_file(self, path: PathLike) -> None:
        """Read productions and the Insert, Follow and Count symbol lists.

        When neither Insert nor Follow symbols are given, every symbol is an
        insert symbol.
        """
        with open(path, encoding="utf-8") as grammar_file:
            for raw_line in grammar_file:
                line = strip(raw_line)
                header = _SECTION_HEADERS.get(line)
                if header is not None:
                    self.line_type = LineType[header]
                    continue
                if self.line_type is LineType.PRODUCTION:
                    self.read_production(line)
                else:
                    self.read_ucfl_symbol(line, self.line_type)

        if not self.insert_symbols and not self.follow_symbols:
            self.insert_symbols.update(self.int_to_symb)

    def read_production(self, line: str) -> None:
        """Read a tab-separated rule: ``X``, ``X Y`` or ``X Y Z``."""
        words = [word for word in line.split("\t") if word]
        if not words or len(words) > 3:
            return
        for word in words:
            self.add_symbol(word)
        lhs = self.symbol_id(words[0])
        if len(words) == 1:
            self.empty_rules.add(lhs)
        elif len(words) == 2:
            self.unary_rules.setdefault(self.symbol_id(words[1]), set()).add(lhs)
        else:
            key = (self.symbol_id(words[1]), self.symbol_id(words[2]))
            self.binary_rules.setdefault(key, set()).add(lhs)

    def read_ucfl_symbol(self, line: str, line_type: LineType) -> None:
        """Read a comma-separated list of symbols into the set for ``line_type``."""
        targets = {
            LineType.INSERT: self.insert_symbols,
            LineType.FOLLOW: self.follow_symbols,
            LineType.COUNT: self.count_symbols,
        }
        target = targets.get(line_type)
        if target is None:
            return
        for word in line.split(","):
            symbol = strip(word)
            if not symbol:
                continue
            self.add_symbol(symbol)
            target.add(self.symbol_id(symbol))

    def detect_transitive_symbols(self) -> None:
        """Mark every ``X`` that has a rule ``X ::= X X``."""
        for (left, right), lhs_set in self.binary_rules.items():
            if left == right and left in lhs_set:
                self.transitive_symbols.add(left)

    # statistics
    def _names(self, ids: Set[int]) -> str:
        return "".join(f"{self.symbol_string(i)}, " for i in sorted(ids))

    def format_stat(self) -> str:
        """Return a summary of the symbols and rules."""
        num_rules = (
            len(self.empty_rules)
            + sum(len(lhs) for lhs in self.unary_rules.values())
            + sum(len(lhs) for lhs in self.binary_rules.values())
        )
        symbols = "".join(f"{name}->{sid}, " for sid, name in sorted(self.int_to_symb.items()))
        lines = [
            f"#Symbol = {len(self.int_to_symb)}:\t{symbols}",
            f"Insert:\t\t{self._names(self.insert_symbols)}",
            f"Follow:\t\t{self._names(self.follow_symbols)}",
            f"Count:\t\t{self._names(self.count_symbols)}",
            f"#VariantSymbol = {len(self.variable_symbols)}",
            f"#Rule = {num_rules}",
            "",
        ]
        return "\n".join(lines) + "\n"

    def print_stat(self) -> str:
        """Write the summary to standard output and return it."""
        text = self.format_stat()
        sys.stdout.write(text)
        sys.stdout.flush()
        return text