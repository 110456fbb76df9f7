# pocr

All-pairs CFL-reachability solvers for alias analysis over program
expression graphs (PEGs), together with the graph and grammar structures
they are built on. The package has no dependencies beyond the standard
library.

## Alias analysis solvers

Every solver solves the same alias grammar. Its symbols are the `Word`
enumeration in `pocr.alias`.

| Class | Module | Strategy |
|-------|--------|----------|
| `StdAA` | `pocr.alias` | Standard worklist solver. |
| `GRAA` | `pocr.alias` | `StdAA` with the rewritten grammar, which has no transitive `A`/`Abar` rules. |
| `PocrAA` | `pocr.pocr_aa` | Keeps the assignment closure as one spanning tree per node (`HybridData`). |
| `FocrAA` | `pocr.focr_aa` | Keeps assignment reachability in an edge-critical graph (`ECG`). |
| `GspanAA` | `pocr.gspan_aa` | Graspan-style rounds over old and new edges. |
| `GRGspanAA` | `pocr.gspan_aa` | `GspanAA` with the rewritten grammar. |

```python
from pocr.utils import CFLOptions
from pocr.pocr_aa import PocrAA

aa = PocrAA("program.peg", CFLOptions(graph_simp=True))
aa.analyze()

# derived edges: source -> {Label: targets}
for src, by_label in aa.cfl_data.items():
    ...
```

`analyze()` does four things in order:

1. It reads the graph file into a `PEG`.
2. It simplifies the graph as the options select.
3. It seeds and runs the solver. The Graspan-style solvers repeat rounds
   while `reanalyze` is set.
4. It calls `finalize()`, which prints statistics and can write the graph.

Each derived edge is stored in a `CFLData` under a `Label`. A `Label` is a
named tuple of `symbol` and `index`, where the index is a field offset for
field edges.

### Options

`pocr.utils.CFLOptions` is a dataclass. Its fields:

- `time_out`: a limit in seconds, or `None` for no limit. When it is passed
  during solving, `analyze()` raises `TimeoutError`.
- `solve_cfl`: when false, the solver is not run.
- `scc`: merge strongly connected components before solving.
- `gf`: fold the graph with `PEGFold` before solving.
- `graph_simp`: turns on both `scc` and `gf`.
- `inter_dyck`: prune edges with `PEGInterDyck`.
- `p_stat`: print the analysis statistics.
- `graph_stat`: print the node and edge counts of the graph.
- `out_graph_fname`: if not empty, the (simplified) graph is written to this
  file after the analysis.
- `ecg_scc`: in `FocrAA`, reduce cycles in the edge-critical graph when back
  edges are inserted.

### Statistics

`AAStat` (`pocr.aastat`) keeps counters and timers. It prints tab-separated
lines:

- With `graph_stat`: `GraphSimpTime`, `#Nodes` and `#Edges`.
- With `p_stat`: `AnalysisTime`, `VmrssInGB`, `#Checks`, `#SumEdges` and
  `#SEdges`.

Memory use is read from `/proc/self/status`. On systems without that file
it is reported as zero.

## Graph files

A PEG file holds one tab-separated edge per line:

```
1	2	a
2	3	d
3	4	f_i	8
```

- `a` is an assignment edge.
- `d` is a dereference edge.
- `f_i` is a field edge, with its offset in the fourth column.

Any other label only adds the two nodes.

`PEG.write_graph` writes each edge followed by its reversed edge, labelled
`abar`, `dbar` or `fbar_i`.

An `IVFG` (`pocr.ivfg`) file uses these labels:

- `a` for direct value flow.
- `call_i` and `ret_i`, with a call-site index, for calls and returns.
- `src`, which marks the node in the first column as a source.

A `CFLGraph` (`pocr.cflgraph`) takes its edge labels from a `CFG` grammar.
Lines whose label is not a grammar symbol are skipped.

All graphs share `RepGraph` (`pocr.graph`). It provides:

- nodes and labelled edges;
- node merging into representatives (`merge_node_to_rep`);
- `copy()`.

```python
from pocr.peg import PEG, PEGEdgeKind

peg = PEG()
peg.add_node(1)
peg.add_node(2)
peg.add_edge(1, 2, PEGEdgeKind.ASGN, 0)
peg.write_graph("out.peg")
```

## Grammar files

`CFG` (`pocr.cfg`) reads a grammar with one tab-separated production per
line, left-hand side first. A rule has at most two right-hand symbols:

```
Production:
S	A	B
A	a
E
Insert:
A, B
Count:
S
```

- Lines under `Insert:`, `Follow:` and `Count:` list comma-separated symbols.
- When neither `Insert:` nor `Follow:` symbols are given, every symbol is an
  insert symbol.
- A symbol ending in `_i` carries an index.
- `parse_grammar` reads the file, marks symbols `X` with a rule `X ::= X X`
  as transitive, and prints a summary (`format_stat` returns it as text).

## Building blocks

- `pocr.cflbase.CFLBase` is a generic worklist solver. Subclasses supply
  `unary_summ` and `binary_summ`.
- `pocr.cfldata.CFLData` stores labelled edges.
- `pocr.cfldata.HybridData` maintains per-node reachability trees.
- `pocr.ecg.ECG` and `pocr.ecg.BSECG` keep incremental transitive
  reachability with redundant edges removed.
- `pocr.utils` holds the following:
  - `WorkList`, a FIFO list that holds each item once;
  - `strip`;
  - `process_args`, which splits command-line words into option words and
    the words that name readable files.

## What the package does not do

- It has no command-line program. Analyses are run from Python.
- It has no value-flow analysis solver. `IVFG` graphs can be read, merged,
  copied and written, but nothing here solves them.
- It has no solver driven by a grammar file. `CFG` and `CFLGraph` are only
  the data structures for one.