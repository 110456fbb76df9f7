"""CFL-reachability solvers for alias analysis on program expression graphs, with graph and grammar structures."""

__version__ = "0.1.0"