"""followgraph — users and follow relationships over a graph store."""

__version__ = "0.1.0"
