"""graphweave - In-memory directed multigraphs.

A library for mutable directed multigraphs with:
- Stable node, edge and graph identifiers
- Adjacency and incidence indices per direction
- Mutation events and plugin-provided graph methods
- DFS, BFS and breadth-first trees
- JSON snapshots
"""

__version__ = "0.1.0"
__author__ = "graphweave Team"
