"""Graph module.

Provides an in-memory directed multigraph with mutation events, runtime
extension through plugins, traversals and JSON persistence.
"""

from graphweave.graph.algorithms import (
    compute_breadth_first_tree,
    iter_bfs_visit,
    iter_dfs_visit,
)
from graphweave.graph.elements import Edge, Node
from graphweave.graph.engine import Graph
from graphweave.graph.events import EventManager, EventType, GraphEvent
from graphweave.graph.identifiers import (
    IdentifierGenerator,
    IdentifierRegistry,
    get_default_registry,
    reset_default_registry,
)
from graphweave.graph.layout import Layout, Layouter, Position, RandomLayouter
from graphweave.graph.models import (
    BreadthFirstTree,
    Direction,
    GraphStats,
    MissingEndpointPolicy,
    Path,
    RemovalResult,
)
from graphweave.graph.persistence import GraphPersistence, create_persistence
from graphweave.graph.plugins import EdgeHashIndex, GraphPlugin, HashIndex, NodeHashIndex

__all__ = [
    # Engine
    "Graph",
    "Node",
    "Edge",
    # Models
    "Direction",
    "MissingEndpointPolicy",
    "Path",
    "BreadthFirstTree",
    "RemovalResult",
    "GraphStats",
    # Identifiers
    "IdentifierGenerator",
    "IdentifierRegistry",
    "get_default_registry",
    "reset_default_registry",
    # Events
    "EventManager",
    "EventType",
    "GraphEvent",
    # Algorithms
    "iter_dfs_visit",
    "iter_bfs_visit",
    "compute_breadth_first_tree",
    # Plugins
    "GraphPlugin",
    "HashIndex",
    "NodeHashIndex",
    "EdgeHashIndex",
    # Layout
    "Position",
    "Layout",
    "Layouter",
    "RandomLayouter",
    # Persistence
    "GraphPersistence",
    "create_persistence",
]
