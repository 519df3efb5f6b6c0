"""Graph models and value objects.

Defines traversal directions, the missing endpoint policy and the value
objects produced by graph algorithms (paths, breadth-first trees, stats).
Value objects hold node ids only and stay valid after the graph changes.
"""

from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from graphweave.core.exceptions import InvalidDirectionError


class Direction(str, Enum):
    """Which incident edges a node query or traversal follows."""

    ALL = "all"  # Ignore edge direction
    OUT = "out"  # Edges where the node is the source
    IN = "in"  # Edges where the node is the target

    @classmethod
    def parse(cls, value: "Direction | str") -> "Direction":
        """Convert a string to a Direction.

        Raises:
            InvalidDirectionError: If the value is not a known direction.
        """
        try:
            return cls(value)
        except ValueError:
            raise InvalidDirectionError(value) from None


class MissingEndpointPolicy(str, Enum):
    """What add_edges does with an edge whose endpoint is absent."""

    CREATE = "create"  # Insert a bare node with the missing id
    REJECT = "reject"  # Raise MissingEndpointError


def _node_id_of(node: Any) -> str:
    return node if isinstance(node, str) else node.id


class Path:
    """A walk through a graph given by the ids of the visited nodes.

    The classification flags are computed once on construction:

    - ``is_cycle``: at least one step and the first node equals the last.
    - ``is_simple_path``: no node is visited twice.
    - ``is_simple_cycle``: a cycle where only the shared first/last node
      repeats.
    """

    def __init__(self, nodes: Iterable[Any] | str | Any = ()) -> None:
        """Create a path.

        Args:
            nodes: Node ids or nodes in visiting order. A single id or node
                is a path of length zero.
        """
        if isinstance(nodes, str) or hasattr(nodes, "id"):
            nodes = [nodes]

        self._node_ids: tuple[str, ...] = tuple(_node_id_of(n) for n in nodes)
        self._visits: dict[str, int] = {}

        is_simple_path = True
        interior_repeat = False
        last = len(self._node_ids) - 1
        for i, node_id in enumerate(self._node_ids):
            if node_id in self._visits:
                self._visits[node_id] += 1
                is_simple_path = False
                if i < last:
                    interior_repeat = True
            else:
                self._visits[node_id] = 1

        self._is_cycle = len(self._node_ids) > 1 and self._node_ids[0] == self._node_ids[-1]
        self._is_simple_path = is_simple_path
        self._is_simple_cycle = self._is_cycle and not interior_repeat

    @property
    def length(self) -> int:
        """Number of steps; -1 for the empty path."""
        return len(self._node_ids) - 1

    @property
    def is_cycle(self) -> bool:
        return self._is_cycle

    @property
    def is_simple_path(self) -> bool:
        return self._is_simple_path

    @property
    def is_simple_cycle(self) -> bool:
        return self._is_simple_cycle

    def get_number_of_visits(self, node: Any) -> int:
        """Return how often the path visits ``node``."""
        return self._visits.get(_node_id_of(node), 0)

    def is_visited(self, node: Any) -> bool:
        """Test whether ``node`` lies on the path."""
        return _node_id_of(node) in self._visits

    def to_list(self) -> list[str]:
        """Return the visited node ids in order."""
        return list(self._node_ids)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary representation."""
        return {"nodes": self.to_list()}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Path":
        """Create from dictionary."""
        return cls(data["nodes"])

    def __iter__(self) -> Iterator[str]:
        return iter(self._node_ids)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Path):
            return NotImplemented
        return self._node_ids == other._node_ids

    def __hash__(self) -> int:
        return hash(self._node_ids)

    def __repr__(self) -> str:
        return f"Path({list(self._node_ids)!r})"

    def __str__(self) -> str:
        return " ~> ".join(self._node_ids)


class BreadthFirstTree:
    """The result of one breadth-first search from a single root.

    Stores, for every reached node, its predecessor on a shortest path
    from the root and its distance to the root.
    """

    def __init__(
        self,
        root: Any,
        predecessors: Mapping[str, str | None],
        distances: Mapping[str, int],
    ) -> None:
        """Initialize the tree.

        Args:
            root: The node the search started at.
            predecessors: Maps reached node ids to their predecessor id
                (None for the root).
            distances: Maps reached node ids to their distance.
        """
        self.root_id = _node_id_of(root)
        self._predecessors = dict(predecessors)
        self._distances = dict(distances)

    def is_reached(self, node: Any) -> bool:
        """Test whether the search reached ``node``."""
        return _node_id_of(node) in self._distances

    def get_predecessor(self, node: Any) -> str | None:
        """Return the predecessor of ``node``, None for the root or unreached nodes."""
        return self._predecessors.get(_node_id_of(node))

    def get_distance_to(self, node: Any) -> int | None:
        """Return the distance from the root to ``node``, None if unreached."""
        return self._distances.get(_node_id_of(node))

    def get_shortest_path_to(self, node: Any) -> Path | None:
        """Return a shortest path from the root to ``node``.

        Returns:
            The path, or None if ``node`` was not reached.
        """
        node_id: str | None = _node_id_of(node)
        if node_id not in self._distances:
            return None

        steps: list[str] = []
        while node_id is not None:
            steps.append(node_id)
            node_id = self._predecessors[node_id]
        steps.reverse()
        return Path(steps)

    def __iter__(self) -> Iterator[str]:
        """Iterate over reached node ids in visiting order."""
        return iter(self._distances)

    def __repr__(self) -> str:
        return f"BreadthFirstTree(root_id={self.root_id!r}, reached={len(self._distances)})"


@dataclass
class RemovalResult:
    """Nodes removed by remove_nodes and the edges cascaded away with them.

    Attributes:
        nodes: Removed nodes in removal order.
        edges: Removed incident edges in removal order.
    """

    nodes: list[Any] = field(default_factory=list)
    edges: list[Any] = field(default_factory=list)


@dataclass
class GraphStats:
    """Statistics about the graph.

    Attributes:
        node_count: Total number of nodes.
        edge_count: Total number of edges.
        connected_components: Number of weakly connected components.
        density: Graph density (edges / possible edges).
    """

    node_count: int
    edge_count: int
    connected_components: int = 0
    density: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            "node_count": self.node_count,
            "edge_count": self.edge_count,
            "connected_components": self.connected_components,
            "density": self.density,
        }
