"""Nodes and edges of a graph.

A node keeps two indices per direction:

- adjacency: neighbour id -> ids of the edges connecting to that neighbour
- incidence: ids of the edges touching the node

``all`` is always the union of ``out`` and ``in``. Both indices change only
through the ``_add_*``/``_remove_*`` mutators, which the owning graph calls
while adding or removing edges, and move to a replacing node in ``_replace``.
"""

from collections.abc import Iterable, Iterator, Mapping
from typing import TYPE_CHECKING, Any

from graphweave.graph.identifiers import IdentifierRegistry, get_default_registry
from graphweave.graph.models import Direction

if TYPE_CHECKING:
    from graphweave.graph.engine import Graph


def to_node_id(node: "str | Node") -> str | None:
    """Turn a node or its id into an id; None for anything else."""
    if isinstance(node, str):
        return node
    if isinstance(node, Node):
        return node.id
    return None


def to_edge_id(edge: "str | Edge") -> str | None:
    """Turn an edge or its id into an id; None for anything else."""
    if isinstance(edge, str):
        return edge
    if isinstance(edge, Edge):
        return edge.id
    return None


def make_nodes_iterable(nodes: "str | Node | Iterable[str | Node]") -> "Iterable[str | Node]":
    """Wrap a single node or id in a list; pass iterables through."""
    if isinstance(nodes, (str, Node)):
        return [nodes]
    return nodes


def make_edges_iterable(edges: "str | Edge | Iterable[str | Edge]") -> "Iterable[str | Edge]":
    """Wrap a single edge or id in a list; pass iterables through."""
    if isinstance(edges, (str, Edge)):
        return [edges]
    return edges


class Node:
    """A vertex of a graph."""

    def __init__(
        self,
        node_id: str | None = None,
        data: Any = None,
        *,
        ids: IdentifierRegistry | None = None,
    ) -> None:
        """Create a node that does not belong to a graph yet.

        Args:
            node_id: An explicit id such as ``"n7"``. Generated if omitted.
            data: Arbitrary payload.
            ids: Identifier registry to draw ids from.

        Raises:
            InvalidIdentifierError: If ``node_id`` is not a valid node id.
        """
        generator = (ids or get_default_registry()).node
        self._id = generator.next() if node_id is None else generator.observe(node_id)

        self.data = data
        self.graph: "Graph | None" = None
        self.parent_id: str | None = None

        # Dicts are used as insertion-ordered sets of edge ids
        self._adjacency: dict[Direction, dict[str, dict[str, None]]] = {
            direction: {} for direction in Direction
        }
        self._incidence: dict[Direction, dict[str, None]] = {
            direction: {} for direction in Direction
        }

    @property
    def id(self) -> str:
        return self._id

    # -------------------- Adjacency --------------------

    def iter_adjacent_nodes(self, direction: Direction | str = Direction.ALL) -> Iterator[str]:
        """Iterate over the ids of adjacent nodes.

        Raises:
            InvalidDirectionError: If the direction is invalid.
        """
        adjacency = self._adjacency[Direction.parse(direction)]
        return iter(list(adjacency))

    def count_adjacent_nodes(self, direction: Direction | str = Direction.ALL) -> int:
        """Count adjacent nodes."""
        return len(self._adjacency[Direction.parse(direction)])

    def is_adjacent_node(self, node: "str | Node", direction: Direction | str = Direction.ALL) -> bool:
        """Test whether ``node`` is adjacent in the given direction."""
        return to_node_id(node) in self._adjacency[Direction.parse(direction)]

    def iter_edges_between(
        self,
        node: "str | Node",
        direction: Direction | str = Direction.ALL,
    ) -> Iterator[str]:
        """Iterate over the ids of edges connecting this node with ``node``."""
        adjacency = self._adjacency[Direction.parse(direction)]
        return iter(list(adjacency.get(to_node_id(node), ())))

    def count_edges_between(
        self,
        node: "str | Node",
        direction: Direction | str = Direction.ALL,
    ) -> int:
        """Count edges connecting this node with ``node``."""
        adjacency = self._adjacency[Direction.parse(direction)]
        return len(adjacency.get(to_node_id(node), ()))

    def is_edge_between(
        self,
        node: "str | Node",
        edge: "str | Edge",
        direction: Direction | str = Direction.ALL,
    ) -> bool:
        """Test whether ``edge`` connects this node with ``node``."""
        adjacency = self._adjacency[Direction.parse(direction)]
        return to_edge_id(edge) in adjacency.get(to_node_id(node), ())

    # -------------------- Incidence --------------------

    def iter_incident_edges(self, direction: Direction | str = Direction.ALL) -> Iterator[str]:
        """Iterate over the ids of incident edges."""
        incidence = self._incidence[Direction.parse(direction)]
        return iter(list(incidence))

    def count_incident_edges(self, direction: Direction | str = Direction.ALL) -> int:
        """Count incident edges."""
        return len(self._incidence[Direction.parse(direction)])

    def is_incident_edge(self, edge: "str | Edge", direction: Direction | str = Direction.ALL) -> bool:
        """Test whether ``edge`` touches this node in the given direction."""
        return to_edge_id(edge) in self._incidence[Direction.parse(direction)]

    # -------------------- Mutators (graph only) --------------------

    def _link(self, edge_id: str, neighbor_id: str, direction: Direction) -> None:
        for key in (Direction.ALL, direction):
            self._incidence[key][edge_id] = None
            self._adjacency[key].setdefault(neighbor_id, {})[edge_id] = None

    def _unlink(self, edge_id: str, neighbor_id: str, direction: Direction) -> None:
        for key in (Direction.ALL, direction):
            self._incidence[key].pop(edge_id, None)
            adjacency = self._adjacency[key]
            edge_ids = adjacency.get(neighbor_id)
            # Already gone from ALL when the other end of a self-loop was unlinked
            if edge_ids is None:
                continue
            edge_ids.pop(edge_id, None)
            if not edge_ids:
                del adjacency[neighbor_id]

    def _replace(self, old: "Node") -> None:
        """Take over the indices of ``old``, which this node replaces in its graph."""
        self._adjacency = old._adjacency
        self._incidence = old._incidence
        old._adjacency = {direction: {} for direction in Direction}
        old._incidence = {direction: {} for direction in Direction}
        old.graph = None

    def _add_outgoing_edge(self, edge: "Edge") -> None:
        self._link(edge.id, edge.target_id, Direction.OUT)

    def _add_incoming_edge(self, edge: "Edge") -> None:
        self._link(edge.id, edge.source_id, Direction.IN)

    def _remove_outgoing_edge(self, edge: "Edge") -> None:
        self._unlink(edge.id, edge.target_id, Direction.OUT)

    def _remove_incoming_edge(self, edge: "Edge") -> None:
        self._unlink(edge.id, edge.source_id, Direction.IN)

    # -------------------- Serialization --------------------

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary representation."""
        result: dict[str, Any] = {"id": self.id}
        if self.data is not None:
            result["data"] = self.data
        return result

    @classmethod
    def from_dict(
        cls,
        data: Mapping[str, Any],
        *,
        ids: IdentifierRegistry | None = None,
    ) -> "Node":
        """Create from dictionary."""
        return cls(data["id"], data.get("data"), ids=ids)

    def __repr__(self) -> str:
        return f"Node(id={self.id!r})"

    def __str__(self) -> str:
        return self.id


class Edge:
    """A directed connection from a source node to a target node."""

    def __init__(
        self,
        source: "str | Node",
        target: "str | Node",
        edge_id: str | None = None,
        data: Any = None,
        *,
        ids: IdentifierRegistry | None = None,
    ) -> None:
        """Create an edge that does not belong to a graph yet.

        Args:
            source: The source node or its id.
            target: The target node or its id.
            edge_id: An explicit id such as ``"e3"``. Generated if omitted.
            data: Arbitrary payload.
            ids: Identifier registry to draw ids from.

        Raises:
            TypeError: If an endpoint is neither a node nor an id.
            InvalidIdentifierError: If ``edge_id`` is not a valid edge id.
        """
        source_id = to_node_id(source)
        target_id = to_node_id(target)
        if source_id is None or target_id is None:
            raise TypeError("Edge endpoints must be nodes or node ids")

        generator = (ids or get_default_registry()).edge
        self._id = generator.next() if edge_id is None else generator.observe(edge_id)
        self._source_id = source_id
        self._target_id = target_id

        self.data = data
        self.graph: "Graph | None" = None
        self.parent_id: str | None = None

    @property
    def id(self) -> str:
        return self._id

    @property
    def source_id(self) -> str:
        return self._source_id

    @property
    def target_id(self) -> str:
        return self._target_id

    @property
    def is_loop(self) -> bool:
        """Whether source and target are the same node."""
        return self._source_id == self._target_id

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary representation."""
        result: dict[str, Any] = {
            "id": self.id,
            "source": self.source_id,
            "target": self.target_id,
        }
        if self.data is not None:
            result["data"] = self.data
        return result

    @classmethod
    def from_dict(
        cls,
        data: Mapping[str, Any],
        *,
        ids: IdentifierRegistry | None = None,
    ) -> "Edge":
        """Create from dictionary."""
        return cls(data["source"], data["target"], data["id"], data.get("data"), ids=ids)

    def __repr__(self) -> str:
        return f"Edge(id={self.id!r}, source_id={self.source_id!r}, target_id={self.target_id!r})"

    def __str__(self) -> str:
        return f"{self.id}({self.source_id}, {self.target_id})"
