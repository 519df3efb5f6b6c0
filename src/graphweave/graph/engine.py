"""Graph engine.

Provides the directed multigraph that owns nodes and edges, keeps their
adjacency/incidence indices consistent, fires mutation events and can be
extended at runtime with plugin-provided methods.
"""

from collections.abc import Callable, Iterable, Iterator, Mapping
from typing import Any

import rustworkx as rx

from graphweave.config import get_settings
from graphweave.core.exceptions import (
    InvalidIdentifierError,
    MethodConflictError,
    MissingEndpointError,
    PluginError,
    UnknownMethodError,
)
from graphweave.graph import algorithms
from graphweave.graph.elements import (
    Edge,
    Node,
    make_edges_iterable,
    make_nodes_iterable,
    to_edge_id,
    to_node_id,
)
from graphweave.graph.events import EventManager, EventType, Listener
from graphweave.graph.identifiers import IdentifierRegistry, get_default_registry
from graphweave.graph.models import (
    BreadthFirstTree,
    Direction,
    GraphStats,
    MissingEndpointPolicy,
    RemovalResult,
)
from graphweave.utils.logging import get_logger

logger = get_logger(__name__)


def _accept_all(item: Any, graph: "Graph") -> bool:
    return True


def _identity(item: Any, graph: "Graph") -> Any:
    return item


class Graph:
    """A directed multigraph.

    Edges are only accepted when both endpoints are nodes of the graph;
    what happens otherwise is decided by ``on_missing_endpoint``. Every
    mutating call fires at most one event, after all of its index updates
    are done.
    """

    def __init__(
        self,
        nodes: Iterable[Node] = (),
        edges: Iterable[Edge] = (),
        *,
        graph_id: str | None = None,
        on_missing_endpoint: MissingEndpointPolicy | str | None = None,
        ids: IdentifierRegistry | None = None,
    ) -> None:
        """Initialize a graph, optionally pre-populated.

        Args:
            nodes: Nodes to add first.
            edges: Edges to add after all nodes.
            graph_id: An explicit id such as ``"g2"``. Generated if omitted.
            on_missing_endpoint: "create" or "reject"; defaults to the
                configured GraphSettings.on_missing_endpoint.
            ids: Identifier registry for this graph and the nodes it creates.
        """
        self._ids = ids or get_default_registry()
        generator = self._ids.graph
        self._id = generator.next() if graph_id is None else generator.observe(graph_id)

        if on_missing_endpoint is None:
            on_missing_endpoint = get_settings().graph.on_missing_endpoint
        self.on_missing_endpoint = MissingEndpointPolicy(on_missing_endpoint)

        self.parent_id: str | None = None
        self._nodes: dict[str, Node] = {}
        self._edges: dict[str, Edge] = {}
        self._events = EventManager()
        self._methods: dict[str, Callable[..., Any]] = {}

        self.add_nodes(*nodes)
        self.add_edges(*edges)

    @property
    def id(self) -> str:
        return self._id

    @property
    def ids(self) -> IdentifierRegistry:
        """The identifier registry new nodes and edges should draw from."""
        return self._ids

    @property
    def node_count(self) -> int:
        """Get the number of nodes in the graph."""
        return len(self._nodes)

    @property
    def edge_count(self) -> int:
        """Get the number of edges in the graph."""
        return len(self._edges)

    # -------------------- Events --------------------

    def add_listener(
        self,
        event_types: EventType | str | Iterable[EventType | str],
        listener: Listener,
    ) -> "Graph":
        """Subscribe to graph events.

        The listener receives a GraphEvent with ``source``, ``type`` and
        ``data``.

        Returns:
            The graph, for chaining.
        """
        self._events.add_listener(event_types, listener)
        return self

    def remove_listener(
        self,
        event_types: EventType | str | Iterable[EventType | str],
        listener: Listener,
    ) -> "Graph":
        """Unsubscribe from graph events.

        Returns:
            The graph, for chaining.
        """
        self._events.remove_listener(event_types, listener)
        return self

    def _fire_event(self, event_type: EventType, data: list[Any]) -> None:
        if not data:
            return
        self._events.fire(EventManager.make_event(self, event_type, data))

    # -------------------- Mutation --------------------

    def add_nodes(self, *nodes: Node) -> "Graph":
        """Add nodes to the graph.

        A node whose id is already present replaces the old one and takes
        over its incident edges.

        Returns:
            The graph, for chaining.
        """
        for node in nodes:
            existing = self._nodes.get(node.id)
            if existing is not None and existing is not node:
                node._replace(existing)
            node.graph = self
            self._nodes[node.id] = node

        if nodes:
            logger.debug("Added nodes", graph_id=self.id, count=len(nodes))
        self._fire_event(EventType.ADD_NODES, list(nodes))
        return self

    def add_edges(self, *edges: Edge) -> "Graph":
        """Add edges to the graph and index them on their endpoints.

        Returns:
            The graph, for chaining.

        Raises:
            MissingEndpointError: If an endpoint is absent and the graph
                rejects missing endpoints. Nothing is added in that case.
            InvalidIdentifierError: If an endpoint is absent and its id is
                not a valid node id, so no node can be created for it.
        """
        # Validate the whole batch first so a failure leaves the graph untouched
        for edge in edges:
            self._check_endpoints(edge)

        for edge in edges:
            source = self._resolve_endpoint(edge.source_id)
            target = self._resolve_endpoint(edge.target_id)

            edge.graph = self
            self._edges[edge.id] = edge

            source._add_outgoing_edge(edge)
            target._add_incoming_edge(edge)

        if edges:
            logger.debug("Added edges", graph_id=self.id, count=len(edges))
        self._fire_event(EventType.ADD_EDGES, list(edges))
        return self

    def _check_endpoints(self, edge: Edge) -> None:
        node_ids = self._ids.node
        for role, node_id in (("source", edge.source_id), ("target", edge.target_id)):
            if node_id in self._nodes:
                continue
            if self.on_missing_endpoint is MissingEndpointPolicy.REJECT:
                raise MissingEndpointError(edge.id, role, node_id)
            if not node_ids.matches(node_id):
                raise InvalidIdentifierError(node_id, node_ids.category, node_ids.pattern)

    def _resolve_endpoint(self, node_id: str) -> Node:
        node = self._nodes.get(node_id)
        if node is None:
            node = Node(node_id, ids=self._ids)
            logger.debug("Creating missing endpoint", graph_id=self.id, node_id=node_id)
            self.add_nodes(node)
        return node

    def remove_nodes(self, *nodes: str | Node | Iterable[str | Node]) -> RemovalResult:
        """Remove nodes and, first, all of their incident edges.

        Unknown nodes are skipped.

        Returns:
            The removed nodes and the edges removed with them.
        """
        result = RemovalResult()

        for node in self._flatten_nodes(nodes):
            node_obj = self.to_node_obj(node)
            if node_obj is None:
                continue

            result.edges.extend(self.remove_edges(*node_obj.iter_incident_edges()))
            del self._nodes[node_obj.id]
            result.nodes.append(node_obj)

        if result.nodes:
            logger.debug(
                "Removed nodes",
                graph_id=self.id,
                count=len(result.nodes),
                cascaded_edges=len(result.edges),
            )
        self._fire_event(EventType.REMOVE_NODES, result.nodes)
        return result

    def remove_edges(self, *edges: str | Edge | Iterable[str | Edge]) -> list[Edge]:
        """Remove edges from the graph.

        Unknown edges are skipped.

        Returns:
            The removed edges.
        """
        removed: list[Edge] = []

        for edge in self._flatten_edges(edges):
            edge_obj = self.to_edge_obj(edge)
            if edge_obj is None:
                continue

            del self._edges[edge_obj.id]
            removed.append(edge_obj)

            self._nodes[edge_obj.source_id]._remove_outgoing_edge(edge_obj)
            self._nodes[edge_obj.target_id]._remove_incoming_edge(edge_obj)

        if removed:
            logger.debug("Removed edges", graph_id=self.id, count=len(removed))
        self._fire_event(EventType.REMOVE_EDGES, removed)
        return removed

    def update_nodes(
        self,
        update_fn: Callable[[Node, "Graph"], Any],
        nodes: str | Node | Iterable[str | Node] | None = None,
    ) -> "Graph":
        """Apply ``update_fn(node, graph)`` to nodes, announcing the change.

        Listeners see the affected nodes before and after the update, so
        indices derived from node data can be rebuilt.

        Args:
            update_fn: Mutates a node in place. Its return value is ignored.
            nodes: Nodes to update; all nodes if omitted.

        Returns:
            The graph, for chaining.
        """
        selected = list(self.iter_nodes(nodes=nodes))
        self._fire_event(EventType.BEFORE_UPDATE_NODES, selected)
        for node in selected:
            update_fn(node, self)
        self._fire_event(EventType.AFTER_UPDATE_NODES, selected)
        return self

    def update_edges(
        self,
        update_fn: Callable[[Edge, "Graph"], Any],
        edges: str | Edge | Iterable[str | Edge] | None = None,
    ) -> "Graph":
        """Apply ``update_fn(edge, graph)`` to edges, announcing the change.

        Returns:
            The graph, for chaining.
        """
        selected = list(self.iter_edges(edges=edges))
        self._fire_event(EventType.BEFORE_UPDATE_EDGES, selected)
        for edge in selected:
            update_fn(edge, self)
        self._fire_event(EventType.AFTER_UPDATE_EDGES, selected)
        return self

    @staticmethod
    def _flatten_nodes(nodes: tuple[Any, ...]) -> Iterator[str | Node]:
        for item in nodes:
            yield from make_nodes_iterable(item)

    @staticmethod
    def _flatten_edges(edges: tuple[Any, ...]) -> Iterator[str | Edge]:
        for item in edges:
            yield from make_edges_iterable(item)

    # -------------------- Lookup --------------------

    def get_node_by_id(self, node_id: str) -> Node | None:
        """Get a node by its id, or None if absent."""
        return self._nodes.get(node_id)

    def get_edge_by_id(self, edge_id: str) -> Edge | None:
        """Get an edge by its id, or None if absent."""
        return self._edges.get(edge_id)

    def to_node_obj(self, node: str | Node) -> Node | None:
        """Resolve a node or id to the live node of this graph."""
        node_id = to_node_id(node)
        return None if node_id is None else self._nodes.get(node_id)

    def to_edge_obj(self, edge: str | Edge) -> Edge | None:
        """Resolve an edge or id to the live edge of this graph."""
        edge_id = to_edge_id(edge)
        return None if edge_id is None else self._edges.get(edge_id)

    def has_node(self, node: str | Node) -> bool:
        """Check if a node exists."""
        return self.to_node_obj(node) is not None

    def has_edge(self, edge: str | Edge) -> bool:
        """Check if an edge exists."""
        return self.to_edge_obj(edge) is not None

    # -------------------- Iteration --------------------

    def iter_node_ids(self) -> Iterator[str]:
        """Iterate over node ids in insertion order."""
        return iter(list(self._nodes))

    def iter_edge_ids(self) -> Iterator[str]:
        """Iterate over edge ids in insertion order."""
        return iter(list(self._edges))

    def iter_nodes(
        self,
        filter_fn: Callable[[Node, "Graph"], bool] | None = None,
        map_fn: Callable[[Node, "Graph"], Any] | None = None,
        nodes: str | Node | Iterable[str | Node] | None = None,
    ) -> Iterator[Any]:
        """Iterate over nodes, filtering before mapping.

        Args:
            filter_fn: Keeps a node if ``filter_fn(node, graph)`` is true.
            map_fn: Yields ``map_fn(node, graph)`` instead of the node.
            nodes: Restrict to these nodes or ids, in the given order.
                Unknown entries are skipped. Defaults to all nodes.
        """
        candidates = list(self._nodes) if nodes is None else list(make_nodes_iterable(nodes))
        return self._iter_items(candidates, self.to_node_obj, filter_fn, map_fn)

    def iter_edges(
        self,
        filter_fn: Callable[[Edge, "Graph"], bool] | None = None,
        map_fn: Callable[[Edge, "Graph"], Any] | None = None,
        edges: str | Edge | Iterable[str | Edge] | None = None,
    ) -> Iterator[Any]:
        """Iterate over edges, filtering before mapping.

        Args:
            filter_fn: Keeps an edge if ``filter_fn(edge, graph)`` is true.
            map_fn: Yields ``map_fn(edge, graph)`` instead of the edge.
            edges: Restrict to these edges or ids, in the given order.
                Unknown entries are skipped. Defaults to all edges.
        """
        candidates = list(self._edges) if edges is None else list(make_edges_iterable(edges))
        return self._iter_items(candidates, self.to_edge_obj, filter_fn, map_fn)

    def _iter_items(
        self,
        candidates: list[Any],
        resolve: Callable[[Any], Any],
        filter_fn: Callable[[Any, "Graph"], bool] | None,
        map_fn: Callable[[Any, "Graph"], Any] | None,
    ) -> Iterator[Any]:
        keep = filter_fn or _accept_all
        transform = map_fn or _identity
        for candidate in candidates:
            item = resolve(candidate)
            if item is not None and keep(item, self):
                yield transform(item, self)

    # -------------------- Subgraphs --------------------

    def _make_child(self) -> "Graph":
        child = Graph(on_missing_endpoint=self.on_missing_endpoint, ids=self._ids)
        child.parent_id = self.id
        return child

    def _copy_node(self, node: Node) -> Node:
        copy = Node(data=node.data, ids=self._ids)
        copy.parent_id = node.id
        return copy

    def generate_maximum_subgraph_with(self, *nodes: str | Node | Iterable[str | Node]) -> "Graph":
        """Build the subgraph induced by the given nodes.

        The result holds a copy of each given node and of every edge whose
        endpoints are both among them. Copies get fresh ids and record the
        original id in ``parent_id``.
        """
        result = self._make_child()
        id_map: dict[str, str] = {}
        new_nodes: list[Node] = []

        for node in self._flatten_nodes(nodes):
            node_obj = self.to_node_obj(node)
            if node_obj is None or node_obj.id in id_map:
                continue
            copy = self._copy_node(node_obj)
            id_map[node_obj.id] = copy.id
            new_nodes.append(copy)
        result.add_nodes(*new_nodes)

        new_edges: list[Edge] = []
        for edge in self._edges.values():
            source_id = id_map.get(edge.source_id)
            target_id = id_map.get(edge.target_id)
            if source_id is not None and target_id is not None:
                copy = Edge(source_id, target_id, data=edge.data, ids=self._ids)
                copy.parent_id = edge.id
                new_edges.append(copy)
        result.add_edges(*new_edges)

        logger.debug(
            "Generated maximum subgraph",
            graph_id=self.id,
            subgraph_id=result.id,
            node_count=result.node_count,
            edge_count=result.edge_count,
        )
        return result

    def generate_minimum_subgraph_with(self, *edges: str | Edge | Iterable[str | Edge]) -> "Graph":
        """Build the smallest subgraph containing the given edges.

        The result holds a copy of each given edge and of each of their
        endpoints, every node copied once.
        """
        result = self._make_child()
        id_map: dict[str, str] = {}
        new_nodes: list[Node] = []
        new_edges: list[Edge] = []
        seen_edges: set[str] = set()

        for edge in self._flatten_edges(edges):
            edge_obj = self.to_edge_obj(edge)
            if edge_obj is None or edge_obj.id in seen_edges:
                continue
            seen_edges.add(edge_obj.id)

            for node_id in (edge_obj.source_id, edge_obj.target_id):
                if node_id not in id_map:
                    copy = self._copy_node(self._nodes[node_id])
                    id_map[node_id] = copy.id
                    new_nodes.append(copy)

            edge_copy = Edge(
                id_map[edge_obj.source_id],
                id_map[edge_obj.target_id],
                data=edge_obj.data,
                ids=self._ids,
            )
            edge_copy.parent_id = edge_obj.id
            new_edges.append(edge_copy)

        result.add_nodes(*new_nodes)
        result.add_edges(*new_edges)

        logger.debug(
            "Generated minimum subgraph",
            graph_id=self.id,
            subgraph_id=result.id,
            node_count=result.node_count,
            edge_count=result.edge_count,
        )
        return result

    # -------------------- Traversal --------------------

    def iter_dfs_visit(
        self,
        root: str | Node,
        direction: Direction | str = Direction.ALL,
    ) -> Iterator[Node]:
        """Visit reachable nodes depth-first. See algorithms.iter_dfs_visit."""
        return algorithms.iter_dfs_visit(self, root, direction)

    def iter_bfs_visit(
        self,
        root: str | Node,
        direction: Direction | str = Direction.ALL,
    ) -> Iterator[Node]:
        """Visit reachable nodes breadth-first. See algorithms.iter_bfs_visit."""
        return algorithms.iter_bfs_visit(self, root, direction)

    def compute_breadth_first_tree(
        self,
        root: str | Node,
        direction: Direction | str = Direction.ALL,
    ) -> BreadthFirstTree:
        """Compute shortest-path predecessors and distances from ``root``."""
        return algorithms.compute_breadth_first_tree(self, root, direction)

    # -------------------- Extension --------------------

    def add_method(self, name: str, fn: Callable[..., Any]) -> "Graph":
        """Attach ``fn`` to this graph instance under ``name``.

        Pass a bound method to give the function its own state. The method
        is reachable as ``graph.<name>(...)`` and through call_method.

        Returns:
            The graph, for chaining.

        Raises:
            MethodConflictError: If the name is taken.
        """
        if name in self._methods or hasattr(type(self), name) or name in self.__dict__:
            raise MethodConflictError(name)

        self._methods[name] = fn
        logger.debug("Added graph method", graph_id=self.id, name=name)
        return self

    def has_method(self, name: str) -> bool:
        """Check if a method was added under ``name``."""
        return name in self._methods

    def call_method(self, name: str, *args: Any, **kwargs: Any) -> Any:
        """Call a method added with add_method.

        Raises:
            UnknownMethodError: If no method was added under ``name``.
        """
        try:
            method = self._methods[name]
        except KeyError:
            raise UnknownMethodError(name) from None
        return method(*args, **kwargs)

    def __getattr__(self, name: str) -> Any:
        methods = self.__dict__.get("_methods", {})
        if name in methods:
            return methods[name]
        raise AttributeError(f"{type(self).__name__!r} object has no attribute {name!r}")

    def add_plugin(self, plugin: Any) -> "Graph":
        """Register a plugin by calling ``plugin.register(graph)``.

        Returns:
            The graph, for chaining.

        Raises:
            PluginError: If the object has no register method.
        """
        register = getattr(plugin, "register", None)
        if not callable(register):
            raise PluginError(
                f"{type(plugin).__name__} is not a graph plugin",
                details={"plugin": type(plugin).__name__},
            )

        register(self)
        logger.debug("Registered plugin", graph_id=self.id, plugin=type(plugin).__name__)
        return self

    def add_plugins(self, *plugins: Any) -> "Graph":
        """Register several plugins in order."""
        for plugin in plugins:
            self.add_plugin(plugin)
        return self

    # -------------------- Interop --------------------

    def to_rustworkx(self) -> tuple[rx.PyDiGraph, dict[str, int]]:
        """Copy the structure into a RustworkX graph.

        Node payloads are node ids, edge payloads are edge ids.

        Returns:
            The RustworkX graph and a map from node id to its index there.
        """
        digraph = rx.PyDiGraph(multigraph=True)
        index_of: dict[str, int] = {}
        for node_id in self._nodes:
            index_of[node_id] = digraph.add_node(node_id)
        for edge in self._edges.values():
            digraph.add_edge(index_of[edge.source_id], index_of[edge.target_id], edge.id)
        return digraph, index_of

    def get_stats(self) -> GraphStats:
        """Get statistics about the graph.

        Returns:
            GraphStats with various metrics.
        """
        digraph, _ = self.to_rustworkx()
        components = len(rx.weakly_connected_components(digraph)) if self._nodes else 0

        n = len(self._nodes)
        e = len(self._edges)
        density = e / (n * (n - 1)) if n > 1 else 0.0

        return GraphStats(
            node_count=n,
            edge_count=e,
            connected_components=components,
            density=density,
        )

    # -------------------- Serialization --------------------

    def to_dict(self) -> dict[str, Any]:
        """Convert graph to dictionary for serialization.

        Returns:
            Dictionary representation of the graph.
        """
        return {
            "id": self.id,
            "nodes": [node.to_dict() for node in self._nodes.values()],
            "edges": [edge.to_dict() for edge in self._edges.values()],
        }

    @classmethod
    def from_dict(
        cls,
        data: Mapping[str, Any],
        *,
        on_missing_endpoint: MissingEndpointPolicy | str | None = None,
        ids: IdentifierRegistry | None = None,
    ) -> "Graph":
        """Create a graph from dictionary.

        Args:
            data: Dictionary representation.
            on_missing_endpoint: Policy for the new graph.
            ids: Identifier registry for the new graph.

        Returns:
            New Graph instance with the same ids.
        """
        ids = ids or get_default_registry()
        return cls(
            nodes=[Node.from_dict(node, ids=ids) for node in data.get("nodes", [])],
            edges=[Edge.from_dict(edge, ids=ids) for edge in data.get("edges", [])],
            graph_id=data.get("id"),
            on_missing_endpoint=on_missing_endpoint,
            ids=ids,
        )

    def __repr__(self) -> str:
        return f"Graph(id={self.id!r}, nodes={self.node_count}, edges={self.edge_count})"

    def __str__(self) -> str:
        return self.id
