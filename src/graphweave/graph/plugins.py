"""Graph plugins.

A plugin is any object with a ``register(graph)`` method. When added to a
graph it typically subscribes to graph events to maintain an auxiliary
index and adds query methods to the graph instance.

The hash indices here map a value computed from each node (or edge) to
the ids of all nodes (or edges) producing that value.
"""

from abc import ABC, abstractmethod
from collections.abc import Callable, Iterable, Iterator
from typing import TYPE_CHECKING, Any

from graphweave.graph.events import EventType, GraphEvent
from graphweave.utils.logging import get_logger

if TYPE_CHECKING:
    from graphweave.graph.engine import Graph

logger = get_logger(__name__)

HashFunction = Callable[[Any], Any]


class GraphPlugin(ABC):
    """Base class for plugins."""

    @abstractmethod
    def register(self, graph: "Graph") -> None:
        """Attach the plugin to ``graph``."""

    @abstractmethod
    def clone(self) -> "GraphPlugin":
        """Return an unregistered copy of this plugin."""


class HashIndex(GraphPlugin):
    """Maps hash values to the ids of all items with that hash value.

    Subclasses decide which items are indexed and which events keep the
    index up to date.
    """

    # Events carrying items to index and to unindex
    index_events: tuple[EventType, ...] = ()
    unindex_events: tuple[EventType, ...] = ()

    def __init__(
        self,
        hash_function: HashFunction,
        getter_name: str | None = None,
        iterator_name: str | None = None,
        counter_name: str | None = None,
        tester_name: str | None = None,
    ) -> None:
        """Initialize the index.

        At least one method name should be given, otherwise the indexed
        data cannot be reached through the graph.

        Args:
            hash_function: Maps an item to a deterministic, hashable value.
                Items mapped to None are not indexed.
            getter_name: Graph method returning a list of matching ids.
            iterator_name: Graph method iterating over matching ids.
            counter_name: Graph method counting matching ids.
            tester_name: Graph method testing whether any id matches.
        """
        self.hash = hash_function
        self.method_names: dict[str, str | None] = {
            "get": getter_name,
            "iter": iterator_name,
            "count": counter_name,
            "test": tester_name,
        }
        self.graph: "Graph | None" = None

        # Dicts are used as insertion-ordered sets of ids
        self._hash_to_ids: dict[Any, dict[str, None]] = {}
        self._id_to_hash: dict[str, Any] = {}

    def register(self, graph: "Graph") -> None:
        """Add the query methods and listeners, then index existing items."""
        self.graph = graph

        for method, name in self.method_names.items():
            if name:
                graph.add_method(name, getattr(self, method))

        graph.add_listener(self.index_events, self.add).add_listener(
            self.unindex_events, self.remove
        )
        self.reindex()

    def clone(self) -> "HashIndex":
        """Return an unregistered index with the same hash function and names."""
        return type(self)(
            self.hash,
            getter_name=self.method_names["get"],
            iterator_name=self.method_names["iter"],
            counter_name=self.method_names["count"],
            tester_name=self.method_names["test"],
        )

    @abstractmethod
    def _iter_items(self, graph: "Graph") -> Iterable[Any]:
        """Items of ``graph`` this index covers."""

    # -------------------- Queries --------------------

    def _key(self, value: Any, hash_value: bool) -> Any:
        return self.hash(value) if hash_value else value

    def get(self, value: Any, hash_value: bool = False) -> list[str]:
        """Return the ids of all items with the given hash.

        Args:
            value: The hash value, or an item if ``hash_value`` is set.
            hash_value: Hash ``value`` first.
        """
        return list(self.iter(value, hash_value))

    def iter(self, value: Any, hash_value: bool = False) -> Iterator[str]:
        """Iterate over the ids of all items with the given hash."""
        return iter(list(self._hash_to_ids.get(self._key(value, hash_value), ())))

    def count(self, value: Any, hash_value: bool = False) -> int:
        """Count the items with the given hash."""
        return len(self._hash_to_ids.get(self._key(value, hash_value), ()))

    def test(self, value: Any, hash_value: bool = False) -> bool:
        """Test whether items with the given hash exist."""
        return self._key(value, hash_value) in self._hash_to_ids

    # -------------------- Maintenance --------------------

    def add(self, event: GraphEvent) -> None:
        """Index the items carried by ``event``."""
        self._index(event.data)

    def remove(self, event: GraphEvent) -> None:
        """Unindex the items carried by ``event``."""
        for item in event.data:
            self._unindex(item.id)

    def reindex(self) -> None:
        """Clear the index and index every item of the graph again."""
        self._hash_to_ids.clear()
        self._id_to_hash.clear()
        if self.graph is not None:
            self._index(self._iter_items(self.graph))
            logger.debug(
                "Reindexed hash index",
                index=type(self).__name__,
                graph_id=self.graph.id,
                keys=len(self._hash_to_ids),
            )

    def _index(self, items: Iterable[Any]) -> None:
        for item in items:
            # An id indexed before (e.g. a re-added node) is re-keyed
            self._unindex(item.id)
            key = self.hash(item)
            if key is None:
                continue
            self._hash_to_ids.setdefault(key, {})[item.id] = None
            self._id_to_hash[item.id] = key

    def _unindex(self, item_id: str) -> None:
        # The stored hash is used since the item may have changed since
        if item_id not in self._id_to_hash:
            return
        key = self._id_to_hash.pop(item_id)
        ids = self._hash_to_ids[key]
        ids.pop(item_id, None)
        if not ids:
            del self._hash_to_ids[key]


class NodeHashIndex(HashIndex):
    """Hash index over the nodes of a graph.

    Example:
        >>> index = NodeHashIndex(lambda n: n.data, getter_name="get_nodes_with_data")
        >>> graph.add_plugin(index)
        >>> graph.get_nodes_with_data("red")
        ['n0', 'n4']
    """

    index_events = (EventType.ADD_NODES, EventType.AFTER_UPDATE_NODES)
    unindex_events = (EventType.REMOVE_NODES, EventType.BEFORE_UPDATE_NODES)

    def _iter_items(self, graph: "Graph") -> Iterable[Any]:
        return graph.iter_nodes()


class EdgeHashIndex(HashIndex):
    """Hash index over the edges of a graph."""

    index_events = (EventType.ADD_EDGES, EventType.AFTER_UPDATE_EDGES)
    unindex_events = (EventType.REMOVE_EDGES, EventType.BEFORE_UPDATE_EDGES)

    def _iter_items(self, graph: "Graph") -> Iterable[Any]:
        return graph.iter_edges()
