"""Traversal algorithms over a graph's adjacency indices.

All traversals take the root as a node or node id and a direction:
``out`` follows edges away from the current node, ``in`` follows edges
towards it and ``all`` ignores edge direction. Neighbours are expanded in
the order of the node's adjacency index, which is insertion order.

The public functions validate their arguments eagerly and return a fresh
generator, so every call starts a new traversal.
"""

from collections import deque
from collections.abc import Iterator
from typing import TYPE_CHECKING

from graphweave.core.exceptions import NodeNotFoundError
from graphweave.graph.elements import Node, to_node_id
from graphweave.graph.models import BreadthFirstTree, Direction
from graphweave.utils.logging import get_logger

if TYPE_CHECKING:
    from graphweave.graph.engine import Graph

logger = get_logger(__name__)


def _resolve_root(graph: "Graph", root: str | Node) -> Node:
    node = graph.to_node_obj(root)
    if node is None:
        raise NodeNotFoundError(str(to_node_id(root) or root))
    return node


def iter_dfs_visit(
    graph: "Graph",
    root: str | Node,
    direction: Direction | str = Direction.ALL,
) -> Iterator[Node]:
    """Visit the nodes reachable from ``root`` in depth-first order.

    Uses an explicit stack. A node may be pushed several times but is
    yielded and expanded only the first time it is popped.

    Raises:
        NodeNotFoundError: If the root is not in the graph.
        InvalidDirectionError: If the direction is invalid.
    """
    direction = Direction.parse(direction)
    root_node = _resolve_root(graph, root)
    return _dfs(graph, root_node, direction)


def _dfs(graph: "Graph", root: Node, direction: Direction) -> Iterator[Node]:
    stack = [root]
    visited: set[str] = set()

    while stack:
        current = stack.pop()
        if current.id in visited:
            continue

        yield current
        for neighbor_id in current.iter_adjacent_nodes(direction):
            neighbor = graph.get_node_by_id(neighbor_id)
            if neighbor is not None:
                stack.append(neighbor)
        visited.add(current.id)


def iter_bfs_visit(
    graph: "Graph",
    root: str | Node,
    direction: Direction | str = Direction.ALL,
) -> Iterator[Node]:
    """Visit the nodes reachable from ``root`` in breadth-first order.

    Nodes are marked visited when enqueued, so nothing is enqueued twice.

    Raises:
        NodeNotFoundError: If the root is not in the graph.
        InvalidDirectionError: If the direction is invalid.
    """
    direction = Direction.parse(direction)
    root_node = _resolve_root(graph, root)
    return _bfs(graph, root_node, direction)


def _bfs(graph: "Graph", root: Node, direction: Direction) -> Iterator[Node]:
    queue = deque([root])
    visited = {root.id}

    while queue:
        current = queue.popleft()
        yield current
        for neighbor_id in current.iter_adjacent_nodes(direction):
            if neighbor_id in visited:
                continue
            neighbor = graph.get_node_by_id(neighbor_id)
            if neighbor is not None:
                queue.append(neighbor)
                visited.add(neighbor_id)


def compute_breadth_first_tree(
    graph: "Graph",
    root: str | Node,
    direction: Direction | str = Direction.ALL,
) -> BreadthFirstTree:
    """Run one breadth-first search and record predecessors and distances.

    Args:
        graph: The graph to search.
        root: Start node or its id.
        direction: Which edges to follow.

    Returns:
        A BreadthFirstTree that no longer depends on the graph.

    Raises:
        NodeNotFoundError: If the root is not in the graph.
        InvalidDirectionError: If the direction is invalid.
    """
    direction = Direction.parse(direction)
    root_node = _resolve_root(graph, root)

    predecessors: dict[str, str | None] = {root_node.id: None}
    distances: dict[str, int] = {root_node.id: 0}
    queue = deque([root_node])

    while queue:
        current = queue.popleft()
        for neighbor_id in current.iter_adjacent_nodes(direction):
            if neighbor_id in distances:
                continue
            neighbor = graph.get_node_by_id(neighbor_id)
            if neighbor is None:
                continue
            predecessors[neighbor_id] = current.id
            distances[neighbor_id] = distances[current.id] + 1
            queue.append(neighbor)

    logger.debug(
        "Computed breadth-first tree",
        graph_id=graph.id,
        root_id=root_node.id,
        direction=direction.value,
        reached=len(distances),
    )
    return BreadthFirstTree(root_node, predecessors, distances)
