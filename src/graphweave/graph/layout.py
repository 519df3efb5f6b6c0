"""Node positions for drawing a graph.

A Layout maps node ids to 2D positions. Layouters compute a Layout from
a graph; only a random layouter is provided, force-directed layouters
are expected to implement the same Layouter interface.
"""

import math
import random
from abc import ABC, abstractmethod
from collections.abc import Iterable, Iterator, Mapping
from typing import TYPE_CHECKING, Any, NamedTuple

from graphweave.config import get_settings
from graphweave.graph.elements import Node, to_node_id

if TYPE_CHECKING:
    from graphweave.graph.engine import Graph


class Position(NamedTuple):
    """A point in the drawing plane."""

    x: float
    y: float

    def __add__(self, other: object) -> "Position":  # type: ignore[override]
        if not isinstance(other, tuple):
            return NotImplemented
        return Position(self.x + other[0], self.y + other[1])

    def rotate(self, angle: float) -> "Position":
        """Rotate around the origin by ``angle`` radians."""
        cos, sin = math.cos(angle), math.sin(angle)
        return Position(self.x * cos - self.y * sin, self.x * sin + self.y * cos)


class Layout:
    """Positions of graph nodes, keyed by node id."""

    def __init__(self, positions: Iterable[tuple[str | Node, tuple[float, float]]] = ()) -> None:
        self._positions: dict[str, Position] = {}
        for node, position in positions:
            self.move_node_to(node, position)

    def get_position(self, node: str | Node) -> Position | None:
        """Return the position of ``node``, None if it has none."""
        return self._positions.get(to_node_id(node))

    def move_node_to(self, node: str | Node, position: tuple[float, float]) -> None:
        """Place ``node`` at ``position``."""
        self._positions[to_node_id(node)] = Position(*position)

    def move_node_by(self, node: str | Node, vector: tuple[float, float]) -> None:
        """Shift ``node`` by ``vector``.

        Raises:
            KeyError: If the node has no position yet.
        """
        node_id = to_node_id(node)
        self._positions[node_id] = self._positions[node_id] + vector

    def move_all(self, vector: tuple[float, float]) -> None:
        """Shift every node by ``vector``."""
        for node_id, position in self._positions.items():
            self._positions[node_id] = position + vector

    def scale_all(
        self,
        factor_x: float,
        factor_y: float,
        center: tuple[float, float] = (0.0, 0.0),
    ) -> None:
        """Scale all positions relative to ``center``."""
        cx, cy = center
        for node_id, (x, y) in self._positions.items():
            self._positions[node_id] = Position(cx + (x - cx) * factor_x, cy + (y - cy) * factor_y)

    def rotate_all(self, angle: float, center: tuple[float, float] = (0.0, 0.0)) -> None:
        """Rotate all positions by ``angle`` radians around ``center``."""
        cx, cy = center
        for node_id, (x, y) in self._positions.items():
            rotated = Position(x - cx, y - cy).rotate(angle)
            self._positions[node_id] = Position(rotated.x + cx, rotated.y + cy)

    def __iter__(self) -> Iterator[tuple[str, Position]]:
        return iter(list(self._positions.items()))

    def __len__(self) -> int:
        return len(self._positions)

    def to_dict(self) -> dict[str, dict[str, float]]:
        """Convert to ``{node_id: {"x": ..., "y": ...}}``."""
        return {node_id: {"x": p.x, "y": p.y} for node_id, p in self._positions.items()}

    @classmethod
    def from_dict(cls, data: Mapping[str, Mapping[str, Any]]) -> "Layout":
        """Create from dictionary."""
        return cls((node_id, (p["x"], p["y"])) for node_id, p in data.items())


class Layouter(ABC):
    """Computes a layout for a graph."""

    @abstractmethod
    def layout(self, graph: "Graph") -> Layout:
        """Return positions for every node of ``graph``."""


class RandomLayouter(Layouter):
    """Places every node uniformly at random inside a rectangle."""

    def __init__(
        self,
        x: float = 0.0,
        y: float = 0.0,
        width: float | None = None,
        height: float | None = None,
        seed: int | None = None,
    ) -> None:
        """Initialize the layouter.

        Args:
            x: Left edge of the rectangle.
            y: Top edge of the rectangle.
            width: Rectangle width; defaults to LayoutSettings.width.
            height: Rectangle height; defaults to LayoutSettings.height.
            seed: Seed for reproducible layouts.
        """
        settings = get_settings().layout
        self.min = Position(x, y)
        self.max = Position(
            x + (settings.width if width is None else width),
            y + (settings.height if height is None else height),
        )
        self._random = random.Random(seed)

    def layout(self, graph: "Graph") -> Layout:
        result = Layout()
        for node_id in graph.iter_node_ids():
            result.move_node_to(
                node_id,
                (
                    self._random.uniform(self.min.x, self.max.x),
                    self._random.uniform(self.min.y, self.max.y),
                ),
            )
        return result
