"""Tests for layouts and layouters."""

import math
import os
from unittest.mock import patch

import pytest

from graphweave.config import get_settings
from graphweave.graph.elements import Node
from graphweave.graph.engine import Graph
from graphweave.graph.identifiers import IdentifierRegistry
from graphweave.graph.layout import Layout, Position, RandomLayouter


class TestPosition:
    """Tests for Position."""

    def test_add(self) -> None:
        """Test adding a vector."""
        assert Position(1, 2) + (3, 4) == Position(4, 6)

    def test_rotate(self) -> None:
        """Test rotating around the origin."""
        rotated = Position(1, 0).rotate(math.pi / 2)
        assert rotated.x == pytest.approx(0)
        assert rotated.y == pytest.approx(1)


class TestLayout:
    """Tests for Layout transforms."""

    @pytest.fixture
    def layout(self) -> Layout:
        """Create a layout with three positioned nodes."""
        return Layout([("n1", (2, 0)), ("n2", (1, 0)), ("n3", (1, 1))])

    def test_initial_positions(self, layout: Layout) -> None:
        """Test positions given to the constructor."""
        assert layout.get_position("n1") == Position(2, 0)
        assert layout.get_position("n3") == Position(1, 1)
        assert layout.get_position("n9") is None
        assert len(layout) == 3

    def test_move_node_to(self, layout: Layout) -> None:
        """Test placing a node."""
        layout.move_node_to("n1", (3, 1))
        assert layout.get_position("n1") == Position(3, 1)

    def test_move_node_by(self, layout: Layout) -> None:
        """Test shifting a node."""
        layout.move_node_by("n1", (1, 1))
        assert layout.get_position("n1") == Position(3, 1)

    def test_move_unplaced_node(self, layout: Layout) -> None:
        """Test shifting a node without position."""
        with pytest.raises(KeyError):
            layout.move_node_by("n9", (1, 1))

    def test_move_all(self, layout: Layout) -> None:
        """Test shifting the whole layout."""
        layout.move_all((1, 1))
        assert layout.get_position("n1") == Position(3, 1)
        assert layout.get_position("n2") == Position(2, 1)

    def test_scale_all(self, layout: Layout) -> None:
        """Test scaling around a center."""
        layout.scale_all(2, 3, (1, 0))
        assert layout.get_position("n1") == Position(3, 0)
        assert layout.get_position("n2") == Position(1, 0)
        assert layout.get_position("n3") == Position(1, 3)

    def test_rotate_all(self, layout: Layout) -> None:
        """Test rotating around a center."""
        layout.rotate_all(math.pi / 2, (1, 0))
        n1 = layout.get_position("n1")
        n3 = layout.get_position("n3")
        assert (n1.x, n1.y) == (pytest.approx(1), pytest.approx(1))
        assert (n3.x, n3.y) == (pytest.approx(0), pytest.approx(0))
        assert layout.get_position("n2") == Position(1, 0)

    def test_node_keys(self, ids: IdentifierRegistry) -> None:
        """Test nodes and ids address the same position."""
        node = Node(ids=ids)
        layout = Layout([(node, (5, 5))])
        assert layout.get_position("n0") == Position(5, 5)

    def test_iteration(self, layout: Layout) -> None:
        """Test iterating yields ids with positions."""
        assert dict(layout) == {
            "n1": Position(2, 0),
            "n2": Position(1, 0),
            "n3": Position(1, 1),
        }

    def test_dict_round_trip(self, layout: Layout) -> None:
        """Test to_dict/from_dict."""
        data = layout.to_dict()
        assert data["n1"] == {"x": 2, "y": 0}
        assert Layout.from_dict(data).to_dict() == data


class TestRandomLayouter:
    """Tests for RandomLayouter."""

    @pytest.fixture
    def graph(self, ids: IdentifierRegistry) -> Graph:
        """Create a graph with ten nodes."""
        return Graph([Node(ids=ids) for _ in range(10)], ids=ids)

    def test_positions_inside_rectangle(self, graph: Graph) -> None:
        """Test every node is placed inside the rectangle."""
        layout = RandomLayouter(x=10, y=20, width=100, height=50, seed=1).layout(graph)

        assert len(layout) == 10
        for _, position in layout:
            assert 10 <= position.x <= 110
            assert 20 <= position.y <= 70

    def test_seed_is_reproducible(self, graph: Graph) -> None:
        """Test equal seeds give equal layouts."""
        first = RandomLayouter(seed=7).layout(graph).to_dict()
        second = RandomLayouter(seed=7).layout(graph).to_dict()
        assert first == second

    def test_default_size_from_settings(self) -> None:
        """Test the rectangle defaults to the configured size."""
        with patch.dict(os.environ, {"LAYOUT_WIDTH": "300", "LAYOUT_HEIGHT": "200"}):
            get_settings.cache_clear()
            try:
                layouter = RandomLayouter()
            finally:
                get_settings.cache_clear()

        assert layouter.max == Position(300.0, 200.0)
