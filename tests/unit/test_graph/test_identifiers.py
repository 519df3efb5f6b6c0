"""Tests for identifier generation."""

import pytest

from graphweave.core.exceptions import InvalidIdentifierError
from graphweave.graph.identifiers import (
    IdentifierGenerator,
    IdentifierRegistry,
    get_default_registry,
    reset_default_registry,
)


class TestIdentifierGenerator:
    """Tests for IdentifierGenerator."""

    @pytest.fixture
    def generator(self) -> IdentifierGenerator:
        """Create a node id generator."""
        return IdentifierGenerator("n", "node")

    def test_next_counts_up(self, generator: IdentifierGenerator) -> None:
        """Test generated ids use consecutive suffixes."""
        assert [generator.next() for _ in range(3)] == ["n0", "n1", "n2"]
        assert generator.counter == 3

    def test_observe_advances_counter(self, generator: IdentifierGenerator) -> None:
        """Test a supplied id pushes the counter past its suffix."""
        assert generator.observe("n7") == "n7"
        assert generator.next() == "n8"

    def test_observe_lower_id_keeps_counter(self, generator: IdentifierGenerator) -> None:
        """Test a supplied id below the counter leaves it alone."""
        generator.increase_to_at_least(10)
        generator.observe("n2")
        assert generator.counter == 10

    @pytest.mark.parametrize("identifier", ["x7", "n", "n-1", "n1a", "7", "", None, 3])
    def test_observe_rejects_malformed(
        self, generator: IdentifierGenerator, identifier: object
    ) -> None:
        """Test ids outside the grammar are rejected."""
        with pytest.raises(InvalidIdentifierError) as exc_info:
            generator.observe(identifier)
        assert exc_info.value.details["category"] == "node"
        assert generator.counter == 0

    def test_matches(self, generator: IdentifierGenerator) -> None:
        """Test grammar matching without side effects."""
        assert generator.matches("n12")
        assert not generator.matches("e12")
        assert not generator.matches(12)
        assert generator.counter == 0

    def test_increase_to_at_least(self, generator: IdentifierGenerator) -> None:
        """Test the counter is never lowered."""
        generator.increase_to_at_least(5)
        generator.increase_to_at_least(3)
        assert generator.counter == 5

    def test_reset(self, generator: IdentifierGenerator) -> None:
        """Test reset starts over from zero."""
        generator.observe("n4")
        generator.reset()
        assert generator.next() == "n0"

    def test_pattern(self, generator: IdentifierGenerator) -> None:
        """Test the exposed grammar."""
        assert generator.pattern == "^n([0-9]+)$"


class TestIdentifierRegistry:
    """Tests for IdentifierRegistry."""

    def test_categories_are_independent(self, ids: IdentifierRegistry) -> None:
        """Test each category keeps its own counter."""
        assert ids.node.next() == "n0"
        assert ids.edge.next() == "e0"
        assert ids.graph.next() == "g0"
        assert ids.node.next() == "n1"

    def test_reset_all(self, ids: IdentifierRegistry) -> None:
        """Test reset clears every category."""
        ids.node.next()
        ids.edge.observe("e9")
        ids.reset()
        assert ids.node.counter == 0
        assert ids.edge.counter == 0

    def test_default_registry_is_cached(self) -> None:
        """Test the default registry is shared until reset."""
        registry = get_default_registry()
        assert get_default_registry() is registry

        reset_default_registry()
        assert get_default_registry() is not registry
