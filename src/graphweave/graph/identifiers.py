"""Identifier generation for nodes, edges and graphs.

Each category has its own generator producing ids of the form
``<prefix><counter>`` (``n0``, ``e12``, ``g3``). Ids chosen by the caller
are validated against the category's grammar and push the counter past
them, so generated ids never collide with supplied ones.
"""

import re
from functools import lru_cache

from graphweave.core.exceptions import InvalidIdentifierError
from graphweave.utils.logging import get_logger

logger = get_logger(__name__)


class IdentifierGenerator:
    """Produces unique string ids for one category."""

    def __init__(self, prefix: str, category: str | None = None) -> None:
        """Initialize the generator.

        Args:
            prefix: Prefix of every id in this category.
            category: Human readable category name used in errors.
        """
        self.prefix = prefix
        self.category = category or prefix
        self._pattern = re.compile(rf"^{re.escape(prefix)}([0-9]+)$")
        self._counter = 0

    @property
    def pattern(self) -> str:
        """The grammar ids of this category must match."""
        return self._pattern.pattern

    @property
    def counter(self) -> int:
        """The numeric suffix the next generated id will use."""
        return self._counter

    def next(self) -> str:
        """Return a fresh id and advance the counter."""
        identifier = f"{self.prefix}{self._counter}"
        self._counter += 1
        return identifier

    def increase_to_at_least(self, value: int) -> None:
        """Raise the counter to ``value`` unless it is already higher."""
        if value > self._counter:
            self._counter = value

    def matches(self, identifier: object) -> bool:
        """Test whether ``identifier`` follows this category's grammar."""
        return isinstance(identifier, str) and self._pattern.match(identifier) is not None

    def observe(self, identifier: object) -> str:
        """Accept a caller-supplied id.

        Args:
            identifier: The id to accept.

        Returns:
            The identifier, unchanged.

        Raises:
            InvalidIdentifierError: If the id does not match the grammar.
        """
        match = self._pattern.match(identifier) if isinstance(identifier, str) else None
        if match is None:
            raise InvalidIdentifierError(identifier, self.category, self.pattern)

        self.increase_to_at_least(int(match.group(1)) + 1)
        return identifier

    def reset(self) -> None:
        """Start counting from zero again."""
        self._counter = 0


class IdentifierRegistry:
    """One identifier generator per category."""

    def __init__(self) -> None:
        self.node = IdentifierGenerator("n", "node")
        self.edge = IdentifierGenerator("e", "edge")
        self.graph = IdentifierGenerator("g", "graph")

    def reset(self) -> None:
        """Reset all generators."""
        for generator in (self.node, self.edge, self.graph):
            generator.reset()
        logger.debug("Identifier registry reset")


@lru_cache
def get_default_registry() -> IdentifierRegistry:
    """Get the registry used when no explicit one is passed."""
    return IdentifierRegistry()


def reset_default_registry() -> None:
    """Drop the default registry so the next call creates a fresh one."""
    get_default_registry.cache_clear()
