"""Custom exceptions for graphweave.

This module defines a hierarchy of exceptions used throughout the library
for consistent error handling and reporting.
"""

from typing import Any


class GraphweaveError(Exception):
    """Base exception for all graphweave errors."""

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}
        self.cause = cause

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for reporting."""
        result: dict[str, Any] = {
            "error": self.__class__.__name__,
            "message": self.message,
        }
        if self.details:
            result["details"] = self.details
        return result


# =============================================================================
# Graph Errors
# =============================================================================


class GraphError(GraphweaveError):
    """Base class for graph-related errors."""

    pass


class NodeNotFoundError(GraphError):
    """Requested node not found in graph."""

    def __init__(self, node_id: str) -> None:
        super().__init__(
            message=f"Node not found: {node_id}",
            details={"node_id": node_id},
        )


class MissingEndpointError(GraphError):
    """An edge references a node that is not part of the graph."""

    def __init__(self, edge_id: str, role: str, node_id: str) -> None:
        super().__init__(
            message=f"The {role} node {node_id} of edge {edge_id} is invalid",
            details={"edge_id": edge_id, "role": role, "node_id": node_id},
        )


class InvalidDirectionError(GraphError):
    """Direction is not one of all, out or in."""

    def __init__(self, direction: Any) -> None:
        super().__init__(
            message=f"The direction {direction!r} is invalid",
            details={"direction": str(direction)},
        )


class InvalidIdentifierError(GraphError):
    """Identifier does not match the grammar of its category."""

    def __init__(self, identifier: Any, category: str, pattern: str) -> None:
        super().__init__(
            message=f"Invalid {category} id {identifier!r}, expected {pattern}",
            details={
                "identifier": str(identifier),
                "category": category,
                "pattern": pattern,
            },
        )


class InvalidEventTypeError(GraphError):
    """Unknown graph event type."""

    def __init__(self, event_type: Any) -> None:
        super().__init__(
            message=f"Unknown event type: {event_type!r}",
            details={"event_type": str(event_type)},
        )


class GraphSerializationError(GraphError):
    """Error serializing/deserializing graph."""

    def __init__(self, operation: str, path: str, cause: Exception | None = None) -> None:
        super().__init__(
            message=f"Graph {operation} failed for {path}",
            details={"operation": operation, "path": path},
            cause=cause,
        )


# =============================================================================
# Plugin Errors
# =============================================================================


class PluginError(GraphweaveError):
    """Base class for plugin and method extension errors."""

    pass


class MethodConflictError(PluginError):
    """A method name is already taken on the graph."""

    def __init__(self, name: str) -> None:
        super().__init__(
            message=f"Graph already has an attribute named '{name}'",
            details={"name": name},
        )


class UnknownMethodError(PluginError):
    """No method with this name was added to the graph."""

    def __init__(self, name: str) -> None:
        super().__init__(
            message=f"No method named '{name}' was added to the graph",
            details={"name": name},
        )
