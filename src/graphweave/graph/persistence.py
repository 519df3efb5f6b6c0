"""Graph persistence for saving and loading graph snapshots.

Provides serialization to plain or gzip-compressed JSON files.
"""

import gzip
import json
from pathlib import Path

from graphweave.config import get_settings
from graphweave.core.exceptions import GraphError, GraphSerializationError
from graphweave.graph.engine import Graph
from graphweave.graph.identifiers import IdentifierRegistry
from graphweave.utils.logging import LogContext, get_logger

logger = get_logger(__name__)

_EXTENSIONS = (".json.gz", ".json")


class GraphPersistence:
    """Handles saving and loading of graphs."""

    def __init__(self, storage_dir: Path | None = None) -> None:
        """Initialize persistence handler.

        Args:
            storage_dir: Directory for storing graphs. Defaults to current dir.
        """
        self.storage_dir = storage_dir or Path.cwd()
        self.storage_dir.mkdir(parents=True, exist_ok=True)

    def save_json(
        self,
        graph: Graph,
        filename: str,
        compress: bool = False,
    ) -> Path:
        """Save graph to JSON file.

        Args:
            graph: The graph to save.
            filename: Output filename (without extension).
            compress: Whether to gzip compress the output.

        Returns:
            Path to the saved file.

        Raises:
            GraphSerializationError: If a payload is not JSON serializable.
        """
        data = graph.to_dict()

        if compress:
            file_path = self.storage_dir / f"{filename}.json.gz"
            opener = gzip.open
        else:
            file_path = self.storage_dir / f"{filename}.json"
            opener = open

        with LogContext(operation="save", file_path=str(file_path)):
            try:
                with opener(file_path, "wt", encoding="utf-8") as f:
                    json.dump(data, f, indent=2)
            except TypeError as e:
                raise GraphSerializationError("save", str(file_path), cause=e) from e

            logger.info(
                "Saved graph to JSON",
                graph_id=graph.id,
                node_count=graph.node_count,
                edge_count=graph.edge_count,
                compressed=compress,
            )
        return file_path

    def load_json(
        self,
        file_path: Path | str,
        ids: IdentifierRegistry | None = None,
    ) -> Graph:
        """Load graph from JSON file.

        Args:
            file_path: Path to the JSON file.
            ids: Identifier registry for the loaded graph.

        Returns:
            The loaded Graph, with the ids it was saved with.

        Raises:
            FileNotFoundError: If the file doesn't exist.
            GraphSerializationError: If the file is not a valid graph snapshot.
        """
        file_path = Path(file_path)

        if not file_path.exists():
            raise FileNotFoundError(f"Graph file not found: {file_path}")

        opener = gzip.open if file_path.suffix == ".gz" else open
        with LogContext(operation="load", file_path=str(file_path)):
            try:
                with opener(file_path, "rt", encoding="utf-8") as f:
                    data = json.load(f)
                graph = Graph.from_dict(data, ids=ids)
            except (json.JSONDecodeError, KeyError, TypeError, AttributeError, GraphError) as e:
                raise GraphSerializationError("load", str(file_path), cause=e) from e

            logger.info(
                "Loaded graph from JSON",
                graph_id=graph.id,
                node_count=graph.node_count,
                edge_count=graph.edge_count,
            )
        return graph

    def exists(self, filename: str) -> bool:
        """Check if a graph file exists.

        Args:
            filename: The filename to check.

        Returns:
            True if the file exists.
        """
        return any((self.storage_dir / f"{filename}{ext}").exists() for ext in _EXTENSIONS)

    def delete(self, filename: str) -> bool:
        """Delete a graph file.

        Args:
            filename: The filename to delete.

        Returns:
            True if a file was deleted.
        """
        deleted = False
        for ext in _EXTENSIONS:
            file_path = self.storage_dir / f"{filename}{ext}"
            if file_path.exists():
                file_path.unlink()
                deleted = True
                logger.info("Deleted graph file", file_path=str(file_path))
        return deleted

    def list_graphs(self) -> list[str]:
        """List all saved graphs.

        Returns:
            List of graph filenames (without extensions).
        """
        graphs = set()
        for ext in _EXTENSIONS:
            for file_path in self.storage_dir.glob(f"*{ext}"):
                name = file_path.name
                for suffix in _EXTENSIONS:
                    if name.endswith(suffix):
                        name = name[: -len(suffix)]
                        break
                graphs.add(name)
        return sorted(graphs)


def create_persistence(storage_dir: Path | str | None = None) -> GraphPersistence:
    """Create a GraphPersistence instance.

    Args:
        storage_dir: Storage directory path. Defaults to the configured
            GraphSettings.storage_path.

    Returns:
        GraphPersistence instance.
    """
    if storage_dir is None:
        storage_dir = get_settings().graph.storage_path
    return GraphPersistence(Path(storage_dir))
