"""Auto-detection loaders for entity sources on disk."""

import json
import logging
from pathlib import Path
from typing import Literal

from entityscope.core.assembler import merge_graphs
from entityscope.core.entity_graph import EntityGraph
from entityscope.errors import NotFoundError

logger = logging.getLogger(__name__)

SourceFormat = Literal["openapi", "postman", "json"]

SOURCE_SUFFIXES = (".json", ".yaml", ".yml")


def detect_format(path: str | Path) -> SourceFormat:
    """Detect the source format of a file.

    YAML files are always OpenAPI documents. JSON files are OpenAPI when they
    carry an ``openapi``/``swagger`` key, Postman collections when they carry
    ``info`` and ``item``, and sample payloads otherwise.

    Args:
        path: Path to the source file

    Returns:
        Format name understood by ``load_source``
    """
    path = Path(path)
    if path.suffix.lower() in (".yaml", ".yml"):
        return "openapi"

    try:
        data = json.loads(path.read_text())
    except (OSError, json.JSONDecodeError):
        # Let the JSON adapter report the real problem
        return "json"

    if isinstance(data, dict):
        if "openapi" in data or "swagger" in data:
            return "openapi"
        if "info" in data and "item" in data:
            return "postman"
    return "json"


def load_source(path: str | Path, source_format: SourceFormat | None = None) -> EntityGraph:
    """Parse a file with the adapter matching its format.

    Args:
        path: Path to the source file
        source_format: Force a format instead of detecting it

    Returns:
        Entity graph inferred from the file
    """
    from entityscope.adapters.json_sample import JsonSampleAdapter
    from entityscope.adapters.openapi import OpenAPIAdapter
    from entityscope.adapters.postman import PostmanAdapter

    path = Path(path)
    if not path.is_file():
        raise NotFoundError(f"file {path}")

    source_format = source_format or detect_format(path)
    logger.info("Loading %s as %s", path, source_format)

    if source_format == "openapi":
        return OpenAPIAdapter().parse(path)
    if source_format == "postman":
        return PostmanAdapter().parse(path)
    return JsonSampleAdapter().parse(path)


def load_from_directory(directory: str | Path) -> EntityGraph:
    """Load every JSON/YAML source in a directory into one merged graph.

    Files are processed in sorted order so the first-writer-wins merge is
    deterministic. A file that fails to parse aborts the whole load.

    Args:
        directory: Directory containing source files

    Returns:
        Merged entity graph

    Example:
        >>> graph = load_from_directory("fixtures/")
        >>> graph.get_entity("User")
    """
    directory = Path(directory)
    if not directory.is_dir():
        raise NotFoundError(f"directory {directory}")

    graphs = []
    for file_path in sorted(directory.rglob("*")):
        if not file_path.is_file() or file_path.suffix.lower() not in SOURCE_SUFFIXES:
            continue
        graphs.append(load_source(file_path))

    return merge_graphs(*graphs)
