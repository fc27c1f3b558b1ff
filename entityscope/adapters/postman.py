"""Postman adapter for inferring entities from Postman v2 collections."""

import json
import logging
import re
from pathlib import Path
from typing import Any
from urllib.parse import urlparse

from entityscope.adapters.base import BaseAdapter
from entityscope.core.entity import Entity
from entityscope.core.entity_graph import EntityGraph
from entityscope.core.field import Field
from entityscope.core.naming import entity_names, to_snake_case
from entityscope.core.type_inferrer import ValueShape, classify_shape, field_from_value, is_object
from entityscope.errors import MalformedInputError

logger = logging.getLogger(__name__)

_VERSION_SEGMENT = re.compile(r"^v\d+$", re.IGNORECASE)
_ENTITY_SEGMENT = re.compile(r"^\w+$")


class PostmanAdapter(BaseAdapter):
    """Adapter for inferring entities from Postman collections.

    Each leaf request names an entity through its URL path (``/api/v1/users``
    -> User). Fields come from the request body and the first recorded
    response; response fields take priority. Requests for an entity that is
    already known only contribute response fields not seen before.
    """

    def parse(self, source: str | Path) -> EntityGraph:
        """Parse a Postman collection file into an entity graph.

        Args:
            source: Path to the collection JSON, or its text

        Returns:
            Entity graph with one entity per resource
        """
        text, source_name = self.read_source(source)
        return self.parse_content(text, source_name)

    def parse_content(self, content: str, source_name: str = "<string>") -> EntityGraph:
        """Parse collection JSON text into an entity graph."""
        collection = self.decode_json(content, source_name)
        return self.parse_collection(collection, source_name)

    def parse_collection(self, collection: Any, source_name: str = "<data>") -> EntityGraph:
        """Parse a decoded collection.

        Raises:
            MalformedInputError: If ``info`` or ``item`` is missing
        """
        if not isinstance(collection, dict) or "info" not in collection or "item" not in collection:
            raise MalformedInputError(source_name, 'Invalid Postman collection format. Missing "info" or "item" field.')

        graph = EntityGraph()
        for item in self._iter_requests(collection["item"]):
            self._process_request(graph, item)
        return graph

    def _iter_requests(self, items: Any):
        """Flatten folders into leaf request items."""
        if not isinstance(items, list):
            return
        for item in items:
            if not isinstance(item, dict):
                continue
            if "item" in item:
                yield from self._iter_requests(item["item"])
            elif isinstance(item.get("request"), dict):
                yield item

    def _process_request(self, graph: EntityGraph, item: dict) -> None:
        """Extract or extend an entity from one request."""
        request = item["request"]
        responses = item.get("response") or []
        response = responses[0] if isinstance(responses, list) and responses else None

        resource = self.extract_resource(request.get("url", ""))
        if not resource:
            logger.debug("Skipping request %r: no resource segment in URL", item.get("name"))
            return

        names = entity_names(resource)
        if names.name in graph:
            # Known entity: only its response can contribute, merged first-writer-wins
            if isinstance(response, dict):
                response_fields = self._fields_from_response(response)
                graph.register(Entity(name=names.name, table=names.table, fields=response_fields))
            return

        fields = self._fields_from_response(response) if isinstance(response, dict) else {}
        body = request.get("body")
        if isinstance(body, dict):
            for name, field in self._fields_from_body(body).items():
                fields.setdefault(name, field)

        if not fields:
            logger.debug("Skipping request %r: no fields found", item.get("name"))
            return

        graph.register(Entity(name=names.name, table=names.table, fields=fields))

    @staticmethod
    def extract_resource(url: Any) -> str | None:
        """Resource name from a request URL.

        Takes the first path segment that is not ``api`` or a version marker
        (``v1``); hosts, ``{{variables}}`` and ``:params`` are never resources.
        """
        if isinstance(url, dict):
            path = url.get("path")
            if isinstance(path, list):
                segments = [str(segment) for segment in path]
            else:
                return PostmanAdapter.extract_resource(url.get("raw", ""))
        elif isinstance(url, str):
            raw = url.split("?", 1)[0].strip()
            parsed = urlparse(raw)
            if parsed.scheme and parsed.netloc:
                raw = parsed.path
            segments = raw.split("/")
            # Leading host, host:port or {{base_url}} variable
            if segments and (segments[0].startswith("{{") or "." in segments[0] or ":" in segments[0]):
                segments = segments[1:]
        else:
            return None

        for segment in segments:
            if not segment or segment.lower() == "api" or _VERSION_SEGMENT.match(segment):
                continue
            return segment if _ENTITY_SEGMENT.match(segment) else None
        return None

    def _fields_from_body(self, body: dict) -> dict[str, Field]:
        """Fields from a raw JSON, url-encoded or multipart form body."""
        mode = body.get("mode", "raw")

        if mode == "raw":
            raw = body.get("raw")
            if not isinstance(raw, str):
                return {}
            try:
                data = json.loads(raw)
            except json.JSONDecodeError:
                logger.debug("Request body is not JSON, ignoring it")
                return {}
            return self._fields_from_data(data) if isinstance(data, dict) else {}

        if mode in ("urlencoded", "formdata"):
            fields = {}
            for param in body.get(mode) or []:
                if not isinstance(param, dict) or not param.get("key") or param.get("disabled"):
                    continue
                if param.get("type") == "file":
                    continue
                name = to_snake_case(param["key"])
                fields[name] = field_from_value(name, param.get("value", ""))
            return fields

        return {}

    def _fields_from_response(self, response: dict) -> dict[str, Field]:
        """Fields from a recorded response body, unwrapping ``data`` and lists."""
        body = response.get("body")
        if not isinstance(body, str) or not body.strip():
            return {}
        try:
            data = json.loads(body)
        except json.JSONDecodeError:
            logger.debug("Response body is not JSON, ignoring it")
            return {}

        if isinstance(data, dict) and isinstance(data.get("data"), (dict, list)):
            data = data["data"]
        if isinstance(data, list):
            data = data[0] if data and is_object(data[0]) else None

        return self._fields_from_data(data) if isinstance(data, dict) else {}

    def _fields_from_data(self, data: dict) -> dict[str, Field]:
        """Scalar fields of an object; nested objects and lists of objects are skipped."""
        fields = {}
        for key, value in data.items():
            if classify_shape(value) in (ValueShape.OBJECT, ValueShape.OBJECT_LIST):
                continue
            name = to_snake_case(str(key))
            fields[name] = field_from_value(name, value)
        return fields
