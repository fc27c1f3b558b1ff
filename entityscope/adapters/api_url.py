"""Live API adapter: fetches a JSON response and infers entities from it."""

import logging
from urllib.parse import urlparse

import httpx

from entityscope import __version__
from entityscope.adapters.base import BaseAdapter
from entityscope.adapters.json_sample import JsonSampleAdapter
from entityscope.adapters.postman import PostmanAdapter
from entityscope.core.assembler import merge_graphs
from entityscope.core.entity_graph import EntityGraph
from entityscope.errors import MalformedInputError, NetworkError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0
DEFAULT_USER_AGENT = f"entityscope/{__version__}"


class ApiUrlAdapter(BaseAdapter):
    """Adapter for inferring entities from a live JSON endpoint.

    Performs a single GET per URL with a fixed timeout and no retries, then
    hands the decoded body to the JSON sample adapter. A top-level array of
    objects is named after the URL's resource segment (``/api/users`` -> User).
    """

    def __init__(
        self,
        token: str | None = None,
        token_type: str = "Bearer",
        timeout: float = DEFAULT_TIMEOUT,
        user_agent: str = DEFAULT_USER_AGENT,
        transport: httpx.BaseTransport | None = None,
    ):
        """Initialize live API adapter.

        Args:
            token: Credential sent as ``Authorization: <token_type> <token>``
            token_type: Authorization scheme
            timeout: Request timeout in seconds
            user_agent: User-Agent header value
            transport: Custom httpx transport (e.g. ``httpx.MockTransport`` in tests)
        """
        self.token = token
        self.token_type = token_type
        self.timeout = timeout
        self.user_agent = user_agent
        self.transport = transport
        self.json_adapter = JsonSampleAdapter()

    @property
    def headers(self) -> dict[str, str]:
        headers = {"Accept": "application/json", "User-Agent": self.user_agent}
        if self.token:
            headers["Authorization"] = f"{self.token_type} {self.token}"
        return headers

    def parse(self, source: str) -> EntityGraph:
        """Fetch a URL and infer entities from its JSON body.

        Args:
            source: ``http`` or ``https`` URL

        Returns:
            Entity graph inferred from the response

        Raises:
            MalformedInputError: If the URL is invalid or the body is not JSON
            NetworkError: If the request fails or returns a non-2xx status
        """
        url = str(source)
        self._validate_url(url)
        body = self.fetch(url)
        return self.json_adapter.parse_content(body, source_name=url, root_name=PostmanAdapter.extract_resource(url))

    def parse_multiple(self, urls: list[str]) -> EntityGraph:
        """Fetch several endpoints and merge their entities into one graph."""
        return merge_graphs(*(self.parse(url) for url in urls))

    def fetch(self, url: str) -> str:
        """GET a URL and return the response text.

        Raises:
            NetworkError: On transport failure or a non-2xx status
            MalformedInputError: If the content type is neither JSON nor text
        """
        logger.info("Fetching %s", url)
        try:
            with httpx.Client(timeout=self.timeout, headers=self.headers, transport=self.transport) as client:
                response = client.get(url)
        except httpx.HTTPError as exc:
            raise NetworkError(url, detail=str(exc)) from exc

        if not response.is_success:
            raise NetworkError(url, status=response.status_code)

        content_type = response.headers.get("Content-Type", "")
        if "json" not in content_type and "text" not in content_type:
            raise MalformedInputError(url, f"URL does not return JSON. Content-Type: {content_type}")

        return response.text

    @staticmethod
    def _validate_url(url: str) -> None:
        parsed = urlparse(url)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise MalformedInputError(url, f"Invalid URL: {url}")
