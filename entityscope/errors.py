"""Error types raised while inferring an entity graph."""


class EntityscopeError(Exception):
    """Base class for all entityscope errors."""

    pass


class MalformedInputError(EntityscopeError):
    """Raised when raw input cannot be decoded into the expected envelope."""

    def __init__(self, source: str, detail: str):
        self.source = source
        self.detail = detail
        super().__init__(f"Malformed input from {source}: {detail}" if source else f"Malformed input: {detail}")


class NotFoundError(EntityscopeError):
    """Raised when a referenced file, table or schema does not exist."""

    def __init__(self, resource: str):
        self.resource = resource
        super().__init__(f"Not found: {resource}")


class UnsupportedFormatError(EntityscopeError):
    """Raised when input decodes fine but is not a format we understand."""

    def __init__(self, detail: str):
        self.detail = detail
        super().__init__(detail)


class NetworkError(EntityscopeError):
    """Raised when a live API fetch fails or returns a non-2xx status."""

    def __init__(self, url: str, status: int | None = None, detail: str | None = None):
        self.url = url
        self.status = status
        self.detail = detail
        message = f"Failed to fetch URL: {url}."
        if status is not None:
            message += f" Status: {status}"
        if detail:
            message += f" {detail}"
        super().__init__(message)


class DependencyCycleError(EntityscopeError):
    """Raised when entities cannot be ordered because their parents form a cycle."""

    def __init__(self, remaining: list[str]):
        self.remaining = remaining
        super().__init__(f"Cannot order entities, parent cycle among: {', '.join(remaining)}")
