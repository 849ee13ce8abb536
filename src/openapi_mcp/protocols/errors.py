"""Shared error types for the protocol layer."""


class ProtocolError(Exception):
    """Base error for all protocol-layer failures."""


class ConfigurationError(ProtocolError):
    """Required configuration (base URL, credentials, document URL) is missing."""


class DocumentFetchError(ProtocolError):
    """The OpenAPI document could not be fetched or decoded."""

    def __init__(self, url: str, detail: str = "") -> None:
        self.url = url
        self.detail = detail
        super().__init__(f"Failed to load OpenAPI document: {url}" + (f" ({detail})" if detail else ""))


class ToolNotFoundError(ProtocolError):
    """Requested tool does not exist in the active tool set."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Tool '{name}' not found")


class ToolExecutionError(ProtocolError):
    """A tool invocation failed before a response could be decoded."""

    def __init__(self, name: str, detail: str = "") -> None:
        self.name = name
        self.detail = detail
        super().__init__(f"Tool execution failed: {name}" + (f": {detail}" if detail else ""))
