"""HTTP protocol — bind tool arguments and call the target API."""

from openapi_mcp.protocols.http.binding import bind_arguments, build_url, encode_body
from openapi_mcp.protocols.http.executor import RequestExecutor
from openapi_mcp.protocols.http.models import (
    BoundRequest,
    ExecutionResult,
    FormBody,
    JsonBody,
    MultipartBody,
    RequestBody,
)

__all__ = [
    "BoundRequest",
    "ExecutionResult",
    "FormBody",
    "JsonBody",
    "MultipartBody",
    "RequestBody",
    "RequestExecutor",
    "bind_arguments",
    "build_url",
    "encode_body",
]
