"""Tests for argument binding, URL building and body encoding."""

from __future__ import annotations

from typing import Any

from openapi_mcp.openapi.models import ParameterDescriptor, ToolDescriptor
from openapi_mcp.protocols.http.binding import (
    bind_arguments,
    build_url,
    encode_body,
    encode_component,
    stringify,
)
from openapi_mcp.protocols.http.models import FormBody, JsonBody, MultipartBody


def _tool(method: str, path: str, *params: tuple[str, str], body_type: str | None = None) -> ToolDescriptor:
    parameters = [ParameterDescriptor(name=name, location=location) for name, location in params]
    if body_type is not None:
        parameters.append(ParameterDescriptor(name="body", location="body", content_type=body_type))
    return ToolDescriptor(name="op", method=method, path=path, parameters=parameters)


class TestStringify:
    def test_scalars(self) -> None:
        assert stringify(True) == "true"
        assert stringify(False) == "false"
        assert stringify(3) == "3"
        assert stringify("x") == "x"

    def test_floats_render_like_json_numbers(self) -> None:
        assert stringify(1.0) == "1"
        assert stringify(-3.0) == "-3"
        assert stringify(2.5) == "2.5"

    def test_containers_are_compact_json(self) -> None:
        assert stringify({"a": [1, 2]}) == '{"a":[1,2]}'

    def test_encode_component_matches_uri_component_rules(self) -> None:
        assert encode_component("a b/c?d") == "a%20b%2Fc%3Fd"
        assert encode_component("it's(ok)!*~") == "it's(ok)!*~"


class TestBindArguments:
    def test_path_parameter_substituted_and_encoded(self) -> None:
        bound = bind_arguments(_tool("GET", "/pets/{id}", ("id", "path")), {"id": "a/b c"})
        assert bound.path == "/pets/a%2Fb%20c"
        assert bound.query == {}

    def test_path_parameter_without_placeholder_goes_to_query(self) -> None:
        bound = bind_arguments(_tool("GET", "/pets", ("id", "path")), {"id": 42})
        assert bound.path == "/pets"
        assert bound.query == {"id": 42}

    def test_same_name_in_query_and_header(self) -> None:
        tool = _tool("GET", "/items", ("id", "query"), ("id", "header"))
        bound = bind_arguments(tool, {"id": "7"})
        assert bound.query == {"id": "7"}
        assert bound.headers["id"] == "7"

    def test_cookies_joined(self) -> None:
        tool = _tool("GET", "/me", ("session", "cookie"), ("theme", "cookie"))
        bound = bind_arguments(tool, {"session": "abc", "theme": "dark"})
        assert bound.headers["Cookie"] == "session=abc; theme=dark"

    def test_default_content_type_is_json(self) -> None:
        bound = bind_arguments(_tool("GET", "/x"), {})
        assert bound.headers["Content-Type"] == "application/json"

    def test_no_parameters_sends_all_args_as_body(self) -> None:
        args = {"name": "Rex", "age": 3}
        bound = bind_arguments(_tool("POST", "/pets"), args)
        assert bound.body == args
        assert bound.has_body is True

    def test_body_parameter(self) -> None:
        tool = _tool("POST", "/pets", ("dry_run", "query"), body_type="application/json")
        bound = bind_arguments(tool, {"dry_run": True, "body": {"name": "Rex"}})
        assert bound.query == {"dry_run": True}
        assert bound.body == {"name": "Rex"}
        assert bound.body_content_type == "application/json"

    def test_missing_and_none_values_skipped(self) -> None:
        tool = _tool("GET", "/pets/{id}", ("id", "path"), ("limit", "query"), ("trace", "header"))
        bound = bind_arguments(tool, {"limit": None, "trace": None})
        assert bound.path == "/pets/{id}"
        assert bound.query == {}
        assert "trace" not in bound.headers

    def test_unknown_location_merges_into_body(self) -> None:
        tool = _tool("POST", "/things", ("a", "formData"), ("b", "formData"))
        bound = bind_arguments(tool, {"a": 1, "b": "two"})
        assert bound.body == {"a": 1, "b": "two"}
        assert bound.has_body is True

    def test_unknown_location_with_scalar_body_is_skipped(self) -> None:
        tool = ToolDescriptor(
            name="op",
            method="POST",
            path="/things",
            parameters=[
                ParameterDescriptor(name="body", location="body"),
                ParameterDescriptor(name="extra", location="formData"),
            ],
        )
        bound = bind_arguments(tool, {"body": "raw text", "extra": 1})
        assert bound.body == "raw text"
        assert bound.skipped == ["extra"]

    def test_none_args(self) -> None:
        bound = bind_arguments(_tool("GET", "/pets", ("limit", "query")), None)
        assert bound.query == {}
        assert bound.method == "GET"


class TestBuildUrl:
    def test_joins_base_and_path(self) -> None:
        assert build_url("https://api.example.com/", "/pets") == "https://api.example.com/pets"
        assert build_url("https://api.example.com/v1", "pets") == "https://api.example.com/v1/pets"

    def test_repeated_keys_for_lists(self) -> None:
        url = build_url("https://h", "/pets", {"tags": ["a", "b c"], "limit": 5, "skip": None})
        assert url == "https://h/pets?tags=a&tags=b%20c&limit=5"

    def test_none_list_items_omitted(self) -> None:
        assert build_url("https://h", "/x", {"t": ["a", None]}) == "https://h/x?t=a"
        assert build_url("https://h", "/x", {"t": [None]}) == "https://h/x"

    def test_float_query_values(self) -> None:
        assert build_url("https://h", "/x", {"page": 1.0, "ratio": 0.25}) == "https://h/x?page=1&ratio=0.25"

    def test_booleans_and_objects(self) -> None:
        url = build_url("https://h", "/x", {"flag": False, "f": {"k": 1}})
        assert url == "https://h/x?flag=false&f=%7B%22k%22%3A1%7D"


class TestEncodeBody:
    def test_json_default(self) -> None:
        assert encode_body({"a": 1}, "application/json") == JsonBody(payload={"a": 1})

    def test_form_from_header(self) -> None:
        body = encode_body({"user": "ann", "tags": ["x", "y"], "skip": None}, "application/x-www-form-urlencoded")
        assert body == FormBody(fields=[("user", "ann"), ("tags", "x"), ("tags", "y")])

    def test_form_drops_none_list_items(self) -> None:
        body = encode_body({"tags": ["x", None], "n": 2.0}, "application/x-www-form-urlencoded")
        assert body == FormBody(fields=[("tags", "x"), ("n", "2")])

    def test_form_from_string(self) -> None:
        assert encode_body("a=1&b=2", "application/x-www-form-urlencoded") == FormBody(fields="a=1&b=2")

    def test_multipart_from_declared_type(self) -> None:
        body = encode_body({"file": "data", "n": 1}, "application/json", "multipart/form-data")
        assert isinstance(body, MultipartBody)
        assert body.entries == [("file", "data"), ("n", 1)]

    def test_formdata_marker(self) -> None:
        payload: dict[str, Any] = {"__formdata": True, "entries": [["a", "1"], ["a", "2"], "junk"]}
        body = encode_body(payload, "application/json")
        assert body == MultipartBody(entries=[("a", "1"), ("a", "2")])
        assert body.kind == "multipart"
