"""Shared fixtures: a small OpenAPI document exercising every parameter location."""

from __future__ import annotations

from typing import Any

import pytest


def make_petstore_document() -> dict[str, Any]:
    return {
        "openapi": "3.0.3",
        "info": {"title": "Petstore", "version": "1.0.0"},
        "paths": {
            "/pets": {
                "get": {
                    "operationId": "listPets",
                    "tags": ["pets"],
                    "summary": "List pets",
                    "parameters": [
                        {"name": "tags", "in": "query", "schema": {"type": "array", "items": {"type": "string"}}},
                        {"name": "limit", "in": "query", "schema": {"type": "integer", "maximum": 100}},
                    ],
                },
                "post": {
                    "operationId": "createPet",
                    "tags": ["pets", "admin"],
                    "description": "Create a pet",
                    "requestBody": {
                        "required": True,
                        "content": {
                            "application/json": {
                                "schema": {
                                    "type": "object",
                                    "properties": {
                                        "name": {"type": "string", "minLength": 1},
                                        "age": {"type": "integer"},
                                    },
                                    "required": ["name"],
                                }
                            }
                        },
                    },
                },
            },
            "/pets/{id}": {
                "get": {
                    "operationId": "getPetById",
                    "tags": ["pets"],
                    "parameters": [
                        {"name": "id", "in": "path", "required": True, "schema": {"type": "integer"}},
                    ],
                },
                "delete": {
                    "operationId": "deletePet",
                    "tags": ["pets"],
                    "deprecated": True,
                    "parameters": [
                        {"name": "id", "in": "path", "required": True, "schema": {"type": "integer"}},
                        {"name": "X-Request-Id", "in": "header", "schema": {"type": "string"}},
                        {"name": "session", "in": "cookie", "schema": {"type": "string"}},
                    ],
                },
            },
            "/stores/{storeId}/orders": {
                "get": {
                    "tags": ["Store-Orders"],
                    "parameters": [
                        {"name": "storeId", "in": "path", "required": True},
                    ],
                },
            },
        },
    }


@pytest.fixture
def petstore_document() -> dict[str, Any]:
    return make_petstore_document()
