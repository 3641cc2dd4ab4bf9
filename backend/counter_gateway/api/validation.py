"""Request Validation — dependency factories that validate body, query and path params.

Invariants:
    - Each factory takes a Pydantic schema and returns a FastAPI dependency
    - Success: the parsed (defaulted) model is returned and stored on request.state
    - Failure: RequestValidationFailed (400) with one {field, message} per violation
    - field is the dot-joined error location; omitted when the whole section is invalid

Design Decisions:
    - Explicit dependencies over FastAPI's implicit body parsing: an empty body is
      treated as {} so POST /initialize with no payload gets the default seed
"""

import json
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

from fastapi import Request
from pydantic import BaseModel, ValidationError

from counter_gateway.core.errors import ErrorDetail, RequestValidationFailed

M = TypeVar("M", bound=BaseModel)


def validate_body(schema: type[M]) -> Callable[[Request], Awaitable[M]]:
    """Validate the JSON request body against schema."""

    async def dependency(request: Request) -> M:
        raw = await request.body()
        if not raw.strip():
            data: Any = {}
        else:
            try:
                data = json.loads(raw)
            except ValueError:
                raise RequestValidationFailed(
                    "Request validation failed",
                    [ErrorDetail(message="Malformed JSON body")],
                )
        parsed = _parse(schema, data, "Request validation failed")
        request.state.body = parsed
        return parsed

    return dependency


def validate_query(schema: type[M]) -> Callable[[Request], Awaitable[M]]:
    """Validate the query string against schema."""

    async def dependency(request: Request) -> M:
        parsed = _parse(schema, dict(request.query_params), "Query validation failed")
        request.state.query = parsed
        return parsed

    return dependency


def validate_params(schema: type[M]) -> Callable[[Request], Awaitable[M]]:
    """Validate path params against schema. Params use their route names (camelCase aliases)."""

    async def dependency(request: Request) -> M:
        parsed = _parse(schema, dict(request.path_params), "Params validation failed")
        request.state.params = parsed
        return parsed

    return dependency


def _parse(schema: type[M], data: Any, message: str) -> M:
    try:
        return schema.model_validate(data)
    except ValidationError as exc:
        raise RequestValidationFailed(message, build_error_details(exc.errors()))


def build_error_details(errors: list[dict]) -> list[ErrorDetail]:
    """One ErrorDetail per Pydantic error entry."""
    return [
        ErrorDetail(
            field=".".join(str(loc) for loc in e["loc"]) or None,
            message=e["msg"],
        )
        for e in errors
    ]
