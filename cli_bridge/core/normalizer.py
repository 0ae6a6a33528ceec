from collections.abc import Mapping
from typing import Any

from cli_bridge.models.requests import ChatRequest, SearchRequest


class QueryParameterError(Exception):
    """Query-string submission that cannot be normalized."""
    pass


class MissingPromptError(QueryParameterError):
    """Query submission without a usable prompt."""

    def __init__(self, message: str = "Prompt parameter is required"):
        super().__init__(message)


class MissingQueryError(QueryParameterError):
    """Search submission without a usable query."""

    def __init__(self, message: str = "Query parameter is required"):
        super().__init__(message)


def from_body(payload: Any) -> ChatRequest:
    """
    Normalize a decoded JSON body.

    Raises:
        pydantic.ValidationError: If the payload is not an object or a field is invalid
    """
    return ChatRequest.model_validate(payload)


def from_query(params: Mapping[str, str]) -> ChatRequest:
    """
    Normalize flat query parameters.

    Booleans are true only for the literal string "true". Empty optional
    values are treated as absent.

    Raises:
        MissingPromptError: If prompt is absent or blank
    """
    prompt = params.get("prompt")
    if not prompt or not prompt.strip():
        raise MissingPromptError()

    return ChatRequest(prompt=prompt, **_cli_options(params))


def search_from_body(payload: Any) -> SearchRequest:
    """
    Normalize a decoded JSON search body.

    Raises:
        pydantic.ValidationError: If the payload is not an object or a field is invalid
    """
    return SearchRequest.model_validate(payload)


def search_from_query(params: Mapping[str, str]) -> SearchRequest:
    """
    Normalize search query parameters, with the same rules as from_query.

    Raises:
        MissingQueryError: If query is absent or blank
        QueryParameterError: If limit is not an integer
        pydantic.ValidationError: If limit is below 1
    """
    query = params.get("query")
    if not query or not query.strip():
        raise MissingQueryError()

    limit = params.get("limit") or None
    if limit is not None:
        try:
            limit = int(limit)
        except ValueError:
            raise QueryParameterError(f"Invalid limit parameter: {limit!r}") from None

    return SearchRequest(
        query=query,
        limit=limit,
        raw=params.get("raw") == "true",
        **_cli_options(params),
    )


def _cli_options(params: Mapping[str, str]) -> dict[str, Any]:
    return {
        "sandbox": params.get("sandbox") == "true",
        "yolo": params.get("yolo") == "true",
        "model": params.get("model") or None,
        "working_directory": params.get("workingDirectory") or None,
        "api_key": params.get("apiKey") or None,
    }
