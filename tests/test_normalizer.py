import pytest
from pydantic import ValidationError

from cli_bridge.core.normalizer import (
    MissingPromptError,
    MissingQueryError,
    QueryParameterError,
    from_body,
    from_query,
    search_from_body,
    search_from_query,
)
from cli_bridge.models.requests import ChatRequest, SearchRequest


def test_body_defaults() -> None:
    request = from_body({"prompt": "list files"})
    assert request == ChatRequest(prompt="list files")
    assert request.sandbox is False
    assert request.yolo is False
    assert request.model is None
    assert request.working_directory is None
    assert request.api_key is None


def test_body_accepts_camel_case_fields() -> None:
    request = from_body({
        "prompt": "hi",
        "workingDirectory": "/tmp",
        "apiKey": "secret",
        "sandbox": True,
    })
    assert request.working_directory == "/tmp"
    assert request.api_key == "secret"
    assert request.sandbox is True


@pytest.mark.parametrize("payload", [{}, {"prompt": ""}, {"prompt": "   "}, {"prompt": 42}, ["prompt"], None])
def test_body_rejects_missing_or_invalid_prompt(payload) -> None:
    with pytest.raises(ValidationError):
        from_body(payload)


def test_body_booleans_are_strict() -> None:
    with pytest.raises(ValidationError):
        from_body({"prompt": "hi", "sandbox": "true"})


def test_body_missing_prompt_error_references_prompt() -> None:
    with pytest.raises(ValidationError) as exc_info:
        from_body({})
    assert exc_info.value.errors()[0]["loc"] == ("prompt",)


def test_api_key_hidden_from_repr() -> None:
    request = from_body({"prompt": "hi", "apiKey": "secret"})
    assert "secret" not in repr(request)


@pytest.mark.parametrize("params", [{}, {"prompt": ""}, {"prompt": "  "}])
def test_query_requires_prompt(params) -> None:
    with pytest.raises(MissingPromptError) as exc_info:
        from_query(params)
    assert str(exc_info.value) == "Prompt parameter is required"


@pytest.mark.parametrize("value, expected", [
    ("true", True),
    ("1", False),
    ("True", False),
    ("yes", False),
    ("", False),
    (None, False),
])
def test_query_booleans_need_literal_true(value, expected) -> None:
    params = {"prompt": "hi"}
    if value is not None:
        params["yolo"] = value
        params["sandbox"] = value
    request = from_query(params)
    assert request.yolo is expected
    assert request.sandbox is expected


def test_query_empty_optionals_are_absent() -> None:
    request = from_query({"prompt": "hi", "model": "", "workingDirectory": "", "apiKey": ""})
    assert request.model is None
    assert request.working_directory is None
    assert request.api_key is None


def test_body_and_query_normalize_identically() -> None:
    body = from_body({
        "prompt": "list files",
        "sandbox": True,
        "yolo": False,
        "model": "gemini-2.5-pro",
        "workingDirectory": "/tmp",
        "apiKey": "k",
    })
    query = from_query({
        "prompt": "list files",
        "sandbox": "true",
        "yolo": "false",
        "model": "gemini-2.5-pro",
        "workingDirectory": "/tmp",
        "apiKey": "k",
    })
    assert body == query


def test_empty_body_optionals_match_absent_query_values() -> None:
    assert from_body({"prompt": "hi", "model": ""}) == from_query({"prompt": "hi"})


def test_search_body_and_query_normalize_identically() -> None:
    body = search_from_body({"query": "uv vs pip", "limit": 3, "raw": True, "apiKey": "k"})
    query = search_from_query({"query": "uv vs pip", "limit": "3", "raw": "true", "apiKey": "k"})
    assert body == query == SearchRequest(query="uv vs pip", limit=3, raw=True, api_key="k")


@pytest.mark.parametrize("payload", [{}, {"query": ""}, {"query": " "}, {"query": "q", "limit": "3"}, {"query": "q", "limit": 0}])
def test_search_body_rejects_invalid_fields(payload) -> None:
    with pytest.raises(ValidationError):
        search_from_body(payload)


@pytest.mark.parametrize("params", [{}, {"query": ""}, {"prompt": "hi"}])
def test_search_query_requires_query(params) -> None:
    with pytest.raises(MissingQueryError) as exc_info:
        search_from_query(params)
    assert str(exc_info.value) == "Query parameter is required"


def test_search_query_limit_must_be_integer() -> None:
    with pytest.raises(QueryParameterError):
        search_from_query({"query": "q", "limit": "ten"})


def test_search_query_empty_limit_is_absent() -> None:
    request = search_from_query({"query": "q", "limit": "", "raw": "1"})
    assert request.limit is None
    assert request.raw is False
