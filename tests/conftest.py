"""
TabTagger v1 - Test Configuration and Fixtures

Shared fixtures for both unit and e2e tests.
"""

import json
from typing import Callable, Union

import httpx
import pytest

from tagging_service.models import ProviderConfig, TabDescriptor


class RecordingHandler:
    """
    httpx MockTransport handler that records requests and replays responses.

    Responses are returned in order; the last one repeats. An entry may be an
    httpx.Response, an exception to raise, or a callable taking the request.
    """

    def __init__(self, *responses: Union[httpx.Response, Exception, Callable]):
        self.responses = list(responses)
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        index = min(len(self.requests), len(self.responses)) - 1
        response = self.responses[index]
        if isinstance(response, Exception):
            raise response
        if callable(response):
            return response(request)
        return response

    @property
    def last_request(self) -> httpx.Request:
        return self.requests[-1]

    def last_json(self) -> dict:
        return json.loads(self.last_request.content)


def json_response(data, status_code: int = 200) -> httpx.Response:
    return httpx.Response(status_code, json=data)


def suggestions_body(*entries) -> str:
    """Model answer in the requested JSON format"""
    return json.dumps({"suggestions": [{"tabIndex": i, "tags": t} for i, t in entries]})


@pytest.fixture
def tabs() -> list[TabDescriptor]:
    """Two tabs in prompt order."""
    return [
        TabDescriptor(id=101, title="Python docs", url="https://docs.python.org"),
        TabDescriptor(id=202, title="Hacker News", url="https://news.ycombinator.com"),
    ]


@pytest.fixture
def make_client() -> Callable[[RecordingHandler], httpx.AsyncClient]:
    """Factory for an AsyncClient backed by a RecordingHandler."""
    def factory(handler: RecordingHandler) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return factory


@pytest.fixture
def openai_config() -> ProviderConfig:
    return ProviderConfig(kind="openai", api_key="sk-test")


@pytest.fixture
def ollama_config() -> ProviderConfig:
    return ProviderConfig(kind="ollama", endpoint="http://localhost:11434", model="llama3.1")
