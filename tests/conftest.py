from __future__ import annotations

import json

import pytest
import requests

from hipcat.hipcatConfig import HipcatConfig


class FakeResponse:
    def __init__(self, status_code: int = 201, text: str = "") -> None:
        self.status_code = status_code
        self.text = text
        self.closed = False

    def close(self) -> None:
        self.closed = True

    def __enter__(self) -> "FakeResponse":
        return self

    def __exit__(self, *exc) -> None:
        self.close()


class FakeSession:
    """Records every POST and answers from a queue of responses or exceptions."""

    def __init__(self, *replies) -> None:
        self.replies = list(replies)
        self.calls: list[dict] = []
        self.responses: list[FakeResponse] = []
        self.closed = False

    def post(self, url, data=None, headers=None, **kwargs):
        self.calls.append({"url": url, "data": data, "headers": dict(headers or {})})
        reply = self.replies.pop(0) if self.replies else FakeResponse(201)
        if isinstance(reply, BaseException):
            raise reply
        self.responses.append(reply)
        return reply

    def close(self) -> None:
        self.closed = True

    @property
    def messages(self) -> list[str]:
        return [json.loads(c["data"])["message"] for c in self.calls]


HIPCAT_ENV = ("HIPCHAT_URL", "HIPCAT_ROOM", "HIPCAT_API_TOKEN", "HIPCAT_LOG_LEVEL")


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in HIPCAT_ENV:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def config() -> HipcatConfig:
    return HipcatConfig(hipchat_url="https://x.example.com", room="devs", api_token="tok123")


@pytest.fixture
def connection_error() -> requests.ConnectionError:
    return requests.ConnectionError("connection refused")
