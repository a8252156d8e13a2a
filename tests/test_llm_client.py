import threading
import time
from concurrent.futures import ThreadPoolExecutor

import pytest
import requests

import llm_client
from llm_client import ChatClient, LLMError, parse_llm_json


class FakeResponse:
    def __init__(self, payload=None, status_code=200, text=""):
        self._payload = payload
        self.status_code = status_code
        self.text = text

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.exceptions.HTTPError(f"{self.status_code} Error")

    def json(self):
        if self._payload is None:
            raise ValueError("no json")
        return self._payload


def reply(content):
    return FakeResponse({"choices": [{"message": {"content": content}}]})


def make_client():
    return ChatClient(api_key="test-key", url="http://llm.local/v1/chat/completions", model="test-model")


def test_parse_llm_json_handles_fences_and_noise() -> None:
    assert parse_llm_json('```json\n{"a": 1}\n```') == {"a": 1}
    assert parse_llm_json('Sure! {"a": [1, 2]} hope that helps') == {"a": [1, 2]}
    assert parse_llm_json("not json") == {}
    assert parse_llm_json("") == {}
    assert parse_llm_json("[1, 2]") == {}


def test_complete_posts_chat_payload(monkeypatch) -> None:
    captured = {}

    def fake_post(url, headers=None, json=None, timeout=None):
        captured.update(url=url, headers=headers, json=json, timeout=timeout)
        return reply("hello")

    monkeypatch.setattr(llm_client.requests, "post", fake_post)
    client = make_client()
    assert client.complete([{"role": "user", "content": "hi"}]) == "hello"

    assert captured["url"] == "http://llm.local/v1/chat/completions"
    assert captured["headers"]["Authorization"] == "Bearer test-key"
    assert captured["json"]["model"] == "test-model"
    assert captured["json"]["messages"] == [{"role": "user", "content": "hi"}]
    assert "response_format" not in captured["json"]
    assert captured["timeout"] == client.timeout


def test_complete_json_requests_json_object(monkeypatch) -> None:
    captured = {}

    def fake_post(url, headers=None, json=None, timeout=None):
        captured.update(json)
        return reply('{"possibleDiseases": ["Flu"]}')

    monkeypatch.setattr(llm_client.requests, "post", fake_post)
    assert make_client().complete_json([]) == {"possibleDiseases": ["Flu"]}
    assert captured["response_format"] == {"type": "json_object"}


def test_http_error_raises_llm_error(monkeypatch) -> None:
    monkeypatch.setattr(llm_client.requests, "post", lambda *a, **k: FakeResponse(status_code=503, text="down"))
    with pytest.raises(LLMError):
        make_client().complete([])


def test_network_error_raises_llm_error(monkeypatch) -> None:
    def fake_post(*args, **kwargs):
        raise requests.exceptions.Timeout("slow")

    monkeypatch.setattr(llm_client.requests, "post", fake_post)
    with pytest.raises(LLMError):
        make_client().complete([])


def test_unexpected_payload_raises_llm_error(monkeypatch) -> None:
    monkeypatch.setattr(llm_client.requests, "post", lambda *a, **k: FakeResponse({"error": "nope"}))
    with pytest.raises(LLMError):
        make_client().complete([])


def test_non_json_reply_raises_llm_error(monkeypatch) -> None:
    monkeypatch.setattr(llm_client.requests, "post", lambda *a, **k: reply("I think it is the flu."))
    with pytest.raises(LLMError):
        make_client().complete_json([])


def test_default_client_is_shared(monkeypatch) -> None:
    monkeypatch.setattr(llm_client, "_default_client", None)
    assert llm_client.get_default_client() is llm_client.get_default_client()


def test_default_client_built_once_across_threads(monkeypatch) -> None:
    monkeypatch.setattr(llm_client, "_default_client", None)
    built = []
    barrier = threading.Barrier(8)

    def slow_from_config(cls):
        built.append(1)
        time.sleep(0.05)
        return cls(api_key="k")

    monkeypatch.setattr(ChatClient, "from_config", classmethod(slow_from_config))

    def worker():
        barrier.wait()
        return llm_client.get_default_client()

    with ThreadPoolExecutor(max_workers=8) as pool:
        clients = list(pool.map(lambda _: worker(), range(8)))

    assert len(built) == 1
    assert all(c is clients[0] for c in clients)
