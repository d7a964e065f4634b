import math

import httpx
import pytest

from token_explorer.config import clear_settings

UPSTREAM_URL = "https://api.openai.test/v1/chat/completions"


@pytest.fixture(autouse=True)
def fresh_settings():
    clear_settings()
    yield
    clear_settings()


def top(token, probability):
    return {"token": token, "logprob": math.log(probability), "bytes": list(token.encode())}


def token_logprob(token, probability, alternatives):
    return {**top(token, probability), "top_logprobs": alternatives}


def chat_completion_payload(content="Tea", logprobs_content=None, usage=True):
    if logprobs_content is None:
        logprobs_content = [
            token_logprob("Tea", 0.8, [top("Coffee", 0.15), top("Tea", 0.8), top("Water", 0.05)]),
        ]
    payload = {
        "id": "chatcmpl-42",
        "object": "chat.completion",
        "created": 1700000000,
        "model": "gpt-4o-2024-08-06",
        "choices": [{
            "index": 0,
            "finish_reason": "stop",
            "message": {"role": "assistant", "content": content},
            "logprobs": {"content": logprobs_content} if logprobs_content != [] else None,
        }],
    }
    if usage:
        payload["usage"] = {"prompt_tokens": 12, "completion_tokens": 1, "total_tokens": 13}
    return payload


def upstream_response(status_code=200, json=None):
    return httpx.Response(status_code, json=json, request=httpx.Request("POST", UPSTREAM_URL))


@pytest.fixture
def fake_upstream(monkeypatch):
    """Replaces the upstream HTTP call; records every call in `calls`."""
    from token_explorer.upstream import completions

    class FakeUpstream:
        def __init__(self):
            self.calls = []
            self.response = upstream_response(json=chat_completion_payload())
            self.error = None

        async def send_request(self, url, headers, body, timeout=60):
            self.calls.append({"url": url, "headers": headers, "body": body, "timeout": timeout})
            if self.error is not None:
                raise self.error
            return self.response

    fake = FakeUpstream()
    monkeypatch.setattr(completions, "send_request", fake.send_request)
    return fake
