import pytest
import httpx
import os
from dotenv import load_dotenv

load_dotenv('.testenv')

PROXY_URL = os.getenv("E2E_PROXY_URL", "")
PASSKEY = os.getenv("EXPLORER_PASSKEY", "")

pytestmark = pytest.mark.skipif(not PROXY_URL, reason="E2E_PROXY_URL is not set")

prompt = "Answer with only one word: what is the best drink in the morning?"


@pytest.mark.parametrize("model", [
    "gpt-3.5-turbo",
    "gpt-4",
    "gpt-4o-mini",
])
def test_completion_with_token_probabilities(model):
    response = httpx.post(f"{PROXY_URL}/completion", json={
        "prompt": prompt,
        "model": model,
        "temperature": 0.7,
        "maxTokens": 10,
    }, timeout=120)

    assert response.status_code == 200
    body = response.json()
    assert isinstance(body["text"], str) and body["text"] != ""
    assert body["tokenProbabilities"]

    for token in body["tokenProbabilities"]:
        assert 0 < token["probability"] <= 1
        assert all(alt["token"] != token["token"] for alt in token["alternatives"])
        probabilities = [alt["probability"] for alt in token["alternatives"]]
        assert probabilities == sorted(probabilities, reverse=True)

    assert "".join(t["token"] for t in body["tokenProbabilities"]) == body["text"]


def test_completion_with_invalid_parameters():
    response = httpx.post(f"{PROXY_URL}/completion", json={
        "prompt": prompt,
        "temperature": 2.5,
        "maxTokens": 10_000,
    }, timeout=30)

    assert response.status_code == 400


def test_completion_with_invalid_model():
    response = httpx.post(f"{PROXY_URL}/completion", json={
        "prompt": prompt,
        "model": "invalid-model",
    }, timeout=30)

    assert response.status_code == 404


@pytest.mark.skipif(not PASSKEY, reason="EXPLORER_PASSKEY is not set")
def test_verify_access():
    assert httpx.post(f"{PROXY_URL}/verify-access", json={"passkey": PASSKEY}).status_code == 200
    assert httpx.post(f"{PROXY_URL}/verify-access", json={"passkey": PASSKEY + "x"}).status_code == 401
