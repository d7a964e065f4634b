import httpx
import sys

from token_explorer.utils import format_percentage, format_time

# задайте адрес вашего сервиса
proxy_url = "http://0.0.0.0:9041"

# ключ OpenAI можно не указывать, если он задан на сервере (OPENAI_API_KEY)
credential = None


def explore_tokens(prompt, model="gpt-3.5-turbo", temperature=0.7, max_tokens=50):
    payload = {
        "prompt": prompt,
        "model": model,
        "temperature": temperature,
        "maxTokens": max_tokens,
    }
    if credential:
        payload["credential"] = credential

    response = httpx.post(f"{proxy_url}/completion", json=payload, timeout=120)
    response.raise_for_status()
    return response.json()


def print_tokens(result):
    print(result["text"])
    print(f"\nmodel={result['model']} time={format_time(result['responseTime'])} tokens={result['usage']['totalTokens']}\n")

    for token in result["tokenProbabilities"]:
        alternatives = ", ".join(
            f"{alt['token']!r} {format_percentage(alt['probability'])}" for alt in token["alternatives"]
        )
        print(f"{token['token']!r:>16} {format_percentage(token['probability']):>8}  | {alternatives}")


if __name__ == "__main__":
    prompt = " ".join(sys.argv[1:]) or "What is the best drink in the morning? Answer in one word."
    print_tokens(explore_tokens(prompt))
