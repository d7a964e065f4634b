from openai.types.chat import ChatCompletion as OpenAIChatCompletion
from openai.types.chat.completion_create_params import (
    CompletionCreateParamsNonStreaming as OpenAICompletionCreateParamsNonStreaming,
)
from openai._exceptions import APIStatusError

from token_explorer.config import ConfigurationError, Settings, get_settings
from token_explorer.log_config import logger
from token_explorer.models import CompletionRequest, CompletionResult, Usage
from token_explorer.upstream.probabilities import normalize_logprobs
from token_explorer.utils import estimate_token_count, format_time
import json
import httpx
import time
from typing import Optional

TOP_LOGPROBS = 5


async def send_request(url: str, headers: dict, body: str, timeout: float = 60):
    async with httpx.AsyncClient() as client:
        response = await client.post(url, headers=headers, content=body, timeout=timeout)
        return response


async def get_completion_with_probabilities(
    completion_request: CompletionRequest,
    settings: Optional[Settings] = None
) -> CompletionResult:
    """
    Sends the prompt upstream once and returns the text with per-token probabilities.

    Args:
        completion_request (CompletionRequest): Validated request from the client.
        settings (Settings | None): Configuration to use, the process-wide one by default.

    Returns:
        CompletionResult: Generated text, token probabilities, usage and timing.

    Raises:
        ConfigurationError: No API key on the server or in the request.
        APIStatusError: The upstream answered with a non-200 status.
        httpx.HTTPError: The upstream could not be reached.
    """
    settings = settings or get_settings()

    model = resolve_model(completion_request.model, settings.model_prefix_map)
    api_key = _resolve_api_key(completion_request, settings)

    url = f"{settings.openai_base_url}/chat/completions"
    headers = _prepare_request_headers(api_key)
    body = json.dumps(_build_request_params(completion_request, model))

    logger.info("Requesting completion", extra={
        "model": model,
        "requested_model": completion_request.model,
        "temperature": completion_request.temperature,
        "max_tokens": completion_request.maxTokens,
        "estimated_prompt_tokens": estimate_token_count(completion_request.prompt),
    })
    logger.debug(f"Sending request to {url}, body: {body}")

    start_time = time.perf_counter()
    response: httpx.Response = await send_request(url, headers, body, settings.upstream_timeout)
    elapsed = time.perf_counter() - start_time

    if response.status_code != 200:
        logger.error(f"Error generating completion response: {response.status_code}, {response.text}")
        raise APIStatusError(message=_extract_error_message(response), response=response, body=_extract_error_body(response))

    logger.debug(f"Upstream response: {response.text}")
    openai_completion = OpenAIChatCompletion.model_validate(response.json())

    result = _transform_to_completion_result(openai_completion, model, elapsed)
    _log_success_on_completion(result, elapsed)
    return result


def resolve_model(model: str, model_prefix_map: dict[str, str]) -> str:
    """Maps legacy model identifiers to their current equivalent by prefix."""
    for prefix, replacement in model_prefix_map.items():
        if model.startswith(prefix):
            logger.debug(f"Model {model} matches legacy prefix {prefix}, using {replacement}")
            return replacement
    return model


def _resolve_api_key(completion_request: CompletionRequest, settings: Settings) -> str:
    api_key = settings.openai_api_key or completion_request.credential
    if not api_key:
        raise ConfigurationError("No OpenAI API key configured: set OPENAI_API_KEY or pass a credential")
    return api_key


def _prepare_request_headers(api_key: str) -> dict:
    return {
        "Content-Type": "application/json",
        "Authorization": f"Bearer {api_key}",
    }


def _build_request_params(completion_request: CompletionRequest, model: str) -> OpenAICompletionCreateParamsNonStreaming:
    return {
        "model": model,
        "messages": [
            {"role": "user", "content": completion_request.prompt}
        ],
        "temperature": completion_request.temperature,
        "max_tokens": completion_request.maxTokens,
        "logprobs": True,
        "top_logprobs": TOP_LOGPROBS,
    }


def _transform_to_completion_result(
    openai_completion: OpenAIChatCompletion,
    model: str,
    elapsed: float
) -> CompletionResult:
    choice = openai_completion.choices[0]
    usage = openai_completion.usage

    return CompletionResult(
        text=choice.message.content or "",
        tokenProbabilities=normalize_logprobs(choice.logprobs),
        usage=Usage(
            promptTokens=usage.prompt_tokens if usage else 0,
            completionTokens=usage.completion_tokens if usage else 0,
            totalTokens=usage.total_tokens if usage else 0,
        ),
        responseTime=round(elapsed, 2),
        model=model,
    )


def _extract_error_body(response: httpx.Response):
    try:
        return response.json()
    except ValueError:
        return response.text


def _extract_error_message(response: httpx.Response) -> str:
    body = _extract_error_body(response)
    if isinstance(body, dict) and isinstance(body.get("error"), dict):
        return body["error"].get("message") or response.text
    return response.text or f"Upstream returned {response.status_code}"


def _log_success_on_completion(result: CompletionResult, elapsed: float):
    logger.success(f"Completion finished in {format_time(elapsed)}",
                   extra={
                       "model": result.model,
                       "prompt_tokens": result.usage.promptTokens,
                       "completion_tokens": result.usage.completionTokens,
                       "total_tokens": result.usage.totalTokens,
                       "scored_tokens": len(result.tokenProbabilities),
                   })
