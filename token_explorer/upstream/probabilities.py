import math
from typing import Optional

from openai.types.chat import ChatCompletionTokenLogprob
from openai.types.chat.chat_completion import ChoiceLogprobs

from token_explorer.log_config import logger
from token_explorer.models import AlternativeToken, TokenProbability


def normalize_logprobs(logprobs: Optional[ChoiceLogprobs]) -> list[TokenProbability]:
    """
    Converts the upstream per-token log-probabilities into TokenProbability records.

    Args:
        logprobs (ChoiceLogprobs | None): `choices[0].logprobs` of an OpenAI chat completion.

    Returns:
        list[TokenProbability]: One record per generated token, in generation order.
        Empty when the upstream returned no log-probability data.
    """
    if logprobs is None or not logprobs.content:
        logger.debug("No logprobs in upstream response, returning empty token list")
        return []

    return [_normalize_token(token_logprob) for token_logprob in logprobs.content]


def _normalize_token(token_logprob: ChatCompletionTokenLogprob) -> TokenProbability:
    chosen = token_logprob.token

    # Exact text match only: "Tea", " Tea" and "tea" are different tokens
    alternatives = [
        AlternativeToken(token=top.token, probability=math.exp(top.logprob))
        for top in (token_logprob.top_logprobs or [])
        if top.token != chosen
    ]
    alternatives.sort(key=lambda alternative: alternative.probability, reverse=True)

    return TokenProbability(
        token=chosen,
        probability=math.exp(token_logprob.logprob),
        alternatives=alternatives,
    )
