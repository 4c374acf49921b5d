"""
Completion client for the chat-completion API.

Wraps ``openai.AsyncOpenAI`` with the parameter quirks of each model family
(token-limit parameter name, no sampling parameters on reasoning models),
transient-error retries, and a JSON mode that grows its token budget and
repairs output cut off by the length limit.
"""

from dataclasses import dataclass
from typing import Any, Optional

import openai
from openai import AsyncOpenAI

from src.config.settings import Settings, get_settings
from src.parsers.json_repair import parse_json_object, repair_truncated_json
from src.utils.exceptions import (
    ConnectionFailed,
    EmptyGeneration,
    GenerationRefused,
    GenerationTruncated,
    InvalidJSON,
)
from src.utils.logger import get_logger
from src.utils.retry import RetryPolicy, retry_with_backoff

logger = get_logger(__name__)

# Models that take ``max_completion_tokens`` instead of ``max_tokens``
COMPLETION_TOKENS_PREFIXES = (
    "gpt-4o",
    "gpt-5",
    "o1",
    "o3",
    "o4-mini",
)

# Reasoning models reject temperature, top_p and the penalties
REASONING_MODEL_PREFIXES = ("o1", "o3", "o4", "gpt-5")

TRANSIENT_ERRORS = (
    openai.APIConnectionError,
    openai.RateLimitError,
    openai.InternalServerError,
)

# Additional attempts after a length cutoff in JSON mode
JSON_LENGTH_RETRIES = 2


def uses_completion_tokens(model: str) -> bool:
    return model.startswith(COMPLETION_TOKENS_PREFIXES)


def supports_sampling(model: str) -> bool:
    return not model.startswith(REASONING_MODEL_PREFIXES)


@dataclass
class CompletionResult:
    """The parts of a chat completion the pipeline looks at."""

    content: Optional[str]
    finish_reason: Optional[str]
    refusal: Optional[str] = None
    total_tokens: Optional[int] = None

    @property
    def truncated(self) -> bool:
        return self.finish_reason == "length"


class CompletionClient:
    """
    Chat-completion client used by every generation step.

    Usage:
        client = CompletionClient()
        text = await client.complete(system_prompt, user_prompt)
        data = await client.complete_json(system_prompt, user_prompt)
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        client: Optional[AsyncOpenAI] = None,
        retry_policy: Optional[RetryPolicy] = None,
    ):
        self.settings = settings or get_settings()
        self.model = self.settings.openai_model
        self._client = client
        self.retry_policy = retry_policy or RetryPolicy.from_settings(
            self.settings, retry_on=TRANSIENT_ERRORS
        )

    @property
    def client(self) -> AsyncOpenAI:
        if self._client is None:
            if not self.settings.openai_api_key:
                raise ValueError("OPENAI_API_KEY is required for content generation")
            self._client = AsyncOpenAI(api_key=self.settings.openai_api_key)
        return self._client

    def build_params(
        self,
        system_prompt: str,
        user_prompt: str,
        *,
        model: str,
        max_tokens: int,
        temperature: Optional[float] = None,
        top_p: Optional[float] = None,
        frequency_penalty: Optional[float] = None,
        presence_penalty: Optional[float] = None,
        json_mode: bool = False,
    ) -> dict[str, Any]:
        """Build request parameters adapted to the model family."""
        params: dict[str, Any] = {
            "model": model,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
        }

        token_param = "max_completion_tokens" if uses_completion_tokens(model) else "max_tokens"
        params[token_param] = max_tokens

        if supports_sampling(model):
            sampling = {
                "temperature": temperature,
                "top_p": top_p,
                "frequency_penalty": frequency_penalty,
                "presence_penalty": presence_penalty,
            }
            params.update({key: value for key, value in sampling.items() if value is not None})

        if json_mode:
            params["response_format"] = {"type": "json_object"}

        return params

    async def _create(self, params: dict[str, Any]) -> CompletionResult:
        completion = await retry_with_backoff(
            lambda: self.client.chat.completions.create(**params),
            self.retry_policy,
            description=f"Completion call ({params['model']})",
        )

        if not completion.choices:
            return CompletionResult(content=None, finish_reason=None)

        choice = completion.choices[0]
        usage = getattr(completion, "usage", None)
        result = CompletionResult(
            content=choice.message.content,
            finish_reason=choice.finish_reason,
            refusal=getattr(choice.message, "refusal", None),
            total_tokens=getattr(usage, "total_tokens", None),
        )
        if result.total_tokens:
            logger.debug(f"Tokens used: {result.total_tokens}")
        return result

    async def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        *,
        model: Optional[str] = None,
        max_tokens: Optional[int] = None,
        temperature: float = 0.8,
        top_p: float = 0.9,
        frequency_penalty: float = 0.3,
        presence_penalty: float = 0.2,
    ) -> str:
        """
        Generate free text.

        Returns:
            The non-empty completion text

        Raises:
            GenerationRefused: The model declined
            GenerationTruncated: Length cutoff with no content
            EmptyGeneration: No content for any other reason
        """
        model = model or self.model
        max_tokens = max_tokens or self.settings.completion_max_tokens
        params = self.build_params(
            system_prompt,
            user_prompt,
            model=model,
            max_tokens=max_tokens,
            temperature=temperature,
            top_p=top_p,
            frequency_penalty=frequency_penalty,
            presence_penalty=presence_penalty,
        )

        result = await self._create(params)

        if result.refusal:
            raise GenerationRefused(result.refusal)
        if not result.content:
            if result.truncated:
                raise GenerationTruncated(max_tokens)
            raise EmptyGeneration(result.finish_reason)
        if result.truncated:
            logger.warning(f"Response truncated at {max_tokens} tokens, returning partial content")

        return result.content

    async def complete_json(
        self,
        system_prompt: str,
        user_prompt: str,
        *,
        model: Optional[str] = None,
        max_tokens: Optional[int] = None,
        temperature: float = 0.7,
    ) -> dict[str, Any]:
        """
        Generate a JSON object.

        A length cutoff is retried up to two more times with a doubled token
        budget (capped by ``json_max_tokens_ceiling``). When the last attempt
        is still cut off, the partial JSON is structurally repaired.

        Raises:
            GenerationRefused: The model declined
            GenerationTruncated: Length cutoff with no content on the last attempt
            EmptyGeneration: No content for any other reason
            InvalidJSON: Nothing parsed into a JSON object
        """
        model = model or self.model
        budget = max_tokens or self.settings.json_max_tokens
        ceiling = max(budget, self.settings.json_max_tokens_ceiling)

        for attempt in range(JSON_LENGTH_RETRIES + 1):
            params = self.build_params(
                system_prompt,
                user_prompt,
                model=model,
                max_tokens=budget,
                temperature=temperature,
                json_mode=True,
            )
            result = await self._create(params)

            if result.refusal:
                raise GenerationRefused(result.refusal)

            content = result.content or ""
            has_retry = attempt < JSON_LENGTH_RETRIES

            if content.strip():
                try:
                    return parse_json_object(content)
                except InvalidJSON:
                    if not result.truncated:
                        raise
                    if not has_retry:
                        logger.warning("JSON truncated on last attempt, attempting structural repair")
                        return parse_json_object(repair_truncated_json(content))
            elif not result.truncated:
                raise EmptyGeneration(result.finish_reason)
            elif not has_retry:
                raise GenerationTruncated(budget)

            next_budget = min(budget * 2, ceiling)
            logger.warning(
                f"JSON response cut off at {budget} tokens, retrying with {next_budget} "
                f"({attempt + 1}/{JSON_LENGTH_RETRIES})"
            )
            budget = next_budget

        raise InvalidJSON("JSON completion exhausted its retries")

    async def check_connection(self) -> bool:
        """
        Verify the API key by listing models.

        Raises:
            ConnectionFailed: If the API cannot be reached
        """
        try:
            await self.client.models.list()
        except (openai.OpenAIError, ValueError) as e:
            raise ConnectionFailed(f"Completion API unreachable: {e}") from e
        logger.info(f"Completion API reachable (model: {self.model})")
        return True
