# =============================================================================
# Multi-Provider LLM Abstraction — Classified Call Outcomes
# =============================================================================
#
# Wraps one upstream text-generation call and classifies what happened,
# instead of letting provider exceptions escape:
#
#   Success(text)        → the generated text
#   RateLimited(message) → upstream asked us to slow down (HTTP 429)
#   Fatal(message)       → anything else: network error, bad key, bad JSON
#
# The retry loop in workers/serial_worker.py pattern-matches on these.
#
# ARCHITECTURE:
#   LLMProvider (Protocol)
#   ├── GeminiProvider           — Gemini generateContent over httpx
#   ├── OpenAICompatibleProvider — any OpenAI-compatible chat API
#   └── get_llm_provider()       — factory, reads from Settings
#
# Providers never retry on their own: the OpenAI SDK's built-in retries are
# disabled so the serialized worker is the only place that decides when to
# call upstream again.
# =============================================================================

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol, Union

import httpx

from interview_prep.config import Settings, get_settings
from interview_prep.services.prompting import QUESTION_PLACEHOLDER, extract_text

if TYPE_CHECKING:
    from openai import AsyncOpenAI

logger = logging.getLogger(__name__)

DEFAULT_GEMINI_MODEL = "gemini-2.0-flash"
DEFAULT_GEMINI_BASE_URL = "https://generativelanguage.googleapis.com/v1beta"
DEFAULT_OPENAI_MODEL = "gpt-4o-mini"
DEFAULT_TIMEOUT_SECONDS = 45.0


# ---------------------------------------------------------------------------
# Call Outcomes
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Success:
    text: str


@dataclass(frozen=True)
class RateLimited:
    message: str


@dataclass(frozen=True)
class Fatal:
    message: str


CallOutcome = Union[Success, RateLimited, Fatal]


# ---------------------------------------------------------------------------
# Protocol Definition
# ---------------------------------------------------------------------------


class LLMProvider(Protocol):
    """
    Protocol for a single-prompt text generation backend.

    Implementations must not raise for upstream failures; they return
    RateLimited or Fatal instead.
    """

    async def generate(
        self,
        prompt: str,
        placeholder: str = QUESTION_PLACEHOLDER,
    ) -> CallOutcome:
        """
        Send one prompt upstream.

        Args:
            prompt: The full prompt text.
            placeholder: Text returned inside Success when the response
                has no generated content.
        """
        ...

    async def aclose(self) -> None:
        """Release network resources."""
        ...


# ---------------------------------------------------------------------------
# Implementation 1: Gemini (REST over httpx)
# ---------------------------------------------------------------------------


class GeminiProvider:
    """
    Google Gemini provider using the generateContent REST endpoint.

    Request:  POST {base_url}/models/{model}:generateContent?key=...
              {"contents": [{"parts": [{"text": prompt}]}]}
    Response: {"candidates": [{"content": {"parts": [{"text": ...}]}}]}

    A 429 response becomes RateLimited with the full response body in the
    message, since that is where Gemini puts its "retry in Ns" hint.
    """

    def __init__(
        self,
        api_key: str | None = None,
        model: str = DEFAULT_GEMINI_MODEL,
        base_url: str = DEFAULT_GEMINI_BASE_URL,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        resolved_key = (api_key or "").strip()
        if not resolved_key:
            raise ValueError(
                "No Gemini API key configured. Set GEMINI_API_KEY in .env"
            )

        self._api_key = resolved_key
        self._model = model.replace("models/", "")
        self._base_url = base_url.rstrip("/")
        self._client = client or httpx.AsyncClient(
            timeout=httpx.Timeout(timeout_seconds, connect=10.0),
        )

        logger.info("Initialized GeminiProvider (model=%s)", self._model)

    @property
    def model(self) -> str:
        return self._model

    async def generate(
        self,
        prompt: str,
        placeholder: str = QUESTION_PLACEHOLDER,
    ) -> CallOutcome:
        """Call generateContent once and classify the result."""
        url = f"{self._base_url}/models/{self._model}:generateContent"
        body = {"contents": [{"parts": [{"text": prompt}]}]}

        logger.info("Processing request for model: %s", self._model)

        try:
            response = await self._client.post(
                url, params={"key": self._api_key}, json=body,
            )
        except httpx.HTTPError as exc:
            return Fatal(f"{type(exc).__name__}: {exc}")

        if response.status_code == 429:
            return RateLimited(_describe_error(response))

        if response.is_error:
            return Fatal(_describe_error(response))

        try:
            payload = response.json()
        except ValueError as exc:
            return Fatal(f"Malformed response from Gemini: {exc}")

        if not isinstance(payload, dict):
            return Fatal("Malformed response from Gemini: expected a JSON object")

        return Success(extract_text(payload, placeholder))

    async def aclose(self) -> None:
        await self._client.aclose()


def _describe_error(response: httpx.Response) -> str:
    """Format an error response as '<status> <reason>: <body>'."""
    return f"{response.status_code} {response.reason_phrase}: {response.text}"


# ---------------------------------------------------------------------------
# Implementation 2: OpenAI-Compatible (DeepSeek, Qwen, OpenAI, etc.)
# ---------------------------------------------------------------------------


class OpenAICompatibleProvider:
    """
    OpenAI-compatible provider (OpenAI, DeepSeek, Qwen and the like).

    The prompt is sent as a single user message. RateLimitError maps to
    RateLimited; every other APIError maps to Fatal.
    """

    def __init__(
        self,
        api_key: str | None = None,
        model: str = DEFAULT_OPENAI_MODEL,
        base_url: str | None = None,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        client: AsyncOpenAI | None = None,
    ) -> None:
        from openai import AsyncOpenAI

        self._model = model

        if client is not None:
            self._client = client
        else:
            if not api_key:
                raise ValueError(
                    "No API key configured for OpenAI-compatible provider. "
                    "Set LLM_API_KEY in .env"
                )

            client_kwargs: dict = {
                "api_key": api_key,
                "max_retries": 0,
                "timeout": timeout_seconds,
            }
            if base_url:
                client_kwargs["base_url"] = base_url
            self._client = AsyncOpenAI(**client_kwargs)

        logger.info(
            "Initialized OpenAICompatibleProvider (model=%s, base_url=%s)",
            self._model,
            base_url or "https://api.openai.com/v1",
        )

    @property
    def model(self) -> str:
        return self._model

    async def generate(
        self,
        prompt: str,
        placeholder: str = QUESTION_PLACEHOLDER,
    ) -> CallOutcome:
        """Call chat completions once and classify the result."""
        import openai

        try:
            response = await self._client.chat.completions.create(
                model=self._model,
                messages=[{"role": "user", "content": prompt}],
            )
        except openai.RateLimitError as exc:
            return RateLimited(str(exc))
        except openai.APIError as exc:
            return Fatal(str(exc))

        if not response.choices:
            return Success(placeholder)
        return Success(response.choices[0].message.content or placeholder)

    async def aclose(self) -> None:
        await self._client.close()


# ---------------------------------------------------------------------------
# Factory Function
# ---------------------------------------------------------------------------


def get_llm_provider(
    config: Settings | None = None,
) -> GeminiProvider | OpenAICompatibleProvider:
    """
    Build the provider selected by `llm_provider`.

    - "gemini" → GeminiProvider
    - "openai_compatible" → OpenAICompatibleProvider

    Called once per application lifespan; the result is owned by the
    generation pipeline, not cached globally.

    Raises:
        ValueError: If the selected provider has no API key.
    """
    config = config or get_settings()
    if config.llm_provider == "openai_compatible":
        return OpenAICompatibleProvider(
            api_key=config.llm_api_key,
            model=config.llm_model,
            base_url=config.llm_base_url,
            timeout_seconds=config.llm_timeout_seconds,
        )
    return GeminiProvider(
        api_key=config.gemini_api_key,
        model=config.gemini_model,
        base_url=config.gemini_base_url,
        timeout_seconds=config.llm_timeout_seconds,
    )
