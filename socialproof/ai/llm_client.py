"""
SocialProof LLM Client
======================

Provider-neutral async client for the AI review analysis.
Supports Claude (Anthropic) and OpenAI GPT.

The SDK clients are blocking; calls run in a worker thread so the event loop
(and caller deadlines) stay responsive.
"""

import asyncio
import json
import logging
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional

from ..config import AIConfig

logger = logging.getLogger(__name__)

DEFAULT_MODELS = {
    "anthropic": "claude-haiku-4-5-20251001",
    "openai": "gpt-4o-mini",
}

_CODE_FENCE = re.compile(r"^```(?:json)?\s*|\s*```$", re.IGNORECASE)


class LLMResponseError(ValueError):
    """LLM output is empty, not JSON, or misses required fields."""
    pass


class LLMProvider(Enum):
    """Supported LLM providers."""
    ANTHROPIC = "anthropic"
    OPENAI = "openai"


@dataclass
class LLMResponse:
    """Raw LLM response."""
    content: str
    model: str
    provider: LLMProvider
    tokens_input: int
    tokens_output: int

    @property
    def total_tokens(self) -> int:
        return self.tokens_input + self.tokens_output


def parse_json_content(content: str) -> Dict[str, Any]:
    """Parse a JSON object, tolerating a surrounding markdown code fence."""
    text = _CODE_FENCE.sub("", (content or "").strip()).strip()
    if not text:
        raise LLMResponseError("LLM returned an empty response")
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        logger.error(f"JSON parse error: {e}\nContent: {content[:500]}")
        raise LLMResponseError(f"LLM did not return valid JSON: {e}") from e
    if not isinstance(data, dict):
        raise LLMResponseError(f"LLM returned {type(data).__name__}, expected a JSON object")
    return data


class LLMClient(ABC):
    """Abstract LLM client."""

    provider: LLMProvider
    model: str

    @abstractmethod
    async def generate(
        self,
        prompt: str,
        system: Optional[str] = None,
        max_tokens: int = 1500,
        temperature: float = 0.7,
    ) -> LLMResponse:
        """Generate a text response."""

    async def generate_json(
        self,
        prompt: str,
        system: Optional[str] = None,
        max_tokens: int = 1500,
    ) -> Dict[str, Any]:
        """Generate and parse a JSON object response."""
        json_system = (system or "") + (
            "\n\nIMPORTANT: Respond ONLY with valid JSON. "
            "No text before or after the JSON, no markdown code blocks."
        )
        response = await self.generate(
            prompt=prompt,
            system=json_system,
            max_tokens=max_tokens,
            temperature=0.3,
        )
        return parse_json_content(response.content)


class AnthropicClient(LLMClient):
    """Client for Claude (Anthropic)."""

    provider = LLMProvider.ANTHROPIC

    def __init__(self, api_key: Optional[str] = None, model: Optional[str] = None, timeout: float = 60.0):
        self.api_key = (api_key or "").strip() or None
        self.model = model or DEFAULT_MODELS["anthropic"]
        self.timeout = timeout
        self._client = None

        if not self.api_key:
            logger.warning("ANTHROPIC_API_KEY not set - AI analysis disabled")

    def _get_client(self):
        """Lazy init of the Anthropic client."""
        if self._client is None:
            import anthropic
            self._client = anthropic.Anthropic(api_key=self.api_key, timeout=self.timeout)
        return self._client

    async def generate(
        self,
        prompt: str,
        system: Optional[str] = None,
        max_tokens: int = 1500,
        temperature: float = 0.7,
    ) -> LLMResponse:
        if not self.api_key:
            raise ValueError("ANTHROPIC_API_KEY required")

        client = self._get_client()
        kwargs = {
            "model": self.model,
            "max_tokens": max_tokens,
            "messages": [{"role": "user", "content": prompt}],
            "temperature": temperature,
        }
        if system:
            kwargs["system"] = system

        response = await asyncio.to_thread(client.messages.create, **kwargs)

        content = response.content[0].text if response.content else ""
        return LLMResponse(
            content=content,
            model=self.model,
            provider=self.provider,
            tokens_input=response.usage.input_tokens,
            tokens_output=response.usage.output_tokens,
        )


class OpenAIClient(LLMClient):
    """Client for OpenAI GPT."""

    provider = LLMProvider.OPENAI

    def __init__(self, api_key: Optional[str] = None, model: Optional[str] = None, timeout: float = 60.0):
        self.api_key = api_key
        self.model = model or DEFAULT_MODELS["openai"]
        self.timeout = timeout
        self._client = None

    def _get_client(self):
        if self._client is None:
            import openai
            self._client = openai.OpenAI(api_key=self.api_key, timeout=self.timeout)
        return self._client

    async def generate(
        self,
        prompt: str,
        system: Optional[str] = None,
        max_tokens: int = 1500,
        temperature: float = 0.7,
    ) -> LLMResponse:
        if not self.api_key:
            raise ValueError("OPENAI_API_KEY required")

        client = self._get_client()
        messages = []
        if system:
            messages.append({"role": "system", "content": system})
        messages.append({"role": "user", "content": prompt})

        response = await asyncio.to_thread(
            client.chat.completions.create,
            model=self.model,
            messages=messages,
            max_tokens=max_tokens,
            temperature=temperature,
        )

        return LLMResponse(
            content=response.choices[0].message.content or "",
            model=self.model,
            provider=self.provider,
            tokens_input=response.usage.prompt_tokens,
            tokens_output=response.usage.completion_tokens,
        )


def get_llm_client(config: Optional[AIConfig] = None) -> Optional[LLMClient]:
    """
    Build the configured LLM client.

    Returns None when the provider is ``keyword`` or lacks credentials, in
    which case summaries come from the keyword analyzer.
    """
    config = config or AIConfig()
    if not config.enabled:
        if config.provider != "keyword":
            logger.warning(f"AI provider '{config.provider}' selected but not configured - using keyword fallback")
        return None

    if config.provider == "anthropic":
        return AnthropicClient(
            api_key=config.anthropic_api_key,
            model=config.model,
            timeout=config.request_timeout_seconds,
        )
    return OpenAIClient(
        api_key=config.openai_api_key,
        model=config.model,
        timeout=config.request_timeout_seconds,
    )
