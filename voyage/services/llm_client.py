"""Chat completions for the concierge — OpenAI when configured, Anthropic as the backup."""

import logging

import anthropic
from openai import AsyncOpenAI

from voyage.config import settings

logger = logging.getLogger(__name__)


class LLMClient:
    """Tries each configured provider in order and returns the first reply."""

    def __init__(self, openai_api_key: str | None = None, anthropic_api_key: str | None = None):
        if openai_api_key is None:
            openai_api_key = settings.openai_api_key
        if anthropic_api_key is None:
            anthropic_api_key = settings.anthropic_api_key

        self._openai = AsyncOpenAI(api_key=openai_api_key) if openai_api_key else None
        self._anthropic = anthropic.AsyncAnthropic(api_key=anthropic_api_key) if anthropic_api_key else None

    @property
    def providers(self) -> list[str]:
        names = []
        if self._openai is not None:
            names.append("openai")
        if self._anthropic is not None:
            names.append("anthropic")
        return names

    @property
    def available(self) -> bool:
        return bool(self.providers)

    async def _ask_openai(self, system: str, turns: list[dict], max_tokens: int, temperature: float) -> str:
        response = await self._openai.chat.completions.create(
            model=settings.openai_model,
            messages=[{"role": "system", "content": system}, *turns],
            max_tokens=max_tokens,
            temperature=temperature,
        )
        return (response.choices[0].message.content or "").strip()

    async def _ask_anthropic(self, system: str, turns: list[dict], max_tokens: int, temperature: float) -> str:
        response = await self._anthropic.messages.create(
            model=settings.anthropic_model,
            system=system,
            messages=turns,
            max_tokens=max_tokens,
            temperature=temperature,
        )
        return response.content[0].text.strip()

    async def complete(
        self,
        system: str,
        user: str,
        *,
        messages: list[dict] | None = None,
        max_tokens: int = 600,
        temperature: float = 0.7,
    ) -> str:
        """Reply to ``user``, or to the full ``messages`` conversation when given.

        Raises RuntimeError when no provider is configured or every provider fails.
        """
        if not self.available:
            raise RuntimeError("No LLM provider configured")

        turns = list(messages) if messages else [{"role": "user", "content": user}]
        askers = {"openai": self._ask_openai, "anthropic": self._ask_anthropic}

        failures = []
        for name in self.providers:
            try:
                return await askers[name](system, turns, max_tokens, temperature)
            except Exception as e:
                logger.warning(f"LLM provider {name} failed: {e}")
                failures.append(f"{name}: {e}")
        raise RuntimeError(f"All LLM providers failed: {'; '.join(failures)}")


llm_client = LLMClient()
