"""Narrator for LifeBalance plans.

Turns a plan prompt plus plain-text context into two short supportive
sentences via an explanation service or the OpenAI API. The narrator is
optional: without a provider, or when a call fails, it returns None and
nothing about scores, plans or stored data changes.

Usage:
    narrator = Narrator(provider="service", base_url="http://localhost:3333/explain")
    text = await narrator.narrate(narration_prompt(plan), narration_context(plan))
"""

import hashlib
import json
import logging

import httpx

logger = logging.getLogger(__name__)


_DEFAULT_MODELS = {
    "openai": "gpt-4o-mini",
}

OPENAI_URL = "https://api.openai.com/v1/chat/completions"

SYSTEM_PROMPT = (
    "You are a wellbeing assistant. Be brief, practical, non-judgmental. "
    "No medical claims. Avoid diagnosis."
)


class Narrator:
    """Natural-language plan narrator.

    Args:
        provider: 'service' (POST {prompt, context} → {text}) or 'openai'
        api_key: API key for 'openai'
        model: Model ID (defaults per provider)
        base_url: Explanation service endpoint for 'service'
        max_tokens: Maximum response tokens
        timeout: HTTP timeout in seconds
    """

    def __init__(
        self,
        provider: str,
        api_key: str | None = None,
        model: str | None = None,
        base_url: str = "http://localhost:3333/explain",
        max_tokens: int = 140,
        timeout: float = 15.0,
    ) -> None:
        self.provider = provider
        self.api_key = api_key
        self.model = model or _DEFAULT_MODELS.get(provider, provider)
        self.base_url = base_url
        self.max_tokens = max_tokens
        self.timeout = timeout
        self._cache: dict[str, str] = {}

    def _cache_key(self, prompt: str, context: str | None) -> str:
        """Compute deterministic cache key from the request."""
        canonical = json.dumps(
            {"provider": self.provider, "prompt": prompt, "context": context},
            sort_keys=True,
        )
        return hashlib.sha256(canonical.encode()).hexdigest()

    @staticmethod
    def _build_user_message(prompt: str, context: str | None) -> str:
        prefix = f"Context:\n{context}\n\n" if context else ""
        return f"{prefix}Task:\n{prompt}"

    async def narrate(self, prompt: str, context: str | None = None) -> str | None:
        """Generate a short explanation.

        Args:
            prompt: Task for the model (see engine.plan.narration_prompt)
            context: Optional plain-text plan context

        Returns:
            Generated text, or None if the call fails.
        """
        key = self._cache_key(prompt, context)
        if key in self._cache:
            logger.debug("Narrator cache hit")
            return self._cache[key]

        try:
            if self.provider == "service":
                result = await self._call_service(prompt, context)
            elif self.provider == "openai":
                result = await self._call_openai(
                    SYSTEM_PROMPT, self._build_user_message(prompt, context)
                )
            else:
                logger.warning("Unknown AI provider: %s", self.provider)
                return None

            if result:
                self._cache[key] = result
                logger.info("Narrator generated explanation via %s", self.provider)

            return result

        except Exception as e:
            logger.warning("Narrator call failed: %s", e)
            return None

    async def _call_service(self, prompt: str, context: str | None) -> str | None:
        """POST to the explanation service."""
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            response = await client.post(
                self.base_url,
                json={"prompt": prompt, "context": context},
            )

            if response.status_code != 200:
                logger.warning(
                    "Explanation service error: %d %s",
                    response.status_code,
                    response.text[:200],
                )
                return None

            text = response.json().get("text")
            return text if isinstance(text, str) and text else None

    async def _call_openai(self, system: str, user: str) -> str | None:
        """Call OpenAI Chat Completions API."""
        if not self.api_key:
            logger.warning("OpenAI narrator has no API key configured")
            return None

        async with httpx.AsyncClient(timeout=self.timeout) as client:
            response = await client.post(
                OPENAI_URL,
                headers={
                    "Authorization": f"Bearer {self.api_key}",
                    "Content-Type": "application/json",
                },
                json={
                    "model": self.model,
                    "max_tokens": self.max_tokens,
                    "temperature": 0.6,
                    "messages": [
                        {"role": "system", "content": system},
                        {"role": "user", "content": user},
                    ],
                },
            )

            if response.status_code != 200:
                logger.warning(
                    "OpenAI API error: %d %s",
                    response.status_code,
                    response.text[:200],
                )
                return None

            data = response.json()
            choices = data.get("choices", [])
            if choices:
                return choices[0].get("message", {}).get("content")
            return None


def narrator_from_settings(config) -> Narrator | None:
    """Build a Narrator from Settings, or None when no provider is set."""
    if not config.ai_provider:
        return None
    return Narrator(
        provider=config.ai_provider,
        api_key=config.openai_api_key,
        model=config.ai_model,
        base_url=config.explain_service_url,
        max_tokens=config.ai_max_tokens,
    )
