from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

import openai
from openai import OpenAI

from nebulacv.config import Settings
from nebulacv.errors import InternalFailure, NebulaError, RateLimited
from nebulacv.types import ModelResponse

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class ProviderConfig:
    name: str
    base_url: str
    api_key: str
    timeout_sec: int


@dataclass(slots=True)
class GenerationRequest:
    system: str
    prompt: str
    temperature: float
    json_mode: bool = False


class LLMProvider:
    def __init__(self, config: ProviderConfig):
        self.config = config
        self.client = OpenAI(
            base_url=config.base_url,
            api_key=config.api_key,
            timeout=float(config.timeout_sec),
            max_retries=0,
        )

    def complete(self, *, model: str, request: GenerationRequest) -> ModelResponse:
        kwargs: dict[str, Any] = {
            "model": model,
            "messages": [
                {"role": "system", "content": request.system},
                {"role": "user", "content": request.prompt},
            ],
            "temperature": request.temperature,
        }
        if request.json_mode:
            kwargs["response_format"] = {"type": "json_object"}

        try:
            response = self.client.chat.completions.create(**kwargs)
        except Exception as exc:
            raise translate_provider_error(exc, provider=self.config.name) from exc

        text = self._extract_chat_text(response)
        raw = response.model_dump() if hasattr(response, "model_dump") else {}
        if not isinstance(raw, dict):
            raw = {"raw": raw}
        raw["api_path"] = "chat_completions"
        return ModelResponse(content=text, raw=raw)

    @staticmethod
    def _extract_chat_text(response: Any) -> str:
        choices = getattr(response, "choices", None) or []
        if not choices:
            return ""

        message = getattr(choices[0], "message", None)
        if message is None:
            return ""

        content = getattr(message, "content", "")
        if isinstance(content, str):
            return content
        if content is None:
            return ""
        return str(content)


def translate_provider_error(exc: Exception, *, provider: str = "openai") -> NebulaError:
    status_code = getattr(exc, "status_code", None)
    if isinstance(exc, openai.RateLimitError) or status_code == 429:
        logger.warning("Generation provider rate limited provider=%s", provider)
        return RateLimited("OpenAI rate limit exceeded.")

    logger.warning("Generation call failed provider=%s status=%s error=%s", provider, status_code, exc)
    return InternalFailure("The generation service failed. Please try again.")


class ProviderPool:
    def __init__(self, settings: Settings):
        self.settings = settings
        self._openai: LLMProvider | None = None

    def openai(self) -> LLMProvider:
        if self._openai is None:
            self._openai = LLMProvider(
                ProviderConfig(
                    name="openai",
                    base_url=self.settings.openai_base_url,
                    api_key=self.settings.openai_api_key,
                    timeout_sec=self.settings.openai_timeout_sec,
                )
            )
        return self._openai
