#!/usr/bin/env python3
"""
Generation module for the shop assistant.

One client per supported provider (Cohere, Together, Groq), each differing
only in endpoint and request/response shape: text in, text out, or
UpstreamProviderError. AIGateway makes a single attempt with the configured
client and falls back to the rule-based composer on any failure.
"""

import enum
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import requests

from .composer import compose_reply
from .config import Config
from .prompt_builder import PromptBuilder
from ..utils.errors import UpstreamProviderError
from ..utils.logger import get_logger

logger = get_logger("ai")

GROQ_SYSTEM_PROMPT = (
    "أنت مساعد ذكي لمتجر ملابس. اجعل ردودك منظمة ومفيدة باللغة العربية. "
    "استخدم الرموز التعبيرية والتنسيق الجميل."
)


class Provider(str, enum.Enum):
    cohere = "cohere"
    together = "together"
    groq = "groq"
    rule_based = "rule_based"


@dataclass
class ProviderSettings:
    """Explicit provider selection handed to the gateway."""
    provider: Provider = Provider.rule_based
    api_keys: Dict[str, Optional[str]] = field(default_factory=dict)
    timeouts: Dict[str, float] = field(default_factory=dict)

    @classmethod
    def from_config(cls, config=Config) -> "ProviderSettings":
        return cls(
            provider=Provider(config.AI_PROVIDER),
            api_keys=config.provider_keys(),
            timeouts={
                "cohere": config.COHERE_TIMEOUT,
                "together": config.TOGETHER_TIMEOUT,
                "groq": config.GROQ_TIMEOUT,
            },
        )

    def available_providers(self) -> List[str]:
        names = [name for name in ("cohere", "together", "groq") if self.api_keys.get(name)]
        names.append(Provider.rule_based.value)
        return names


class GenerationClient:
    """Base client: POST a JSON payload, pull the text out of the response."""

    name = "base"
    url = ""
    default_timeout = 10.0

    def __init__(self, api_key: str = None, timeout: float = None, session: requests.Session = None):
        self.api_key = api_key
        self.timeout = timeout or self.default_timeout
        self.http = session or requests

    def build_payload(self, prompt: str) -> Dict[str, Any]:
        raise NotImplementedError

    def extract_text(self, data: Dict[str, Any]) -> str:
        raise NotImplementedError

    def generate(self, prompt: str) -> str:
        """
        Generate text for `prompt`.

        Raises:
            UpstreamProviderError: missing key, network error, timeout,
                non-2xx status, malformed or empty response.
        """
        if not self.api_key:
            raise UpstreamProviderError(f"{self.name} API key is not configured", provider=self.name)

        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }
        try:
            response = self.http.post(self.url, json=self.build_payload(prompt), headers=headers, timeout=self.timeout)
            response.raise_for_status()
            text = self.extract_text(response.json())
        except requests.exceptions.RequestException as e:
            raise UpstreamProviderError(f"{self.name} request failed: {e}", provider=self.name) from e
        except (KeyError, IndexError, TypeError, ValueError) as e:
            raise UpstreamProviderError(f"{self.name} returned an unexpected response: {e}", provider=self.name) from e

        text = (text or "").strip()
        if not text:
            raise UpstreamProviderError(f"{self.name} returned an empty reply", provider=self.name)
        return text


class CohereClient(GenerationClient):
    name = "cohere"
    url = Config.COHERE_API_URL
    default_timeout = Config.COHERE_TIMEOUT

    def build_payload(self, prompt: str) -> Dict[str, Any]:
        return {
            "model": Config.COHERE_MODEL,
            "prompt": prompt,
            "max_tokens": 200,
            "temperature": 0.7,
            "k": 0,
            "stop_sequences": [],
            "return_likelihoods": "NONE",
        }

    def extract_text(self, data: Dict[str, Any]) -> str:
        return data["generations"][0]["text"]


class TogetherClient(GenerationClient):
    name = "together"
    url = Config.TOGETHER_API_URL
    default_timeout = Config.TOGETHER_TIMEOUT

    def build_payload(self, prompt: str) -> Dict[str, Any]:
        return {
            "model": Config.TOGETHER_MODEL,
            "prompt": prompt,
            "max_tokens": 200,
            "temperature": 0.7,
            "top_p": 0.7,
            "top_k": 50,
            "repetition_penalty": 1,
            "stop": ["</s>"],
        }

    def extract_text(self, data: Dict[str, Any]) -> str:
        return data["output"]["choices"][0]["text"]


class GroqClient(GenerationClient):
    name = "groq"
    url = Config.GROQ_API_URL
    default_timeout = Config.GROQ_TIMEOUT

    def build_payload(self, prompt: str) -> Dict[str, Any]:
        return {
            "messages": [
                {"role": "system", "content": GROQ_SYSTEM_PROMPT},
                {"role": "user", "content": prompt},
            ],
            "model": Config.GROQ_LLM_MODEL,
            "temperature": 0.7,
            "max_tokens": 300,
            "top_p": 1,
            "stream": False,
        }

    def extract_text(self, data: Dict[str, Any]) -> str:
        return data["choices"][0]["message"]["content"]


CLIENTS = {
    Provider.cohere: CohereClient,
    Provider.together: TogetherClient,
    Provider.groq: GroqClient,
}


def make_client(settings: ProviderSettings) -> Optional[GenerationClient]:
    """Client for the selected provider, or None for rule-based replies."""
    client_cls = CLIENTS.get(settings.provider)
    if client_cls is None:
        return None
    return client_cls(
        api_key=settings.api_keys.get(settings.provider.value),
        timeout=settings.timeouts.get(settings.provider.value),
    )


class Outcome(str, enum.Enum):
    not_attempted = "not_attempted"
    attempting = "attempting"
    succeeded = "succeeded"
    failed_fallback = "failed_fallback"


@dataclass
class GatewayReply:
    text: str
    outcome: Outcome
    provider: str


class AIGateway:
    """Single attempt with the configured provider, then the rule-based composer."""

    def __init__(self, settings: ProviderSettings = None, client: GenerationClient = None,
                 prompt_builder: PromptBuilder = None):
        self.settings = settings or ProviderSettings.from_config()
        self.client = client if client is not None else make_client(self.settings)
        self.prompt_builder = prompt_builder or PromptBuilder()

    @property
    def provider_name(self) -> str:
        return self.client.name if self.client else Provider.rule_based.value

    def generate_reply(self, intent: str, items: List[Any], message: str, context: str = "") -> GatewayReply:
        if self.client is None:
            return GatewayReply(compose_reply(intent, items, message), Outcome.not_attempted, Provider.rule_based.value)

        outcome = Outcome.attempting
        try:
            prompt = self.prompt_builder.build_prompt(message, items, context)
            text = self.client.generate(prompt)
            outcome = Outcome.succeeded
            return GatewayReply(text, outcome, self.client.name)
        except UpstreamProviderError as e:
            logger.warning("%s not available, using rule-based responses: %s", self.client.name, e)
        except Exception:
            logger.exception("%s failed unexpectedly, using rule-based responses", self.client.name)

        outcome = Outcome.failed_fallback
        return GatewayReply(compose_reply(intent, items, message), outcome, Provider.rule_based.value)
