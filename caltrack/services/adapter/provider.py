"""
Estimator Provider Adapter - Abstract layer for text-generation providers.
Supports Gemini, OpenAI, DeepSeek and Claude.

Every transport, timeout or provider error leaves an adapter as
RemoteCallFailure.
"""
from abc import ABC, abstractmethod
from typing import Any, Optional

import httpx

from caltrack.core.config import Settings, settings as default_settings
from caltrack.core.exceptions import EstimatorUnavailable, RemoteCallFailure
from caltrack.core.logging import EstimatorCallTrace, get_logger, trace_estimator_call

logger = get_logger(__name__)


# Provider configurations
PROVIDER_CONFIG = {
    "gemini": {
        "base_url": "https://generativelanguage.googleapis.com/v1beta",
        "default_model": "gemini-2.0-flash",
    },
    "openai": {
        "base_url": "https://api.openai.com/v1",
        "default_model": "gpt-4o-mini",
    },
    "deepseek": {
        "base_url": "https://api.deepseek.com",
        "default_model": "deepseek-chat",
    },
    "claude": {
        "base_url": "https://api.anthropic.com/v1",
        "default_model": "claude-3-5-haiku-20241022",
    },
}

MAX_OUTPUT_TOKENS = 64


class ChatMessage:
    """Chat message structure."""

    def __init__(self, role: str, content: str):
        self.role = role
        self.content = content

    def to_dict(self) -> dict:
        return {"role": self.role, "content": self.content}


class AIResponse:
    """Estimator response structure."""

    def __init__(
        self,
        content: str,
        prompt_tokens: int | None = None,
        completion_tokens: int | None = None,
        total_tokens: int | None = None,
    ):
        self.content = content
        self.prompt_tokens = prompt_tokens
        self.completion_tokens = completion_tokens
        self.total_tokens = total_tokens


class AIProviderAdapter(ABC):
    """Abstract base class for estimator provider adapters."""

    endpoint_name = "chat/completions"

    def __init__(
        self,
        api_key: str,
        base_url: str | None = None,
        model: str | None = None,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key
        self.base_url = base_url
        self.model = model
        self.timeout = timeout
        self.transport = transport
        self.provider_name = "unknown"

    @abstractmethod
    def build_request(
        self,
        messages: list[ChatMessage],
        temperature: float,
    ) -> tuple[str, dict[str, str], dict[str, str], dict[str, Any]]:
        """Return (endpoint, headers, params, body) for a completion request."""

    @abstractmethod
    def parse_response(self, data: dict[str, Any]) -> AIResponse:
        """Extract text and token usage from the provider's JSON payload."""

    async def chat_completion(
        self,
        messages: list[ChatMessage],
        temperature: float = 0.2,
    ) -> AIResponse:
        """
        Send one completion request.

        Raises:
            RemoteCallFailure: on timeout, transport error, non-200 status
                or a payload the adapter cannot read.
        """
        endpoint, headers, params, body = self.build_request(messages, temperature)

        with trace_estimator_call(
            logger,
            provider=self.provider_name,
            model=self.model,
            endpoint=self.endpoint_name,
        ) as call:
            call.set_prompt("\n".join(m.content for m in messages))
            data = await self._post(call, endpoint, headers, params, body)

            try:
                result = self.parse_response(data)
            except (KeyError, IndexError, TypeError, AttributeError) as e:
                call.set_error("invalid_payload", str(e))
                raise RemoteCallFailure(
                    "Unexpected estimator response format",
                    details=f"{type(e).__name__}: {e}",
                ) from e

            call.set_response(result.content, total_tokens=result.total_tokens)
            return result

    async def _post(
        self,
        call: EstimatorCallTrace,
        endpoint: str,
        headers: dict[str, str],
        params: dict[str, str],
        body: dict[str, Any],
    ) -> dict[str, Any]:
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.post(
                    endpoint,
                    headers=headers,
                    params=params or None,
                    json=body,
                )
        except httpx.TimeoutException as e:
            call.set_error("timeout", f"Request timed out after {self.timeout}s")
            raise RemoteCallFailure(
                "Estimator request timed out",
                details=f"timeout={self.timeout}s",
            ) from e
        except httpx.HTTPError as e:
            call.set_error("transport_error", str(e))
            raise RemoteCallFailure("Estimator request failed", details=str(e)) from e

        if response.status_code != 200:
            error_msg = _extract_error_message(response)
            call.set_error("api_error", f"HTTP {response.status_code}: {error_msg}")
            raise RemoteCallFailure(
                f"Estimator API error {response.status_code}",
                details=error_msg,
            )

        try:
            data = response.json()
        except ValueError as e:
            call.set_error("invalid_json", str(e))
            raise RemoteCallFailure("Estimator returned invalid JSON", details=str(e)) from e

        if not isinstance(data, dict):
            call.set_error("invalid_payload", "response body is not an object")
            raise RemoteCallFailure("Unexpected estimator response format")
        return data


def _extract_error_message(response: httpx.Response) -> str:
    """Best-effort error message from a provider error body."""
    try:
        error_data = response.json() if response.content else {}
    except ValueError:
        return response.text[:200] or str(response.status_code)
    if isinstance(error_data, dict):
        error = error_data.get("error")
        if isinstance(error, dict) and error.get("message"):
            return str(error["message"])
        if isinstance(error, str):
            return error
    return str(response.status_code)


class OpenAICompatibleAdapter(AIProviderAdapter):
    """
    Adapter for OpenAI-compatible APIs.
    Works with OpenAI, DeepSeek, and most LLM APIs.
    """

    def __init__(
        self,
        api_key: str,
        base_url: str,
        model: str,
        provider_name: str = "openai",
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        super().__init__(api_key, base_url, model, timeout, transport)
        self.provider_name = provider_name

    def build_request(self, messages, temperature):
        headers = {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self.api_key}",
        }
        body = {
            "model": self.model,
            "messages": [m.to_dict() for m in messages],
            "temperature": temperature,
            "max_tokens": MAX_OUTPUT_TOKENS,
        }
        return f"{self.base_url}/chat/completions", headers, {}, body

    def parse_response(self, data):
        content = data["choices"][0]["message"].get("content") or ""
        usage = data.get("usage") or {}
        return AIResponse(
            content=content,
            prompt_tokens=usage.get("prompt_tokens"),
            completion_tokens=usage.get("completion_tokens"),
            total_tokens=usage.get("total_tokens"),
        )


class ClaudeAdapter(AIProviderAdapter):
    """Adapter for Anthropic Claude API."""

    endpoint_name = "messages"

    def __init__(
        self,
        api_key: str,
        model: str = PROVIDER_CONFIG["claude"]["default_model"],
        base_url: str = PROVIDER_CONFIG["claude"]["base_url"],
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        super().__init__(api_key, base_url, model, timeout, transport)
        self.provider_name = "claude"

    def build_request(self, messages, temperature):
        # Extract system message
        system_content = ""
        chat_messages = []
        for msg in messages:
            if msg.role == "system":
                system_content += msg.content + "\n"
            else:
                chat_messages.append(msg.to_dict())

        headers = {
            "Content-Type": "application/json",
            "x-api-key": self.api_key,
            "anthropic-version": "2023-06-01",
        }
        body: dict[str, Any] = {
            "model": self.model,
            "max_tokens": MAX_OUTPUT_TOKENS,
            "messages": chat_messages,
            "temperature": temperature,
        }
        if system_content:
            body["system"] = system_content.strip()
        return f"{self.base_url}/messages", headers, {}, body

    def parse_response(self, data):
        content = ""
        for block in data.get("content", []):
            if block.get("type") == "text":
                content += block.get("text", "")

        usage = data.get("usage") or {}
        input_tokens = usage.get("input_tokens")
        output_tokens = usage.get("output_tokens")
        return AIResponse(
            content=content,
            prompt_tokens=input_tokens,
            completion_tokens=output_tokens,
            total_tokens=(input_tokens or 0) + (output_tokens or 0),
        )


class GeminiAdapter(AIProviderAdapter):
    """Adapter for Google Gemini API."""

    endpoint_name = "generateContent"

    def __init__(
        self,
        api_key: str,
        model: str = PROVIDER_CONFIG["gemini"]["default_model"],
        base_url: str = PROVIDER_CONFIG["gemini"]["base_url"],
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        super().__init__(api_key, base_url, model, timeout, transport)
        self.provider_name = "gemini"

    def _convert_messages_to_gemini_format(
        self,
        messages: list[ChatMessage]
    ) -> tuple[str, list[dict]]:
        """Convert OpenAI-style messages to Gemini format."""
        system_instruction = ""
        contents = []

        for msg in messages:
            if msg.role == "system":
                if system_instruction:
                    system_instruction += "\n\n"
                system_instruction += msg.content
            else:
                role = "user" if msg.role == "user" else "model"
                contents.append({
                    "role": role,
                    "parts": [{"text": msg.content}]
                })

        return system_instruction, contents

    def build_request(self, messages, temperature):
        system_instruction, contents = self._convert_messages_to_gemini_format(messages)
        body: dict[str, Any] = {
            "contents": contents,
            "generationConfig": {
                "temperature": temperature,
                "maxOutputTokens": MAX_OUTPUT_TOKENS,
            },
        }
        if system_instruction:
            body["systemInstruction"] = {"parts": [{"text": system_instruction}]}

        endpoint = f"{self.base_url}/models/{self.model}:generateContent"
        return endpoint, {"Content-Type": "application/json"}, {"key": self.api_key}, body

    def parse_response(self, data):
        content = ""
        candidates = data.get("candidates", [])
        if candidates:
            parts = candidates[0].get("content", {}).get("parts", [])
            for part in parts:
                if "text" in part:
                    content += part["text"]

        usage_metadata = data.get("usageMetadata") or {}
        return AIResponse(
            content=content,
            prompt_tokens=usage_metadata.get("promptTokenCount"),
            completion_tokens=usage_metadata.get("candidatesTokenCount"),
            total_tokens=usage_metadata.get("totalTokenCount"),
        )


def get_ai_adapter(
    config: Settings | None = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> AIProviderAdapter:
    """
    Factory function to get the configured estimator adapter.

    Supports:
    - gemini: Google Gemini models (default)
    - openai: OpenAI GPT models
    - claude: Anthropic Claude models
    - deepseek: DeepSeek models

    Raises:
        EstimatorUnavailable: unknown provider or no API key configured.
    """
    config = config or default_settings
    provider = config.AI_PROVIDER.lower()

    if provider not in PROVIDER_CONFIG:
        raise EstimatorUnavailable(
            "Unsupported estimator provider",
            details=f"AI_PROVIDER={provider!r}; expected one of {', '.join(PROVIDER_CONFIG)}",
        )

    # Get provider-specific API key or fall back to generic key
    api_key = config.get_api_key(provider)

    if not api_key:
        env_hint = "GEMINI_API_KEY (or GOOGLE_API_KEY)" if provider == "gemini" else f"{provider.upper()}_API_KEY"
        raise EstimatorUnavailable(
            "Estimator API key is not set",
            details=f"Set {env_hint} or AI_API_KEY environment variable.",
        )

    provider_config = PROVIDER_CONFIG[provider]

    # Allow custom overrides
    base_url = config.AI_BASE_URL or provider_config["base_url"]
    model = config.AI_MODEL or provider_config["default_model"]

    logger.info(
        "Initializing estimator adapter",
        provider=provider,
        model=model,
        base_url=base_url if provider != "gemini" else "[gemini-api]",
        timeout=config.AI_TIMEOUT,
    )

    if provider == "claude":
        return ClaudeAdapter(
            api_key=api_key,
            model=model,
            base_url=base_url,
            timeout=config.AI_TIMEOUT,
            transport=transport,
        )
    elif provider == "gemini":
        return GeminiAdapter(
            api_key=api_key,
            model=model,
            base_url=base_url,
            timeout=config.AI_TIMEOUT,
            transport=transport,
        )
    else:
        # OpenAI-compatible providers (openai, deepseek)
        return OpenAICompatibleAdapter(
            api_key=api_key,
            base_url=base_url,
            model=model,
            provider_name=provider,
            timeout=config.AI_TIMEOUT,
            transport=transport,
        )
