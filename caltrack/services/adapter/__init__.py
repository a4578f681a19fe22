"""
Estimator Adapter module - Provider abstraction layer.

Supports multiple text-generation providers:
- Google Gemini
- OpenAI (and compatible APIs like DeepSeek)
- Anthropic Claude
"""
from caltrack.services.adapter.provider import (
    AIProviderAdapter,
    ChatMessage,
    AIResponse,
    OpenAICompatibleAdapter,
    ClaudeAdapter,
    GeminiAdapter,
    get_ai_adapter,
)

__all__ = [
    "AIProviderAdapter",
    "ChatMessage",
    "AIResponse",
    "OpenAICompatibleAdapter",
    "ClaudeAdapter",
    "GeminiAdapter",
    "get_ai_adapter",
]
