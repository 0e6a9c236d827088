"""
LLM Client Abstraction

Provides unified interface for OpenAI and Anthropic Claude.
Handles provider switching, fallback and tool (function) calling.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Optional
import json
import logging

logger = logging.getLogger(__name__)


class LLMProvider(str, Enum):
    OPENAI = "openai"
    ANTHROPIC = "anthropic"


class ModelTier(str, Enum):
    SIGNAL = "signal"  # Structured entry decision
    OPINION = "opinion"  # Free-text market commentary


@dataclass
class LLMConfig:
    """Configuration for LLM client."""

    provider: LLMProvider
    openai_api_key: Optional[str] = None
    anthropic_api_key: Optional[str] = None
    signal_model: str = "gpt-4o"
    opinion_model: str = "gpt-4o"
    anthropic_model: str = "claude-3-5-sonnet-20241022"
    max_tokens: int = 1024
    temperature: float = 0.0


@dataclass
class LLMResponse:
    """Response from LLM."""

    content: str
    model: str
    provider: LLMProvider
    usage: dict
    tool_arguments: Optional[dict] = None  # Arguments of the first tool call, if any
    raw_response: Optional[dict] = None


class BaseLLMClient(ABC):
    """Abstract base class for LLM clients."""

    @abstractmethod
    async def generate(
        self,
        system_prompt: str,
        user_prompt: str,
        model_tier: ModelTier,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
        tools: Optional[list[dict]] = None,
    ) -> LLMResponse:
        """
        Generate a response from the LLM.

        tools are OpenAI-style function definitions; providers with another
        tool format convert them.
        """
        pass

    @abstractmethod
    async def health_check(self) -> bool:
        """Check if the LLM service is accessible."""
        pass


class OpenAIClient(BaseLLMClient):
    """OpenAI GPT client implementation."""

    def __init__(self, config: LLMConfig):
        self.config = config
        self._client = None

    def _get_client(self):
        """Lazy initialization of OpenAI client."""
        if self._client is None:
            try:
                import openai

                self._client = openai.AsyncOpenAI(api_key=self.config.openai_api_key)
            except ImportError:
                raise RuntimeError(
                    "openai package not installed. Run: pip install openai"
                )
        return self._client

    def _get_model(self, tier: ModelTier) -> str:
        """Get model name for tier."""
        if tier == ModelTier.SIGNAL:
            return self.config.signal_model
        return self.config.opinion_model

    async def generate(
        self,
        system_prompt: str,
        user_prompt: str,
        model_tier: ModelTier,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
        tools: Optional[list[dict]] = None,
    ) -> LLMResponse:
        """Generate response using GPT."""
        client = self._get_client()
        model = self._get_model(model_tier)

        temp = temperature if temperature is not None else self.config.temperature
        tokens = max_tokens if max_tokens is not None else self.config.max_tokens

        kwargs = {
            "model": model,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            "temperature": temp,
            "max_tokens": tokens,
        }
        if tools:
            kwargs["tools"] = tools
            kwargs["tool_choice"] = "auto"

        try:
            response = await client.chat.completions.create(**kwargs)
        except Exception as e:
            logger.error(f"OpenAI API error: {e}")
            raise

        message = response.choices[0].message
        tool_arguments = None
        if message.tool_calls:
            tool_arguments = json.loads(message.tool_calls[0].function.arguments)

        return LLMResponse(
            content=message.content or "",
            model=model,
            provider=LLMProvider.OPENAI,
            usage={
                "prompt_tokens": response.usage.prompt_tokens,
                "completion_tokens": response.usage.completion_tokens,
                "total_tokens": response.usage.total_tokens,
            },
            tool_arguments=tool_arguments,
            raw_response=response.model_dump() if hasattr(response, "model_dump") else None,
        )

    async def health_check(self) -> bool:
        """Check OpenAI API connectivity."""
        try:
            client = self._get_client()
            await client.models.list()
            return True
        except Exception as e:
            logger.error(f"OpenAI health check failed: {e}")
            return False


class AnthropicClient(BaseLLMClient):
    """Anthropic Claude client implementation."""

    def __init__(self, config: LLMConfig):
        self.config = config
        self._client = None

    def _get_client(self):
        """Lazy initialization of Anthropic client."""
        if self._client is None:
            try:
                import anthropic

                self._client = anthropic.AsyncAnthropic(
                    api_key=self.config.anthropic_api_key
                )
            except ImportError:
                raise RuntimeError(
                    "anthropic package not installed. Run: pip install anthropic"
                )
        return self._client

    @staticmethod
    def _convert_tools(tools: list[dict]) -> list[dict]:
        """OpenAI function definitions -> Anthropic tool definitions."""
        return [
            {
                "name": tool["function"]["name"],
                "description": tool["function"].get("description", ""),
                "input_schema": tool["function"]["parameters"],
            }
            for tool in tools
        ]

    async def generate(
        self,
        system_prompt: str,
        user_prompt: str,
        model_tier: ModelTier,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
        tools: Optional[list[dict]] = None,
    ) -> LLMResponse:
        """Generate response using Claude."""
        client = self._get_client()
        model = self.config.anthropic_model

        temp = temperature if temperature is not None else self.config.temperature
        tokens = max_tokens if max_tokens is not None else self.config.max_tokens

        kwargs = {
            "model": model,
            "max_tokens": tokens,
            "temperature": temp,
            "system": system_prompt,
            "messages": [{"role": "user", "content": user_prompt}],
        }
        if tools:
            kwargs["tools"] = self._convert_tools(tools)

        try:
            response = await client.messages.create(**kwargs)
        except Exception as e:
            logger.error(f"Anthropic API error: {e}")
            raise

        text_parts = []
        tool_arguments = None
        for block in response.content:
            if block.type == "text":
                text_parts.append(block.text)
            elif block.type == "tool_use" and tool_arguments is None:
                tool_arguments = dict(block.input)

        return LLMResponse(
            content="".join(text_parts),
            model=model,
            provider=LLMProvider.ANTHROPIC,
            usage={
                "input_tokens": response.usage.input_tokens,
                "output_tokens": response.usage.output_tokens,
            },
            tool_arguments=tool_arguments,
            raw_response=response.model_dump() if hasattr(response, "model_dump") else None,
        )

    async def health_check(self) -> bool:
        """Check Anthropic API connectivity."""
        try:
            client = self._get_client()
            response = await client.messages.create(
                model=self.config.anthropic_model,
                max_tokens=10,
                messages=[{"role": "user", "content": "Hi"}],
            )
            return response is not None
        except Exception as e:
            logger.error(f"Anthropic health check failed: {e}")
            return False


class LLMClient:
    """
    Unified LLM client with provider switching and fallback.

    Primary provider is tried first.
    Falls back to secondary provider on failure.
    """

    def __init__(self, config: LLMConfig):
        self.config = config
        self._primary: Optional[BaseLLMClient] = None
        self._fallback: Optional[BaseLLMClient] = None
        self._setup_clients()

    def _setup_clients(self):
        """Setup primary and fallback clients based on config."""
        if self.config.provider == LLMProvider.ANTHROPIC:
            if self.config.anthropic_api_key:
                self._primary = AnthropicClient(self.config)
            if self.config.openai_api_key:
                self._fallback = OpenAIClient(self.config)
        else:  # OpenAI
            if self.config.openai_api_key:
                self._primary = OpenAIClient(self.config)
            if self.config.anthropic_api_key:
                self._fallback = AnthropicClient(self.config)

        if self._primary is None and self._fallback is None:
            logger.warning("No LLM API keys configured. LLM features disabled.")

    @property
    def is_configured(self) -> bool:
        return self._primary is not None or self._fallback is not None

    async def generate(
        self,
        system_prompt: str,
        user_prompt: str,
        model_tier: ModelTier,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
        tools: Optional[list[dict]] = None,
    ) -> LLMResponse:
        """
        Generate LLM response with automatic fallback.

        Tries primary provider first, falls back to secondary on failure.
        """
        if not self.is_configured:
            raise RuntimeError("No LLM providers configured")

        if self._primary:
            try:
                return await self._primary.generate(
                    system_prompt=system_prompt,
                    user_prompt=user_prompt,
                    model_tier=model_tier,
                    temperature=temperature,
                    max_tokens=max_tokens,
                    tools=tools,
                )
            except Exception as e:
                logger.warning(f"Primary LLM failed: {e}, trying fallback...")
                if self._fallback is None:
                    raise

        return await self._fallback.generate(
            system_prompt=system_prompt,
            user_prompt=user_prompt,
            model_tier=model_tier,
            temperature=temperature,
            max_tokens=max_tokens,
            tools=tools,
        )

    async def health_check(self) -> bool:
        """Check if any LLM provider is accessible."""
        if self._primary and await self._primary.health_check():
            return True
        if self._fallback and await self._fallback.health_check():
            return True
        return False

    def get_active_provider(self) -> Optional[LLMProvider]:
        """Get the currently active provider."""
        if self._primary:
            return self.config.provider
        elif self._fallback:
            return (
                LLMProvider.OPENAI
                if self.config.provider == LLMProvider.ANTHROPIC
                else LLMProvider.ANTHROPIC
            )
        return None


# Singleton instance management
_llm_client: Optional[LLMClient] = None


def get_llm_client() -> LLMClient:
    """Get or create LLM client singleton."""
    global _llm_client
    if _llm_client is None:
        from scalpbot.core.config import settings

        config = LLMConfig(
            provider=LLMProvider(settings.llm_primary_provider),
            openai_api_key=settings.openai_api_key,
            anthropic_api_key=settings.anthropic_api_key,
            signal_model=settings.llm_signal_model,
            opinion_model=settings.llm_opinion_model,
            anthropic_model=settings.llm_anthropic_model,
            max_tokens=settings.llm_max_tokens,
            temperature=settings.llm_temperature,
        )
        _llm_client = LLMClient(config)
    return _llm_client
