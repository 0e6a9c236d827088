"""
Test suite for the LLM client abstraction.

Provider SDK calls are replaced with AsyncMock; no network access.
"""

from types import SimpleNamespace
from unittest.mock import AsyncMock, Mock

import pytest

from scalpbot.services.llm.client import (
    AnthropicClient,
    LLMClient,
    LLMConfig,
    LLMProvider,
    LLMResponse,
    ModelTier,
    OpenAIClient,
)
from scalpbot.services.llm.prompts import TRADING_SIGNAL_TOOL, strip_code_fence


def both_keys_config(provider: LLMProvider = LLMProvider.OPENAI) -> LLMConfig:
    return LLMConfig(provider=provider, openai_api_key="sk-test", anthropic_api_key="ak-test")


# ==================== PROVIDER TESTS ====================


class TestOpenAIClient:
    """Test the OpenAI tool-call mapping."""

    @pytest.mark.asyncio
    async def test_tool_call_arguments_are_decoded(self):
        client = OpenAIClient(both_keys_config())
        message = SimpleNamespace(
            content=None,
            tool_calls=[
                SimpleNamespace(
                    function=SimpleNamespace(arguments='{"action": "wait", "reason": "flat"}')
                )
            ],
        )
        sdk = Mock()
        sdk.chat.completions.create = AsyncMock(
            return_value=SimpleNamespace(
                choices=[SimpleNamespace(message=message)],
                usage=SimpleNamespace(prompt_tokens=10, completion_tokens=5, total_tokens=15),
            )
        )
        client._client = sdk

        response = await client.generate("system", "user", ModelTier.SIGNAL, tools=[TRADING_SIGNAL_TOOL])

        assert response.content == ""
        assert response.tool_arguments == {"action": "wait", "reason": "flat"}
        kwargs = sdk.chat.completions.create.call_args.kwargs
        assert kwargs["model"] == "gpt-4o"
        assert kwargs["tool_choice"] == "auto"


class TestAnthropicClient:
    """Test the Anthropic tool mapping."""

    def test_tools_are_converted(self):
        tools = AnthropicClient._convert_tools([TRADING_SIGNAL_TOOL])

        assert tools[0]["name"] == "trading_signal"
        assert tools[0]["input_schema"]["required"] == ["action", "reason"]

    @pytest.mark.asyncio
    async def test_tool_use_block_is_read(self):
        client = AnthropicClient(both_keys_config(LLMProvider.ANTHROPIC))
        sdk = Mock()
        sdk.messages.create = AsyncMock(
            return_value=SimpleNamespace(
                content=[
                    SimpleNamespace(type="text", text="Deciding."),
                    SimpleNamespace(type="tool_use", input={"action": "enter_long", "reason": "x"}),
                ],
                usage=SimpleNamespace(input_tokens=10, output_tokens=5),
            )
        )
        client._client = sdk

        response = await client.generate("system", "user", ModelTier.SIGNAL, tools=[TRADING_SIGNAL_TOOL])

        assert response.content == "Deciding."
        assert response.tool_arguments == {"action": "enter_long", "reason": "x"}
        assert sdk.messages.create.call_args.kwargs["tools"][0]["name"] == "trading_signal"


# ==================== FALLBACK TESTS ====================


class TestLLMClient:
    """Test provider selection and fallback."""

    @pytest.mark.asyncio
    async def test_fallback_provider_used_on_failure(self):
        client = LLMClient(both_keys_config())
        fallback_response = LLMResponse(
            content="ok", model="claude", provider=LLMProvider.ANTHROPIC, usage={}
        )
        client._primary = Mock(generate=AsyncMock(side_effect=RuntimeError("down")))
        client._fallback = Mock(generate=AsyncMock(return_value=fallback_response))

        response = await client.generate("system", "user", ModelTier.OPINION)

        assert response is fallback_response

    @pytest.mark.asyncio
    async def test_no_keys_disables_llm(self):
        client = LLMClient(LLMConfig(provider=LLMProvider.OPENAI))

        assert client.is_configured is False
        assert client.get_active_provider() is None
        with pytest.raises(RuntimeError):
            await client.generate("system", "user", ModelTier.SIGNAL)

    def test_anthropic_primary(self):
        client = LLMClient(both_keys_config(LLMProvider.ANTHROPIC))

        assert isinstance(client._primary, AnthropicClient)
        assert isinstance(client._fallback, OpenAIClient)


class TestStripCodeFence:
    def test_strips_json_fence(self):
        assert strip_code_fence('```json\n{"a": 1}\n```') == '{"a": 1}'

    def test_plain_content_unchanged(self):
        assert strip_code_fence(' {"a": 1} ') == '{"a": 1}'

    def test_strips_single_line_fence(self):
        assert strip_code_fence('```json{"a": 1}```') == '{"a": 1}'
