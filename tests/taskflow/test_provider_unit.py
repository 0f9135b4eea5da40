"""Unit tests for the completion provider adapter and agents."""

import asyncio
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from langchain_core.messages import HumanMessage, SystemMessage

from src.taskflow.agents.assistant import AssistantAgent
from src.taskflow.agents.meeting import MeetingAgent
from src.taskflow.errors import ProviderError
from src.taskflow.llm.provider import (
    DEFAULT_MODEL,
    DEFAULT_SYSTEM_PROMPT,
    ChatCompletionProvider,
    CompletionProvider,
)


def run_async(coro):
    return asyncio.run(coro)


def _provider_with_reply(reply=None, error=None, **kwargs):
    provider = ChatCompletionProvider(**kwargs)
    llm = MagicMock()
    if error is not None:
        llm.ainvoke = AsyncMock(side_effect=error)
    else:
        llm.ainvoke = AsyncMock(return_value=reply)
    provider._llm = llm
    return provider, llm


class TestChatCompletionProvider:
    def test_satisfies_protocol(self):
        assert isinstance(ChatCompletionProvider(), CompletionProvider)

    def test_sends_system_and_user_messages(self):
        provider, llm = _provider_with_reply(MagicMock(content="Here is a draft"))

        text = run_async(provider.complete("Draft an email to the team"))

        assert text == "Here is a draft"
        messages = llm.ainvoke.await_args.args[0]
        assert isinstance(messages[0], SystemMessage)
        assert messages[0].content == DEFAULT_SYSTEM_PROMPT
        assert isinstance(messages[1], HumanMessage)
        assert messages[1].content == "Draft an email to the team"

    def test_custom_system_prompt(self):
        provider, llm = _provider_with_reply(
            MagicMock(content="ok"), system_prompt="You are terse."
        )

        run_async(provider.complete("hi"))

        assert llm.ainvoke.await_args.args[0][0].content == "You are terse."

    def test_client_failure_becomes_provider_error(self):
        cause = TimeoutError("read timed out")
        provider, _ = _provider_with_reply(error=cause)

        with pytest.raises(ProviderError) as exc_info:
            run_async(provider.complete("hi"))

        assert exc_info.value.cause is cause
        assert "read timed out" in exc_info.value.message

    @pytest.mark.parametrize("content", ["", "   \n"])
    def test_empty_reply_is_an_error(self, content):
        provider, _ = _provider_with_reply(MagicMock(content=content))

        with pytest.raises(ProviderError):
            run_async(provider.complete("hi"))

    def test_non_text_reply_is_an_error(self):
        provider, _ = _provider_with_reply(MagicMock(content=[{"type": "image"}]))

        with pytest.raises(ProviderError) as exc_info:
            run_async(provider.complete("hi"))

        assert "Unexpected response type" in exc_info.value.message

    def test_client_built_lazily_with_configured_options(self):
        with patch("src.taskflow.llm.provider.ChatOpenAI") as chat_cls:
            provider = ChatCompletionProvider(
                api_key="sk-test",
                base_url="https://llm.internal/v1",
                timeout=15.0,
            )
            chat_cls.assert_not_called()

            client = provider.llm
            again = provider.llm

        assert client is again
        chat_cls.assert_called_once_with(
            model=DEFAULT_MODEL,
            api_key="sk-test",
            base_url="https://llm.internal/v1",
            timeout=15.0,
        )

    def test_unset_options_are_not_passed(self):
        with patch("src.taskflow.llm.provider.ChatOpenAI") as chat_cls:
            ChatCompletionProvider(model_name="gpt-4o-mini").llm

        chat_cls.assert_called_once_with(model="gpt-4o-mini")


class TestAgents:
    def test_meeting_agent_acknowledges_prompt(self):
        response = run_async(MeetingAgent().handle("Schedule a meeting with Jane"))

        assert "Meeting scheduling initiated" in response
        assert "Schedule a meeting with Jane" in response

    def test_meeting_agent_handles_braces_in_prompt(self):
        response = run_async(MeetingAgent().handle("meeting with {team}"))

        assert "meeting with {team}" in response

    def test_assistant_agent_delegates(self):
        provider = MagicMock()
        provider.complete = AsyncMock(return_value="Here is a draft")

        response = run_async(AssistantAgent(provider).handle("Draft an email"))

        assert response == "Here is a draft"
        provider.complete.assert_awaited_once_with("Draft an email")

    def test_assistant_agent_propagates_provider_error(self):
        provider = MagicMock()
        provider.complete = AsyncMock(side_effect=ProviderError("rate limited"))

        with pytest.raises(ProviderError):
            run_async(AssistantAgent(provider).handle("Draft an email"))

    def test_agent_repr_includes_name(self):
        assert repr(MeetingAgent()) == "MeetingAgent(name='meeting')"
