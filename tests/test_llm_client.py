# tests/test_llm_client.py
import pytest
from langchain_core.language_models.fake_chat_models import FakeListChatModel
from langchain_core.messages import AIMessage, HumanMessage, SystemMessage
from langchain_ollama import ChatOllama
from langchain_openai import ChatOpenAI

from llm_client import CompletionClient, to_langchain_messages
from models import ChatMessage


def test_message_conversion():
    converted = to_langchain_messages([
        ChatMessage(role="system", content="instructions"),
        ChatMessage(role="user", content="question"),
        ChatMessage(role="assistant", content="answer"),
    ])
    assert [type(msg) for msg in converted] == [SystemMessage, HumanMessage, AIMessage]
    assert [msg.content for msg in converted] == ["instructions", "question", "answer"]


def test_complete_returns_model_text(test_config):
    client = CompletionClient(test_config, llm=FakeListChatModel(responses=["Dry your filament."]))
    reply = client.complete([ChatMessage(role="user", content="Stringing everywhere")])
    assert reply == "Dry your filament."


def test_missing_api_key_is_reported(test_config):
    client = CompletionClient(test_config)
    assert not client.is_configured()
    assert "API key is missing" in client.missing_credential_message()


def test_api_key_present(test_config):
    test_config.OPENAI_API_KEY = "sk-test"
    client = CompletionClient(test_config)
    assert client.is_configured()
    assert isinstance(client.llm, ChatOpenAI)


def test_ollama_needs_no_key(test_config):
    test_config.LLM_PROVIDER = "ollama"
    test_config.MODEL = "llama3"
    client = CompletionClient(test_config)
    assert client.is_configured()
    assert isinstance(client.llm, ChatOllama)


def test_unknown_provider(test_config):
    test_config.LLM_PROVIDER = "carrier-pigeon"
    with pytest.raises(ValueError):
        CompletionClient(test_config).llm


def test_available_models_for_hosted_provider(test_config):
    assert CompletionClient(test_config, model="gpt-4o-mini").available_models() == ["gpt-4o-mini"]
