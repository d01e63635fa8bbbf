# llm_client.py
import logging
from typing import List

import ollama
from langchain_core.messages import AIMessage, HumanMessage, SystemMessage
from langchain_ollama import ChatOllama
from langchain_openai import ChatOpenAI

from models import ChatMessage

logger = logging.getLogger(__name__)

_MESSAGE_TYPES = {
    "system": SystemMessage,
    "user": HumanMessage,
    "assistant": AIMessage,
}


def to_langchain_messages(messages: List[ChatMessage]):
    return [_MESSAGE_TYPES[msg.role](content=msg.content) for msg in messages]


class CompletionClient:
    def __init__(self, config, llm=None, model: str = None):
        self.config = config
        self.model = model or config.MODEL
        self._llm = llm

    def is_configured(self) -> bool:
        if self._llm is not None or not self.config.requires_api_key():
            return True
        return bool(self.config.OPENAI_API_KEY)

    def missing_credential_message(self) -> str:
        return (
            "Error: OpenAI API key is missing. Please add your API key to the "
            ".env.local file as OPENAI_API_KEY."
        )

    @property
    def llm(self):
        if self._llm is None:
            self._llm = self._create_llm()
        return self._llm

    def _create_llm(self):
        provider = self.config.LLM_PROVIDER
        logger.info(f"Initializing {provider} chat model: {self.model}")

        if provider == "ollama":
            return ChatOllama(
                model=self.model,
                base_url=self.config.OLLAMA_API_BASE_URL,
                temperature=self.config.LLM_TEMPERATURE,
                num_ctx=self.config.LLM_NUM_CTX,
            )
        if provider == "openai":
            return ChatOpenAI(
                model=self.model,
                api_key=self.config.OPENAI_API_KEY,
                temperature=self.config.LLM_TEMPERATURE,
            )
        raise ValueError(f"Unsupported LLM provider: {provider}")

    def complete(self, messages: List[ChatMessage]) -> str:
        """Envoie l'historique complet au modèle et retourne le texte de la réponse"""
        logger.info(f"Requesting completion with {len(messages)} messages")
        response = self.llm.invoke(to_langchain_messages(messages))
        content = response.content
        if isinstance(content, list):
            content = "".join(
                part.get("text", "") if isinstance(part, dict) else str(part)
                for part in content
            )
        return content or ""

    def available_models(self) -> List[str]:
        if self.config.LLM_PROVIDER != "ollama":
            return [self.model]
        try:
            client = ollama.Client(host=self.config.OLLAMA_API_BASE_URL)
            return [model.model for model in client.list().models]
        except Exception as e:
            logger.warning(f"Could not list Ollama models: {e}")
            return []
