# chat_manager.py
from typing import List, Optional, Tuple
from pathlib import Path
import json
import logging
from models import ChatMessage, ParameterMap
from file_processor import format_slicing_parameters

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = """You are a knowledgeable AI assistant integrated into a 3D printing slicer.
The user reports a printing issue. Your task is to guide the user through the troubleshooting process.

Follow these steps:
1. Determine if the print issue the user reported is clear. If not, respond with a message asking the user to clarify their intent.
2. Examine the slicing parameters and determine if any of them could be causing the issue.
3. If nothing stands out in the slicing parameters, determine other possible causes of the print issue, and how likely each cause is to be the issue.
4. In your response, list the possible causes of the print issue by order of likelihood.
5. Starting with the most likely cause:
    - If it's related to a parameter you can already see, suggest specific adjustments with target values.
    - If it's related to something not visible in the parameters, ask specific diagnostic questions.
6. Focus only on the SINGLE most likely cause for immediate action:
    - If it requires parameter adjustment, suggest to the user to change their parameter values.
    - If it requires diagnostic information, ask a specific question about it: "Does your print show [specific symptom]?" or "Have you checked [specific hardware component]?"
7. Wait for the user to respond about this single most likely cause before discussing other causes.
8. After suggesting a possible cause, ask the user if this resolved their issue.

Respond in a direct and engaging manner.
- Avoid referring to 'the user' and speak naturally.
- Avoid revealing your internal logic."""

WELCOME_MESSAGE = (
    "Hello! I'm your 3D printing assistant. Upload a 3MF file and ask me questions "
    "about your print or common 3D printing issues."
)
CLEARED_MESSAGE = "Chat history cleared. How can I help you with your 3D printing?"
UPLOAD_ANNOUNCEMENT = "I see you've uploaded a 3MF file. What would you like to know about your 3D print?"
UPLOAD_FIRST_MESSAGE = "Please upload a 3MF file first so I can help you debug your 3D print."
EMPTY_RESPONSE_MESSAGE = "I couldn't generate a response. Please try again."
APOLOGY_MESSAGE = (
    "I'm sorry, I encountered an error while processing your request. "
    "Please make sure you have set up your OpenAI API key in the .env.local file."
)
FILE_CONTEXT_TEMPLATE = "The user has uploaded a 3MF file with the following slicing parameters:\n\n{parameters}"


class ChatManager:
    def __init__(self, storage_dir: Path, history_key: str = "3d_print_chat_history"):
        self.storage_dir = Path(storage_dir)
        self.storage_dir.mkdir(parents=True, exist_ok=True)
        self.history_path = self.storage_dir / f"{history_key}.json"
        self.upload_announced = False
        self.messages: List[ChatMessage] = [ChatMessage(role="system", content=SYSTEM_PROMPT)]
        self.load_history()

    @property
    def visible_messages(self) -> List[ChatMessage]:
        return [msg for msg in self.messages if msg.role != "system"]

    def snapshot(self) -> Tuple[ChatMessage, ...]:
        return tuple(self.messages)

    def add_message(self, role: str, content: str) -> ChatMessage:
        message = ChatMessage(role=role, content=content)
        self.messages.append(message)
        self.save_history()
        return message

    def save_history(self):
        payload = [msg.to_dict() for msg in self.visible_messages]
        with open(self.history_path, 'w', encoding='utf-8') as f:
            json.dump(payload, f, ensure_ascii=False, indent=2)

    def load_history(self):
        """Recharge l'historique sauvegardé, ou le message d'accueil s'il est absent ou illisible"""
        restored = self._read_history()
        system_messages = [msg for msg in self.messages if msg.role == "system"]

        if restored:
            self.messages = system_messages + restored
            logger.info(f"Restored {len(restored)} messages from {self.history_path}")
        else:
            self.messages = system_messages
            self.add_message("assistant", WELCOME_MESSAGE)

    def _read_history(self) -> Optional[List[ChatMessage]]:
        if not self.history_path.exists():
            return None

        try:
            with open(self.history_path, 'r', encoding='utf-8') as f:
                data = json.load(f)
            messages = [ChatMessage.from_dict(item) for item in data]
        except (OSError, ValueError, TypeError, KeyError) as e:
            logger.error(f"Error parsing stored chat history: {e}")
            return None

        return [msg for msg in messages if msg.role != "system"]

    def clear_history(self):
        system_messages = [msg for msg in self.messages if msg.role == "system"]
        self.messages = system_messages
        self.upload_announced = False
        self.add_message("assistant", CLEARED_MESSAGE)
        logger.info("Chat history cleared")

    def add_file_context(self, parameters: ParameterMap) -> ChatMessage:
        content = FILE_CONTEXT_TEMPLATE.format(parameters=format_slicing_parameters(parameters))
        return self.add_message("system", content)

    def announce_upload(self) -> Optional[ChatMessage]:
        if self.upload_announced:
            return None
        self.upload_announced = True
        return self.add_message("assistant", UPLOAD_ANNOUNCEMENT)

    def process_question(self, question: str, client, file_uploaded: bool) -> Optional[str]:
        """Traite une question et enregistre la conversation."""
        if not question or not question.strip():
            return None

        self.add_message("user", question)

        if not file_uploaded:
            response = UPLOAD_FIRST_MESSAGE
        elif not client.is_configured():
            response = client.missing_credential_message()
        else:
            try:
                logger.info("Processing question with full conversation history")
                response = client.complete(list(self.messages)) or EMPTY_RESPONSE_MESSAGE
            except Exception as e:
                logger.error(f"Error generating response: {e}")
                response = APOLOGY_MESSAGE

        self.add_message("assistant", response)
        return response
