# config.py
from pathlib import Path
import logging
import os

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

# .env.local overrides .env when both are present
load_dotenv(".env.local")
load_dotenv()

class Config:
    # Model settings
    LLM_PROVIDER = os.getenv("LLM_PROVIDER", "openai").lower()  # "openai" ou "ollama"
    MODEL = os.getenv("LLM_MODEL", "gpt-4o")

    # API settings
    OPENAI_API_KEY = os.getenv("OPENAI_API_KEY", "")
    OLLAMA_API_BASE_URL = os.getenv("OLLAMA_API_BASE_URL", "http://localhost:11434")

    # Storage settings
    CHAT_STORAGE_DIR = Path(os.getenv("CHAT_STORAGE_DIR", "chat_storage"))
    CHAT_HISTORY_KEY = "3d_print_chat_history"

    # LLM settings
    LLM_TEMPERATURE = 0.7
    LLM_NUM_CTX = 8192

    # 3MF settings
    PROJECT_CONFIG_PATH = "Metadata/project_settings.config"
    DEFAULT_MIME_TYPE = "application/vnd.ms-package.3dmanufacturing-3dmodel+xml"

    # File settings
    MAX_FILE_SIZE_MB = 50

    # Feedback settings
    FEEDBACK_EMAIL = os.getenv("FEEDBACK_EMAIL", "soojunneng01@gmail.com")

    # Logging settings
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
    LOG_FILE = os.getenv("LOG_FILE", "app.log")

    @classmethod
    def ensure_directories(cls):
        cls.CHAT_STORAGE_DIR.mkdir(parents=True, exist_ok=True)

    @classmethod
    def is_file_size_valid(cls, file_size_bytes: int) -> bool:
        return file_size_bytes <= (cls.MAX_FILE_SIZE_MB * 1024 * 1024)

    @classmethod
    def requires_api_key(cls) -> bool:
        return cls.LLM_PROVIDER == "openai"

    @classmethod
    def describe(cls) -> str:
        """Résumé lisible de la configuration, sans exposer la clé API"""
        key_state = "set" if cls.OPENAI_API_KEY else "missing"
        return (
            f"Provider: {cls.LLM_PROVIDER}\n"
            f"Model: {cls.MODEL}\n"
            f"API key: {key_state if cls.requires_api_key() else 'not required'}\n"
            f"Chat storage: {cls.CHAT_STORAGE_DIR}"
        )
