# tests/conftest.py
import io
import json
import zipfile

import pytest

from config import Config

CONFIG_ENTRY = "Metadata/project_settings.config"


class FakeUploadedFile(io.BytesIO):
    """Mimics the parts of Streamlit's UploadedFile the app relies on."""

    def __init__(self, data: bytes, name: str = "benchy.3mf", type: str = ""):
        super().__init__(data)
        self.name = name
        self.type = type
        self.size = len(data)


class RecordingClient:
    def __init__(self, reply="Try lowering the nozzle temperature.", configured=True, error=None):
        self.reply = reply
        self.configured = configured
        self.error = error
        self.calls = []

    def is_configured(self):
        return self.configured

    def missing_credential_message(self):
        return "Error: OpenAI API key is missing."

    def complete(self, messages):
        self.calls.append(messages)
        if self.error:
            raise self.error
        return self.reply


@pytest.fixture
def make_3mf(tmp_path):
    def _make(config_text=None, name="project.3mf", extra_entries=None):
        path = tmp_path / name
        with zipfile.ZipFile(path, "w") as archive:
            archive.writestr("3D/3dmodel.model", "<model/>")
            if config_text is not None:
                archive.writestr(CONFIG_ENTRY, config_text)
            for entry, content in (extra_entries or {}).items():
                archive.writestr(entry, content)
        return path
    return _make


@pytest.fixture
def json_config():
    return json.dumps({
        "layer_height": "0.2",
        "nozzle_temperature": ["220", "215"],
        "enable_support": "0",
        "filament": {"type": "PLA", "brand": "Generic"},
    })


@pytest.fixture
def test_config(tmp_path):
    class TestConfig(Config):
        LLM_PROVIDER = "openai"
        MODEL = "gpt-4o"
        OPENAI_API_KEY = ""
        CHAT_STORAGE_DIR = tmp_path / "chat_storage"
        MAX_FILE_SIZE_MB = 1
    return TestConfig


@pytest.fixture
def storage_dir(tmp_path):
    return tmp_path / "chat_storage"


@pytest.fixture
def recording_client():
    return RecordingClient()
