# file_processor.py
import io
import json
import logging
import math
import re
import zipfile
import zlib
from collections.abc import Mapping
from datetime import datetime
from typing import Optional

from config import Config
from models import FileMetadata, ParameterMap, ParseKind, ParseResult

logger = logging.getLogger(__name__)

NO_PARAMETERS_TEXT = "No slicing parameters found"

_KEY_VALUE_RE = re.compile(r"^([^=]+)=(.*)$")
_NUMBER_RE = re.compile(r"^[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?$")
_COMMENT_PREFIXES = ("#", "//")


def _open_archive_source(source):
    if isinstance(source, (bytes, bytearray)):
        return io.BytesIO(source)
    if hasattr(source, "getvalue"):
        # Streamlit UploadedFile: lire le contenu complet sans toucher au curseur
        return io.BytesIO(source.getvalue())
    return source


def read_project_config(source, entry_path: str = Config.PROJECT_CONFIG_PATH) -> Optional[str]:
    """Returns the text of the project settings entry, or None if it can't be read."""
    try:
        with zipfile.ZipFile(_open_archive_source(source)) as archive:
            if entry_path not in archive.namelist():
                logger.error(f"Could not find {entry_path} in the 3MF file")
                return None
            with archive.open(entry_path) as config_file:
                return config_file.read().decode("utf-8-sig", errors="replace")
    except (zipfile.BadZipFile, OSError, EOFError, zlib.error, RuntimeError, NotImplementedError) as e:
        logger.error(f"Error opening 3MF archive: {e}")
        return None


def coerce_value(raw: str):
    if raw == "true" or raw == "false":
        return raw == "true"
    if _NUMBER_RE.match(raw):
        if re.fullmatch(r"[+-]?\d+", raw):
            return int(raw)
        number = float(raw)
        if math.isfinite(number):
            return number
    return raw


def parse_key_value_config(content: str) -> ParameterMap:
    params: ParameterMap = {}

    for line in content.splitlines():
        trimmed_line = line.strip()

        # Lignes vides et commentaires
        if not trimmed_line or trimmed_line.startswith(_COMMENT_PREFIXES):
            continue

        match = _KEY_VALUE_RE.match(trimmed_line)
        if not match:
            continue

        key = match.group(1).strip()
        if not key:
            continue
        params[key] = coerce_value(match.group(2).strip())

    return params


def _reject_constant(name: str):
    raise ValueError(f"Non-standard JSON constant: {name}")


def parse_config_text(content: str) -> ParseResult:
    try:
        return ParseResult(ParseKind.JSON, json.loads(content, parse_constant=_reject_constant))
    except ValueError:
        logger.info("Project config is not JSON, falling back to key=value parsing")
        return ParseResult(ParseKind.KEY_VALUE, parse_key_value_config(content))


def extract_slicing_parameters(source) -> Optional[ParameterMap]:
    content = read_project_config(source)
    if content is None:
        return None

    result = parse_config_text(content)
    logger.info(f"Parsed project config as {result.kind.value}")
    return result.parameters


def _to_text(value) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return "null"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (Mapping, list)):
        return json.dumps(value, separators=(",", ":"), ensure_ascii=False)
    return str(value)


def _entries(value):
    if isinstance(value, Mapping):
        return list(value.items())
    return list(enumerate(value))


def format_slicing_parameters(params) -> str:
    """Formats the slicing parameters for display or use in prompts"""
    if params is None:
        return NO_PARAMETERS_TEXT
    if not isinstance(params, (Mapping, list)):
        return _to_text(params)

    lines = []
    for key, value in _entries(params):
        if isinstance(value, (Mapping, list)):
            lines.append(f"{key}:")
            lines.extend(f"  {sub_key}: {_to_text(sub_value)}" for sub_key, sub_value in _entries(value))
        else:
            lines.append(f"{key}: {_to_text(value)}")
    return "\n".join(lines)


def format_file_size(size_bytes: int) -> str:
    if size_bytes < 1024:
        return f"{size_bytes} bytes"
    elif size_bytes < 1048576:
        return f"{size_bytes / 1024:.2f} KB"
    return f"{size_bytes / 1048576:.2f} MB"


class FileProcessor:
    def __init__(self, config):
        self.config = config

    def validate(self, file_obj) -> bool:
        return self.config.is_file_size_valid(file_obj.size)

    def build_metadata(self, file_obj, uploaded_at: datetime = None) -> FileMetadata:
        uploaded_at = uploaded_at or datetime.now()
        return FileMetadata(
            name=file_obj.name,
            size=format_file_size(file_obj.size),
            type=getattr(file_obj, "type", None) or self.config.DEFAULT_MIME_TYPE,
            last_modified=uploaded_at.strftime("%Y-%m-%d %H:%M:%S"),
        )

    def process_file(self, file_obj) -> Optional[ParameterMap]:
        logger.info(f"Processing 3MF file: {file_obj.name}")
        parameters = extract_slicing_parameters(file_obj)

        if parameters is None:
            logger.warning(f"No slicing parameters extracted from {file_obj.name}")
        elif isinstance(parameters, (Mapping, list)):
            logger.info(f"Extracted {len(parameters)} slicing parameters from {file_obj.name}")
        return parameters
