# models.py
from dataclasses import dataclass, asdict, field
from enum import Enum
from typing import Any, Dict, Union
from datetime import datetime

ParameterValue = Union[str, int, float, bool, Dict[str, Any], list]
ParameterMap = Dict[str, ParameterValue]

ROLES = ("system", "user", "assistant")

@dataclass(frozen=True)
class FileMetadata:
    name: str
    size: str
    type: str
    last_modified: str

    def to_dict(self):
        return asdict(self)

@dataclass
class ChatMessage:
    role: str
    content: str
    timestamp: str = None

    def __post_init__(self):
        if self.role not in ROLES:
            raise ValueError(f"Unknown message role: {self.role}")
        if not self.timestamp:
            self.timestamp = datetime.now().isoformat()

    def to_dict(self):
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "ChatMessage":
        timestamp = data.get("timestamp")
        if timestamp is not None:
            # TypeError ou ValueError si l'horodatage n'est pas une date ISO
            datetime.fromisoformat(timestamp)
        return cls(
            role=data["role"],
            content=str(data["content"]),
            timestamp=timestamp,
        )

class ParseKind(Enum):
    JSON = "json"
    KEY_VALUE = "key_value"

@dataclass(frozen=True)
class ParseResult:
    """Outcome of parsing a project config: which format matched and what it produced."""
    kind: ParseKind
    parameters: Any = field(default_factory=dict)
