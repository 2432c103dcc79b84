"""
Message model
"""
from dataclasses import dataclass, field
from typing import Dict, Optional, Union

from .errors import InvalidTopicError


def validate_topic(topic: str) -> str:
    if not isinstance(topic, str) or not topic:
        raise InvalidTopicError("topic name must be a non-empty string")
    return topic


def encode_payload(payload: Union[str, bytes]) -> bytes:
    """Payloads are opaque bytes; text is sent as UTF-8"""
    if isinstance(payload, bytes):
        return payload
    if isinstance(payload, str):
        return payload.encode('utf-8')
    raise TypeError(f"payload must be str or bytes, not {type(payload).__name__}")


@dataclass(frozen=True)
class Message:
    """A payload bound for a topic"""
    topic: str
    payload: bytes
    key: Optional[bytes] = None
    headers: Dict[str, bytes] = field(default_factory=dict)

    def __post_init__(self):
        validate_topic(self.topic)
        object.__setattr__(self, 'payload', encode_payload(self.payload))
