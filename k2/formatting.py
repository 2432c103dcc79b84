"""
Rendering of consumed messages
"""
import json
import logging
from typing import List

from confluent_kafka import TIMESTAMP_NOT_AVAILABLE

from .config import Verbosity

logger = logging.getLogger(__name__)


def message_timestamp(msg) -> int:
    """Message timestamp in milliseconds, 0 when the broker has none"""
    ts_type, ts = msg.timestamp()
    if ts_type == TIMESTAMP_NOT_AVAILABLE:
        return 0
    return ts


def decode_payload(msg) -> str:
    value = msg.value()
    if value is None:
        return ""
    try:
        return value.decode('utf-8')
    except UnicodeDecodeError as e:
        logger.error(f"Error while deserializing message payload: {e}")
        return ""


def format_message(msg, verbosity: Verbosity) -> List[str]:
    """Lines to print for one consumed message"""
    payload = decode_payload(msg)
    timestamp = message_timestamp(msg)

    if verbosity < Verbosity.TOO_MUCH:
        return [json.dumps({
            'timestamp': timestamp,
            'topic': msg.topic(),
            'message': payload,
        })]

    lines = [
        f"key:'{msg.key()!r}', topic:'{msg.topic()}', partition:{msg.partition()}, "
        f"offset:{msg.offset()}, timestamp:{timestamp}, payload:{payload}"
    ]
    for key, value in msg.headers() or []:
        lines.append(f"  Header {key!r}: {value!r}")
    return lines


def print_message(msg, verbosity: Verbosity) -> None:
    for line in format_message(msg, verbosity):
        print(line, flush=True)
