"""
Configuration classes for the k2 client and CLI
"""
import logging
import os
import re
import sys
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Dict, Any, Optional


DEFAULT_BROKERS = "localhost:29092"
DEFAULT_GROUP = "example"
DEFAULT_TIMEOUT_MS = 10000

_CLIENT_ID_SAFE = re.compile(r'[A-Za-z0-9._-]')


class Verbosity(IntEnum):
    """Output verbosity, one step per -v flag"""
    SILENT = 0
    SOFT = 1
    LOUD = 2
    TOO_MUCH = 3

    @classmethod
    def from_count(cls, count: int) -> 'Verbosity':
        return cls(min(max(count, 0), cls.TOO_MUCH))

    def log_level(self) -> int:
        if self >= Verbosity.LOUD:
            return logging.DEBUG
        if self == Verbosity.SOFT:
            return logging.INFO
        return logging.WARNING


def sanitize_client_id(name: str) -> str:
    """Replace characters Kafka rejects in client ids with _<byte value>"""
    return ''.join(
        c if _CLIENT_ID_SAFE.match(c) else f"_{ord(c) & 0xFF}"
        for c in name
    )


def default_client_id() -> str:
    """Client id derived from the current user"""
    return sanitize_client_id(os.environ.get('USER') or 'unknown')


@dataclass
class ClientConfig:
    """Settings shared by every k2 command"""

    bootstrap_servers: str = DEFAULT_BROKERS
    group_id: str = DEFAULT_GROUP
    client_id: str = field(default_factory=default_client_id)
    timeout_ms: int = DEFAULT_TIMEOUT_MS
    verbosity: Verbosity = Verbosity.SILENT

    @property
    def timeout(self) -> float:
        """Timeout in seconds, as confluent_kafka expects"""
        return self.timeout_ms / 1000.0


@dataclass
class ProducerConfig:
    """Producer configuration"""

    # Connection
    bootstrap_servers: str = DEFAULT_BROKERS
    client_id: Optional[str] = None

    # Batching
    linger_ms: int = 5
    batch_num_messages: int = 10000

    # Reliability
    acks: str = 'all'
    enable_idempotence: bool = False

    # Retries
    retries: int = 3
    retry_backoff_ms: int = 100

    # Timeouts
    request_timeout_ms: int = 30000
    delivery_timeout_ms: int = 120000

    def to_dict(self) -> Dict[str, Any]:
        """Convert config to Kafka producer config dict"""
        conf = {
            'bootstrap.servers': self.bootstrap_servers,
            'linger.ms': self.linger_ms,
            'batch.num.messages': self.batch_num_messages,
            'acks': self.acks,
            'enable.idempotence': self.enable_idempotence,
            'retries': self.retries,
            'retry.backoff.ms': self.retry_backoff_ms,
            'request.timeout.ms': self.request_timeout_ms,
            'delivery.timeout.ms': self.delivery_timeout_ms,
        }
        if self.client_id:
            conf['client.id'] = self.client_id
        return conf


@dataclass
class ConsumerConfig:
    """Consumer configuration"""

    bootstrap_servers: str = DEFAULT_BROKERS
    group_id: str = DEFAULT_GROUP
    client_id: Optional[str] = None
    session_timeout_ms: Optional[int] = None
    enable_partition_eof: Optional[bool] = None
    enable_auto_commit: Optional[bool] = None
    auto_offset_reset: Optional[str] = None
    enable_auto_offset_store: Optional[bool] = None

    @classmethod
    def for_read(cls, client: ClientConfig) -> 'ConsumerConfig':
        """Manual assignment, no commits, start from earliest when unsure"""
        return cls(
            bootstrap_servers=client.bootstrap_servers,
            group_id=client.group_id,
            client_id=client.client_id,
            session_timeout_ms=client.timeout_ms,
            enable_partition_eof=False,
            enable_auto_commit=False,
            auto_offset_reset='earliest',
            enable_auto_offset_store=False,
        )

    @classmethod
    def for_tail(cls, client: ClientConfig) -> 'ConsumerConfig':
        return cls(
            bootstrap_servers=client.bootstrap_servers,
            group_id=client.group_id,
            client_id=client.client_id,
            session_timeout_ms=client.timeout_ms,
            enable_partition_eof=False,
            enable_auto_commit=False,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert config to Kafka consumer config dict"""
        conf = {
            'bootstrap.servers': self.bootstrap_servers,
            'group.id': self.group_id,
        }
        optional = {
            'client.id': self.client_id,
            'session.timeout.ms': self.session_timeout_ms,
            'enable.partition.eof': self.enable_partition_eof,
            'enable.auto.commit': self.enable_auto_commit,
            'auto.offset.reset': self.auto_offset_reset,
            'enable.auto.offset.store': self.enable_auto_offset_store,
        }
        conf.update({k: v for k, v in optional.items() if v is not None})
        return conf


class LogConfig:
    """Logging configuration"""

    @staticmethod
    def setup_logging(level=logging.INFO):
        """Setup logging configuration; stdout is reserved for command output"""
        logging.basicConfig(
            format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
            level=level,
            datefmt='%Y-%m-%d %H:%M:%S',
            stream=sys.stderr,
        )
