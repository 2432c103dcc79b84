"""
Message sources and the publish sequence
"""
import logging
from abc import ABC, abstractmethod
from typing import Iterable, Iterator, List

from .client import KafkaClient
from .models import Message


class MessageSource(ABC):
    """Abstract base class for message sources"""

    @abstractmethod
    def messages(self) -> Iterator[Message]:
        """Yield messages in publish order"""
        pass

    def collect(self) -> List[Message]:
        return list(self.messages())


class SampleMessages(MessageSource):
    """The fixed smoke-test messages, one per topic"""

    SAMPLES = [
        ('one', 'message 1'),
        ('two', 'message 2'),
        ('three', 'message 3'),
        ('json', '{"a":3, "b":"c", "d":["a"], "e":{"a":"b"}}'),
    ]

    def messages(self) -> Iterator[Message]:
        for topic, payload in self.SAMPLES:
            yield Message(topic=topic, payload=payload)


class LineMessages(MessageSource):
    """One message per non-blank line of text"""

    def __init__(self, topic: str, lines: Iterable[str]):
        self.topic = topic
        self.lines = lines

    def messages(self) -> Iterator[Message]:
        for line in self.lines:
            line = line.rstrip('\r\n')
            if line.strip():
                yield Message(topic=self.topic, payload=line)


def publish(client: KafkaClient, source: MessageSource, timeout: float = 30) -> int:
    """Produce every message from source, deliver them and shut down"""
    logger = logging.getLogger('publish')
    producer = client.producer()
    count = 0
    try:
        for message in source.messages():
            producer.send(message)
            count += 1
        producer.deliver_messages(timeout)
    finally:
        producer.shutdown(timeout)

    logger.info(f"Published {count:,} messages to {client.bootstrap_servers}")
    return count
