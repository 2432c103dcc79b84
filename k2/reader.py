"""
Bounded reads of a topic by time window or by message count
"""
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Dict, List, Optional

from confluent_kafka import Consumer, TopicPartition

from .config import ClientConfig, ConsumerConfig, Verbosity
from .errors import InvalidReadWindowError, NoMessagesError, TopicNotFoundError
from .formatting import message_timestamp, print_message
from .timespec import parse_datetime, parse_relative, to_millis


# (start, end, offset, start_offset, end_offset)
_VALID_COMBINATIONS = {
    (True, True, False, False, False),
    (True, False, False, False, False),
    (False, False, True, False, False),
    (False, False, False, True, False),
    (False, False, False, True, True),
}


@dataclass
class ReadWindow:
    """Where a read starts and when it stops"""
    now: datetime
    start: Optional[datetime] = None
    end: Optional[datetime] = None
    offset: Optional[int] = None
    start_offset: Optional[datetime] = None
    end_offset: Optional[datetime] = None

    @classmethod
    def from_args(
            cls,
            start: Optional[str] = None,
            end: Optional[str] = None,
            offset: Optional[str] = None,
            start_offset: Optional[str] = None,
            end_offset: Optional[str] = None,
            now: Optional[datetime] = None
    ) -> 'ReadWindow':
        """Parse and validate the read command's window options"""
        now = now or datetime.now(timezone.utc)
        window = cls(
            now=now,
            start=_parse(parse_datetime, start, 'start datetime'),
            end=_parse(parse_datetime, end, 'end datetime'),
            offset=_parse(_parse_count, offset, 'offset'),
            start_offset=_parse(lambda v: parse_relative(v, now), start_offset, 'start offset'),
            end_offset=_parse(lambda v: parse_relative(v, now), end_offset, 'end offset'),
        )
        window.validate()
        return window

    def validate(self) -> None:
        start, end, offset, start_offset, end_offset = (
            v is not None for v in
            (self.start, self.end, self.offset, self.start_offset, self.end_offset)
        )
        if start and start_offset and not end and not end_offset:
            raise InvalidReadWindowError(
                "Invalid set of params: Only start-offset or start can be set")
        if end and end_offset and not start and not start_offset:
            raise InvalidReadWindowError(
                "Invalid set of params: Only end-offset or end can be set")
        if (start, end, offset, start_offset, end_offset) not in _VALID_COMBINATIONS:
            raise InvalidReadWindowError("Invalid set of params")

    @property
    def start_time(self) -> Optional[datetime]:
        return self.start or self.start_offset

    @property
    def end_time(self) -> datetime:
        return self.end or self.end_offset or self.now


def _parse(parser, value, name):
    if value is None:
        return None
    try:
        return parser(value)
    except ValueError as e:
        raise InvalidReadWindowError(f"Invalid {name}: {e}") from None


def _parse_count(value) -> int:
    count = int(value)
    if count <= 0:
        raise ValueError("must be a positive number of messages")
    return count


class TopicReader:
    """Reads a topic between two positions and stops"""

    def __init__(self, config: ClientConfig):
        self.logger = logging.getLogger(self.__class__.__name__)
        self.config = config
        self.consumer = Consumer(ConsumerConfig.for_read(config).to_dict())

    def _partitions(self, topic: str) -> List[int]:
        metadata = self.consumer.list_topics(topic, timeout=self.config.timeout)
        topic_meta = metadata.topics.get(topic)
        if topic_meta is None or topic_meta.error is not None or not topic_meta.partitions:
            raise TopicNotFoundError(f"No partitions found for {topic}.")
        return sorted(topic_meta.partitions)

    def _start_positions(
            self,
            topic: str,
            partitions: List[int],
            window: ReadWindow,
            watermarks: Dict[int, tuple]
    ) -> Dict[int, int]:
        if window.start_time is not None:
            start_ms = to_millis(window.start_time)
            found = self.consumer.offsets_for_times(
                [TopicPartition(topic, p, start_ms) for p in partitions],
                timeout=self.config.timeout
            )
            # offset -1: no message at or after the timestamp
            return {tp.partition: tp.offset for tp in found if tp.offset >= 0}

        return {
            p: max(low, high - window.offset)
            for p, (low, high) in watermarks.items()
        }

    def read(
            self,
            topic: str,
            window: ReadWindow,
            verbosity: Verbosity = Verbosity.SILENT,
            output: Callable = print_message
    ) -> int:
        """Print the messages in the window, returning how many were read"""
        try:
            return self._read(topic, window, verbosity, output)
        finally:
            self.consumer.close()

    def _read(self, topic, window, verbosity, output) -> int:
        partitions = self._partitions(topic)
        watermarks = {
            p: self.consumer.get_watermark_offsets(
                TopicPartition(topic, p), timeout=self.config.timeout)
            for p in partitions
        }
        positions = self._start_positions(topic, partitions, window, watermarks)

        remaining = {
            p: watermarks[p][1]
            for p, position in positions.items()
            if position < watermarks[p][1]
        }
        if not remaining:
            raise NoMessagesError(f"No messages in the requested range of {topic}.")

        self.consumer.assign([
            TopicPartition(topic, p, positions[p]) for p in sorted(remaining)
        ])
        self.logger.info(f"Reading {topic} partitions {sorted(remaining)}")

        end_ms = to_millis(window.end_time)
        count = 0
        while remaining:
            msg = self.consumer.poll(self.config.timeout)
            if msg is None:
                if count == 0:
                    raise NoMessagesError("Polling timed out no messages read.")
                self.logger.warning(
                    f"Polling timed out with partitions {sorted(remaining)} unfinished")
                break

            if msg.error():
                self.logger.error(f"Kafka error: {msg.error()}")
                continue

            partition = msg.partition()
            if partition not in remaining:
                continue
            if message_timestamp(msg) > end_ms:
                remaining.pop(partition)
                continue

            output(msg, verbosity)
            count += 1
            if msg.offset() >= remaining[partition] - 1:
                remaining.pop(partition)

        self.logger.info(f"Read {count:,} messages from {topic}")
        return count
