"""
Follow one or more topics
"""
import logging
from typing import Callable, List, Optional

from confluent_kafka import Consumer

from .config import ClientConfig, ConsumerConfig, Verbosity
from .errors import InvalidArgumentsError
from .formatting import print_message


class TopicTailer:
    """Subscribes to topics and prints messages as they arrive"""

    def __init__(self, config: ClientConfig, poll_interval: float = 1.0):
        self.logger = logging.getLogger(self.__class__.__name__)
        self.config = config
        self.poll_interval = poll_interval
        self.consumer = Consumer(ConsumerConfig.for_tail(config).to_dict())

    def tail(
            self,
            topics: List[str],
            verbosity: Verbosity = Verbosity.SILENT,
            max_messages: Optional[int] = None,
            output: Callable = print_message
    ) -> int:
        """Print messages until max_messages is reached; interrupts propagate"""
        if not topics:
            raise InvalidArgumentsError("No topic provided.")

        self.consumer.subscribe(list(topics))
        self.logger.info(f"Tailing {', '.join(topics)}")
        count = 0

        try:
            while True:
                msg = self.consumer.poll(self.poll_interval)
                if msg is None:
                    continue
                if msg.error():
                    self.logger.error(f"Kafka error: {msg.error()}")
                    continue

                output(msg, verbosity)
                self.consumer.commit(message=msg, asynchronous=True)
                count += 1
                if max_messages is not None and count >= max_messages:
                    break
        finally:
            self.consumer.close()

        self.logger.info(f"Tailed {count:,} messages")
        return count
