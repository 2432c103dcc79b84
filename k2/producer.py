"""
Kafka message producer
"""
import logging
from typing import Optional, Dict, Union
from confluent_kafka import Producer

from .config import ProducerConfig
from .errors import DeliveryFailedError, ProducerClosedError
from .models import Message, encode_payload, validate_topic


class MessageProducer:
    """Enqueues messages for a set of brokers and delivers them on demand"""

    def __init__(self, config: ProducerConfig):
        self.logger = logging.getLogger(self.__class__.__name__)
        self.config = config
        self.closed = False

        # Statistics
        self.enqueued_count = 0
        self.success_count = 0
        self.error_count = 0
        self._failed_since_delivery = 0

        try:
            self.producer = Producer(config.to_dict())
            self.logger.info(f"Producer initialized for {config.bootstrap_servers}")
        except Exception as e:
            self.logger.error(f"Failed to initialize producer: {e}")
            raise

    def _delivery_callback(self, err, msg):
        """Async delivery callback"""
        if err:
            self.error_count += 1
            self._failed_since_delivery += 1
            self.logger.error(f"Delivery to '{msg.topic()}' failed: {err}")
        else:
            self.success_count += 1
            self.logger.debug(
                f"Delivered to {msg.topic()} [{msg.partition()}] @ {msg.offset()}"
            )

    def produce(
            self,
            payload: Union[str, bytes],
            topic: str,
            key: Optional[bytes] = None,
            headers: Optional[Dict[str, bytes]] = None
    ) -> None:
        """Enqueue a message (non-blocking)"""
        if self.closed:
            raise ProducerClosedError("producer has been shut down")
        validate_topic(topic)
        value = encode_payload(payload)

        try:
            self.producer.produce(
                topic,
                value=value,
                key=key,
                headers=headers,
                callback=self._delivery_callback
            )
        except BufferError:
            # Queue is full - serve callbacks and retry once
            self.logger.warning("Producer queue full, polling...")
            self.producer.poll(1)
            self.producer.produce(
                topic,
                value=value,
                key=key,
                headers=headers,
                callback=self._delivery_callback
            )
        except Exception as e:
            self.logger.error(f"Failed to enqueue message for '{topic}': {e}")
            raise

        self.enqueued_count += 1
        self.producer.poll(0)

    def send(self, message: Message) -> None:
        self.produce(message.payload, message.topic, key=message.key,
                     headers=message.headers or None)

    def deliver_messages(self, timeout: float = 30) -> None:
        """Flush enqueued messages, failing if any were not delivered"""
        try:
            pending = self.producer.flush(timeout)
        except Exception as e:
            self.logger.error(f"Failed to flush producer: {e}")
            raise

        failed, self._failed_since_delivery = self._failed_since_delivery, 0
        self.logger.info(
            f"Delivered: Success={self.success_count:,}, "
            f"Errors={self.error_count:,}"
        )

        if pending > 0 or failed > 0:
            raise DeliveryFailedError(
                f"{failed} message(s) failed, {pending} still pending after flush",
                failed=failed,
                pending=pending,
            )

    def shutdown(self, timeout: float = 30) -> None:
        """Deliver outstanding messages and close the producer"""
        if self.closed:
            return
        try:
            self.deliver_messages(timeout)
        finally:
            self.closed = True
            self.logger.info("Producer closed")

    def get_stats(self) -> Dict[str, int]:
        """Get producer statistics"""
        return {
            'enqueued': self.enqueued_count,
            'success_count': self.success_count,
            'error_count': self.error_count,
            'pending': self.enqueued_count - self.success_count - self.error_count
        }
