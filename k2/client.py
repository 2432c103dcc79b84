"""
Broker client handle
"""
import logging
from typing import List, Optional, Sequence, Union

from .config import ProducerConfig
from .errors import InvalidBrokerAddressError
from .producer import MessageProducer


def parse_brokers(brokers: Union[str, Sequence[str]]) -> List[str]:
    """Normalise a broker list to validated host:port strings"""
    if isinstance(brokers, str):
        brokers = brokers.split(',')

    addresses = [b.strip() for b in brokers if b and b.strip()]
    if not addresses:
        raise InvalidBrokerAddressError("at least one broker address is required")

    for address in addresses:
        host, sep, port = address.rpartition(':')
        if not sep or not host:
            raise InvalidBrokerAddressError(f"'{address}' is not in host:port form")
        if not (port.isascii() and port.isdigit()) or not 0 < int(port) < 65536:
            raise InvalidBrokerAddressError(f"'{address}' has an invalid port")
    return addresses


class KafkaClient:
    """Holds the broker list and hands out producers bound to it"""

    def __init__(self, brokers: Union[str, Sequence[str]], client_id: Optional[str] = None):
        self.logger = logging.getLogger(self.__class__.__name__)
        self.brokers = parse_brokers(brokers)
        self.client_id = client_id
        self._producers: List[MessageProducer] = []

    @property
    def bootstrap_servers(self) -> str:
        return ','.join(self.brokers)

    def producer(self, **overrides) -> MessageProducer:
        """Create a producer; keyword arguments override ProducerConfig fields"""
        config = ProducerConfig(
            bootstrap_servers=self.bootstrap_servers,
            client_id=self.client_id,
            **overrides
        )
        producer = MessageProducer(config)
        self._producers.append(producer)
        return producer

    def close(self) -> None:
        """Shut down every producer still open"""
        producers, self._producers = self._producers, []
        for producer in producers:
            if not producer.closed:
                producer.shutdown()
        self.logger.debug(f"Client for {self.bootstrap_servers} closed")

    def __enter__(self) -> 'KafkaClient':
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
