"""
Exception hierarchy for the k2 client and CLI
"""


class K2Error(Exception):
    """Base class for all k2 errors"""


class InvalidBrokerAddressError(K2Error, ValueError):
    """Broker address is not in host:port form"""


class InvalidTopicError(K2Error, ValueError):
    """Topic name is empty"""


class ProducerClosedError(K2Error):
    """Producer was used after shutdown"""


class DeliveryFailedError(K2Error):
    """One or more messages could not be delivered"""

    def __init__(self, message: str, failed: int = 0, pending: int = 0):
        super().__init__(message)
        self.failed = failed
        self.pending = pending


class InvalidArgumentsError(K2Error):
    """Command line arguments are missing or inconsistent"""


class InvalidReadWindowError(InvalidArgumentsError):
    """Read window parameters are malformed or conflict with each other"""


class TopicNotFoundError(K2Error):
    """Topic does not exist or has no partitions"""


class NoMessagesError(K2Error):
    """Polling timed out before any message was read"""
