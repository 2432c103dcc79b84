"""
k2 - Kafka publishing client and command line toolkit
"""

__version__ = "1.0.0"

from .config import ClientConfig, ProducerConfig, ConsumerConfig, LogConfig, Verbosity
from .client import KafkaClient
from .producer import MessageProducer
from .models import Message
from .samples import MessageSource, SampleMessages, LineMessages, publish
from .admin import KafkaTopicManager
from .reader import ReadWindow, TopicReader
from .tail import TopicTailer

__all__ = [
    'ClientConfig',
    'ProducerConfig',
    'ConsumerConfig',
    'LogConfig',
    'Verbosity',
    'KafkaClient',
    'MessageProducer',
    'Message',
    'MessageSource',
    'SampleMessages',
    'LineMessages',
    'publish',
    'KafkaTopicManager',
    'ReadWindow',
    'TopicReader',
    'TopicTailer'
]
