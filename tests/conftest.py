"""
In-memory stand-ins for the confluent_kafka clients
"""
from types import SimpleNamespace

import pytest
from confluent_kafka import TIMESTAMP_CREATE_TIME, TIMESTAMP_NOT_AVAILABLE, TopicPartition


class FakeMessage:
    def __init__(self, topic, value, partition=0, offset=0, timestamp=None,
                 key=None, headers=None, error=None):
        self._topic = topic
        self._value = value
        self._partition = partition
        self._offset = offset
        self._timestamp = timestamp
        self._key = key
        self._headers = headers
        self._error = error

    def topic(self):
        return self._topic

    def value(self):
        return self._value

    def partition(self):
        return self._partition

    def offset(self):
        return self._offset

    def key(self):
        return self._key

    def headers(self):
        return self._headers

    def error(self):
        return self._error

    def timestamp(self):
        if self._timestamp is None:
            return (TIMESTAMP_NOT_AVAILABLE, -1)
        return (TIMESTAMP_CREATE_TIME, self._timestamp)


class FakeProducer:
    """Records produced messages and acknowledges them on flush"""

    instances = []

    def __init__(self, conf):
        self.conf = conf
        self.produced = []
        self.pending = []
        self.fail_topics = set()
        self.buffer_full_once = False
        self.stuck = 0
        self.flush_calls = 0
        FakeProducer.instances.append(self)

    def produce(self, topic, value=None, key=None, headers=None, callback=None):
        if self.buffer_full_once:
            self.buffer_full_once = False
            raise BufferError("Local: Queue full")
        msg = FakeMessage(topic, value, offset=len(self.produced), key=key, headers=headers)
        self.produced.append(msg)
        self.pending.append((msg, callback))

    def poll(self, timeout=None):
        return 0

    def flush(self, timeout=None):
        self.flush_calls += 1
        pending, self.pending = self.pending, []
        for msg, callback in pending:
            if callback:
                err = "broker down" if msg.topic() in self.fail_topics else None
                callback(err, msg)
        return self.stuck


class FakeConsumer:
    """Serves a scripted partition log to poll()"""

    instances = []

    def __init__(self, conf):
        self.conf = conf
        self.topics = {}
        self.offsets_by_time = {}
        self.queue = []
        self.assigned = None
        self.subscribed = None
        self.commits = []
        self.closed = False
        FakeConsumer.instances.append(self)

    def add_partition(self, topic, partition, messages, low=0):
        self.topics.setdefault(topic, {})[partition] = (low, messages)

    def list_topics(self, topic=None, timeout=None):
        topics = {}
        for name, partitions in self.topics.items():
            topics[name] = SimpleNamespace(
                topic=name,
                error=None,
                partitions={p: SimpleNamespace(id=p) for p in partitions},
            )
        return SimpleNamespace(topics=topics)

    def get_watermark_offsets(self, tp, timeout=None, cached=False):
        low, messages = self.topics[tp.topic][tp.partition]
        return (low, low + len(messages))

    def offsets_for_times(self, partitions, timeout=None):
        return [
            TopicPartition(tp.topic, tp.partition,
                           self.offsets_by_time.get(tp.partition, -1))
            for tp in partitions
        ]

    def assign(self, partitions):
        self.assigned = [(tp.topic, tp.partition, tp.offset) for tp in partitions]
        for topic, partition, start in self.assigned:
            low, messages = self.topics[topic][partition]
            self.queue.extend(m for m in messages if m.offset() >= start)

    def subscribe(self, topics):
        self.subscribed = topics

    def poll(self, timeout=None):
        if self.queue:
            item = self.queue.pop(0)
            if isinstance(item, BaseException):
                raise item
            return item
        return None

    def commit(self, message=None, asynchronous=True):
        self.commits.append(message)

    def close(self):
        self.closed = True


@pytest.fixture
def fake_producer(monkeypatch):
    FakeProducer.instances = []
    monkeypatch.setattr('k2.producer.Producer', FakeProducer)
    return FakeProducer


@pytest.fixture
def fake_consumer(monkeypatch):
    FakeConsumer.instances = []
    monkeypatch.setattr('k2.reader.Consumer', FakeConsumer)
    monkeypatch.setattr('k2.tail.Consumer', FakeConsumer)
    return FakeConsumer


def make_log(topic, partition, timestamps, start=0):
    """Messages at consecutive offsets with the given timestamps"""
    return [
        FakeMessage(topic, f"{topic}-{partition}-{i}".encode(), partition=partition,
                    offset=start + i, timestamp=ts)
        for i, ts in enumerate(timestamps)
    ]
