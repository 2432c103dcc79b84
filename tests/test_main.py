import io

import pytest

from conftest import FakeMessage
from k2.config import Verbosity
from k2.main import build_parser, config_from_args, main


class TestParser:

    def test_defaults(self, monkeypatch):
        monkeypatch.setenv('USER', 'dev')
        config = config_from_args(build_parser().parse_args(['list']))
        assert config.bootstrap_servers == 'localhost:29092'
        assert config.group_id == 'example'
        assert config.client_id == 'dev'
        assert config.timeout_ms == 10000
        assert config.verbosity is Verbosity.SILENT

    def test_global_options_after_subcommand(self):
        args = build_parser().parse_args(
            ['list', '-b', 'k1:9092,k2:9092', '-vv', '--timeout', '500', '--client-id', 'me'])
        config = config_from_args(args)
        assert config.bootstrap_servers == 'k1:9092,k2:9092'
        assert config.verbosity is Verbosity.LOUD
        assert config.timeout_ms == 500
        assert config.client_id == 'me'

    def test_global_options_before_subcommand(self):
        args = build_parser().parse_args(['-g', 'readers', '-v', 'tail', '--topic', 'a', '--topic', 'b'])
        assert args.group == 'readers'
        assert args.verbose == 1
        assert args.topics == ['a', 'b']

    def test_verbose_counts_add_up_across_levels(self):
        args = build_parser().parse_args(['-v', 'list', '-v'])
        assert config_from_args(args).verbosity is Verbosity.LOUD

        args = build_parser().parse_args(['-vv', 'read', '-v', '--topic', 't'])
        assert config_from_args(args).verbosity is Verbosity.TOO_MUCH

    def test_subcommand_is_required(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args([])


def test_sample_publishes_fixed_messages(fake_producer):
    assert main(['sample', '-b', '0.0.0.0:29092']) == 0

    producer = fake_producer.instances[0]
    assert producer.conf['bootstrap.servers'] == '0.0.0.0:29092'
    assert [(m.topic(), m.value()) for m in producer.produced] == [
        ('one', b'message 1'),
        ('two', b'message 2'),
        ('three', b'message 3'),
        ('json', b'{"a":3, "b":"c", "d":["a"], "e":{"a":"b"}}'),
    ]


def test_produce_from_arguments(fake_producer):
    assert main(['produce', '--topic', 'events', 'hello', 'world']) == 0
    assert [m.value() for m in fake_producer.instances[0].produced] == [b'hello', b'world']


def test_produce_from_stdin(fake_producer, monkeypatch):
    monkeypatch.setattr('sys.stdin', io.StringIO('line 1\n\nline 2\n'))
    assert main(['produce', '--topic', 'events']) == 0
    assert [m.value() for m in fake_producer.instances[0].produced] == [b'line 1', b'line 2']


def test_bad_broker_exits_with_error(fake_producer):
    assert main(['sample', '-b', 'no-port']) == 1
    assert fake_producer.instances == []


def test_non_ascii_port_exits_with_error(fake_producer):
    assert main(['sample', '-b', 'host:9\u00b2']) == 1
    assert fake_producer.instances == []


def test_delivery_failure_exits_with_error(fake_producer, monkeypatch):
    original = fake_producer.__init__

    def failing_init(self, conf):
        original(self, conf)
        self.fail_topics = {'json'}

    monkeypatch.setattr(fake_producer, '__init__', failing_init)
    assert main(['sample']) == 1


def test_read_without_topic_exits_with_error(fake_consumer):
    assert main(['read', '--offset', '1']) == 1


def test_read_with_conflicting_window(fake_consumer):
    assert main(['read', '--topic', 't', '--start', '2024-01-01T00:00:00Z',
                 '--start-offset', '1 hour ago']) == 1
    assert fake_consumer.instances == []


def test_tail_without_topic_exits_with_error(fake_consumer):
    assert main(['tail']) == 1


def test_list_prints_topics(monkeypatch, capsys):
    class FakeAdminClient:
        def __init__(self, conf):
            pass

        def list_topics(self, topic=None, timeout=None):
            from types import SimpleNamespace
            return SimpleNamespace(brokers={}, orig_broker_name='b', orig_broker_id=1,
                                   topics={'one': SimpleNamespace(error=None, partitions={})})

    monkeypatch.setattr('k2.admin.AdminClient', FakeAdminClient)
    assert main(['list']) == 0
    assert capsys.readouterr().out == "Topics:\n  one\n"


def test_interrupted_tail_exits_130(fake_consumer, monkeypatch, capsys):
    class InterruptedConsumer(fake_consumer):
        def __init__(self, conf):
            super().__init__(conf)
            self.queue = [FakeMessage('one', b'message 1'), KeyboardInterrupt()]

    monkeypatch.setattr('k2.tail.Consumer', InterruptedConsumer)

    assert main(['tail', '--topic', 'one']) == 130
    assert fake_consumer.instances[0].closed
    assert '"message 1"' in capsys.readouterr().out


def test_list_admin_client_takes_brokers_and_client_id(monkeypatch):
    confs = []

    class FakeAdminClient:
        def __init__(self, conf):
            confs.append(conf)

        def list_topics(self, topic=None, timeout=None):
            from types import SimpleNamespace
            return SimpleNamespace(brokers={}, orig_broker_name='b', orig_broker_id=1, topics={})

    monkeypatch.setattr('k2.admin.AdminClient', FakeAdminClient)
    assert main(['list', '-b', 'k1:9092', '-g', 'readers', '--client-id', 'me']) == 0
    assert confs == [{'bootstrap.servers': 'k1:9092', 'client.id': 'me'}]
