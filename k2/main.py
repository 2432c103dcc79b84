"""
Main entry point for the k2 command line tool
"""
import argparse
import logging
import signal
import sys
from typing import List, Optional

import confluent_kafka
from confluent_kafka import KafkaException

from .admin import KafkaTopicManager, format_cluster
from .client import KafkaClient
from .config import (
    DEFAULT_BROKERS,
    DEFAULT_GROUP,
    DEFAULT_TIMEOUT_MS,
    ClientConfig,
    LogConfig,
    Verbosity,
    default_client_id,
)
from .errors import InvalidArgumentsError, K2Error
from .reader import ReadWindow, TopicReader
from .samples import LineMessages, SampleMessages, publish
from .tail import TopicTailer


def _add_global_options(parser: argparse.ArgumentParser, suppress: bool) -> None:
    """Options accepted both before and after the subcommand"""
    def default(value):
        return argparse.SUPPRESS if suppress else value

    parser.add_argument('-g', '--group', default=default(DEFAULT_GROUP),
                        help="Group id for client")
    parser.add_argument('--client-id', '--client_id', dest='client_id',
                        default=default(None),
                        help="Client id to use. current user name or unknown is used by default.")
    parser.add_argument('-b', '--brokers', default=default(DEFAULT_BROKERS),
                        help="Broker list in kafka format")
    # counted separately on each level and summed in config_from_args
    parser.add_argument('-v', '--verbose', action='count', default=0,
                        dest='sub_verbose' if suppress else 'verbose',
                        help="Increase verbosity level")
    parser.add_argument('--timeout', type=int, default=default(DEFAULT_TIMEOUT_MS),
                        help="kafka timeout in milliseconds")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='k2',
        description="Publish, list, read and tail Kafka topics",
    )
    _add_global_options(parser, suppress=False)

    common = argparse.ArgumentParser(add_help=False)
    _add_global_options(common, suppress=True)

    subparsers = parser.add_subparsers(dest='command', metavar='COMMAND')
    subparsers.required = True

    subparsers.add_parser('list', parents=[common], help="List topics")

    read = subparsers.add_parser('read', parents=[common], help="Read a window of a topic")
    read.add_argument('--topic', help="Topic to read")
    read.add_argument('--start', metavar='DATETIME',
                      help="Start datetime (YYYY-MM-DDTHH:MM:SS+ZZ:ZZ)")
    read.add_argument('--end', metavar='DATETIME',
                      help="End datetime (YYYY-MM-DDTHH:MM:SS+ZZ:ZZ)")
    read.add_argument('--offset', metavar='NUMBER',
                      help="Read the last NUMBER messages of each partition")
    read.add_argument('--start-offset', metavar='OFFSET',
                      help="Start offset (e.g., '1 hour ago', '2 days later')")
    read.add_argument('--end-offset', metavar='OFFSET',
                      help="End offset (e.g., '30 minutes ago', '4 months from now')")

    tail = subparsers.add_parser('tail', parents=[common], help="Tail topics")
    tail.add_argument('--topic', action='append', dest='topics', default=[],
                      help="Topic to tail, may be repeated")

    produce = subparsers.add_parser('produce', parents=[common],
                                    help="Publish messages to a topic")
    produce.add_argument('--topic', required=True, help="Destination topic")
    produce.add_argument('messages', nargs='*', metavar='MESSAGE',
                         help="Messages to publish; read from stdin lines when omitted")

    subparsers.add_parser('sample', parents=[common],
                          help="Publish the sample messages to one, two, three and json")
    return parser


class K2Application:
    """Runs one k2 command"""

    def __init__(self, config: ClientConfig):
        self.logger = logging.getLogger(self.__class__.__name__)
        self.config = config

    def list_topics(self) -> int:
        manager = KafkaTopicManager(self.config.bootstrap_servers, self.config.client_id)
        metadata = manager.describe_cluster(self.config.timeout)
        for line in format_cluster(metadata, self.config.verbosity):
            print(line)
        return 0

    def read(self, args: argparse.Namespace) -> int:
        if not args.topic:
            raise InvalidArgumentsError("topic is required")
        window = ReadWindow.from_args(
            start=args.start,
            end=args.end,
            offset=args.offset,
            start_offset=args.start_offset,
            end_offset=args.end_offset,
        )
        TopicReader(self.config).read(args.topic, window, self.config.verbosity)
        return 0

    def tail(self, args: argparse.Namespace) -> int:
        if not args.topics:
            raise InvalidArgumentsError("No topic provided.")
        TopicTailer(self.config).tail(args.topics, self.config.verbosity)
        return 0

    def produce(self, args: argparse.Namespace) -> int:
        lines = args.messages or sys.stdin
        source = LineMessages(args.topic, lines)
        with KafkaClient(self.config.bootstrap_servers, self.config.client_id) as client:
            publish(client, source, self.config.timeout)
        return 0

    def sample(self) -> int:
        with KafkaClient(self.config.bootstrap_servers, self.config.client_id) as client:
            publish(client, SampleMessages(), self.config.timeout)
        return 0

    def run(self, args: argparse.Namespace) -> int:
        """Dispatch the parsed command"""
        if args.command == 'list':
            return self.list_topics()
        if args.command == 'read':
            return self.read(args)
        if args.command == 'tail':
            return self.tail(args)
        if args.command == 'produce':
            return self.produce(args)
        if args.command == 'sample':
            return self.sample()
        raise InvalidArgumentsError(f"Unknown command: {args.command}")


def config_from_args(args: argparse.Namespace) -> ClientConfig:
    return ClientConfig(
        bootstrap_servers=args.brokers,
        group_id=args.group,
        client_id=args.client_id or default_client_id(),
        timeout_ms=args.timeout,
        verbosity=Verbosity.from_count(args.verbose + getattr(args, 'sub_verbose', 0)),
    )


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point"""
    args = build_parser().parse_args(argv)
    config = config_from_args(args)

    # Setup logging
    LogConfig.setup_logging(config.verbosity.log_level())
    logger = logging.getLogger('k2')

    if config.verbosity >= Verbosity.TOO_MUCH:
        version_s, version_n = confluent_kafka.libversion()
        logger.debug(f"rd_kafka_version: 0x{version_n:08x}, {version_s}")

    # Handle graceful shutdown
    def signal_handler(sig, frame):
        logger.info("Terminated! Shutting down...")
        sys.exit(0)

    signal.signal(signal.SIGTERM, signal_handler)

    try:
        return K2Application(config).run(args)
    except (K2Error, KafkaException) as e:
        logger.error(str(e))
        return 1
    except KeyboardInterrupt:
        logger.info("Interrupted! Shutting down...")
        return 130


if __name__ == "__main__":
    sys.exit(main())
