"""
Kafka cluster metadata
"""
import logging
from confluent_kafka.admin import AdminClient
from typing import List, Optional

from .config import Verbosity


class KafkaTopicManager:
    """Reads topic and broker metadata from the cluster"""

    def __init__(self, bootstrap_servers: str, client_id: Optional[str] = None):
        self.logger = logging.getLogger(self.__class__.__name__)
        self.bootstrap_servers = bootstrap_servers

        conf = {'bootstrap.servers': bootstrap_servers}
        if client_id:
            conf['client.id'] = client_id

        try:
            self.admin_client = AdminClient(conf)
            self.logger.info("AdminClient initialized successfully")
        except Exception as e:
            self.logger.error(f"Failed to initialize AdminClient: {e}")
            raise

    def describe_cluster(self, timeout: float = 10):
        """Fetch metadata for all topics"""
        try:
            return self.admin_client.list_topics(timeout=timeout)
        except Exception as e:
            self.logger.error(f"Failed to fetch metadata: {e}")
            raise

    def list_topics(self, timeout: float = 10) -> List[str]:
        """List all topics"""
        return sorted(self.describe_cluster(timeout).topics.keys())

    def get_topic_info(self, topic_name: str, timeout: float = 10) -> Optional[dict]:
        """Get detailed topic information"""
        try:
            metadata = self.admin_client.list_topics(topic=topic_name, timeout=timeout)
        except Exception as e:
            self.logger.error(f"Error getting topic info: {e}")
            raise

        topic = metadata.topics.get(topic_name)
        if not topic or topic.error is not None:
            return None

        return {
            'name': topic_name,
            'partitions': len(topic.partitions),
            'partition_info': [
                {
                    'id': p.id,
                    'leader': p.leader,
                    'replicas': p.replicas,
                    'isrs': p.isrs
                }
                for p in sorted(topic.partitions.values(), key=lambda p: p.id)
            ]
        }


def format_cluster(metadata, verbosity: Verbosity) -> List[str]:
    """Lines printed by the list command"""
    lines = []
    if verbosity >= Verbosity.LOUD:
        lines += [
            "Cluster information:",
            f"  Broker count: {len(metadata.brokers)}",
            f"  Topics count: {len(metadata.topics)}",
            f"  Metadata broker name: {metadata.orig_broker_name}",
            f"  Metadata broker id: {metadata.orig_broker_id}",
            "",
        ]

    lines.append("Topics:")
    for name in sorted(metadata.topics):
        topic = metadata.topics[name]
        line = f"  {name}"
        if topic.error is not None:
            line += f" Err: {topic.error}"
        lines.append(line)

        if verbosity >= Verbosity.LOUD:
            for p in sorted(topic.partitions.values(), key=lambda p: p.id):
                lines.append(
                    f"    Partition: {p.id}  Leader: {p.leader}  "
                    f"Replicas: {p.replicas}  ISR: {p.isrs}  Err: {p.error}"
                )
    return lines
