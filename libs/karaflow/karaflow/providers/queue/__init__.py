"""Queue clients."""

from karaflow.providers.queue.base import QueueClient, describe_job
from karaflow.providers.queue.rest import HttpQueueClient
from karaflow.providers.queue.redis_jobs import RedisQueueClient

__all__ = ["HttpQueueClient", "QueueClient", "RedisQueueClient", "describe_job"]
