"""
Redis sink: pushes records onto a list or publishes them on a channel.
"""

import json
import logging

import redis

from logship.config.models import RedisOutput
from logship.core.models import LogRecord
from logship.infrastructure.sinks.base import BaseSink

__all__ = ["RedisSink"]

logger = logging.getLogger(__name__)


class RedisSink(BaseSink):
    """
    Ships JSON documents to Redis.

    With ``data_type="list"`` each batch is one RPUSH onto ``key`` (the
    layout logstash's redis input reads); with ``"channel"`` each record
    is PUBLISHed on ``key``.
    """

    kind = "redis"

    retry_exceptions = (redis.exceptions.ConnectionError, redis.exceptions.TimeoutError, OSError)

    def __init__(self, declaration: RedisOutput, cancel_event, counters, client: redis.Redis | None = None):
        super().__init__(declaration, cancel_event, counters)
        self.key = declaration.key
        self.data_type = declaration.data_type
        # The client connects lazily, on first command
        self.client = client or redis.Redis(
            host=declaration.host,
            port=declaration.port,
            db=declaration.db,
            socket_timeout=5,
            socket_connect_timeout=5,
        )

    def default_name(self) -> str:
        return f"redis:{self.declaration.host}:{self.declaration.port}"

    def send(self, records: list[LogRecord]) -> None:
        payloads = [json.dumps(record.to_dict(), default=str) for record in records]

        if self.data_type == "list":
            self.client.rpush(self.key, *payloads)
            return

        pipeline = self.client.pipeline(transaction=False)
        for payload in payloads:
            pipeline.publish(self.key, payload)
        pipeline.execute()

    def close(self) -> None:
        self.client.close()
