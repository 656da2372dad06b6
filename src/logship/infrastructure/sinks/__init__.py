"""
Sink adapters for logship.

These implement the SinkPort interface for every output kind.
"""

from logship.infrastructure.sinks.base import BaseSink
from logship.infrastructure.sinks.redis_sink import RedisSink
from logship.infrastructure.sinks.elasticsearch_sink import ElasticsearchSink
from logship.infrastructure.sinks.stdout_sink import StdoutSink

__all__ = [
    "BaseSink",
    "RedisSink",
    "ElasticsearchSink",
    "StdoutSink",
]
