"""
Elasticsearch sink: indexes records through the bulk API.
"""

import json
import logging

import requests

from logship.config.models import ElasticsearchOutput
from logship.core.models import LogRecord
from logship.infrastructure.sinks.base import BaseSink

__all__ = ["ElasticsearchSink"]

logger = logging.getLogger(__name__)


class ElasticsearchSink(BaseSink):
    """
    Posts batches to ``/_bulk`` as NDJSON.

    The index name is the ``index`` pattern formatted with the record's
    timestamp (``logship-%Y.%m.%d`` gives one index per day). Documents
    rejected individually by the cluster are logged and not retried.
    Transport errors and 5xx responses are retried; a 4xx answer or a
    body that is not JSON drops the batch.
    """

    kind = "elasticsearch"

    # 4xx answers and unreadable bodies raise other RequestException types
    retry_exceptions = (requests.ConnectionError, requests.Timeout)

    def __init__(self, declaration: ElasticsearchOutput, cancel_event, counters, session: requests.Session | None = None):
        super().__init__(declaration, cancel_event, counters)
        self.url = f"{declaration.protocol}://{declaration.host}:{declaration.port}/_bulk"
        self.index = declaration.index
        self.timeout = declaration.timeout
        self.session = session or requests.Session()

    def default_name(self) -> str:
        return f"elasticsearch:{self.declaration.host}:{self.declaration.port}"

    def index_name(self, record: LogRecord) -> str:
        return record.effective_timestamp.strftime(self.index)

    def build_body(self, records: list[LogRecord]) -> str:
        lines = []
        for record in records:
            lines.append(json.dumps({"index": {"_index": self.index_name(record)}}))
            lines.append(json.dumps(record.to_dict(), default=str))
        return "\n".join(lines) + "\n"

    def send(self, records: list[LogRecord]) -> None:
        response = self.session.post(
            self.url,
            data=self.build_body(records).encode("utf-8"),
            headers={"Content-Type": "application/x-ndjson"},
            timeout=self.timeout,
        )

        if response.status_code >= 500:
            raise requests.ConnectionError(
                f"Elasticsearch answered {response.status_code}", response=response
            )
        response.raise_for_status()

        result = response.json()
        if result.get("errors"):
            failed = [
                item for item in result.get("items", [])
                if next(iter(item.values()), {}).get("error")
            ]
            logger.warning(
                "Sink %s: Elasticsearch rejected %d of %d documents",
                self.name, len(failed), len(records),
            )

    def close(self) -> None:
        self.session.close()
