"""
Best‑effort Kafka notifications for movie changes.

After a successful create, update or delete the service calls
``MovieEventNotifier.notify``, which schedules ``publish`` on the
running event loop and returns at once.  ``publish`` opens a producer,
sends one message to ``movie-<action>`` keyed by the movie id, appends
the event to a local log file and closes the producer again.

Delivery is at most once.  A missing broker, a failed send or an
unwritable log file is logged and otherwise ignored; nothing is
retried after the connection attempts and nothing is persisted for
later.  The HTTP response has already been decided when any of this
runs.
"""

import asyncio
import json
import logging
from pathlib import Path
from typing import Any, Callable, Dict, Optional, Set

from aiokafka import AIOKafkaProducer

from ..core.config import Settings
from ..schemas.movie import MovieRead

logger = logging.getLogger(__name__)

ACTIONS = ("created", "updated", "deleted")
TOPIC_PREFIX = "movie"

# Upper bound for a single send; keeps shutdown from hanging on a dead broker.
REQUEST_TIMEOUT_MS = 5000

ProducerFactory = Callable[[], Any]


def topic_for(action: str) -> str:
    if action not in ACTIONS:
        raise ValueError(f"Unknown movie action: {action}")
    return f"{TOPIC_PREFIX}-{action}"


def build_event(movie: MovieRead, action: str) -> Dict[str, Any]:
    """Return ``{topic, messages: [{key, value}]}`` for a movie change."""
    return {
        "topic": topic_for(action),
        "messages": [
            {"key": str(movie.id), "value": json.dumps(movie.model_dump())},
        ],
    }


def format_event_table(event: Dict[str, Any]) -> str:
    """Render an event as a small text table for the log."""
    rows = [("topic", "key", "value")]
    rows += [(event["topic"], m["key"], m["value"]) for m in event["messages"]]
    widths = [max(len(str(row[i])) for row in rows) for i in range(3)]
    lines = [" | ".join(str(cell).ljust(widths[i]) for i, cell in enumerate(row)) for row in rows]
    lines.insert(1, "-+-".join("-" * w for w in widths))
    return "\n".join(lines)


class MovieEventNotifier:
    """Publishes movie change events without blocking the caller."""

    def __init__(self, settings: Settings, producer_factory: Optional[ProducerFactory] = None) -> None:
        self.settings = settings
        self.enabled = settings.kafka_enabled
        self._producer_factory = producer_factory or self._default_producer
        self._pending: Set[asyncio.Task] = set()

    def _default_producer(self) -> AIOKafkaProducer:
        return AIOKafkaProducer(
            bootstrap_servers=self.settings.kafka_broker_list,
            client_id=self.settings.kafka_client_id,
            retry_backoff_ms=self.settings.kafka_initial_retry_ms,
            request_timeout_ms=REQUEST_TIMEOUT_MS,
        )

    async def _connect(self) -> Any:
        """Start a producer, retrying with capped exponential backoff."""
        attempts = self.settings.kafka_retries + 1
        delay = self.settings.kafka_initial_retry_ms / 1000
        max_delay = self.settings.kafka_max_retry_ms / 1000
        for attempt in range(1, attempts + 1):
            producer = self._producer_factory()
            try:
                await producer.start()
                return producer
            except Exception as exc:
                await self._disconnect(producer)
                if attempt == attempts:
                    raise
                logger.debug("Kafka connect attempt %s/%s failed: %s", attempt, attempts, exc)
                await asyncio.sleep(delay)
                delay = min(delay * 2, max_delay)

    @staticmethod
    async def _disconnect(producer: Any) -> None:
        try:
            await producer.stop()
        except Exception as exc:
            logger.debug("Kafka producer did not stop cleanly: %s", exc)

    def _append_to_log(self, event: Dict[str, Any]) -> None:
        try:
            with Path(self.settings.event_log_path).open("a", encoding="utf-8") as fh:
                fh.write(json.dumps(event) + "\n")
        except OSError as exc:
            logger.warning("Could not append event to %s: %s", self.settings.event_log_path, exc)

    async def publish(self, movie: MovieRead, action: str) -> Optional[Dict[str, Any]]:
        """Send one event; return it, or ``None`` if publication failed."""
        event = build_event(movie, action)
        producer = None
        try:
            producer = await self._connect()
            for message in event["messages"]:
                await producer.send_and_wait(
                    event["topic"],
                    key=message["key"].encode("utf-8"),
                    value=message["value"].encode("utf-8"),
                )
        except Exception as exc:
            logger.warning("Kafka broker unavailable, skipping event publication: %s", exc)
            return None
        finally:
            if producer is not None:
                await self._disconnect(producer)
        logger.info("Published movie event\n%s", format_event_table(event))
        await asyncio.to_thread(self._append_to_log, event)
        return event

    def notify(self, movie: MovieRead, action: str) -> Optional[asyncio.Task]:
        """Schedule ``publish`` in the background and return immediately."""
        topic_for(action)
        if not self.enabled:
            return None
        task = asyncio.get_running_loop().create_task(self.publish(movie, action))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    async def drain(self) -> None:
        """Wait for every scheduled publication to finish."""
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)
