import logging
from concurrent.futures import Future, ThreadPoolExecutor
from threading import BoundedSemaphore, Lock
from typing import Mapping, Optional

from azure.eventhub import EventData, EventHubProducerClient

from pixel_collector import config
from pixel_collector.config import SinkSettings, load_sink_settings


logger = logging.getLogger(__name__)

_sink_lock = Lock()
_sink: Optional["EventHubSink"] = None


class SinkOverflowError(RuntimeError):
    pass


class EventHubSink:
    """Fire-and-forget publisher onto a single Event Hub, dropping events past ``max_pending``."""

    def __init__(self, settings: SinkSettings, max_pending: Optional[int] = None) -> None:
        self.settings = settings
        self.max_pending = max_pending or config.max_pending_sends()
        self._client = EventHubProducerClient.from_connection_string(
            settings.connection_string,
            eventhub_name=settings.eventhub_name,
        )
        self._executor = ThreadPoolExecutor(
            max_workers=1, thread_name_prefix="eventhub-publish"
        )
        self._slots = BoundedSemaphore(self.max_pending)

    def publish(self, payload: str, properties: Optional[Mapping[str, str]] = None) -> Future:
        if not self._slots.acquire(blocking=False):
            logger.warning("Dropping event, %d sends already pending", self.max_pending)
            future: Future = Future()
            future.set_exception(SinkOverflowError(f"{self.max_pending} sends pending"))
            return future
        try:
            future = self._executor.submit(self._send, payload, dict(properties or {}))
        except Exception:
            self._slots.release()
            raise
        return future

    def _send(self, payload: str, properties: dict) -> None:
        try:
            event = EventData(payload)
            if properties:
                event.properties = properties
            batch = self._client.create_batch()
            batch.add(event)
            self._client.send_batch(batch)
        finally:
            self._slots.release()

    def close(self) -> None:
        self._executor.shutdown(wait=True)
        try:
            self._client.close()
        except Exception:
            logger.exception("Failed to close Event Hub producer for %s", self.settings.eventhub_name)


def get_sink() -> EventHubSink:
    global _sink
    sink = _sink
    if sink is not None:
        return sink
    with _sink_lock:
        if _sink is None:
            settings = load_sink_settings()
            _sink = EventHubSink(settings)
            logger.info(
                "Event Hub sink ready for %s/%s",
                settings.fully_qualified_namespace,
                settings.eventhub_name,
            )
        return _sink


def close_sink() -> None:
    global _sink
    with _sink_lock:
        sink = _sink
        _sink = None
    if sink is not None:
        sink.close()
